"""
community_atlas/cli.py — Command-line interface for the network engine.

Drives the engine over a CSV snapshot directory (communities.csv,
members.csv, bridges.csv):

Usage:
    community-atlas detect                 # batch bridge detection, saves bridges.csv
    community-atlas analyze                # detection + stats + clusters + leaderboard
    community-atlas recommend COMMUNITY_ID # connection recommendations
    community-atlas impact COMMUNITY_ID    # impact profile of one community
    community-atlas mentorship propose MENTOR MENTEE --by USER
    community-atlas mentorship accept BRIDGE_ID
    community-atlas status                 # show snapshot files

All commands load a .env file (--env-file, or the nearest one above the
working directory) before reading COMMUNITY_ATLAS_* overrides from the
environment.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from community_atlas.config import config_from_env
from community_atlas.errors import CommunityAtlasError


# ── .env loader ───────────────────────────────────────────────────────────────

def _find_dotenv() -> Path | None:
    """Nearest .env from the working directory upwards (where data/ usually sits)."""
    cwd = Path.cwd()
    return next((d / ".env" for d in (cwd, *cwd.parents) if (d / ".env").is_file()), None)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    """KEY=VALUE, optional `export ` prefix, quoted values kept verbatim, `  # note` dropped."""
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key or key.startswith("#"):
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] in ('"', "'") and value.endswith(value[0]):
        return key, value[1:-1]
    return key, value.split(" #", 1)[0].rstrip()


def _load_dotenv(env_file: str | None = None) -> dict[str, str]:
    """
    Export COMMUNITY_ATLAS_* settings (and anything else) from a .env file.

    Variables already set in the shell win over the file. Returns only the
    variables this call set.

    Args:
        env_file: Explicit path. If None, the nearest .env found by walking up
                  from the working directory is used.
    """
    path = Path(env_file) if env_file else _find_dotenv()
    if path is None or not path.is_file():
        return {}

    loaded: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_env_line(raw_line)
        if parsed is None or parsed[0] in os.environ:
            continue
        key, value = parsed
        os.environ[key] = loaded[key] = value
    return loaded


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
    logging.basicConfig(level=numeric, format=fmt, datefmt="%H:%M:%S", stream=sys.stderr)


logger = logging.getLogger("community_atlas.cli")


def _prepare(args: argparse.Namespace):
    _load_dotenv(args.env_file)
    _setup_logging(args.log_level)
    return config_from_env()


def _data_dir(args: argparse.Namespace) -> str:
    return args.data_dir or os.environ.get("COMMUNITY_ATLAS_DATA_DIR", "data")


# ── Subcommand: detect ────────────────────────────────────────────────────────

def cmd_detect(args: argparse.Namespace) -> int:
    """Batch bridge detection over every qualifying pair; saves bridges.csv."""
    config = _prepare(args)

    from community_atlas.pipeline import load_network_from_csv, save_network_bridges

    data_dir = _data_dir(args)
    network = load_network_from_csv(data_dir, config)
    summary = network.detect_all_bridges(args.workers)
    path = save_network_bridges(network, data_dir)

    print()
    print("=" * 60)
    print("  BRIDGE DETECTION COMPLETE")
    print("=" * 60)
    print(f"  Elapsed        : {summary.elapsed_seconds:.1f}s")
    print(f"  Communities    : {summary.communities}")
    print(f"  Pairs checked  : {summary.pairs_checked}")
    print(f"  Created        : {summary.created}")
    print(f"  Updated        : {summary.updated}")
    print(f"  Failed pairs   : {summary.failed}")
    print(f"  Bridges saved  : {path}")
    print("=" * 60)
    return 0


# ── Subcommand: analyze ───────────────────────────────────────────────────────

def cmd_analyze(args: argparse.Namespace) -> int:
    """Detection (unless --no-detect) followed by every network-wide analytic."""
    config = _prepare(args)

    from community_atlas.pipeline import run_pipeline_from_csv

    t0 = time.monotonic()
    result = run_pipeline_from_csv(
        _data_dir(args),
        config=config,
        detect=not args.no_detect,
        leaderboard_limit=args.limit,
        report_path=args.report_path,
        max_workers=args.workers,
    )
    elapsed = time.monotonic() - t0

    print()
    print("=" * 60)
    print("  COMMUNITY NETWORK — ANALYSIS COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {elapsed:.1f}s")
    print(f"  Communities      : {result.communities}")
    print(f"  Active bridges   : {result.stats.total_bridges}")
    for kind, count in result.stats.bridges_by_type.items():
        print(f"    {kind:<14} : {count}")
    print(f"  Avg top strength : {result.stats.average_strength:.2f}")
    print(f"  Ecosystems       : {len(result.clusters)}")
    print()
    print("  Leaderboard:")
    for i, p in enumerate(result.leaderboard, start=1):
        print(f"  {i:>3}. {p.community_name:<30} {p.reputation.value:<12} influence {p.influence_score:.2f}")
    if result.report_path:
        print()
        print(f"  Report saved to  : {result.report_path}")
    print("=" * 60)
    return 0


# ── Subcommand: recommend ─────────────────────────────────────────────────────

def cmd_recommend(args: argparse.Namespace) -> int:
    config = _prepare(args)

    from community_atlas.pipeline import load_network_from_csv

    network = load_network_from_csv(_data_dir(args), config)
    recs = network.get_connection_recommendations(args.community_id, args.limit)

    print(f"\nRecommended connections for {args.community_id}:")
    if not recs:
        print("  (none above the score threshold)")
    for rec in recs:
        kinds = ", ".join(k.value for k in rec.potential_bridge_types) or "-"
        print(f"  {rec.target.name:<30} score {rec.score:.2f}  est. strength {rec.estimated_strength:.2f}  [{kinds}]")
        for reason in rec.reasons:
            print(f"      · {reason}")
    print()
    return 0


# ── Subcommand: impact ────────────────────────────────────────────────────────

def cmd_impact(args: argparse.Namespace) -> int:
    config = _prepare(args)

    from community_atlas.pipeline import load_network_from_csv

    network = load_network_from_csv(_data_dir(args), config)
    p = network.calculate_community_impact(args.community_id)

    print(f"\nImpact — {p.community_name} ({p.community_id})")
    print(f"  Reputation   : {p.reputation.value}")
    print(f"  Bridges      : {p.bridge_count}")
    print(f"  Network reach: {p.network_reach}")
    print(f"  Centrality   : {p.centrality_score:.2f}")
    print(f"  Influence    : {p.influence_score:.2f}")
    print()
    return 0


# ── Subcommand: mentorship ────────────────────────────────────────────────────

def cmd_mentorship_propose(args: argparse.Namespace) -> int:
    config = _prepare(args)

    from community_atlas.pipeline import load_network_from_csv, save_network_bridges

    data_dir = _data_dir(args)
    network = load_network_from_csv(data_dir, config)
    bridge = network.propose_mentorship(args.mentor_id, args.mentee_id, args.by, args.notes)
    save_network_bridges(network, data_dir)

    print(f"Mentorship proposed: {bridge.id} (strength {bridge.strength:.2f}, {bridge.status.value})")
    return 0


def cmd_mentorship_accept(args: argparse.Namespace) -> int:
    config = _prepare(args)

    from community_atlas.pipeline import load_network_from_csv, save_network_bridges

    data_dir = _data_dir(args)
    network = load_network_from_csv(data_dir, config)
    bridge = network.accept_mentorship(args.bridge_id)
    save_network_bridges(network, data_dir)

    print(f"Mentorship {bridge.id} is now {bridge.status.value}")
    return 0


# ── Subcommand: status ────────────────────────────────────────────────────────

def cmd_status(args: argparse.Namespace) -> int:
    """Show which snapshot files exist, without running anything."""
    _load_dotenv(args.env_file)
    _setup_logging("WARNING")

    from community_atlas.storage.csv_snapshot import BRIDGES_FILE, COMMUNITIES_FILE, MEMBERS_FILE

    data_dir = Path(_data_dir(args))
    print(f"\nCommunity Atlas — Status ({data_dir})")
    print("=" * 40)
    for fname in [COMMUNITIES_FILE, MEMBERS_FILE, BRIDGES_FILE]:
        fpath = data_dir / fname
        if fpath.exists():
            with open(fpath, encoding="utf-8") as fh:
                rows = max(sum(1 for _ in fh) - 1, 0)
            print(f"  ✓ {fname:<18} {rows:>6} rows")
        else:
            print(f"  ✗ {fname:<18} not found")
    print()
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="community-atlas",
        description="Community network engine — bridges, clusters, recommendations, impact.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Detect bridges and print the network summary
  community-atlas --data-dir data/ analyze --report-path reports/network.md

  # Analytics only, no detection
  community-atlas analyze --no-detect

  # Recommendations for one community
  community-atlas recommend comm-123 --limit 3
        """,
    )

    parser.add_argument(
        "--env-file",
        default=None,
        metavar="PATH",
        help="Path to .env file (default: auto-detect .env from the working directory up)",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        metavar="DIR",
        help="CSV snapshot directory (default: $COMMUNITY_ATLAS_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    # detect
    p_detect = subparsers.add_parser("detect", help="Batch bridge detection over every pair")
    p_detect.add_argument("--workers", type=int, default=None, metavar="N",
                          help="Detection threads (default: config detection_workers)")
    p_detect.set_defaults(func=cmd_detect)

    # analyze
    p_analyze = subparsers.add_parser("analyze", help="Detection + stats + clusters + leaderboard")
    p_analyze.add_argument("--no-detect", action="store_true", help="Skip bridge detection")
    p_analyze.add_argument("--workers", type=int, default=None, metavar="N")
    p_analyze.add_argument("--limit", type=int, default=None, metavar="N",
                           help="Leaderboard size (default: config default_leaderboard_limit)")
    p_analyze.add_argument("--report-path", default=None, metavar="PATH",
                           help="Write a Markdown report to PATH")
    p_analyze.set_defaults(func=cmd_analyze)

    # recommend
    p_rec = subparsers.add_parser("recommend", help="Connection recommendations for a community")
    p_rec.add_argument("community_id", metavar="COMMUNITY_ID")
    p_rec.add_argument("--limit", type=int, default=None, metavar="N")
    p_rec.set_defaults(func=cmd_recommend)

    # impact
    p_impact = subparsers.add_parser("impact", help="Impact profile of a community")
    p_impact.add_argument("community_id", metavar="COMMUNITY_ID")
    p_impact.set_defaults(func=cmd_impact)

    # mentorship
    p_mentor = subparsers.add_parser("mentorship", help="Propose or accept mentorship bridges")
    mentor_sub = p_mentor.add_subparsers(dest="mentorship_command", metavar="ACTION")
    mentor_sub.required = True

    p_propose = mentor_sub.add_parser("propose", help="Propose a PENDING mentorship")
    p_propose.add_argument("mentor_id", metavar="MENTOR_ID")
    p_propose.add_argument("mentee_id", metavar="MENTEE_ID")
    p_propose.add_argument("--by", required=True, metavar="USER_ID", help="Initiating user")
    p_propose.add_argument("--notes", default=None)
    p_propose.set_defaults(func=cmd_mentorship_propose)

    p_accept = mentor_sub.add_parser("accept", help="Accept a pending mentorship")
    p_accept.add_argument("bridge_id", metavar="BRIDGE_ID")
    p_accept.set_defaults(func=cmd_mentorship_accept)

    # status
    p_status = subparsers.add_parser("status", help="Show snapshot files without running anything")
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except CommunityAtlasError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        # Unreadable or unparseable snapshot files (missing CSV, pandas parse errors).
        logger.error("Cannot read snapshot data: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
