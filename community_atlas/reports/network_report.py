"""
community_atlas/reports/network_report.py — Markdown network health report.

Renders one PipelineResult as a human-readable Markdown document:

    # Community Network Report
    ## Summary               totals, detection counters
    ## Bridges by Type
    ## Strongest Bridges
    ## Ecosystems            clusters with cohesion
    ## Leaderboard
"""

import logging
import os
from typing import TYPE_CHECKING

from community_atlas.metrics.impact import leaderboard_frame

if TYPE_CHECKING:
    from community_atlas.pipeline import PipelineResult

logger = logging.getLogger(__name__)


def _table(header: list[str], rows: list[list]) -> list[str]:
    lines = [
        "| " + " | ".join(header) + " |",
        "|" + "|".join("---" for _ in header) + "|",
    ]
    lines += ["| " + " | ".join(str(v) for v in row) + " |" for row in rows]
    return lines


def generate_network_report(result: "PipelineResult") -> str:
    """Build the Markdown report for a pipeline run and return it."""
    stats = result.stats
    lines: list[str] = [
        "# Community Network Report",
        "",
        f"**Generated:** {result.run_at.strftime('%Y-%m-%d %H:%M UTC')}",
        "",
        "## Summary",
        "",
    ]

    summary_rows = [
        ["Qualifying communities", result.communities],
        ["Active bridges", stats.total_bridges],
        ["Average strength (top bridges)", f"{stats.average_strength:.2f}"],
        ["Ecosystems", len(result.clusters)],
    ]
    if result.detection is not None:
        d = result.detection
        summary_rows += [
            ["Pairs checked", d.pairs_checked],
            ["Bridges created", d.created],
            ["Bridges updated", d.updated],
            ["Pairs failed", d.failed],
        ]
    lines += _table(["Metric", "Value"], summary_rows)

    lines += ["", "## Bridges by Type", ""]
    if stats.bridges_by_type:
        lines += _table(
            ["Type", "Count"],
            [[kind, count] for kind, count in stats.bridges_by_type.items()],
        )
    else:
        lines.append("_No active bridges._")

    lines += ["", "## Strongest Bridges", ""]
    if stats.strongest_bridges:
        lines += _table(
            ["Source", "Target", "Type", "Strength"],
            [
                [b.source_id, b.target_id, b.kind.value, f"{b.strength:.2f}"]
                for b in stats.strongest_bridges
            ],
        )
    else:
        lines.append("_No active bridges._")

    lines += ["", "## Ecosystems", ""]
    if result.clusters:
        lines += _table(
            ["Cluster", "Communities", "Members", "Dominant type", "Cohesion"],
            [
                [c.id, len(c.communities), c.total_members, c.dominant_pack_type, f"{c.cohesion_score:.2f}"]
                for c in result.clusters
            ],
        )
    else:
        lines.append("_No ecosystems of two or more communities yet._")

    lines += ["", "## Leaderboard", ""]
    df = leaderboard_frame(result.leaderboard)
    if len(df) > 0:
        lines += _table(list(df.columns), df.values.tolist())
    else:
        lines.append("_No qualifying communities._")

    lines.append("")
    return "\n".join(lines)


def export_report_markdown(result: "PipelineResult", output_path: str) -> str:
    """
    Write the Markdown report to output_path (parent directories created).

    Returns:
        The Markdown document as a string.
    """
    markdown = generate_network_report(result)
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fh:
        fh.write(markdown)
    logger.info("Network report written to %s (%d chars).", output_path, len(markdown))
    return markdown
