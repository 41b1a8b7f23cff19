# dupscan - Find and rank duplicate code across a project
# Copyright (C) 2025  Jonathan Louis
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Report generator - formats similarity reports for output.

Supports text, markdown, and json output formats.
"""

from datetime import datetime
from enum import Enum
from typing import List, Sequence
import json

from .models import DuplicateCluster, SimilarityMatch, SimilarityReport


class OutputFormat(Enum):
    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"


# Code lines shown per block
MAX_CODE_LINES = 15


def report_similarity(
    report: SimilarityReport,
    output_format: OutputFormat = OutputFormat.TEXT,
) -> str:
    """
    Render a project analysis report.

    Args:
        report: Result of CodeSimilarityAnalyzer.analyze_project
        output_format: Desired output format

    Returns:
        Formatted report string
    """
    if output_format == OutputFormat.TEXT:
        return _format_text(report)
    elif output_format == OutputFormat.MARKDOWN:
        return _format_markdown(report)
    elif output_format == OutputFormat.JSON:
        return json.dumps(report.to_dict(), indent=2)
    else:
        raise ValueError(f"Unknown format: {output_format}")


def report_matches(
    matches: Sequence[SimilarityMatch],
    output_format: OutputFormat = OutputFormat.TEXT,
) -> str:
    """Render the result of a two-file comparison."""
    if output_format == OutputFormat.JSON:
        return json.dumps({
            "meta": {
                "match_count": len(matches),
                "timestamp": datetime.now().isoformat(),
            },
            "matches": [m.to_dict() for m in matches],
        }, indent=2)

    markdown = output_format == OutputFormat.MARKDOWN
    lines = ["# File Comparison" if markdown else f"🔍 Found {len(matches)} similar block pairs"]
    if markdown:
        lines.append("")
        lines.append(f"**Matches:** {len(matches)}")
    lines.append("")

    for match in matches:
        lines.extend(_match_lines(match, markdown))

    return "\n".join(lines)


def _format_text(report: SimilarityReport) -> str:
    """Plain text format with unicode decorations."""
    stats = report.statistics
    lines = []

    lines.append(f"🔍 Found {report.total_matches} matches in {len(report.duplicate_clusters)} clusters")
    lines.append(f"   Project: {report.project_path} | Files: {report.total_files}")
    lines.append(
        f"   Exact: {stats.exact_duplicates} | Structural: {stats.structural_similar} | "
        f"Semantic: {stats.semantic_similar} | Functional: {stats.functional_similar}"
    )
    lines.append(f"   Potential savings: ~{stats.potential_savings} lines")
    lines.append("")

    for number, cluster in enumerate(report.duplicate_clusters, 1):
        lines.append("━" * 70)
        lines.append(
            f"Cluster #{number}: Similarity {cluster.average_similarity:.0%} "
            f"| Priority: {cluster.refactoring_priority.value}"
        )
        lines.append(
            f"Files: {cluster.file_count} | Savings: ~{cluster.estimated_savings.lines_of_code} lines"
        )
        lines.append("━" * 70)
        lines.append("")

        lines.append("📍 Files:")
        for path in cluster.files:
            lines.append(f"   • {path}")
        lines.append("")

        lines.append(f"📝 Pattern: {cluster.common_pattern}")
        lines.append("")

        seed = cluster.code_blocks[0]
        lines.append(f"📝 Representative Code: {seed.preview()}")
        lines.append(f"   {seed.location} ({seed.line_count} lines)")
        lines.append("")
        for code_line in _head(seed.code):
            lines.append(f"   │ {code_line}")
        lines.append("")

    return "\n".join(lines)


def _format_markdown(report: SimilarityReport) -> str:
    """Markdown format for documentation."""
    stats = report.statistics
    lines = []

    lines.append("# Code Similarity Report")
    lines.append("")
    lines.append(f"**Path:** `{report.project_path}`  ")
    lines.append(f"**Files:** {report.total_files}  ")
    lines.append(f"**Matches:** {report.total_matches}  ")
    lines.append(f"**Clusters:** {len(report.duplicate_clusters)}  ")
    lines.append(f"**Potential Savings:** ~{stats.potential_savings} lines")
    lines.append("")

    lines.append("| Exact | Structural | Semantic | Functional |")
    lines.append("|-------|------------|----------|------------|")
    lines.append(
        f"| {stats.exact_duplicates} | {stats.structural_similar} "
        f"| {stats.semantic_similar} | {stats.functional_similar} |"
    )
    lines.append("")
    lines.append("---")
    lines.append("")

    for number, cluster in enumerate(report.duplicate_clusters, 1):
        lines.extend(_cluster_markdown(number, cluster))

    return "\n".join(lines)


def _cluster_markdown(number: int, cluster: DuplicateCluster) -> List[str]:
    lines = []
    lines.append(f"## Cluster {number}: {cluster.average_similarity:.0%} Similarity")
    lines.append("")
    lines.append(
        f"**Priority:** `{cluster.refactoring_priority.value}` | "
        f"**Files:** {cluster.file_count} | "
        f"**Savings:** ~{cluster.estimated_savings.lines_of_code} lines"
    )
    lines.append("")
    lines.append(f"**Pattern:** {cluster.common_pattern}")
    lines.append("")

    lines.append("### Regions")
    lines.append("")
    lines.append("| File | Lines |")
    lines.append("|------|-------|")
    for block in cluster.code_blocks:
        lines.append(f"| `{block.file_path}` | {block.start_line}-{block.end_line} |")
    lines.append("")

    seed = cluster.code_blocks[0]
    lines.append(f"From `{seed.location}`:")
    lines.append("")
    lines.append("```")
    lines.extend(_head(seed.code))
    lines.append("```")
    lines.append("")
    lines.append("---")
    lines.append("")
    return lines


def _match_lines(match: SimilarityMatch, markdown: bool) -> List[str]:
    source = f"{match.source_file}:{match.source_lines[0]}-{match.source_lines[1]}"
    target = f"{match.target_file}:{match.target_lines[0]}-{match.target_lines[1]}"
    header = f"{match.match_type.value} {match.similarity_score:.0%} (confidence {match.confidence:.0%})"

    if markdown:
        lines = [f"- **{header}**: `{source}` ↔ `{target}`"]
        lines.extend(f"  - {s}" for s in match.suggestions)
    else:
        lines = [f"• {header}", f"   {source}", f"   {target}"]
        lines.extend(f"   💡 {s}" for s in match.suggestions)
    lines.append("")
    return lines


def _head(code: str) -> List[str]:
    code_lines = code.split("\n")
    head = code_lines[:MAX_CODE_LINES]
    if len(code_lines) > MAX_CODE_LINES:
        head.append("...")
    return head
