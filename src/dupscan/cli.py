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
CLI entry point for dupscan.

Usage:
    dupscan <path> [options]
    dupscan --compare FILE1 FILE2
    dupscan --download-model
    dupscan --model-status
    dupscan --help
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .analyzer import CodeSimilarityAnalyzer
from .config import AnalyzerConfig, load_config
from .file_access import LocalFileAccess
from .judge import LlamaJudge
from .model_manager import download_model, get_model_path, print_model_status
from .reporter import OutputFormat, report_matches, report_similarity


# Extension to output format mapping for -o FILE.EXT
EXTENSION_FORMAT_MAP = {
    '.md': 'markdown',
    '.json': 'json',
    '.txt': 'text',
}

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"

PHASE_NAMES = {
    0: "Listing files",
    20: "Extracted blocks",
    40: "Exact duplicates",
    60: "Structural matches",
    80: "Semantic matches",
    100: "Clustered",
}


def merge_config_with_cli(config: dict, cli_value, config_key: str, default_value):
    """
    Merge config file value with CLI value.

    If CLI value differs from default, use CLI (user explicitly set it).
    Otherwise, use config value if present, else use default.
    """
    if cli_value != default_value:
        return cli_value
    return config.get(config_key, default_value)


def print_progress(percent: int, width: int = 30):
    """Print a progress bar for an analysis phase."""
    filled = int(width * percent / 100)
    bar = "=" * filled + ">" + " " * (width - filled - 1) if filled < width else "=" * width
    message = PHASE_NAMES.get(percent, "")
    # \r overwrites the line, \033[K clears to end of line
    click.echo(f"\r   [{bar}] {percent:3d}% {message}\033[K", nl=False)
    if percent >= 100:
        click.echo()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def _resolve_format(output: Optional[str], fmt: str) -> OutputFormat:
    if output:
        ext = Path(output).suffix.lower()
        if ext not in EXTENSION_FORMAT_MAP:
            valid_exts = ', '.join(EXTENSION_FORMAT_MAP.keys())
            raise click.UsageError(f"Invalid output extension '{ext}'. Valid: {valid_exts}")
        return OutputFormat(EXTENSION_FORMAT_MAP[ext])
    return OutputFormat(fmt)


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        Path(output).write_text(text)
        click.echo(f"   ✅ Report written to: {output}")
    else:
        click.echo(text)


def _build_judge(settings: AnalyzerConfig) -> Optional[LlamaJudge]:
    """Judge for the semantic pass, or None when no model is around."""
    if not settings.semantic:
        return None

    if settings.llm_model:
        return LlamaJudge(model_path=Path(settings.llm_model))

    if get_model_path("judge") is None:
        click.echo("⚠️  No judge model found - semantic pass skipped", err=True)
        click.echo("   💡 Download with: dupscan --download-model", err=True)
        return None

    return LlamaJudge()


@click.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, dir_okay=True), required=False)
@click.option(
    "-o", "--output",
    type=str,
    default=None,
    help="Write the report to a file (report.md, report.json, report.txt)"
)
@click.option(
    "--format", "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default="text",
    help="Output format when printing to the terminal (default: text)"
)
@click.option(
    "--compare",
    type=click.Path(exists=True, dir_okay=False),
    nargs=2,
    default=None,
    help="Compare two files directly instead of analyzing a project"
)
@click.option(
    "-e", "--exclude",
    multiple=True,
    help="Glob patterns to exclude (repeatable)"
)
@click.option(
    "-f", "--focus",
    multiple=True,
    help="Only analyze matching paths (repeatable)"
)
@click.option(
    "--semantic/--no-semantic",
    default=True,
    help="Ask the judge model about non-identical blocks (default: on)"
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=10,
    help="Blocks per semantic batch, also the max concurrent judge calls (default: 10)"
)
@click.option(
    "--llm-model",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to judge GGUF model (auto-detected)"
)
@click.option(
    "--download-model", "download_model_flag",
    is_flag=True,
    help="Download the judge model and exit"
)
@click.option(
    "--model-status",
    is_flag=True,
    help="Show model status and exit"
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Debug logging"
)
@click.option(
    "-q", "--quiet",
    is_flag=True,
    help="No progress bar"
)
@click.version_option(version=__version__)
def main(
    path: Optional[str],
    output: Optional[str],
    fmt: str,
    compare: Optional[Tuple[str, str]],
    exclude: tuple,
    focus: tuple,
    semantic: bool,
    batch_size: int,
    llm_model: Optional[str],
    download_model_flag: bool,
    model_status: bool,
    verbose: bool,
    quiet: bool,
):
    """
    Find duplicated and similar code across a project.

    PATH is the root directory to analyze.

    Examples:

      # Analyze a project and print a text report
      dupscan ./src

      # Skip the model, write markdown
      dupscan ./src --no-semantic -o report.md

      # Compare two files
      dupscan --compare a.ts b.ts
    """
    setup_logging(verbose)

    if model_status:
        print_model_status()
        sys.exit(0)

    if download_model_flag:
        click.echo("📦 Downloading judge model for dupscan...")
        if download_model("judge", verbose=True) is None:
            click.echo("\n❌ Download failed", err=True)
            sys.exit(1)
        sys.exit(0)

    try:
        output_format = _resolve_format(output, fmt)
    except click.UsageError as e:
        click.echo(f"❌ {e.message}", err=True)
        sys.exit(1)

    if compare:
        analyzer = CodeSimilarityAnalyzer(LocalFileAccess())
        matches = analyzer.compare_files(*compare)
        _emit(report_matches(matches, output_format), output)
        sys.exit(0)

    if path is None:
        click.echo("❌ Error: PATH is required for analysis.", err=True)
        click.echo("   Use --help for usage information.", err=True)
        sys.exit(1)

    root_path = Path(path).resolve()
    config = load_config(root_path)

    try:
        settings = AnalyzerConfig.from_dict(config)
    except (TypeError, ValueError) as e:
        click.echo(f"❌ Invalid config: {e}", err=True)
        sys.exit(1)

    # Explicit CLI args override the config file
    settings.semantic = merge_config_with_cli(config, semantic, "semantic", True)
    settings.semantic_batch_size = merge_config_with_cli(config, batch_size, "semantic_batch_size", 10)
    if exclude:
        settings.exclude = list(exclude)
    if focus:
        settings.focus = list(focus)
    if llm_model:
        settings.llm_model = llm_model

    file_access = LocalFileAccess(
        exclude_patterns=settings.exclude,
        focus_patterns=settings.focus,
        max_file_size=settings.max_file_size,
    )
    analyzer = CodeSimilarityAnalyzer(file_access, judge=_build_judge(settings), config=settings)

    if not quiet:
        click.echo(f"🔍 Analyzing: {root_path}")
        analyzer.on_progress(print_progress)

    report = analyzer.analyze_project(str(root_path))

    if not report.similarity_matches:
        click.echo("✨ No duplicated code found.")

    _emit(report_similarity(report, output_format), output)


# Entry point alias for pyproject.toml
cli = main


if __name__ == "__main__":
    main()
