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
Analysis orchestrator - runs the whole duplicate-detection pipeline.

Phases and the progress reported when each one finishes:

1. extract    - blocks from every project file        (20)
2. exact      - hash-equal block pairs                (40)
3. structural - cross-file token overlap              (60)
4. semantic   - judge verdicts, batched               (80)
5. cluster    - clusters, statistics, report          (100)

One analyzer runs one project analysis at a time. Reports are kept in
memory, one per project path.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Sequence
import logging
import threading
import time

from .clusterer import cluster_matches
from .config import AnalyzerConfig
from .errors import AnalysisInProgressError
from .file_access import FileAccess
from .judge import SimilarityJudge
from .languages import detect_language, extract_blocks
from .models import (
    CodeBlock,
    DuplicateCluster,
    MatchType,
    SimilarityMatch,
    SimilarityReport,
    SimilarityStatistics,
)
from .similarity import (
    COMPARE_THRESHOLD,
    compare_blocks,
    find_exact_duplicates,
    find_semantic_similarities,
    find_structural_similarities,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# Concurrent file reads during extraction
READ_WORKERS = 8


class CodeSimilarityAnalyzer:
    """
    Finds duplicated code across a project.

    Args:
        file_access: Lists and reads project files
        judge: Semantic judge; None skips the semantic pass and uses a
            fixed description for cluster patterns
        config: Run settings (defaults when omitted)
    """

    def __init__(
        self,
        file_access: FileAccess,
        judge: Optional[SimilarityJudge] = None,
        config: Optional[AnalyzerConfig] = None,
    ):
        self.file_access = file_access
        self.judge = judge
        self.config = config or AnalyzerConfig()

        self._analysis_cache: Dict[str, SimilarityReport] = {}
        self._progress_callbacks: List[ProgressCallback] = []
        self._is_analyzing = False
        self._analysis_progress = 0
        self._state_lock = threading.Lock()

    # --- Public API ---

    @property
    def is_analyzing(self) -> bool:
        return self._is_analyzing

    @property
    def analysis_progress(self) -> int:
        return self._analysis_progress

    def analyze_project(self, project_path: str) -> SimilarityReport:
        """
        Run the full pipeline over a project.

        Unreadable files, a failing file listing and failing judge calls
        are logged and skipped; they never fail the run.

        Raises:
            AnalysisInProgressError: If another analysis is running
        """
        with self._state_lock:
            if self._is_analyzing:
                raise AnalysisInProgressError()
            self._is_analyzing = True

        try:
            self._set_progress(0)
            started_at = time.time()

            files = self._list_project_files(project_path)
            logger.info(f"Analyzing {len(files)} files in {project_path}")

            blocks = self._extract_all_blocks(files)
            self._set_progress(20)

            matches: List[SimilarityMatch] = []
            matches.extend(find_exact_duplicates(blocks))
            self._set_progress(40)

            matches.extend(find_structural_similarities(blocks))
            self._set_progress(60)

            if self.config.semantic:
                matches.extend(find_semantic_similarities(
                    blocks, self.judge, batch_size=self.config.semantic_batch_size,
                ))
            self._set_progress(80)

            clusters = cluster_matches(matches, self.judge)
            report = SimilarityReport(
                id=f"similarity-{int(started_at * 1000)}",
                project_path=project_path,
                timestamp=started_at,
                total_files=len(files),
                total_matches=len(matches),
                duplicate_clusters=clusters,
                similarity_matches=matches,
                statistics=calculate_statistics(matches, clusters),
            )
            self._set_progress(100)

            self._analysis_cache[project_path] = report
            logger.info(
                f"Found {report.total_matches} matches in {len(clusters)} clusters "
                f"({time.time() - started_at:.1f}s)"
            )
            return report
        finally:
            self._is_analyzing = False

    def compare_files(self, file1: str, file2: str) -> List[SimilarityMatch]:
        """
        Compare the blocks of two files directly.

        No clustering and no judge calls. Safe to call while an analysis
        is running.

        Returns:
            Matches scoring at least 0.7, highest score first
        """
        blocks1 = self.extract_file_blocks(file1)
        blocks2 = self.extract_file_blocks(file2)

        matches = []
        for block1 in blocks1:
            for block2 in blocks2:
                match = compare_blocks(block1, block2)
                if match.similarity_score >= COMPARE_THRESHOLD:
                    matches.append(match)

        matches.sort(key=lambda m: m.similarity_score, reverse=True)
        return matches

    def on_progress(self, callback: ProgressCallback) -> Callable[[], None]:
        """
        Register a progress observer (called with 0-100).

        Returns:
            Function that unregisters the observer
        """
        self._progress_callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._progress_callbacks:
                self._progress_callbacks.remove(callback)

        return unsubscribe

    def get_last_report(self, project_path: str) -> Optional[SimilarityReport]:
        return self._analysis_cache.get(project_path)

    def clear_cache(self) -> None:
        self._analysis_cache.clear()

    # --- Extraction ---

    def extract_file_blocks(self, file_path: str) -> List[CodeBlock]:
        """Blocks of one file; an unreadable file yields none."""
        try:
            content = self.file_access.read_text_file(file_path)
        except Exception as e:
            logger.warning(f"Failed to extract blocks from {file_path}: {e}")
            return []

        return extract_blocks(content, detect_language(file_path), file_path)

    def _extract_all_blocks(self, files: Sequence[str]) -> List[CodeBlock]:
        if not files:
            return []

        blocks: List[CodeBlock] = []
        # map() keeps file order, so block order is deterministic
        with ThreadPoolExecutor(max_workers=min(READ_WORKERS, len(files))) as executor:
            for file_blocks in executor.map(self.extract_file_blocks, files):
                blocks.extend(file_blocks)

        logger.debug(f"Extracted {len(blocks)} blocks from {len(files)} files")
        return blocks

    def _list_project_files(self, project_path: str) -> List[str]:
        try:
            return list(self.file_access.list_project_text_files(project_path))
        except Exception as e:
            logger.warning(f"Failed to list project files in {project_path}: {e}")
            return []

    # --- Progress ---

    def _set_progress(self, progress: int) -> None:
        self._analysis_progress = progress
        for callback in list(self._progress_callbacks):
            try:
                callback(progress)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")


def calculate_statistics(
    matches: Sequence[SimilarityMatch],
    clusters: Sequence[DuplicateCluster],
) -> SimilarityStatistics:
    """Counts per match type and the summed line savings of all clusters."""
    counts = {t: 0 for t in MatchType}
    for match in matches:
        counts[match.match_type] += 1

    return SimilarityStatistics(
        exact_duplicates=counts[MatchType.EXACT],
        structural_similar=counts[MatchType.STRUCTURAL],
        semantic_similar=counts[MatchType.SEMANTIC],
        functional_similar=counts[MatchType.FUNCTIONAL],
        potential_savings=sum(c.estimated_savings.lines_of_code for c in clusters),
    )
