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
Base block extractor.

Subclasses only supply pattern tables. Start lines are found with the
patterns, end lines with a brace scanner that knows about quoted strings.
"""

import re
from typing import List, Pattern, Sequence, Tuple

from ..models import CodeBlock
from ..hashing import calculate_hash, tokenize


# Keywords that open a braced block but never a function
CONTROL_KEYWORDS = r"(?:if|else|for|foreach|while|do|switch|catch|try|with|return|new|throw|using|lock|sizeof)\b"


def find_block_end(lines: Sequence[str], start_line: int) -> int:
    """
    Find the last line of a braced block.

    Walks characters from start_line, counting braces outside of
    single- or double-quoted strings. A quote only closes its string when
    the previous character is not a backslash.

    Args:
        lines: File content split into lines
        start_line: 0-indexed line where the block starts

    Returns:
        0-indexed end line: the first line after start_line where the
        depth is back to zero, or the last line of the file
    """
    brace_count = 0
    in_string = False
    string_char = ""

    for i in range(start_line, len(lines)):
        line = lines[i]

        for j, char in enumerate(line):
            if not in_string and char in ('"', "'"):
                in_string = True
                string_char = char
            elif in_string and char == string_char and (j == 0 or line[j - 1] != "\\"):
                in_string = False
                string_char = ""
            elif not in_string:
                if char == "{":
                    brace_count += 1
                elif char == "}":
                    brace_count -= 1

        if brace_count == 0 and i > start_line:
            return i

    return len(lines) - 1


class BlockExtractor:
    """Pattern-driven extractor for one language family."""

    # Matched against the stripped line
    function_patterns: Tuple[Pattern[str], ...] = ()
    class_patterns: Tuple[Pattern[str], ...] = ()

    def is_function_start(self, line: str) -> bool:
        return any(p.match(line) for p in self.function_patterns)

    def is_class_start(self, line: str) -> bool:
        return any(p.match(line) for p in self.class_patterns)

    def extract(self, content: str, file_path: str = "") -> List[CodeBlock]:
        """
        Extract function blocks, then class blocks, from file content.

        Args:
            content: Full file content
            file_path: Path attached to every block

        Returns:
            List of CodeBlock objects with hash and tokens filled in
        """
        lines = content.split("\n")
        spans = self._find_spans(lines, self.is_function_start)
        spans += self._find_spans(lines, self.is_class_start)

        blocks = []
        for start, end in spans:
            code = "\n".join(lines[start:end + 1])
            blocks.append(CodeBlock(
                file_path=file_path,
                start_line=start + 1,  # 1-indexed
                end_line=end + 1,
                code=code,
                hash=calculate_hash(code),
                tokens=tuple(tokenize(code)),
            ))
        return blocks

    def _find_spans(self, lines: List[str], is_start) -> List[Tuple[int, int]]:
        spans = []
        for i, line in enumerate(lines):
            if is_start(line.strip()):
                end = find_block_end(lines, i)
                if end > i:
                    spans.append((i, end))
        return spans


def compile_patterns(*patterns: str) -> Tuple[Pattern[str], ...]:
    """Compile a pattern table."""
    return tuple(re.compile(p) for p in patterns)
