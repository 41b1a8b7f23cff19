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
JavaScript/TypeScript block patterns.

Covers function declarations, arrow functions bound to a name,
class methods and classes.
"""

from .base import BlockExtractor, CONTROL_KEYWORDS, compile_patterns


class JavaScriptExtractor(BlockExtractor):
    """Functions, arrow functions, methods and classes."""

    function_patterns = compile_patterns(
        r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*\w+",
        r"^(?:export\s+)?(?:const|let|var)\s+\w+\s*(?::[^=]+)?=.*=>",
        # Methods: `name(args) {`, with optional modifiers and return type
        r"^(?:(?:public|private|protected|static|async|readonly|override|get|set)\s+)*"
        r"(?!" + CONTROL_KEYWORDS + r")\w+\s*\([^)]*\)\s*(?::\s*[^{]+)?\{",
    )

    class_patterns = compile_patterns(
        r"^(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+\w+",
    )
