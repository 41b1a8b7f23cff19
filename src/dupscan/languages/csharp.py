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
C# block patterns.
"""

from .base import BlockExtractor, CONTROL_KEYWORDS, compile_patterns


_MODIFIERS = (
    r"(?:(?:public|private|protected|internal|static|virtual|override|abstract|"
    r"async|sealed|partial|readonly|unsafe|extern|new)\s+)*"
)


class CSharpExtractor(BlockExtractor):
    function_patterns = compile_patterns(
        _MODIFIERS + r"(?!" + CONTROL_KEYWORDS + r")[\w<>\[\].,?]+\s+\w+\s*(?:<[^>]*>)?\s*\(",
    )

    class_patterns = compile_patterns(
        _MODIFIERS + r"(?:class|struct|interface|record|enum)\s+\w+",
    )
