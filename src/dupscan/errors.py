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
Exceptions raised by dupscan.

Only the single-flight violation reaches callers of the analyzer; every
other failure is absorbed and shows up as a missing block, match or
cluster.
"""


class DupscanError(Exception):
    """Base class for dupscan errors."""


class AnalysisInProgressError(DupscanError, RuntimeError):
    """A project analysis was requested while another one is running."""

    def __init__(self, message: str = "Analysis already in progress"):
        super().__init__(message)


class JudgeUnavailableError(DupscanError):
    """The semantic judge cannot run (no model file or no runtime)."""
