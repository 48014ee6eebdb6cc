"""
relnotes - parse, lint and maintain component changelogs.

This package reads changelog documents grouped by release and change kind,
validates them against the house convention, and edits them in place.
"""

from typing import Final

__version__: Final[str] = "0.1.0"
__all__: list[str] = ["__version__"]
