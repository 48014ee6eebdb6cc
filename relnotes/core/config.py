"""
Lint and edit configuration.

Configuration lives in a ``[tool.relnotes]`` table, either in the project's
``pyproject.toml`` or in a dedicated TOML file passed explicitly:

    [tool.relnotes]
    known_kinds = ["Added", "Changed", "Fixed", "Removed"]
    components = ["fee-seller", "explorer", "tok_cli", "zk"]
    disabled_rules = ["RN009"]
    strict = false
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from relnotes.core.input_interface import ChangelogError
from relnotes.core.logging_config import get_logger
from relnotes.core.model import DEFAULT_CHANGE_KINDS

logger = get_logger("config")

PYPROJECT: Final[str] = "pyproject.toml"
_LIST_KEYS: Final[tuple[str, ...]] = ("known_kinds", "components", "disabled_rules")
_KNOWN_KEYS: Final[frozenset[str]] = frozenset((*_LIST_KEYS, "strict"))


class ConfigError(ChangelogError):
    """Raised when a configuration file is malformed."""


@dataclass(frozen=True)
class LintConfig:
    """
    Immutable configuration for linting and editing.

    Attributes:
        known_kinds: Accepted change kinds, in rendering order
        components: Registry of component tags; empty disables the check
        disabled_rules: Rule codes that are skipped
        strict: Treat warnings as failures
    """

    known_kinds: tuple[str, ...] = DEFAULT_CHANGE_KINDS
    components: tuple[str, ...] = ()
    disabled_rules: frozenset[str] = frozenset()
    strict: bool = False

    def __post_init__(self) -> None:
        if not self.known_kinds:
            raise ConfigError("known_kinds must not be empty")

    def is_enabled(self, code: str) -> bool:
        return code not in self.disabled_rules

    @classmethod
    def from_mapping(cls, data: dict[str, object]) -> "LintConfig":
        """Build a config from a parsed TOML table, validating types and keys."""
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise ConfigError(f"unknown configuration keys: {', '.join(unknown)}")

        lists: dict[str, tuple[str, ...]] = {}
        for key in _LIST_KEYS:
            value = data.get(key)
            if value is None:
                continue
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{key} must be a list of strings")
            lists[key] = tuple(v.strip() for v in value if v.strip())

        strict = data.get("strict", False)
        if not isinstance(strict, bool):
            raise ConfigError("strict must be a boolean")

        return cls(
            known_kinds=lists.get("known_kinds", DEFAULT_CHANGE_KINDS),
            components=lists.get("components", ()),
            disabled_rules=frozenset(lists.get("disabled_rules", ())),
            strict=strict,
        )


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: invalid TOML: {e}") from e


def _tool_table(data: dict[str, object]) -> dict[str, object] | None:
    tool = data.get("tool")
    if not isinstance(tool, dict):
        return None
    table = tool.get("relnotes")
    if table is None:
        return None
    if not isinstance(table, dict):
        raise ConfigError("[tool.relnotes] must be a table")
    return table


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> LintConfig:
    """
    Load configuration.

    Args:
        path: Explicit TOML file. ``[tool.relnotes]`` is used when present,
            otherwise the top-level table.
        cwd: Directory searched for ``pyproject.toml`` when no path is given
            (default: the current directory)

    Returns:
        LintConfig, defaults when nothing is configured

    Raises:
        ConfigError: If the file is malformed
        FileNotFoundError: If an explicit path does not exist
    """
    if path is not None:
        data = _read_toml(path)
        table = _tool_table(data)
        logger.debug("Loaded configuration from %s", path)
        return LintConfig.from_mapping(table if table is not None else data)

    candidate = (cwd or Path.cwd()) / PYPROJECT
    if not candidate.is_file():
        return LintConfig()

    table = _tool_table(_read_toml(candidate))
    if table is None:
        return LintConfig()
    logger.debug("Loaded configuration from %s", candidate)
    return LintConfig.from_mapping(table)
