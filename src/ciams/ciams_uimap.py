"""
Provides the `KeywordMapper` class for managing user-defined keyword aliases
in the CIAMS language.

This module lets a project spell reserved words its own way (for example a
localized `si` for `if`) without touching the default keyword table, which stays
read-only and shared.

Classes:
    - KeywordMapper: Maps alias spellings to reserved keyword kinds.
    - MappingError: Raised when configuration or alias conflicts occur.

Features:
    - Validates that targets are reserved keyword kinds (`KEYWORD_KINDS`)
    - Validates that aliases lex as a single word
    - Detects and reports alias conflicts, including clashes with default keywords
    - Loads mappings from JSON configuration files (comma-separated alias keys)
    - Produces a merged, read-only keyword table for `ciams_lexer.Lexer`

Usage:
    >>> mapper = KeywordMapper()
    >>> mapper.configure({"si": "IF"})
    >>> table = mapper.keyword_table()
    >>> table["si"].name
    'IF'
"""

import json
import logging
from types import MappingProxyType
from typing import Any

from ciams.ciams_constants import KEYWORD_KINDS, KEYWORDS, TokenKind

logger = logging.getLogger(__name__)


class MappingError(Exception):
    """Raised when a keyword alias configuration is invalid.

    Attributes:
        conflicts (list[str]): Descriptions of each conflicting alias.

    Example:
        raise MappingError("Alias collision(s) detected", ["'si' -> IF vs WHILE"])
    """

    def __init__(self, message: str, conflicts: list[str] | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []


def _is_word(alias: str) -> bool:
    return (
        bool(alias)
        and alias.isascii()
        and alias[0].isalpha()
        and alias.isalnum()
    )


class KeywordMapper:
    """Manages user-defined alias-to-keyword mappings.

    Attributes:
        alias_map (dict[str, TokenKind]): Maps alias spellings to keyword kinds.
    """

    def __init__(self) -> None:
        self.alias_map: dict[str, TokenKind] = {}

    def _extract_aliases(self, entry: Any) -> list[str]:
        """Flattens an alias group (str, list, tuple, set or dict keys) into strings."""
        if entry is None:
            return []
        if isinstance(entry, str):
            return [entry]
        if isinstance(entry, (list, tuple, set)):
            aliases: list[str] = []
            for item in entry:
                aliases.extend(self._extract_aliases(item))
            return aliases
        if isinstance(entry, dict):
            return [str(k) for k in entry.keys()]
        return []

    def _resolve_kind(self, name: Any) -> TokenKind:
        if isinstance(name, TokenKind):
            kind = name
        elif isinstance(name, str) and name in TokenKind.__members__:
            kind = TokenKind[name]
        else:
            raise MappingError(f"Unknown token kind: {name}")
        if kind not in KEYWORD_KINDS:
            raise MappingError(f"Token kind {kind.name} is not a reserved keyword")
        return kind

    def configure(self, cfg: dict[Any, Any]) -> None:
        """
        Applies alias groups mapped to keyword kinds.

        Args:
            cfg: Maps an alias or group of aliases (str, list, tuple, set) to a
                keyword kind, given as a `TokenKind` or its member name.

        Raises:
            MappingError: If a kind is unknown or not a keyword, an alias is not a
                single word, or an alias would map to two different kinds.
        """
        if not isinstance(cfg, dict):
            raise MappingError("Configuration must be a dict")

        new_map: dict[str, TokenKind] = {}
        conflicts: list[str] = []

        for alias_group, name in cfg.items():
            kind = self._resolve_kind(name)
            for alias in self._extract_aliases(alias_group):
                if not _is_word(alias):
                    raise MappingError(f"Alias {alias!r} is not a single word")
                previous = (
                    new_map.get(alias) or self.alias_map.get(alias) or KEYWORDS.get(alias)
                )
                if previous is not None and previous != kind:
                    conflicts.append(
                        f"'{alias}' -> conflict between {previous.name} and {kind.name}"
                    )
                else:
                    new_map[alias] = kind

        if conflicts:
            raise MappingError("Alias collision(s) detected", conflicts)

        self.alias_map.update(new_map)
        logger.debug("Configured %d keyword aliases", len(new_map))

    def load_from_json(self, path: str) -> None:
        """
        Loads alias mappings from a JSON file and applies them via `configure`.

        Each key is a comma-separated list of aliases, each value a keyword kind:

            {
                "si,wenn": "IF",
                "sinon": "ELSE"
            }

        Raises:
            MappingError: If the file cannot be read or the configuration is invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MappingError(f"Failed to load alias file: {e}") from e

        if not isinstance(raw_cfg, dict):
            raise MappingError("Alias file must contain a JSON object")

        parsed_cfg: dict[tuple[str, ...], Any] = {}
        for key, value in raw_cfg.items():
            aliases = tuple(alias.strip() for alias in key.split(","))
            parsed_cfg[aliases] = value

        self.configure(parsed_cfg)

    def keyword_table(self) -> MappingProxyType:
        """Returns the default keywords merged with the configured aliases."""
        merged: dict[str, TokenKind] = dict(KEYWORDS)
        merged.update(self.alias_map)
        return MappingProxyType(merged)

    def report(self) -> str:
        """Formats the configured aliases, one `alias -> KIND` per line."""
        return "\n".join(
            f"{alias:>12} -> {kind.name}" for alias, kind in sorted(self.alias_map.items())
        )
