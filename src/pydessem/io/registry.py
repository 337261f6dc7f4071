"""
Filename-based parser dispatch.

A :class:`ParserRegistry` maps normalised DESSEM file names (upper-case
base name, e.g. ``HIDR.DAT``) to reader callables. It is immutable once
built: construct one with :func:`default_registry` or
:meth:`ParserRegistry.with_parser` and pass it to :func:`parse_file`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydessem.io.hidr import read_hidr

Parser = Callable[[Path], Any]


def normalize_name(filename: Path | str) -> str:
    """Return the upper-case base name of *filename*."""
    return Path(filename).name.upper()


class ParserRegistry(Mapping[str, Parser]):
    """Read-only map of normalised file name to parser."""

    def __init__(self, parsers: Mapping[str, Parser] | None = None) -> None:
        normalized = {normalize_name(k): v for k, v in (parsers or {}).items()}
        self._parsers: Mapping[str, Parser] = MappingProxyType(normalized)

    def __getitem__(self, filename: str) -> Parser:
        return self._parsers[normalize_name(filename)]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._parsers))

    def __len__(self) -> int:
        return len(self._parsers)

    def get_parser(self, filename: Path | str) -> Parser | None:
        """Return the parser for *filename*, or None if none is registered."""
        return self._parsers.get(normalize_name(filename))

    def with_parser(self, filename: str, parser: Parser) -> ParserRegistry:
        """Return a new registry with *parser* added (or replaced)."""
        return ParserRegistry({**self._parsers, filename: parser})

    def known_files(self) -> list[str]:
        """List file names with a registered parser."""
        return sorted(self._parsers)

    def __repr__(self) -> str:
        return f"ParserRegistry({self.known_files()})"


def default_registry() -> ParserRegistry:
    """Build the registry of parsers shipped with pydessem."""
    return ParserRegistry({"HIDR.DAT": read_hidr})


def parse_file(filepath: Path | str, registry: ParserRegistry) -> Any:
    """
    Parse *filepath* with the parser registered for its file name.

    Raises:
        KeyError: If no parser is registered for the file name
    """
    path = Path(filepath)
    parser = registry.get_parser(path)
    if parser is None:
        raise KeyError(f"No parser registered for {normalize_name(path)}")
    return parser(path)
