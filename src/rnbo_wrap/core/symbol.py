"""
Factory symbol recovery from RNBO export sources.

The export's class name is not stored in description.json, so it is
recovered from the generated C++ by matching declarations of the form

    PatcherFactoryFunctionPtr <name>FactoryFunction

Every export also contains the generic GetPatcherFactoryFunction
dispatcher, which matches the same pattern and is skipped.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rnbo_wrap.errors import NotFoundError, SymbolNotFoundError

FACTORY_PATTERN = re.compile(
    r"PatcherFactoryFunctionPtr\s*(?P<name>\w+)FactoryFunction"
)

# Generic dispatcher present in every export
SENTINEL_NAME = "GetPatcher"

DEFAULT_SOURCE_EXTENSIONS = (".cpp",)


@dataclass(frozen=True)
class SymbolMatch:
    """Result of a factory symbol scan."""

    name: Optional[str]
    path: Optional[Path] = None
    line: int = 0

    @property
    def found(self) -> bool:
        return self.name is not None


def list_source_files(
    directory: Path, extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
) -> list[Path]:
    """List source files directly inside directory, in listing order."""
    return [
        f for f in directory.iterdir() if f.is_file() and f.suffix in extensions
    ]


def match_line(line: str) -> Optional[str]:
    """Return the factory name declared on line, skipping the sentinel."""
    for match in FACTORY_PATTERN.finditer(line):
        name = match.group("name")
        if name != SENTINEL_NAME:
            return name
    return None


def extract_symbol(
    directory: str | Path,
    extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS,
) -> SymbolMatch:
    """
    Scan an export's sources for its factory symbol.

    Files are visited in directory-listing order and lines in file order;
    the first non-sentinel match wins.

    Args:
        directory: Export directory to scan.
        extensions: Source file suffixes to consider.

    Returns:
        SymbolMatch; found is False when no file matched.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotFoundError(f"Export path is not a directory: {directory}")

    for source in list_source_files(directory, extensions):
        with source.open(encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, start=1):
                name = match_line(line)
                if name is not None:
                    return SymbolMatch(name=name, path=source, line=lineno)

    return SymbolMatch(name=None)


def require_symbol(
    directory: str | Path,
    extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS,
) -> str:
    """
    Return the export's factory symbol or fail.

    Raises:
        SymbolNotFoundError: If no source file declares a factory function.
    """
    result = extract_symbol(directory, extensions)
    if not result.found:
        raise SymbolNotFoundError(
            f"Cannot find class name for export at: {directory}"
        )
    assert result.name is not None
    return result.name
