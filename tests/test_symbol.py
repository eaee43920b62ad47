"""Tests for rnbo_wrap.core.symbol module."""

from pathlib import Path

import pytest

from rnbo_wrap.core.symbol import (
    SENTINEL_NAME,
    SymbolMatch,
    extract_symbol,
    list_source_files,
    match_line,
    require_symbol,
)
from rnbo_wrap.errors import NotFoundError, SymbolNotFoundError


class TestMatchLine:
    """Tests for single-line matching."""

    def test_matches_factory_declaration(self):
        line = 'extern "C" PatcherFactoryFunctionPtr FooFactoryFunction(PlatformInterface* p)'
        assert match_line(line) == "Foo"

    def test_skips_sentinel(self):
        line = "PatcherFactoryFunctionPtr GetPatcherFactoryFunction(PlatformInterface* p)"
        assert match_line(line) is None

    def test_no_whitespace_required(self):
        assert match_line("PatcherFactoryFunctionPtrBarFactoryFunction") == "Bar"

    def test_sentinel_then_real_on_same_line(self):
        line = (
            "PatcherFactoryFunctionPtr GetPatcherFactoryFunction(); "
            "PatcherFactoryFunctionPtr FooFactoryFunction();"
        )
        assert match_line(line) == "Foo"

    def test_unrelated_line(self):
        assert match_line("return creaternbomatic;") is None


class TestExtractSymbol:
    """Tests for extract_symbol and require_symbol."""

    def test_extract_from_export(self, foo_export: Path):
        """Test the real factory is found after the sentinel declarations."""
        result = extract_symbol(foo_export)
        assert result.found
        assert result.name == "Foo"
        assert result.path == foo_export / "Foo.cpp"
        assert result.line > 0

    def test_sentinel_followed_by_real_match(self, tmp_path: Path):
        """Test the sentinel is skipped and scanning continues in the same file."""
        (tmp_path / "patch.cpp").write_text(
            "PatcherFactoryFunctionPtr GetPatcherFactoryFunction(PlatformInterface*);\n"
            "int x = 0;\n"
            "PatcherFactoryFunctionPtr synthFactoryFunction(PlatformInterface*);\n",
            encoding="utf-8",
        )
        result = extract_symbol(tmp_path)
        assert result.name == "synth"
        assert result.line == 3

    def test_first_match_wins(self, tmp_path: Path):
        """Test the first non-sentinel match in a file is returned."""
        (tmp_path / "patch.cpp").write_text(
            "PatcherFactoryFunctionPtr OneFactoryFunction();\n"
            "PatcherFactoryFunctionPtr TwoFactoryFunction();\n",
            encoding="utf-8",
        )
        assert extract_symbol(tmp_path).name == "One"

    def test_only_sentinel_is_not_found(self, tmp_path: Path):
        (tmp_path / "patch.cpp").write_text(
            "PatcherFactoryFunctionPtr GetPatcherFactoryFunction();\n",
            encoding="utf-8",
        )
        result = extract_symbol(tmp_path)
        assert result == SymbolMatch(name=None)
        assert not result.found

    def test_non_source_files_ignored(self, tmp_path: Path):
        """Test files without a recognized extension are not scanned."""
        (tmp_path / "patch.h").write_text(
            "PatcherFactoryFunctionPtr HeaderFactoryFunction();\n", encoding="utf-8"
        )
        assert not extract_symbol(tmp_path).found
        assert extract_symbol(tmp_path, extensions=(".h",)).name == "Header"

    def test_scans_every_source_file(self, tmp_path: Path):
        """Test a match in any source file is found."""
        (tmp_path / "a.cpp").write_text("// nothing here\n", encoding="utf-8")
        (tmp_path / "b.cpp").write_text(
            "PatcherFactoryFunctionPtr LateFactoryFunction();\n", encoding="utf-8"
        )
        assert extract_symbol(tmp_path).name == "Late"

    def test_not_a_directory(self, tmp_path: Path):
        with pytest.raises(NotFoundError, match="not a directory"):
            extract_symbol(tmp_path / "missing")

    def test_require_symbol(self, foo_export: Path):
        assert require_symbol(foo_export) == "Foo"

    def test_require_symbol_raises(self, tmp_path: Path):
        """Test a miss is a SymbolNotFoundError naming the export."""
        (tmp_path / "empty.cpp").write_text("int main() {}\n", encoding="utf-8")
        with pytest.raises(SymbolNotFoundError, match="Cannot find class name") as e:
            require_symbol(tmp_path)
        assert str(tmp_path) in str(e.value)

    def test_sentinel_constant(self):
        assert SENTINEL_NAME == "GetPatcher"


class TestListSourceFiles:
    """Tests for list_source_files."""

    def test_lists_direct_sources_only(self, foo_export: Path):
        nested = foo_export / "rnbo" / "RNBO.cpp"
        nested.write_text("", encoding="utf-8")
        files = list_source_files(foo_export)
        assert files == [foo_export / "Foo.cpp"]
