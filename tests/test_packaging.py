"""Tests for packaging consistency and template inclusion."""

from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

import rnbo_wrap
from rnbo_wrap.core.template import TemplateDocument
from rnbo_wrap.templates import list_metasound_templates


REPO_ROOT = Path(__file__).resolve().parent.parent
PYPROJECT = REPO_ROOT / "pyproject.toml"
TEMPLATES_DIR = REPO_ROOT / "src" / "rnbo_wrap" / "templates"


class TestVersionConsistency:
    """Ensure __version__ and pyproject.toml stay in sync."""

    def test_version_matches_pyproject(self):
        with open(PYPROJECT, "rb") as f:
            meta = tomllib.load(f)
        assert rnbo_wrap.__version__ == meta["project"]["version"]


class TestTemplateInclusion:
    """Ensure template data files are present in the source tree."""

    def test_metasound_dir_exists(self):
        assert (TEMPLATES_DIR / "metasound").is_dir()

    def test_bundled_template_listed(self):
        names = [p.name for p in list_metasound_templates()]
        assert "MetaSoundOperator.cpp.in" in names

    def test_bundled_template_has_every_required_slot(self):
        for path in list_metasound_templates():
            doc = TemplateDocument.from_path(path)
            assert doc.missing_slots() == [], f"{path.name} lacks slots"


class TestEntryPoint:
    """Ensure the CLI entry point is importable."""

    def test_cli_main_importable(self):
        from rnbo_wrap.cli import main  # noqa: F401

    def test_cli_create_parser_importable(self):
        from rnbo_wrap.cli import create_parser  # noqa: F401
