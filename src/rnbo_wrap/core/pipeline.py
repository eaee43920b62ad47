"""
Generation pipeline for rnbo_wrap.

Walks an export root, emits an aggregation #include for every export
source file and appends the rendered operator of each export, producing
one translation unit for the wrapper module.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rnbo_wrap.core.generator import ExportGenerator, GeneratedUnit
from rnbo_wrap.core.symbol import DEFAULT_SOURCE_EXTENSIONS, list_source_files
from rnbo_wrap.core.template import TemplateDocument
from rnbo_wrap.errors import NotFoundError, TemplateError, ValidationError
from rnbo_wrap.templates import get_default_template_path

DEFAULT_HEADER_COMMENT = "//automatically generated by rnbo-wrap"
DEFAULT_TOP_INCLUDE = "RNBO.cpp"
DEFAULT_RESOURCE_DIR_NAME = "rnbo"
DEFAULT_OUTPUT_NAME = "RNBOWrapperGenerated.cpp"

# Include roots under the shared RNBO resource directory
RESOURCE_INCLUDE_SUBDIRS = ("", "common", "src", "src/3rdparty")


@dataclass
class PipelineConfig:
    """Configuration for a generation run."""

    # Root directory holding one subdirectory per export
    export_dir: Path

    # Generated translation unit (if None, written into export_dir's parent)
    output_path: Optional[Path] = None

    # Operator template (if None, $RNBO_WRAP_TEMPLATE or the bundled one)
    template_path: Optional[Path] = None

    # Suffixes of export sources to include and scan
    extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS

    header_comment: str = DEFAULT_HEADER_COMMENT
    top_include: str = DEFAULT_TOP_INCLUDE

    # Name of the RNBO runtime directory shipped inside each export
    resource_dir_name: str = DEFAULT_RESOURCE_DIR_NAME

    # Visit exports by name instead of directory-listing order
    sort_exports: bool = False

    # Fail when a rendered operator still contains required slot tokens
    strict: bool = False

    def resolved_output_path(self) -> Path:
        if self.output_path is not None:
            return Path(self.output_path)
        return Path(self.export_dir).parent / DEFAULT_OUTPUT_NAME

    def resolved_template_path(self) -> Path:
        if self.template_path is not None:
            return Path(self.template_path)
        return get_default_template_path()

    def validate_inputs(self) -> list[str]:
        """Validate everything read by a run: export root, template, extensions."""
        errors = []

        if not Path(self.export_dir).is_dir():
            errors.append(f"Export directory not found: {self.export_dir}")

        template_path = self.resolved_template_path()
        if not template_path.is_file():
            errors.append(f"Template not found: {template_path}")

        if not self.extensions:
            errors.append("At least one source extension is required")
        for ext in self.extensions:
            if not ext.startswith("."):
                errors.append(f"Source extension '{ext}' must start with '.'")

        return errors

    def validate(self) -> list[str]:
        """
        Validate the configuration.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = self.validate_inputs()

        output_path = self.resolved_output_path()
        if output_path.is_dir():
            errors.append(f"Output path is a directory: {output_path}")

        return errors


@dataclass
class GenerationResult:
    """Result of a generation run."""

    output_path: Path
    text: str
    units: list[GeneratedUnit] = field(default_factory=list)

    # Include roots for the surrounding build configuration
    include_paths: list[Path] = field(default_factory=list)

    # RNBO runtime directory of the first export
    resource_dir: Optional[Path] = None

    written: bool = False

    def __repr__(self) -> str:
        status = "written" if self.written else "dry run"
        return (
            f"GenerationResult({len(self.units)} exports: {status} "
            f"-> {self.output_path})"
        )


class Pipeline:
    """Generate the aggregated wrapper source for an export root."""

    def __init__(self, config: PipelineConfig):
        """
        Initialize pipeline with configuration.

        Args:
            config: Export root, output path and template settings.
        """
        self.config = config

    def list_exports(self) -> list[Path]:
        """Immediate subdirectories of the export root."""
        export_root = Path(self.config.export_dir)
        if not export_root.is_dir():
            raise NotFoundError(f"Export directory not found: {export_root}")

        exports = [p for p in export_root.iterdir() if p.is_dir()]
        if self.config.sort_exports:
            exports.sort(key=lambda p: p.name)
        return exports

    def load_template(self) -> TemplateDocument:
        template = TemplateDocument.from_path(self.config.resolved_template_path())
        if self.config.strict:
            missing = template.missing_slots()
            if missing:
                tokens = ", ".join(s.token for s in missing)
                raise TemplateError(
                    f"Template {template.source} lacks required slots: {tokens}"
                )
        return template

    def render(self, verbose: bool = False) -> GenerationResult:
        """
        Build the generated source without writing it.

        Args:
            verbose: If True, print one line per export.

        Returns:
            GenerationResult with the full text and include paths.

        Raises:
            RnboWrapError: Any export failure aborts the whole run.
        """
        errors = self.config.validate_inputs()
        if errors:
            raise ValidationError(
                "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        exports = self.list_exports()
        if not exports:
            raise ValidationError(f"No exports found in {self.config.export_dir}")

        generator = ExportGenerator(
            self.load_template(),
            extensions=self.config.extensions,
            strict=self.config.strict,
        )

        export_root = Path(self.config.export_dir)
        lines = [
            self.config.header_comment,
            f'#include "{self.config.top_include}"',
        ]
        include_paths: list[Path] = []
        units = []

        for export_dir in exports:
            include_paths.append(export_dir)

            for source in list_source_files(export_dir, self.config.extensions):
                lines.append(f'#include "{export_dir.name}/{source.name}"')

            unit = generator.generate(export_dir)
            units.append(unit)
            lines.append(unit.text)

            if verbose:
                print(
                    f"  {export_dir.name}: {unit.name}Operator "
                    f"({unit.num_params} params, {unit.num_inputs} in, "
                    f"{unit.num_outputs} out)"
                )

        include_paths.append(export_root)
        resource_dir = exports[0] / self.config.resource_dir_name
        include_paths.extend(resource_dir / sub for sub in RESOURCE_INCLUDE_SUBDIRS)

        return GenerationResult(
            output_path=self.config.resolved_output_path(),
            text="\n".join(lines) + "\n",
            units=units,
            include_paths=include_paths,
            resource_dir=resource_dir,
        )

    def run(self, verbose: bool = False) -> GenerationResult:
        """
        Generate and write the aggregated source.

        The output file is replaced only once the whole text has been
        rendered, so a failing export leaves any previous file untouched.
        """
        errors = self.config.validate()
        if errors:
            raise ValidationError(
                "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        result = self.render(verbose=verbose)
        write_atomic(result.output_path, result.text)
        result.written = True
        return result


def write_atomic(path: Path, content: str) -> None:
    """Replace path with content via a temporary file in the same directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        # mkstemp creates 0600; keep the target's mode or the umask default
        if path.exists():
            shutil.copymode(path, tmp_name)
        else:
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp_name, 0o666 & ~umask)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
