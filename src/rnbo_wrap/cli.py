"""
Command-line interface for rnbo_wrap.

Usage:
    rnbo-wrap generate <export-dir> [-o <output>] [-t <template>] [--dry-run]
    rnbo-wrap detect <export-path> [--json]
    rnbo-wrap render <export-path> [-t <template>]
    rnbo-wrap slots
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from rnbo_wrap import __version__
from rnbo_wrap.core.descriptor import read_descriptor
from rnbo_wrap.core.generator import ExportGenerator
from rnbo_wrap.core.pipeline import GenerationResult, Pipeline, PipelineConfig
from rnbo_wrap.core.symbol import extract_symbol, list_source_files
from rnbo_wrap.core.template import Slot, TemplateDocument
from rnbo_wrap.errors import RnboWrapError
from rnbo_wrap.templates import get_default_template_path


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="rnbo-wrap",
        description="Generate Unreal MetaSound nodes from RNBO C++ exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate the wrapper source for every export under ./Exports
  rnbo-wrap generate ./Exports -o Source/RNBOWrapper/Private/RNBOWrapperGenerated.cpp

  # Inspect a single export
  rnbo-wrap detect ./Exports/Foo

  # Print the operator rendered for a single export
  rnbo-wrap render ./Exports/Foo

  # List the placeholder tokens a template may use
  rnbo-wrap slots
""",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"rnbo-wrap {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the wrapper source for an export root",
        description="Aggregate all exports under a root into one source file.",
    )
    generate_parser.add_argument(
        "export_dir",
        type=Path,
        help="Directory containing one subdirectory per RNBO export",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output source file (default: <export_dir>/../RNBOWrapperGenerated.cpp)",
    )
    generate_parser.add_argument(
        "-t",
        "--template",
        type=Path,
        help="Operator template (default: $RNBO_WRAP_TEMPLATE or the bundled one)",
    )
    generate_parser.add_argument(
        "--sorted",
        action="store_true",
        help="Visit exports in name order instead of directory-listing order",
    )
    generate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if a required template slot is left unresolved",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be generated without writing the output",
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Output a JSON summary (exports and include paths)",
    )
    generate_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show one line per export",
    )

    # detect command
    detect_parser = subparsers.add_parser(
        "detect",
        help="Analyze a single RNBO export",
        description="Show the factory symbol, audio channels and parameters.",
    )
    detect_parser.add_argument(
        "export_path",
        type=Path,
        help="Path to the RNBO export directory",
    )
    detect_parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    # render command
    render_parser = subparsers.add_parser(
        "render",
        help="Print the operator rendered for one export",
        description="Render a single export's operator to stdout.",
    )
    render_parser.add_argument(
        "export_path",
        type=Path,
        help="Path to the RNBO export directory",
    )
    render_parser.add_argument(
        "-t",
        "--template",
        type=Path,
        help="Operator template (default: $RNBO_WRAP_TEMPLATE or the bundled one)",
    )
    render_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if a required template slot is left unresolved",
    )

    # slots command
    subparsers.add_parser(
        "slots",
        help="List recognized template placeholder tokens",
        description="Show every placeholder token and whether it is required.",
    )

    return parser


def _result_summary(result: GenerationResult) -> dict:
    return {
        "output": str(result.output_path),
        "written": result.written,
        "exports": [
            {
                "name": unit.name,
                "path": str(unit.path),
                "sources": [s.name for s in unit.sources],
                "num_params": unit.num_params,
                "num_inputs": unit.num_inputs,
                "num_outputs": unit.num_outputs,
            }
            for unit in result.units
        ],
        "include_paths": [str(p) for p in result.include_paths],
        "resource_dir": str(result.resource_dir) if result.resource_dir else None,
    }


def cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate command."""
    config = PipelineConfig(
        export_dir=args.export_dir.resolve(),
        output_path=args.output.resolve() if args.output else None,
        template_path=args.template,
        sort_exports=args.sorted,
        strict=args.strict,
    )

    errors = config.validate()
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        return 1

    pipeline = Pipeline(config)
    verbose = args.verbose and not args.json

    try:
        if args.dry_run:
            result = pipeline.render(verbose=verbose)
        else:
            result = pipeline.run(verbose=verbose)
    except RnboWrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(_result_summary(result), indent=2))
        return 0

    if args.dry_run:
        print(f"Would write: {result.output_path}")
    else:
        print(f"Generated: {result.output_path}")
    print(f"  Exports: {', '.join(unit.name for unit in result.units)}")
    print("  Include paths:")
    for path in result.include_paths:
        print(f"    {path}")

    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    """Handle the detect command."""
    export_path = args.export_path.resolve()

    try:
        descriptor = read_descriptor(export_path)
        symbol = extract_symbol(export_path)
        visible = descriptor.visible_parameters
        num_params = len(descriptor.get_object_array_field("parameters"))
        num_inputs = descriptor.num_input_channels
        num_outputs = descriptor.num_output_channels
    except RnboWrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    sources = list_source_files(export_path)

    if args.json:
        data = {
            "name": symbol.name,
            "path": str(export_path),
            "symbol_file": str(symbol.path) if symbol.path else None,
            "num_inputs": num_inputs,
            "num_outputs": num_outputs,
            "num_params": num_params,
            "visible_params": [
                {
                    "paramId": p.param_id,
                    "name": p.label,
                    "index": p.index,
                    "initialValue": p.initial_value,
                }
                for p in visible
            ],
            "sources": [s.name for s in sources],
        }
        print(json.dumps(data, indent=2))
    else:
        print(f"RNBO Export: {symbol.name if symbol.found else '(no factory symbol)'}")
        print(f"  Path: {export_path}")
        if symbol.found:
            print(f"  Declared in: {symbol.path}:{symbol.line}")
        print(f"  Audio inputs: {num_inputs}")
        print(f"  Audio outputs: {num_outputs}")
        print(f"  Parameters: {len(visible)} visible of {num_params}")
        for p in visible:
            print(f"    [{p.index}] {p.label} ({p.param_id}) = {p.initial_value}")
        print(f"  Sources: {', '.join(s.name for s in sources) or '(none)'}")

    if not symbol.found:
        print(
            f"Error: Cannot find class name for export at: {export_path}",
            file=sys.stderr,
        )
        return 1
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    """Handle the render command."""
    template_path = args.template if args.template else get_default_template_path()

    try:
        template = TemplateDocument.from_path(template_path)
        generator = ExportGenerator(template, strict=args.strict)
        unit = generator.generate(args.export_path.resolve())
    except RnboWrapError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(unit.text)
    return 0


def cmd_slots(args: argparse.Namespace) -> int:
    """Handle the slots command."""
    for slot in Slot:
        marker = "required" if slot.required else "optional"
        print(f"{slot.token}  ({marker})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "generate": cmd_generate,
        "detect": cmd_detect,
        "render": cmd_render,
        "slots": cmd_slots,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
