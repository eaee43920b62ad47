"""
MetaSound operator generation for a single RNBO export.

Typical data flow:

    export dir -> read_descriptor() -> ExportDescriptor
               -> require_symbol()  -> factory name
    ExportDescriptor -> build_declarations() -> OperatorDeclarations
    OperatorDeclarations -> substitutions -> TemplateDocument.render()

Declarations are computed as plain data first (one ParamDecl per visible
parameter, one ChannelDecl per audio channel) and only then turned into
C++ fragments and joined.
"""

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from rnbo_wrap.core.descriptor import ExportDescriptor, read_descriptor
from rnbo_wrap.core.symbol import (
    DEFAULT_SOURCE_EXTENSIONS,
    list_source_files,
    require_symbol,
)
from rnbo_wrap.core.template import Slot, Substitution, TemplateDocument, unresolved
from rnbo_wrap.errors import NullMemberReferenceError, ValidationError

OPERATOR_SUFFIX = "Operator"

_NON_IDENTIFIER_RE = re.compile(r"\W", re.ASCII)


def c_identifier(text: str) -> str:
    """Replace characters that cannot appear in a C identifier with '_'."""
    return _NON_IDENTIFIER_RE.sub("_", text)


def c_string(text: str) -> str:
    """Escape text for use inside a C string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def float_literal(value: float) -> str:
    """
    Format value as a C++ float literal, independent of locale.

    0.5 -> 0.5f, 1 -> 1.0f, 1e-07 -> 1e-07f
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"Cannot express {value} as a float literal")
    return f"{value!r}f"


@dataclass(frozen=True)
class ParamDecl:
    """A visible parameter exposed as a float input vertex."""

    param_id: str
    label: str
    index: int
    initial_value: float

    @property
    def vertex_name(self) -> str:
        return f"InParam{c_identifier(self.param_id)}"

    @property
    def member_name(self) -> str:
        return f"Param{c_identifier(self.param_id)}"

    def declaration(self) -> str:
        label = c_string(self.label)
        return f'METASOUND_PARAM({self.vertex_name}, "{label}", "{label}")'

    def vertex(self) -> str:
        return (
            "TInputDataVertex<float>(METASOUND_GET_PARAM_NAME_AND_METADATA("
            f"{self.vertex_name}), {float_literal(self.initial_value)})"
        )

    def update(self) -> str:
        return f"UpdateParam({self.index}, *{self.member_name});"

    def member(self) -> str:
        return f"FFloatReadRef {self.member_name};"

    def initializer(self) -> str:
        return (
            f"{self.member_name}(InputCollection."
            "GetDataReadReferenceOrConstructWithVertexDefault<float>("
            f"InputInterface, METASOUND_GET_PARAM_NAME({self.vertex_name}), "
            "InSettings))"
        )

    def registration(self) -> str:
        return (
            "InputDataReferences.AddDataReadReference("
            f"METASOUND_GET_PARAM_NAME({self.vertex_name}), {self.member_name});"
        )


@dataclass(frozen=True)
class ChannelDecl:
    """One audio input or output channel."""

    index: int
    is_output: bool = False

    @property
    def member_name(self) -> str:
        kind = "Output" if self.is_output else "Input"
        return f"Audio{kind}{self.index}"

    @property
    def vertex_name(self) -> str:
        prefix = "OutParam" if self.is_output else "InParam"
        return f"{prefix}Audio{self.index}"

    @property
    def label(self) -> str:
        # one-based for display
        return f"{'Out' if self.is_output else 'In'} {self.index + 1}"

    def declaration(self) -> str:
        return f'METASOUND_PARAM({self.vertex_name}, "{self.label}", "{self.label}")'

    def vertex(self) -> str:
        kind = "TOutputDataVertex" if self.is_output else "TInputDataVertex"
        return (
            f"{kind}<FAudioBuffer>("
            f"METASOUND_GET_PARAM_NAME_AND_METADATA({self.vertex_name}))"
        )

    def data_pointer(self) -> str:
        return f"{self.member_name}->GetData()"

    def member(self) -> str:
        kind = "FAudioBufferWriteRef" if self.is_output else "FAudioBufferReadRef"
        return f"{kind} {self.member_name};"

    def initializer(self) -> str:
        if self.is_output:
            return f"{self.member_name}(FAudioBufferWriteRef::CreateNew(InSettings))"
        return (
            f"{self.member_name}(InputCollection."
            "GetDataReadReferenceOrConstruct<FAudioBuffer>("
            f"METASOUND_GET_PARAM_NAME({self.vertex_name}), InSettings))"
        )

    def registration(self) -> str:
        collection = "OutputDataReferences" if self.is_output else "InputDataReferences"
        return (
            f"{collection}.AddDataReadReference("
            f"METASOUND_GET_PARAM_NAME({self.vertex_name}), {self.member_name});"
        )


@dataclass(frozen=True)
class OperatorDeclarations:
    """Everything an export exposes on its node, in declaration order."""

    params: tuple[ParamDecl, ...] = ()
    inputs: tuple[ChannelDecl, ...] = ()
    outputs: tuple[ChannelDecl, ...] = ()

    @property
    def frames_member(self) -> Optional[str]:
        """The last declared audio member, used to size blocks at runtime."""
        channels = self.inputs + self.outputs
        return channels[-1].member_name if channels else None

    def join_substitutions(self) -> list[Substitution]:
        """Substitutions for every slot filled from declarations."""
        channels = self.inputs + self.outputs
        everything = self.params + channels

        members_init = [d.initializer() for d in everything]

        return [
            (
                Slot.VERTEX_INPUTS,
                ", ".join(d.vertex() for d in self.params + self.inputs),
            ),
            (Slot.VERTEX_OUTPUTS, ", ".join(d.vertex() for d in self.outputs)),
            (
                Slot.GET_INPUTS,
                "\n".join(d.registration() for d in self.params + self.inputs),
            ),
            (Slot.GET_OUTPUTS, "\n".join(d.registration() for d in self.outputs)),
            (Slot.AUDIO_INPUT_COUNT, str(len(self.inputs))),
            (Slot.AUDIO_INPUT_INIT, ", ".join(d.data_pointer() for d in self.inputs)),
            (Slot.AUDIO_OUTPUT_COUNT, str(len(self.outputs))),
            (
                Slot.AUDIO_OUTPUT_INIT,
                ", ".join(d.data_pointer() for d in self.outputs),
            ),
            (Slot.MEMBERS_DECL, "\n".join(d.member() for d in everything)),
            # initializer list continues after the base-class initializer
            (
                Slot.MEMBERS_INIT,
                ", " + ",\n".join(members_init) if members_init else " ",
            ),
            (Slot.PARAM_DECL, "\n".join(d.declaration() for d in everything)),
            (Slot.PARAM_UPDATE, "\n".join(d.update() for d in self.params)),
        ]


def build_declarations(descriptor: ExportDescriptor) -> OperatorDeclarations:
    """
    Compute the declarations for an export.

    Parameters keep descriptor order; invisible ones are dropped.
    Channel indices run from 0 to numInputChannels/numOutputChannels - 1.
    """
    params = []
    for p in descriptor.visible_parameters:
        if not math.isfinite(p.initial_value):
            raise ValidationError(
                f"Parameter '{p.param_id}' in {descriptor.source} has "
                f"initialValue {p.initial_value}, which is not a finite number"
            )
        params.append(
            ParamDecl(
                param_id=p.param_id,
                label=p.label,
                index=p.index,
                initial_value=p.initial_value,
            )
        )

    inputs = tuple(ChannelDecl(i) for i in range(descriptor.num_input_channels))
    outputs = tuple(
        ChannelDecl(i, is_output=True) for i in range(descriptor.num_output_channels)
    )
    return OperatorDeclarations(params=tuple(params), inputs=inputs, outputs=outputs)


def naming_substitutions(name: str, descriptor: ExportDescriptor) -> list[Substitution]:
    """
    Substitutions derived from the factory symbol and node metadata.

    Metadata values land inside C string literals and are substituted before
    the remaining slots, so they must not carry slot tokens themselves.
    """
    metadata = {"description": descriptor.description, "category": descriptor.category}
    for field_name, value in metadata.items():
        tokens = unresolved(value)
        if tokens:
            raise ValidationError(
                f"Field '{field_name}' in {descriptor.source} contains template "
                f"token(s): {', '.join(s.token for s in tokens)}"
            )

    return [
        (Slot.NAMESPACE, name + OPERATOR_SUFFIX),
        (Slot.NAME, name),
        (Slot.DISPLAYNAME, name),
        (Slot.DESCRIPTION, c_string(metadata["description"])),
        (Slot.CATEGORY, c_string(metadata["category"])),
    ]


@dataclass
class GeneratedUnit:
    """Rendered operator source for one export."""

    name: str
    path: Path
    text: str
    sources: list[Path] = field(default_factory=list)
    # numParameters as written by the exporter, hidden parameters included
    declared_params: int = 0
    num_params: int = 0
    num_inputs: int = 0
    num_outputs: int = 0


class ExportGenerator:
    """Render the MetaSound operator for RNBO exports."""

    def __init__(
        self,
        template: TemplateDocument,
        extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS,
        strict: bool = False,
    ):
        """
        Initialize generator with a loaded template.

        Args:
            template: Operator template shared across exports.
            extensions: Source file suffixes scanned for the factory symbol.
            strict: Fail when required slots survive rendering.
        """
        self.template = template
        self.extensions = extensions
        self.strict = strict

    def generate(self, export_dir: str | Path) -> GeneratedUnit:
        """
        Generate the operator source for one export directory.

        Raises:
            NotFoundError, ParseError, DescriptorError: Unreadable descriptor.
            SymbolNotFoundError: No factory symbol in the export's sources.
            NullMemberReferenceError: Export has no audio channels.
        """
        export_dir = Path(export_dir)
        descriptor = read_descriptor(export_dir)
        name = require_symbol(export_dir, self.extensions)

        decls = build_declarations(descriptor)
        frames_member = decls.frames_member
        if frames_member is None:
            raise NullMemberReferenceError(
                f"Export at {export_dir} declares no audio inputs or outputs; "
                "the operator needs at least one audio channel to size its blocks"
            )

        substitutions = naming_substitutions(name, descriptor)
        substitutions += decls.join_substitutions()
        substitutions.append((Slot.AUDIO_NUMFRAMES_MEMBER, frames_member))

        text = self.template.render(substitutions, strict=self.strict)

        return GeneratedUnit(
            name=name,
            path=export_dir,
            text=text,
            sources=list_source_files(export_dir, self.extensions),
            declared_params=descriptor.num_parameters,
            num_params=len(decls.params),
            num_inputs=len(decls.inputs),
            num_outputs=len(decls.outputs),
        )
