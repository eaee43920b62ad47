"""
Operator template handling.

Templates are plain text with literal placeholder tokens such as
_OPERATOR_NAME_. Rendering is ordered literal find-and-replace: there is
no escaping and no conditional or loop syntax. Anything repeated (one
declaration per parameter or channel) is joined by the generator before
it reaches the template.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from rnbo_wrap.errors import NotFoundError, TemplateError


class Slot(Enum):
    """Placeholder tokens recognized in operator templates."""

    NAMESPACE = ("_OPERATOR_NAMESPACE_", True)
    NAME = ("_OPERATOR_NAME_", True)
    DISPLAYNAME = ("_OPERATOR_DISPLAYNAME_", False)
    DESCRIPTION = ("_OPERATOR_DESCRIPTION_", False)
    # no trailing underscore, matches existing templates
    CATEGORY = ("_OPERATOR_CATEGORY", False)
    VERTEX_INPUTS = ("_OPERATOR_VERTEX_INPUTS_", True)
    VERTEX_OUTPUTS = ("_OPERATOR_VERTEX_OUTPUTS_", True)
    GET_INPUTS = ("_OPERATOR_GET_INPUTS_", True)
    GET_OUTPUTS = ("_OPERATOR_GET_OUTPUTS_", True)
    AUDIO_INPUT_COUNT = ("_OPERATOR_AUDIO_INPUT_COUNT_", True)
    AUDIO_INPUT_INIT = ("_OPERATOR_AUDIO_INPUT_INIT_", True)
    AUDIO_OUTPUT_COUNT = ("_OPERATOR_AUDIO_OUTPUT_COUNT_", True)
    AUDIO_OUTPUT_INIT = ("_OPERATOR_AUDIO_OUTPUT_INIT_", True)
    MEMBERS_DECL = ("_OPERATOR_MEMBERS_DECL_", True)
    MEMBERS_INIT = ("_OPERATOR_MEMBERS_INIT_", True)
    PARAM_DECL = ("_OPERATOR_PARAM_DECL_", True)
    PARAM_UPDATE = ("_OPERATOR_PARAM_UPDATE_", True)
    AUDIO_NUMFRAMES_MEMBER = ("_OPERATOR_AUDIO_NUMFRAMES_MEMBER_", True)

    def __init__(self, token: str, required: bool):
        self.token = token
        self.required = required


Substitution = tuple[Union[Slot, str], str]


class TemplateDocument:
    """A loaded operator template, reused for every export."""

    def __init__(self, text: str = "", source: Optional[Path] = None):
        self.text = text
        self.source = source

    def load(self, text: str) -> "TemplateDocument":
        """Store template text, replacing any previously loaded text."""
        self.text = text
        return self

    @classmethod
    def from_path(cls, path: str | Path) -> "TemplateDocument":
        """
        Read a template from disk.

        Raises:
            NotFoundError: If the template file does not exist.
        """
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"Template not found: {path}")
        return cls(path.read_text(encoding="utf-8"), source=path)

    def missing_slots(self) -> list[Slot]:
        """Required slots whose token never appears in the template."""
        return [s for s in Slot if s.required and s.token not in self.text]

    def render(
        self,
        substitutions: Iterable[Substitution],
        strict: bool = False,
    ) -> str:
        """
        Apply substitutions in the given order and return the result.

        Tokens with no substitution are left verbatim unless strict is set.

        Args:
            substitutions: (slot or literal token, replacement) pairs.
            strict: Raise if a required slot token survives rendering.

        Returns:
            The rendered text. The stored template is not modified.

        Raises:
            TemplateError: In strict mode, if required slots remain.
        """
        result = self.text
        for key, value in substitutions:
            token = key.token if isinstance(key, Slot) else key
            result = result.replace(token, value)

        if strict:
            remaining = [s for s in unresolved(result) if s.required]
            if remaining:
                where = f" in {self.source}" if self.source else ""
                tokens = ", ".join(s.token for s in remaining)
                raise TemplateError(f"Unresolved template slots{where}: {tokens}")

        return result


def unresolved(text: str) -> list[Slot]:
    """List the slots whose tokens still appear in text."""
    return [s for s in Slot if s.token in text]
