"""
Reader for RNBO export descriptors.

Each export directory carries a description.json produced by the RNBO
C++ export. Only a handful of fields are consumed:

- numParameters (informational)
- parameters (visible, type, name, paramId, index, initialValue)
- numInputChannels / numOutputChannels

Fields are read through typed accessors that raise MissingFieldError or
TypeMismatchError instead of returning None.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from rnbo_wrap.errors import (
    MissingFieldError,
    NotFoundError,
    ParseError,
    TypeMismatchError,
)

DESCRIPTOR_FILENAME = "description.json"

# Used when the descriptor does not carry node metadata of its own
DEFAULT_DESCRIPTION = "Test MetaSound"
DEFAULT_CATEGORY = "Utility"


class JsonObject:
    """A JSON object with typed field accessors."""

    def __init__(self, data: dict[str, Any], source: Optional[Path] = None):
        self.data = data
        self.source = source

    def _where(self) -> str:
        return f" in {self.source}" if self.source else ""

    def _get(self, name: str) -> Any:
        if name not in self.data:
            raise MissingFieldError(
                f"Missing required field '{name}'{self._where()}", name
            )
        return self.data[name]

    def _mismatch(self, name: str, expected: str, value: Any) -> TypeMismatchError:
        return TypeMismatchError(
            f"Field '{name}'{self._where()} should be {expected}, "
            f"got {type(value).__name__}",
            name,
        )

    def get_bool_field(self, name: str) -> bool:
        value = self._get(name)
        if not isinstance(value, bool):
            raise self._mismatch(name, "a boolean", value)
        return value

    def get_string_field(self, name: str) -> str:
        value = self._get(name)
        if not isinstance(value, str):
            raise self._mismatch(name, "a string", value)
        return value

    def get_integer_field(self, name: str) -> int:
        value = self._get(name)
        if isinstance(value, bool):
            raise self._mismatch(name, "an integer", value)
        if isinstance(value, int):
            return value
        # JSON writers sometimes emit integral values as 2.0
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise self._mismatch(name, "an integer", value)

    def get_double_field(self, name: str) -> float:
        value = self._get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._mismatch(name, "a number", value)
        return float(value)

    def get_object_array_field(self, name: str) -> list["JsonObject"]:
        value = self._get(name)
        if not isinstance(value, list):
            raise self._mismatch(name, "an array", value)
        objects = []
        for i, item in enumerate(value):
            if not isinstance(item, dict):
                raise self._mismatch(f"{name}[{i}]", "an object", item)
            objects.append(JsonObject(item, self.source))
        return objects

    def get_optional_string_field(self, name: str, default: str) -> str:
        """Read a string field, falling back to default when absent or empty."""
        if name not in self.data:
            return default
        value = self.get_string_field(name)
        return value if value else default


@dataclass(frozen=True)
class ParameterInfo:
    """One entry of the descriptor's parameters array."""

    visible: bool
    type: str
    name: str
    param_id: str
    index: int
    initial_value: float
    display_name: str = ""

    @property
    def label(self) -> str:
        """Label shown on the node: displayName when set, else name."""
        return self.display_name or self.name

    @classmethod
    def from_json(cls, obj: JsonObject) -> "ParameterInfo":
        return cls(
            visible=obj.get_bool_field("visible"),
            type=obj.get_string_field("type"),
            name=obj.get_string_field("name"),
            param_id=obj.get_string_field("paramId"),
            index=obj.get_integer_field("index"),
            initial_value=obj.get_double_field("initialValue"),
            display_name=obj.get_optional_string_field("displayName", ""),
        )


class ExportDescriptor(JsonObject):
    """Parsed description.json of a single export."""

    @property
    def num_parameters(self) -> int:
        return self.get_integer_field("numParameters")

    @property
    def parameters(self) -> list[ParameterInfo]:
        """All parameters in descriptor order, visible or not."""
        return [
            ParameterInfo.from_json(p)
            for p in self.get_object_array_field("parameters")
        ]

    @property
    def visible_parameters(self) -> list[ParameterInfo]:
        """
        Visible parameters in descriptor order.

        Hidden entries are skipped after reading their visible flag, so their
        remaining fields are never parsed.
        """
        return [
            ParameterInfo.from_json(p)
            for p in self.get_object_array_field("parameters")
            if p.get_bool_field("visible")
        ]

    @property
    def num_input_channels(self) -> int:
        return self._channel_count("numInputChannels")

    @property
    def num_output_channels(self) -> int:
        return self._channel_count("numOutputChannels")

    @property
    def description(self) -> str:
        return self.get_optional_string_field("description", DEFAULT_DESCRIPTION)

    @property
    def category(self) -> str:
        return self.get_optional_string_field("category", DEFAULT_CATEGORY)

    def _channel_count(self, name: str) -> int:
        count = self.get_integer_field(name)
        if count < 0:
            raise TypeMismatchError(
                f"Field '{name}'{self._where()} must not be negative, got {count}",
                name,
            )
        return count


def read_descriptor(path: str | Path) -> ExportDescriptor:
    """
    Load and parse a description.json file.

    Args:
        path: Path to the descriptor file, or to the export directory
              containing it.

    Returns:
        ExportDescriptor for the file.

    Raises:
        NotFoundError: If the file does not exist.
        ParseError: If the content is not a well-formed JSON object.
    """
    path = Path(path)
    if path.is_dir():
        path = path / DESCRIPTOR_FILENAME

    if not path.is_file():
        raise NotFoundError(f"Descriptor not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"Descriptor {path} must contain a JSON object")

    return ExportDescriptor(data, path)
