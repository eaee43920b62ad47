"""Pytest configuration and fixtures for rnbo_wrap tests."""

import json
import re
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from rnbo_wrap.core.template import Slot, TemplateDocument
from rnbo_wrap.templates import get_metasound_templates_dir

# Abridged from the tail of an RNBO C++ export
EXPORT_SOURCE = """\
#include "RNBO_Common.h"
#include "RNBO_AudioSignal.h"

namespace RNBO {{

extern "C" PatcherFactoryFunctionPtr GetPatcherFactoryFunction(PlatformInterface* platformInterface);

extern "C" PatcherInterface* creaternbomatic()
{{
    return new rnbomatic();
}}

#ifndef RNBO_NO_PATCHERFACTORY
extern "C" PatcherFactoryFunctionPtr GetPatcherFactoryFunction(PlatformInterface* platformInterface)
#else
extern "C" PatcherFactoryFunctionPtr {name}FactoryFunction(PlatformInterface* platformInterface)
#endif
{{
    Platform::set(platformInterface);
    return creaternbomatic;
}}

}} // end RNBO namespace
"""

# One line per slot so tests can pick out each substituted value
SLOT_TEMPLATE = "\n".join(f"{s.name}=@@{s.token}@@" for s in Slot) + "\n"


def slot_value(text: str, slot: Slot) -> str:
    """Return the value rendered into SLOT_TEMPLATE for slot."""
    m = re.search(rf"^{slot.name}=@@(.*?)@@", text, re.MULTILINE | re.DOTALL)
    assert m is not None, f"{slot.name} line missing from rendered text"
    return m.group(1)


def param(
    param_id: str,
    name: str,
    index: int,
    initial: float = 0.0,
    visible: bool = True,
    **extra: Any,
) -> dict[str, Any]:
    """A parameters[] entry as written by the RNBO exporter."""
    entry = {
        "type": "ParameterTypeNumber",
        "index": index,
        "name": name,
        "paramId": param_id,
        "minimum": 0,
        "maximum": 1,
        "exponent": 1,
        "steps": 0,
        "initialValue": initial,
        "isEnum": False,
        "enumValues": [],
        "displayName": "",
        "unit": "",
        "order": 0,
        "debug": False,
        "visible": visible,
        "signalIndex": None,
        "ioType": "IOTypeUndefined",
    }
    entry.update(extra)
    return entry


def write_export(
    root: Path,
    name: str,
    params: Optional[list[dict[str, Any]]] = None,
    inputs: int = 1,
    outputs: int = 1,
    symbol: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> Path:
    """Create an export directory with a source file and description.json."""
    params = params or []
    export_dir = root / name
    export_dir.mkdir(parents=True)
    (export_dir / "rnbo").mkdir()

    source = EXPORT_SOURCE.format(name=symbol or name)
    (export_dir / f"{name}.cpp").write_text(source, encoding="utf-8")
    (export_dir / f"{name}.h").write_text("#pragma once\n", encoding="utf-8")

    description = {
        "numParameters": len(params),
        "numSignalInParameters": 0,
        "numSignalOutParameters": 0,
        "numInputChannels": inputs,
        "numOutputChannels": outputs,
        "numMidiInputPorts": 0,
        "numMidiOutputPorts": 0,
        "externalDataRefs": [],
        "patcherSerial": 0,
        "inports": [],
        "outports": [],
        "inlets": [],
        "outlets": [],
        "parameters": params,
    }
    if extra:
        description.update(extra)
    (export_dir / "description.json").write_text(
        json.dumps(description, indent=2), encoding="utf-8"
    )
    return export_dir


@pytest.fixture
def make_export() -> Callable[..., Path]:
    """Factory fixture creating RNBO export directories."""
    return write_export


@pytest.fixture
def export_root(tmp_path: Path) -> Path:
    """Empty directory to hold exports."""
    root = tmp_path / "Exports"
    root.mkdir()
    return root


@pytest.fixture
def foo_export(export_root: Path) -> Path:
    """Export 'Foo': one gain parameter, one audio input and output."""
    return write_export(
        export_root,
        "Foo",
        params=[param("0", "Gain", 0, 0.5)],
        inputs=1,
        outputs=1,
    )


@pytest.fixture
def bundled_template_path() -> Path:
    """Path to the MetaSound operator template shipped with the package."""
    return get_metasound_templates_dir() / "MetaSoundOperator.cpp.in"


@pytest.fixture
def bundled_template(bundled_template_path: Path) -> TemplateDocument:
    return TemplateDocument.from_path(bundled_template_path)


@pytest.fixture
def slot_template() -> TemplateDocument:
    """Template exposing every slot on its own labelled line."""
    return TemplateDocument(SLOT_TEMPLATE)


@pytest.fixture
def slot_template_path(tmp_path: Path) -> Path:
    path = tmp_path / "slots.cpp.in"
    path.write_text(SLOT_TEMPLATE, encoding="utf-8")
    return path
