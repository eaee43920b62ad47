"""
rnbo_wrap - Generate Unreal MetaSound nodes from RNBO C++ exports.

This package provides tools to:
- Read the description.json of each RNBO export
- Recover the export's factory symbol from its generated sources
- Render one MetaSound operator per export from a text template
- Aggregate all exports into a single generated translation unit
"""

from rnbo_wrap.core.descriptor import ExportDescriptor, read_descriptor
from rnbo_wrap.core.generator import ExportGenerator
from rnbo_wrap.core.pipeline import Pipeline, PipelineConfig
from rnbo_wrap.core.template import TemplateDocument
from rnbo_wrap.errors import RnboWrapError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ExportDescriptor",
    "read_descriptor",
    "ExportGenerator",
    "Pipeline",
    "PipelineConfig",
    "TemplateDocument",
    "RnboWrapError",
]
