"""
Core modules for rnbo_wrap.
"""

from rnbo_wrap.core.descriptor import ExportDescriptor, ParameterInfo, read_descriptor
from rnbo_wrap.core.symbol import SymbolMatch, extract_symbol, require_symbol
from rnbo_wrap.core.template import Slot, TemplateDocument
from rnbo_wrap.core.generator import ExportGenerator, GeneratedUnit
from rnbo_wrap.core.pipeline import GenerationResult, Pipeline, PipelineConfig

__all__ = [
    "ExportDescriptor",
    "ParameterInfo",
    "read_descriptor",
    "SymbolMatch",
    "extract_symbol",
    "require_symbol",
    "Slot",
    "TemplateDocument",
    "ExportGenerator",
    "GeneratedUnit",
    "GenerationResult",
    "Pipeline",
    "PipelineConfig",
]
