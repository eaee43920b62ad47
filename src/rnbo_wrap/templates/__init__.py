"""
Template access utilities for rnbo_wrap.

Templates are bundled with the package and accessed via these utilities.
"""

import os
from pathlib import Path

# Overrides the bundled operator template when no path is given explicitly
TEMPLATE_ENV_VAR = "RNBO_WRAP_TEMPLATE"

DEFAULT_TEMPLATE_NAME = "MetaSoundOperator.cpp.in"


def get_templates_dir() -> Path:
    """
    Get the path to the templates directory.

    Returns:
        Path to the templates directory within the package.
    """
    return Path(__file__).parent


def get_metasound_templates_dir() -> Path:
    """
    Get the path to MetaSound operator templates.

    Returns:
        Path to the metasound/ templates directory.
    """
    return get_templates_dir() / "metasound"


def get_default_template_path() -> Path:
    """
    Resolve the operator template used when none is given.

    $RNBO_WRAP_TEMPLATE wins over the bundled template.
    """
    env_template = os.environ.get(TEMPLATE_ENV_VAR)
    if env_template:
        return Path(env_template)
    return get_metasound_templates_dir() / DEFAULT_TEMPLATE_NAME


def list_metasound_templates() -> list[Path]:
    """
    List all MetaSound template files.

    Returns:
        List of paths to template files.
    """
    ms_dir = get_metasound_templates_dir()
    if not ms_dir.is_dir():
        return []
    return sorted(ms_dir.glob("*.in"))
