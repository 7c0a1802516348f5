"""
Selection loader — reads a wizard selection from YAML or JSON.

The file may hold the selection at the top level or under a
``selection:`` key, next to an optional ``project:`` block::

    project:
      name: MyApp
      namespace: Contoso.MyApp
    selection:
      projectType: SplitView
      frontEndFramework: MVVMBasic
      ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from templatestudio.core.config.loader import ConfigError, read_yaml_mapping
from templatestudio.core.models.selection import Selection

logger = logging.getLogger(__name__)


@dataclass
class SelectionFile:
    """A parsed selection file."""

    selection: Selection
    project_name: str = ""
    project_namespace: str = ""


def parse_selection(data: dict[str, Any], source: str = "selection") -> SelectionFile:
    """Validate a raw mapping into a SelectionFile.

    Raises:
        ConfigError: If the selection is invalid.
    """
    raw_selection = data.get("selection", data)
    project = data.get("project") or {}
    if not isinstance(raw_selection, dict) or not isinstance(project, dict):
        raise ConfigError(f"Expected mappings for 'selection' and 'project' in {source}")

    try:
        selection = Selection.model_validate(raw_selection)
    except ValidationError as e:
        raise ConfigError(f"Invalid selection in {source}: {e}") from e

    return SelectionFile(
        selection=selection,
        project_name=str(project.get("name") or ""),
        project_namespace=str(project.get("namespace") or ""),
    )


def load_selection(path: Path) -> SelectionFile:
    """Load a selection file.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if not path.is_file():
        raise ConfigError(f"Selection file not found: {path}")

    logger.debug("Loading selection from %s", path)
    result = parse_selection(read_yaml_mapping(path), str(path))
    s = result.selection
    logger.info(
        "Loaded selection %s/%s: %d pages, %d features, %d services, %d testing",
        s.project_type, s.front_end_framework,
        len(s.pages), len(s.features), len(s.services), len(s.testing),
    )
    return result
