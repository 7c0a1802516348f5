"""
Catalog loader — reads the template catalog into domain models.

Two layouts are supported::

    catalog.yml                 # single file
        version: "1.4.0"
        project_types: [...]
        templates: [...]

    templates/                  # directory
        catalog.yml             # optional header (version, project_types, templates)
        Page.Blank/
            template.yml        # one descriptor per folder
        Feature.Settings/
            template.yml

Descriptors from the header come first, then folder descriptors in
sorted folder order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from templatestudio.core.models.catalog import TemplateCatalog
from templatestudio.core.models.template import TemplateDescriptor

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.yml"
TEMPLATE_FILES = ("template.yml", "template.yaml")


class ConfigError(Exception):
    """Raised when a catalog or selection file is missing or invalid."""


def find_catalog_file(start_dir: Path | None = None) -> Path | None:
    """Search for catalog.yml starting from *start_dir*, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to catalog.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CATALOG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Read a YAML (or JSON) file that must contain a mapping.

    Raises:
        ConfigError: If the file is unreadable, invalid, or not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def load_catalog(path: Path | None = None) -> TemplateCatalog:
    """Load and validate a template catalog.

    Args:
        path: catalog.yml, or a directory of template folders.
            If None, searches upward from the working directory.

    Raises:
        ConfigError: If nothing is found or any file is invalid.
    """
    if path is None:
        path = find_catalog_file()
    if path is None:
        raise ConfigError(
            f"No {CATALOG_FILE} found. Pass --catalog or set TS_CATALOG."
        )

    if path.is_dir():
        return _load_catalog_dir(path)
    if not path.is_file():
        raise ConfigError(f"Catalog not found: {path}")

    logger.debug("Loading catalog from %s", path)
    catalog = _validate_catalog(read_yaml_mapping(path), path)
    logger.info("Loaded catalog v%s with %d templates", catalog.version, len(catalog.templates))
    return catalog


def _load_catalog_dir(catalog_dir: Path) -> TemplateCatalog:
    """Load an optional header plus every <folder>/template.yml."""
    header_path = catalog_dir / CATALOG_FILE
    header: dict[str, Any] = {}
    if header_path.is_file():
        header = read_yaml_mapping(header_path)

    catalog = _validate_catalog(header, header_path)
    templates = list(catalog.templates)

    for child in sorted(catalog_dir.iterdir()):
        if not child.is_dir():
            continue
        template_file = next(
            (child / name for name in TEMPLATE_FILES if (child / name).is_file()),
            None,
        )
        if template_file is None:
            continue
        templates.append(load_template(template_file))

    catalog = catalog.model_copy(update={"templates": templates})
    logger.info(
        "Discovered %d templates in %s (catalog v%s)",
        len(templates), catalog_dir, catalog.version,
    )
    return catalog


def load_template(path: Path) -> TemplateDescriptor:
    """Load a single template descriptor.

    Raises:
        ConfigError: If the file is invalid.
    """
    data = read_yaml_mapping(path)
    try:
        template = TemplateDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid template in {path}: {e}") from e
    logger.debug("Loaded template: %s from %s", template.identity, path)
    return template


def _validate_catalog(data: dict[str, Any], path: Path) -> TemplateCatalog:
    # YAML reads bare versions like 1.4 as floats
    if "version" in data and not isinstance(data["version"], str):
        data = {**data, "version": str(data["version"])}
    try:
        return TemplateCatalog.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid catalog in {path}: {e}") from e
