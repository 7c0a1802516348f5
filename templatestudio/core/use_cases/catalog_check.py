"""
Catalog check use case — validate a template catalog and report issues.

Catches the authoring mistakes that would otherwise only surface
during a composition: unparseable composition filters, dangling
dependency/requirement identities, duplicate identities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from templatestudio.core.config.loader import ConfigError, find_catalog_file, load_catalog
from templatestudio.core.errors import CompositionQueryError
from templatestudio.core.models.catalog import TemplateCatalog
from templatestudio.core.models.template import TemplateType
from templatestudio.core.services.composition import params
from templatestudio.core.services.composition.query import KNOWN_PROPERTIES, CompositionQuery

# Parameters the builder injects itself; casing rules may always read them
_INJECTED_PARAMS = {
    params.ROOT_NAMESPACE,
    params.PROJECT_NAME,
    params.HOME_PAGE_NAME,
    params.USER_NAME,
    params.WIZARD_VERSION,
    params.TEMPLATES_VERSION,
    params.PROJECT_TYPE,
    params.FRONTEND_FRAMEWORK,
    params.BACKEND_FRAMEWORK,
    params.PLATFORM,
}


@dataclass
class CatalogCheckResult:
    """Result of catalog validation."""

    valid: bool = False
    catalog: TemplateCatalog | None = None
    catalog_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "catalog_path": str(self.catalog_path) if self.catalog_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "version": self.catalog.version if self.catalog else None,
            "template_count": len(self.catalog.templates) if self.catalog else 0,
        }


def check_catalog(catalog_path: Path | None = None) -> CatalogCheckResult:
    """Load a catalog and run semantic checks over it.

    Args:
        catalog_path: Optional explicit catalog file or directory.
    """
    result = CatalogCheckResult()

    if catalog_path is None:
        catalog_path = find_catalog_file()
    if catalog_path is None:
        result.errors.append("No catalog.yml found.")
        return result
    result.catalog_path = catalog_path

    try:
        catalog = load_catalog(catalog_path)
    except ConfigError as e:
        result.errors.append(str(e))
        return result
    result.catalog = catalog

    result.errors.extend(_check_identities(catalog))
    errors, warnings = _check_references(catalog)
    result.errors.extend(errors)
    result.warnings.extend(warnings)
    errors, warnings = _check_compositions(catalog)
    result.errors.extend(errors)
    result.warnings.extend(warnings)

    if not catalog.templates:
        result.warnings.append("Catalog has no templates.")
    if not any(t.type == TemplateType.PROJECT for t in catalog.templates):
        result.warnings.append("Catalog has no project templates.")

    result.valid = len(result.errors) == 0
    return result


def _check_identities(catalog: TemplateCatalog) -> list[str]:
    ids = catalog.identities
    dupes = {i for i in ids if ids.count(i) > 1}
    if dupes:
        return [f"Duplicate template identities: {', '.join(sorted(dupes))}"]
    return []


def _check_references(catalog: TemplateCatalog) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    known = set(catalog.identities)

    for t in catalog.templates:
        for dep in t.dependencies:
            if dep not in known:
                errors.append(f"Template '{t.identity}' depends on unknown template '{dep}'")
            elif dep == t.identity:
                errors.append(f"Template '{t.identity}' depends on itself")
        for req in t.requirements:
            if req not in known:
                errors.append(f"Template '{t.identity}' requires unknown template '{req}'")
        for casing in t.casings:
            source = f"{params.PARAM_PREFIX}{casing.key}"
            if casing.key == params.SOURCE_NAME or source in _INJECTED_PARAMS:
                continue
            if source not in t.parameters:
                warnings.append(
                    f"Template '{t.identity}' casing reads 'wts.{casing.key}', "
                    "which it does not declare"
                )

    return errors, warnings


def _check_compositions(catalog: TemplateCatalog) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []

    for t in catalog.templates:
        if t.type != TemplateType.COMPOSITION:
            if t.composition_filter:
                warnings.append(
                    f"Template '{t.identity}' has a composition filter but is a {t.type.value} template"
                )
            continue

        if not t.composition_filter:
            errors.append(f"Composition template '{t.identity}' has no composition filter")
            continue
        try:
            query = CompositionQuery.parse(t.composition_filter, t.identity)
        except CompositionQueryError as e:
            errors.append(f"Template '{t.identity}': {e}")
            continue

        unknown = sorted(set(query.context_fields) - set(KNOWN_PROPERTIES))
        if unknown:
            warnings.append(
                f"Composition '{t.identity}' reads unknown context properties: "
                f"{', '.join(unknown)}"
            )

    return errors, warnings
