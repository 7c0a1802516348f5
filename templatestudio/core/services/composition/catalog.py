"""
Composition catalog — every glue template for a platform, with its query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from templatestudio.adapters.base import TemplateAccessor
from templatestudio.core.models.template import TemplateDescriptor, TemplateType
from templatestudio.core.services.composition.query import CompositionQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositionCatalogEntry:
    query: CompositionQuery
    template: TemplateDescriptor


def build_composition_catalog(
    templates: TemplateAccessor,
    platform: str,
) -> list[CompositionCatalogEntry]:
    """Parse the composition filters of all composition templates.

    Raises:
        CompositionQueryError: If any filter is malformed.
    """
    platform_key = platform.lower()
    composition_templates = templates.query_all(
        lambda t: t.type == TemplateType.COMPOSITION
        and t.platform.lower() == platform_key
    )
    catalog = [
        CompositionCatalogEntry(
            query=CompositionQuery.parse(t.composition_filter, t.identity),
            template=t,
        )
        for t in composition_templates
    ]
    logger.debug("Composition catalog for '%s': %d templates", platform, len(catalog))
    return catalog
