"""
Domain models — types shared by the resolver, loaders and UIs.

All models are re-exported here for convenient access:

    from templatestudio.core.models import Selection, TemplateDescriptor, GenerationItem
"""

from templatestudio.core.models.catalog import ProjectTypeItem, TemplateCatalog
from templatestudio.core.models.generation import GenerationItem, ParameterMap
from templatestudio.core.models.selection import Selection, SelectionEntry
from templatestudio.core.models.template import (
    TemplateDescriptor,
    TemplateLicense,
    TemplateOutputType,
    TemplateType,
    TextCasing,
    TextCasingType,
)

__all__ = [
    # catalog.py
    "ProjectTypeItem",
    "TemplateCatalog",
    # generation.py
    "GenerationItem",
    "ParameterMap",
    # selection.py
    "Selection",
    "SelectionEntry",
    # template.py
    "TemplateDescriptor",
    "TemplateLicense",
    "TemplateOutputType",
    "TemplateType",
    "TextCasing",
    "TextCasingType",
]
