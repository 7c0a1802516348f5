"""
Catalog model — the synced set of template descriptors.

Loaded from catalog.yml (or a directory of template.yml files). The
catalog version is stamped into project items as ``wts.templatesVersion``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from templatestudio.core.models.template import TemplateDescriptor


class ProjectTypeItem(BaseModel):
    """A project archetype the catalog offers (shown by the wizard)."""

    name: str
    display_name: str = ""
    description: str = ""
    image_path: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.name


class TemplateCatalog(BaseModel):
    """All templates known to one synced catalog."""

    version: str = "0.0.0"
    project_types: list[ProjectTypeItem] = Field(default_factory=list)
    templates: list[TemplateDescriptor] = Field(default_factory=list)

    def get_template(self, identity: str) -> TemplateDescriptor | None:
        """Look up a template by identity."""
        for template in self.templates:
            if template.identity == identity:
                return template
        return None

    @property
    def identities(self) -> list[str]:
        return [t.identity for t in self.templates]
