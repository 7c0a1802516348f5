"""
Template descriptor model — catalog metadata for one generatable artifact.

Descriptors are loaded from the template catalog (catalog.yml or a
directory of template.yml files) and are read-only for the lifetime
of a composition call.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Applicability wildcard — a filter list containing this matches anything
ALL = "all"


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value: object) -> "_CaseInsensitiveEnum | None":
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class TemplateType(_CaseInsensitiveEnum):
    """What kind of artifact a template produces."""

    PROJECT = "project"
    PAGE = "page"
    FEATURE = "feature"
    SERVICE = "service"
    TESTING = "testing"
    COMPOSITION = "composition"


class TemplateOutputType(_CaseInsensitiveEnum):
    """Whether a template emits a whole project or an item inside one."""

    PROJECT = "project"
    ITEM = "item"


class TextCasingType(_CaseInsensitiveEnum):
    KEBAB = "kebab"
    SNAKE = "snake"
    PASCAL = "pascal"
    CAMEL = "camel"
    LOWER = "lower"
    UPPER = "upper"
    TITLE = "title"


class TextCasing(BaseModel):
    """A derived parameter computed by re-casing another value.

    ``key`` is either the sentinel ``"sourceName"`` (the item's own name)
    or the suffix of a ``wts.<key>`` parameter already on the item.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    type: TextCasingType
    parameter: str = ""

    @property
    def parameter_name(self) -> str:
        """Target parameter key, defaulting to ``wts.<key>.casing.<type>``."""
        return self.parameter or f"wts.{self.key}.casing.{self.type.value}"

    def transform(self, value: str) -> str:
        """Apply this rule's casing to *value*."""
        from templatestudio.core.services.casing import apply_casing

        return apply_casing(self.type, value)


class TemplateLicense(BaseModel):
    """A license a template's generated code is subject to."""

    model_config = ConfigDict(frozen=True)

    text: str
    url: str = ""


class TemplateDescriptor(BaseModel):
    """Catalog metadata for one template.

    The applicability filters (platform, project types, frameworks)
    decide which selections a template can take part in. The
    composition fields are only meaningful for ``type: composition``.
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    name: str = ""
    description: str = ""
    type: TemplateType = TemplateType.PAGE
    output_type: TemplateOutputType = TemplateOutputType.ITEM
    composition_order: int = 0

    # Applicability
    platform: str = ""
    language: str = ""
    project_types: list[str] = Field(default_factory=list)
    frontend_frameworks: list[str] = Field(default_factory=list)
    backend_frameworks: list[str] = Field(default_factory=list)

    # Parameters and relationships
    parameters: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    exports: dict[str, str] = Field(default_factory=dict)
    casings: list[TextCasing] = Field(default_factory=list)

    # Reporting
    licenses: list[TemplateLicense] = Field(default_factory=list)
    required_versions: list[str] = Field(default_factory=list)

    # Composition-only
    composition_filter: str = ""
    tags: dict[str, str] = Field(default_factory=dict)

    def has_parameter(self, name: str) -> bool:
        """Check if the template declares a parameter by this name."""
        return name in self.parameters

    def matches(
        self,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> bool:
        """Check the template's applicability filters against a selection."""
        if self.platform and platform and self.platform.lower() != platform.lower():
            return False
        return (
            _applies(self.project_types, project_type)
            and _applies(self.frontend_frameworks, frontend)
            and _applies(self.backend_frameworks, backend)
        )


def _applies(allowed: list[str], value: str) -> bool:
    """An empty filter, an ``all`` entry, or an empty value always applies."""
    if not value or not allowed:
        return True
    lowered = {a.lower() for a in allowed}
    return ALL in lowered or value.lower() in lowered
