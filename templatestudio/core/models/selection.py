"""
Selection model — what the user picked in the wizard.

A selection is caller-owned and read-only for one composition call.
Both snake_case and camelCase keys are accepted so the same model
serves YAML selection files and JSON API payloads.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_SELECTION_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class SelectionEntry(BaseModel):
    """One chosen artifact: a display name and the template behind it."""

    model_config = _SELECTION_CONFIG

    name: str
    template_id: str


class Selection(BaseModel):
    """The user's full choice of project archetype and artifacts."""

    model_config = _SELECTION_CONFIG

    project_type: str = ""
    platform: str = ""
    language: str = ""
    front_end_framework: str = ""
    back_end_framework: str = ""
    home_name: str = ""

    pages: list[SelectionEntry] = Field(default_factory=list)
    features: list[SelectionEntry] = Field(default_factory=list)
    services: list[SelectionEntry] = Field(default_factory=list)
    testing: list[SelectionEntry] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """A plan can only be built once project type and front end are set."""
        return bool(self.project_type) and bool(self.front_end_framework)

    @property
    def categories(self) -> list[list[SelectionEntry]]:
        """The four selection categories, in composition order."""
        return [self.pages, self.features, self.services, self.testing]

    @property
    def items(self) -> Iterator[SelectionEntry]:
        """Every selected entry: pages, features, services, testing."""
        for category in self.categories:
            yield from category

    def find_entry(self, template_ids: set[str] | list[str]) -> SelectionEntry | None:
        """Return the first selected entry whose template is in *template_ids*."""
        for entry in self.items:
            if entry.template_id in template_ids:
                return entry
        return None
