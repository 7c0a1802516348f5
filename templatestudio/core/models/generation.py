"""
Generation item model — one resolved, parameterized unit of a plan.

A plan is an ordered list of generation items; the file-emission stage
materializes them in order. Items are created and mutated only inside
one composition call, then handed to the caller.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from templatestudio.core.errors import DuplicateParameterError
from templatestudio.core.models.template import TemplateDescriptor


class ParameterMap:
    """Ordered ``str -> str`` parameter mapping.

    Writers choose their duplicate-key semantics explicitly:

        set            overwrite whatever is there
        set_if_absent  keep an existing value, return whether it wrote
        set_or_fail    raise DuplicateParameterError on an existing key
    """

    def __init__(self, owner: str = "") -> None:
        self._owner = owner
        self._values: dict[str, str] = {}

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def set_if_absent(self, key: str, value: str) -> bool:
        if key in self._values:
            return False
        self._values[key] = value
        return True

    def set_or_fail(self, key: str, value: str) -> None:
        if key in self._values:
            raise DuplicateParameterError(key, self._owner)
        self._values[key] = value

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def items(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ParameterMap({self._values!r})"


@dataclass
class GenerationItem:
    """A named template instance with its resolved parameters.

    Attributes:
        name:       Display name (project name, page name, ...).
        template:   The catalog descriptor this item instantiates.
        parameters: Parameters handed to the template engine.
    """

    name: str
    template: TemplateDescriptor
    parameters: ParameterMap = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.parameters is None:
            self.parameters = ParameterMap(owner=self.template.identity)

    @property
    def identity(self) -> str:
        return self.template.identity

    @property
    def key(self) -> tuple[str, str]:
        """De-duplication key within one plan."""
        return (self.name, self.template.identity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "templateIdentity": self.template.identity,
            "templateType": self.template.type.value,
            "compositionOrder": self.template.composition_order,
            "parameters": self.parameters.to_dict(),
        }
