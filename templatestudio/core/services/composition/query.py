"""
Composition queries — declarative match rules for glue templates.

A composition template carries a filter string such as::

    $type == page & page == ts.Page.Grid|ts.Page.Chart & ishomepage == true

which is parsed once into a small expression tree and evaluated for
every generation item in the plan against:

    - the candidate item's template metadata  (``$``-prefixed fields)
    - the queryable context built from the selection  (plain fields)

Grammar::

    query   := clause ( '&' clause )*
    clause  := field op value
    field   := name | '$' name
    op      := '==' | '!=' | '='
    value   := token ( '|' token )*

Values on both sides are pipe-split into sets; ``==`` holds when the
sets intersect, ``!=`` when they don't. Names and values compare
case-insensitively. A property that is not present never satisfies
``==``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from templatestudio.core.errors import CompositionQueryError
from templatestudio.core.models.selection import Selection
from templatestudio.core.models.template import TemplateDescriptor

# Context properties the resolver populates
KNOWN_PROPERTIES = (
    "projecttype",
    "page",
    "feature",
    "service",
    "testing",
    "frontendframework",
    "backendframework",
    "ishomepage",
)

_CLAUSE = re.compile(r"^\s*(\$?[\w.\-]+)\s*(==|!=|=)\s*(.*?)\s*$")


# ── Queryable context ───────────────────────────────────────────


class QueryableContext:
    """Ordered property bag summarizing a selection.

    Keys are stored lowercase. The category properties hold the
    pipe-joined template identities chosen in that category.
    """

    def __init__(self) -> None:
        self._props: dict[str, str] = {}

    @classmethod
    def from_selection(cls, selection: Selection) -> "QueryableContext":
        context = cls()
        context.set("projecttype", selection.project_type)
        context.set("page", "|".join(e.template_id for e in selection.pages))
        context.set("feature", "|".join(e.template_id for e in selection.features))
        context.set("service", "|".join(e.template_id for e in selection.services))
        context.set("testing", "|".join(e.template_id for e in selection.testing))
        if selection.front_end_framework:
            context.set("frontendframework", selection.front_end_framework)
        if selection.back_end_framework:
            context.set("backendframework", selection.back_end_framework)
        return context

    def set(self, name: str, value: str) -> None:
        """Add or update a property."""
        self._props[name.lower()] = value

    def get(self, name: str) -> str | None:
        return self._props.get(name.lower())

    def to_dict(self) -> dict[str, str]:
        return dict(self._props)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._props

    def __repr__(self) -> str:
        return f"QueryableContext({self._props!r})"


# ── Expression tree ─────────────────────────────────────────────


def _as_set(value: str | None) -> set[str]:
    if value is None:
        return set()
    return {v.strip().lower() for v in value.split("|") if v.strip()}


def _template_field(template: TemplateDescriptor, name: str) -> str | None:
    """Read a ``$`` metadata field from a candidate template."""
    fields = {
        "identity": template.identity,
        "name": template.name,
        "type": template.type.value,
        "outputtype": template.output_type.value,
        "language": template.language,
        "platform": template.platform,
    }
    if name in fields:
        return fields[name]
    for tag, value in template.tags.items():
        if tag.lower() == name:
            return value
    return None


@dataclass(frozen=True)
class _Clause:
    field: str
    metadata: bool = False
    negated: bool = False

    def _lookup(self, template: TemplateDescriptor, context: QueryableContext) -> str | None:
        if self.metadata:
            return _template_field(template, self.field)
        return context.get(self.field)

    def _compare(self, actual: set[str], wanted: set[str]) -> bool:
        hit = bool(actual & wanted)
        return not hit if self.negated else hit


@dataclass(frozen=True)
class Equals(_Clause):
    """``field == value`` — the property (a set) contains the value."""

    value: str = ""

    def match(self, template: TemplateDescriptor, context: QueryableContext) -> bool:
        return self._compare(_as_set(self._lookup(template, context)), {self.value.lower()})


@dataclass(frozen=True)
class MemberOf(_Clause):
    """``field == a|b|c`` — the property intersects the value set."""

    values: tuple[str, ...] = ()

    def match(self, template: TemplateDescriptor, context: QueryableContext) -> bool:
        wanted = {v.lower() for v in self.values}
        return self._compare(_as_set(self._lookup(template, context)), wanted)


@dataclass(frozen=True)
class AllOf:
    """Conjunction of clauses."""

    clauses: tuple[Equals | MemberOf, ...]

    def match(self, template: TemplateDescriptor, context: QueryableContext) -> bool:
        return all(c.match(template, context) for c in self.clauses)


# ── Parsed query ────────────────────────────────────────────────


@dataclass(frozen=True)
class CompositionQuery:
    """A parsed composition filter."""

    raw: str
    root: AllOf

    @classmethod
    def parse(cls, raw: str, template_identity: str = "") -> "CompositionQuery":
        """Parse a filter string.

        Raises:
            CompositionQueryError: On an empty filter or a malformed clause.
        """
        if not raw or not raw.strip():
            raise CompositionQueryError("Empty composition filter", template_identity)

        clauses: list[Equals | MemberOf] = []
        for part in raw.split("&"):
            if not part.strip():
                # tolerate '&&'
                continue
            clauses.append(_parse_clause(part, raw, template_identity))

        if not clauses:
            raise CompositionQueryError(
                f"No clauses in composition filter '{raw}'", template_identity,
            )
        return cls(raw=raw, root=AllOf(tuple(clauses)))

    def match(self, template: TemplateDescriptor, context: QueryableContext) -> bool:
        return self.root.match(template, context)

    @property
    def context_fields(self) -> Iterator[str]:
        """Names of the context properties this query reads."""
        for clause in self.root.clauses:
            if not clause.metadata:
                yield clause.field


def _parse_clause(part: str, raw: str, template_identity: str) -> Equals | MemberOf:
    m = _CLAUSE.match(part)
    if m is None:
        raise CompositionQueryError(
            f"Malformed clause '{part.strip()}' in composition filter '{raw}'",
            template_identity,
        )
    field, op, value = m.groups()
    metadata = field.startswith("$")
    name = field.lstrip("$").lower()
    values = tuple(v.strip() for v in value.split("|") if v.strip())
    if not values:
        raise CompositionQueryError(
            f"Clause '{part.strip()}' has no value in composition filter '{raw}'",
            template_identity,
        )

    negated = op == "!="
    if len(values) == 1:
        return Equals(field=name, metadata=metadata, negated=negated, value=values[0])
    return MemberOf(field=name, metadata=metadata, negated=negated, values=values)
