"""
Composition resolver — selection in, ordered generation plan out.

Stages:
    1. project     project templates for the selection axes, by composition order
    2. selection   pages, features, services, testing, in selection order;
                   each entry is preceded by its requirement (single hop)
                   and its dependencies, then gets its dependency slots linked
    3. expansion   composition templates whose query matches an item are
                   spliced in right after it, by composition order

The plan is de-duplicated on (name, template identity). Nothing outside
the call is mutated; the caller owns the returned list.
"""

from __future__ import annotations

import logging

from templatestudio.core.context import FailurePolicy, ResolutionContext
from templatestudio.core.errors import DependencyMissingError, TemplateNotFoundError
from templatestudio.core.models.generation import GenerationItem
from templatestudio.core.models.selection import Selection, SelectionEntry
from templatestudio.core.models.template import (
    TemplateDescriptor,
    TemplateLicense,
    TemplateType,
)
from templatestudio.core.services.composition.builder import GenerationItemBuilder
from templatestudio.core.services.composition.catalog import build_composition_catalog
from templatestudio.core.services.composition.query import QueryableContext

logger = logging.getLogger(__name__)


class _PlanQueue:
    """Plan under construction, with an O(1) (name, identity) index."""

    def __init__(self) -> None:
        self.items: list[GenerationItem] = []
        self._keys: set[tuple[str, str]] = set()

    def append(self, item: GenerationItem) -> None:
        self.items.append(item)
        self._keys.add(item.key)

    def contains(self, name: str, identity: str) -> bool:
        return (name, identity) in self._keys

    def first_with_identity(self, identity: str) -> GenerationItem | None:
        for item in self.items:
            if item.identity == identity:
                return item
        return None


class CompositionResolver:
    """Resolves selections against the context's template catalog."""

    def __init__(self, context: ResolutionContext):
        self._context = context

    # ── Public API ──────────────────────────────────────────────

    def compose(self, selection: Selection) -> list[GenerationItem]:
        """Build the full plan for a new project.

        Returns an empty plan if project type or front-end framework
        is missing.
        """
        return self._compose(selection, new_item_flow=False)

    def compose_new_item(self, selection: Selection) -> list[GenerationItem]:
        """Build the plan for adding items to an existing project.

        Same as ``compose`` without the project stage.
        """
        return self._compose(selection, new_item_flow=True)

    def get_all_licenses(self, selection: Selection) -> list[TemplateLicense]:
        """Distinct licenses across the composed plan, first-seen order."""
        licenses: dict[TemplateLicense, None] = {}
        for item in self.compose(selection):
            for lic in item.template.licenses:
                licenses.setdefault(lic, None)
        return list(licenses)

    def get_all_required_versions(self, selection: Selection) -> list[str]:
        """Distinct required tool/runtime versions, first-seen order."""
        versions: dict[str, None] = {}
        for item in self.compose(selection):
            for version in item.template.required_versions:
                versions.setdefault(version, None)
        return list(versions)

    # ── Stages ──────────────────────────────────────────────────

    def _compose(self, selection: Selection, new_item_flow: bool) -> list[GenerationItem]:
        if not selection.is_complete:
            logger.info("Incomplete selection (project type or front end missing), empty plan")
            return []

        builder = GenerationItemBuilder(self._context, selection, new_item_flow)
        queue = _PlanQueue()

        if not new_item_flow:
            self._add_project(selection, builder, queue)
        for category in selection.categories:
            self._add_templates(category, selection, builder, queue)

        plan = self._add_composition_items(queue.items, selection, builder)
        logger.info(
            "Composed %d items (%d before expansion) for %s/%s",
            len(plan), len(queue.items), selection.project_type,
            selection.front_end_framework,
        )
        return plan

    def _axes(self, selection: Selection) -> tuple[str, str, str, str]:
        return (
            selection.platform,
            selection.project_type,
            selection.front_end_framework,
            selection.back_end_framework,
        )

    def _find(self, identity: str) -> TemplateDescriptor:
        template = self._context.templates.find_by_identity(identity)
        if template is None:
            raise TemplateNotFoundError(
                f"Template '{identity}' not found in the catalog", identity,
            )
        return template

    def _add_project(
        self,
        selection: Selection,
        builder: GenerationItemBuilder,
        queue: _PlanQueue,
    ) -> None:
        project_templates = self._context.templates.query_by_type_platform_frameworks(
            TemplateType.PROJECT, *self._axes(selection),
        )
        for template in sorted(project_templates, key=lambda t: t.composition_order):
            queue.append(builder.build(self._context.project_name, template))
        logger.debug("Project stage: %d templates", len(project_templates))

    def _add_templates(
        self,
        entries: list[SelectionEntry],
        selection: Selection,
        builder: GenerationItemBuilder,
        queue: _PlanQueue,
    ) -> None:
        for entry in entries:
            if queue.contains(entry.name, entry.template_id):
                continue

            template = self._find(entry.template_id)
            self._add_required_template(template, selection, builder, queue)
            self._add_dependency_templates(template, selection, builder, queue)

            item = builder.build(entry.name, template, with_casing=False)
            self._link_dependency_params(item, queue)
            builder.apply_casing(item)
            queue.append(item)

    def _add_required_template(
        self,
        template: TemplateDescriptor,
        selection: Selection,
        builder: GenerationItemBuilder,
        queue: _PlanQueue,
    ) -> None:
        """Queue the first selected entry satisfying any requirement.

        Single hop: the required template's own requirements and
        dependencies are not expanded here.
        """
        requirements = self._context.templates.requirements_of(
            template, *self._axes(selection),
        )
        if not requirements:
            return

        entry = selection.find_entry({r.identity for r in requirements})
        if entry is None:
            logger.debug("No selected entry satisfies requirements of '%s'", template.identity)
            return
        if queue.contains(entry.name, entry.template_id):
            return

        queue.append(builder.build(entry.name, self._find(entry.template_id)))

    def _add_dependency_templates(
        self,
        template: TemplateDescriptor,
        selection: Selection,
        builder: GenerationItemBuilder,
        queue: _PlanQueue,
    ) -> None:
        dependencies = self._context.templates.dependencies_of(
            template, *self._axes(selection),
        )
        for dependency in dependencies:
            entry = selection.find_entry({dependency.identity})
            if entry is None:
                self._report_missing_dependency(template, dependency)
                continue
            if queue.contains(entry.name, entry.template_id):
                continue
            queue.append(builder.build(entry.name, self._find(entry.template_id)))

    def _report_missing_dependency(
        self,
        template: TemplateDescriptor,
        dependency: TemplateDescriptor,
    ) -> None:
        message = (
            f"Template '{template.identity}' depends on '{dependency.identity}', "
            "which is not in the selection"
        )
        if self._context.failure_policy is FailurePolicy.FAIL_FAST:
            raise DependencyMissingError(message, template.identity)

        logger.warning(message)
        self._context.diagnostics.track(message, template_identity=template.identity)

    def _link_dependency_params(self, item: GenerationItem, queue: _PlanQueue) -> None:
        """Point dependency-named parameters at the chosen dependency item.

        Only dependencies whose identity is also a declared parameter
        name are linked. A duplicate key here is a catalog bug.
        """
        for dependency_id in item.template.dependencies:
            if not item.template.has_parameter(dependency_id):
                continue
            dependency_item = queue.first_with_identity(dependency_id)
            if dependency_item is None:
                logger.debug(
                    "Dependency '%s' of '%s' not in plan, slot left unlinked",
                    dependency_id, item.identity,
                )
                continue
            item.parameters.set_or_fail(dependency_id, dependency_item.name)

    # ── Rule-based expansion ────────────────────────────────────

    def _add_composition_items(
        self,
        plan: list[GenerationItem],
        selection: Selection,
        builder: GenerationItemBuilder,
    ) -> list[GenerationItem]:
        catalog = build_composition_catalog(self._context.templates, selection.platform)
        context = QueryableContext.from_selection(selection)

        combined: list[GenerationItem] = []
        seen: set[tuple[str, str]] = {item.key for item in plan}

        for item in plan:
            combined.append(item)
            context.set("ishomepage", "true" if item.name == selection.home_name else "false")

            batch: list[GenerationItem] = []
            for entry in catalog:
                if entry.template.language != selection.language:
                    continue
                if not entry.query.match(item.template, context):
                    continue
                if (item.name, entry.template.identity) in seen:
                    logger.debug(
                        "Skipping duplicate composition %s for %s",
                        entry.template.identity, item.name,
                    )
                    continue

                logger.debug(
                    "Composition '%s' matched %s (%s)",
                    entry.template.identity, item.name, item.identity,
                )
                composed = self._compose_onto(item, entry.template, builder)
                seen.add(composed.key)
                batch.append(composed)

            batch.sort(key=lambda g: g.template.composition_order)
            combined.extend(batch)

        return combined

    def _compose_onto(
        self,
        source: GenerationItem,
        target: TemplateDescriptor,
        builder: GenerationItemBuilder,
    ) -> GenerationItem:
        """Build a composition item for *target* attached to *source*.

        Exports overwrite on *source*; the new item then inherits only
        the *source* parameters it doesn't already have.
        """
        for key, value in target.exports.items():
            source.parameters.set(key, value)

        composed = builder.build(source.name, target)
        for key, value in source.parameters.items():
            composed.parameters.set_if_absent(key, value)
        builder.apply_casing(composed)
        return composed
