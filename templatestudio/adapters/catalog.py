"""
Template repository — in-memory TemplateAccessor over a loaded catalog.

Built once per sync from a TemplateCatalog and never mutated after,
so it is safe to share across concurrent compositions.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from templatestudio.adapters.base import TemplateAccessor
from templatestudio.core.models.catalog import ProjectTypeItem, TemplateCatalog
from templatestudio.core.models.template import TemplateDescriptor, TemplateType

logger = logging.getLogger(__name__)


class TemplateRepository(TemplateAccessor):
    """Catalog-backed template accessor.

    Features:
        - Identity lookup (O(1))
        - Applicability filtering by platform, project type, frameworks
        - Transitive dependency closure, dependencies before dependents
    """

    def __init__(self, catalog: TemplateCatalog):
        self._catalog = catalog
        self._by_identity: dict[str, TemplateDescriptor] = {}
        for template in catalog.templates:
            if template.identity in self._by_identity:
                logger.warning(
                    "Duplicate template identity '%s' in catalog; keeping the first",
                    template.identity,
                )
                continue
            self._by_identity[template.identity] = template

    @property
    def version(self) -> str:
        """Catalog version string."""
        return self._catalog.version

    @property
    def templates(self) -> list[TemplateDescriptor]:
        return list(self._catalog.templates)

    @property
    def project_types(self) -> list[ProjectTypeItem]:
        return list(self._catalog.project_types)

    def find_by_identity(self, identity: str) -> TemplateDescriptor | None:
        return self._by_identity.get(identity)

    def query_by_type_platform_frameworks(
        self,
        template_type: TemplateType,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        return [
            t for t in self._catalog.templates
            if t.type == template_type
            and t.matches(platform, project_type, frontend, backend)
        ]

    def dependencies_of(
        self,
        template: TemplateDescriptor,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        collected: list[TemplateDescriptor] = []
        visited: set[str] = {template.identity}
        self._collect_dependencies(
            template, (platform, project_type, frontend, backend),
            visited, collected,
        )
        return collected

    def _collect_dependencies(
        self,
        template: TemplateDescriptor,
        axes: tuple[str, str, str, str],
        visited: set[str],
        collected: list[TemplateDescriptor],
    ) -> None:
        """Walk the dependency tree depth-first.

        Mutates *visited* (cycle guard) and *collected* in place.
        A dependency's own dependencies land before it.
        """
        for dep_id in template.dependencies:
            if dep_id in visited:
                continue
            visited.add(dep_id)

            dependency = self._by_identity.get(dep_id)
            if dependency is None:
                logger.warning(
                    "Template '%s' depends on '%s' which is not in the catalog",
                    template.identity, dep_id,
                )
                continue
            if not dependency.matches(*axes):
                logger.debug(
                    "Dependency '%s' of '%s' does not apply to %s",
                    dep_id, template.identity, axes,
                )
                continue

            self._collect_dependencies(dependency, axes, visited, collected)
            collected.append(dependency)

    def requirements_of(
        self,
        template: TemplateDescriptor,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        requirements: list[TemplateDescriptor] = []
        for req_id in template.requirements:
            requirement = self._by_identity.get(req_id)
            if requirement is None:
                logger.warning(
                    "Template '%s' requires '%s' which is not in the catalog",
                    template.identity, req_id,
                )
                continue
            if requirement.matches(platform, project_type, frontend, backend):
                requirements.append(requirement)
        return requirements

    def query_all(
        self, predicate: Callable[[TemplateDescriptor], bool],
    ) -> list[TemplateDescriptor]:
        return [t for t in self._catalog.templates if predicate(t)]

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} version={self.version!r} "
            f"templates={len(self._by_identity)}>"
        )
