"""
Adapter base — the contracts between the resolver and its host.

The resolver never reads a catalog file or asks the OS who the user
is. It only talks to these two collaborators:

    TemplateAccessor   read-only queries over the template catalog
    HostShell          the environment the wizard runs in

Both are expected to be safe for concurrent reads if several
compositions run at once; the resolver itself holds no shared state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from templatestudio.core.models.template import TemplateDescriptor, TemplateType


class TemplateAccessor(ABC):
    """Read-only access to template metadata.

    To plug in a new catalog source:
        1. Subclass TemplateAccessor
        2. Implement the five query methods
        3. Pass it to a ResolutionContext
    """

    @abstractmethod
    def find_by_identity(self, identity: str) -> TemplateDescriptor | None:
        """Look up one template, or None if the catalog lacks it."""

    @abstractmethod
    def query_by_type_platform_frameworks(
        self,
        template_type: TemplateType,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        """All templates of a kind applicable to the given selection axes."""

    @abstractmethod
    def dependencies_of(
        self,
        template: TemplateDescriptor,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        """Every template *template* depends on, applicable to the axes."""

    @abstractmethod
    def requirements_of(
        self,
        template: TemplateDescriptor,
        platform: str,
        project_type: str,
        frontend: str,
        backend: str,
    ) -> list[TemplateDescriptor]:
        """Templates *template* requires, applicable to the axes."""

    @abstractmethod
    def query_all(
        self, predicate: Callable[[TemplateDescriptor], bool],
    ) -> list[TemplateDescriptor]:
        """Every template satisfying *predicate*, in catalog order."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class HostShell(ABC):
    """The host environment: active project and invoking user.

    Accessors are plain reads with no side effects. An empty string
    means "not available".
    """

    @abstractmethod
    def get_active_project_name(self) -> str:
        """Name of the project being generated or extended."""

    @abstractmethod
    def get_active_project_namespace(self) -> str:
        """Root namespace of an already-generated project (new-item flow)."""

    @abstractmethod
    def get_user_name(self) -> str:
        """Identity of the user running the wizard."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} project={self.get_active_project_name()!r}>"
