"""
Compose use case — run the resolver for a UI layer.

Ties together the synced repository, a host shell, and the resolver,
and turns generation errors into a result object the CLI and web
layer can render. An incomplete selection is a success with an empty
plan, not an error.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from templatestudio import __version__
from templatestudio.adapters.base import HostShell
from templatestudio.adapters.catalog import TemplateRepository
from templatestudio.core.context import FailurePolicy, ResolutionContext
from templatestudio.core.errors import GenError
from templatestudio.core.models.generation import GenerationItem
from templatestudio.core.models.selection import Selection
from templatestudio.core.models.template import TemplateLicense
from templatestudio.core.observability.diagnostics import DiagnosticsReporter
from templatestudio.core.services.composition import CompositionResolver

logger = logging.getLogger(__name__)


def make_context(
    repository: TemplateRepository,
    shell: HostShell,
    failure_policy: FailurePolicy | None = None,
    diagnostics: DiagnosticsReporter | None = None,
) -> ResolutionContext:
    """Build a resolution context stamped with the repository's version.

    The generator version comes from TS_WIZARD_VERSION, defaulting to
    the package version.
    """
    return ResolutionContext(
        templates=repository,
        shell=shell,
        templates_version=repository.version,
        wizard_version=os.environ.get("TS_WIZARD_VERSION") or __version__,
        failure_policy=failure_policy or FailurePolicy.from_env(),
        diagnostics=diagnostics or DiagnosticsReporter(),
    )


@dataclass
class ComposeResult:
    """Result of a composition."""

    items: list[GenerationItem] = field(default_factory=list)
    incomplete: bool = False
    error: str | None = None
    template_identity: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        if self.error:
            return {"error": self.error, "templateIdentity": self.template_identity}
        return {
            "incomplete": self.incomplete,
            "count": len(self.items),
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class ReportResult:
    """Result of a license or required-version report."""

    values: list[Any] = field(default_factory=list)
    error: str | None = None
    template_identity: str = ""

    def to_dict(self) -> dict[str, Any]:
        if self.error:
            return {"error": self.error, "templateIdentity": self.template_identity}
        return {
            "count": len(self.values),
            "values": [
                v.model_dump() if isinstance(v, TemplateLicense) else v
                for v in self.values
            ],
        }


def run_compose(
    selection: Selection,
    context: ResolutionContext,
    new_item: bool = False,
) -> ComposeResult:
    """Compose a plan for *selection*.

    Args:
        selection: The wizard selection.
        context: Host collaborators and failure policy.
        new_item: Compose for an existing project (no project stage).

    Returns:
        ComposeResult with the plan, or an error naming the template.
    """
    result = ComposeResult(incomplete=not selection.is_complete)
    resolver = CompositionResolver(context)

    try:
        if new_item:
            result.items = resolver.compose_new_item(selection)
        else:
            result.items = resolver.compose(selection)
    except GenError as e:
        logger.error("Composition failed for %s: %s", e.template_identity or "-", e)
        result.error = str(e)
        result.template_identity = e.template_identity

    return result


def run_licenses(selection: Selection, context: ResolutionContext) -> ReportResult:
    """Distinct licenses of every template in the composed plan."""
    result = ReportResult()
    try:
        result.values = CompositionResolver(context).get_all_licenses(selection)
    except GenError as e:
        result.error = str(e)
        result.template_identity = e.template_identity
    return result


def run_required_versions(selection: Selection, context: ResolutionContext) -> ReportResult:
    """Distinct required tool/runtime versions of the composed plan."""
    result = ReportResult()
    try:
        result.values = CompositionResolver(context).get_all_required_versions(selection)
    except GenError as e:
        result.error = str(e)
        result.template_identity = e.template_identity
    return result
