"""
Resolution context — everything a composition call needs from its host.

There is no process-wide bootstrap state. Whoever launches a
composition builds one ResolutionContext and passes it in:

    - CLI:    main.py        → catalog from --catalog, StaticShell from flags
    - Web:    routes_api.py  → synced repository, StaticShell from the request
    - Tests:  conftest       → in-memory catalog, StaticShell

The context is read-only during a call, so one context may be shared
by concurrent compositions if its accessor is safe for concurrent reads.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum

from templatestudio import __version__
from templatestudio.adapters.base import HostShell, TemplateAccessor
from templatestudio.core.observability.diagnostics import DiagnosticsReporter
from templatestudio.core.services.casing import safe_identifier

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """How recoverable authoring mistakes are surfaced.

    FAIL_FAST            raise immediately (developer / debug hosts)
    REPORT_AND_CONTINUE  report asynchronously, keep resolving (production)
    """

    FAIL_FAST = "fail_fast"
    REPORT_AND_CONTINUE = "report_and_continue"

    @classmethod
    def from_env(cls, default: "FailurePolicy | None" = None) -> "FailurePolicy":
        """Read TS_FAILURE_POLICY; unknown values fall back to *default*."""
        fallback = default or cls.REPORT_AND_CONTINUE
        raw = os.environ.get("TS_FAILURE_POLICY", "").strip().lower().replace("-", "_")
        if not raw:
            return fallback
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown TS_FAILURE_POLICY '%s', using %s", raw, fallback.value)
            return fallback


@dataclass
class ResolutionContext:
    """Host collaborators and settings for one or more compositions.

    Attributes:
        templates:          Template metadata accessor.
        shell:              Host shell (project name, namespace, user).
        templates_version:  Catalog version, stamped as ``v<version>``.
        wizard_version:     Generator version, stamped as ``v<version>``.
        failure_policy:     What to do with a missing dependency.
        diagnostics:        Sink for reported (non-fatal) problems.
    """

    templates: TemplateAccessor
    shell: HostShell
    templates_version: str = ""
    wizard_version: str = __version__
    failure_policy: FailurePolicy = FailurePolicy.REPORT_AND_CONTINUE
    diagnostics: DiagnosticsReporter = field(default_factory=DiagnosticsReporter)

    @property
    def project_name(self) -> str:
        return self.shell.get_active_project_name()

    @property
    def safe_project_name(self) -> str:
        """Project name usable as a root namespace."""
        return safe_identifier(self.project_name)
