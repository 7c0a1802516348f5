"""
Adapters — the resolver's view of the template catalog and host.

    from templatestudio.adapters import TemplateRepository, StaticShell
"""

from templatestudio.adapters.base import HostShell, TemplateAccessor
from templatestudio.adapters.catalog import TemplateRepository
from templatestudio.adapters.shell import EnvironmentShell, StaticShell

__all__ = [
    "EnvironmentShell",
    "HostShell",
    "StaticShell",
    "TemplateAccessor",
    "TemplateRepository",
]
