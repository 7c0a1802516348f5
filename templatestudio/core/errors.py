"""
Generation errors — structural defects found while resolving a plan.

These are catalog-authoring or selection bugs, not transient faults.
The resolver never retries; callers map them to a failure response
that names the offending template identity.
"""

from __future__ import annotations


class GenError(Exception):
    """Base class for all composition failures."""

    def __init__(self, message: str, template_identity: str = "") -> None:
        super().__init__(message)
        self.template_identity = template_identity


class TemplateNotFoundError(GenError):
    """A selection references an identity the catalog does not contain."""


class DependencyMissingError(GenError):
    """A declared dependency has no matching entry in the user selection."""


class DuplicateParameterError(GenError):
    """A parameter key was set twice where uniqueness is required."""

    def __init__(self, key: str, template_identity: str = "") -> None:
        super().__init__(f"Parameter '{key}' is already set", template_identity)
        self.key = key


class CompositionQueryError(GenError):
    """A composition filter string could not be parsed."""
