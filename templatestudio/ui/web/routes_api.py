"""
API routes — REST endpoints for the composition resolver.

All endpoints return JSON. Grouped under the /api/ prefix.

POST /api/sync               → load the catalog (required before anything else)
GET  /api/projectType        → project types offered by the synced catalog
POST /api/compose            → full plan for a new project
POST /api/compose/newItem    → plan for adding items to an existing project
POST /api/licenses           → distinct licenses of the composed plan
POST /api/requiredVersions   → distinct required versions of the composed plan
GET  /api/diagnostics        → reported (non-fatal) composition problems

Compose-style requests carry the same shape as a selection file::

    {"project": {"name": "MyApp", "namespace": ""}, "selection": {...}}
"""

from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, current_app, jsonify, request

from templatestudio.ui.web.server import EXTENSION_KEY

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

NOT_SYNCED_MESSAGE = "You must first sync templates before calling this endpoint"


def _state() -> dict:
    return current_app.extensions[EXTENSION_KEY]


def _not_synced():  # type: ignore[no-untyped-def]
    return jsonify({"message": NOT_SYNCED_MESSAGE}), 400


def _context_from_request():  # type: ignore[no-untyped-def]
    """Parse the request body into (selection, context) or an error response."""
    from templatestudio.adapters import EnvironmentShell, StaticShell
    from templatestudio.core.config.loader import ConfigError
    from templatestudio.core.config.selection_loader import parse_selection
    from templatestudio.core.context import FailurePolicy
    from templatestudio.core.use_cases.compose import make_context

    repository = _state()["repository"]
    if repository is None:
        return None, None, _not_synced()

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, None, (jsonify({"message": "Expected a JSON object body"}), 400)

    try:
        parsed = parse_selection(data, "request body")
    except ConfigError as e:
        return None, None, (jsonify({"message": str(e)}), 400)

    shell = StaticShell(
        project_name=parsed.project_name,
        project_namespace=parsed.project_namespace,
        user_name=EnvironmentShell().get_user_name(),
    )
    context = make_context(
        repository,
        shell,
        failure_policy=FailurePolicy(current_app.config["FAILURE_POLICY"]),
        diagnostics=_state()["diagnostics"],
    )
    return parsed.selection, context, None


def _failure(error: str, template_identity: str):  # type: ignore[no-untyped-def]
    return jsonify({"message": error, "templateIdentity": template_identity}), 400


# ── Sync ─────────────────────────────────────────────────────────────


@api_bp.route("/sync", methods=["POST"])
def api_sync():  # type: ignore[no-untyped-def]
    """Load (or reload) the template catalog."""
    from templatestudio.adapters import TemplateRepository
    from templatestudio.core.config.loader import ConfigError, load_catalog

    data = request.get_json(silent=True) or {}
    raw_path = data.get("path") or current_app.config.get("CATALOG_PATH")
    if not raw_path:
        return jsonify({"message": "Missing 'path' field and no default catalog configured"}), 400

    try:
        catalog = load_catalog(Path(raw_path))
    except ConfigError as e:
        return jsonify({"message": str(e)}), 400

    _state()["repository"] = TemplateRepository(catalog)
    logger.info("Synced catalog v%s (%d templates)", catalog.version, len(catalog.templates))
    return jsonify({
        "version": catalog.version,
        "templates": len(catalog.templates),
        "projectTypes": len(catalog.project_types),
    })


# ── Project types ────────────────────────────────────────────────────


@api_bp.route("/projectType")
def api_project_types():  # type: ignore[no-untyped-def]
    """Project types offered by the synced catalog."""
    repository = _state()["repository"]
    if repository is None:
        return _not_synced()

    return jsonify([
        {
            "name": pt.name,
            "displayName": pt.label,
            "description": pt.description,
            "imagePath": pt.image_path,
        }
        for pt in repository.project_types
    ])


# ── Compose ──────────────────────────────────────────────────────────


def _compose(new_item: bool):  # type: ignore[no-untyped-def]
    from templatestudio.core.use_cases.compose import run_compose

    selection, context, error_response = _context_from_request()
    if error_response is not None:
        return error_response

    result = run_compose(selection, context, new_item=new_item)
    if result.error:
        return _failure(result.error, result.template_identity)
    return jsonify(result.to_dict())


@api_bp.route("/compose", methods=["POST"])
def api_compose():  # type: ignore[no-untyped-def]
    """Compose the full plan for a new project."""
    return _compose(new_item=False)


@api_bp.route("/compose/newItem", methods=["POST"])
def api_compose_new_item():  # type: ignore[no-untyped-def]
    """Compose the plan for adding items to an existing project."""
    return _compose(new_item=True)


# ── Reports ──────────────────────────────────────────────────────────


@api_bp.route("/licenses", methods=["POST"])
def api_licenses():  # type: ignore[no-untyped-def]
    """Distinct licenses across the composed plan."""
    from templatestudio.core.use_cases.compose import run_licenses

    selection, context, error_response = _context_from_request()
    if error_response is not None:
        return error_response

    result = run_licenses(selection, context)
    if result.error:
        return _failure(result.error, result.template_identity)
    return jsonify(result.to_dict())


@api_bp.route("/requiredVersions", methods=["POST"])
def api_required_versions():  # type: ignore[no-untyped-def]
    """Distinct required versions across the composed plan."""
    from templatestudio.core.use_cases.compose import run_required_versions

    selection, context, error_response = _context_from_request()
    if error_response is not None:
        return error_response

    result = run_required_versions(selection, context)
    if result.error:
        return _failure(result.error, result.template_identity)
    return jsonify(result.to_dict())


# ── Diagnostics ──────────────────────────────────────────────────────


@api_bp.route("/diagnostics")
def api_diagnostics():  # type: ignore[no-untyped-def]
    """Reported composition problems, oldest first."""
    reporter = _state()["diagnostics"]
    reporter.flush()
    return jsonify({"diagnostics": [d.to_dict() for d in reporter.history]})
