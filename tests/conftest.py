"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from templatestudio.adapters import StaticShell, TemplateRepository
from templatestudio.core.context import FailurePolicy, ResolutionContext
from templatestudio.core.models import TemplateCatalog, TemplateDescriptor
from templatestudio.core.observability.diagnostics import DiagnosticsReporter

CATALOG_YAML = textwrap.dedent("""\
    version: "1.4.0"
    project_types:
      - name: SplitView
        display_name: Navigation Pane
        description: A navigation pane on the left.
    templates:
      - identity: ts.Proj.Default
        name: Default project
        type: project
        output_type: project
        platform: Uwp
        language: C#
        project_types: [SplitView]
        frontend_frameworks: [MVVMBasic]
        licenses:
          - text: MIT
            url: https://opensource.org/licenses/MIT
        required_versions: ["dotnet 8.0"]
      - identity: ts.Page.Blank
        name: Blank page
        type: page
        platform: Uwp
        language: C#
        casings:
          - key: sourceName
            type: kebab
      - identity: ts.Page.Settings
        name: Settings page
        type: page
        platform: Uwp
        language: C#
        dependencies: [ts.Feature.SettingsStorage]
        parameters: [ts.Feature.SettingsStorage]
      - identity: ts.Feature.SettingsStorage
        name: Settings storage
        type: feature
        platform: Uwp
        language: C#
        licenses:
          - text: MIT
            url: https://opensource.org/licenses/MIT
          - text: Newtonsoft.Json
            url: https://www.newtonsoft.com/json
        required_versions: ["dotnet 8.0", "windows sdk 10.0.19041"]
      - identity: ts.Comp.HomePage
        type: composition
        platform: Uwp
        language: C#
        composition_order: 1
        composition_filter: "$type == page & ishomepage == true"
        exports:
          wts.isHome: "true"
""")

SELECTION_YAML = textwrap.dedent("""\
    project:
      name: MyApp
    selection:
      projectType: SplitView
      platform: Uwp
      language: C#
      frontEndFramework: MVVMBasic
      homeName: Main
      pages:
        - name: Main
          templateId: ts.Page.Blank
        - name: Settings
          templateId: ts.Page.Settings
      features:
        - name: SettingsStorage
          templateId: ts.Feature.SettingsStorage
""")


@pytest.fixture
def catalog_path(tmp_path: Path) -> Path:
    """Write the sample catalog.yml and return its path."""
    path = tmp_path / "catalog.yml"
    path.write_text(CATALOG_YAML)
    return path


@pytest.fixture
def selection_path(tmp_path: Path) -> Path:
    """Write the sample selection.yml and return its path."""
    path = tmp_path / "selection.yml"
    path.write_text(SELECTION_YAML)
    return path


@pytest.fixture
def shell() -> StaticShell:
    """Host shell for a fresh project named MyApp."""
    return StaticShell(project_name="MyApp", user_name="tester")


@pytest.fixture
def build_context(shell: StaticShell):
    """Factory: templates → ResolutionContext over an in-memory catalog."""

    def _build(
        templates: list[TemplateDescriptor],
        *,
        policy: FailurePolicy = FailurePolicy.REPORT_AND_CONTINUE,
        host: StaticShell | None = None,
    ) -> ResolutionContext:
        repository = TemplateRepository(
            TemplateCatalog(version="1.2.0", templates=templates),
        )
        return ResolutionContext(
            templates=repository,
            shell=host or shell,
            templates_version="1.2.0",
            wizard_version="0.1.0",
            failure_policy=policy,
            diagnostics=DiagnosticsReporter(),
        )

    return _build
