"""
Tests for the composition resolver — plan stages, expansion, failure policy.
"""

from __future__ import annotations

import pytest

from templatestudio.adapters import StaticShell
from templatestudio.core.context import FailurePolicy
from templatestudio.core.errors import (
    CompositionQueryError,
    DependencyMissingError,
    DuplicateParameterError,
    TemplateNotFoundError,
)
from templatestudio.core.models import (
    GenerationItem,
    Selection,
    SelectionEntry,
    TemplateDescriptor,
    TemplateLicense,
    TextCasing,
)
from templatestudio.core.services.composition import CompositionResolver


def _t(identity: str, **kwargs) -> TemplateDescriptor:
    """Template on the Uwp / C# axes."""
    kwargs.setdefault("platform", "Uwp")
    kwargs.setdefault("language", "C#")
    return TemplateDescriptor(identity=identity, **kwargs)


def _e(name: str, template_id: str) -> SelectionEntry:
    return SelectionEntry(name=name, template_id=template_id)


def _selection(**kwargs) -> Selection:
    kwargs.setdefault("project_type", "P1")
    kwargs.setdefault("front_end_framework", "F1")
    kwargs.setdefault("platform", "Uwp")
    kwargs.setdefault("language", "C#")
    kwargs.setdefault("home_name", "Main")
    return Selection(**kwargs)


def _plan(items: list[GenerationItem]) -> list[tuple[str, str]]:
    return [(item.name, item.identity) for item in items]


PROJECT = _t("Proj", type="project", output_type="project")
PAGE = _t("PageTmpl", type="page")


# ── Scenarios ────────────────────────────────────────────────────────


class TestScenarios:
    def test_empty_project_type_gives_empty_plan(self, build_context):
        resolver = CompositionResolver(build_context([PROJECT, PAGE]))
        selection = _selection(project_type="", pages=[_e("Main", "PageTmpl")])
        assert resolver.compose(selection) == []
        assert resolver.compose_new_item(selection) == []

    def test_empty_front_end_gives_empty_plan(self, build_context):
        resolver = CompositionResolver(build_context([PROJECT, PAGE]))
        selection = _selection(front_end_framework="", pages=[_e("Main", "PageTmpl")])
        assert resolver.compose(selection) == []

    def test_project_and_page(self, build_context):
        resolver = CompositionResolver(build_context([PROJECT, PAGE]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert _plan(plan) == [("MyApp", "Proj"), ("Main", "PageTmpl")]
        assert "ishomepage" not in plan[1].parameters

    def test_dependency_param_linked_to_display_name(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["ServiceTmpl"], parameters=["ServiceTmpl"])
        service = _t("ServiceTmpl", type="service")
        resolver = CompositionResolver(build_context([PROJECT, page, service]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            services=[_e("Svc1", "ServiceTmpl")],
        ))
        assert _plan(plan) == [("MyApp", "Proj"), ("Svc1", "ServiceTmpl"), ("Main", "PageTmpl")]
        assert plan[2].parameters["ServiceTmpl"] == "Svc1"

    def test_homepage_composition(self, build_context):
        comp = _t(
            "CompHome",
            type="composition",
            composition_filter="ishomepage == true",
            exports={"wireup": "true"},
        )
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl"), _e("Other", "PageTmpl")],
        ))
        assert _plan(plan) == [
            ("MyApp", "Proj"),
            ("Main", "PageTmpl"),
            ("Main", "CompHome"),
            ("Other", "PageTmpl"),
        ]
        assert plan[2].parameters["wireup"] == "true"
        assert "wireup" not in plan[3].parameters


# ── Plan properties ──────────────────────────────────────────────────


class TestPlanProperties:
    def _catalog(self) -> list[TemplateDescriptor]:
        return [
            PROJECT,
            _t("PageA", type="page", casings=[TextCasing(key="sourceName", type="kebab")]),
            _t("FeatA", type="feature"),
            _t("SvcA", type="service"),
            _t("TestA", type="testing"),
            _t("CompPage", type="composition", composition_filter="$type == page"),
        ]

    def test_deterministic(self, build_context):
        selection = _selection(
            pages=[_e("Main", "PageA"), _e("Grid", "PageA")],
            features=[_e("Store", "FeatA")],
        )
        context = build_context(self._catalog())
        first = CompositionResolver(context).compose(selection)
        second = CompositionResolver(context).compose(selection)
        assert [i.to_dict() for i in first] == [i.to_dict() for i in second]

    def test_category_order(self, build_context):
        resolver = CompositionResolver(build_context(self._catalog()))
        plan = resolver.compose(_selection(
            testing=[_e("Tests", "TestA")],
            services=[_e("Api", "SvcA")],
            features=[_e("Store", "FeatA")],
            pages=[_e("Main", "PageA")],
        ))
        assert _plan(plan) == [
            ("MyApp", "Proj"),
            ("Main", "PageA"),
            ("Main", "CompPage"),
            ("Store", "FeatA"),
            ("Api", "SvcA"),
            ("Tests", "TestA"),
        ]

    def test_no_duplicate_keys(self, build_context):
        resolver = CompositionResolver(build_context(self._catalog()))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageA"), _e("Main", "PageA")],
        ))
        keys = [item.key for item in plan]
        assert len(keys) == len(set(keys))
        assert keys.count(("Main", "PageA")) == 1

    def test_removing_injected_items_keeps_order(self, build_context):
        selection = _selection(
            pages=[_e("Main", "PageA"), _e("Grid", "PageA")],
            features=[_e("Store", "FeatA")],
        )
        plan = CompositionResolver(build_context(self._catalog())).compose(selection)
        base = [i for i in plan if i.template.type.value != "composition"]
        assert _plan(base) == [
            ("MyApp", "Proj"), ("Main", "PageA"), ("Grid", "PageA"), ("Store", "FeatA"),
        ]

    def test_same_name_different_template_kept(self, build_context):
        resolver = CompositionResolver(build_context(self._catalog()))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageA")],
            features=[_e("Main", "FeatA")],
        ))
        assert ("Main", "FeatA") in _plan(plan)

    def test_project_templates_by_composition_order(self, build_context):
        late = _t("ProjLate", type="project", output_type="project", composition_order=5)
        early = _t("ProjEarly", type="project", output_type="project", composition_order=1)
        resolver = CompositionResolver(build_context([late, early]))
        plan = resolver.compose(_selection())
        assert _plan(plan) == [("MyApp", "ProjEarly"), ("MyApp", "ProjLate")]

    def test_project_templates_filtered_by_axes(self, build_context):
        other = _t("ProjOther", type="project", output_type="project", project_types=["P2"])
        resolver = CompositionResolver(build_context([PROJECT, other]))
        assert _plan(resolver.compose(_selection())) == [("MyApp", "Proj")]


# ── Requirements and dependencies ────────────────────────────────────


class TestRequirements:
    def test_required_entry_added_before(self, build_context):
        page = _t("PageTmpl", type="page", requirements=["Auth"])
        auth = _t("Auth", type="feature")
        resolver = CompositionResolver(build_context([PROJECT, page, auth]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            features=[_e("Login", "Auth")],
        ))
        assert _plan(plan) == [("MyApp", "Proj"), ("Login", "Auth"), ("Main", "PageTmpl")]

    def test_unselected_requirement_ignored(self, build_context):
        page = _t("PageTmpl", type="page", requirements=["Auth"])
        auth = _t("Auth", type="feature")
        context = build_context([PROJECT, page, auth])
        plan = CompositionResolver(context).compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert _plan(plan) == [("MyApp", "Proj"), ("Main", "PageTmpl")]
        context.diagnostics.flush()
        assert context.diagnostics.history == []

    def test_first_selected_requirement_wins(self, build_context):
        page = _t("PageTmpl", type="page", requirements=["AuthA", "AuthB"])
        resolver = CompositionResolver(build_context([
            PROJECT, page, _t("AuthA", type="feature"), _t("AuthB", type="feature"),
        ]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            features=[_e("B", "AuthB"), _e("A", "AuthA")],
        ))
        assert _plan(plan)[1] == ("B", "AuthB")
        assert _plan(plan)[2] == ("Main", "PageTmpl")

    def test_single_hop(self, build_context):
        page = _t("PageTmpl", type="page", requirements=["Auth"])
        auth = _t("Auth", type="feature", dependencies=["Store"])
        store = _t("Store", type="feature")
        resolver = CompositionResolver(build_context([PROJECT, page, auth, store]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            features=[_e("Login", "Auth"), _e("Storage", "Store")],
        ))
        assert _plan(plan) == [
            ("MyApp", "Proj"),
            ("Login", "Auth"),
            ("Main", "PageTmpl"),
            ("Storage", "Store"),
        ]


class TestDependencies:
    def test_transitive_dependencies_deepest_first(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["FeatA"])
        feat_a = _t("FeatA", type="feature", dependencies=["FeatB"])
        feat_b = _t("FeatB", type="feature")
        resolver = CompositionResolver(build_context([PROJECT, page, feat_a, feat_b]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            features=[_e("A", "FeatA"), _e("B", "FeatB")],
        ))
        assert _plan(plan) == [
            ("MyApp", "Proj"), ("B", "FeatB"), ("A", "FeatA"), ("Main", "PageTmpl"),
        ]

    def test_missing_dependency_reported(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["FeatA"], parameters=["FeatA"])
        context = build_context([PROJECT, page, _t("FeatA", type="feature")])
        plan = CompositionResolver(context).compose(_selection(pages=[_e("Main", "PageTmpl")]))

        assert _plan(plan) == [("MyApp", "Proj"), ("Main", "PageTmpl")]
        assert "FeatA" not in plan[1].parameters
        assert context.diagnostics.flush()
        (diagnostic,) = context.diagnostics.history
        assert diagnostic.template_identity == "PageTmpl"
        assert "FeatA" in diagnostic.message

    def test_missing_dependency_fails_fast(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["FeatA"])
        context = build_context(
            [PROJECT, page, _t("FeatA", type="feature")],
            policy=FailurePolicy.FAIL_FAST,
        )
        with pytest.raises(DependencyMissingError) as exc:
            CompositionResolver(context).compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert exc.value.template_identity == "PageTmpl"

    def test_inapplicable_dependency_skipped(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["FeatOther"])
        other = _t("FeatOther", type="feature", frontend_frameworks=["F2"])
        context = build_context([PROJECT, page, other], policy=FailurePolicy.FAIL_FAST)
        plan = CompositionResolver(context).compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert _plan(plan) == [("MyApp", "Proj"), ("Main", "PageTmpl")]

    def test_unlinked_when_not_a_parameter(self, build_context):
        page = _t("PageTmpl", type="page", dependencies=["ServiceTmpl"])
        service = _t("ServiceTmpl", type="service")
        resolver = CompositionResolver(build_context([PROJECT, page, service]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            services=[_e("Svc1", "ServiceTmpl")],
        ))
        assert "ServiceTmpl" not in plan[2].parameters

    def test_duplicate_link_is_fatal(self, build_context):
        page = _t(
            "PageTmpl",
            type="page",
            dependencies=["ServiceTmpl", "ServiceTmpl"],
            parameters=["ServiceTmpl"],
        )
        service = _t("ServiceTmpl", type="service")
        resolver = CompositionResolver(build_context([PROJECT, page, service]))
        with pytest.raises(DuplicateParameterError) as exc:
            resolver.compose(_selection(
                pages=[_e("Main", "PageTmpl")],
                services=[_e("Svc1", "ServiceTmpl")],
            ))
        assert exc.value.key == "ServiceTmpl"
        assert exc.value.template_identity == "PageTmpl"

    def test_casing_reads_linked_slot(self, build_context):
        page = _t(
            "PageTmpl",
            type="page",
            dependencies=["wts.Svc"],
            parameters=["wts.Svc"],
            casings=[TextCasing(key="Svc", type="kebab")],
        )
        service = _t("wts.Svc", type="service")
        resolver = CompositionResolver(build_context([PROJECT, page, service]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            services=[_e("MyService", "wts.Svc")],
        ))
        page_item = plan[-1]
        assert page_item.identity == "PageTmpl"
        assert page_item.parameters["wts.Svc"] == "MyService"
        assert page_item.parameters["wts.Svc.casing.kebab"] == "my-service"

    def test_linked_slot_wins_over_casing_target(self, build_context):
        page = _t(
            "PageTmpl",
            type="page",
            dependencies=["wts.Svc"],
            parameters=["wts.Svc"],
            casings=[TextCasing(key="sourceName", type="pascal", parameter="wts.Svc")],
        )
        service = _t("wts.Svc", type="service")
        resolver = CompositionResolver(build_context([PROJECT, page, service]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            services=[_e("MyService", "wts.Svc")],
        ))
        assert plan[-1].parameters["wts.Svc"] == "MyService"


class TestNotFound:
    def test_unknown_selection_identity(self, build_context):
        resolver = CompositionResolver(build_context([PROJECT]))
        with pytest.raises(TemplateNotFoundError) as exc:
            resolver.compose(_selection(pages=[_e("Main", "Nope")]))
        assert exc.value.template_identity == "Nope"


# ── Rule-based expansion ─────────────────────────────────────────────


class TestCompositionExpansion:
    def test_batch_sorted_by_composition_order(self, build_context):
        comp_late = _t("CompLate", type="composition", composition_order=3,
                       composition_filter="$type == page")
        comp_early = _t("CompEarly", type="composition", composition_order=1,
                        composition_filter="$type == page")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp_late, comp_early]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl"), _e("Grid", "PageTmpl")]))
        assert _plan(plan) == [
            ("MyApp", "Proj"),
            ("Main", "PageTmpl"), ("Main", "CompEarly"), ("Main", "CompLate"),
            ("Grid", "PageTmpl"), ("Grid", "CompEarly"), ("Grid", "CompLate"),
        ]

    def test_language_must_match(self, build_context):
        comp = _t("CompVb", type="composition", language="VisualBasic",
                  composition_filter="$type == page")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert "CompVb" not in [i.identity for i in plan]

    def test_platform_must_match(self, build_context):
        comp = _t("CompWpf", type="composition", platform="Wpf",
                  composition_filter="$type == page")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert "CompWpf" not in [i.identity for i in plan]

    def test_selection_context_properties(self, build_context):
        comp = _t("CompGrid", type="composition",
                  composition_filter="$type == project & page == PageTmpl & frontendframework == F1")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert _plan(plan)[:2] == [("MyApp", "Proj"), ("MyApp", "CompGrid")]

    def test_exports_overwrite_source(self, build_context):
        page = _t("PageTmpl", type="page",
                  casings=[TextCasing(key="sourceName", type="snake", parameter="wts.fileName")])
        comp = _t("CompFile", type="composition", composition_filter="$type == page",
                  exports={"wts.fileName": "custom"})
        resolver = CompositionResolver(build_context([PROJECT, page, comp]))
        plan = resolver.compose(_selection(pages=[_e("MainPage", "PageTmpl")]))
        assert plan[1].parameters["wts.fileName"] == "custom"
        assert plan[2].parameters["wts.fileName"] == "custom"

    def test_own_params_win_over_inherited(self, build_context):
        page = _t("PageTmpl", type="page",
                  casings=[TextCasing(key="sourceName", type="snake", parameter="wts.fileName")])
        comp = _t("CompFile", type="composition", composition_filter="$type == page",
                  casings=[TextCasing(key="sourceName", type="kebab", parameter="wts.fileName")])
        resolver = CompositionResolver(build_context([PROJECT, page, comp]))
        plan = resolver.compose(_selection(pages=[_e("MainPage", "PageTmpl")]))
        assert plan[1].parameters["wts.fileName"] == "main_page"
        assert plan[2].parameters["wts.fileName"] == "main-page"

    def test_inherits_missing_params(self, build_context):
        page = _t("PageTmpl", type="page",
                  casings=[TextCasing(key="sourceName", type="snake", parameter="wts.fileName")])
        comp = _t("CompFile", type="composition", composition_filter="$type == page")
        resolver = CompositionResolver(build_context([PROJECT, page, comp]))
        plan = resolver.compose(_selection(pages=[_e("MainPage", "PageTmpl")]))
        assert plan[2].parameters["wts.fileName"] == "main_page"

    def test_casing_applied_to_inherited_values(self, build_context):
        comp = _t("CompKind", type="composition", composition_filter="$type == page",
                  exports={"wts.pageKind": "home"},
                  casings=[TextCasing(key="pageKind", type="upper")])
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        plan = resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert plan[2].parameters["wts.pageKind.casing.upper"] == "HOME"

    def test_composition_not_repeated_for_same_name(self, build_context):
        comp = _t("CompAny", type="composition", composition_filter="$type == page|feature")
        feature = _t("FeatA", type="feature")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, feature, comp]))
        plan = resolver.compose(_selection(
            pages=[_e("Main", "PageTmpl")],
            features=[_e("Main", "FeatA")],
        ))
        assert _plan(plan).count(("Main", "CompAny")) == 1

    def test_bad_filter_is_fatal(self, build_context):
        comp = _t("CompBad", type="composition", composition_filter="page ~ x")
        resolver = CompositionResolver(build_context([PROJECT, PAGE, comp]))
        with pytest.raises(CompositionQueryError) as exc:
            resolver.compose(_selection(pages=[_e("Main", "PageTmpl")]))
        assert exc.value.template_identity == "CompBad"


# ── New-item flow ────────────────────────────────────────────────────


class TestComposeNewItem:
    def test_no_project_stage(self, build_context):
        host = StaticShell(project_name="MyApp", project_namespace="Contoso.MyApp")
        resolver = CompositionResolver(build_context([PROJECT, PAGE], host=host))
        plan = resolver.compose_new_item(_selection(pages=[_e("Grid", "PageTmpl")]))
        assert _plan(plan) == [("Grid", "PageTmpl")]
        assert plan[0].parameters["wts.rootNamespace"] == "Contoso.MyApp"


# ── Reports ──────────────────────────────────────────────────────────


class TestReports:
    MIT = TemplateLicense(text="MIT", url="https://opensource.org/licenses/MIT")
    JSON = TemplateLicense(text="Newtonsoft.Json", url="https://www.newtonsoft.com/json")

    def _context(self, build_context):
        project = _t("Proj", type="project", output_type="project",
                     licenses=[self.MIT], required_versions=["dotnet 8.0"])
        page = _t("PageTmpl", type="page", licenses=[self.JSON, self.MIT],
                  required_versions=["dotnet 8.0", "sdk 10.0"])
        return build_context([project, page])

    def test_licenses_distinct(self, build_context):
        resolver = CompositionResolver(self._context(build_context))
        licenses = resolver.get_all_licenses(_selection(pages=[_e("Main", "PageTmpl")]))
        assert licenses == [self.MIT, self.JSON]

    def test_required_versions_distinct(self, build_context):
        resolver = CompositionResolver(self._context(build_context))
        versions = resolver.get_all_required_versions(_selection(pages=[_e("Main", "PageTmpl")]))
        assert versions == ["dotnet 8.0", "sdk 10.0"]

    def test_incomplete_selection_reports_nothing(self, build_context):
        resolver = CompositionResolver(self._context(build_context))
        assert resolver.get_all_licenses(_selection(project_type="")) == []
