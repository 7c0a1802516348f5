"""
Generation item builder — one item, fully parameterized.

Parameter layers, applied in order and never overwriting each other:

    1. defaults         root namespace, project name, home page name
    2. project params   user, versions, selection axes  (project output only)
    3. casing params    re-cased copies of the name or of wts.* values
"""

from __future__ import annotations

import logging

from templatestudio.core.context import ResolutionContext
from templatestudio.core.models.generation import GenerationItem
from templatestudio.core.models.selection import Selection
from templatestudio.core.models.template import TemplateDescriptor, TemplateOutputType
from templatestudio.core.services.composition import params

logger = logging.getLogger(__name__)


class GenerationItemBuilder:
    """Builds generation items for one selection.

    Args:
        context: Host collaborators (shell, versions).
        selection: The selection being composed.
        new_item_flow: True when adding items to an existing project;
            the root namespace then comes from the active project.
    """

    def __init__(
        self,
        context: ResolutionContext,
        selection: Selection,
        new_item_flow: bool = False,
    ):
        self._context = context
        self._selection = selection
        self._new_item_flow = new_item_flow

    def build(
        self,
        name: str,
        template: TemplateDescriptor,
        with_casing: bool = True,
    ) -> GenerationItem:
        """Create an item for *template* named *name*.

        Pass ``with_casing=False`` when more parameters are still to be
        linked; call :meth:`apply_casing` once they are in place.
        """
        item = GenerationItem(name=name, template=template)

        self._add_default_params(item)
        if template.output_type == TemplateOutputType.PROJECT:
            self._add_project_params(item)
        if with_casing:
            self.apply_casing(item)

        logger.debug(
            "Built item %s (%s) with %d parameters",
            name, template.identity, len(item.parameters),
        )
        return item

    def root_namespace(self) -> str:
        namespace = ""
        if self._new_item_flow:
            namespace = self._context.shell.get_active_project_namespace()
        return namespace or self._context.safe_project_name

    def _add_default_params(self, item: GenerationItem) -> None:
        p = item.parameters
        p.set_if_absent(params.ROOT_NAMESPACE, self.root_namespace())
        p.set_if_absent(params.PROJECT_NAME, self._context.project_name)
        p.set_if_absent(params.HOME_PAGE_NAME, self._selection.home_name)

    def _add_project_params(self, item: GenerationItem) -> None:
        s = self._selection
        p = item.parameters
        p.set_if_absent(params.USER_NAME, self._context.shell.get_user_name())
        p.set_if_absent(params.WIZARD_VERSION, f"v{self._context.wizard_version}")
        p.set_if_absent(params.TEMPLATES_VERSION, f"v{self._context.templates_version}")
        p.set_if_absent(params.PROJECT_TYPE, s.project_type)
        p.set_if_absent(params.FRONTEND_FRAMEWORK, s.front_end_framework)
        p.set_if_absent(params.BACKEND_FRAMEWORK, s.back_end_framework)
        p.set_if_absent(params.PLATFORM, s.platform)

    def apply_casing(self, item: GenerationItem) -> None:
        """Add the template's casing parameters that aren't set yet.

        Safe to call more than once; later calls only fill keys whose
        source value has appeared since.
        """
        for casing in item.template.casings:
            if casing.key == params.SOURCE_NAME:
                value = item.name
            else:
                value = item.parameters.get(f"{params.PARAM_PREFIX}{casing.key}")
            if not value:
                continue
            item.parameters.set_if_absent(casing.parameter_name, casing.transform(value))
