"""
Well-known generation parameter names.

Templates reference these as ``wts.*`` symbols; the builder injects
them on every item (defaults) or on project-output items only.
"""

from __future__ import annotations

# Injected on every item
ROOT_NAMESPACE = "wts.rootNamespace"
PROJECT_NAME = "wts.projectName"
HOME_PAGE_NAME = "wts.homePageName"

# Injected on project-output items
USER_NAME = "wts.userName"
WIZARD_VERSION = "wts.wizardVersion"
TEMPLATES_VERSION = "wts.templatesVersion"
PROJECT_TYPE = "wts.projectType"
FRONTEND_FRAMEWORK = "wts.frontendFramework"
BACKEND_FRAMEWORK = "wts.backendFramework"
PLATFORM = "wts.platform"

# Casing rule key meaning "the item's own name"
SOURCE_NAME = "sourceName"

# Casing rules read their source from "wts.<key>"
PARAM_PREFIX = "wts."
