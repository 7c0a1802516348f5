"""
Host shells — where the wizard is running.

StaticShell holds fixed values (CLI flags, API request fields).
EnvironmentShell reads TS_* environment variables and falls back to
the login name for the user identity.
"""

from __future__ import annotations

import getpass
import logging
import os

from templatestudio.adapters.base import HostShell

logger = logging.getLogger(__name__)


class StaticShell(HostShell):
    """Shell with values fixed at construction."""

    def __init__(
        self,
        project_name: str = "",
        project_namespace: str = "",
        user_name: str = "",
    ):
        self._project_name = project_name
        self._project_namespace = project_namespace
        self._user_name = user_name

    def get_active_project_name(self) -> str:
        return self._project_name

    def get_active_project_namespace(self) -> str:
        return self._project_namespace

    def get_user_name(self) -> str:
        return self._user_name


class EnvironmentShell(HostShell):
    """Shell backed by the process environment.

    Variables:
        TS_PROJECT_NAME       active project name
        TS_PROJECT_NAMESPACE  active project root namespace
        TS_USER_NAME          user identity (default: login name)
    """

    def get_active_project_name(self) -> str:
        return os.environ.get("TS_PROJECT_NAME", "")

    def get_active_project_namespace(self) -> str:
        return os.environ.get("TS_PROJECT_NAMESPACE", "")

    def get_user_name(self) -> str:
        user = os.environ.get("TS_USER_NAME", "")
        if user:
            return user
        try:
            return getpass.getuser()
        except (KeyError, OSError) as e:
            logger.debug("Cannot determine login name: %s", e)
            return ""
