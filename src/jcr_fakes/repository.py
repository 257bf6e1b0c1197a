"""The repository: an explicit registry of one session per workspace."""

from __future__ import annotations

import logging
from typing import Any

from jcr_fakes.config import StoreConfig
from jcr_fakes.session import Session

logger = logging.getLogger(__name__)


class Repository:
    """Caches one session per workspace name until it is reset.

    Tests own their repository, typically through a fixture, and reset or
    close it when done:

        with Repository() as repository:
            session = repository.login()
            session.add_node("/content/page")

    Args:
        config: Settings for all sessions. Defaults to StoreConfig().
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()
        self._sessions: dict[str, Session] = {}

    def _workspace_name(self, workspace: str | None) -> str:
        """Return the trimmed workspace name, or the default one for a blank name."""
        if workspace is None or not workspace.strip():
            return self.config.default_workspace
        return workspace.strip()

    def login(self, workspace: str | None = None, user_id: str | None = None) -> Session:
        """Return the session of a workspace, creating an empty one on first use.

        Args:
            workspace: Workspace name. Blank or None means the default workspace.
            user_id: User id of a newly created session. Ignored when the
                session already exists.
        """
        name = self._workspace_name(workspace)
        session = self._sessions.get(name)
        if session is None:
            session = Session(name, repository=self, user_id=user_id)
            self._sessions[name] = session
            logger.debug("Created session for workspace %s", name)
        return session

    def get_session(self, workspace: str | None = None) -> Session | None:
        """Return the cached session of a workspace without creating one."""
        return self._sessions.get(self._workspace_name(workspace))

    @property
    def workspace_names(self) -> list[str]:
        return list(self._sessions)

    def reset(self, workspace: str | None = None) -> None:
        """Drop the session of one workspace, or of all workspaces.

        The next login for a dropped workspace starts from an empty root.
        """
        if workspace is None:
            names = list(self._sessions)
        else:
            name = self._workspace_name(workspace)
            names = [name] if name in self._sessions else []
        for name in names:
            self._sessions.pop(name).logout()
            logger.debug("Reset workspace %s", name)

    def close(self) -> None:
        """Drop all sessions."""
        self.reset()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
