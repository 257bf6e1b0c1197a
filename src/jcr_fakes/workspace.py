"""Workspaces and their manager slots."""

from __future__ import annotations

from typing import TYPE_CHECKING

from jcr_fakes.errors import require_not_none
from jcr_fakes.observation import ObservationManager
from jcr_fakes.query import QueryManager

if TYPE_CHECKING:
    from jcr_fakes.session import Session


class Workspace:
    """A named workspace with one query manager and one observation manager.

    Both managers are created on first access. Setting a manager replaces
    the previous one.
    """

    def __init__(self, name: str, session: Session) -> None:
        self._name = name
        self._session = session
        self._query_manager: QueryManager | None = None
        self._observation_manager: ObservationManager | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def session(self) -> Session:
        return self._session

    def get_query_manager(self) -> QueryManager:
        if self._query_manager is None:
            languages = self._session.config.supported_query_languages
            self._query_manager = QueryManager(supported_languages=languages)
        return self._query_manager

    def set_query_manager(self, query_manager: QueryManager) -> None:
        self._query_manager = require_not_none(query_manager, "Query manager must not be None")

    def get_observation_manager(self) -> ObservationManager:
        if self._observation_manager is None:
            self._observation_manager = ObservationManager()
        return self._observation_manager

    def set_observation_manager(self, observation_manager: ObservationManager) -> None:
        self._observation_manager = require_not_none(
            observation_manager, "Observation manager must not be None"
        )

    def __repr__(self) -> str:
        return f"Workspace({self._name!r})"
