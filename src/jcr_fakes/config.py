"""Configuration of a fake repository.

Usage:
    from jcr_fakes.config import StoreConfig

    config = StoreConfig(default_workspace="config")
    config = StoreConfig.from_env()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from jcr_fakes.types import JCR_SQL2, NT_BASE, REP_ROOT, ROOT_IDENTIFIER, SQL, XPATH


@dataclass
class StoreConfig:
    """Settings shared by all sessions of a repository.

    Attributes:
        default_workspace: Workspace used when login gets no name
        user_id: User id reported by new sessions
        root_identifier: Identifier of every session's root node
        root_primary_type: Primary type of every session's root node
        default_primary_type: Primary type of nodes created along a path
        supported_query_languages: Languages a new query manager reports
        log_level: Logging level used by the command line tool
    """

    default_workspace: str = "website"
    user_id: str = "admin"
    root_identifier: str = ROOT_IDENTIFIER
    root_primary_type: str = REP_ROOT
    default_primary_type: str = NT_BASE
    supported_query_languages: tuple[str, ...] = field(default=(JCR_SQL2, XPATH, SQL))
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StoreConfig:
        """
        Create config from environment variables.

        Environment Variables:
            JCR_FAKES_WORKSPACE: Default workspace (default: "website")
            JCR_FAKES_USER: Session user id (default: "admin")
            JCR_FAKES_LOG_LEVEL: Logging level (default: "WARNING")
        """
        env = os.environ if environ is None else environ
        return cls(
            default_workspace=env.get("JCR_FAKES_WORKSPACE", "website"),
            user_id=env.get("JCR_FAKES_USER", "admin"),
            log_level=env.get("JCR_FAKES_LOG_LEVEL", "WARNING").upper(),
        )
