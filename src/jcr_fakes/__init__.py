"""JCR Fakes - An in-memory content repository for unit tests."""

from jcr_fakes.config import StoreConfig
from jcr_fakes.errors import FormatError, PreconditionError
from jcr_fakes.nodes import Node
from jcr_fakes.observation import ObservationManager
from jcr_fakes.properties import Property
from jcr_fakes.query import Query, QueryManager, QueryResult, Row
from jcr_fakes.repository import Repository
from jcr_fakes.session import Session
from jcr_fakes.types import NodeType, PropertyType
from jcr_fakes.values import Binary, Value, ValueFactory
from jcr_fakes.workspace import Workspace

__all__ = [
    # Main API
    "Repository",
    "Session",
    "Workspace",
    "StoreConfig",
    # Content
    "Node",
    "Property",
    "Value",
    "Binary",
    "ValueFactory",
    "NodeType",
    "PropertyType",
    # Queries and observation
    "Query",
    "QueryManager",
    "QueryResult",
    "Row",
    "ObservationManager",
    # Errors
    "FormatError",
    "PreconditionError",
]

__version__ = "0.1.0"
