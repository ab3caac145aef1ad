"""Table retrieval for the pet travel knowledge base."""

from pet_travel_kb.retrieval.service import (
    BaseTableSource,
    HttpTableSource,
    SourceConfig,
    TableLoader,
    TableName,
    TABLE_NAMES,
    Row,
)
from pet_travel_kb.retrieval.adapters import (
    GvizTableSource,
    StaticTableSource,
)

__all__ = [
    # Service
    "BaseTableSource",
    "HttpTableSource",
    "SourceConfig",
    "TableLoader",
    "TableName",
    "TABLE_NAMES",
    "Row",
    # Adapters
    "GvizTableSource",
    "StaticTableSource",
]
