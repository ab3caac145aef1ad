"""Row source adapters for regulation tables."""

from pet_travel_kb.retrieval.adapters.gviz import GvizTableSource
from pet_travel_kb.retrieval.adapters.static import StaticTableSource

__all__ = [
    "GvizTableSource",
    "StaticTableSource",
]
