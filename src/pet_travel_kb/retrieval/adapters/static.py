"""In-memory table source, for fixtures and pre-exported data."""

from typing import Optional

import aiohttp

from pet_travel_kb.retrieval.service import BaseTableSource, SourceConfig, Row
from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import FetchError

logger = get_logger(__name__)


class StaticTableSource(BaseTableSource):
    """Serves rows from a mapping of table name to rows."""

    def __init__(
        self,
        tables: dict[str, list[Row]],
        config: Optional[SourceConfig] = None,
    ):
        super().__init__(config)
        self._tables = {name: [dict(row) for row in rows] for name, rows in tables.items()}

    @property
    def source_id(self) -> str:
        return "static"

    async def fetch_table(
        self,
        table_name: str,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> list[Row]:
        if table_name not in self._tables:
            raise FetchError(f"Unknown table: {table_name}", table_name=table_name)
        rows = [dict(row) for row in self._tables[table_name]]
        logger.debug("table_fetched", source=self.source_id, table=table_name, rows=len(rows))
        return rows
