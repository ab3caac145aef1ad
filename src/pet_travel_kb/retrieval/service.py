"""Table retrieval service with async HTTP operations.

Fetches the five regulation tables from a row source and hands them to the
transformer only once every table has arrived. Failures are not retried:
a failed load is reported to the caller, who decides whether to reload.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Any

import aiohttp
from pydantic import BaseModel, Field

from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import FetchError

logger = get_logger(__name__)

Row = dict[str, str]


class TableName(str, Enum):
    """Tables that make up the regulation data set, in load order."""

    COUNTRIES = "COUNTRIES"
    RISKS = "RISKS"
    RULES = "RULES"
    STEPS = "STEPS"
    REQS = "REQS"


TABLE_NAMES: tuple[str, ...] = tuple(t.value for t in TableName)


class SourceConfig(BaseModel):
    """Configuration for the table retrieval service."""

    spreadsheet_id: str = Field(default="", description="Remote spreadsheet identifier")
    table_names: list[str] = Field(
        default_factory=lambda: list(TABLE_NAMES),
        description="Tables to load",
    )
    timeout_seconds: int = Field(default=30, description="Per-request timeout")
    load_timeout_seconds: Optional[float] = Field(
        default=None, description="Timeout for the whole load; None waits on the transport"
    )
    concurrent_fetch: bool = Field(
        default=False, description="Fetch tables concurrently instead of one by one"
    )
    user_agent: str = Field(
        default="PetTravelKB/1.0 (Regulation Table Loader)",
        description="User agent string for requests",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class BaseTableSource(ABC):
    """Abstract base class for tabular row sources."""

    def __init__(self, config: Optional[SourceConfig] = None):
        self.config = config or SourceConfig()

    @property
    @abstractmethod
    def source_id(self) -> str:
        """Return the source identifier."""
        pass

    @abstractmethod
    async def fetch_table(
        self,
        table_name: str,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> list[Row]:
        """Fetch all rows of a table.

        Args:
            table_name: Name of the table (sheet) to fetch
            session: Optional aiohttp session shared across fetches

        Returns:
            Rows as mappings from column label to cell text

        Raises:
            FetchError: If the remote call fails
            ParseError: If the response is not a valid table envelope
        """
        pass


class HttpTableSource(BaseTableSource):
    """Base class for sources reached over HTTP."""

    @abstractmethod
    def get_table_url(self, table_name: str) -> str:
        """Build the URL for a table."""
        pass

    @abstractmethod
    def parse_rows(self, payload: str, table_name: str) -> list[Row]:
        """Parse a response body into rows."""
        pass

    async def fetch_table(
        self,
        table_name: str,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> list[Row]:
        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self.fetch_table(table_name, own_session)

        url = self.get_table_url(table_name)
        payload = await self._fetch_text(url, table_name, session)
        rows = self.parse_rows(payload, table_name)

        logger.info(
            "table_fetched",
            source=self.source_id,
            table=table_name,
            rows=len(rows),
        )
        return rows

    async def _fetch_text(
        self,
        url: str,
        table_name: str,
        session: aiohttp.ClientSession,
    ) -> str:
        headers = {"User-Agent": self.config.user_agent}

        try:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                ssl=self.config.verify_ssl,
            ) as response:
                if response.status >= 400:
                    error_msg = f"HTTP {response.status}: {response.reason}"
                    logger.error("table_fetch_failed", url=url, error=error_msg)
                    raise FetchError(
                        error_msg,
                        table_name=table_name,
                        source_url=url,
                        status=response.status,
                    )
                return await response.text()

        except asyncio.TimeoutError as e:
            logger.error("table_fetch_timeout", url=url, timeout=self.config.timeout_seconds)
            raise FetchError(
                f"Request timed out after {self.config.timeout_seconds}s",
                table_name=table_name,
                source_url=url,
            ) from e
        except aiohttp.ClientError as e:
            logger.error("table_fetch_client_error", url=url, error=str(e))
            raise FetchError(
                f"Client error: {str(e)}",
                table_name=table_name,
                source_url=url,
            ) from e


class TableLoader:
    """Loads the full table set from a source in one batch."""

    def __init__(
        self,
        source: BaseTableSource,
        config: Optional[SourceConfig] = None,
    ):
        """Initialize the loader.

        Args:
            source: Row source to read tables from
            config: Configuration for load operations; defaults to the source's
        """
        self.source = source
        self.config = config or source.config
        self._session: Optional[aiohttp.ClientSession] = None

        logger.info(
            "table_loader_initialized",
            source=source.source_id,
            tables=self.config.table_names,
            concurrent=self.config.concurrent_fetch,
        )

    async def __aenter__(self) -> "TableLoader":
        """Enter async context and create session."""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context and close session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def load_tables(self) -> dict[str, list[Row]]:
        """Fetch every configured table.

        Returns:
            Mapping from table name to its rows

        Raises:
            FetchError: If any table fails to load or the load times out
            ParseError: If any table payload is malformed
        """
        started = datetime.now(timezone.utc)

        if self.config.load_timeout_seconds is None:
            tables = await self._load_all()
        else:
            try:
                tables = await asyncio.wait_for(
                    self._load_all(), timeout=self.config.load_timeout_seconds
                )
            except asyncio.TimeoutError as e:
                logger.error("table_load_timeout", timeout=self.config.load_timeout_seconds)
                raise FetchError(
                    f"Loading tables timed out after {self.config.load_timeout_seconds}s"
                ) from e

        logger.info(
            "tables_loaded",
            source=self.source.source_id,
            tables={name: len(rows) for name, rows in tables.items()},
            elapsed_ms=int((datetime.now(timezone.utc) - started).total_seconds() * 1000),
        )
        return tables

    async def _load_all(self) -> dict[str, list[Row]]:
        names = self.config.table_names

        if self.config.concurrent_fetch:
            results = await asyncio.gather(
                *(self.source.fetch_table(name, self._session) for name in names)
            )
            return dict(zip(names, results))

        tables: dict[str, list[Row]] = {}
        for name in names:
            tables[name] = await self.source.fetch_table(name, self._session)
        return tables
