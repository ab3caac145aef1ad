"""Lookup service owning the loaded regulation index.

The index is replaced as a whole after a successful load; a failed load
leaves the previous index in place. Queries read the current index once
and pass it explicitly to the resolver.
"""

from typing import Optional, Union

from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import DataNotLoadedError
from pet_travel_kb.models import Country, CountrySelection, PetType, RegulationIndex, ResolvedRegulation
from pet_travel_kb.presentation import FormatterOptions, RegulationView, build_view
from pet_travel_kb.processing import RegulationTransformer, TransformOptions
from pet_travel_kb.query import default_selection, resolve, search_countries
from pet_travel_kb.retrieval import BaseTableSource, TableLoader

logger = get_logger(__name__)


class RegulationLookupService:
    """Loads regulation tables and answers pet travel queries."""

    def __init__(
        self,
        source: BaseTableSource,
        transform_options: Optional[TransformOptions] = None,
        formatter_options: Optional[FormatterOptions] = None,
    ):
        """Initialize the lookup service.

        Args:
            source: Row source for the regulation tables
            transform_options: Options for building the index
            formatter_options: Options for rendering results
        """
        self.source = source
        self.transformer = RegulationTransformer(transform_options)
        self.formatter_options = formatter_options or FormatterOptions()
        self._index: Optional[RegulationIndex] = None

    @property
    def index(self) -> RegulationIndex:
        """Current index.

        Raises:
            DataNotLoadedError: If no load has succeeded yet
        """
        if self._index is None:
            raise DataNotLoadedError()
        return self._index

    @property
    def is_loaded(self) -> bool:
        return self._index is not None

    async def load_data(self) -> RegulationIndex:
        """Fetch all tables, rebuild the index and swap it in.

        Returns:
            The newly built index

        Raises:
            FetchError: If a table cannot be fetched
            ParseError: If a table payload is malformed
            ReferentialIntegrityError: If RULES names an unknown destination
            DestinationConflictError: If destination attributes conflict under
                the strict merge policy
        """
        logger.info("data_load_started", source=self.source.source_id)
        try:
            async with TableLoader(self.source) as loader:
                tables = await loader.load_tables()
            index = self.transformer.transform(tables)
        except Exception as e:
            logger.error(
                "data_load_failed",
                source=self.source.source_id,
                error=str(e),
                kept_previous=self._index is not None,
            )
            raise

        self._index = index
        logger.info(
            "data_load_completed",
            countries=len(index.countries),
            rules=index.rule_count,
        )
        return index

    def resolve(
        self,
        origin_code: str,
        dest_code: str,
        pet_type: Union[str, PetType],
    ) -> ResolvedRegulation:
        """Resolve a query against the current index."""
        return resolve(self.index, origin_code, dest_code, pet_type)

    def render(self, resolved: ResolvedRegulation) -> RegulationView:
        """Build display content for a resolved regulation."""
        return build_view(resolved, self.formatter_options)

    def search_countries(self, query: Optional[str] = None) -> list[Country]:
        """Search loaded countries by name or code."""
        return search_countries(self.index.countries, query)

    def default_selection(self) -> CountrySelection:
        """Pre-filled query values for a fresh form."""
        return default_selection(self.index.countries)
