"""Tests for the lookup service and country search."""

import pytest

from pet_travel_kb.core.errors import (
    DataNotLoadedError,
    FetchError,
    ReferentialIntegrityError,
    SameCountryError,
)
from pet_travel_kb.lookup import RegulationLookupService
from pet_travel_kb.models import PetType
from pet_travel_kb.processing import IntegrityPolicy, TransformOptions
from pet_travel_kb.query import default_selection, search_countries
from pet_travel_kb.retrieval import StaticTableSource


class TestRegulationLookupService:
    """Tests for loading and querying through the service."""

    @pytest.fixture
    def service(self, sample_tables):
        return RegulationLookupService(StaticTableSource(sample_tables))

    def test_queries_before_load_fail(self, service):
        assert service.is_loaded is False
        with pytest.raises(DataNotLoadedError):
            service.resolve("TW", "AU", "Dog")

    @pytest.mark.asyncio
    async def test_load_and_resolve(self, service):
        index = await service.load_data()

        assert service.is_loaded is True
        assert service.index is index
        resolved = service.resolve("TW", "AU", "Dog")
        assert resolved.risk_level.label == "Low"

        view = service.render(resolved)
        assert "Microchip" in view.to_html()

    @pytest.mark.asyncio
    async def test_query_errors_propagate(self, service):
        await service.load_data()
        with pytest.raises(SameCountryError):
            service.resolve("AU", "AU", "Cat")

    @pytest.mark.asyncio
    async def test_reload_swaps_index(self, sample_tables, make_rule_row):
        source = StaticTableSource(sample_tables)
        service = RegulationLookupService(source)
        first = await service.load_data()

        sample_tables["RULES"].append(make_rule_row("2", "AU", "Low", "Cat", "Cat Entry"))
        service.source = StaticTableSource(sample_tables)
        second = await service.load_data()

        assert second is not first
        assert first.destinations["AU"].get_regulation("Low", "Cat") is None
        assert service.resolve("TW", "AU", "Cat").regulation.process_title == "Cat Entry"

    @pytest.mark.asyncio
    async def test_loaded_index_independent_of_source_rows(self, sample_tables):
        service = RegulationLookupService(StaticTableSource(sample_tables))
        index = await service.load_data()

        sample_tables["COUNTRIES"][0]["Name_EN"] = "Changed"
        sample_tables["RULES"][0]["Title"] = "Changed"
        await service.load_data()

        assert index.display_name("TW") == "台灣 (Taiwan)"
        assert index.get_destination("AU").get_regulation("Low", "Dog").process_title == "Standard Entry"

    @pytest.mark.asyncio
    async def test_failed_load_keeps_previous_index(self, sample_tables):
        service = RegulationLookupService(StaticTableSource(sample_tables))
        previous = await service.load_data()

        service.source = StaticTableSource({"COUNTRIES": []})
        with pytest.raises(FetchError):
            await service.load_data()

        assert service.index is previous

    @pytest.mark.asyncio
    async def test_integrity_error_aborts_load(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("9", "XX", "Low", "Dog", "Ghost"))
        service = RegulationLookupService(StaticTableSource(sample_tables))

        with pytest.raises(ReferentialIntegrityError):
            await service.load_data()
        assert service.is_loaded is False

    @pytest.mark.asyncio
    async def test_integrity_skip_option(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("9", "XX", "Low", "Dog", "Ghost"))
        service = RegulationLookupService(
            StaticTableSource(sample_tables),
            transform_options=TransformOptions(integrity_policy=IntegrityPolicy.SKIP),
        )
        index = await service.load_data()
        assert index.rule_count == 1

    @pytest.mark.asyncio
    async def test_search_and_defaults(self, service):
        await service.load_data()

        assert [c.code for c in service.search_countries("aus")] == ["AU"]
        selection = service.default_selection()
        assert selection.origin_code == "TW"
        assert selection.dest_display_name == "澳洲 (Australia)"


class TestCountrySearch:
    """Tests for country search and defaults."""

    @pytest.fixture
    def countries(self):
        return {
            "TW": "台灣 (Taiwan)",
            "AU": "澳洲 (Australia)",
            "AT": "奧地利 (Austria)",
        }

    def test_empty_query_returns_all_in_order(self, countries):
        assert [c.code for c in search_countries(countries, "")] == ["TW", "AU", "AT"]
        assert len(search_countries(countries, None)) == 3

    def test_match_by_name_case_insensitive(self, countries):
        assert [c.code for c in search_countries(countries, "AUST")] == ["AU", "AT"]

    def test_match_by_code(self, countries):
        assert [c.code for c in search_countries(countries, "tw")] == ["TW"]

    def test_match_by_local_name(self, countries):
        results = search_countries(countries, " 台灣 ")
        assert len(results) == 1
        assert results[0].display_name == "台灣 (Taiwan)"

    def test_no_match(self, countries):
        assert search_countries(countries, "Brazil") == []

    def test_default_selection_fallbacks(self):
        selection = default_selection({})
        assert selection.origin_display_name == "台灣"
        assert selection.dest_display_name == "澳洲"
        assert selection.pet_type == PetType.DOG
