"""Tests for the table-to-index transformer."""

import pytest

from pet_travel_kb.core.errors import DestinationConflictError, ReferentialIntegrityError
from pet_travel_kb.models import RegulationIndex
from pet_travel_kb.processing import (
    IntegrityPolicy,
    MergePolicy,
    RegulationTransformer,
    TransformOptions,
    build_contact,
    parse_step_order,
    transform,
)


class TestCountries:
    """Tests for COUNTRIES processing."""

    def test_display_name_format(self, sample_tables):
        index = transform(sample_tables)
        assert index.countries["TW"] == "台灣 (Taiwan)"
        assert index.countries["AU"] == "澳洲 (Australia)"

    def test_every_country_gets_destination_record(self, sample_tables):
        index = transform(sample_tables)
        assert set(index.destinations) == {"TW", "AU", "JP", "FR", "NZ"}
        assert index.destinations["NZ"].rules_by_risk == {}
        assert index.destinations["NZ"].complexity == ""

    def test_rows_without_code_are_ignored(self, sample_tables):
        sample_tables["COUNTRIES"].append({"Code": "", "Name_TW": "無", "Name_EN": "None"})
        index = transform(sample_tables)
        assert "" not in index.countries

    def test_missing_tables_are_empty(self):
        index = transform({})
        assert isinstance(index, RegulationIndex)
        assert index.countries == {}
        assert index.destinations == {}


class TestRisks:
    """Tests for RISKS processing."""

    def test_two_level_mapping(self, sample_tables):
        index = transform(sample_tables)
        assert index.risk_classification == {"AU": {"TW": "Low", "JP": "Group 2"}}

    def test_later_row_overrides_pair(self, sample_tables):
        sample_tables["RISKS"].append({"Dest_Code": "AU", "Origin_Code": "TW", "Risk_Level": "High"})
        index = transform(sample_tables)
        assert index.risk_classification["AU"]["TW"] == "High"


class TestRules:
    """Tests for RULES, STEPS and REQS merging."""

    def test_entry_materialized(self, sample_tables):
        index = transform(sample_tables)
        entry = index.destinations["AU"].get_regulation("Low", "Dog")

        assert entry is not None
        assert entry.process_title == "Standard Entry"
        assert [s.text for s in entry.steps] == ["Microchip"]
        assert entry.steps[0].order == 1
        assert entry.steps[0].timeframe == "Day 0"
        assert entry.requirements == ["ISO compatible microchip"]

    def test_contact_with_http_link(self, sample_tables):
        entry = transform(sample_tables).destinations["AU"].get_regulation("Low", "Dog")
        assert entry.contact == [
            "官方單位：Department of Agriculture",
            "官方連結：[點擊前往](https://www.agriculture.gov.au)",
        ]

    def test_contact_with_non_link(self, sample_tables, make_rule_row):
        sample_tables["RULES"] = [
            make_rule_row("1", "AU", "Low", "Dog", "Entry", link="Call +61 2 0000 0000")
        ]
        entry = transform(sample_tables).destinations["AU"].get_regulation("Low", "Dog")
        assert entry.contact[1] == "其他資訊：Call +61 2 0000 0000"

    def test_rule_without_steps_or_requirements(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("2", "AU", "Low", "Cat", "Cat Entry"))
        entry = transform(sample_tables).destinations["AU"].get_regulation("Low", "Cat")
        assert entry.steps == []
        assert entry.requirements == []
        assert len(entry.contact) == 2

    def test_orphan_rule_details_never_materialize(self, sample_tables):
        sample_tables["STEPS"].append(
            {"Rule_ID": "99", "Step_Order": "1", "Content": "Orphan", "Timeframe": ""}
        )
        sample_tables["REQS"].append({"Rule_ID": "99", "Requirement": "Orphan requirement"})
        index = transform(sample_tables)

        for record in index.destinations.values():
            for by_pet in record.rules_by_risk.values():
                for entry in by_pet.values():
                    assert all(s.text != "Orphan" for s in entry.steps)
                    assert "Orphan requirement" not in entry.requirements
        assert index.rule_count == 1

    def test_steps_sorted_by_order(self, sample_tables):
        sample_tables["STEPS"] = [
            {"Rule_ID": "1", "Step_Order": "3", "Content": "Fly", "Timeframe": "Day 180"},
            {"Rule_ID": "1", "Step_Order": "1", "Content": "Microchip", "Timeframe": "Day 0"},
            {"Rule_ID": "1", "Step_Order": "2", "Content": "Rabies vaccine", "Timeframe": "Day 1"},
        ]
        entry = transform(sample_tables).destinations["AU"].get_regulation("Low", "Dog")
        assert [s.order for s in entry.steps] == [1, 2, 3]
        assert [s.text for s in entry.steps] == ["Microchip", "Rabies vaccine", "Fly"]

    def test_row_order_kept_when_sorting_disabled(self, sample_tables):
        sample_tables["STEPS"] = [
            {"Rule_ID": "1", "Step_Order": "2", "Content": "Second", "Timeframe": ""},
            {"Rule_ID": "1", "Step_Order": "1", "Content": "First", "Timeframe": ""},
        ]
        options = TransformOptions(sort_steps=False)
        entry = transform(sample_tables, options).destinations["AU"].get_regulation("Low", "Dog")
        assert [s.text for s in entry.steps] == ["Second", "First"]

    def test_unparseable_orders_sort_last(self, sample_tables):
        sample_tables["STEPS"] = [
            {"Rule_ID": "1", "Step_Order": "", "Content": "Note A", "Timeframe": ""},
            {"Rule_ID": "1", "Step_Order": "2", "Content": "Two", "Timeframe": ""},
            {"Rule_ID": "1", "Step_Order": "n/a", "Content": "Note B", "Timeframe": ""},
            {"Rule_ID": "1", "Step_Order": "1", "Content": "One", "Timeframe": ""},
        ]
        entry = transform(sample_tables).destinations["AU"].get_regulation("Low", "Dog")
        assert [s.text for s in entry.steps] == ["One", "Two", "Note A", "Note B"]

    def test_same_rule_shared_by_two_rows(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("1", "AU", "Low", "Cat", "Standard Entry"))
        index = transform(sample_tables)
        dog = index.destinations["AU"].get_regulation("Low", "Dog")
        cat = index.destinations["AU"].get_regulation("Low", "Cat")
        assert dog.steps == cat.steps


class TestDestinationAttributes:
    """Tests for Complexity/Prep_Time merge policies."""

    def test_last_write_wins(self, sample_tables, make_rule_row):
        sample_tables["RULES"] = [
            make_rule_row("1", "AU", "Low", "Dog", "A", complexity="低", prep_time="1 month"),
            make_rule_row("2", "AU", "Low", "Cat", "B", complexity="高", prep_time="7 months"),
        ]
        record = transform(sample_tables).destinations["AU"]
        assert record.complexity == "高"
        assert record.preparation_time == "7 months"

    def test_strict_policy_rejects_conflict(self, sample_tables, make_rule_row):
        sample_tables["RULES"] = [
            make_rule_row("1", "AU", "Low", "Dog", "A", complexity="低"),
            make_rule_row("2", "AU", "Low", "Cat", "B", complexity="高"),
        ]
        options = TransformOptions(merge_policy=MergePolicy.STRICT)

        with pytest.raises(DestinationConflictError) as exc_info:
            transform(sample_tables, options)

        assert exc_info.value.dest_code == "AU"
        assert exc_info.value.field == "complexity"
        assert exc_info.value.values == ["低", "高"]

    def test_strict_policy_accepts_agreeing_rows(self, sample_tables, make_rule_row):
        sample_tables["RULES"] = [
            make_rule_row("1", "AU", "Low", "Dog", "A"),
            make_rule_row("2", "AU", "Low", "Cat", "B"),
        ]
        options = TransformOptions(merge_policy=MergePolicy.STRICT)
        record = transform(sample_tables, options).destinations["AU"]
        assert record.complexity == "低"


class TestReferentialIntegrity:
    """Tests for RULES rows pointing at unknown destinations."""

    def test_abort_by_default(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("5", "XX", "Low", "Dog", "Ghost"))

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            transform(sample_tables)

        assert exc_info.value.dest_code == "XX"
        assert exc_info.value.rule_id == "5"
        assert str(exc_info.value).startswith("[REFERENTIAL_INTEGRITY]")

    def test_skip_policy(self, sample_tables, make_rule_row):
        sample_tables["RULES"].append(make_rule_row("5", "XX", "Low", "Dog", "Ghost"))
        options = TransformOptions(integrity_policy=IntegrityPolicy.SKIP)

        index = RegulationTransformer(options).transform(sample_tables)

        assert "XX" not in index.destinations
        assert index.rule_count == 1


class TestHelpers:
    """Tests for cell helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [("1", 1), ("12", 12), ("2.0", 2), (" 3 ", 3), ("", None), ("step", None)],
    )
    def test_parse_step_order(self, value, expected):
        assert parse_step_order(value) == expected

    def test_build_contact_requires_http_prefix(self):
        assert build_contact("Unit", "www.example.com")[1] == "其他資訊：www.example.com"
        assert build_contact("Unit", "https://example.com")[1] == "官方連結：[點擊前往](https://example.com)"
