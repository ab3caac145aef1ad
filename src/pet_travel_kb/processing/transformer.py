"""Transformation of flat regulation tables into the nested regulation index.

Tables are processed in a fixed order: COUNTRIES, RISKS, then STEPS and REQS
grouped per Rule_ID, and finally RULES, which is the only table that
materializes regulation entries. Steps and requirements whose Rule_ID never
appears in RULES are dropped.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import DestinationConflictError, ReferentialIntegrityError
from pet_travel_kb.models import (
    DestinationRecord,
    RegulationEntry,
    RegulationIndex,
    RuleDetail,
    Step,
    format_display_name,
)
from pet_travel_kb.retrieval.service import Row, TableName

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

CONTACT_UNIT_PREFIX = "官方單位："
CONTACT_LINK_TEMPLATE = "官方連結：[點擊前往]({link})"
CONTACT_OTHER_PREFIX = "其他資訊："


class MergePolicy(str, Enum):
    """How conflicting destination-wide values across RULES rows are merged."""

    LAST_WRITE_WINS = "last_write_wins"
    STRICT = "strict"


class IntegrityPolicy(str, Enum):
    """What to do with a RULES row whose destination is not a known country."""

    ABORT = "abort"
    SKIP = "skip"


class TransformOptions(BaseModel):
    """Options controlling how tables are merged into the index."""

    merge_policy: MergePolicy = Field(
        default=MergePolicy.LAST_WRITE_WINS,
        description="Policy for Complexity/Prep_Time conflicts within a destination",
    )
    integrity_policy: IntegrityPolicy = Field(
        default=IntegrityPolicy.ABORT,
        description="Policy for RULES rows referencing unknown destinations",
    )
    sort_steps: bool = Field(
        default=True, description="Sort steps by Step_Order instead of row order"
    )


def parse_step_order(value: str) -> Optional[int]:
    """Parse a Step_Order cell, taking its leading integer ("2", "2.0", "2.")."""
    match = _LEADING_INT.match(value or "")
    if not match:
        return None
    return int(match.group(1))


def build_contact(unit: str, link: str) -> list[str]:
    """Build the two contact lines for a rule."""
    if link.startswith("http"):
        link_line = CONTACT_LINK_TEMPLATE.format(link=link)
    else:
        link_line = f"{CONTACT_OTHER_PREFIX}{link}"
    return [f"{CONTACT_UNIT_PREFIX}{unit}", link_line]


def _cell(row: Row, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ""
    return str(value)


class RegulationTransformer:
    """Builds a RegulationIndex from the five raw tables."""

    def __init__(self, options: Optional[TransformOptions] = None):
        self.options = options or TransformOptions()

    def transform(self, raw_tables: dict[str, list[Row]]) -> RegulationIndex:
        """Transform raw table rows into a regulation index.

        Args:
            raw_tables: Mapping from table name to its rows; missing tables
                are treated as empty

        Returns:
            A new RegulationIndex

        Raises:
            ReferentialIntegrityError: If a RULES row names an unknown
                destination and the integrity policy is ABORT
            DestinationConflictError: If RULES rows disagree on a destination's
                complexity or preparation time and the merge policy is STRICT
        """
        countries = self._collect_countries(raw_tables.get(TableName.COUNTRIES.value, []))
        risk_classification = self._collect_risks(raw_tables.get(TableName.RISKS.value, []))
        rule_details = self._collect_rule_details(
            raw_tables.get(TableName.STEPS.value, []),
            raw_tables.get(TableName.REQS.value, []),
        )
        destinations = self._attach_rules(
            raw_tables.get(TableName.RULES.value, []),
            countries,
            rule_details,
        )

        index = RegulationIndex(
            countries=countries,
            risk_classification=risk_classification,
            destinations=destinations,
        )
        logger.info(
            "index_built",
            countries=len(countries),
            classified_destinations=len(risk_classification),
            rules=index.rule_count,
        )
        return index

    def _collect_countries(self, rows: list[Row]) -> dict[str, str]:
        countries: dict[str, str] = {}
        for row in rows:
            code = _cell(row, "Code")
            if not code:
                logger.warning("country_row_without_code", row=row)
                continue
            if code in countries:
                logger.warning("duplicate_country_code", code=code)
            countries[code] = format_display_name(_cell(row, "Name_TW"), _cell(row, "Name_EN"))
        return countries

    def _collect_risks(self, rows: list[Row]) -> dict[str, dict[str, str]]:
        classification: dict[str, dict[str, str]] = {}
        for row in rows:
            dest_code = _cell(row, "Dest_Code")
            by_origin = classification.setdefault(dest_code, {})
            by_origin[_cell(row, "Origin_Code")] = _cell(row, "Risk_Level")
        return classification

    def _collect_rule_details(
        self,
        step_rows: list[Row],
        requirement_rows: list[Row],
    ) -> dict[str, RuleDetail]:
        details: dict[str, RuleDetail] = {}

        for row in step_rows:
            detail = details.setdefault(_cell(row, "Rule_ID"), RuleDetail())
            detail.steps.append(
                Step(
                    order=parse_step_order(_cell(row, "Step_Order")),
                    text=_cell(row, "Content"),
                    timeframe=_cell(row, "Timeframe"),
                )
            )

        for row in requirement_rows:
            detail = details.setdefault(_cell(row, "Rule_ID"), RuleDetail())
            detail.requirements.append(_cell(row, "Requirement"))

        if self.options.sort_steps:
            for detail in details.values():
                # Stable sort; steps without a parseable order keep row order at the end
                detail.steps.sort(key=lambda s: (s.order is None, s.order or 0))

        return details

    def _attach_rules(
        self,
        rows: list[Row],
        countries: dict[str, str],
        rule_details: dict[str, RuleDetail],
    ) -> dict[str, DestinationRecord]:
        rules_by_dest: dict[str, dict[str, dict[str, RegulationEntry]]] = {
            code: {} for code in countries
        }
        attributes: dict[str, dict[str, str]] = {}

        for row in rows:
            rule_id = _cell(row, "Rule_ID")
            dest_code = _cell(row, "Dest_Code")
            risk_level = _cell(row, "Risk_Level")
            pet_type = _cell(row, "Pet_Type")

            if dest_code not in rules_by_dest:
                if self.options.integrity_policy == IntegrityPolicy.ABORT:
                    raise ReferentialIntegrityError(
                        f"Rule {rule_id} references unknown destination {dest_code!r}",
                        table_name=TableName.RULES.value,
                        rule_id=rule_id,
                        dest_code=dest_code,
                    )
                logger.warning(
                    "referential_integrity_skip",
                    rule_id=rule_id,
                    dest_code=dest_code,
                )
                continue

            detail = rule_details.get(rule_id) or RuleDetail()
            by_pet = rules_by_dest[dest_code].setdefault(risk_level, {})
            if pet_type in by_pet:
                logger.warning(
                    "duplicate_rule_overwritten",
                    rule_id=rule_id,
                    dest_code=dest_code,
                    risk_level=risk_level,
                    pet_type=pet_type,
                )
            by_pet[pet_type] = RegulationEntry(
                process_title=_cell(row, "Title"),
                steps=list(detail.steps),
                requirements=list(detail.requirements),
                contact=build_contact(_cell(row, "Contact_Unit"), _cell(row, "Contact_Link")),
            )

            self._merge_attributes(
                attributes.setdefault(dest_code, {}),
                dest_code,
                rule_id,
                {
                    "complexity": _cell(row, "Complexity"),
                    "preparation_time": _cell(row, "Prep_Time"),
                },
            )

        return {
            code: DestinationRecord(rules_by_risk=rules, **attributes.get(code, {}))
            for code, rules in rules_by_dest.items()
        }

    def _merge_attributes(
        self,
        current: dict[str, str],
        dest_code: str,
        rule_id: str,
        incoming: dict[str, str],
    ) -> None:
        for field_name, value in incoming.items():
            previous = current.get(field_name)
            if previous is not None and previous != value:
                if self.options.merge_policy == MergePolicy.STRICT:
                    raise DestinationConflictError(
                        f"Conflicting {field_name} for destination {dest_code}: "
                        f"{previous!r} vs {value!r} (rule {rule_id})",
                        dest_code=dest_code,
                        field=field_name,
                        values=[previous, value],
                    )
                logger.warning(
                    "destination_attribute_overwritten",
                    dest_code=dest_code,
                    field=field_name,
                    previous=previous,
                    value=value,
                    rule_id=rule_id,
                )
            current[field_name] = value


def transform(
    raw_tables: dict[str, list[Row]],
    options: Optional[TransformOptions] = None,
) -> RegulationIndex:
    """Transform raw tables into a regulation index with the given options."""
    return RegulationTransformer(options).transform(raw_tables)
