"""Regulation index data models.

The index is built once per data load by the transformer and never mutated
afterwards; a reload produces a new index.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


class Step(BaseModel):
    """One step of a pet import process."""

    model_config = {"frozen": True}

    order: Optional[int] = Field(None, description="Step number; None when unparseable")
    text: str = Field("", description="What has to be done")
    timeframe: str = Field("", description="When it has to be done")


class RuleDetail(BaseModel):
    """Steps and requirements collected for one Rule_ID before rules are attached."""

    steps: list[Step] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    contact: list[str] = Field(default_factory=list)


class RegulationEntry(BaseModel):
    """Regulation for one (destination, risk level, pet type) triple."""

    model_config = {"frozen": True}

    process_title: str = Field(..., description="Title of the import process")
    steps: list[Step] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    contact: list[str] = Field(default_factory=list)


class DestinationRecord(BaseModel):
    """All regulations for a destination country, grouped by risk level then pet type."""

    model_config = {"frozen": True}

    rules_by_risk: dict[str, dict[str, RegulationEntry]] = Field(default_factory=dict)
    complexity: str = Field("", description="Overall complexity of importing a pet")
    preparation_time: str = Field("", description="Recommended preparation time")

    def get_regulation(self, risk_level: str, pet_type: str) -> Optional[RegulationEntry]:
        """Return the entry for a risk level and pet type, if any."""
        return self.rules_by_risk.get(risk_level, {}).get(pet_type)


class RegulationIndex(BaseModel):
    """Nested lookup of every regulation, keyed by destination code.

    Built once per load and never changed afterwards. A reload builds a new
    index and swaps it in whole. Freezing only blocks attribute assignment,
    so the nested dicts are read-only by convention: callers must not mutate
    them.
    """

    model_config = {"frozen": True}

    countries: dict[str, str] = Field(
        default_factory=dict, description="Country code to display name"
    )
    risk_classification: dict[str, dict[str, str]] = Field(
        default_factory=dict, description="Destination code to (origin code to risk level)"
    )
    destinations: dict[str, DestinationRecord] = Field(default_factory=dict)
    loaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get_destination(self, dest_code: str) -> Optional[DestinationRecord]:
        return self.destinations.get(dest_code)

    def display_name(self, code: str) -> Optional[str]:
        return self.countries.get(code)

    @property
    def rule_count(self) -> int:
        return sum(
            len(by_pet)
            for record in self.destinations.values()
            for by_pet in record.rules_by_risk.values()
        )
