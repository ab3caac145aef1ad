"""Core data models for the pet travel knowledge base."""

from pet_travel_kb.models.country import Country, format_display_name
from pet_travel_kb.models.regulation import (
    Step,
    RuleDetail,
    RegulationEntry,
    DestinationRecord,
    RegulationIndex,
)
from pet_travel_kb.models.query import (
    PetType,
    RiskLevel,
    RiskLevelKind,
    ResolvedRegulation,
    CountrySelection,
    ORIGIN_UNLISTED_LABEL,
    NO_RISK_TABLE_LABEL,
)

__all__ = [
    "Country",
    "format_display_name",
    "Step",
    "RuleDetail",
    "RegulationEntry",
    "DestinationRecord",
    "RegulationIndex",
    "PetType",
    "RiskLevel",
    "RiskLevelKind",
    "ResolvedRegulation",
    "CountrySelection",
    "ORIGIN_UNLISTED_LABEL",
    "NO_RISK_TABLE_LABEL",
]
