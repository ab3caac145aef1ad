"""Query and resolution data models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from pet_travel_kb.models.regulation import RegulationEntry

ORIGIN_UNLISTED_LABEL = "Unlisted"
NO_RISK_TABLE_LABEL = "通用/未分級"


class PetType(str, Enum):
    """Supported pet types."""

    DOG = "Dog"
    CAT = "Cat"

    @property
    def label(self) -> str:
        """Chinese display label."""
        return _PET_LABELS[self]


_PET_LABELS = {
    PetType.DOG: "狗",
    PetType.CAT: "貓",
}


class RiskLevelKind(str, Enum):
    """How a risk level was determined for an origin/destination pair."""

    CLASSIFIED = "classified"
    ORIGIN_UNLISTED = "origin_unlisted"
    NO_RISK_TABLE = "no_risk_table"


class RiskLevel(BaseModel):
    """Risk level tagged with the condition that produced it.

    Sentinel kinds carry fixed labels so they cannot be confused with a
    classified level that happens to share the same text.
    """

    model_config = {"frozen": True}

    kind: RiskLevelKind
    label: str

    @classmethod
    def classified(cls, label: str) -> "RiskLevel":
        return cls(kind=RiskLevelKind.CLASSIFIED, label=label)

    @classmethod
    def origin_unlisted(cls) -> "RiskLevel":
        return cls(kind=RiskLevelKind.ORIGIN_UNLISTED, label=ORIGIN_UNLISTED_LABEL)

    @classmethod
    def no_risk_table(cls) -> "RiskLevel":
        return cls(kind=RiskLevelKind.NO_RISK_TABLE, label=NO_RISK_TABLE_LABEL)

    @property
    def is_sentinel(self) -> bool:
        return self.kind != RiskLevelKind.CLASSIFIED

    def __str__(self) -> str:
        return self.label


class ResolvedRegulation(BaseModel):
    """Successful answer to an (origin, destination, pet type) query."""

    model_config = {"frozen": True}

    origin_code: str
    origin_display_name: str
    dest_code: str
    dest_display_name: str
    pet_type: PetType
    risk_level: RiskLevel
    regulation: RegulationEntry
    complexity: str = ""
    preparation_time: str = ""


class CountrySelection(BaseModel):
    """Pre-filled origin and destination for a new query."""

    origin_code: str
    origin_display_name: str
    dest_code: str
    dest_display_name: str
    pet_type: Optional[PetType] = Field(None, description="Pre-selected pet type")
