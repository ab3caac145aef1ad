"""Resolution of (origin, destination, pet type) queries against the index.

Checks run in a fixed order and stop at the first failure:

1. both countries selected
2. origin differs from destination
3. pet type is supported
4. destination has rules
5. risk level determined from the classification table
6. regulation looked up by risk level and pet type
"""

from typing import Union

from pet_travel_kb.core import get_logger
from pet_travel_kb.core.errors import (
    MissingSelectionError,
    NoDataForDestinationError,
    NoRegulationFoundError,
    SameCountryError,
    UnknownPetTypeError,
)
from pet_travel_kb.models import (
    PetType,
    RegulationIndex,
    ResolvedRegulation,
    RiskLevel,
    RiskLevelKind,
)

logger = get_logger(__name__)


def parse_pet_type(value: Union[str, PetType]) -> PetType:
    """Parse a pet type, raising UnknownPetTypeError for unsupported values."""
    if isinstance(value, PetType):
        return value
    try:
        return PetType(value)
    except ValueError:
        raise UnknownPetTypeError(str(value)) from None


def determine_risk_level(index: RegulationIndex, origin_code: str, dest_code: str) -> RiskLevel:
    """Classify an origin for a destination.

    A destination without a classification table yields NO_RISK_TABLE; an
    origin missing from an existing table yields ORIGIN_UNLISTED.
    """
    by_origin = index.risk_classification.get(dest_code)
    if by_origin is None:
        return RiskLevel.no_risk_table()
    level = by_origin.get(origin_code)
    if not level:
        return RiskLevel.origin_unlisted()
    return RiskLevel.classified(level)


def resolve(
    index: RegulationIndex,
    origin_code: str,
    dest_code: str,
    pet_type: Union[str, PetType],
) -> ResolvedRegulation:
    """Find the regulation that applies to a query.

    Args:
        index: Regulation index to search
        origin_code: Country the pet travels from
        dest_code: Country the pet travels to
        pet_type: "Dog" or "Cat"

    Returns:
        ResolvedRegulation for the query

    Raises:
        MissingSelectionError: If either country code is empty
        SameCountryError: If origin and destination are equal
        UnknownPetTypeError: If the pet type is not supported
        NoDataForDestinationError: If the destination has no rules
        NoRegulationFoundError: If no rule matches the risk level and pet type
    """
    if not origin_code or not dest_code:
        raise MissingSelectionError()
    if origin_code == dest_code:
        raise SameCountryError(origin_code)

    pet = parse_pet_type(pet_type)

    dest_display_name = index.display_name(dest_code) or dest_code
    destination = index.get_destination(dest_code)
    if destination is None or not destination.rules_by_risk:
        raise NoDataForDestinationError(dest_code, index.display_name(dest_code))

    risk_level = determine_risk_level(index, origin_code, dest_code)
    origin_display_name = index.display_name(origin_code) or origin_code

    regulation = None
    if risk_level.kind != RiskLevelKind.NO_RISK_TABLE:
        regulation = destination.get_regulation(risk_level.label, pet.value)

    if regulation is None:
        logger.info(
            "regulation_not_found",
            origin=origin_code,
            destination=dest_code,
            pet_type=pet.value,
            risk_level=risk_level.label,
            risk_kind=risk_level.kind.value,
        )
        raise NoRegulationFoundError(
            origin_code,
            dest_code,
            risk_level.label,
            origin_display_name=origin_display_name,
            dest_display_name=dest_display_name,
        )

    logger.info(
        "regulation_resolved",
        origin=origin_code,
        destination=dest_code,
        pet_type=pet.value,
        risk_level=risk_level.label,
    )
    return ResolvedRegulation(
        origin_code=origin_code,
        origin_display_name=origin_display_name,
        dest_code=dest_code,
        dest_display_name=dest_display_name,
        pet_type=pet,
        risk_level=risk_level,
        regulation=regulation,
        complexity=destination.complexity,
        preparation_time=destination.preparation_time,
    )
