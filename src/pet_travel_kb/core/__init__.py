"""Core utilities for the pet travel knowledge base."""

from pet_travel_kb.core.logging import get_logger, configure_logging, bind_query_context
from pet_travel_kb.core.errors import (
    PetTravelKBError,
    FetchError,
    ParseError,
    ReferentialIntegrityError,
    DestinationConflictError,
    DataNotLoadedError,
    ResolutionError,
    MissingSelectionError,
    SameCountryError,
    NoDataForDestinationError,
    NoRegulationFoundError,
    UnknownPetTypeError,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "bind_query_context",
    # Load errors
    "PetTravelKBError",
    "FetchError",
    "ParseError",
    "ReferentialIntegrityError",
    "DestinationConflictError",
    "DataNotLoadedError",
    # Query errors
    "ResolutionError",
    "MissingSelectionError",
    "SameCountryError",
    "NoDataForDestinationError",
    "NoRegulationFoundError",
    "UnknownPetTypeError",
]
