"""Pet travel regulation lookup service."""

from pet_travel_kb.lookup.service import RegulationLookupService

__all__ = ["RegulationLookupService"]
