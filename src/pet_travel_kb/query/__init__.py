"""Query resolution for the pet travel knowledge base."""

from pet_travel_kb.query.resolver import resolve, determine_risk_level, parse_pet_type
from pet_travel_kb.query.search import search_countries, default_selection

__all__ = [
    "resolve",
    "determine_risk_level",
    "parse_pet_type",
    "search_countries",
    "default_selection",
]
