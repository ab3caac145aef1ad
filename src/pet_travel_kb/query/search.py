"""Country lookup for origin and destination inputs."""

from typing import Optional

from pet_travel_kb.models import Country, CountrySelection, PetType

DEFAULT_ORIGIN = ("TW", "台灣")
DEFAULT_DESTINATION = ("AU", "澳洲")


def search_countries(countries: dict[str, str], query: Optional[str] = None) -> list[Country]:
    """Return countries whose display name or code contains the query.

    Matching is case-insensitive on the trimmed query. An empty query
    returns every country, in the order they were loaded.
    """
    needle = (query or "").strip().lower()
    return [
        Country(code=code, display_name=name)
        for code, name in countries.items()
        if not needle or needle in name.lower() or needle in code.lower()
    ]


def default_selection(countries: dict[str, str]) -> CountrySelection:
    """Pre-filled form values; a convenience for the UI, not a resolver default."""
    origin_code, origin_fallback = DEFAULT_ORIGIN
    dest_code, dest_fallback = DEFAULT_DESTINATION
    return CountrySelection(
        origin_code=origin_code,
        origin_display_name=countries.get(origin_code) or origin_fallback,
        dest_code=dest_code,
        dest_display_name=countries.get(dest_code) or dest_fallback,
        pet_type=PetType.DOG,
    )
