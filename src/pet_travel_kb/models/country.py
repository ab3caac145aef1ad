"""Country data models."""

from pydantic import BaseModel, Field


class Country(BaseModel):
    """A country that can be chosen as origin or destination."""

    model_config = {"frozen": True}

    code: str = Field(..., description="Short country code (e.g., TW, AU)")
    display_name: str = Field(..., description='Display name, "LocalName (EnglishName)"')


def format_display_name(local_name: str, english_name: str) -> str:
    """Format a country display name from its local and English names."""
    return f"{local_name} ({english_name})"
