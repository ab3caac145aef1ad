"""Presentation of resolved regulations."""

from pet_travel_kb.presentation.formatter import (
    FormatterOptions,
    RegulationView,
    StepRow,
    build_view,
    render_html,
    is_high_complexity,
    NO_STEPS_PLACEHOLDER,
)

__all__ = [
    "FormatterOptions",
    "RegulationView",
    "StepRow",
    "build_view",
    "render_html",
    "is_high_complexity",
    "NO_STEPS_PLACEHOLDER",
]
