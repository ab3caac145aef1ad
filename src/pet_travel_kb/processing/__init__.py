"""Table processing for the pet travel knowledge base."""

from pet_travel_kb.processing.transformer import (
    RegulationTransformer,
    TransformOptions,
    MergePolicy,
    IntegrityPolicy,
    transform,
    parse_step_order,
    build_contact,
)

__all__ = [
    "RegulationTransformer",
    "TransformOptions",
    "MergePolicy",
    "IntegrityPolicy",
    "transform",
    "parse_step_order",
    "build_contact",
]
