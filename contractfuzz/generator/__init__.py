"""
Geração de payloads a partir de schemas OpenAPI.
"""

from .formats import FormatGenerator, GENERATORS, find_generator, generate_for_format
from .payload_generator import (
    ANY_OF,
    COMPOSITION_MARKERS,
    ONE_OF,
    Combination,
    Direction,
    PayloadGenerator,
    field_path,
    has_markers,
    reentries,
    strip_markers,
)

__all__ = [
    "FormatGenerator",
    "GENERATORS",
    "find_generator",
    "generate_for_format",
    "ANY_OF",
    "COMPOSITION_MARKERS",
    "ONE_OF",
    "Combination",
    "Direction",
    "PayloadGenerator",
    "field_path",
    "has_markers",
    "reentries",
    "strip_markers",
]
