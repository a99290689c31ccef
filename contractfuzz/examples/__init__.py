"""
Resolução de exemplos (media type, schema e parâmetros).
"""

from .resolver import (
    MISSING,
    ExampleResolver,
    closest_combination,
    is_example_object,
    overlay,
    schema_example,
)

__all__ = [
    "MISSING",
    "ExampleResolver",
    "closest_combination",
    "is_example_object",
    "overlay",
    "schema_example",
]
