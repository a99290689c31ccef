"""
Classificação e merge de estratégias de fuzzing.
"""

from .fuzzing_strategy import (
    ABUGIDA_GRAPHEMES,
    FuzzingStrategy,
    StrategyKind,
    classify,
    format_value,
    is_large_string,
    large_values_strategy,
    mark_large_string,
    merge_fuzzing,
    repeated_character_replacing_valid_value,
)

__all__ = [
    "ABUGIDA_GRAPHEMES",
    "FuzzingStrategy",
    "StrategyKind",
    "classify",
    "format_value",
    "is_large_string",
    "large_values_strategy",
    "mark_large_string",
    "merge_fuzzing",
    "repeated_character_replacing_valid_value",
]
