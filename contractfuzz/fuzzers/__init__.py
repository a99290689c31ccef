"""
Fuzzers de campo e aplicação de estratégias sobre cópias do payload.
"""

from .base import Fuzzer, FuzzerContext, apply_strategy, with_ref_data
from .fields import (
    FIELD_FUZZERS,
    AbugidasFuzzer,
    InvalidFormatValuesFuzzer,
    LeadingControlCharsFuzzer,
    OnlyWhitespacesFuzzer,
    StringFieldFuzzer,
    TrailingMultiCodePointEmojisFuzzer,
    VeryLargeStringsFuzzer,
    ZeroWidthCharsFuzzer,
    build_field_fuzzers,
    iter_fuzz_cases,
)

__all__ = [
    "Fuzzer",
    "FuzzerContext",
    "apply_strategy",
    "with_ref_data",
    "FIELD_FUZZERS",
    "AbugidasFuzzer",
    "InvalidFormatValuesFuzzer",
    "LeadingControlCharsFuzzer",
    "OnlyWhitespacesFuzzer",
    "StringFieldFuzzer",
    "TrailingMultiCodePointEmojisFuzzer",
    "VeryLargeStringsFuzzer",
    "ZeroWidthCharsFuzzer",
    "build_field_fuzzers",
    "iter_fuzz_cases",
]
