"""
================================================================================
Testes: Classificação e Merge de Estratégias de Fuzzing
================================================================================

Cobre:
- Ordem de decisão de `FuzzingStrategy.from_value`
- `merge_fuzzing` aplicando a mesma corrupção a outro valor
- Formatação de payloads invisíveis e truncamento
- Estratégias prontas (strings gigantes, caractere repetido)
"""

from __future__ import annotations

import pytest

from contractfuzz.model import FuzzingData, HttpMethod
from contractfuzz.strategy import (
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


# =============================================================================
# TESTES: from_value
# =============================================================================


class TestFromValue:
    """Classificação de valores fuzzados."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
    def test_empty_or_blank_is_replace(self, value: object) -> None:
        """Vazio, branco e None viram replace com o próprio valor."""
        strategy = FuzzingStrategy.from_value(value)
        assert strategy.kind is StrategyKind.REPLACE
        assert strategy.data == value

    def test_only_special_chars_is_replace(self) -> None:
        """Valor composto só de especiais é replace."""
        value = "\u200b\u0000\u200d"
        assert FuzzingStrategy.from_value(value) == FuzzingStrategy.replace().with_data(value)

    def test_leading_control_char_is_prefix(self) -> None:
        """Primeiro caractere especial vira prefix só com os especiais."""
        strategy = FuzzingStrategy.from_value("\u0000abc")
        assert strategy == FuzzingStrategy.prefix().with_data("\u0000")

    def test_leading_space_is_prefix(self) -> None:
        assert FuzzingStrategy.from_value(" abc") == FuzzingStrategy.prefix().with_data(" ")

    def test_trailing_separator_is_trail(self) -> None:
        """Último caractere especial vira trail."""
        strategy = FuzzingStrategy.from_value("abc\u2028")
        assert strategy == FuzzingStrategy.trail().with_data("\u2028")

    def test_trailing_skin_tone_emoji_is_trail(self) -> None:
        """Emoji com modificador de tom de pele no final."""
        strategy = FuzzingStrategy.from_value("abc\U0001F469\U0001F3FE")
        assert strategy.kind is StrategyKind.TRAIL
        assert strategy.data == "\U0001F469\U0001F3FE"

    def test_large_string_is_replace(self) -> None:
        """String marcada como gigante é replace mesmo sem especiais."""
        value = mark_large_string("x" * 100)
        assert FuzzingStrategy.from_value(value) == FuzzingStrategy.replace().with_data(value)

    def test_zero_width_inside_is_insert(self) -> None:
        """Caractere invisível no meio vira insert com o fragmento."""
        strategy = FuzzingStrategy.from_value("ab\u200bcd")
        assert strategy == FuzzingStrategy.insert().with_data("\u200b")

    def test_abugida_inside_is_insert(self) -> None:
        """Grafema de abugida no meio é detectado inteiro."""
        grapheme = ABUGIDA_GRAPHEMES[0]
        strategy = FuzzingStrategy.from_value(f"abc{grapheme}xyz")
        assert strategy == FuzzingStrategy.insert().with_data(grapheme)

    def test_plain_value_is_replace(self) -> None:
        assert FuzzingStrategy.from_value("hello") == FuzzingStrategy.replace().with_data("hello")

    def test_non_string_values_never_fail(self) -> None:
        """Classificação é total: números e objetos também são aceitos."""
        assert FuzzingStrategy.from_value(42).kind is StrategyKind.REPLACE
        assert FuzzingStrategy.from_value([1]).data == [1]

    def test_classify_alias(self) -> None:
        assert classify(" x") == FuzzingStrategy.from_value(" x")


# =============================================================================
# TESTES: process / merge
# =============================================================================


class TestProcessAndMerge:
    """Aplicação das estratégias."""

    def test_process_by_kind(self) -> None:
        """Cada tipo transforma o valor do seu jeito."""
        assert FuzzingStrategy.replace().with_data("X").process("abc") == "X"
        assert FuzzingStrategy.noop().with_data("X").process("abc") == "X"
        assert FuzzingStrategy.skip().process("abc") == "abc"
        assert FuzzingStrategy.prefix().with_data("X").process("abc") == "Xabc"
        assert FuzzingStrategy.trail().with_data("X").process("abc") == "abcX"
        assert FuzzingStrategy.insert().with_data("X").process("abcd") == "abXcd"

    def test_merge_prefix(self) -> None:
        assert merge_fuzzing("\u0000abc", "valor") == "\u0000valor"

    def test_merge_trail(self) -> None:
        assert merge_fuzzing("abc\u2028", "fixo") == "fixo\u2028"

    def test_merge_insert(self) -> None:
        assert merge_fuzzing("ab\u200bcd", "wxyz") == "wx\u200byz"

    def test_merge_replace_keeps_fuzzed(self) -> None:
        """Replace descarta o valor fornecido."""
        assert merge_fuzzing("hello", "fixo") == "hello"

    def test_with_data_does_not_mutate(self) -> None:
        original = FuzzingStrategy.prefix()
        updated = original.with_data("X")
        assert original.data is None
        assert updated.data == "X"
        assert updated.kind is StrategyKind.PREFIX


# =============================================================================
# TESTES: formatação
# =============================================================================


class TestFormatting:
    """Representação imprimível das estratégias."""

    def test_format_value_escapes_invisible(self) -> None:
        assert format_value("a\u200bb") == "a\\u200bb"

    def test_format_value_escapes_astral_as_surrogates(self) -> None:
        """Code points fora do BMP viram par de surrogates."""
        assert format_value("\U0001F600") == "\\ud83d\\ude00"

    def test_format_value_none(self) -> None:
        assert format_value(None) is None

    def test_truncated_value_without_data(self) -> None:
        assert FuzzingStrategy.skip().truncated_value() == "SKIP"

    def test_truncated_value_cuts_at_30(self) -> None:
        """Payloads longos são cortados em 30 caracteres."""
        strategy = FuzzingStrategy.replace().with_data("a" * 50)
        assert str(strategy) == f"REPLACE with {'a' * 30}..."

    def test_str_formats_data(self) -> None:
        assert str(FuzzingStrategy.prefix().with_data("\u0000")) == "PREFIX with \\u0000"


# =============================================================================
# TESTES: estratégias prontas
# =============================================================================


class TestReadyStrategies:
    """Estratégias usadas pelos fuzzers."""

    def test_large_values_strategy_is_marked(self) -> None:
        strategies = large_values_strategy(200)
        assert len(strategies) == 1
        value = strategies[0].data
        assert is_large_string(value)
        assert len(value) >= 200

    def test_large_values_strategy_small_size(self) -> None:
        value = large_values_strategy(5)[0].data
        assert value.startswith("ca") and value.endswith("ts")

    def test_repeated_character_respects_min_length(self) -> None:
        """Repete o caractere além de minLength."""
        data = FuzzingData(
            method=HttpMethod.POST,
            path="/pets",
            payload='{"name": "rex"}',
            content_type="application/json",
            request_property_types={"name": {"type": "string", "minLength": 5}},
        )
        strategy = repeated_character_replacing_valid_value(data, "name", " ")
        assert strategy.kind is StrategyKind.REPLACE
        assert strategy.data == " " * 6

    def test_repeated_character_without_min_length(self) -> None:
        data = FuzzingData(
            method=HttpMethod.POST,
            path="/pets",
            payload='{"name": "rex"}',
            content_type="application/json",
            request_property_types={"name": {"type": "string"}},
        )
        assert repeated_character_replacing_valid_value(data, "name", " ").data == " "
