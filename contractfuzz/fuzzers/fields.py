"""
================================================================================
FUZZERS DE CAMPOS
================================================================================

Conjunto fechado de fuzzers de campo, registrados numa tabela estática.

| Fuzzer                         | Estratégia | Corrupção                       |
|--------------------------------|------------|---------------------------------|
| LeadingControlCharsFuzzer      | prefix     | caracteres de controle no início |
| TrailingMultiCodePointEmojis   | trail      | emojis de vários code points    |
| ZeroWidthCharsFuzzer           | insert     | caracteres invisíveis no meio   |
| AbugidasFuzzer                 | replace    | grafemas com ZWNJ               |
| OnlyWhitespacesFuzzer          | replace    | só espaços (acima de minLength) |
| VeryLargeStringsFuzzer         | replace    | string gigante marcada          |
| InvalidFormatValuesFuzzer      | replace    | valores quase/totalmente errados |

Todos devolvem `skip` para campos que não são string, e nenhum fuzza
discriminators nem enums.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterator

from ..generator import find_generator
from ..model import FuzzingData
from ..strategy import (
    ABUGIDA_GRAPHEMES,
    FuzzingStrategy,
    large_values_strategy,
    repeated_character_replacing_valid_value,
)
from .base import Fuzzer, FuzzerContext, apply_strategy

logger = logging.getLogger(__name__)


def _is_string(schema: dict[str, Any]) -> bool:
    declared = schema.get("type")
    if isinstance(declared, list):
        return "string" in declared
    return declared == "string" or (declared is None and "format" in schema)


@dataclass
class StringFieldFuzzer:
    """
    Base dos fuzzers de campos string.

    Subclasses definem `name`, `description` e `strategies()`.
    """
    context: FuzzerContext

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    skip_ref_data: ClassVar[bool] = True

    def applicable(self, data: FuzzingData, field_name: str) -> bool:
        schema = data.request_property_types.get(field_name)
        if schema is None or field_name not in data.all_fields():
            return False
        if self.context.is_discriminator(field_name):
            return False
        if schema.get("enum"):
            return False
        if self.skip_ref_data and field_name in self.context.ref_data_for(data.path):
            return False
        return True

    def mutate(self, data: FuzzingData, field_name: str) -> list[FuzzingStrategy]:
        schema = data.request_property_types.get(field_name) or {}
        if not _is_string(schema):
            return [FuzzingStrategy.skip()]
        return self.strategies(data, field_name, schema)

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        raise NotImplementedError


class LeadingControlCharsFuzzer(StringFieldFuzzer):
    name = "LeadingControlChars"
    description = "prefixa campos string com caracteres de controle"
    skip_ref_data = False

    CHARS = ("\r\n", "\u0000", "\u0007", "\u001b", "\u007f", "\u200b", "\ufeff")

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        return [FuzzingStrategy.prefix().with_data(char) for char in self.CHARS]


class TrailingMultiCodePointEmojisFuzzer(StringFieldFuzzer):
    name = "TrailingMultiCodePointEmojis"
    description = "acrescenta emojis de múltiplos code points ao final de campos string"
    skip_ref_data = False

    EMOJIS = ("\U0001F469\U0001F3FE", "\U0001F468\u200D\U0001F3ED\uFE0F")

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        return [FuzzingStrategy.trail().with_data(emoji) for emoji in self.EMOJIS]


class ZeroWidthCharsFuzzer(StringFieldFuzzer):
    name = "ZeroWidthChars"
    description = "insere caracteres de largura zero no meio de campos string"
    skip_ref_data = False

    CHARS = ("\u200b", "\u200c", "\u200d", "\u2060", "\ufeff")

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        return [FuzzingStrategy.insert().with_data(char) for char in self.CHARS]


class AbugidasFuzzer(StringFieldFuzzer):
    name = "Abugidas"
    description = "substitui campos string por grafemas de abugidas com ZWNJ"

    GRAPHEMES = "".join(ABUGIDA_GRAPHEMES)

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        value = self.GRAPHEMES
        min_length = schema.get("minLength") or 0
        if len(value) < min_length:
            value = value * (min_length // len(value) + 1)
        return [FuzzingStrategy.replace().with_data(value)]


class OnlyWhitespacesFuzzer(StringFieldFuzzer):
    name = "OnlyWhitespaces"
    description = "substitui campos string por espaços repetidos"

    CHARS = (" ", "\u00a0", "\u3000")

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        return [
            repeated_character_replacing_valid_value(data, field_name, char)
            for char in self.CHARS
        ]


class VeryLargeStringsFuzzer(StringFieldFuzzer):
    name = "VeryLargeStrings"
    description = "substitui campos string por strings muito grandes"

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        return large_values_strategy(self.context.large_strings_size)


class InvalidFormatValuesFuzzer(StringFieldFuzzer):
    name = "InvalidFormatValues"
    description = "envia valores quase válidos e totalmente inválidos para campos com formato"

    def applicable(self, data: FuzzingData, field_name: str) -> bool:
        if not super().applicable(data, field_name):
            return False
        schema = data.request_property_types.get(field_name) or {}
        return find_generator(schema.get("format"), field_name.split("#")[-1]) is not None

    def strategies(
        self,
        data: FuzzingData,
        field_name: str,
        schema: dict[str, Any],
    ) -> list[FuzzingStrategy]:
        generator = find_generator(schema.get("format"), field_name.split("#")[-1])
        if generator is None:
            return [FuzzingStrategy.skip()]
        return [
            FuzzingStrategy.replace().with_data(generator.almost_valid),
            FuzzingStrategy.replace().with_data(generator.totally_wrong),
        ]


# =============================================================================
# TABELA ESTÁTICA
# =============================================================================

FIELD_FUZZERS: tuple[type[StringFieldFuzzer], ...] = (
    LeadingControlCharsFuzzer,
    TrailingMultiCodePointEmojisFuzzer,
    ZeroWidthCharsFuzzer,
    AbugidasFuzzer,
    OnlyWhitespacesFuzzer,
    VeryLargeStringsFuzzer,
    InvalidFormatValuesFuzzer,
)


def build_field_fuzzers(context: FuzzerContext) -> list[Fuzzer]:
    """Instancia todos os fuzzers da tabela com o mesmo contexto."""
    return [fuzzer_type(context) for fuzzer_type in FIELD_FUZZERS]


def iter_fuzz_cases(
    data: FuzzingData,
    fuzzers: list[Fuzzer],
    context: FuzzerContext,
) -> Iterator[tuple[Fuzzer, str, FuzzingStrategy, Any]]:
    """
    Gera `(fuzzer, campo, estratégia, payload_mutado)` para um registro.

    Estratégias `skip` não geram caso.
    """
    ref_data = context.ref_data_for(data.path)
    for field_name in sorted(data.get_all_fields_by_http_method()):
        for fuzzer in fuzzers:
            if not fuzzer.applicable(data, field_name):
                continue
            for strategy in fuzzer.mutate(data, field_name):
                if strategy.is_skip():
                    logger.debug("%s: %s pulado", fuzzer.name, field_name)
                    continue
                yield fuzzer, field_name, strategy, apply_strategy(data, field_name, strategy, ref_data)
