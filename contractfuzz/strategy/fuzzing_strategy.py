"""
================================================================================
ESTRATÉGIAS DE FUZZING: CLASSIFICAÇÃO E MERGE
================================================================================

Um valor "fuzzado" quase nunca é só um valor: ele carrega uma *forma* de
corrupção. `"\\u0000abc"` é um prefixo de caractere de controle; `"abc👩\u200d🚀"` é
um sufixo de emoji; `"ab\\u200bc"` é um caractere invisível no meio.

## Para todos entenderem:

Este módulo responde duas perguntas:

1. **Que corrupção é essa?** (`FuzzingStrategy.from_value`)
   Olha o valor e devolve uma estratégia `replace`, `prefix`, `trail`,
   `insert`, `skip` ou `noop`, com o "pedaço malicioso" como payload.

2. **Como aplicar a mesma corrupção a outro valor?** (`merge_fuzzing`)
   Quando um valor fixo (ex.: dado de referência fornecido pelo usuário)
   precisa conviver com um valor fuzzado no mesmo campo, o valor fixo passa
   pela mesma forma de corrupção em vez de ser usado cru.

## Caracteres "especiais":

Controle/formato/uso privado/surrogate (C*), separadores (Z*), símbolos
"outros"/modificadores (So, Sk) e marcas combinantes (M*). Marcas só contam
para o teste de "tudo especial" e para a busca interna, nunca para as bordas.

## Exemplo:

    >>> FuzzingStrategy.from_value("\\u0000abc")
    FuzzingStrategy(kind=<StrategyKind.PREFIX: 'PREFIX'>, data='\\x00')
    >>> merge_fuzzing("\\u0000abc", "valor")
    '\\x00valor'
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import unicodedata

if TYPE_CHECKING:
    from ..model.fuzzing_data import FuzzingData

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTES
# =============================================================================

# Grafemas de múltiplos code points usados para testar ZWNJ/marcas combinantes
ABUGIDA_GRAPHEMES = ("జ్ఞ\u200cా", "স্র\u200cু")

LARGE_STRING_PREFIX = "ca"
LARGE_STRING_SUFFIX = "ts"

# Amostra multi-script repetida para compor strings gigantes
UNICODE_SAMPLE = "ЀЁЂЃЄЅĀāĂăĄąαβγδεζ中文字符テスト한국어"

TRUNCATE_AT = 30

_EDGE_CATEGORIES = frozenset({
    "Cc", "Cf", "Co", "Cs",   # controle
    "Zl", "Zp", "Zs",         # separadores
    "So", "Sk",               # outros símbolos
})


def _category(char: str) -> str:
    return unicodedata.category(char)


def is_edge_special(char: str) -> bool:
    """Caractere que caracteriza prefixo/sufixo malicioso."""
    return _category(char) in _EDGE_CATEGORIES


def is_special(char: str) -> bool:
    """Caractere de controle, separador, símbolo outro/modificador ou marca."""
    cat = _category(char)
    return cat[0] in ("C", "Z", "M") or cat in ("So", "Sk")


def is_large_string(value: str) -> bool:
    """True para strings marcadas por `mark_large_string`."""
    return value.startswith(LARGE_STRING_PREFIX) and value.endswith(LARGE_STRING_SUFFIX)


def mark_large_string(value: str) -> str:
    return f"{LARGE_STRING_PREFIX}{value}{LARGE_STRING_SUFFIX}"


def _keep_special(value: str) -> str:
    return "".join(char for char in value if is_special(char))


def _find_within(value: str) -> str | None:
    """
    Primeiro fragmento especial no interior do valor.

    Varre da esquerda para a direita; em cada posição tenta primeiro uma
    sequência máxima de caracteres especiais e depois os grafemas de abugida.
    """
    index = 0
    while index < len(value):
        if is_special(value[index]):
            end = index
            while end < len(value) and is_special(value[end]):
                end += 1
            return value[index:end]
        for grapheme in ABUGIDA_GRAPHEMES:
            if value.startswith(grapheme, index):
                return grapheme
        index += 1
    return None


def format_value(data: str | None) -> str | None:
    """
    Reescreve caracteres invisíveis/símbolos como `\\uXXXX`.

    Code points fora do BMP viram par de surrogates (`\\ud83d\\ude00`),
    para que logs e relatórios fiquem imprimíveis. Puramente cosmético.
    """
    if data is None:
        return None
    parts: list[str] = []
    for char in data:
        if not is_edge_special(char):
            parts.append(char)
            continue
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            parts.append(f"\\u{0xD800 + (code >> 10):04x}\\u{0xDC00 + (code & 0x3FF):04x}")
        else:
            parts.append(f"\\u{code:04x}")
    return "".join(parts)


# =============================================================================
# ESTRATÉGIA
# =============================================================================


class StrategyKind(Enum):
    """Formas de corrupção suportadas."""
    REPLACE = "REPLACE"
    PREFIX = "PREFIX"
    TRAIL = "TRAIL"
    INSERT = "INSERT"
    SKIP = "SKIP"
    NOOP = "NOOP"


@dataclass(frozen=True)
class FuzzingStrategy:
    """
    Descritor imutável de corrupção: tipo + payload.

    ## Como cada tipo processa um valor:

    - `replace`: devolve o próprio payload, ignorando o valor
    - `prefix`: payload + valor
    - `trail`: valor + payload
    - `insert`: payload inserido no meio do valor
    - `skip`: devolve o valor intacto
    - `noop`: devolve o próprio payload

    Igualdade é por `kind` + `data`, o que permite comparar em testes.
    """
    kind: StrategyKind
    data: Any = None

    # -------------------------------------------------------------------------
    # Construtores
    # -------------------------------------------------------------------------

    @classmethod
    def replace(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.REPLACE)

    @classmethod
    def prefix(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.PREFIX)

    @classmethod
    def trail(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.TRAIL)

    @classmethod
    def insert(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.INSERT)

    @classmethod
    def skip(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.SKIP)

    @classmethod
    def noop(cls) -> "FuzzingStrategy":
        return cls(StrategyKind.NOOP)

    def with_data(self, data: Any) -> "FuzzingStrategy":
        """Nova estratégia do mesmo tipo com outro payload."""
        return dataclasses.replace(self, data=data)

    # -------------------------------------------------------------------------
    # Comportamento
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.kind.value

    def is_skip(self) -> bool:
        return self.kind is StrategyKind.SKIP

    def process(self, value: Any) -> Any:
        """Aplica esta forma de corrupção a `value`."""
        if self.kind in (StrategyKind.REPLACE, StrategyKind.NOOP):
            return self.data
        if self.kind is StrategyKind.SKIP:
            return value
        if self.kind is StrategyKind.PREFIX:
            return f"{self.data}{value}"
        if self.kind is StrategyKind.TRAIL:
            return f"{value}{self.data}"
        text = str(value)
        middle = len(text) // 2
        return f"{text[:middle]}{self.data}{text[middle:]}"

    def truncated_value(self) -> str:
        """`NOME with payload` com payload cortado em 30 caracteres."""
        if self.data is None:
            return self.name
        to_print = str(self.data)
        if len(to_print) > TRUNCATE_AT:
            to_print = to_print[:TRUNCATE_AT] + "..."
        return f"{self.name} with {format_value(to_print)}"

    def __str__(self) -> str:
        return self.truncated_value()

    # -------------------------------------------------------------------------
    # Classificação
    # -------------------------------------------------------------------------

    @classmethod
    def from_value(cls, value: Any) -> "FuzzingStrategy":
        """
        Classifica um valor fuzzado na sua forma de corrupção.

        Ordem de decisão (primeira que casar vence):

        1. Vazio/branco ou composto só de especiais → `replace` com o valor
        2. Primeiro caractere especial → `prefix` com os especiais
        3. Último caractere especial → `trail` com os especiais
        4. String gigante marcada → `replace` com o valor
        5. Fragmento especial no interior → `insert` com o fragmento
        6. Qualquer outra coisa → `replace` com o valor

        Nunca falha, inclusive para `None`.
        """
        text = "" if value is None else str(value)
        if not text.strip() or all(is_special(char) for char in text):
            return cls.replace().with_data(value)
        if is_edge_special(text[0]):
            return cls.prefix().with_data(_keep_special(text))
        if is_edge_special(text[-1]):
            return cls.trail().with_data(_keep_special(text))
        if is_large_string(text):
            return cls.replace().with_data(value)
        fragment = _find_within(text)
        if fragment is not None:
            return cls.insert().with_data(fragment)
        return cls.replace().with_data(value)


classify = FuzzingStrategy.from_value


def merge_fuzzing(fuzzed_value: Any, supplied_value: Any) -> Any:
    """
    Força `supplied_value` pela mesma corrupção de `fuzzed_value`.

    ## Exemplo:

        >>> merge_fuzzing("abc\\u2028", "fixo")
        'fixo\\u2028'
    """
    strategy = FuzzingStrategy.from_value(fuzzed_value)
    logger.debug("Merge de valor fornecido via %s", strategy)
    return strategy.process(supplied_value)


# =============================================================================
# ESTRATÉGIAS PRONTAS PARA FUZZERS
# =============================================================================


def large_values_strategy(large_strings_size: int) -> list[FuzzingStrategy]:
    """String gigante (marcada) com aproximadamente `large_strings_size` caracteres."""
    repetitions = large_strings_size // len(UNICODE_SAMPLE)
    if repetitions == 0:
        generated = UNICODE_SAMPLE[:large_strings_size]
    else:
        generated = UNICODE_SAMPLE * (repetitions + 1)
    return [FuzzingStrategy.replace().with_data(mark_large_string(generated))]


def repeated_character_replacing_valid_value(
    data: "FuzzingData",
    fuzzed_field: str,
    character: str,
) -> FuzzingStrategy:
    """
    Substitui o valor por um caractere repetido.

    Se o schema do campo declara `minLength`, repete o caractere o suficiente
    para ultrapassá-lo; senão usa o caractere uma vez.
    """
    schema = data.request_property_types.get(fuzzed_field) or {}
    value = character
    min_length = schema.get("minLength") if isinstance(schema, dict) else None
    if min_length is not None:
        value = character * (min_length // len(character) + 1)
    return FuzzingStrategy.replace().with_data(value)
