"""
================================================================================
CONTRATO DOS FUZZERS
================================================================================

Fronteira entre a resolução do contrato e as estratégias de fuzzing.

## Para todos entenderem:

Um fuzzer recebe um `FuzzingData` e o nome de um campo e responde:

- `applicable(data, field)`: faz sentido fuzzar este campo?
- `mutate(data, field)`: quais corrupções tentar (`FuzzingStrategy`)?

Os fuzzers nunca alteram o `FuzzingData`. Para montar o payload mutado
usa-se `apply_strategy`, que trabalha sobre uma cópia.

## Dados de referência:

Alguns campos precisam de valores reais (um `accountId` que existe no
ambiente de teste). Quando `ref_data` fornece o campo, o valor real passa
pela mesma corrupção do valor fuzzado (`merge_fuzzing`), em vez de
substituí-lo cru. Valores `${nome}` são lidos de `variables`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from ..context import ContractContext
from ..model import FuzzingData
from ..strategy import FuzzingStrategy, merge_fuzzing

logger = logging.getLogger(__name__)


@runtime_checkable
class Fuzzer(Protocol):
    """Capacidade comum a todos os fuzzers de campo."""

    name: str
    description: str

    def applicable(self, data: FuzzingData, field_name: str) -> bool:
        ...

    def mutate(self, data: FuzzingData, field_name: str) -> list[FuzzingStrategy]:
        ...


@dataclass
class FuzzerContext:
    """
    O que os fuzzers sabem além do `FuzzingData`.

    - `discriminators`: nomes de propriedades usadas como discriminator
    - `ref_data`: path → {campo: valor real}
    - `large_strings_size`: tamanho das strings gigantes
    """
    discriminators: set[str] = field(default_factory=set)
    ref_data: dict[str, dict[str, Any]] = field(default_factory=dict)
    large_strings_size: int = 40000

    @classmethod
    def from_contract(
        cls,
        context: ContractContext,
        large_strings_size: int = 40000,
        ref_data: dict[str, dict[str, Any]] | None = None,
    ) -> "FuzzerContext":
        return cls(
            discriminators=set(context.discriminators),
            ref_data=ref_data or {},
            large_strings_size=large_strings_size,
        )

    def is_discriminator(self, field_name: str) -> bool:
        return field_name.split("#")[-1] in self.discriminators

    def ref_data_for(self, path: str) -> dict[str, Any]:
        return self.ref_data.get(path, {})


# =============================================================================
# APLICAÇÃO DE ESTRATÉGIAS
# =============================================================================


def _resolve_variable(value: Any, variables: dict[str, Any]) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        name = value[2:-1]
        if name not in variables:
            logger.error("Variável não encontrada: %s", value)
            return value
        return variables[name]
    return value


def _parents(node: Any, segments: list[str]) -> list[dict[str, Any]]:
    """Todos os objetos que contêm o último segmento (arrays expandem)."""
    if isinstance(node, list):
        return [parent for item in node for parent in _parents(item, segments)]
    if not isinstance(node, dict):
        return []
    if len(segments) == 1:
        return [node] if segments[0] in node else []
    if segments[0] not in node:
        return []
    return _parents(node[segments[0]], segments[1:])


def apply_strategy(
    data: FuzzingData,
    field_name: str,
    strategy: FuzzingStrategy,
    ref_data: dict[str, Any] | None = None,
    variables: dict[str, Any] | None = None,
) -> Any:
    """
    Payload novo com `strategy` aplicada a `field_name` (`a#b`).

    ## Parâmetros:

    - `data`: registro de origem (não é alterado)
    - `field_name`: campo alvo; em arrays, todos os elementos são afetados
    - `strategy`: corrupção a aplicar
    - `ref_data`: valores reais por campo para este path
    - `variables`: valores para substituir `${nome}` em `ref_data`

    ## Retorna:

    O payload (dict/list) mutado.
    """
    payload = data.payload_as_json()
    supplied = ref_data or {}
    variables = variables or {}
    for parent in _parents(payload, field_name.split("#")):
        key = field_name.split("#")[-1]
        fuzzed = strategy.process(parent[key])
        if field_name in supplied and not strategy.is_skip():
            fuzzed = merge_fuzzing(fuzzed, _resolve_variable(supplied[field_name], variables))
        parent[key] = fuzzed
    return payload


def with_ref_data(
    data: FuzzingData,
    ref_data: dict[str, Any],
    variables: dict[str, Any] | None = None,
) -> Any:
    """Payload com os campos de `ref_data` substituídos pelos valores reais."""
    payload = data.payload_as_json()
    variables = variables or {}
    for field_name, value in ref_data.items():
        parents = _parents(payload, field_name.split("#"))
        if not parents:
            logger.debug("Campo de ref data ausente no payload: %s", field_name)
        for parent in parents:
            parent[field_name.split("#")[-1]] = _resolve_variable(value, variables)
    return payload
