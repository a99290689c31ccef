"""
================================================================================
RESOLUÇÃO DE EXEMPLOS
================================================================================

Decide quais exemplos do contrato sobrescrevem os valores gerados.

## Para todos entenderem:

O gerador sabe produzir um payload válido a partir do schema, mas o autor
do contrato muitas vezes já escreveu exemplos melhores. Este módulo encontra
esses exemplos e os sobrepõe aos valores gerados, respeitando as flags de
configuração e a precedência:

1. Exemplo do media type (`content.application/json.example(s)`)
2. Exemplo declarado no schema (`schema.example`)
3. Valor gerado

## Exemplos por referência:

`{"$ref": "#/components/examples/PET/value/name"}` busca `PET` no mapa de
exemplos e desce o sufixo `value/name`. Se o nó final é um Example Object,
seu `value` é usado. Ponteiros fora de `components/examples` (inclusive para
o exemplo de outro path) passam pelo registro do `ContractContext`.
Referências pendentes nunca abortam: o erro é registrado e o valor gerado
é mantido.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import TYPE_CHECKING, Any

from ..context import MAX_REF_HOPS, navigate, split_pointer
from ..errors import ResolutionError

if TYPE_CHECKING:
    from ..config import ExamplesFlags
    from ..context import ContractContext

logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

EXAMPLES_POINTER = "#/components/examples/"
EXAMPLE_OBJECT_KEYS = frozenset({"value", "summary", "description", "externalValue"})


# =============================================================================
# FUNÇÕES PURAS
# =============================================================================


def is_example_object(node: Any) -> bool:
    """Example Object do OpenAPI: só `value`/`summary`/`description`/`externalValue`."""
    return isinstance(node, dict) and "value" in node and set(node) <= EXAMPLE_OBJECT_KEYS


def schema_example(schema: dict[str, Any]) -> Any:
    """`example` do schema, ou o primeiro de `examples` (3.1); senão MISSING."""
    if "example" in schema:
        return schema["example"]
    examples = schema.get("examples")
    if isinstance(examples, list) and examples:
        return examples[0]
    return MISSING


def overlay(generated: Any, example: Any) -> Any:
    """
    Sobrepõe `example` a `generated` (merge profundo, exemplo vence).

    Quando algum dos lados não é objeto, o exemplo substitui o gerado.
    Nunca altera os argumentos.

    ## Exemplo:

        >>> overlay({"id": 1, "tag": {"a": 1}}, {"tag": {"b": 2}})
        {'id': 1, 'tag': {'a': 1, 'b': 2}}
    """
    if not isinstance(generated, dict) or not isinstance(example, dict):
        return copy.deepcopy(example)
    merged = copy.deepcopy(generated)
    for key, value in example.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = overlay(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _shared_keys(generated: Any, example: Any) -> int:
    if isinstance(generated, dict) and isinstance(example, dict):
        return len(set(generated) & set(example))
    return 0


def closest_combination(candidates: list[Any], example: Any) -> int:
    """Índice do candidato que compartilha mais chaves de topo com o exemplo."""
    best, best_score = 0, -1
    for index, candidate in enumerate(candidates):
        score = _shared_keys(candidate, example)
        if score > best_score:
            best, best_score = index, score
    return best


def _dedupe(values: list[Any]) -> list[Any]:
    seen: set[str] = set()
    result: list[Any] = []
    for value in values:
        key = json.dumps(value, sort_keys=True, default=str)
        if key not in seen:
            seen.add(key)
            result.append(value)
    return result


# =============================================================================
# RESOLVER
# =============================================================================


class ExampleResolver:
    """
    Extrai exemplos de media types, schemas e parâmetros.

    ## Parâmetros:

    - `context`: contrato carregado (mapa de exemplos + registro)
    - `flags`: visão combinada das flags de exemplo (`FuzzConfig.examples_flags()`)
    """

    def __init__(self, context: "ContractContext", flags: "ExamplesFlags") -> None:
        self.context = context
        self.flags = flags

    def resolve_reference(self, reference: str) -> Any:
        """
        Valor apontado por um `$ref` de exemplo, ou MISSING.

        Ponteiro pendente ou cadeia de `$ref` cíclica gera
        `UNRESOLVED_EXAMPLE` no contexto.
        """
        seen: set[str] = set()
        value: Any = {"$ref": reference}
        while isinstance(value, dict) and "$ref" in value and len(value) == 1:
            current = value["$ref"]
            if current in seen or len(seen) >= MAX_REF_HOPS:
                self.context.record_error(ResolutionError.unresolved_example(
                    reference, f"Cadeia de $ref cíclica em '{current}'"
                ))
                return MISSING
            seen.add(current)
            value = self._lookup(current)
            if value is MISSING:
                return MISSING
        if is_example_object(value):
            return value["value"]
        return value

    def _lookup(self, reference: str) -> Any:
        if reference.startswith(EXAMPLES_POINTER):
            segments = split_pointer(reference)[2:]
            node = self.context.example_map.get(segments[0]) if segments else None
            found, value = (False, None) if node is None else navigate(node, segments[1:])
            if found:
                return value
        elif self.context.has_reference(reference):
            return self.context.get_object_from_paths_reference(reference)
        self.context.record_error(ResolutionError.unresolved_example(reference))
        return MISSING

    def _example_value(self, entry: Any) -> Any:
        if isinstance(entry, dict) and "$ref" in entry:
            return self.resolve_reference(entry["$ref"])
        if is_example_object(entry):
            return entry["value"]
        if isinstance(entry, dict) and "externalValue" in entry:
            logger.debug("externalValue ignorado: %s", entry["externalValue"])
            return MISSING
        return entry

    def extract_examples(self, media_type: dict[str, Any] | None) -> list[Any]:
        """
        Todos os exemplos de um media type, em ordem e sem duplicatas.

        Considera `example` e cada entrada de `examples`; entradas que não
        resolvem são descartadas.
        """
        if not media_type:
            return []
        values: list[Any] = []
        if "example" in media_type:
            values.append(self._example_value(media_type["example"]))
        examples = media_type.get("examples")
        if isinstance(examples, dict):
            values.extend(self._example_value(entry) for entry in examples.values())
        elif isinstance(examples, list):
            values.extend(self._example_value(entry) for entry in examples)
        return _dedupe([value for value in values if value is not MISSING])

    def request_examples(self, media_type: dict[str, Any] | None) -> list[Any]:
        if not self.flags.request_body:
            return []
        return self.extract_examples(media_type)

    def response_examples(self, media_type: dict[str, Any] | None) -> list[Any]:
        if not self.flags.response_body:
            return []
        return self.extract_examples(media_type)

    def parameter_example(self, parameter: dict[str, Any]) -> Any:
        """Exemplo de um parâmetro/header (ou do seu schema), ou MISSING."""
        if not self.flags.parameters:
            return MISSING
        if "example" in parameter:
            return self._example_value(parameter["example"])
        examples = parameter.get("examples")
        if isinstance(examples, dict):
            for entry in examples.values():
                value = self._example_value(entry)
                if value is not MISSING:
                    return value
        return MISSING

    def overlay_examples(
        self,
        generated: list[Any],
        examples: list[Any],
    ) -> list[tuple[int, Any]]:
        """
        Aplica cada exemplo sobre a combinação gerada mais parecida.

        ## Retorna:

        Lista `(índice_da_combinação, valor_final)`, um item por exemplo.
        """
        result: list[tuple[int, Any]] = []
        for example in examples:
            index = closest_combination(generated, example) if generated else 0
            base = generated[index] if generated else None
            result.append((index, overlay(base, example)))
        return result
