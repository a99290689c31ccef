"""
================================================================================
MOTOR DE COMBINAÇÃO DE SCHEMAS
================================================================================

Transforma um schema OpenAPI numa lista limitada de payloads concretos.

## Para todos entenderem:

Um schema com `oneOf: [Cat, Dog]` descreve dois payloads diferentes. Com
`oneOf` dentro de `oneOf`, arrays de `anyOf` e schemas que apontam para si
mesmos, o número de payloads possíveis explode (ou é infinito). Este motor
percorre o schema e devolve uma lista **determinística** e **limitada** de
combinações, cada uma com o conjunto de campos obrigatórios que ela precisa
satisfazer.

## Regras, em ordem de prioridade:

1. `oneOf`/`anyOf`: concatena as alternativas de cada membro (primeiro
   declarado primeiro), cortando no limite de combinações. Com
   discriminator, o campo discriminador recebe a chave do `mapping`.
2. `allOf`: une propriedades (o último vence) e conjuntos `required`.
3. Objetos: propriedades na ordem declarada; `readOnly` só em responses,
   `writeOnly` só em requests.
4. Arrays: `minItems` elementos (2 por padrão, limitado por `maxItems`).
5. `$ref` já visitado no caminho atual: permitido enquanto o total de
   reentradas do caminho (somando todos os refs do ciclo) está abaixo de
   `self_reference_depth`; depois disso o campo é omitido.
6. Escalares: `enum[0]`, exemplo do schema, `default`, formato, tipo.

## Exemplo:

    >>> gen = PayloadGenerator(ctx, FuzzConfig(), Direction.REQUEST)
    >>> [c.value for c in gen.generate({"$ref": "#/components/schemas/Pet"})]
    [{'name': 'name', 'petType': 'Cat'}, {'name': 'name', 'petType': 'Dog'}]
"""

from __future__ import annotations

import copy
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable

from ..context import schema_name
from ..errors import ResolutionError
from ..examples import MISSING, overlay, schema_example
from .formats import generate_for_format

if TYPE_CHECKING:
    from ..config import FuzzConfig
    from ..context import ContractContext

logger = logging.getLogger(__name__)


ONE_OF = "ONE_OF"
ANY_OF = "ANY_OF"
COMPOSITION_MARKERS = (ONE_OF, ANY_OF)

DEFAULT_ARRAY_SIZE = 2
FIELD_SEPARATOR = "#"


class _Omit:
    def __repr__(self) -> str:
        return "OMIT"


# Campo podado pelo limite de auto-referência
OMIT: Any = _Omit()

Alternative = tuple[Any, frozenset[str]]


class Direction(Enum):
    """Lado da troca: request respeita readOnly, response respeita writeOnly."""
    REQUEST = "request"
    RESPONSE = "response"


@dataclass(frozen=True)
class Combination:
    """
    Um payload concreto.

    ## Atributos:

    - `value`: árvore de valores (dict/list/escalar), cópia independente
    - `required_fields`: caminhos obrigatórios (`a#b#c`) presentes nela
    """
    value: Any
    required_fields: frozenset[str]


def field_path(segments: Iterable[str]) -> str:
    return FIELD_SEPARATOR.join(segments)


def reentries(visits: dict[str, int]) -> int:
    """
    Reentradas em ciclos no caminho atual, somando todos os `$ref`.

    `A → B → A → B` já gastou duas: ciclos mútuos dividem o mesmo orçamento
    de `self_reference_depth`, mesmo com nomes de propriedade diferentes.
    """
    return sum(count - 1 for count in visits.values() if count > 1)


def strip_markers(value: Any) -> Any:
    """Remove recursivamente as chaves ONE_OF/ANY_OF."""
    if isinstance(value, dict):
        return {
            key: strip_markers(child)
            for key, child in value.items()
            if key not in COMPOSITION_MARKERS
        }
    if isinstance(value, list):
        return [strip_markers(child) for child in value]
    return value


def has_markers(value: Any) -> bool:
    if isinstance(value, dict):
        return any(key in COMPOSITION_MARKERS for key in value) or any(
            has_markers(child) for child in value.values()
        )
    if isinstance(value, list):
        return any(has_markers(child) for child in value)
    return False


def _schema_type(schema: dict[str, Any]) -> str | None:
    declared = schema.get("type")
    if isinstance(declared, list):
        concrete = [t for t in declared if t != "null"]
        declared = concrete[0] if concrete else "null"
    if declared:
        return declared
    if "properties" in schema or "additionalProperties" in schema:
        return "object"
    if "items" in schema:
        return "array"
    return None


def _is_empty_member(member: Any) -> bool:
    return not isinstance(member, dict) or not member or member.get("type") == "null"


class PayloadGenerator:
    """
    Gera combinações de payload para um lado (request ou response).

    ## Parâmetros:

    - `context`: contrato carregado
    - `config`: limites de combinação, profundidade e flags de exemplo
    - `direction`: request ou response
    - `limit`: teto de combinações; `None` = sem teto. Por padrão usa
      `config.limit_xxx_of_combinations`.

    Sem estado mutável compartilhado entre chamadas além do conjunto de
    referências já reportadas (evita erro duplicado no contexto).
    """

    def __init__(
        self,
        context: "ContractContext",
        config: "FuzzConfig",
        direction: Direction = Direction.REQUEST,
        limit: int | None = -1,
    ) -> None:
        self.context = context
        self.config = config
        self.direction = direction
        self.limit = config.limit_xxx_of_combinations if limit == -1 else limit
        self.depth = config.self_reference_depth
        self.use_schema_examples = config.examples_flags().schema
        self._reported: set[str] = set()

    # =========================================================================
    # API PÚBLICA
    # =========================================================================

    def generate(self, schema: dict[str, Any], name: str = "") -> list[Combination]:
        """
        Combinações para `schema`, em ordem estável.

        Passe `{"$ref": ...}` (e não o schema já resolvido) para que a raiz
        conte como primeira entrada na política de auto-referência.
        """
        alternatives = self._resolve(schema, name, (), {}, None)
        combinations: list[Combination] = []
        for value, required in alternatives:
            if value is OMIT:
                continue
            value = copy.deepcopy(value)
            if self.direction is Direction.REQUEST and self.config.filter_xxx_from_request_payloads:
                value = strip_markers(value)
            combinations.append(Combination(value, required))
        logger.debug("%d combinação(ões) para %s", len(combinations), schema.get("$ref", name or "<inline>"))
        return combinations

    def property_types(self, schema: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """
        Mapa caminho do campo → schema de origem.

        Percorre todos os membros de composições com a mesma política de
        profundidade de `generate`.
        """
        result: dict[str, dict[str, Any]] = {}
        self._collect(schema, (), {}, None, result)
        return result

    # =========================================================================
    # REFERÊNCIAS
    # =========================================================================

    def _target(self, reference: str) -> dict[str, Any] | None:
        target = self.context.get_schema(reference)
        if target is None and reference not in self._reported:
            self._reported.add(reference)
            self.context.record_error(ResolutionError.dangling_reference(reference))
        return target

    def peek(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Schema apontado por `$ref` (sem contar visita), com irmãos do ref."""
        if "$ref" not in schema:
            return schema
        target = self.context.get_schema(schema["$ref"]) or {}
        siblings = {key: value for key, value in schema.items() if key != "$ref"}
        return {**target, **siblings} if siblings else target

    def _excluded(self, schema: dict[str, Any]) -> bool:
        peeked = self.peek(schema)
        if self.direction is Direction.REQUEST:
            return bool(peeked.get("readOnly"))
        return bool(peeked.get("writeOnly"))

    def _pruned(self, schema: dict[str, Any], visits: dict[str, int]) -> bool:
        """`$ref` que reentraria num ciclo com a profundidade já esgotada."""
        return schema.get("$ref") in visits and reentries(visits) >= self.depth

    def _enter(
        self,
        schema: dict[str, Any],
        visits: dict[str, int],
    ) -> tuple[dict[str, Any] | None, dict[str, int], str | None]:
        """
        Segue um `$ref` respeitando a profundidade.

        Retorna `(schema, visitas, ref)`; schema `None` com ref definido
        significa podado pela profundidade, com ref `None` significa pendente.
        """
        reference = schema["$ref"]
        if self._pruned(schema, visits):
            return None, visits, reference
        target = self._target(reference)
        if target is None:
            return None, visits, None
        visits = {**visits, reference: visits.get(reference, 0) + 1}
        return target, visits, reference

    # =========================================================================
    # RESOLUÇÃO
    # =========================================================================

    def _resolve(
        self,
        schema: Any,
        name: str,
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> list[Alternative]:
        """
        Alternativas para um nó.

        `[]` quer dizer "não resolvível" (ref pendente); `[(OMIT, ...)]` quer
        dizer "podado pela profundidade".
        """
        if not isinstance(schema, dict):
            return [(self._scalar({}, name), frozenset())]

        if "$ref" in schema:
            target, visits, reference = self._enter(schema, visits)
            if target is None:
                return [(OMIT, frozenset())] if reference else []
            current_ref = reference
            schema = target

        if "allOf" in schema:
            merged, groups, visits = self._flatten(schema, visits, current_ref)
        else:
            merged = {k: v for k, v in schema.items() if k not in ("oneOf", "anyOf")}
            groups = [
                {kind: schema[kind], "discriminator": schema.get("discriminator")}
                for kind in ("oneOf", "anyOf")
                if kind in schema
            ]

        if not groups:
            return self._resolve_plain(merged, name, path, visits, current_ref)

        group_alternatives = [
            self._resolve_group(group, name, path, visits, current_ref) for group in groups
        ]
        if merged.get("properties") or merged.get("additionalProperties"):
            base = self._resolve_plain(merged, name, path, visits, current_ref)
        elif all(alts == [(OMIT, frozenset())] for alts in group_alternatives):
            return [(OMIT, frozenset())]
        else:
            base = [({}, frozenset())]
        return self._combine([base] + group_alternatives)

    def _resolve_group(
        self,
        group: dict[str, Any],
        name: str,
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> list[Alternative]:
        kind = "oneOf" if "oneOf" in group else "anyOf"
        members = group[kind] or []
        discriminator = group.get("discriminator") or {}
        alternatives: list[Alternative] = []
        pruned = False

        for member in members:
            if _is_empty_member(member):
                continue
            member_alts = self._resolve(member, name, path, visits, current_ref)
            for value, required in member_alts:
                if value is OMIT:
                    pruned = True
                    continue
                if isinstance(value, dict) and discriminator.get("propertyName") and "$ref" in member:
                    value = {
                        **value,
                        discriminator["propertyName"]: self._discriminator_value(
                            discriminator, member["$ref"]
                        ),
                    }
                alternatives.append((value, required))
                if self.limit is not None and len(alternatives) >= self.limit:
                    return alternatives

        if alternatives:
            return alternatives
        if pruned:
            return [(OMIT, frozenset())]
        marker = ONE_OF if kind == "oneOf" else ANY_OF
        refs = [m.get("$ref", "") for m in members if isinstance(m, dict)]
        return [({marker: refs}, frozenset())]

    @staticmethod
    def _discriminator_value(discriminator: dict[str, Any], reference: str) -> str:
        """Chave do mapping que aponta para `reference`, senão o nome do schema."""
        name = schema_name(reference)
        for key, target in (discriminator.get("mapping") or {}).items():
            if target == reference or target == name:
                return key
        return name

    def _resolve_plain(
        self,
        schema: dict[str, Any],
        name: str,
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> list[Alternative]:
        kind = _schema_type(schema)
        if kind == "object":
            alternatives = self._resolve_object(schema, path, visits, current_ref)
            example = schema_example(schema) if self.use_schema_examples else MISSING
            if isinstance(example, dict):
                alternatives = [(overlay(value, example), req) for value, req in alternatives]
            return alternatives
        if kind == "array":
            return self._resolve_array(schema, name, path, visits, current_ref)
        return [(self._scalar(schema, name), frozenset())]

    def _resolve_object(
        self,
        schema: dict[str, Any],
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> list[Alternative]:
        required_names = set(schema.get("required") or [])
        per_property: list[tuple[str, list[Alternative]]] = []

        for prop_name, prop_schema in (schema.get("properties") or {}).items():
            if isinstance(prop_schema, dict) and self._excluded(prop_schema):
                continue
            alts = self._resolve(prop_schema, prop_name, path + (prop_name,), visits, current_ref)
            if alts:
                per_property.append((prop_name, alts))

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            alts = self._resolve(additional, "key", path + ("key",), visits, current_ref)
            if alts:
                per_property.append(("key", alts))

        result: list[Alternative] = []
        for combo in self._product([alts for _, alts in per_property]):
            obj: dict[str, Any] = {}
            required: set[str] = set()
            for (prop_name, _), (value, nested) in zip(per_property, combo):
                if value is OMIT:
                    continue
                obj[prop_name] = value
                required |= nested
                if prop_name in required_names:
                    required.add(field_path(path + (prop_name,)))
            result.append((obj, frozenset(required)))
        return result

    def _resolve_array(
        self,
        schema: dict[str, Any],
        name: str,
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> list[Alternative]:
        size = schema.get("minItems") or DEFAULT_ARRAY_SIZE
        if schema.get("maxItems") is not None:
            size = min(size, schema["maxItems"])

        items = schema.get("items")
        if not isinstance(items, dict):
            items = {}
        item_alts = self._resolve(items, name, path, visits, current_ref)
        if not item_alts:
            return [([], frozenset())]

        result: list[Alternative] = []
        for value, required in item_alts:
            if value is OMIT:
                result.append(([], frozenset()))
            else:
                result.append(([copy.deepcopy(value) for _ in range(size)], required))
        return result

    # =========================================================================
    # allOf
    # =========================================================================

    def _flatten(
        self,
        schema: dict[str, Any],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> tuple[dict[str, Any], list[dict[str, Any]], dict[str, int]]:
        """
        Une os membros de um `allOf` num único schema.

        ## Retorna:

        `(schema_unido, grupos_oneOf_anyOf, visitas)`. Membros vazios ou
        pendentes não contribuem; grupos `oneOf` de um pai que apontam de volta
        para o caminho atual são descartados (padrão pai/filho com
        discriminator).
        """
        merged: dict[str, Any] = {}
        properties: dict[str, Any] = {}
        required: list[str] = []
        groups: list[dict[str, Any]] = []

        def absorb(member: dict[str, Any]) -> None:
            for key, value in member.items():
                if key == "properties":
                    properties.update(value or {})
                elif key == "required":
                    required.extend(r for r in value or [] if r not in required)
                elif key in ("oneOf", "anyOf"):
                    groups.append({key: value, "discriminator": member.get("discriminator")})
                elif key not in ("allOf", "discriminator"):
                    merged[key] = value

        for member in schema.get("allOf") or []:
            if not isinstance(member, dict) or not member:
                continue
            member_ref = current_ref
            if "$ref" in member:
                target, visits, reference = self._enter(member, visits)
                if target is None:
                    continue
                member, member_ref = target, reference
            if "allOf" in member:
                flat, member_groups, visits = self._flatten(member, visits, member_ref)
                member = {**flat}
                for group in member_groups:
                    kind = "oneOf" if "oneOf" in group else "anyOf"
                    member[kind] = group[kind]
                    if group.get("discriminator"):
                        member["discriminator"] = group["discriminator"]
            absorb(self._strip_cyclic_parent(member, visits, current_ref))

        absorb(schema)
        merged["properties"] = properties
        merged["required"] = required
        if properties:
            merged.setdefault("type", "object")
        return merged, groups, visits

    def _strip_cyclic_parent(
        self,
        member: dict[str, Any],
        visits: dict[str, int],
        current_ref: str | None,
    ) -> dict[str, Any]:
        for kind in ("oneOf", "anyOf"):
            refs = [m.get("$ref") for m in member.get(kind) or [] if isinstance(m, dict)]
            if not any(ref in visits for ref in refs if ref):
                continue
            stripped = {k: v for k, v in member.items() if k != kind}
            discriminator = member.get("discriminator") or {}
            prop = discriminator.get("propertyName")
            if prop and current_ref:
                value = self._discriminator_value(discriminator, current_ref)
                stripped["properties"] = {
                    **(member.get("properties") or {}),
                    prop: {"type": "string", "enum": [value]},
                }
            return stripped
        return member

    # =========================================================================
    # ESCALARES
    # =========================================================================

    def _scalar(self, schema: dict[str, Any], name: str) -> Any:
        if schema.get("enum"):
            return schema["enum"][0]
        if "const" in schema:
            return schema["const"]
        if self.use_schema_examples:
            example = schema_example(schema)
            if example is not MISSING:
                return example
        if "default" in schema:
            return schema["default"]

        kind = _schema_type(schema) or "string"
        if kind == "string":
            formatted = generate_for_format(schema.get("format"), name, schema)
            if formatted is not None:
                return formatted
            return self._string(schema, name)
        if kind == "integer":
            return int(self._number(schema, 1))
        if kind == "number":
            return float(self._number(schema, 1.5))
        if kind == "boolean":
            return True
        if kind == "null":
            return None
        return self._string(schema, name)

    @staticmethod
    def _string(schema: dict[str, Any], name: str) -> str:
        value = name or "string"
        min_length = schema.get("minLength") or 0
        if len(value) < min_length:
            value = (value * (min_length // len(value) + 1))[:min_length]
        max_length = schema.get("maxLength")
        if max_length is not None:
            value = value[:max_length]
        return value

    @staticmethod
    def _number(schema: dict[str, Any], fallback: float) -> float:
        minimum = schema.get("minimum")
        maximum = schema.get("maximum")
        exclusive_min = schema.get("exclusiveMinimum")
        exclusive_max = schema.get("exclusiveMaximum")
        # 3.1 usa número; 3.0 usa booleano junto de minimum/maximum
        if isinstance(exclusive_min, (int, float)) and not isinstance(exclusive_min, bool):
            return exclusive_min + 1
        if minimum is not None:
            return minimum + 1 if exclusive_min is True else minimum
        if isinstance(exclusive_max, (int, float)) and not isinstance(exclusive_max, bool):
            return min(fallback, exclusive_max - 1)
        if maximum is not None:
            upper = maximum - 1 if exclusive_max is True else maximum
            return min(fallback, upper)
        return fallback

    # =========================================================================
    # PRODUTOS LIMITADOS
    # =========================================================================

    def _product(self, lists: list[list[Alternative]]) -> Iterable[tuple[Alternative, ...]]:
        return itertools.islice(itertools.product(*lists), self.limit)

    def _combine(self, lists: list[list[Alternative]]) -> list[Alternative]:
        """Produto de grupos; objetos são mesclados, outro valor substitui."""
        result: list[Alternative] = []
        for combo in self._product(lists):
            value: Any = OMIT
            required: set[str] = set()
            for part, part_required in combo:
                if part is OMIT:
                    continue
                if isinstance(value, dict) and isinstance(part, dict):
                    value = {**value, **part}
                else:
                    value = part
                required |= part_required
            result.append((value, frozenset(required)))
        return result

    # =========================================================================
    # TIPOS DE PROPRIEDADE
    # =========================================================================

    def _collect(
        self,
        schema: Any,
        path: tuple[str, ...],
        visits: dict[str, int],
        current_ref: str | None,
        out: dict[str, dict[str, Any]],
    ) -> None:
        if not isinstance(schema, dict):
            return
        if "$ref" in schema:
            target, visits, reference = self._enter(schema, visits)
            if target is None:
                return
            schema, current_ref = target, reference

        if "allOf" in schema:
            schema, groups, visits = self._flatten(schema, visits, current_ref)
        else:
            groups = [{kind: schema[kind]} for kind in ("oneOf", "anyOf") if kind in schema]

        for group in groups:
            for member in next(iter(group.values())) or []:
                self._collect(member, path, visits, current_ref, out)

        for prop_name, prop_schema in (schema.get("properties") or {}).items():
            if not isinstance(prop_schema, dict) or self._excluded(prop_schema):
                continue
            if self._pruned(prop_schema, visits):
                continue
            prop_path = path + (prop_name,)
            out.setdefault(field_path(prop_path), self.peek(prop_schema))
            self._collect(prop_schema, prop_path, visits, current_ref, out)

        if isinstance(schema.get("items"), dict):
            self._collect(schema["items"], path, visits, current_ref, out)
