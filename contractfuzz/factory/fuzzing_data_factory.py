"""
================================================================================
FÁBRICA DE FuzzingData
================================================================================

Orquestra a resolução de cada operação do contrato numa lista ordenada de
`FuzzingData`, uma por combinação de payload.

## Para todos entenderem:

Para cada `path` + método, a fábrica:

1. Junta os parâmetros do path e da operação (a operação vence) e descarta
   os que apontam para `$ref` inexistente (o erro fica no contexto).
2. Gera valores de path/query/header (exemplo do parâmetro ou gerado).
3. Para cada media type suportado do corpo, pede ao motor de combinação os
   payloads e sobrepõe exemplos do media type quando habilitado.
4. Resolve as responses (corpos de exemplo, content types e headers).
5. Empacota tudo em registros imutáveis.

## Falhas:

- `$ref` pendente de parâmetro/header/exemplo: registrado, resolução segue.
- Media type com `$ref` de schema inexistente: `SchemaNotFoundError`, que
  aborta só aquela operação. `resolve_contract` captura e reporta.

## Exemplo:

    >>> ctx = ContractContext()
    >>> ctx.load(document)
    >>> factory = FuzzingDataFactory(ctx, FuzzConfig())
    >>> data = factory.from_path_item("/pets", document["paths"]["/pets"])
    >>> [str(d) for d in data]
    ['POST /pets [application/json]', 'POST /pets [application/json]']
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

from ..config import FuzzConfig
from ..context import EMPTY_BODY, ContractContext, join_pointer
from ..errors import ResolutionError, SchemaNotFoundError, StructuredError
from ..examples import MISSING, ExampleResolver
from ..generator import Direction, PayloadGenerator
from ..model import FuzzingData, FuzzingHeader, HttpMethod

logger = logging.getLogger(__name__)


# =============================================================================
# ESTRUTURAS AUXILIARES
# =============================================================================


@dataclass
class ResolvedParameters:
    """Parâmetros de uma operação já resolvidos e com valores."""
    values: dict[str, Any] = field(default_factory=dict)
    headers: list[FuzzingHeader] = field(default_factory=list)
    query: set[str] = field(default_factory=set)
    path: set[str] = field(default_factory=set)
    required: set[str] = field(default_factory=set)
    property_types: dict[str, dict[str, Any]] = field(default_factory=dict)
    body: dict[str, Any] | None = None


@dataclass
class ResolvedResponses:
    bodies: dict[str, list[str]] = field(default_factory=dict)
    content_types: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, frozenset[str]] = field(default_factory=dict)


@dataclass
class ResolutionReport:
    """
    Resultado de `resolve_contract`.

    ## Atributos:

    - `data`: todos os FuzzingData gerados
    - `skipped`: operações abortadas (SchemaNotFound)
    - `errors`: erros não fatais registrados no contexto
    """
    data: list[FuzzingData] = field(default_factory=list)
    skipped: list[StructuredError] = field(default_factory=list)
    errors: list[StructuredError] = field(default_factory=list)

    @property
    def references(self) -> list[str]:
        return [err.path for err in self.skipped + self.errors if err.path]


def _render(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _header_value(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    if isinstance(value, dict):
        return _render(value)
    if isinstance(value, bool):
        return str(value).lower()
    return "" if value is None else str(value)


# =============================================================================
# FÁBRICA
# =============================================================================


class FuzzingDataFactory:
    """
    Cria `FuzzingData` para as operações de um contrato carregado.

    ## Parâmetros:

    - `context`: `ContractContext` já carregado
    - `config`: `FuzzConfig` da execução
    """

    def __init__(self, context: ContractContext, config: FuzzConfig | None = None) -> None:
        self.context = context
        self.config = config or FuzzConfig()
        self.examples = ExampleResolver(context, self.config.examples_flags())

    # =========================================================================
    # ENTRADAS
    # =========================================================================

    def resolve_contract(self, paths: list[str] | None = None) -> ResolutionReport:
        """
        Resolve todas as operações (ou só as de `paths`).

        Operações com SchemaNotFound são puladas e reportadas; nunca abortam
        o run inteiro.
        """
        report = ResolutionReport()
        for path, path_item in (self.context.document.get("paths") or {}).items():
            if paths and path not in paths:
                continue
            resolved_item = self._path_item(path_item)
            for method, operation in self._operations(resolved_item):
                try:
                    report.data.extend(self.from_operation(path, method, operation, resolved_item))
                except SchemaNotFoundError as exc:
                    logger.warning("Operação pulada: %s", exc)
                    report.skipped.append(exc.error)
        report.errors = self.context.recorded_errors
        return report

    def from_path_item(self, path: str, path_item: dict[str, Any]) -> list[FuzzingData]:
        """
        FuzzingData de todas as operações de um path, em ordem de método.

        ## Erros possíveis:
            SchemaNotFoundError: schema de alguma operação não existe
        """
        resolved_item = self._path_item(path_item)
        result: list[FuzzingData] = []
        for method, operation in self._operations(resolved_item):
            result.extend(self.from_operation(path, method, operation, resolved_item))
        return result

    def _path_item(self, path_item: Any) -> dict[str, Any]:
        resolved = self.context.resolve_ref(path_item)
        return resolved if isinstance(resolved, dict) else {}

    def _operations(self, path_item: dict[str, Any]) -> Iterator[tuple[HttpMethod, dict[str, Any]]]:
        for method in HttpMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            if not self._accepts(operation):
                logger.info("Operação %s ignorada pelos filtros", operation.get("operationId", method.name))
                continue
            yield method, operation

    def _accepts(self, operation: dict[str, Any]) -> bool:
        """Filtros de tag e deprecated."""
        tags = set(operation.get("tags") or [])
        if self.config.skip_deprecated and operation.get("deprecated"):
            return False
        if self.config.tags and not tags & set(self.config.tags):
            return False
        if tags & set(self.config.skipped_tags):
            return False
        return True

    # =========================================================================
    # OPERAÇÃO
    # =========================================================================

    def from_operation(
        self,
        path: str,
        method: HttpMethod,
        operation: dict[str, Any],
        path_item: dict[str, Any] | None = None,
    ) -> list[FuzzingData]:
        """Todos os FuzzingData de uma operação."""
        label = f"{method.name} {path}"
        raw_parameters = list((path_item or {}).get("parameters") or [])
        raw_parameters += list(operation.get("parameters") or [])
        parameters = self._parameters(raw_parameters, label)
        responses = self._responses(path, method, operation)

        bodies = self._request_bodies(path, method, operation, parameters)
        if bodies is None:
            return []

        result: list[FuzzingData] = []
        for content_type, schema_name, values, property_types, examples in bodies:
            for value, required in values:
                payload = value
                if isinstance(value, dict):
                    payload = {**value, **{k: v for k, v in parameters.values.items() if k not in value}}
                result.append(FuzzingData(
                    method=method,
                    path=path,
                    payload=_render(payload),
                    content_type=content_type,
                    request_property_types={**parameters.property_types, **property_types},
                    all_required_fields=frozenset(required) | frozenset(parameters.required),
                    headers=tuple(parameters.headers),
                    query_params=frozenset(parameters.query),
                    path_params=frozenset(parameters.path),
                    responses=responses.bodies,
                    response_content_types=responses.content_types,
                    response_headers=responses.headers,
                    examples=tuple(_render(example) for example in examples),
                    req_schema_name=schema_name,
                    tags=tuple(operation.get("tags") or []),
                    operation_id=operation.get("operationId"),
                ))
        logger.debug("%s: %d FuzzingData", label, len(result))
        return result

    # =========================================================================
    # PARÂMETROS
    # =========================================================================

    def get_resolved_parameters(
        self,
        parameters: list[Any],
        operation: str = "",
    ) -> list[dict[str, Any]]:
        """
        Resolve `$ref` de parâmetros; os pendentes são descartados.

        Para cada descartado registra `UNRESOLVED_PARAMETER` no contexto.
        """
        resolved: list[dict[str, Any]] = []
        for parameter in parameters:
            if isinstance(parameter, dict) and "$ref" in parameter:
                if not self.context.has_reference(parameter["$ref"]):
                    self.context.record_error(
                        ResolutionError.unresolved_parameter(parameter["$ref"], operation)
                    )
                    continue
                parameter = self.context.resolve_ref(parameter)
            if isinstance(parameter, dict) and parameter.get("name"):
                resolved.append(parameter)
        return resolved

    def _parameters(self, raw: list[Any], label: str) -> ResolvedParameters:
        merged: dict[tuple[str, str], dict[str, Any]] = {}
        for parameter in self.get_resolved_parameters(raw, label):
            merged[(parameter["name"], parameter.get("in", "query"))] = parameter

        result = ResolvedParameters()
        generator = PayloadGenerator(self.context, self.config, Direction.REQUEST, limit=1)
        for (name, location), parameter in merged.items():
            if location == "body":
                result.body = parameter
                continue
            schema = self._parameter_schema(parameter)
            value = self.examples.parameter_example(parameter)
            if value is MISSING:
                combos = generator.generate(schema, name)
                value = combos[0].value if combos else name

            if location == "header":
                result.headers.append(FuzzingHeader(name, _header_value(value), bool(parameter.get("required"))))
                continue
            if location == "cookie":
                continue
            result.values[name] = value
            if parameter.get("required"):
                result.required.add(name)
            result.property_types[name] = generator.peek(schema)
            if location == "path":
                result.path.add(name)
            else:
                result.query.add(name)
        return result

    @staticmethod
    def _parameter_schema(parameter: dict[str, Any]) -> dict[str, Any]:
        if isinstance(parameter.get("schema"), dict):
            return parameter["schema"]
        for media in (parameter.get("content") or {}).values():
            if isinstance(media, dict) and isinstance(media.get("schema"), dict):
                return media["schema"]
        # Swagger 2: type/format direto no parâmetro
        return {k: v for k, v in parameter.items() if k in ("type", "format", "enum", "items", "default")}

    # =========================================================================
    # CORPO DO REQUEST
    # =========================================================================

    def has_content(self, operation: dict[str, Any]) -> bool:
        """True se a operação declara corpo de request com algum media type."""
        body = self.context.resolve_ref(operation.get("requestBody"))
        if isinstance(body, dict) and body.get("content"):
            return True
        return any(
            isinstance(p, dict) and p.get("in") == "body"
            for p in operation.get("parameters") or []
        )

    def _request_content(
        self,
        operation: dict[str, Any],
        parameters: ResolvedParameters,
    ) -> dict[str, Any]:
        if parameters.body is not None:
            consumes = operation.get("consumes") or self.context.document.get("consumes") or [
                self.config.default_content_type
            ]
            return {media_type: {"schema": parameters.body.get("schema") or {}} for media_type in consumes}
        body = self.context.resolve_ref(operation.get("requestBody"))
        if not isinstance(body, dict):
            return {}
        return body.get("content") or {}

    def _request_bodies(
        self,
        path: str,
        method: HttpMethod,
        operation: dict[str, Any],
        parameters: ResolvedParameters,
    ) -> list[tuple[str, str, list[tuple[Any, frozenset[str]]], dict[str, dict[str, Any]], list[Any]]] | None:
        """
        `(content_type, schema, [(valor, obrigatórios)], tipos, exemplos)` por media type.

        Retorna None quando nenhum media type declarado é suportado.
        """
        content = self._request_content(operation, parameters)
        if not content:
            return [(self.config.default_content_type, EMPTY_BODY, [({}, frozenset())], {}, [])]

        supported = {mt: media for mt, media in content.items() if self.config.matches_content_type(mt)}
        if not supported:
            self.context.record_error(ResolutionError.unsupported_content_type(
                join_pointer(["paths", path, method.value, "requestBody", "content"]),
                f"{method.name} {path}",
                list(content),
            ))
            return None

        result = []
        for media_type, media in supported.items():
            media = media or {}
            schema = media.get("schema")
            examples = self.examples.request_examples(media)
            if not isinstance(schema, dict) or not schema:
                values = [(example, frozenset()) for example in examples] or [({}, frozenset())]
                result.append((media_type, EMPTY_BODY, values, {}, examples))
                continue

            reference = schema.get("$ref")
            if reference and self.context.get_schema(reference) is None:
                raise SchemaNotFoundError(path, method.value, media_type, reference)

            generator = PayloadGenerator(self.context, self.config, Direction.REQUEST)
            combinations = generator.generate(schema)
            property_types = generator.property_types(schema)

            if examples:
                generated = [c.value for c in combinations]
                values = [
                    (value, combinations[index].required_fields if combinations else frozenset())
                    for index, value in self.examples.overlay_examples(generated, examples)
                ]
            else:
                values = [(c.value, c.required_fields) for c in combinations]

            schema_name = reference or join_pointer(
                ["paths", path, method.value, "requestBody", "content", media_type, "schema"]
            )
            result.append((media_type, schema_name, values, property_types, examples))
        return result

    # =========================================================================
    # RESPONSES
    # =========================================================================

    def _responses(self, path: str, method: HttpMethod, operation: dict[str, Any]) -> ResolvedResponses:
        result = ResolvedResponses()
        limit = None if self.config.generate_all_xxx_combinations_for_responses else 1
        label = f"{method.name} {path}"

        for code, response in (operation.get("responses") or {}).items():
            code = str(code)
            response = self.context.resolve_ref(response)
            if not isinstance(response, dict):
                continue

            result.headers[code] = frozenset(self._response_headers(response, label))

            content = response.get("content") or {}
            if not content and isinstance(response.get("schema"), dict):
                produces = operation.get("produces") or self.context.document.get("produces") or [
                    self.config.default_content_type
                ]
                content = {media_type: {"schema": response["schema"]} for media_type in produces}
            if not content:
                result.bodies[code] = []
                result.content_types[code] = [self.config.default_content_type]
                continue

            result.content_types[code] = list(content)
            media_type = next(
                (mt for mt in content if self.config.matches_content_type(mt)), next(iter(content))
            )
            media = content[media_type] or {}
            examples = self.examples.response_examples(media)
            if examples:
                result.bodies[code] = [_render(example) for example in examples]
                continue

            schema = media.get("schema")
            if not isinstance(schema, dict) or not schema:
                result.bodies[code] = []
                continue
            reference = schema.get("$ref")
            if reference and self.context.get_schema(reference) is None:
                raise SchemaNotFoundError(path, method.value, media_type, reference)

            generator = PayloadGenerator(self.context, self.config, Direction.RESPONSE, limit=limit)
            result.bodies[code] = [_render(c.value) for c in generator.generate(schema)]
        return result

    def _response_headers(self, response: dict[str, Any], label: str) -> list[str]:
        names: list[str] = []
        for name, header in (response.get("headers") or {}).items():
            if isinstance(header, dict) and "$ref" in header:
                if not self.context.has_reference(header["$ref"]):
                    self.context.record_error(ResolutionError.unresolved_header(header["$ref"], label))
                    continue
            names.append(name)
        return names
