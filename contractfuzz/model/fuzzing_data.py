"""
================================================================================
MODELO: FuzzingData
================================================================================

Uma unidade de teste pronta para enviar: uma operação do contrato e uma
combinação de payload.

## Para todos entenderem:

Cada `FuzzingData` é criado uma vez durante a resolução e nunca mais muda.
Todos os fuzzers de uma operação recebem os mesmos registros; quem quiser
mutar o payload pega uma cópia com `payload_as_json()` e trabalha nela.

## Campos principais:

- `method` / `path`: operação (`POST /pets`)
- `payload`: payload serializado em JSON (o que vai no fio)
- `request_property_types`: caminho do campo (`a#b`) → schema de origem
- `all_required_fields`: campos obrigatórios desta combinação
- `headers`, `query_params`, `path_params`
- `responses`: código → corpos de exemplo (JSON)
- `response_content_types` / `response_headers`: por código
- `req_schema_name`: ponteiro do schema que originou o payload
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping


class HttpMethod(Enum):
    """Métodos HTTP na ordem em que as operações de um path são resolvidas."""
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    GET = "get"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"

    @property
    def requires_body(self) -> bool:
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)

    @classmethod
    def from_string(cls, value: str) -> "HttpMethod":
        return cls(value.lower())


@dataclass(frozen=True)
class FuzzingHeader:
    """Header declarado: nome, valor de exemplo e obrigatoriedade."""
    name: str
    value: str
    required: bool = False


def _frozen_lists(mapping: Mapping[str, Iterable[str]]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in mapping.items()})


@dataclass(frozen=True)
class FuzzingData:
    """Registro imutável de uma combinação de uma operação."""
    method: HttpMethod
    path: str
    payload: str
    content_type: str
    request_property_types: Mapping[str, dict[str, Any]] = field(default_factory=dict)
    all_required_fields: frozenset[str] = field(default_factory=frozenset)
    headers: tuple[FuzzingHeader, ...] = ()
    query_params: frozenset[str] = field(default_factory=frozenset)
    path_params: frozenset[str] = field(default_factory=frozenset)
    responses: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    response_content_types: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    response_headers: Mapping[str, frozenset[str]] = field(default_factory=dict)
    examples: tuple[str, ...] = ()
    req_schema_name: str = ""
    tags: tuple[str, ...] = ()
    operation_id: str | None = None

    def __post_init__(self) -> None:
        # mapas próprios e somente leitura: registros irmãos não compartilham estado
        object.__setattr__(self, "request_property_types", MappingProxyType(dict(self.request_property_types)))
        object.__setattr__(self, "responses", _frozen_lists(self.responses))
        object.__setattr__(self, "response_content_types", _frozen_lists(self.response_content_types))
        object.__setattr__(self, "response_headers", MappingProxyType(
            {code: frozenset(names) for code, names in self.response_headers.items()}
        ))

    @property
    def is_body_method(self) -> bool:
        return self.method.requires_body

    def payload_as_json(self) -> Any:
        """Cópia nova do payload; mutá-la não afeta o registro."""
        return json.loads(self.payload)

    def all_fields(self) -> set[str]:
        """Caminhos (`a#b#c`) de todos os campos presentes no payload."""
        fields: set[str] = set()
        _walk_fields(self.payload_as_json(), (), fields)
        return fields

    def get_all_fields_by_http_method(self) -> set[str]:
        """Todos os campos para métodos com corpo; sem path params nos demais."""
        fields = self.all_fields()
        if self.is_body_method:
            return fields
        return {name for name in fields if name not in self.path_params}

    def field_value(self, field_name: str) -> Any:
        """Valor atual de um campo (`a#b`), ou None se ausente."""
        current: Any = self.payload_as_json()
        for segment in field_name.split("#"):
            while isinstance(current, list):
                current = current[0] if current else None
            if not isinstance(current, dict) or segment not in current:
                return None
            current = current[segment]
        return current

    def header(self, name: str) -> FuzzingHeader | None:
        for header in self.headers:
            if header.name.lower() == name.lower():
                return header
        return None

    def __str__(self) -> str:
        return f"{self.method.name} {self.path} [{self.content_type}]"


def _walk_fields(node: Any, prefix: tuple[str, ...], out: set[str]) -> None:
    if isinstance(node, list):
        for item in node:
            _walk_fields(item, prefix, out)
    elif isinstance(node, dict):
        for key, value in node.items():
            path = prefix + (str(key),)
            out.add("#".join(path))
            _walk_fields(value, path, out)
