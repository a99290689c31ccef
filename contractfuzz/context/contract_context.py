"""
================================================================================
CONTEXTO GLOBAL DO CONTRATO
================================================================================

Guarda tudo que a resolução precisa saber sobre o contrato carregado.

## Para todos entenderem:

Um contrato OpenAPI é uma árvore cheia de atalhos (`$ref`). Em vez de
percorrer a árvore a cada atalho, montamos uma única vez um "catálogo"
ponteiro → nó: cada objeto do documento fica indexado pelo ponteiro JSON
onde foi declarado (`#/paths/~1pets/post/parameters/0`,
`#/components/schemas/Pet` etc.). Assim qualquer `$ref`, inclusive os que
apontam para paths vizinhos, é resolvido com uma busca no dicionário.

## O que fica aqui:

- `document`: o contrato bruto
- `schema_map`: schemas nomeados (`components/schemas` ou `definitions`)
- `example_map`: exemplos reutilizáveis (`components/examples`)
- registro ponteiro → nó
- lista de erros não fatais, protegida por lock (append concorrente)

## Ciclo de vida:

`load()` limpa tudo que veio do contrato anterior e indexa o novo; depois
disso o contexto é só leitura, exceto a lista de erros.

## Exemplo:

    >>> ctx = ContractContext()
    >>> ctx.load({"openapi": "3.0.0", "paths": {}, "components": {"schemas": {"Pet": {}}}})
    >>> ctx.get_object_from_paths_reference("#/components/schemas/Pet")
    {}
"""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import unquote

from ..errors import ResolutionError, StructuredError

logger = logging.getLogger(__name__)


EMPTY_BODY = "EMPTY_BODY"
EMPTY_BODY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}

SCHEMAS_PREFIX = "#/components/schemas/"
DEFINITIONS_PREFIX = "#/definitions/"

MAX_REF_HOPS = 32


# =============================================================================
# PONTEIROS JSON
# =============================================================================


def escape_segment(segment: str) -> str:
    """Escapa um segmento de ponteiro (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def split_pointer(pointer: str) -> list[str]:
    """
    Quebra `#/a/b~1c` em `["a", "b/c"]`.

    Aceita ponteiros percent-encoded (`%7Bid%7D`) e ignora qualquer
    prefixo de documento antes do `#`.
    """
    fragment = unquote(pointer)
    if "#" in fragment:
        fragment = fragment.split("#", 1)[1]
    fragment = fragment.strip("/")
    if not fragment:
        return []
    return [unescape_segment(part) for part in fragment.split("/")]


def join_pointer(segments: list[str]) -> str:
    if not segments:
        return "#"
    return "#/" + "/".join(escape_segment(str(seg)) for seg in segments)


def navigate(node: Any, segments: list[str]) -> tuple[bool, Any]:
    """
    Desce `segments` a partir de `node`.

    Retorna `(encontrado, valor)`; listas são indexadas por inteiro.
    """
    current = node
    for segment in segments:
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return False, None
    return True, current


# =============================================================================
# CONTEXTO
# =============================================================================


class ContractContext:
    """
    Armazém do contrato carregado, endereçável por ponteiro.

    Um contexto por contrato; recarregar outro contrato descarta o estado
    anterior (`load` chama `reset`).
    """

    def __init__(self) -> None:
        self._errors_lock = threading.Lock()
        self._errors: list[StructuredError] = []
        self.document: dict[str, Any] = {}
        self.schema_map: dict[str, Any] = {}
        self.example_map: dict[str, Any] = {}
        self._registry: dict[str, Any] = {}
        self.discriminators: set[str] = set()

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def reset(self) -> None:
        """Descarta contrato, mapas, registro e erros."""
        with self._errors_lock:
            self._errors = []
        self.document = {}
        self.schema_map = {}
        self.example_map = {}
        self._registry = {}
        self.discriminators = set()

    def load(self, document: dict[str, Any]) -> None:
        """
        Indexa um novo contrato.

        ## Parâmetros:

        - `document`: contrato já parseado (dict)
        """
        self.reset()
        self.document = document

        components = document.get("components") or {}
        schemas = components.get("schemas") or document.get("definitions") or {}
        self.schema_map = dict(schemas)
        self.schema_map[EMPTY_BODY] = EMPTY_BODY_SCHEMA
        self.example_map = dict(components.get("examples") or {})

        self._index(document, [])
        logger.debug(
            "Contrato indexado: %d nós, %d schemas, %d exemplos",
            len(self._registry), len(self.schema_map) - 1, len(self.example_map),
        )

    def _index(self, node: Any, segments: list[str]) -> None:
        if isinstance(node, dict):
            self._registry[join_pointer(segments)] = node
            discriminator = node.get("discriminator")
            if isinstance(discriminator, dict) and discriminator.get("propertyName"):
                self.discriminators.add(discriminator["propertyName"])
            for key, child in node.items():
                self._index(child, segments + [str(key)])
        elif isinstance(node, list):
            for position, child in enumerate(node):
                self._index(child, segments + [str(position)])

    # =========================================================================
    # RESOLUÇÃO DE PONTEIROS
    # =========================================================================

    def get_object_from_paths_reference(self, pointer: str) -> Any | None:
        """
        Resolve qualquer ponteiro do contrato.

        Ponteiros que não resolvem não lançam exceção: o erro é registrado e
        o retorno é `None`. Cabe ao chamador decidir se isso é fatal.

        ## Exemplo:

            >>> ctx.get_object_from_paths_reference(
            ...     "#/paths/~1v2~1account~1keys/get/parameters/0"
            ... )
            {'name': 'id', 'in': 'query', ...}
        """
        found, value = self._lookup(pointer)
        if not found:
            self.record_error(ResolutionError.dangling_reference(pointer))
            return None
        return value

    def _lookup(self, pointer: str) -> tuple[bool, Any]:
        if not pointer.startswith("#") and "#" in pointer:
            # Referências para outros documentos não são buscadas
            return False, None
        segments = split_pointer(pointer)
        canonical = join_pointer(segments)
        if canonical in self._registry:
            return True, self._registry[canonical]

        # Alvo escalar/lista: desce a partir do maior prefixo indexado
        for cut in range(len(segments) - 1, -1, -1):
            prefix = join_pointer(segments[:cut])
            if prefix in self._registry:
                return navigate(self._registry[prefix], segments[cut:])
        return False, None

    def resolve_ref(self, node: Any) -> Any | None:
        """
        Segue `$ref` (inclusive ref para ref) até um nó concreto.

        Retorna `node` intacto quando ele não é referência e `None` quando a
        cadeia quebra (erro já registrado).
        """
        current = node
        hops = 0
        while isinstance(current, dict) and "$ref" in current:
            if hops >= MAX_REF_HOPS:
                self.record_error(ResolutionError.dangling_reference(
                    current["$ref"], f"Cadeia de $ref longa demais em '{current['$ref']}'"
                ))
                return None
            current = self.get_object_from_paths_reference(current["$ref"])
            hops += 1
        return current

    def get_schema(self, reference: str) -> dict[str, Any] | None:
        """Schema por `$ref` ou nome simples; `None` se não existir."""
        name = schema_name(reference)
        if name in self.schema_map and (
            "#" not in reference
            or reference.startswith(SCHEMAS_PREFIX)
            or reference.startswith(DEFINITIONS_PREFIX)
        ):
            return self.schema_map[name]
        found, value = self._lookup(reference)
        return value if found and isinstance(value, dict) else None

    def has_reference(self, pointer: str) -> bool:
        found, _ = self._lookup(pointer)
        return found

    # =========================================================================
    # ERROS NÃO FATAIS
    # =========================================================================

    def record_error(self, error: StructuredError) -> None:
        """Acrescenta um erro à lista compartilhada (thread-safe)."""
        logger.warning("%s", error)
        with self._errors_lock:
            self._errors.append(error)

    @property
    def recorded_errors(self) -> list[StructuredError]:
        """Cópia dos erros registrados até agora."""
        with self._errors_lock:
            return list(self._errors)


def schema_name(reference: str) -> str:
    """Último segmento de um `$ref` (`#/components/schemas/Pet` → `Pet`)."""
    return unescape_segment(reference.rsplit("/", 1)[-1])
