"""
================================================================================
CONFIGURAÇÃO CENTRALIZADA DO CONTRACTFUZZ
================================================================================

Este módulo centraliza todas as opções que influenciam como um contrato
OpenAPI vira dados de fuzzing.

## Para todos entenderem:

O mesmo contrato pode gerar 2 payloads ou 200, dependendo de quantas
combinações de `oneOf`/`anyOf` aceitamos, de quão fundo seguimos schemas
que referenciam a si mesmos e de quais exemplos do contrato queremos usar.
Tudo isso mora aqui, num único objeto validado pelo Pydantic.

## Fontes de configuração (em ordem de prioridade):

1. Parâmetros passados diretamente
2. Variáveis de ambiente (`CONTRACTFUZZ_*`)
3. Valores padrão

## Exemplo de uso:

    >>> config = FuzzConfig(limit_xxx_of_combinations=2, self_reference_depth=1)
    >>> config.examples_flags().request_body
    True
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator


DEFAULT_CONTENT_TYPES = [
    r"application/.*\+?json.*",
    r"application/x-www-form-urlencoded",
]


@dataclass(frozen=True)
class ExamplesFlags:
    """
    Visão já combinada das quatro flags de exemplos.

    - `request_body`: usa exemplos de media type nos corpos de request
    - `response_body`: usa exemplos de media type nos corpos de response
    - `schema`: usa `example`/`examples` declarados nos próprios schemas
    - `parameters`: usa exemplos declarados em parâmetros e headers
    """
    request_body: bool
    response_body: bool
    schema: bool
    parameters: bool


class FuzzConfig(BaseModel):
    """
    Configuração da resolução de contratos.

    ## Atributos:

    - `use_examples`: Liga exemplos de todos os tipos (request e response)
    - `use_request_body_examples`: Exemplos de media type nos requests
    - `use_response_body_examples`: Exemplos de media type nas responses
    - `use_schema_examples`: `example` declarado dentro de schemas
    - `limit_xxx_of_combinations`: Teto de payloads por operação
    - `generate_all_xxx_combinations_for_responses`: Responses sem teto
    - `self_reference_depth`: Reentradas permitidas de um mesmo `$ref`
    - `filter_xxx_from_request_payloads`: Remove marcadores ONE_OF/ANY_OF
    - `default_content_type`: Usado quando a operação não declara nenhum
    - `content_types`: Regex dos media types suportados
    - `tags` / `skipped_tags`: Filtros de tag
    - `skip_deprecated`: Ignora operações `deprecated: true`
    - `large_strings_size`: Tamanho das strings gigantes dos fuzzers
    """

    # =========================================================================
    # EXEMPLOS
    # =========================================================================

    use_examples: bool = Field(
        default=True,
        description="Usa exemplos declarados no contrato (requests e responses)"
    )

    use_request_body_examples: bool = Field(
        default=True,
        description="Usa exemplos de media type nos corpos de request"
    )

    use_response_body_examples: bool = Field(
        default=True,
        description="Usa exemplos de media type nos corpos de response"
    )

    use_schema_examples: bool = Field(
        default=True,
        description="Usa example/examples declarados dentro dos schemas"
    )

    # =========================================================================
    # COMBINAÇÕES
    # =========================================================================

    limit_xxx_of_combinations: int = Field(
        default=10,
        ge=1,
        description="Máximo de combinações oneOf/anyOf geradas por operação"
    )

    generate_all_xxx_combinations_for_responses: bool = Field(
        default=False,
        description="Se True, responses enumeram todas as combinações sem teto"
    )

    self_reference_depth: int = Field(
        default=4,
        ge=0,
        description="Quantas vezes um $ref pode reentrar em si mesmo no mesmo caminho"
    )

    filter_xxx_from_request_payloads: bool = Field(
        default=False,
        description="Remove marcadores ONE_OF/ANY_OF remanescentes dos payloads"
    )

    # =========================================================================
    # CONTENT TYPES
    # =========================================================================

    default_content_type: str = Field(
        default="application/json",
        description="Content type assumido quando a operação não declara nenhum"
    )

    content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONTENT_TYPES),
        description="Expressões regulares dos media types suportados"
    )

    # =========================================================================
    # FILTROS
    # =========================================================================

    tags: list[str] = Field(
        default_factory=list,
        description="Se não vazio, só operações com alguma dessas tags"
    )

    skipped_tags: list[str] = Field(
        default_factory=list,
        description="Operações com alguma dessas tags são ignoradas"
    )

    skip_deprecated: bool = Field(
        default=False,
        description="Ignora operações marcadas como deprecated"
    )

    # =========================================================================
    # FUZZERS
    # =========================================================================

    large_strings_size: int = Field(
        default=40000,
        ge=1,
        description="Tamanho das strings gigantes geradas pelos fuzzers"
    )

    @field_validator("content_types")
    @classmethod
    def _check_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"regex inválida '{pattern}': {exc}") from exc
        return patterns

    # =========================================================================
    # MÉTODOS AUXILIARES
    # =========================================================================

    def examples_flags(self) -> ExamplesFlags:
        """
        Combina as quatro flags de exemplos.

        `use_examples` funciona como chave geral para request e response;
        as flags específicas ligam cada lado isoladamente.
        """
        return ExamplesFlags(
            request_body=self.use_examples or self.use_request_body_examples,
            response_body=self.use_examples or self.use_response_body_examples,
            schema=self.use_schema_examples,
            parameters=self.use_examples or self.use_schema_examples,
        )

    def matches_content_type(self, media_type: str) -> bool:
        """True se o media type casa com alguma regex de `content_types`."""
        return any(
            re.fullmatch(pattern, media_type, re.IGNORECASE)
            for pattern in self.content_types
        )

    # =========================================================================
    # MÉTODOS DE CLASSE
    # =========================================================================

    @classmethod
    def from_env(cls) -> "FuzzConfig":
        """
        Cria configuração a partir de variáveis de ambiente.

        ## Variáveis suportadas:

        - `CONTRACTFUZZ_USE_EXAMPLES` (default: "true")
        - `CONTRACTFUZZ_USE_REQUEST_BODY_EXAMPLES` (default: "true")
        - `CONTRACTFUZZ_USE_RESPONSE_BODY_EXAMPLES` (default: "true")
        - `CONTRACTFUZZ_USE_SCHEMA_EXAMPLES` (default: "true")
        - `CONTRACTFUZZ_LIMIT_XXX_OF_COMBINATIONS` (default: 10)
        - `CONTRACTFUZZ_GENERATE_ALL_XXX_COMBINATIONS_FOR_RESPONSES` (default: "false")
        - `CONTRACTFUZZ_SELF_REFERENCE_DEPTH` (default: 4)
        - `CONTRACTFUZZ_FILTER_XXX_FROM_REQUEST_PAYLOADS` (default: "false")
        - `CONTRACTFUZZ_DEFAULT_CONTENT_TYPE` (default: "application/json")
        - `CONTRACTFUZZ_TAGS` / `CONTRACTFUZZ_SKIPPED_TAGS` (lista separada por vírgula)
        - `CONTRACTFUZZ_SKIP_DEPRECATED` (default: "false")
        - `CONTRACTFUZZ_LARGE_STRINGS_SIZE` (default: 40000)

        ## Exemplo:

            >>> import os
            >>> os.environ["CONTRACTFUZZ_SELF_REFERENCE_DEPTH"] = "2"
            >>> FuzzConfig.from_env().self_reference_depth
            2
        """
        def get_bool(key: str, default: bool) -> bool:
            """Helper para converter string para bool."""
            val = os.environ.get(key, str(default)).lower()
            return val in ("true", "1", "yes", "on")

        def get_int(key: str, default: int) -> int:
            """Helper para converter string para int."""
            try:
                return int(os.environ.get(key, str(default)))
            except ValueError:
                return default

        def get_list(key: str) -> list[str]:
            val = os.environ.get(key, "")
            return [item.strip() for item in val.split(",") if item.strip()]

        return cls(
            use_examples=get_bool("CONTRACTFUZZ_USE_EXAMPLES", True),
            use_request_body_examples=get_bool("CONTRACTFUZZ_USE_REQUEST_BODY_EXAMPLES", True),
            use_response_body_examples=get_bool("CONTRACTFUZZ_USE_RESPONSE_BODY_EXAMPLES", True),
            use_schema_examples=get_bool("CONTRACTFUZZ_USE_SCHEMA_EXAMPLES", True),
            limit_xxx_of_combinations=get_int("CONTRACTFUZZ_LIMIT_XXX_OF_COMBINATIONS", 10),
            generate_all_xxx_combinations_for_responses=get_bool(
                "CONTRACTFUZZ_GENERATE_ALL_XXX_COMBINATIONS_FOR_RESPONSES", False
            ),
            self_reference_depth=get_int("CONTRACTFUZZ_SELF_REFERENCE_DEPTH", 4),
            filter_xxx_from_request_payloads=get_bool(
                "CONTRACTFUZZ_FILTER_XXX_FROM_REQUEST_PAYLOADS", False
            ),
            default_content_type=os.environ.get(
                "CONTRACTFUZZ_DEFAULT_CONTENT_TYPE", "application/json"
            ),
            tags=get_list("CONTRACTFUZZ_TAGS"),
            skipped_tags=get_list("CONTRACTFUZZ_SKIPPED_TAGS"),
            skip_deprecated=get_bool("CONTRACTFUZZ_SKIP_DEPRECATED", False),
            large_strings_size=get_int("CONTRACTFUZZ_LARGE_STRINGS_SIZE", 40000),
        )

    @classmethod
    def for_testing(cls) -> "FuzzConfig":
        """
        Cria configuração otimizada para testes.

        - Profundidade de auto-referência 1 (árvores pequenas)
        - Strings gigantes curtas (asserts rápidos)
        """
        return cls(
            self_reference_depth=1,
            large_strings_size=64,
        )
