"""
================================================================================
Testes: Resolução de Exemplos
================================================================================

Cobre extração de exemplos de media types, parâmetros e schemas, refs para
`components/examples` (inclusive com sufixo) e sobreposição no payload gerado.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from contractfuzz.config import FuzzConfig
from contractfuzz.context import ContractContext
from contractfuzz.errors import ErrorCodes
from contractfuzz.factory import FuzzingDataFactory
from contractfuzz.examples import (
    MISSING,
    ExampleResolver,
    closest_combination,
    is_example_object,
    overlay,
    schema_example,
)


@pytest.fixture
def context(load_context: Callable[[str], ContractContext]) -> ContractContext:
    return load_context("examples.yaml")


@pytest.fixture
def resolver(context: ContractContext) -> ExampleResolver:
    return ExampleResolver(context, FuzzConfig().examples_flags())


def media(context: ContractContext) -> dict[str, Any]:
    return context.document["paths"]["/cats"]["post"]["requestBody"]["content"]["application/json"]


# =============================================================================
# TESTES: funções puras
# =============================================================================


class TestPureHelpers:
    """overlay, schema_example e afins."""

    def test_overlay_deep_merge(self) -> None:
        """Exemplo vence e objetos aninhados são mesclados."""
        generated = {"id": 1, "tag": {"a": 1}}
        result = overlay(generated, {"tag": {"b": 2}, "name": "x"})
        assert result == {"id": 1, "tag": {"a": 1, "b": 2}, "name": "x"}
        assert generated == {"id": 1, "tag": {"a": 1}}

    def test_overlay_non_object_replaces(self) -> None:
        assert overlay({"a": 1}, [1, 2]) == [1, 2]
        assert overlay("gerado", "exemplo") == "exemplo"

    def test_schema_example(self) -> None:
        assert schema_example({"example": 1}) == 1
        assert schema_example({"examples": [2, 3]}) == 2
        assert schema_example({"type": "string"}) is MISSING

    def test_missing_is_falsy(self) -> None:
        assert not MISSING

    def test_is_example_object(self) -> None:
        assert is_example_object({"summary": "s", "value": 1})
        assert not is_example_object({"value": 1, "other": 2})

    def test_closest_combination(self) -> None:
        """Escolhe o candidato com mais chaves em comum."""
        candidates = [{"a": 1}, {"b": 1, "c": 1}]
        assert closest_combination(candidates, {"b": 0, "c": 0}) == 1
        assert closest_combination(candidates, "escalar") == 0


# =============================================================================
# TESTES: resolver
# =============================================================================


class TestExampleResolver:
    """Exemplos a partir do contrato."""

    def test_extract_examples_in_order(
        self,
        resolver: ExampleResolver,
        context: ContractContext,
    ) -> None:
        """Ref resolvido, ref pendente descartado e valor inline."""
        examples = resolver.extract_examples(media(context))
        assert examples == [{"name": "catsIsCool", "age": 3}, {"name": "Tom", "age": 7}]

    def test_dangling_example_is_recorded(
        self,
        resolver: ExampleResolver,
        context: ContractContext,
    ) -> None:
        resolver.extract_examples(media(context))
        errors = context.recorded_errors
        assert [e.code for e in errors] == [ErrorCodes.UNRESOLVED_EXAMPLE]
        assert errors[0].path == "#/components/examples/Nope"

    def test_reference_with_suffix(self, resolver: ExampleResolver) -> None:
        """Ref para dentro de um exemplo nomeado navega o sufixo."""
        value = resolver.resolve_reference("#/components/examples/CatExample/value/name")
        assert value == "catsIsCool"

    def test_reference_outside_components_examples(self, resolver: ExampleResolver) -> None:
        value = resolver.resolve_reference("#/paths/~1cats/post/responses/200/content/application~1json/example")
        assert value == {"name": "Garfield"}

    def test_parameter_example_from_ref(
        self,
        resolver: ExampleResolver,
        context: ContractContext,
    ) -> None:
        parameter = context.document["paths"]["/cats/{name}"]["get"]["parameters"][0]
        assert resolver.parameter_example(parameter) == "catsIsCool"

    def test_parameter_without_example(self, resolver: ExampleResolver) -> None:
        assert resolver.parameter_example({"name": "q", "in": "query"}) is MISSING

    def test_request_examples_disabled(self, context: ContractContext) -> None:
        """Sem nenhuma flag de request, nenhum exemplo de corpo é usado."""
        config = FuzzConfig(use_examples=False, use_request_body_examples=False)
        resolver = ExampleResolver(context, config.examples_flags())
        assert resolver.request_examples(media(context)) == []
        assert resolver.response_examples({"example": {"a": 1}}) == [{"a": 1}]

    def test_duplicates_are_removed(self, resolver: ExampleResolver) -> None:
        media_type = {"example": {"a": 1}, "examples": {"x": {"value": {"a": 1}}}}
        assert resolver.extract_examples(media_type) == [{"a": 1}]

    def test_external_value_is_ignored(self, resolver: ExampleResolver) -> None:
        media_type = {"examples": {"remote": {"externalValue": "https://example.org/cat.json"}}}
        assert resolver.extract_examples(media_type) == []

    def test_overlay_examples_picks_closest(self, resolver: ExampleResolver) -> None:
        generated = [{"a": 1, "x": 0}, {"b": 1, "y": 0}]
        result = resolver.overlay_examples(generated, [{"b": 9}])
        assert result == [(1, {"b": 9, "y": 0})]


class TestCyclicExampleReferences:
    """Cadeias de `$ref` entre exemplos que voltam ao início."""

    @staticmethod
    def make_resolver(examples: dict[str, Any]) -> tuple[ExampleResolver, ContractContext]:
        context = ContractContext()
        context.load({"openapi": "3.0.3", "paths": {}, "components": {"examples": examples}})
        return ExampleResolver(context, FuzzConfig().examples_flags()), context

    def test_self_reference_fails_soft(self) -> None:
        """Exemplo que aponta para si mesmo é descartado e registrado."""
        resolver, context = self.make_resolver({"A": {"$ref": "#/components/examples/A"}})
        media_type = {"examples": {"x": {"$ref": "#/components/examples/A"}}}

        assert resolver.extract_examples(media_type) == []
        errors = context.recorded_errors
        assert [e.code for e in errors] == [ErrorCodes.UNRESOLVED_EXAMPLE]
        assert errors[0].path == "#/components/examples/A"

    def test_two_example_cycle(self) -> None:
        resolver, context = self.make_resolver({
            "A": {"$ref": "#/components/examples/B"},
            "B": {"$ref": "#/components/examples/A"},
        })
        assert resolver.resolve_reference("#/components/examples/A") is MISSING
        assert len(context.recorded_errors) == 1

    def test_chain_without_cycle_resolves(self) -> None:
        resolver, context = self.make_resolver({
            "A": {"$ref": "#/components/examples/B"},
            "B": {"value": {"name": "Tom"}},
        })
        assert resolver.resolve_reference("#/components/examples/A") == {"name": "Tom"}
        assert context.recorded_errors == []

    def test_cycle_does_not_abort_contract(self) -> None:
        """O ciclo vira aviso; a operação continua com o valor gerado."""
        context = ContractContext()
        context.load({
            "openapi": "3.0.3",
            "paths": {
                "/cats": {
                    "post": {
                        "requestBody": {
                            "content": {
                                "application/json": {
                                    "schema": {"type": "object", "properties": {"name": {"type": "string"}}},
                                    "examples": {"x": {"$ref": "#/components/examples/A"}},
                                },
                            },
                        },
                        "responses": {"201": {"description": "ok"}},
                    },
                },
            },
            "components": {"examples": {"A": {"$ref": "#/components/examples/A"}}},
        })

        report = FuzzingDataFactory(context, FuzzConfig()).resolve_contract()

        assert [data.payload_as_json() for data in report.data] == [{"name": "name"}]
        assert report.skipped == []
        assert ErrorCodes.UNRESOLVED_EXAMPLE in [e.code for e in report.errors]
