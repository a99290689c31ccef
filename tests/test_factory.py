"""
================================================================================
Testes: Fábrica de FuzzingData
================================================================================

Usa os contratos de `tests/resources/`:

- `petstore.yaml`: discriminator, parâmetros de path-level, refs pendentes,
  schema inexistente, media type não suportado e operação deprecated
- `examples.yaml`: exemplos de media type e de parâmetro
- `swagger2.json`: parâmetro `in: body` e `definitions`
"""

from __future__ import annotations

import json
import uuid
from typing import Callable

import pytest

from contractfuzz.config import FuzzConfig
from contractfuzz.context import EMPTY_BODY, ContractContext
from contractfuzz.errors import ErrorCodes, SchemaNotFoundError
from contractfuzz.factory import FuzzingDataFactory
from contractfuzz.model import HttpMethod


@pytest.fixture
def petstore(load_context: Callable[[str], ContractContext]) -> ContractContext:
    return load_context("petstore.yaml")


def operation(context: ContractContext, path: str, method: str) -> dict:
    return context.document["paths"][path][method]


# =============================================================================
# TESTES: petstore
# =============================================================================


class TestPetstore:
    """Resolução completa do petstore."""

    def test_post_pets_one_record_per_subtype(self, petstore: ContractContext) -> None:
        """Discriminator gera um registro por subtipo, com o valor do subtipo."""
        factory = FuzzingDataFactory(petstore)
        data = [
            d for d in factory.from_path_item("/pets", petstore.document["paths"]["/pets"])
            if d.method is HttpMethod.POST
        ]

        payloads = [d.payload_as_json() for d in data]
        assert {p["petType"] for p in payloads} == {"Cat", "Dog"}

        cat = next(p for p in payloads if p["petType"] == "Cat")
        dog = next(p for p in payloads if p["petType"] == "Dog")
        assert cat == {"name": "name", "petType": "Cat", "huntingSkill": "clueless", "dryRun": True}
        assert dog == {"name": "name", "petType": "Dog", "packSize": 0, "dryRun": True}

    def test_read_only_is_not_sent(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        assert all("id" not in d.payload_as_json() for d in data)

    def test_required_fields_per_combination(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        by_type = {
            d.payload_as_json()["petType"]: d.all_required_fields
            for d in data
            if d.method is HttpMethod.POST
        }
        assert by_type["Cat"] == frozenset({"name", "petType", "huntingSkill"})
        assert by_type["Dog"] == frozenset({"name", "petType"})

    def test_path_level_header_is_inherited(self, petstore: ContractContext) -> None:
        """Header declarado no path item vale para todas as operações."""
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        for record in data:
            header = record.header("x-trace-id")
            assert header is not None
            assert header.required
            uuid.UUID(header.value)

    def test_method_order(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        assert [d.method for d in data] == [HttpMethod.POST, HttpMethod.POST, HttpMethod.GET]

    def test_query_parameters(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        listing = data[-1]
        assert listing.payload_as_json() == {"limit": 1}
        assert listing.query_params == frozenset({"limit"})
        assert listing.all_required_fields == frozenset({"limit"})
        assert listing.req_schema_name == EMPTY_BODY

    def test_path_parameter_uses_example(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets/{petId}"]).data
        get = next(d for d in data if d.method is HttpMethod.GET)
        assert get.payload_as_json() == {"petId": "pet-42"}
        assert get.path_params == frozenset({"petId"})
        assert get.get_all_fields_by_http_method() == set()

    def test_responses(self, petstore: ContractContext) -> None:
        """Corpos, content types e headers por código."""
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        post = data[0]
        assert len(post.responses["201"]) == 1
        assert json.loads(post.responses["201"][0])["petType"] in ("Cat", "Dog")
        assert post.responses["204"] == ()
        assert post.response_content_types["204"] == ("application/json",)
        assert post.response_headers["201"] == frozenset({"Location"})

    def test_records_do_not_share_mappings(self, petstore: ContractContext) -> None:
        """Cada registro tem seus próprios mapas, somente leitura."""
        first, second = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data[:2]
        assert first.responses == second.responses
        assert first.responses is not second.responses
        with pytest.raises(TypeError):
            first.responses["999"] = ("{}",)  # type: ignore[index]
        with pytest.raises(TypeError):
            first.response_content_types["201"] = ()  # type: ignore[index]
        with pytest.raises(TypeError):
            first.request_property_types["name"] = {}  # type: ignore[index]
        with pytest.raises(AttributeError):
            first.responses["201"].append("{}")  # type: ignore[attr-defined]

    def test_response_example_wins(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets/{petId}"]).data
        get = next(d for d in data if d.method is HttpMethod.GET)
        assert [json.loads(body) for body in get.responses["200"]] == [
            {"name": "Rex", "petType": "Dog", "packSize": 3}
        ]

    def test_response_keeps_read_only(self, petstore: ContractContext) -> None:
        data = FuzzingDataFactory(petstore).resolve_contract(["/pets"]).data
        listing = json.loads(data[-1].responses["200"][0])
        assert all("id" in pet for pet in listing)

    def test_non_fatal_errors_are_recorded(self, petstore: ContractContext) -> None:
        """Refs pendentes e media type não suportado não abortam o run."""
        report = FuzzingDataFactory(petstore).resolve_contract()
        codes = {err.code for err in report.errors}
        assert {
            ErrorCodes.UNRESOLVED_PARAMETER,
            ErrorCodes.UNRESOLVED_HEADER,
            ErrorCodes.UNSUPPORTED_CONTENT_TYPE,
        } <= codes
        assert "#/components/parameters/Missing" in report.references
        assert "#/components/headers/Missing" in report.references

    def test_missing_schema_skips_operation(self, petstore: ContractContext) -> None:
        report = FuzzingDataFactory(petstore).resolve_contract()
        assert [err.code for err in report.skipped] == [ErrorCodes.SCHEMA_NOT_FOUND]
        assert report.skipped[0].path == "#/components/schemas/Ghost"
        assert all(d.path != "/owners" for d in report.data)

    def test_from_path_item_raises_schema_not_found(self, petstore: ContractContext) -> None:
        factory = FuzzingDataFactory(petstore)
        with pytest.raises(SchemaNotFoundError) as exc_info:
            factory.from_path_item("/owners", petstore.document["paths"]["/owners"])
        assert exc_info.value.reference == "#/components/schemas/Ghost"
        assert exc_info.value.method == "post"

    def test_unsupported_media_type_yields_nothing(self, petstore: ContractContext) -> None:
        report = FuzzingDataFactory(petstore).resolve_contract(["/uploads"])
        assert report.data == []
        assert [err.code for err in report.errors] == [ErrorCodes.UNSUPPORTED_CONTENT_TYPE]

    def test_whole_contract(self, petstore: ContractContext) -> None:
        report = FuzzingDataFactory(petstore).resolve_contract()
        assert [str(d) for d in report.data] == [
            "POST /pets [application/json]",
            "POST /pets [application/json]",
            "GET /pets [application/json]",
            "GET /pets/{petId} [application/json]",
            "DELETE /pets/{petId} [application/json]",
        ]


# =============================================================================
# TESTES: filtros e limites
# =============================================================================


class TestFilters:
    """Tags, deprecated e limite de combinações."""

    def test_skip_deprecated(self, petstore: ContractContext) -> None:
        config = FuzzConfig(skip_deprecated=True)
        data = FuzzingDataFactory(petstore, config).resolve_contract(["/pets/{petId}"]).data
        assert [d.method for d in data] == [HttpMethod.GET]

    def test_only_tags(self, petstore: ContractContext) -> None:
        config = FuzzConfig(tags=["admin"])
        data = FuzzingDataFactory(petstore, config).resolve_contract().data
        assert [d.operation_id for d in data] == ["deletePet"]

    def test_skipped_tags(self, petstore: ContractContext) -> None:
        config = FuzzConfig(skipped_tags=["pets", "owners", "files"])
        report = FuzzingDataFactory(petstore, config).resolve_contract()
        assert [d.operation_id for d in report.data] == ["deletePet"]
        assert report.skipped == []

    def test_combination_limit(self, petstore: ContractContext) -> None:
        config = FuzzConfig(limit_xxx_of_combinations=1)
        data = FuzzingDataFactory(petstore, config).resolve_contract(["/pets"]).data
        posts = [d for d in data if d.method is HttpMethod.POST]
        assert len(posts) == 1


# =============================================================================
# TESTES: auxiliares
# =============================================================================


class TestHelpers:
    """get_resolved_parameters e has_content."""

    def test_get_resolved_parameters_drops_dangling(self, petstore: ContractContext) -> None:
        factory = FuzzingDataFactory(petstore)
        raw = operation(petstore, "/pets", "post")["parameters"]
        resolved = factory.get_resolved_parameters(raw, "POST /pets")

        assert [p["name"] for p in resolved] == ["dryRun"]
        errors = petstore.recorded_errors
        assert errors[0].code == ErrorCodes.UNRESOLVED_PARAMETER
        assert errors[0].context == {"operation": "POST /pets"}

    def test_get_resolved_parameters_follows_ref(self, petstore: ContractContext) -> None:
        factory = FuzzingDataFactory(petstore)
        raw = operation(petstore, "/pets/{petId}", "get")["parameters"]
        assert factory.get_resolved_parameters(raw)[0]["name"] == "petId"

    def test_has_content(self, petstore: ContractContext) -> None:
        factory = FuzzingDataFactory(petstore)
        assert factory.has_content(operation(petstore, "/pets", "post"))
        assert not factory.has_content(operation(petstore, "/pets", "get"))


# =============================================================================
# TESTES: exemplos e Swagger 2
# =============================================================================


class TestExamplesContract:
    """Exemplos de media type viram um registro cada."""

    def test_one_record_per_example(self, load_context: Callable[[str], ContractContext]) -> None:
        context = load_context("examples.yaml")
        data = FuzzingDataFactory(context).resolve_contract(["/cats"]).data

        assert [d.payload_as_json() for d in data] == [
            {"name": "catsIsCool", "age": 3, "email": "email@contractfuzz.io"},
            {"name": "Tom", "age": 7, "email": "email@contractfuzz.io"},
        ]
        assert len(data[0].examples) == 2
        assert data[0].all_required_fields == frozenset({"name"})

    def test_examples_disabled_uses_schema(self, load_context: Callable[[str], ContractContext]) -> None:
        """Sem exemplos de request o payload vem do schema (com example do schema)."""
        context = load_context("examples.yaml")
        config = FuzzConfig(use_examples=False, use_request_body_examples=False)
        data = FuzzingDataFactory(context, config).resolve_contract(["/cats"]).data
        assert [d.payload_as_json() for d in data] == [
            {"name": "name", "age": 5, "email": "email@contractfuzz.io"}
        ]

    def test_parameter_example_by_ref(self, load_context: Callable[[str], ContractContext]) -> None:
        context = load_context("examples.yaml")
        data = FuzzingDataFactory(context).resolve_contract(["/cats/{name}"]).data
        assert data[0].payload_as_json() == {"name": "catsIsCool"}

    def test_dangling_example_recorded(self, load_context: Callable[[str], ContractContext]) -> None:
        context = load_context("examples.yaml")
        report = FuzzingDataFactory(context).resolve_contract()
        assert "#/components/examples/Nope" in report.references


class TestSwagger2:
    """Contratos Swagger 2.0."""

    def test_body_parameter(self, load_context: Callable[[str], ContractContext]) -> None:
        context = load_context("swagger2.json")
        data = FuzzingDataFactory(context).resolve_contract().data

        assert len(data) == 1
        record = data[0]
        assert record.payload_as_json() == {"email": "email@contractfuzz.io", "nickname": "nickname"}
        assert record.all_required_fields == frozenset({"email"})
        assert record.req_schema_name == "#/definitions/User"
        assert record.content_type == "application/json"
        assert set(record.request_property_types) == {"email", "nickname"}

    def test_response_schema(self, load_context: Callable[[str], ContractContext]) -> None:
        context = load_context("swagger2.json")
        record = FuzzingDataFactory(context).resolve_contract().data[0]
        assert json.loads(record.responses["200"][0])["email"] == "email@contractfuzz.io"
        assert record.response_content_types["200"] == ("application/json",)
