"""
================================================================================
Testes: Configuração
================================================================================
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from contractfuzz.config import FuzzConfig


class TestDefaults:
    """Valores padrão e validação."""

    def test_defaults(self, config: FuzzConfig) -> None:
        assert config.limit_xxx_of_combinations == 10
        assert config.self_reference_depth == 4
        assert config.use_examples
        assert not config.generate_all_xxx_combinations_for_responses
        assert config.default_content_type == "application/json"
        assert config.tags == [] and config.skipped_tags == []

    def test_for_testing(self, test_config: FuzzConfig) -> None:
        assert test_config.self_reference_depth == 1
        assert test_config.large_strings_size == 64

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValidationError):
            FuzzConfig(limit_xxx_of_combinations=0)

    def test_invalid_depth(self) -> None:
        with pytest.raises(ValidationError):
            FuzzConfig(self_reference_depth=-1)

    def test_invalid_content_type_regex(self) -> None:
        with pytest.raises(ValidationError, match="regex inválida"):
            FuzzConfig(content_types=["application/(json"])


class TestContentTypes:
    """Casamento de media types."""

    @pytest.mark.parametrize("media_type", [
        "application/json",
        "application/json; charset=utf-8",
        "application/vnd.api+json",
        "application/x-www-form-urlencoded",
        "APPLICATION/JSON",
    ])
    def test_supported(self, config: FuzzConfig, media_type: str) -> None:
        assert config.matches_content_type(media_type)

    @pytest.mark.parametrize("media_type", ["application/xml", "text/plain", "multipart/form-data"])
    def test_unsupported(self, config: FuzzConfig, media_type: str) -> None:
        assert not config.matches_content_type(media_type)

    def test_custom_patterns(self) -> None:
        config = FuzzConfig(content_types=[r"application/xml"])
        assert config.matches_content_type("application/xml")
        assert not config.matches_content_type("application/json")


class TestExamplesFlags:
    """Combinação das flags de exemplos."""

    def test_all_enabled(self, config: FuzzConfig) -> None:
        flags = config.examples_flags()
        assert flags.request_body and flags.response_body
        assert flags.schema and flags.parameters

    def test_master_switch_off_keeps_specific_flags(self) -> None:
        flags = FuzzConfig(use_examples=False, use_request_body_examples=False).examples_flags()
        assert not flags.request_body
        assert flags.response_body

    def test_everything_off(self) -> None:
        flags = FuzzConfig(
            use_examples=False,
            use_request_body_examples=False,
            use_response_body_examples=False,
            use_schema_examples=False,
        ).examples_flags()
        assert not any([flags.request_body, flags.response_body, flags.schema, flags.parameters])


class TestFromEnv:
    """Variáveis CONTRACTFUZZ_*."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONTRACTFUZZ_LIMIT_XXX_OF_COMBINATIONS", "3")
        monkeypatch.setenv("CONTRACTFUZZ_SELF_REFERENCE_DEPTH", "2")
        monkeypatch.setenv("CONTRACTFUZZ_USE_EXAMPLES", "no")
        monkeypatch.setenv("CONTRACTFUZZ_SKIP_DEPRECATED", "1")
        monkeypatch.setenv("CONTRACTFUZZ_TAGS", "pets, admin ,")

        config = FuzzConfig.from_env()

        assert config.limit_xxx_of_combinations == 3
        assert config.self_reference_depth == 2
        assert not config.use_examples
        assert config.skip_deprecated
        assert config.tags == ["pets", "admin"]

    def test_bad_int_falls_back_to_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONTRACTFUZZ_LIMIT_XXX_OF_COMBINATIONS", "muitos")
        assert FuzzConfig.from_env().limit_xxx_of_combinations == 10

    def test_without_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("CONTRACTFUZZ_TAGS", "CONTRACTFUZZ_SELF_REFERENCE_DEPTH"):
            monkeypatch.delenv(key, raising=False)
        config = FuzzConfig.from_env()
        assert config.tags == []
        assert config.self_reference_depth == 4
