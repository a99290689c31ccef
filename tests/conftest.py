"""
Fixtures compartilhadas: contratos de exemplo em `tests/resources/`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from contractfuzz.config import FuzzConfig
from contractfuzz.context import ContractContext
from contractfuzz.ingestion import load_contract

RESOURCES = Path(__file__).parent / "resources"


@pytest.fixture
def resource_path() -> Callable[[str], Path]:
    """Caminho absoluto de um arquivo em tests/resources."""
    return lambda name: RESOURCES / name


@pytest.fixture
def load_context() -> Callable[[str | dict[str, Any]], ContractContext]:
    """Carrega um contrato (nome de arquivo em resources ou dict) num contexto novo."""

    def _load(source: str | dict[str, Any]) -> ContractContext:
        document = source if isinstance(source, dict) else load_contract(RESOURCES / source)
        context = ContractContext()
        context.load(document)
        return context

    return _load


@pytest.fixture
def config() -> FuzzConfig:
    return FuzzConfig()


@pytest.fixture
def test_config() -> FuzzConfig:
    return FuzzConfig.for_testing()
