"""
================================================================================
MÓDULO DE INGESTÃO OPENAPI/SWAGGER
================================================================================

Carrega e valida contratos OpenAPI (v3) e Swagger (v2) antes de entregá-los
ao `ContractContext`.

## Para todos entenderem:

O contrato pode chegar de três jeitos: um arquivo no disco (JSON ou YAML),
uma URL ou um dicionário já carregado. Este módulo devolve sempre o mesmo
dicionário bruto, sem normalizar nada: a resolução precisa de cada `$ref`
exatamente onde o autor do contrato o colocou.

## Fluxo típico:

1. `load_contract()` lê o documento da fonte
2. `validate_openapi_spec()` verifica a estrutura com openapi-spec-validator
3. `parse_contract()` junta os dois e decide se falha ou só avisa
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Hashable, Mapping, cast

import requests
import yaml
from openapi_spec_validator import validate
from openapi_spec_validator.validation.exceptions import OpenAPIValidationError

logger = logging.getLogger(__name__)


# =============================================================================
# CLASSES DE DADOS
# =============================================================================


@dataclass
class ValidationResult:
    """
    Resultado da validação de um contrato.

    ## Atributos:
        is_valid: True se o contrato é válido.
        errors: Erros de validação encontrados.
        warnings: Avisos não bloqueantes (ex: nenhum path declarado).
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class OpenAPIValidationException(Exception):
    """
    Lançada no modo estrito quando o contrato é inválido.

    ## Atributos:
        validation_result: Resultado detalhado da validação.
    """

    def __init__(self, message: str, validation_result: ValidationResult) -> None:
        super().__init__(message)
        self.validation_result = validation_result


class ContractLoadError(Exception):
    """Fonte inexistente, inacessível ou que não decodifica para um objeto."""


# =============================================================================
# VALIDAÇÃO
# =============================================================================


def validate_openapi_spec(spec: dict[str, Any]) -> ValidationResult:
    """
    Valida um contrato usando openapi-spec-validator.

    ## Verificações realizadas:
    - Presença de `openapi` (v3) ou `swagger` (v2)
    - Conformidade com o schema oficial da versão
    - Referências ($ref) internas válidas

    ## Retorna:
        ValidationResult; erros são coletados, nunca lançados.
    """
    result = ValidationResult()

    if not spec:
        result.is_valid = False
        result.errors.append("Especificação vazia")
        return result

    if "openapi" not in spec and "swagger" not in spec:
        result.is_valid = False
        result.errors.append(
            "Especificação inválida: ausência de campo 'openapi' (v3) ou 'swagger' (v2)"
        )
        return result

    if "info" not in spec:
        result.warnings.append("Campo 'info' ausente (recomendado)")

    if not spec.get("paths"):
        result.warnings.append("Nenhum endpoint definido em 'paths'")

    try:
        validate(cast(Mapping[Hashable, Any], spec))
    except OpenAPIValidationError as e:
        result.is_valid = False
        error_msg = getattr(e, "message", None) or str(e)
        result.errors.append(f"Falha na validação OpenAPI: {error_msg}")
        if e.__cause__:
            result.errors.append(f"Causa: {e.__cause__!s}")
    except Exception as e:
        result.is_valid = False
        result.errors.append(f"Erro inesperado na validação: {e!s}")

    return result


# =============================================================================
# CARREGAMENTO
# =============================================================================


def load_contract(source: str | Path | dict[str, Any]) -> dict[str, Any]:
    """
    Lê um contrato de arquivo, URL ou dict.

    ## Parâmetros:
        source: Caminho (`.json`, `.yaml`, `.yml`), URL http(s) ou dict.

    ## Erros possíveis:
        ContractLoadError: fonte ilegível ou conteúdo que não é um objeto
    """
    if isinstance(source, dict):
        return source

    source_str = str(source)
    try:
        if source_str.startswith(("http://", "https://")):
            resp = requests.get(source_str, timeout=30)
            resp.raise_for_status()
            if source_str.endswith((".yaml", ".yml")):
                spec = yaml.safe_load(resp.text)
            else:
                spec = resp.json()
        else:
            path = Path(source)
            with path.open(encoding="utf-8") as f:
                if path.suffix in (".yaml", ".yml"):
                    spec = yaml.safe_load(f)
                else:
                    spec = json.load(f)
    except (OSError, requests.RequestException, yaml.YAMLError, ValueError) as e:
        raise ContractLoadError(f"Não foi possível ler o contrato '{source_str}': {e}") from e

    if not isinstance(spec, dict):
        raise ContractLoadError(f"Contrato '{source_str}' não é um objeto JSON/YAML")
    return spec


def parse_contract(
    source: str | Path | dict[str, Any],
    *,
    validate_spec: bool = True,
    strict: bool = False,
) -> tuple[dict[str, Any], ValidationResult | None]:
    """
    Carrega e, opcionalmente, valida um contrato.

    ## Parâmetros:
        source: Ver `load_contract`.
        validate_spec: Se True, roda `validate_openapi_spec`.
        strict: Se True, contrato inválido lança OpenAPIValidationException;
            se False, os erros só viram warnings de log.

    ## Retorna:
        `(documento, resultado_da_validação)`; o resultado é None quando
        `validate_spec=False`.
    """
    spec = load_contract(source)

    validation_result: ValidationResult | None = None
    if validate_spec:
        validation_result = validate_openapi_spec(spec)

        if not validation_result.is_valid:
            if strict:
                raise OpenAPIValidationException(
                    f"Especificação OpenAPI inválida: {', '.join(validation_result.errors)}",
                    validation_result,
                )
            for error in validation_result.errors:
                logger.warning("OpenAPI validation error: %s", error)

        for warning in validation_result.warnings:
            logger.info("OpenAPI validation warning: %s", warning)

    return spec, validation_result
