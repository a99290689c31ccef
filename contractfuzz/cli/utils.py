"""
================================================================================
Utilitários do CLI
================================================================================

Funções auxiliares compartilhadas entre os comandos do CLI.
"""

from __future__ import annotations

from typing import Any, NoReturn

import click
from pydantic import ValidationError
from rich.console import Console

from ..config import FuzzConfig
from ..context import ContractContext
from ..errors import ConfigurationError, ContractError, StructuredError, format_error
from ..factory import FuzzingDataFactory, ResolutionReport
from ..ingestion import ContractLoadError, OpenAPIValidationException, parse_contract

# Console para saída JSON (não silenciável)
json_console = Console()


def build_config(**overrides: Any) -> FuzzConfig:
    """
    Configuração do ambiente (`CONTRACTFUZZ_*`) com as opções do comando.

    Opções com valor `None` (não informadas) não sobrescrevem nada.

    ## Exemplo:
        >>> build_config(limit_xxx_of_combinations=3).limit_xxx_of_combinations
        3

    ## Erros possíveis:
        click.BadParameter: variável de ambiente com valor fora dos limites
    """
    try:
        base = FuzzConfig.from_env().model_dump()
        base.update({key: value for key, value in overrides.items() if value is not None})
        return FuzzConfig(**base)
    except ValidationError as e:
        first = e.errors()[0]
        option = ".".join(str(part) for part in first["loc"])
        error = ConfigurationError.invalid_option(option, first.get("input"), first["msg"])
        raise click.BadParameter(str(error)) from e


def _fail(ctx: click.Context, error: StructuredError) -> NoReturn:
    if ctx.obj.get("json_output"):
        json_console.print_json(data={"success": False, "errors": [error.to_dict()]})
    else:
        ctx.obj["error_console"].print(format_error(error))
    raise SystemExit(1)


def resolve_or_exit(
    ctx: click.Context,
    contract: str,
    config: FuzzConfig,
    paths: list[str] | None = None,
    strict: bool = False,
) -> tuple[ContractContext, ResolutionReport]:
    """
    Carrega o contrato e resolve as operações.

    Contrato ilegível (ou inválido com `strict`) encerra o comando com
    código 1.
    """
    try:
        document, _ = parse_contract(contract, strict=strict)
    except ContractLoadError as e:
        _fail(ctx, ContractError.unreadable(contract, str(e)))
    except OpenAPIValidationException as e:
        _fail(ctx, ContractError.invalid(contract, e.validation_result.errors))

    if not document.get("paths"):
        ctx.obj["error_console"].print(format_error(ContractError.empty(contract)))

    context = ContractContext()
    context.load(document)
    report = FuzzingDataFactory(context, config).resolve_contract(paths)
    return context, report


def shorten(text: str, width: int = 60) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"
