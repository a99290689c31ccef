"""
================================================================================
CLI Principal: Entry Point e Configuração
================================================================================

## Arquitetura:

```
contractfuzz (grupo principal)
├── resolve   → FuzzingData de um contrato + resumo de erros
├── cases     → Casos de fuzzing gerados por fuzzer
└── classify  → Estratégia de fuzzing de um valor
```

## Flags Globais:

- `--verbose / -v` → Modo verbose (logs DEBUG)
- `--quiet / -q` → Só erros no stderr
- `--json` → Resultado como JSON no stdout
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from .registry import load_commands, register_all_commands

console = Console()
error_console = Console(stderr=True)

# --quiet e --json: nada de tabelas ou painéis no stdout
quiet_console = Console(quiet=True)


def setup_logging(verbose: bool, quiet: bool) -> None:
    """Logs vão sempre para stderr via RichHandler; o nível segue as flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


# =============================================================================
# GRUPO PRINCIPAL
# =============================================================================


@click.group()
@click.version_option(version="0.1.0", prog_name="contractfuzz")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Loga contagem de combinações e refs seguidas (DEBUG)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Modo silencioso (mostra só erros)",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Imprime o resultado como documento JSON",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, json_output: bool) -> None:
    """
    contractfuzz: dados de fuzzing a partir de contratos OpenAPI

    \b
    Exemplos:
      contractfuzz resolve api.yaml
      contractfuzz resolve api.yaml --path /pets --limit 3
      contractfuzz cases api.yaml
      contractfuzz classify "\u00a0abc"
    """
    setup_logging(verbose, quiet)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json_output"] = json_output

    if json_output or quiet:
        ctx.obj["console"] = quiet_console
    else:
        ctx.obj["console"] = console

    ctx.obj["error_console"] = error_console


load_commands()
register_all_commands(cli)


# =============================================================================
# PONTO DE ENTRADA
# =============================================================================


def main() -> None:
    """Entry point para o comando `contractfuzz`."""
    cli()


if __name__ == "__main__":
    main()
