"""
================================================================================
Comando: contractfuzz resolve: FuzzingData de um Contrato
================================================================================

Resolve as operações do contrato e mostra um registro por combinação de
payload, seguido do resumo dos erros não fatais.

## Uso:

```bash
contractfuzz resolve api.yaml
contractfuzz resolve api.yaml --path /pets --limit 3 --depth 2
contractfuzz resolve api.yaml --tag pets --skip-deprecated
contractfuzz --json resolve api.yaml
```

Operações cujo schema não existe são puladas e listadas; o comando só
falha (código 1) quando o contrato não pode ser lido.
"""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...errors import format_errors_for_cli, format_errors_for_json
from ...factory import ResolutionReport
from ..registry import register_command
from ..utils import build_config, json_console, resolve_or_exit, shorten


def _print_json_report(report: ResolutionReport) -> None:
    output: dict[str, Any] = {
        "success": True,
        "data": [
            {
                "method": data.method.name,
                "path": data.path,
                "content_type": data.content_type,
                "payload": data.payload_as_json(),
                "required_fields": sorted(data.all_required_fields),
                "headers": {h.name: h.value for h in data.headers},
                "responses": sorted(data.responses),
            }
            for data in report.data
        ],
        "skipped": [err.to_dict() for err in report.skipped],
        "resolution": format_errors_for_json(report.errors),
    }
    json_console.print_json(data=output)


@register_command
@click.command()
@click.argument("contract")
@click.option("--path", "paths", multiple=True, help="Resolve só este path (repetível)")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Máximo de alternativas por oneOf/anyOf",
)
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Profundidade máxima de auto-referência",
)
@click.option("--skip-deprecated", is_flag=True, help="Ignora operações deprecated")
@click.option("--tag", "tags", multiple=True, help="Só operações com esta tag (repetível)")
@click.option("--skip-tag", "skipped_tags", multiple=True, help="Ignora operações com esta tag")
@click.option("--strict", is_flag=True, help="Falha se o contrato não passar na validação OpenAPI")
@click.pass_context
def resolve(
    ctx: click.Context,
    contract: str,
    paths: tuple[str, ...],
    limit: int | None,
    depth: int | None,
    skip_deprecated: bool,
    tags: tuple[str, ...],
    skipped_tags: tuple[str, ...],
    strict: bool,
) -> None:
    """
    Resolve um contrato OpenAPI em FuzzingData.

    CONTRACT pode ser um arquivo .json/.yaml ou uma URL http(s).
    """
    console: Console = ctx.obj["console"]
    verbose: bool = ctx.obj["verbose"]

    config = build_config(
        limit_xxx_of_combinations=limit,
        self_reference_depth=depth,
        skip_deprecated=skip_deprecated or None,
        tags=list(tags) or None,
        skipped_tags=list(skipped_tags) or None,
    )
    _, report = resolve_or_exit(ctx, contract, config, list(paths) or None, strict=strict)

    if ctx.obj.get("json_output"):
        _print_json_report(report)
        return

    table = Table(title=f"FuzzingData ({len(report.data)})")
    table.add_column("Método", style="cyan")
    table.add_column("Path")
    table.add_column("Content-Type", style="dim")
    table.add_column("Obrigatórios", justify="right")
    table.add_column("Payload")
    for data in report.data:
        table.add_row(
            data.method.name,
            escape(data.path),
            data.content_type,
            str(len(data.all_required_fields)),
            escape(shorten(data.payload) if not verbose else data.payload),
        )
    console.print(table)

    for err in report.skipped:
        console.print(f"[yellow]⏭\ufe0f  Operação pulada: {escape(err.message)}[/yellow]")

    console.print(format_errors_for_cli(report.errors, verbose=verbose))

    if report.errors:
        console.print(Panel(
            f"[yellow]{len(report.errors)} referência(s) não resolvida(s)[/yellow]",
            border_style="yellow",
        ))
