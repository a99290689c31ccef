"""
================================================================================
Comando: contractfuzz cases: Casos de Fuzzing por Fuzzer
================================================================================

Roda os fuzzers de campo sobre cada FuzzingData resolvido e conta os casos
(payloads mutados) que cada um produz.

## Uso:

```bash
contractfuzz cases api.yaml
contractfuzz cases api.yaml --path /pets --show
contractfuzz --json cases api.yaml
```
"""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...fuzzers import FuzzerContext, build_field_fuzzers, iter_fuzz_cases
from ..registry import register_command
from ..utils import build_config, json_console, resolve_or_exit, shorten


@register_command
@click.command()
@click.argument("contract")
@click.option("--path", "paths", multiple=True, help="Só este path (repetível)")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Máximo de alternativas por oneOf/anyOf",
)
@click.option("--show", is_flag=True, help="Lista cada caso (campo, estratégia)")
@click.pass_context
def cases(
    ctx: click.Context,
    contract: str,
    paths: tuple[str, ...],
    limit: int | None,
    show: bool,
) -> None:
    """Conta os casos de fuzzing que cada fuzzer gera para o contrato."""
    console: Console = ctx.obj["console"]

    config = build_config(limit_xxx_of_combinations=limit)
    context, report = resolve_or_exit(ctx, contract, config, list(paths) or None)

    fuzzer_context = FuzzerContext.from_contract(context, config.large_strings_size)
    fuzzers = build_field_fuzzers(fuzzer_context)

    counts: Counter[str] = Counter()
    for data in report.data:
        for fuzzer, field_name, strategy, _ in iter_fuzz_cases(data, fuzzers, fuzzer_context):
            counts[fuzzer.name] += 1
            if show:
                console.print(f"  {escape(str(data))} [cyan]{field_name}[/cyan] {escape(shorten(str(strategy)))}")

    if ctx.obj.get("json_output"):
        json_console.print_json(data={
            "success": True,
            "records": len(report.data),
            "total": sum(counts.values()),
            "by_fuzzer": {fuzzer.name: counts[fuzzer.name] for fuzzer in fuzzers},
        })
        return

    table = Table(title=f"Casos de fuzzing ({len(report.data)} registros)")
    table.add_column("Fuzzer", style="cyan")
    table.add_column("Casos", justify="right")
    for fuzzer in fuzzers:
        table.add_row(fuzzer.name, str(counts[fuzzer.name]))
    table.add_row("[bold]Total[/bold]", f"[bold]{sum(counts.values())}[/bold]")
    console.print(table)
