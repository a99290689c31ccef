"""
================================================================================
Comando: contractfuzz classify: Estratégia de um Valor
================================================================================

Mostra qual estratégia de fuzzing produziria o valor informado e,
opcionalmente, o resultado de combiná-lo com um valor real.

## Uso:

```bash
contractfuzz classify " abc"                   # PREFIX with \\u0020
contractfuzz classify --escaped "abc\\u200b"   # TRAIL with \\u200b
contractfuzz classify " abc" --merge-with "id-1"
```
"""

from __future__ import annotations

from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from ...strategy import classify as classify_value
from ...strategy import format_value, merge_fuzzing
from ..registry import register_command
from ..utils import json_console


def _unescape(value: str) -> str:
    """Interpreta sequências `\\uXXXX` sem perder caracteres não ASCII."""
    return value.encode("latin-1", "backslashreplace").decode("unicode_escape")


@register_command
@click.command()
@click.argument("value")
@click.option("--merge-with", "supplied", default=None, help="Valor real a receber a mesma corrupção")
@click.option("--escaped", is_flag=True, help="Interpreta escapes \\uXXXX em VALUE e --merge-with")
@click.pass_context
def classify(
    ctx: click.Context,
    value: str,
    supplied: str | None,
    escaped: bool,
) -> None:
    """Classifica VALUE numa estratégia de fuzzing."""
    console: Console = ctx.obj["console"]

    if escaped:
        value = _unescape(value)
        supplied = _unescape(supplied) if supplied is not None else None

    strategy = classify_value(value)
    merged = merge_fuzzing(value, supplied) if supplied is not None else None

    if ctx.obj.get("json_output"):
        output: dict[str, Any] = {
            "strategy": strategy.name,
            "data": format_value(strategy.data) if isinstance(strategy.data, str) else strategy.data,
        }
        if supplied is not None:
            output["merged"] = merged
        json_console.print_json(data=output)
        return

    console.print(f"[cyan]{escape(str(strategy))}[/cyan]")
    if supplied is not None:
        console.print(f"merge: {escape(repr(merged))}")
