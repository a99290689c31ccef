"""
================================================================================
Registry de Comandos CLI
================================================================================

Cada comando se registra com `@register_command`; `main.py` chama
`load_commands()` e depois `register_all_commands(cli)`.

Um comando novo só precisa do decorator e de uma linha em
`load_commands()`:

```python
# commands/resolve_cmd.py
@register_command
@click.command("resolve")
@click.argument("contract")
def resolve(contract: str) -> None:
    ...
```
"""

from __future__ import annotations

from typing import TypeVar

import click

T = TypeVar("T", bound=click.Command)

_registered_commands: list[click.Command] = []


def register_command(cmd: T) -> T:
    """Adiciona o comando ao registry sem modificá-lo."""
    if cmd not in _registered_commands:
        _registered_commands.append(cmd)
    return cmd


def register_all_commands(cli_group: click.Group) -> None:
    """Anexa ao grupo `cli` cada comando registrado que ele ainda não tem."""
    missing = [cmd for cmd in _registered_commands if cmd.name not in cli_group.commands]
    for cmd in missing:
        cli_group.add_command(cmd)


def load_commands() -> None:
    """Importa os módulos de comandos; o import registra via decorator."""
    from .commands import cases_cmd as _cases_cmd  # noqa: F401
    from .commands import classify_cmd as _classify_cmd  # noqa: F401
    from .commands import resolve_cmd as _resolve_cmd  # noqa: F401

    del _cases_cmd, _classify_cmd, _resolve_cmd
