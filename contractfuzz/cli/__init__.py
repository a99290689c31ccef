"""
================================================================================
CLI `contractfuzz`: Resolução de Contratos pelo Terminal
================================================================================

## Comandos disponíveis:

```bash
contractfuzz resolve api.yaml              # FuzzingData de todas as operações
contractfuzz resolve api.yaml --path /pets # Só um path
contractfuzz classify "  x"                # Estratégia que produziu um valor
contractfuzz cases api.yaml                # Casos de fuzzing por fuzzer
```

## Para todos entenderem:

O CLI é construído com:
- **Click**: comandos, opções e testes com `CliRunner`
- **Rich**: tabelas e logging colorido
"""

from .main import cli, main

__all__ = ["cli", "main"]
