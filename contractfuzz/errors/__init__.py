"""
================================================================================
Módulo de Erros Unificados: contractfuzz
================================================================================

Fornece códigos de erro padronizados e mensagens estruturadas para tudo que
pode dar errado ao transformar um contrato em dados de fuzzing.

## Categorias de Erro

| Faixa  | Categoria       | Descrição                          |
|--------|-----------------|------------------------------------|
| E1xxx  | Contrato        | Documento ilegível ou inválido     |
| E2xxx  | Referência      | $ref pendente (não fatal)          |
| E3xxx  | Schema          | Schema ausente (fatal p/ operação) |
| E4xxx  | Configuração    | Opção inválida                     |
| E5xxx  | Interno         | Bug interno                        |

## Exemplo:

    >>> from contractfuzz.errors import ResolutionError
    >>> error = ResolutionError.dangling_reference("#/components/schemas/Nope")
    >>> print(error)
    E2001: Referência '#/components/schemas/Nope' não encontrada no contrato (#/components/schemas/Nope)
"""

from .codes import ErrorCode, ErrorCodes, ErrorCategory, Severity
from .structured import (
    StructuredError,
    ResolutionError,
    ContractError,
    ConfigurationError,
    SchemaNotFoundError,
    format_error,
    format_errors_for_json,
    format_errors_for_cli,
)

__all__ = [
    # Códigos
    "ErrorCode",
    "ErrorCodes",
    "ErrorCategory",
    "Severity",
    # Erros estruturados
    "StructuredError",
    "ResolutionError",
    "ContractError",
    "ConfigurationError",
    "SchemaNotFoundError",
    "format_error",
    "format_errors_for_json",
    "format_errors_for_cli",
]
