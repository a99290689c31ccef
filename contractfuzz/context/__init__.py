"""
Contexto do contrato carregado: mapas de schemas/exemplos, registro de
ponteiros e erros de resolução acumulados.
"""

from .contract_context import (
    EMPTY_BODY,
    EMPTY_BODY_SCHEMA,
    MAX_REF_HOPS,
    ContractContext,
    join_pointer,
    navigate,
    schema_name,
    split_pointer,
)

__all__ = [
    "EMPTY_BODY",
    "EMPTY_BODY_SCHEMA",
    "MAX_REF_HOPS",
    "ContractContext",
    "join_pointer",
    "navigate",
    "schema_name",
    "split_pointer",
]
