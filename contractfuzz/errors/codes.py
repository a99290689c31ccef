"""
================================================================================
Códigos de Erro Padronizados
================================================================================

Todo problema encontrado ao resolver um contrato recebe um código estável,
para que relatórios e CI possam agir sobre ele sem depender do texto.

## Estrutura do Código:

    E[categoria][número]
    │ │         │
    │ │         └── Erro específico (001-999)
    │ └── Categoria (1-5)
    └── Prefixo "E" (Error)

## Categorias:

- E1xxx: Contrato (carregamento/validação)
- E2xxx: Referências ($ref pendentes)
- E3xxx: Schemas
- E4xxx: Configuração
- E5xxx: Interno
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass


class ErrorCategory(Enum):
    """
    Categorias de erro.

    Cada categoria representa uma família de erros relacionados.
    """
    CONTRACT = 1        # E1xxx: Contrato inválido/ilegível
    REFERENCE = 2       # E2xxx: Referências que não resolvem
    SCHEMA = 3          # E3xxx: Schemas ausentes/inconsistentes
    CONFIGURATION = 4   # E4xxx: Configuração
    INTERNAL = 5        # E5xxx: Erros internos/bugs

    @property
    def description(self) -> str:
        """Descrição legível da categoria."""
        descriptions = {
            self.CONTRACT: "Contrato",
            self.REFERENCE: "Referência",
            self.SCHEMA: "Schema",
            self.CONFIGURATION: "Configuração",
            self.INTERNAL: "Interno",
        }
        return descriptions.get(self, "Desconhecido")


class Severity(Enum):
    """
    Níveis de severidade para erros e warnings.

    ## Níveis:

    - ERROR: Aborta a operação afetada
    - WARNING: Artefato descartado, resolução continua
    - INFO: Informativo
    """
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def icon(self) -> str:
        """Ícone para output CLI."""
        icons = {
            self.ERROR: "❌",
            self.WARNING: "⚠\ufe0f",
            self.INFO: "ℹ\ufe0f",
        }
        return icons.get(self, "•")

    @property
    def color(self) -> str:
        """Cor Rich para output."""
        colors = {
            self.ERROR: "red",
            self.WARNING: "yellow",
            self.INFO: "blue",
        }
        return colors.get(self, "white")


@dataclass(frozen=True)
class ErrorCode:
    """
    Código de erro estruturado.

    ## Atributos:

    - `code`: Código numérico (1001-5999)
    - `name`: Nome legível do erro
    - `description`: Descrição detalhada
    - `severity`: Severidade padrão
    """
    code: int
    name: str
    description: str
    severity: Severity = Severity.ERROR

    @property
    def category(self) -> ErrorCategory:
        """Extrai categoria do código numérico."""
        cat_num = self.code // 1000
        try:
            return ErrorCategory(cat_num)
        except ValueError:
            return ErrorCategory.INTERNAL

    @property
    def formatted(self) -> str:
        """Código formatado (E1001, E2003, etc)."""
        return f"E{self.code:04d}"

    def __str__(self) -> str:
        return self.formatted

    def __repr__(self) -> str:
        return f"ErrorCode({self.formatted}: {self.name})"


# =============================================================================
# CÓDIGOS DE ERRO DEFINIDOS
# =============================================================================

class ErrorCodes:
    """Catálogo de todos os códigos de erro do contractfuzz."""

    # =========================================================================
    # E1xxx: Contrato
    # =========================================================================

    INVALID_CONTRACT = ErrorCode(
        code=1001,
        name="INVALID_CONTRACT",
        description="Documento OpenAPI/Swagger inválido",
    )

    EMPTY_CONTRACT = ErrorCode(
        code=1002,
        name="EMPTY_CONTRACT",
        description="Contrato não declara nenhum path",
    )

    UNREADABLE_CONTRACT = ErrorCode(
        code=1003,
        name="UNREADABLE_CONTRACT",
        description="Não foi possível ler ou decodificar o contrato",
    )

    # =========================================================================
    # E2xxx: Referências
    # =========================================================================

    DANGLING_REFERENCE = ErrorCode(
        code=2001,
        name="DANGLING_REFERENCE",
        description="Referência $ref não aponta para nenhum nó do contrato",
        severity=Severity.WARNING,
    )

    UNRESOLVED_PARAMETER = ErrorCode(
        code=2002,
        name="UNRESOLVED_PARAMETER",
        description="Parâmetro referenciado não existe e foi descartado",
        severity=Severity.WARNING,
    )

    UNRESOLVED_HEADER = ErrorCode(
        code=2003,
        name="UNRESOLVED_HEADER",
        description="Header referenciado não existe e foi descartado",
        severity=Severity.WARNING,
    )

    UNRESOLVED_EXAMPLE = ErrorCode(
        code=2004,
        name="UNRESOLVED_EXAMPLE",
        description="Exemplo referenciado não existe; valor gerado foi mantido",
        severity=Severity.WARNING,
    )

    # =========================================================================
    # E3xxx: Schemas
    # =========================================================================

    SCHEMA_NOT_FOUND = ErrorCode(
        code=3001,
        name="SCHEMA_NOT_FOUND",
        description="Media type declarado sem schema localizável",
    )

    UNSUPPORTED_CONTENT_TYPE = ErrorCode(
        code=3002,
        name="UNSUPPORTED_CONTENT_TYPE",
        description="Nenhum media type da operação é suportado",
        severity=Severity.INFO,
    )

    # =========================================================================
    # E4xxx: Configuração
    # =========================================================================

    INVALID_CONFIG = ErrorCode(
        code=4001,
        name="INVALID_CONFIG",
        description="Opção de configuração inválida",
    )

    # =========================================================================
    # E5xxx: Interno
    # =========================================================================

    INTERNAL_ERROR = ErrorCode(
        code=5001,
        name="INTERNAL_ERROR",
        description="Erro interno inesperado",
    )

    @classmethod
    def get_by_code(cls, code: int) -> ErrorCode | None:
        """Busca ErrorCode pelo número."""
        for attr_name in dir(cls):
            attr = getattr(cls, attr_name)
            if isinstance(attr, ErrorCode) and attr.code == code:
                return attr
        return None

    @classmethod
    def get_by_name(cls, name: str) -> ErrorCode | None:
        """Busca ErrorCode pelo nome."""
        return getattr(cls, name, None)
