"""
================================================================================
Erros Estruturados com Contexto Rico
================================================================================

Fornece classes de erro que incluem:
- Código padronizado
- Ponteiro JSON exato para o problema dentro do contrato
- Sugestões de correção
- Formatação para CLI e JSON

## Dois tipos de falha:

- Erros "soft" (`ResolutionError`) nunca são lançados: são acumulados no
  `ContractContext` e inspecionados ao final da resolução.
- `SchemaNotFoundError` é uma exceção: aborta a operação afetada e o chamador
  decide se pula a operação ou o run inteiro.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .codes import ErrorCode, ErrorCodes, ErrorCategory, Severity


@dataclass
class StructuredError:
    """
    Erro estruturado com contexto completo.

    ## Atributos:

    - `code`: Código de erro (ErrorCode)
    - `message`: Mensagem legível
    - `path`: Ponteiro JSON até o problema (#/paths/~1pets/post)
    - `suggestion`: Sugestão de como corrigir
    - `context`: Dados adicionais para debug
    - `severity`: Severidade (pode sobrescrever o padrão do código)
    """
    code: ErrorCode
    message: str
    path: str | None = None
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=lambda: {})
    severity: Severity | None = None

    @property
    def effective_severity(self) -> Severity:
        """Severidade efetiva (própria ou do código)."""
        return self.severity or self.code.severity

    @property
    def category(self) -> ErrorCategory:
        """Categoria do erro."""
        return self.code.category

    def __str__(self) -> str:
        """Representação legível."""
        text = f"{self.code}: {self.message}"
        if self.path:
            text += f" ({self.path})"
        return text

    def to_dict(self) -> dict[str, Any]:
        """Converte para dicionário (para JSON)."""
        result: dict[str, Any] = {
            "code": self.code.formatted,
            "name": self.code.name,
            "message": self.message,
            "severity": self.effective_severity.value,
            "category": self.category.description,
        }
        if self.path:
            result["path"] = self.path
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.context:
            result["context"] = self.context
        return result


@dataclass
class ResolutionError(StructuredError):
    """
    Falha não fatal ao resolver uma referência do contrato.

    `path` guarda sempre a string de referência que falhou, que é o que
    aparece no resumo final do run.
    """

    @property
    def reference(self) -> str:
        return self.path or ""

    @classmethod
    def dangling_reference(cls, reference: str, reason: str | None = None) -> "ResolutionError":
        """Cria erro de $ref que não aponta para nada."""
        return cls(
            code=ErrorCodes.DANGLING_REFERENCE,
            message=reason or f"Referência '{reference}' não encontrada no contrato",
            path=reference,
            suggestion="Confira se o ponteiro existe e se '/' foi escapado como '~1'",
        )

    @classmethod
    def unresolved_parameter(cls, reference: str, operation: str) -> "ResolutionError":
        """Cria erro de parâmetro descartado."""
        return cls(
            code=ErrorCodes.UNRESOLVED_PARAMETER,
            message=f"Parâmetro '{reference}' de {operation} não resolvido; descartado",
            path=reference,
            context={"operation": operation},
        )

    @classmethod
    def unresolved_header(cls, reference: str, operation: str) -> "ResolutionError":
        """Cria erro de header descartado."""
        return cls(
            code=ErrorCodes.UNRESOLVED_HEADER,
            message=f"Header '{reference}' de {operation} não resolvido; descartado",
            path=reference,
            context={"operation": operation},
        )

    @classmethod
    def unresolved_example(cls, reference: str, reason: str | None = None) -> "ResolutionError":
        """Cria erro de exemplo pendente."""
        return cls(
            code=ErrorCodes.UNRESOLVED_EXAMPLE,
            message=reason or f"Exemplo '{reference}' não encontrado; mantendo valor gerado",
            path=reference,
            suggestion="Declare o exemplo em #/components/examples ou corrija o ponteiro",
        )

    @classmethod
    def unsupported_content_type(
        cls,
        pointer: str,
        operation: str,
        media_types: list[str],
    ) -> "ResolutionError":
        """Cria aviso de operação pulada por media type não suportado."""
        return cls(
            code=ErrorCodes.UNSUPPORTED_CONTENT_TYPE,
            message=f"{operation}: nenhum media type suportado ({', '.join(media_types)}); operação pulada",
            path=pointer,
            suggestion="Inclua o media type em content_types (CONTRACTFUZZ_CONTENT_TYPES)",
            context={"operation": operation, "media_types": media_types},
        )


@dataclass
class ContractError(StructuredError):
    """Erro do contrato como um todo (leitura ou validação)."""

    @classmethod
    def unreadable(cls, source: str, reason: str) -> "ContractError":
        return cls(
            code=ErrorCodes.UNREADABLE_CONTRACT,
            message=reason,
            path=source,
            suggestion="Confira o caminho/URL e se o conteúdo é JSON ou YAML",
        )

    @classmethod
    def invalid(cls, source: str, errors: list[str]) -> "ContractError":
        return cls(
            code=ErrorCodes.INVALID_CONTRACT,
            message="; ".join(errors) or "Contrato inválido",
            path=source,
            suggestion="Rode sem --strict para resolver mesmo assim",
        )

    @classmethod
    def empty(cls, source: str) -> "ContractError":
        return cls(
            code=ErrorCodes.EMPTY_CONTRACT,
            message="Contrato não declara nenhum path",
            path=source,
            severity=Severity.WARNING,
        )


@dataclass
class ConfigurationError(StructuredError):
    """Erro de configuração."""

    @classmethod
    def invalid_option(cls, option: str, value: Any, reason: str) -> "ConfigurationError":
        return cls(
            code=ErrorCodes.INVALID_CONFIG,
            message=f"Valor inválido para '{option}': {value!r} ({reason})",
            context={"option": option},
        )


class SchemaNotFoundError(ValueError):
    """
    Media type declarado cujo schema não pode ser localizado.

    Fatal para a operação: a resolução de `(path, método)` é abortada.
    O `StructuredError` correspondente fica disponível em `.error`.
    """

    def __init__(self, path: str, method: str, media_type: str, reference: str | None = None):
        target = reference or f"{method.upper()} {path} [{media_type}]"
        self.error = StructuredError(
            code=ErrorCodes.SCHEMA_NOT_FOUND,
            message=f"Schema não encontrado para {method.upper()} {path} ({media_type})",
            path=target,
            suggestion="Declare o schema em components/schemas ou remova o media type",
            context={"path": path, "method": method.upper(), "media_type": media_type},
        )
        self.path = path
        self.method = method
        self.media_type = media_type
        self.reference = reference
        super().__init__(str(self.error))


# =============================================================================
# FUNÇÕES DE FORMATAÇÃO
# =============================================================================


def format_error(error: StructuredError, verbose: bool = False) -> str:
    """
    Formata erro para output CLI.

    ## Parâmetros:

    - `error`: Erro a formatar
    - `verbose`: Se True, inclui contexto completo
    """
    severity = error.effective_severity
    icon = severity.icon
    color = severity.color

    parts = [f"[{color}]{icon} {error.code}: {error.message}[/{color}]"]

    if error.path:
        parts.append(f"   [dim]Ref: {error.path}[/dim]")

    if error.suggestion:
        parts.append(f"   [cyan]💡 {error.suggestion}[/cyan]")

    if verbose and error.context:
        ctx_str = json.dumps(error.context, indent=2, ensure_ascii=False)
        parts.append(f"   [dim]Context: {ctx_str}[/dim]")

    return "\n".join(parts)


def format_errors_for_json(errors: list[StructuredError]) -> dict[str, Any]:
    """
    Formata lista de erros para saída JSON.

    ## Retorno:

    ```json
    {
        "success": true,
        "errors": [...],
        "references": ["#/components/parameters/missing"],
        "summary": {"total": 1, "by_severity": {...}, "by_category": {...}}
    }
    ```
    """
    by_severity: dict[str, int] = {}
    by_category: dict[str, int] = {}

    for err in errors:
        sev = err.effective_severity.value
        cat = err.category.description
        by_severity[sev] = by_severity.get(sev, 0) + 1
        by_category[cat] = by_category.get(cat, 0) + 1

    return {
        "success": len([e for e in errors if e.effective_severity == Severity.ERROR]) == 0,
        "errors": [e.to_dict() for e in errors],
        "references": [e.path for e in errors if e.path],
        "summary": {
            "total": len(errors),
            "by_severity": by_severity,
            "by_category": by_category,
        },
    }


def format_errors_for_cli(
    errors: list[StructuredError],
    verbose: bool = False,
    group_by_severity: bool = True,
) -> str:
    """
    Formata lista de erros para output CLI com Rich.

    ## Parâmetros:

    - `errors`: Lista de erros
    - `verbose`: Inclui contexto
    - `group_by_severity`: Agrupa por severidade
    """
    if not errors:
        return "[green]✓ Nenhum erro de resolução[/green]"

    lines: list[str] = []

    if group_by_severity:
        by_severity: dict[Severity, list[StructuredError]] = {}
        for err in errors:
            by_severity.setdefault(err.effective_severity, []).append(err)

        # ERROR primeiro
        for sev in (Severity.ERROR, Severity.WARNING, Severity.INFO):
            if sev in by_severity:
                lines.append(
                    f"\n[bold {sev.color}]{sev.icon} {sev.value.upper()}S "
                    f"({len(by_severity[sev])})[/bold {sev.color}]"
                )
                for err in by_severity[sev]:
                    lines.append(format_error(err, verbose))
    else:
        for err in errors:
            lines.append(format_error(err, verbose))

    return "\n".join(lines)
