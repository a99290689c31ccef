"""
================================================================================
GERADORES DE VALORES POR FORMATO
================================================================================

Valores válidos (e quase válidos) para os `format` mais comuns do OpenAPI.

## Para todos entenderem:

Um campo `{"type": "string", "format": "email"}` até aceita `"email"` como
valor segundo o tipo, mas o servidor vai rejeitar. Para que o payload base
seja realmente válido, cada formato conhecido tem um gerador que devolve um
valor plausível. Os valores são determinísticos: o mesmo nome de campo gera
sempre o mesmo valor, o que mantém os runs reproduzíveis.

Cada gerador também conhece dois valores inválidos, usados pelos fuzzers:

- `almost_valid`: quase passa (ex: `email@bubu.`)
- `totally_wrong`: nem parece o formato (ex: `bubulina`)

Geradores também se aplicam pelo nome do campo: `userEmail` sem `format`
ainda é tratado como email.
"""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable


_NAMESPACE = uuid.UUID("6ba7b811-9dad-11d1-80b4-00c04fd430c8")


def _sanitize(name: str) -> str:
    return "".join(char for char in name.lower() if char.isalnum())


@dataclass(frozen=True)
class FormatGenerator:
    """
    Gerador de um formato.

    ## Atributos:

    - `formats`: valores de `format` atendidos
    - `name_suffixes`: sufixos de nome de campo (sanitizado) atendidos
    - `valid`: função (nome_do_campo, schema) → valor válido
    - `almost_valid` / `totally_wrong`: valores inválidos para fuzzers
    """
    formats: tuple[str, ...]
    valid: Callable[[str, dict[str, Any]], Any]
    almost_valid: str
    totally_wrong: str
    name_suffixes: tuple[str, ...] = field(default_factory=tuple)

    def applies_to(self, fmt: str | None, property_name: str) -> bool:
        if fmt and fmt.lower() in self.formats:
            return True
        sanitized = _sanitize(property_name)
        return any(sanitized.endswith(suffix) for suffix in self.name_suffixes)


def _email(name: str, schema: dict[str, Any]) -> str:
    local = _sanitize(name) or "user"
    return f"{local}@contractfuzz.io"


def _uuid(name: str, schema: dict[str, Any]) -> str:
    return str(uuid.uuid5(_NAMESPACE, name or "id"))


def _byte(name: str, schema: dict[str, Any]) -> str:
    return base64.b64encode((name or "bytes").encode("utf-8")).decode("ascii")


GENERATORS: list[FormatGenerator] = [
    FormatGenerator(
        formats=("email", "idn-email"),
        valid=_email,
        almost_valid="email@bubu.",
        totally_wrong="bubulina",
        name_suffixes=("email", "emailaddress"),
    ),
    FormatGenerator(
        formats=("uuid",),
        valid=_uuid,
        almost_valid="123e4567-e89b-22d3-a456-42661417400",
        totally_wrong="uuid",
    ),
    FormatGenerator(
        formats=("date",),
        valid=lambda name, schema: "2024-01-15",
        almost_valid="2024-02-30",
        totally_wrong="1000-07-21-88",
    ),
    FormatGenerator(
        formats=("date-time",),
        valid=lambda name, schema: "2024-01-15T10:30:00Z",
        almost_valid="2024-01-15T10:'Z'",
        totally_wrong="1000-07-21T88:32:28Z",
    ),
    FormatGenerator(
        formats=("timestamp",),
        valid=lambda name, schema: "2024-01-15T10:30:00.000Z",
        almost_valid="2024-01-15T10:30:00.Z",
        totally_wrong="1000-07-21T88:32:28.000Z",
    ),
    FormatGenerator(
        formats=("uri", "url", "uri-reference", "iri"),
        valid=lambda name, schema: f"https://contractfuzz.io/{_sanitize(name) or 'resource'}",
        almost_valid="http://contractfuzz.io:notaport",
        totally_wrong="catsisgreat",
        name_suffixes=("url", "uri"),
    ),
    FormatGenerator(
        formats=("ipv4", "ip"),
        valid=lambda name, schema: "10.10.10.20",
        almost_valid="10.10.10.300",
        totally_wrong="255.",
    ),
    FormatGenerator(
        formats=("ipv6",),
        valid=lambda name, schema: "2001:db8:85a3::8a2e:370:7334",
        almost_valid="2001:db8:85a3::8a2e:370:733g",
        totally_wrong="::1::",
    ),
    FormatGenerator(
        formats=("hostname", "idn-hostname"),
        valid=lambda name, schema: "api.contractfuzz.io",
        almost_valid="api.contractfuzz..io",
        totally_wrong="-host-",
    ),
    FormatGenerator(
        formats=("byte",),
        valid=_byte,
        almost_valid="=Y2F0cw",
        totally_wrong="$#@",
    ),
    FormatGenerator(
        formats=("binary",),
        valid=lambda name, schema: name or "binary",
        almost_valid="",
        totally_wrong="\u0000",
    ),
    FormatGenerator(
        formats=("password",),
        valid=lambda name, schema: "Pa55w0rd!Fuzz",
        almost_valid="pass",
        totally_wrong="",
    ),
]


def find_generator(fmt: str | None, property_name: str = "") -> FormatGenerator | None:
    """Primeiro gerador aplicável; formato declarado tem prioridade sobre o nome."""
    if fmt:
        for generator in GENERATORS:
            if fmt.lower() in generator.formats:
                return generator
    for generator in GENERATORS:
        if generator.applies_to(None, property_name):
            return generator
    return None


def generate_for_format(
    fmt: str | None,
    property_name: str,
    schema: dict[str, Any] | None = None,
) -> Any | None:
    """
    Valor válido para o formato/nome, ou None se nenhum gerador se aplica.

    ## Exemplo:

        >>> generate_for_format("email", "owner")
        'owner@contractfuzz.io'
        >>> generate_for_format(None, "contactEmail")
        'contactemail@contractfuzz.io'
    """
    generator = find_generator(fmt, property_name)
    if generator is None:
        return None
    return generator.valid(property_name, schema or {})
