"""
Carregamento e validação de contratos OpenAPI/Swagger.
"""

from .swagger import (
    ContractLoadError,
    OpenAPIValidationException,
    ValidationResult,
    load_contract,
    parse_contract,
    validate_openapi_spec,
)

__all__ = [
    "ContractLoadError",
    "OpenAPIValidationException",
    "ValidationResult",
    "load_contract",
    "parse_contract",
    "validate_openapi_spec",
]
