"""
Modelos de dados produzidos pela resolução.
"""

from .fuzzing_data import FuzzingData, FuzzingHeader, HttpMethod

__all__ = [
    "FuzzingData",
    "FuzzingHeader",
    "HttpMethod",
]
