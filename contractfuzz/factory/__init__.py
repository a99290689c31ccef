"""
Fábrica de FuzzingData: orquestra parâmetros, corpos e responses.
"""

from .fuzzing_data_factory import FuzzingDataFactory, ResolutionReport

__all__ = [
    "FuzzingDataFactory",
    "ResolutionReport",
]
