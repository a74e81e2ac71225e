"""
Conversion Context

Responsibilities:
- Creates and removes a private working directory per run
- Copies the main LaTeX file and its dependent files into it
- Runs the LaTeX compiler non-interactively, without shell escape
- Picks the produced PDF (or the log, when no PDF exists) as the new main file
- Adds the output and any other produced <stem>.* files to the submission

Owns: working directories, compiler invocation, output resolution
Never: Modifies or deletes existing submission files
"""

from latex_converter.contexts.conversion.exceptions import (
    ConfigurationMissingError,
    ConversionError,
    InvocationError,
    MaterializationError,
    NoOutputProducedError,
    PersistenceError,
    WorkspaceError,
)
from latex_converter.contexts.conversion.orchestrator import (
    ConversionOrchestrator,
    ConversionRequest,
    ConversionResult,
    ConversionState,
)

__all__ = [
    "ConfigurationMissingError",
    "ConversionError",
    "ConversionOrchestrator",
    "ConversionRequest",
    "ConversionResult",
    "ConversionState",
    "InvocationError",
    "MaterializationError",
    "NoOutputProducedError",
    "PersistenceError",
    "WorkspaceError",
]
