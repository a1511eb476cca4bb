"""
nullpact: nullness contract checking for Python functions
"""

__version__ = "0.1.0"

from .core.checker import ContractChecker
from .core.config import CheckerConfig
from .core.models import CheckState, ContractFunction, Diagnostic, DiagnosticKind, Nullness, ValueConstraint
from .parser import ContractFunctionParser
from .verify import CheckSummary, FunctionCheckResult, check_file, check_source

__all__ = [
    "ContractChecker",
    "CheckerConfig",
    "CheckState",
    "ContractFunction",
    "ContractFunctionParser",
    "Diagnostic",
    "DiagnosticKind",
    "Nullness",
    "ValueConstraint",
    "CheckSummary",
    "FunctionCheckResult",
    "check_file",
    "check_source"
]
