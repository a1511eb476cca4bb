"""
Data models for nullness contracts and the diagnostics they produce
"""

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ValueConstraint(str, Enum):
    """A single antecedent or consequent token of a contract clause"""
    WILDCARD = "_"
    IS_NULL = "null"
    IS_NON_NULL = "!null"
    IS_TRUE = "true"
    IS_FALSE = "false"

    @property
    def checkable(self) -> bool:
        return self in (ValueConstraint.WILDCARD,
                        ValueConstraint.IS_NULL,
                        ValueConstraint.IS_NON_NULL)


class Nullness(str, Enum):
    """Nullness verdict for an expression at a program point"""
    NULL = "null"
    NULLABLE = "nullable"
    NON_NULL = "non-null"
    UNKNOWN = "unknown"

    @property
    def may_be_null(self) -> bool:
        return self in (Nullness.NULL, Nullness.NULLABLE)


class Branch(str, Enum):
    THEN = "then"
    ELSE = "else"


class DiagnosticKind(str, Enum):
    ANNOTATION_VALUE_INVALID = "ANNOTATION_VALUE_INVALID"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"


class CheckState(str, Enum):
    """States a single function passes through while being checked"""
    NOT_A_CONTRACT_METHOD = "not_a_contract_method"
    PARSED_INVALID_SHAPE = "parsed_invalid_shape"
    TOKEN_INVALID = "token_invalid"
    UNSUPPORTED_BUT_VALID = "unsupported_but_valid"
    DEEP_CHECKING = "deep_checking"
    DONE = "done"


@dataclass
class ContractClause:
    """One precondition -> postcondition pair"""
    text: str
    antecedent: List[ValueConstraint]
    consequent: Optional[ValueConstraint]

    @property
    def non_null_positions(self) -> List[int]:
        return [i for i, c in enumerate(self.antecedent) if c is ValueConstraint.IS_NON_NULL]


@dataclass(frozen=True)
class ConditionalGuard:
    """An enclosing if/else on the path to a return statement"""
    node: ast.If
    branch: Branch

    @property
    def test(self) -> ast.expr:
        return self.node.test


@dataclass(frozen=True)
class NullCheck:
    """A guard recognised as `param is None` (asserts_null) or `param is not None`"""
    param: str
    asserts_null: bool


@dataclass
class ReturnSite:
    """A return statement plus the conditionals enclosing it, outermost first"""
    node: ast.Return
    guards: Tuple[ConditionalGuard, ...] = ()

    @property
    def value(self) -> Optional[ast.expr]:
        return self.node.value

    @property
    def lineno(self) -> int:
        return self.node.lineno


@dataclass(frozen=True)
class SourceLocation:
    filename: str
    lineno: int
    col_offset: int = 0

    def __str__(self):
        return f"{self.filename}:{self.lineno}:{self.col_offset + 1}"


@dataclass
class Diagnostic:
    """A reported defect, anchored at a function or a return statement"""
    kind: DiagnosticKind
    message: str
    location: SourceLocation
    function: Optional[str] = None
    contract: Optional[str] = None

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "message": self.message,
            "file": self.location.filename,
            "line": self.location.lineno,
            "column": self.location.col_offset + 1,
            "function": self.function,
            "contract": self.contract
        }

    def __str__(self):
        return f"{self.location}: [{self.kind.value}] {self.message}"


@dataclass
class ContractFunction:
    """A function carrying a contract decorator"""
    name: str
    qualname: str
    node: ast.AST  # FunctionDef or AsyncFunctionDef
    contract: Optional[str]
    parameters: List[str] = field(default_factory=list)
    lineno: int = 0
    filename: str = "<unknown>"
    source: str = ""

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.lineno, getattr(self.node, "col_offset", 0))
