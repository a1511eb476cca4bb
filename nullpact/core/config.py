"""
Contract vocabulary tables and checker configuration
"""

import ast
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from .models import Nullness, ValueConstraint

CLAUSE_SEPARATOR = ";"
IMPLICATION = "->"
TOKEN_SEPARATOR = ","

# Every value constraint the contract language knows about
ALL_VALUE_CONSTRAINTS = {c.value: c for c in ValueConstraint}

# Constraints the body checker can reason about today
CHECKABLE_VALUE_CONSTRAINTS = {
    c.value: c for c in ValueConstraint if c.checkable
}

# Antecedent constraint -> nullness assumed for the parameter
CONSTRAINT_TO_NULLNESS = {
    ValueConstraint.IS_NULL: Nullness.NULL,
    ValueConstraint.IS_NON_NULL: Nullness.NON_NULL,
}

# Comparison operators against None -> does a true test assert "is None"
NULL_TEST_OPS = {
    ast.Is: True,
    ast.Eq: True,
    ast.IsNot: False,
    ast.NotEq: False,
}

# Builtins whose call result is never None (unless the name is rebound)
NON_NULL_BUILTINS = frozenset({
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes",
    "callable", "chr", "complex", "dict", "dir", "divmod", "enumerate",
    "filter", "float", "format", "frozenset", "hash", "hex", "id",
    "int", "isinstance", "issubclass", "iter", "len", "list", "map",
    "object", "oct", "ord", "pow", "range", "repr", "reversed",
    "round", "set", "slice", "sorted", "str", "sum", "tuple", "type",
    "vars", "zip",
})

# Annotation heads that admit None
OPTIONAL_ANNOTATIONS = frozenset({"Optional"})
UNION_ANNOTATIONS = frozenset({"Union"})

DEFAULT_CONTRACT_ANNOTATIONS = frozenset({"contract", "Contract"})

CONTRACT_HELP_URL = "https://www.jetbrains.com/help/idea/contract-annotations.html"

ENV_CHECK_CONTRACTS = "NULLPACT_CHECK_CONTRACTS"
ENV_CONTRACT_ANNOTATIONS = "NULLPACT_CONTRACT_ANNOTATIONS"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CheckerConfig:
    """
    Options owned by the caller of the checker.

    Attributes:
        check_contracts: Enable deep checking of function bodies against
            their contracts. Without it only the contract text is validated.
        contract_annotations: Extra decorator names treated as contract
            declarations, on top of `contract` and `Contract`.
    """
    check_contracts: bool = False
    contract_annotations: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def annotation_names(self) -> FrozenSet[str]:
        return DEFAULT_CONTRACT_ANNOTATIONS | self.contract_annotations

    def with_overrides(self,
                       check_contracts: Optional[bool] = None,
                       contract_annotations: Optional[Iterable[str]] = None) -> "CheckerConfig":
        return CheckerConfig(
            check_contracts=self.check_contracts if check_contracts is None else check_contracts,
            contract_annotations=(self.contract_annotations if contract_annotations is None
                                  else self.contract_annotations | frozenset(contract_annotations))
        )

    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """Build a config from NULLPACT_* environment variables"""
        check = os.getenv(ENV_CHECK_CONTRACTS, "").strip().lower() in _TRUTHY
        names = os.getenv(ENV_CONTRACT_ANNOTATIONS, "")
        return cls(
            check_contracts=check,
            contract_annotations=frozenset(n.strip() for n in names.split(",") if n.strip())
        )
