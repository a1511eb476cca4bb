"""
Parsing and validation of the contract mini-language.

    contract   := clause (';' clause)*
    clause     := antecedent '->' consequent
    antecedent := token (',' token)*
    token      := '_' | 'null' | '!null' | 'true' | 'false'
    consequent := token
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.config import (
    ALL_VALUE_CONSTRAINTS,
    CLAUSE_SEPARATOR,
    IMPLICATION,
    TOKEN_SEPARATOR,
)
from ..core.models import ContractClause, ValueConstraint


class ContractSyntaxError(ValueError):
    """A clause that cannot be split into antecedent and consequent"""

    def __init__(self, clause: str, detail: str = ""):
        self.clause = clause
        self.detail = detail
        super().__init__(f"unparseable clause: {clause}" + (f" ({detail})" if detail else ""))


def split_clauses(contract: str) -> List[str]:
    """
    Split a contract into clauses.

    Empty pieces at the end are dropped, so a trailing ';' adds no clause and
    an empty contract has none. Blank pieces elsewhere still count.
    """
    clauses = contract.split(CLAUSE_SEPARATOR)
    while clauses and clauses[-1] == "":
        clauses.pop()
    return clauses


class ParameterBinder:
    """Binds a clause's antecedent tokens to the function's formal parameters"""

    def bind(self, clause: str, formal_param_count: int) -> Tuple[List[str], str]:
        """
        Split a clause into its antecedent tokens and consequent token.

        The antecedent is returned as written even when its length differs
        from formal_param_count; the caller decides how to report that.

        Raises:
            ContractSyntaxError: If the clause has no '->' or more than one
        """
        antecedent, arrow, consequent = clause.partition(IMPLICATION)
        if not arrow:
            raise ContractSyntaxError(clause.strip(), "missing '->'")
        if IMPLICATION in consequent:
            raise ContractSyntaxError(clause.strip(), "more than one '->'")

        if not antecedent.strip():
            tokens = []
        else:
            tokens = [t.strip() for t in antecedent.split(TOKEN_SEPARATOR)]
        return tokens, consequent.strip()


def parse_token(token: str) -> Optional[ValueConstraint]:
    return ALL_VALUE_CONSTRAINTS.get(token.strip())


@dataclass
class ParsedContract:
    """A bound clause together with the tokens that failed validation"""
    clause: ContractClause
    raw_antecedent: List[str]
    raw_consequent: str
    invalid_tokens: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.invalid_tokens

    @property
    def checkable(self) -> bool:
        """All antecedent tokens checkable and the consequent is '!null'"""
        return (self.valid
                and all(c.checkable for c in self.clause.antecedent)
                and self.clause.consequent is ValueConstraint.IS_NON_NULL)

    def deep_checkable(self, enabled: bool) -> bool:
        return enabled and self.checkable


def parse_clause(clause: str, formal_param_count: int,
                 binder: Optional[ParameterBinder] = None) -> ParsedContract:
    """
    Bind and validate a single clause.

    Invalid antecedent tokens are collected rather than raised so that every
    one of them can be reported.
    """
    binder = binder or ParameterBinder()
    tokens, consequent_token = binder.bind(clause, formal_param_count)

    antecedent = []
    invalid = []
    for token in tokens:
        constraint = parse_token(token)
        if constraint is None:
            invalid.append(token)
        else:
            antecedent.append(constraint)

    return ParsedContract(
        clause=ContractClause(clause.strip(), antecedent, parse_token(consequent_token)),
        raw_antecedent=tokens,
        raw_consequent=consequent_token,
        invalid_tokens=invalid
    )
