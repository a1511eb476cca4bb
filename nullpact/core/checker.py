"""
Per-function contract checking pipeline
"""

import logging
from typing import Dict, Optional

from .config import CONSTRAINT_TO_NULLNESS, CheckerConfig
from .models import CheckState, ContractClause, ContractFunction, Nullness
from ..analysis.nullness import OracleFactory, default_oracle_factory
from ..analysis.reachability import is_reachable_under_antecedent
from ..analysis.scanner import find_return_sites
from ..contracts.parser import ContractSyntaxError, ParameterBinder, parse_clause, split_clauses
from ..reporting.reporter import CollectingSink, DiagnosticSink, ViolationReporter

logger = logging.getLogger(__name__)


class ContractChecker:
    """
    Checks @contract decorated functions.

    The contract text is always validated. When `config.check_contracts` is
    set, single-clause contracts whose antecedent only uses "_", "null" and
    "!null" and whose consequent is "!null" are also checked against the
    function body: every return that may yield None while reachable under the
    antecedent is reported.

    Args:
        config: Checker options (defaults to CheckerConfig())
        sink: Receives diagnostics (defaults to a CollectingSink)
        binder: Splits a clause into antecedent and consequent tokens
        oracle_factory: Builds the nullness oracle for one function from its
            node and the parameter nullness assumed by the antecedent
    """

    def __init__(self,
                 config: Optional[CheckerConfig] = None,
                 sink: Optional[DiagnosticSink] = None,
                 binder: Optional[ParameterBinder] = None,
                 oracle_factory: Optional[OracleFactory] = None):
        self.config = config or CheckerConfig()
        self.sink = sink if sink is not None else CollectingSink()
        self.binder = binder or ParameterBinder()
        self.oracle_factory = oracle_factory or default_oracle_factory

    def check_function(self, function: ContractFunction) -> CheckState:
        """
        Run the checks for one function.

        Returns:
            The state the check ended in
        """
        if function.contract is None:
            return CheckState.NOT_A_CONTRACT_METHOD

        clauses = split_clauses(function.contract)
        if len(clauses) != 1:
            # multi-clause contracts are accepted but not verified
            logger.debug("%s: %d clauses, skipping", function.qualname, len(clauses))
            return CheckState.PARSED_INVALID_SHAPE

        clause = clauses[0].strip()
        reporter = ViolationReporter(function, self.sink)

        try:
            parsed = parse_clause(clause, len(function.parameters), self.binder)
        except ContractSyntaxError as e:
            reporter.unparseable_clause(e.clause)
            return CheckState.TOKEN_INVALID

        if len(parsed.raw_antecedent) != len(function.parameters):
            reporter.arity_mismatch(clause, len(parsed.raw_antecedent))

        for token in parsed.invalid_tokens:
            reporter.invalid_value_constraint(clause, token)
        if not parsed.valid:
            return CheckState.TOKEN_INVALID

        if not parsed.deep_checkable(self.config.check_contracts):
            logger.debug("%s: contract %r not deep-checked", function.qualname, function.contract)
            return CheckState.UNSUPPORTED_BUT_VALID

        logger.debug("%s: %s", function.qualname, CheckState.DEEP_CHECKING.value)
        self._check_body(function, parsed.clause, reporter)
        logger.debug("%s: %s", function.qualname, CheckState.DONE.value)
        return CheckState.DONE

    def _check_body(self, function: ContractFunction, clause: ContractClause,
                    reporter: ViolationReporter):
        antecedent = clause.antecedent
        assumptions: Dict[str, Nullness] = {}
        for position, constraint in enumerate(antecedent):
            if constraint in CONSTRAINT_TO_NULLNESS and position < len(function.parameters):
                assumptions[function.parameters[position]] = CONSTRAINT_TO_NULLNESS[constraint]

        oracle = self.oracle_factory(function.node, assumptions)

        for site in find_return_sites(function.node):
            nullness = oracle.classify(site.value, site)
            if not nullness.may_be_null:
                continue
            if not is_reachable_under_antecedent(site, antecedent, function.parameters):
                logger.debug("%s:%d: %s return unreachable under %r",
                             function.qualname, site.lineno, nullness.value, clause.text)
                continue
            reporter.violation(site, antecedent)
