"""
Diagnostic messages and the sink they are delivered to
"""

from typing import List, Optional, Protocol, Sequence

from ..core.config import CONTRACT_HELP_URL
from ..core.models import (
    ContractFunction,
    Diagnostic,
    DiagnosticKind,
    ReturnSite,
    SourceLocation,
    ValueConstraint,
)


class DiagnosticSink(Protocol):
    def report(self, location: SourceLocation, kind: DiagnosticKind, text: str,
               function: Optional[ContractFunction] = None) -> None:
        ...


class CollectingSink:
    """Keeps every reported diagnostic in order"""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def report(self, location: SourceLocation, kind: DiagnosticKind, text: str,
               function: Optional[ContractFunction] = None) -> None:
        self.diagnostics.append(Diagnostic(
            kind=kind,
            message=text,
            location=location,
            function=function.qualname if function else None,
            contract=function.contract if function else None
        ))

    def __len__(self):
        return len(self.diagnostics)

    def __iter__(self):
        return iter(self.diagnostics)


class ViolationReporter:
    """Formats and emits the diagnostics of one contract function"""

    def __init__(self, function: ContractFunction, sink: DiagnosticSink):
        self.function = function
        self.sink = sink

    def invalid_value_constraint(self, clause: str, token: str):
        self._report_on_function(
            f"Invalid @contract annotation detected for function {self.function.qualname}. "
            f"It contains the following unparseable clause: {clause} "
            f"(unknown value constraint: {token}, see {CONTRACT_HELP_URL})."
        )

    def unparseable_clause(self, clause: str):
        self._report_on_function(
            f"Invalid @contract annotation detected for function {self.function.qualname}. "
            f"It contains the following unparseable clause: {clause} "
            f"(see {CONTRACT_HELP_URL})."
        )

    def arity_mismatch(self, clause: str, antecedent_count: int):
        self._report_on_function(
            f"Invalid @contract annotation detected for function {self.function.qualname}. "
            f"It contains the following unparseable clause: {clause} "
            f"(incorrect number of arguments in the clause's antecedent [{antecedent_count}], "
            f"should be the same as the number of arguments for the function "
            f"[{len(self.function.parameters)}])."
        )

    def violation(self, site: ReturnSite, antecedent: Sequence[ValueConstraint]):
        location = SourceLocation(self.function.filename, site.lineno, site.node.col_offset)
        self.sink.report(location, DiagnosticKind.CONTRACT_VIOLATION,
                         self.violation_message(antecedent), function=self.function)

    def violation_message(self, antecedent: Sequence[ValueConstraint]) -> str:
        prefix = (f"Function {self.function.name} has @contract({self.function.contract}), "
                  f"but this appears to be violated, as a nullable value may be returned ")

        positions = [i for i, c in enumerate(antecedent) if c is ValueConstraint.IS_NON_NULL]
        if len(positions) == 1 and positions[0] < len(self.function.parameters):
            return prefix + f"when parameter {self.function.parameters[positions[0]]} is non-null."
        return prefix + "when the contract preconditions are true."

    def _report_on_function(self, text: str):
        self.sink.report(self.function.location, DiagnosticKind.ANNOTATION_VALUE_INVALID, text,
                         function=self.function)
