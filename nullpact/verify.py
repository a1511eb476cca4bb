"""
nullpact checking library.
Main API for checking @contract decorated functions.
"""

import time
from typing import List, Optional

from nullpact.core.checker import ContractChecker
from nullpact.core.config import CheckerConfig
from nullpact.core.models import CheckState, ContractFunction, Diagnostic, DiagnosticKind
from nullpact.output import DiagnosticsJSONFormatter
from nullpact.parser import ContractFunctionParser
from nullpact.reporting import CollectingSink


class FunctionCheckResult:
    """Result of checking a single function"""

    def __init__(self, function: ContractFunction):
        self.name = function.qualname
        self.lineno = function.lineno
        self.contract = function.contract
        self.source = function.source
        self.state = CheckState.NOT_A_CONTRACT_METHOD
        self.diagnostics: List[Diagnostic] = []
        self.duration = 0.0

    @property
    def clean(self) -> bool:
        return not self.diagnostics

    @property
    def violations(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is DiagnosticKind.CONTRACT_VIOLATION]

    @property
    def deep_checked(self) -> bool:
        return self.state is CheckState.DONE

    def to_dict(self):
        return {
            "name": self.name,
            "line": self.lineno,
            "contract": self.contract,
            "state": self.state.value,
            "deep_checked": self.deep_checked,
            "clean": self.clean,
            "duration": self.duration,
            "diagnostics": [d.to_dict() for d in self.diagnostics]
        }

    def __repr__(self):
        status = "✅ OK  " if self.clean else "❌ FAIL"
        detail = "contract honoured" if self.deep_checked else f"not deep-checked ({self.state.value})"
        if not self.clean:
            detail = f"{len(self.diagnostics)} diagnostic(s)"
        return f"{status} {self.name}:{self.lineno} @contract({self.contract}) - {detail}"


class CheckSummary:
    """Summary of check results for a file"""

    def __init__(self, filename: str):
        self.filename = filename
        self.results: List[FunctionCheckResult] = []

    def add_result(self, result: FunctionCheckResult):
        self.results.append(result)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def clean(self) -> int:
        return sum(1 for r in self.results if r.clean)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.clean)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for r in self.results for d in r.diagnostics]

    def to_dict(self):
        return {
            "file": self.filename,
            "total": self.total,
            "clean": self.clean,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results]
        }

    def print_summary(self):
        """Print formatted summary"""
        print("\n" + "=" * 80)
        print(f"CONTRACT CHECK SUMMARY: {self.filename}")
        print("=" * 80)

        if not self.results:
            print("⚠️  No @contract decorated functions found")
            return

        print(f"\nTotal functions analyzed: {self.total}")
        print(f"✅ Clean: {self.clean}")
        print(f"❌ With diagnostics: {self.failed}")

        print("\n" + "-" * 80)
        print("DETAILED RESULTS")
        print("-" * 80)

        for result in self.results:
            print(f"\n{result}")
            for diagnostic in result.diagnostics:
                print(f"   {diagnostic}")

        print("\n" + "=" * 80)


def check_function(function: ContractFunction, config: Optional[CheckerConfig] = None) -> FunctionCheckResult:
    """
    Check a single function.

    Args:
        function: Function found by ContractFunctionParser
        config: Checker options

    Returns:
        FunctionCheckResult
    """
    result = FunctionCheckResult(function)
    sink = CollectingSink()
    checker = ContractChecker(config=config, sink=sink)

    start_time = time.time()
    result.state = checker.check_function(function)
    result.duration = time.time() - start_time
    result.diagnostics = list(sink.diagnostics)
    return result


def _check_functions(summary: CheckSummary, functions: List[ContractFunction],
                     config: CheckerConfig, verbose: bool) -> CheckSummary:
    if verbose:
        print(f"\n🔍 Found {len(functions)} @contract decorated functions")

    for function in functions:
        if verbose:
            print(f"\n📝 Checking {function.qualname} @contract({function.contract})...")
        summary.add_result(check_function(function, config))
    return summary


def check_source(source: str, filename: str = "<string>",
                 config: Optional[CheckerConfig] = None, verbose: bool = False) -> CheckSummary:
    """
    Check all @contract decorated functions in a source string.

    Raises:
        SyntaxError: If the source is not valid Python
    """
    config = config or CheckerConfig()
    parser = ContractFunctionParser(config.annotation_names)
    functions = parser.parse_source(source, filename=filename)
    return _check_functions(CheckSummary(filename), functions, config, verbose)


def check_file(file_path: str, config: Optional[CheckerConfig] = None, verbose: bool = False,
               json_output: Optional[str] = None) -> CheckSummary:
    """
    Check all @contract decorated functions in a file.

    Args:
        file_path: Path to Python file
        config: Checker options
        verbose: Print verbose output
        json_output: Optional path to save JSON output

    Returns:
        CheckSummary
    """
    config = config or CheckerConfig()
    parser = ContractFunctionParser(config.annotation_names)
    functions = parser.parse_file(file_path)

    summary = _check_functions(CheckSummary(file_path), functions, config, verbose)

    if json_output:
        formatter = DiagnosticsJSONFormatter(file_path, check_contracts=config.check_contracts)
        for result in summary.results:
            formatter.add_result(result)
        formatter.save_to_file(json_output)

        if verbose:
            print(f"\n💾 JSON output saved to: {json_output}")

    return summary
