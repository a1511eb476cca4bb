"""
JSON output formatter for nullpact check results.
"""

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from nullpact import __version__


class DiagnosticsJSONFormatter:
    """
    Formats check results as structured JSON.
    """

    SCHEMA_VERSION = "1.0.0"

    def __init__(self, source_file: str, check_contracts: bool = False):
        """
        Initialize formatter.

        Args:
            source_file: Path to the Python source file being checked
            check_contracts: Whether function bodies were deep-checked
        """
        self.source_file = source_file
        self.check_contracts = check_contracts
        self.results: List[Dict[str, Any]] = []

    def add_result(self, result) -> None:
        """
        Add the result of checking one function.

        Args:
            result: FunctionCheckResult from nullpact.verify
        """
        source_hash = hashlib.sha256(result.source.encode("utf-8")).hexdigest() if result.source else None

        self.results.append({
            "function": {
                "name": result.name,
                "line": result.lineno,
                "contract": result.contract,
                "source_hash": source_hash
            },
            "check": {
                "state": result.state.value,
                "deep_checked": result.deep_checked,
                "clean": result.clean,
                "duration_seconds": round(result.duration, 4)
            },
            "diagnostics": [d.to_dict() for d in result.diagnostics]
        })

    def generate(self) -> Dict[str, Any]:
        """
        Generate the complete JSON output structure.

        Returns:
            Dictionary representing the JSON structure
        """
        total = len(self.results)
        clean = sum(1 for r in self.results if r["check"]["clean"])
        diagnostics = [d for r in self.results for d in r["diagnostics"]]
        violations = sum(1 for d in diagnostics if d["kind"] == "CONTRACT_VIOLATION")

        return {
            "schema_version": self.SCHEMA_VERSION,
            "metadata": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "source_file": self.source_file,
                "checker_version": f"nullpact-{__version__}",
                "check_contracts": self.check_contracts
            },
            "summary": {
                "total_functions": total,
                "clean": clean,
                "with_diagnostics": total - clean,
                "diagnostics": len(diagnostics),
                "violations": violations
            },
            "results": self.results
        }

    def to_json_string(self, indent: int = 2) -> str:
        return json.dumps(self.generate(), indent=indent)

    def save_to_file(self, output_path: str, indent: int = 2) -> None:
        """
        Save JSON to file.

        Args:
            output_path: Path to output JSON file
            indent: Number of spaces for indentation
        """
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(self.generate(), f, indent=indent)
