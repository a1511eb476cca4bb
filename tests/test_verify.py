#!/usr/bin/env python3
"""
Test checking whole files, the JSON report and the command line entry point
"""

import json
from pathlib import Path

import pytest
from nullpact.cli import main
from nullpact.core.config import CheckerConfig
from nullpact.core.models import CheckState, DiagnosticKind
from nullpact.verify import check_file

EXAMPLES = Path(__file__).resolve().parent.parent / "examples" / "contract_functions.py"

CLEAN_SOURCE = '''from nullpact_decorators import contract


@contract("!null -> !null")
def shout(text):
    if text is None:
        return None
    return text.upper() + "!"
'''


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("NULLPACT_CHECK_CONTRACTS", raising=False)
    monkeypatch.delenv("NULLPACT_CONTRACT_ANNOTATIONS", raising=False)


@pytest.fixture
def clean_file(tmp_path):
    path = tmp_path / "clean.py"
    path.write_text(CLEAN_SOURCE)
    return path


def by_name(summary):
    return {r.name: r for r in summary.results}


def test_example_file_with_deep_checking():
    summary = check_file(str(EXAMPLES), CheckerConfig(check_contracts=True))
    results = by_name(summary)

    assert summary.total == 10
    assert summary.clean == 6
    assert sorted(name for name, r in results.items() if not r.clean) == [
        "always_none", "inverted", "join_names", "typo"
    ]


def test_example_file_diagnostics():
    summary = check_file(str(EXAMPLES), CheckerConfig(check_contracts=True))
    results = by_name(summary)

    for name in ("parse_or_none", "parse_early_return", "parse_ternary", "strip_or_none", "Repository.lookup"):
        assert results[name].clean, name
        assert results[name].state is CheckState.DONE, name

    assert [d.location.lineno for d in results["always_none"].violations] == [48]
    assert "when parameter text is non-null" in results["always_none"].violations[0].message
    assert [d.location.lineno for d in results["inverted"].violations] == [55]

    join_names = results["join_names"].violations
    assert [d.location.lineno for d in join_names] == [66]
    assert join_names[0].message.endswith("when the contract preconditions are true.")

    assert results["identity"].state is CheckState.PARSED_INVALID_SHAPE
    assert results["identity"].clean

    typo = results["typo"]
    assert typo.state is CheckState.TOKEN_INVALID
    assert [d.kind for d in typo.diagnostics] == [DiagnosticKind.ANNOTATION_VALUE_INVALID]
    assert typo.diagnostics[0].location.lineno == 78


def test_example_file_without_deep_checking():
    summary = check_file(str(EXAMPLES))
    results = by_name(summary)

    assert summary.failed == 1
    assert not results["typo"].clean
    assert results["always_none"].state is CheckState.UNSUPPORTED_BUT_VALID


def test_json_report(tmp_path):
    output = tmp_path / "reports" / "contract_functions.json"
    check_file(str(EXAMPLES), CheckerConfig(check_contracts=True), json_output=str(output))

    with open(output) as f:
        report = json.load(f)

    assert report["schema_version"] == "1.0.0"
    assert report["metadata"]["check_contracts"] is True
    assert report["metadata"]["source_file"] == str(EXAMPLES)
    assert report["summary"] == {
        "total_functions": 10,
        "clean": 6,
        "with_diagnostics": 4,
        "diagnostics": 4,
        "violations": 3
    }

    entry = next(r for r in report["results"] if r["function"]["name"] == "always_none")
    assert entry["check"]["state"] == "done"
    assert len(entry["function"]["source_hash"]) == 64
    diagnostic = entry["diagnostics"][0]
    assert diagnostic["kind"] == "CONTRACT_VIOLATION"
    assert (diagnostic["line"], diagnostic["column"]) == (48, 5)
    assert diagnostic["function"] == "always_none"
    assert diagnostic["contract"] == "!null -> !null"


def test_cli_exit_codes(clean_file, capsys):
    assert main([str(clean_file), "--check-contracts"]) == 0
    assert main([str(EXAMPLES)]) == 1
    assert main([str(clean_file) + ".missing"]) == 2
    assert "File not found" in capsys.readouterr().out


def test_cli_reads_environment(monkeypatch, capsys):
    monkeypatch.setenv("NULLPACT_CHECK_CONTRACTS", "1")
    assert main([str(EXAMPLES)]) == 1
    out = capsys.readouterr().out
    assert "With diagnostics: 4" in out


def test_cli_custom_annotation(tmp_path):
    path = tmp_path / "custom.py"
    path.write_text(
        "@ensures_non_null('!null -> !null')\n"
        "def f(s):\n"
        "    return None\n"
    )
    assert main([str(path), "--check-contracts"]) == 0
    assert main([str(path), "--check-contracts", "--contract-annotation", "ensures_non_null"]) == 1


def test_cli_syntax_error_is_a_failure(tmp_path, capsys):
    path = tmp_path / "broken.py"
    path.write_text("def broken(:\n")
    assert main([str(path)]) == 1
    assert "Could not parse" in capsys.readouterr().out


def test_cli_json_directory_for_several_files(clean_file, tmp_path):
    reports = tmp_path / "reports"
    assert main([str(clean_file), str(EXAMPLES), "--check-contracts", "--json", str(reports)]) == 1
    assert sorted(p.name for p in reports.iterdir()) == [
        "clean.nullpact.json", "contract_functions.nullpact.json"
    ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
