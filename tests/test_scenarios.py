#!/usr/bin/env python3
"""
End-to-end checks of the four canonical "!null -> !null" shapes with the
default oracle.
"""

import pytest
from nullpact.core.config import CheckerConfig
from nullpact.core.models import CheckState, DiagnosticKind
from nullpact.verify import check_source

ENABLED = CheckerConfig(check_contracts=True)


def violations(source: str, config: CheckerConfig = ENABLED):
    summary = check_source(source, config=config)
    assert summary.total == 1
    result = summary.results[0]
    return result, [d for d in result.diagnostics if d.kind is DiagnosticKind.CONTRACT_VIOLATION]


def test_guarded_null_return_in_else_branch():
    result, found = violations('''
@contract("!null -> !null")
def f(s):
    if s is not None:
        return parse(s)
    else:
        return None
''')
    assert result.state is CheckState.DONE
    assert found == []


def test_fall_through_null_return():
    result, found = violations('''
@contract("!null -> !null")
def f(s):
    if s is not None:
        return parse(s)
    return None
''')
    assert result.state is CheckState.DONE
    assert found == []


def test_unconditional_null_return():
    _, found = violations('''
@contract("!null -> !null")
def f(s):
    return None
''')
    assert len(found) == 1
    assert found[0].location.lineno == 4
    assert found[0].message == (
        "Function f has @contract(!null -> !null), but this appears to be violated, "
        "as a nullable value may be returned when parameter s is non-null."
    )


def test_null_return_under_non_null_guard():
    _, found = violations('''
@contract("!null -> !null")
def f(s):
    if s is not None:
        return None
    return 1
''')
    assert [d.location.lineno for d in found] == [5]


def test_nothing_is_reported_when_deep_checking_is_off():
    result, found = violations('''
@contract("!null -> !null")
def f(s):
    return None
''', config=CheckerConfig())
    assert result.state is CheckState.UNSUPPORTED_BUT_VALID
    assert found == []
    assert result.clean


def test_nullable_local_is_reported():
    _, found = violations('''
@contract("!null -> !null")
def f(items):
    best = None
    for item in items:
        if item.score > 0:
            best = item
    return best
''')
    assert [d.location.lineno for d in found] == [8]


def test_handler_return_after_intermediate_none():
    result, found = violations('''
@contract("!null -> !null")
def f(s):
    value = "x"
    try:
        value = None
        value = compute(s)
    except ValueError:
        return value
    return value
''')
    assert result.state is CheckState.DONE
    assert [d.location.lineno for d in found] == [9]


def test_none_propagated_through_a_long_loop_chain():
    names = [f"v{i}" for i in range(13)]
    lines = ["@contract(\"!null -> !null\")", "def f(s):"]
    lines += [f"    {name} = 'x'" for name in names]
    lines.append("    for _ in range(20):")
    lines += [f"        {a} = {b}" for a, b in zip(names, names[1:])]
    lines += ["        v12 = None", "    return v0"]
    _, found = violations("\n".join(lines) + "\n")
    assert [d.location.lineno for d in found] == [len(lines)]


def test_nested_function_returns_are_ignored():
    _, found = violations('''
@contract("!null -> !null")
def f(s):
    def fallback():
        return None
    return s.strip()
''')
    assert found == []


def test_column_points_at_the_return_statement():
    summary = check_source('''
class Cache:
    @contract("!null -> !null")
    def get(self, key):
        if key:
            return None
        return key
''', config=ENABLED)
    result = summary.results[0]
    assert result.name == "Cache.get"
    first = result.diagnostics[0]
    assert (first.location.lineno, first.location.col_offset) == (6, 12)
    assert str(first.location) == "<string>:6:13"
    assert "when parameter key is non-null" in first.message


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
