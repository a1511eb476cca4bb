"""
Tests for contract text parsing and validation
"""

import pytest
from nullpact.contracts import ContractSyntaxError, ParameterBinder, parse_clause, parse_token, split_clauses
from nullpact.core.models import ValueConstraint


def test_split_single_clause():
    assert split_clauses("!null -> !null") == ["!null -> !null"]


def test_split_multiple_clauses():
    assert split_clauses("null -> null; !null -> !null") == ["null -> null", " !null -> !null"]


def test_trailing_separator_is_not_a_clause():
    assert len(split_clauses("!null -> !null;")) == 1


def test_blank_clause_before_the_last_still_counts():
    assert split_clauses(" ; !null -> !null") == [" ", " !null -> !null"]
    assert split_clauses("!null -> !null;;") == ["!null -> !null"]


def test_empty_contract_has_no_clauses():
    assert split_clauses("") == []


def test_binder_splits_antecedent_and_consequent():
    tokens, consequent = ParameterBinder().bind(" _ , !null ->  !null ", 2)
    assert tokens == ["_", "!null"]
    assert consequent == "!null"


def test_binder_empty_antecedent():
    tokens, consequent = ParameterBinder().bind("-> !null", 0)
    assert tokens == []
    assert consequent == "!null"


def test_binder_keeps_tokens_on_arity_mismatch():
    tokens, _ = ParameterBinder().bind("!null, _ -> !null", 1)
    assert tokens == ["!null", "_"]


def test_binder_missing_arrow_raises():
    with pytest.raises(ContractSyntaxError, match="missing '->'"):
        ParameterBinder().bind("!null", 1)


def test_binder_double_arrow_raises():
    with pytest.raises(ContractSyntaxError, match="more than one"):
        ParameterBinder().bind("!null -> !null -> null", 1)


def test_parse_token_vocabulary():
    cases = [
        ("_", ValueConstraint.WILDCARD),
        ("null", ValueConstraint.IS_NULL),
        ("!null", ValueConstraint.IS_NON_NULL),
        ("true", ValueConstraint.IS_TRUE),
        ("false", ValueConstraint.IS_FALSE),
        (" !null ", ValueConstraint.IS_NON_NULL),
    ]
    for token, expected in cases:
        assert parse_token(token) is expected, f"Failed for {token!r}"

    assert parse_token("nonnull") is None
    assert parse_token("None") is None


def test_checkable_contract():
    parsed = parse_clause("_, null, !null -> !null", 3)
    assert parsed.valid
    assert parsed.checkable
    assert parsed.deep_checkable(True)
    assert not parsed.deep_checkable(False)


def test_boolean_antecedent_is_valid_but_not_checkable():
    parsed = parse_clause("true -> !null", 1)
    assert parsed.valid
    assert not parsed.checkable


def test_consequent_other_than_non_null_is_not_checkable():
    for clause in ("!null -> null", "!null -> true", "!null -> _"):
        parsed = parse_clause(clause, 1)
        assert parsed.valid
        assert not parsed.checkable, clause


def test_every_invalid_token_is_collected():
    parsed = parse_clause("foo, !null, bar -> !null", 3)
    assert parsed.invalid_tokens == ["foo", "bar"]
    assert not parsed.valid
    assert not parsed.deep_checkable(True)


def test_non_null_positions():
    parsed = parse_clause("!null, _, !null -> !null", 3)
    assert parsed.clause.non_null_positions == [0, 2]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
