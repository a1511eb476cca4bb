"""
Example file demonstrating @contract decorated functions.

This file contains both correct and buggy functions to exercise the checker:

    nullpact examples/contract_functions.py --check-contracts
"""

from typing import Optional

from nullpact_decorators import contract


# Correct: the None return sits in the else-branch of `text is not None`
@contract("!null -> !null")
def parse_or_none(text: Optional[str]) -> Optional[int]:
    if text is not None:
        return int(text)
    else:
        return None


# Correct: the fall-through is only reached when text is None
@contract("!null -> !null")
def parse_early_return(text: Optional[str]) -> Optional[int]:
    if text is not None:
        return int(text)
    return None


# Correct: conditional expression
@contract("!null -> !null")
def parse_ternary(text: Optional[str]) -> Optional[int]:
    return int(text) if text is not None else None


# Correct: guard on None first
@contract("!null -> !null")
def strip_or_none(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text.strip()


# Buggy: always returns None
@contract("!null -> !null")
def always_none(text: Optional[str]) -> Optional[int]:
    return None


# Buggy: returns None exactly when text is non-null
@contract("!null -> !null")
def inverted(text: Optional[str]) -> Optional[int]:
    if text is not None:
        return None
    return int("42")


# Buggy: two non-null parameters, generic message
@contract("!null, !null -> !null")
def join_names(first: Optional[str], last: Optional[str]) -> Optional[str]:
    if first is None or last is None:
        return None
    result = None
    if len(first) > 10:
        return result
    return first + " " + last


# Not checked: two clauses
@contract("null -> null; !null -> !null")
def identity(value: Optional[str]) -> Optional[str]:
    return value


# Invalid: unknown value constraint
@contract("nonnull -> !null")
def typo(value: Optional[str]) -> Optional[str]:
    return value


class Repository:
    """The receiver is not part of a method's contract"""

    def __init__(self):
        self.items = {}

    @contract("!null -> !null")
    def lookup(self, key: Optional[str]) -> Optional[str]:
        if key is None:
            return None
        return self.items.get(key, "")
