"""
Syntactic reachability of a return site under "parameter P is not None".

Only the chain of enclosing if/else statements is inspected. A guard counts
when it has one of the shapes

    P is None       None is P       P == None      None == P
    P is not None   None is not P   P != None      None != P

optionally wrapped in `not (...)`. Guards combining several conditions with
`and`/`or`, or testing through calls such as `isinstance`, are inconclusive.
"""

import ast
from typing import Optional, Sequence

from ..core.config import NULL_TEST_OPS
from ..core.models import Branch, NullCheck, ReturnSite, ValueConstraint


def _is_none(node: ast.AST) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def match_null_check(test: ast.expr) -> Optional[NullCheck]:
    """
    Recognise a null guard on a plain name.

    Returns:
        NullCheck(param, asserts_null) where asserts_null is True when the
        test being true means the name is None, or None if the test has
        some other shape.
    """
    if isinstance(test, ast.UnaryOp) and isinstance(test.op, ast.Not):
        inner = match_null_check(test.operand)
        if inner is None:
            return None
        return NullCheck(inner.param, not inner.asserts_null)

    if not isinstance(test, ast.Compare) or len(test.ops) != 1:
        return None

    asserts_null = NULL_TEST_OPS.get(type(test.ops[0]))
    if asserts_null is None:
        return None

    left, right = test.left, test.comparators[0]
    if isinstance(left, ast.Name) and _is_none(right):
        return NullCheck(left.id, asserts_null)
    if _is_none(left) and isinstance(right, ast.Name):
        return NullCheck(right.id, asserts_null)
    return None


def is_reachable_when_non_null(site: ReturnSite, param: str) -> bool:
    """
    Decide whether `site` can execute when `param` is not None.

    Walks the enclosing conditionals from the innermost outwards. The site is
    unreachable when it sits in the then-branch of `param is None` or in the
    else-branch of `param is not None`. Anything else is inconclusive, and an
    exhausted walk defaults to reachable.
    """
    for guard in reversed(site.guards):
        check = match_null_check(guard.test)
        if check is None or check.param != param:
            continue
        if check.asserts_null and guard.branch is Branch.THEN:
            return False
        if not check.asserts_null and guard.branch is Branch.ELSE:
            return False
    return True


def is_reachable_under_antecedent(site: ReturnSite,
                                  antecedent: Sequence[ValueConstraint],
                                  parameters: Sequence[str]) -> bool:
    """
    Check each '!null' antecedent position on its own.

    The site is exempt as soon as any single position proves it unreachable;
    positions without a matching parameter never prove anything.
    """
    for position, constraint in enumerate(antecedent):
        if constraint is not ValueConstraint.IS_NON_NULL:
            continue
        if position >= len(parameters):
            continue
        if not is_reachable_when_non_null(site, parameters[position]):
            return False
    return True
