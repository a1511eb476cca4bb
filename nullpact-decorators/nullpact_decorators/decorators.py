"""
nullpact Decorators - Lightweight markers for nullness contracts

These decorators do nothing at runtime beyond recording the contract text on
the function. The checking happens in nullpact, which reads the decorator
from the source (or `__contract__` from a loaded module).

Usage:
    from nullpact_decorators import contract

    @contract("!null -> !null")
    def parse(text: Optional[str]) -> Optional[int]:
        if text is None:
            return None
        return int(text)
"""

from typing import Callable, TypeVar

F = TypeVar('F', bound=Callable)


def contract(value: str = "", pure: bool = False) -> Callable[[F], F]:
    """
    Declare how the function's result depends on its arguments.

    Each clause reads `antecedent -> consequent`, with one antecedent token
    per parameter. Tokens are "_" (any value), "null", "!null", "true" and
    "false". Examples:
        @contract("!null -> !null")
        @contract("_, null -> null")
        @contract("null -> false; !null -> true")

    Args:
        value: Contract text
        pure: The function has no side effects (recorded, not checked)

    Returns:
        Decorator that returns the original function
    """
    def decorator(func: F) -> F:
        func.__contract__ = value
        func.__contract_pure__ = pure
        return func
    return decorator


Contract = contract

# Convenience exports
__all__ = ['contract', 'Contract']
