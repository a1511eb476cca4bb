"""Contract mini-language parsing and validation"""
from .parser import (
    ContractSyntaxError,
    ParameterBinder,
    ParsedContract,
    parse_clause,
    parse_token,
    split_clauses,
)

__all__ = [
    'ContractSyntaxError', 'ParameterBinder', 'ParsedContract',
    'parse_clause', 'parse_token', 'split_clauses'
]
