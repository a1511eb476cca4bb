"""Return discovery, reachability and nullness of function bodies"""
from .nullness import ContractDataflowOracle, NullnessOracle, default_oracle_factory
from .reachability import is_reachable_under_antecedent, is_reachable_when_non_null, match_null_check
from .scanner import ReturnScanner, find_return_sites

__all__ = [
    'ContractDataflowOracle', 'NullnessOracle', 'default_oracle_factory',
    'is_reachable_under_antecedent', 'is_reachable_when_non_null', 'match_null_check',
    'ReturnScanner', 'find_return_sites'
]
