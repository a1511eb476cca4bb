"""
Return statement discovery for a single function body
"""

import ast
from typing import List

from ..core.models import Branch, ConditionalGuard, ReturnSite


class ReturnScanner(ast.NodeVisitor):
    """
    Collects every return statement of a function together with the chain
    of if/else branches that encloses it.

    Loops, try blocks, with blocks and match cases are descended into.
    Nested functions, lambdas and classes are not: a return inside them
    leaves a different callable.
    """

    def __init__(self):
        self.sites: List[ReturnSite] = []
        self._guards: List[ConditionalGuard] = []

    def scan(self, function_node: ast.AST) -> List[ReturnSite]:
        self.sites = []
        self._guards = []
        for stmt in function_node.body:
            self.visit(stmt)
        return self.sites

    def visit_Return(self, node: ast.Return):
        self.sites.append(ReturnSite(node, tuple(self._guards)))

    def visit_If(self, node: ast.If):
        self._visit_branch(node, Branch.THEN, node.body)
        self._visit_branch(node, Branch.ELSE, node.orelse)

    def _visit_branch(self, node: ast.If, branch: Branch, statements: List[ast.stmt]):
        self._guards.append(ConditionalGuard(node, branch))
        try:
            for stmt in statements:
                self.visit(stmt)
        finally:
            self._guards.pop()

    def visit_FunctionDef(self, node):
        pass

    visit_AsyncFunctionDef = visit_FunctionDef
    visit_ClassDef = visit_FunctionDef
    visit_Lambda = visit_FunctionDef


def find_return_sites(function_node: ast.AST) -> List[ReturnSite]:
    return ReturnScanner().scan(function_node)
