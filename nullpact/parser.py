"""
Parser to extract @contract decorated functions from Python files.
"""

import ast
import inspect
import textwrap
from typing import Iterable, List, Optional, Tuple

from .core.config import DEFAULT_CONTRACT_ANNOTATIONS
from .core.models import ContractFunction


def _simple_name(node: ast.expr) -> Optional[str]:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def _has_decorator(node: ast.AST, name: str) -> bool:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        if _simple_name(target) == name:
            return True
    return False


def formal_parameters(node: ast.AST, is_method: bool = False) -> List[str]:
    """
    Names of the parameters a contract's antecedent binds to, in order.

    The receiver of a method (self / cls) is not part of the contract and is
    dropped unless the method is a staticmethod.
    """
    args = node.args
    names = [a.arg for a in list(args.posonlyargs) + list(args.args)]
    if args.vararg:
        names.append(args.vararg.arg)
    names.extend(a.arg for a in args.kwonlyargs)
    if args.kwarg:
        names.append(args.kwarg.arg)

    has_receiver = bool(args.posonlyargs or args.args)
    if is_method and has_receiver and not _has_decorator(node, "staticmethod"):
        names = names[1:]
    return names


class ContractFunctionParser:
    """Parse Python files to find @contract decorated functions"""

    def __init__(self, annotation_names: Optional[Iterable[str]] = None):
        """
        Args:
            annotation_names: Decorator names treated as contract declarations
                (matched on the last component, so `jb.Contract` matches
                "Contract"). Defaults to "contract" and "Contract".
        """
        self.annotation_names = frozenset(annotation_names or DEFAULT_CONTRACT_ANNOTATIONS)

    def parse_file(self, file_path: str) -> List[ContractFunction]:
        """
        Parse a Python file and extract all contract decorated functions.

        Raises:
            FileNotFoundError: If the file does not exist
            SyntaxError: If the file is not valid Python
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            source = f.read()
        return self.parse_source(source, filename=file_path)

    def parse_source(self, source: str, filename: str = "<string>") -> List[ContractFunction]:
        tree = ast.parse(source, filename=filename)
        collector = _FunctionCollector(self, source, filename)
        collector.visit(tree)
        return collector.functions

    def contract_string(self, node: ast.AST) -> Optional[str]:
        """
        Return the contract text of the first contract decorator on node.

        Both @contract("...") and @contract(value="...") are accepted; other
        keywords such as pure=True are ignored.
        """
        for decorator in node.decorator_list:
            if not isinstance(decorator, ast.Call):
                continue
            if _simple_name(decorator.func) not in self.annotation_names:
                continue

            value = decorator.args[0] if decorator.args else None
            if value is None:
                for keyword in decorator.keywords:
                    if keyword.arg == "value":
                        value = keyword.value
            if isinstance(value, ast.Constant) and isinstance(value.value, str):
                return value.value
        return None

    def parse_module(self, module) -> List[ContractFunction]:
        """
        Extract contract functions from a loaded module.

        Only module-level functions decorated with nullpact_decorators.contract
        (which records `__contract__`) are found.
        """
        functions = []

        for name, obj in inspect.getmembers(module, inspect.isfunction):
            contract = getattr(obj, '__contract__', None)
            if contract is None:
                continue

            try:
                lines, first_line = inspect.getsourcelines(obj)
            except OSError:
                continue

            source = textwrap.dedent("".join(lines))
            tree = ast.parse(source)
            ast.increment_lineno(tree, first_line - 1)
            node = tree.body[0]

            functions.append(ContractFunction(
                name=name,
                qualname=obj.__qualname__,
                node=node,
                contract=contract,
                parameters=formal_parameters(node),
                lineno=node.lineno,
                filename=inspect.getsourcefile(obj) or "<unknown>",
                source=source
            ))

        return functions


class _FunctionCollector(ast.NodeVisitor):
    """Walks a module keeping track of qualified names and class bodies"""

    def __init__(self, parser: ContractFunctionParser, source: str, filename: str):
        self.parser = parser
        self.source = source
        self.filename = filename
        self.functions: List[ContractFunction] = []
        self._scope: List[Tuple[str, bool]] = []  # (qualname part, is class body)

    def visit_ClassDef(self, node: ast.ClassDef):
        self._scope.append((node.name, True))
        self.generic_visit(node)
        self._scope.pop()

    def visit_FunctionDef(self, node):
        contract = self.parser.contract_string(node)
        if contract is not None:
            in_class = bool(self._scope) and self._scope[-1][1]
            qualname = ".".join([part for part, _ in self._scope] + [node.name])
            self.functions.append(ContractFunction(
                name=node.name,
                qualname=qualname,
                node=node,
                contract=contract,
                parameters=formal_parameters(node, is_method=in_class),
                lineno=node.lineno,
                filename=self.filename,
                source=ast.get_source_segment(self.source, node) or ""
            ))

        self._scope.append((f"{node.name}.<locals>", False))
        self.generic_visit(node)
        self._scope.pop()

    visit_AsyncFunctionDef = visit_FunctionDef
