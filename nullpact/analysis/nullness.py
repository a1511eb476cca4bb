"""
Nullness classification of returned expressions.

The checker only needs `NullnessOracle.classify`. ContractDataflowOracle is
the default implementation: a forward walk over the function body that
tracks which local names may hold None, seeded with the nullness the
contract's antecedent assumes for each parameter. Paths that contradict those
assumptions are dead, and a return statement reached only through dead paths
returns nothing at all.
"""

import ast
from functools import reduce
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from ..core.config import (
    NON_NULL_BUILTINS,
    OPTIONAL_ANNOTATIONS,
    UNION_ANNOTATIONS,
)
from ..core.models import Nullness, ReturnSite
from .reachability import match_null_check

Env = Dict[str, Nullness]


class NullnessOracle(Protocol):
    def classify(self, expr: Optional[ast.expr], site: ReturnSite) -> Nullness:
        ...


OracleFactory = Callable[[ast.AST, Dict[str, Nullness]], NullnessOracle]


def join(a: Nullness, b: Nullness) -> Nullness:
    if a is b:
        return a
    if a.may_be_null or b.may_be_null:
        return Nullness.NULLABLE
    return Nullness.UNKNOWN


def join_env(a: Optional[Env], b: Optional[Env]) -> Optional[Env]:
    """Join two environments; None stands for an unreachable point"""
    if a is None:
        return None if b is None else dict(b)
    if b is None:
        return dict(a)
    return {
        name: join(a.get(name, Nullness.UNKNOWN), b.get(name, Nullness.UNKNOWN))
        for name in a.keys() | b.keys()
    }


def join_envs(envs: Iterable[Optional[Env]]) -> Optional[Env]:
    return reduce(join_env, envs, None)


def refine(env: Optional[Env], name: str, required: Nullness) -> Optional[Env]:
    """Assume `name` has the required nullness; None if that contradicts env"""
    if env is None:
        return None
    current = env.get(name, Nullness.UNKNOWN)
    if required is Nullness.NULL and current is Nullness.NON_NULL:
        return None
    if required is Nullness.NON_NULL and current is Nullness.NULL:
        return None
    refined = dict(env)
    refined[name] = required
    return refined


def _annotation_admits_none(annotation: Optional[ast.expr]) -> bool:
    if annotation is None:
        return False
    if isinstance(annotation, ast.Constant):
        if annotation.value is None:
            return True
        if isinstance(annotation.value, str):
            try:
                parsed = ast.parse(annotation.value, mode="eval")
            except SyntaxError:
                return False
            return _annotation_admits_none(parsed.body)
        return False
    if isinstance(annotation, ast.BinOp) and isinstance(annotation.op, ast.BitOr):
        return _annotation_admits_none(annotation.left) or _annotation_admits_none(annotation.right)
    if isinstance(annotation, ast.Subscript):
        head = annotation.value
        head_name = head.id if isinstance(head, ast.Name) else getattr(head, "attr", None)
        if head_name in OPTIONAL_ANNOTATIONS:
            return True
        if head_name in UNION_ANNOTATIONS:
            members = annotation.slice
            elts = members.elts if isinstance(members, ast.Tuple) else [members]
            return any(_annotation_admits_none(e) for e in elts)
    return False


def declared_parameter_nullness(function_node: ast.AST) -> List[Tuple[str, Nullness]]:
    """Nullness of every parameter as declared by annotations and defaults"""
    args = function_node.args
    positional = list(args.posonlyargs) + list(args.args)
    defaults: List[Optional[ast.expr]] = [None] * (len(positional) - len(args.defaults)) + list(args.defaults)

    declared = []
    for arg, default in zip(positional, defaults):
        declared.append((arg.arg, _declared(arg, default)))
    if args.vararg:
        declared.append((args.vararg.arg, Nullness.NON_NULL))
    for arg, default in zip(args.kwonlyargs, args.kw_defaults):
        declared.append((arg.arg, _declared(arg, default)))
    if args.kwarg:
        declared.append((args.kwarg.arg, Nullness.NON_NULL))
    return declared


def _declared(arg: ast.arg, default: Optional[ast.expr]) -> Nullness:
    if _annotation_admits_none(arg.annotation):
        return Nullness.NULLABLE
    if isinstance(default, ast.Constant) and default.value is None:
        return Nullness.NULLABLE
    return Nullness.UNKNOWN


class ContractDataflowOracle:
    """
    Path-sensitive nullness for the return statements of one function.

    Args:
        function_node: FunctionDef / AsyncFunctionDef being checked
        assumptions: Parameter name -> nullness assumed on entry
    """

    def __init__(self, function_node: ast.AST, assumptions: Optional[Dict[str, Nullness]] = None):
        self.function_node = function_node
        self.assumptions = dict(assumptions or {})
        self._return_envs: Dict[int, Env] = {}
        self._loops: List[Tuple[list, list]] = []
        self._raise_points: List[List[Env]] = []
        self._analyzed = False

    def classify(self, expr: Optional[ast.expr], site: ReturnSite) -> Nullness:
        self._analyze()
        env = self._return_envs.get(id(site.node))
        if env is None:
            # Dead under the assumptions: nothing is ever returned from here
            return Nullness.NON_NULL
        if expr is None:
            return Nullness.NULL
        return self.evaluate(expr, env)

    def _analyze(self):
        if self._analyzed:
            return
        self._analyzed = True
        env: Env = {}
        for name, declared in declared_parameter_nullness(self.function_node):
            env[name] = self.assumptions.get(name, declared)
        self._exec_block(self.function_node.body, env)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _exec_block(self, statements: List[ast.stmt], env: Optional[Env]) -> Optional[Env]:
        for stmt in statements:
            if env is None:
                break
            handler = getattr(self, f"_exec_{type(stmt).__name__}", None)
            env = handler(stmt, env) if handler else env
            if env is not None:
                for points in self._raise_points:
                    points.append(env)
        return env

    def _exec_Return(self, stmt: ast.Return, env: Env) -> Optional[Env]:
        if stmt.value is not None:
            env = self._effects(stmt.value, env)
        key = id(stmt)
        self._return_envs[key] = join_env(self._return_envs.get(key), env)
        return None

    def _exec_Raise(self, stmt, env):
        return None

    def _exec_Expr(self, stmt: ast.Expr, env: Env) -> Env:
        return self._effects(stmt.value, env)

    def _exec_Assign(self, stmt: ast.Assign, env: Env) -> Env:
        env = self._effects(stmt.value, env)
        value = self.evaluate(stmt.value, env)
        env = dict(env)
        for target in stmt.targets:
            self._bind(target, value, env)
        return env

    def _exec_AnnAssign(self, stmt: ast.AnnAssign, env: Env) -> Env:
        if stmt.value is None:
            return env
        env = self._effects(stmt.value, env)
        value = self.evaluate(stmt.value, env)
        env = dict(env)
        self._bind(stmt.target, value, env)
        return env

    def _exec_AugAssign(self, stmt: ast.AugAssign, env: Env) -> Env:
        env = dict(self._effects(stmt.value, env))
        self._bind(stmt.target, Nullness.NON_NULL, env)
        return env

    def _exec_Delete(self, stmt: ast.Delete, env: Env) -> Env:
        env = dict(env)
        for target in stmt.targets:
            if isinstance(target, ast.Name):
                env.pop(target.id, None)
        return env

    def _exec_Assert(self, stmt: ast.Assert, env: Env) -> Optional[Env]:
        return self.assume(env, stmt.test, True)

    def _exec_If(self, stmt: ast.If, env: Env) -> Optional[Env]:
        env = self._effects(stmt.test, env)
        then_out = self._exec_block(stmt.body, self.assume(env, stmt.test, True))
        else_out = self._exec_block(stmt.orelse, self.assume(env, stmt.test, False))
        return join_env(then_out, else_out)

    def _exec_While(self, stmt: ast.While, env: Env) -> Optional[Env]:
        head, breaks = self._run_loop(
            env, lambda state: self.assume(state, stmt.test, True), stmt.body)
        normal_exit = self._exec_block(stmt.orelse, self.assume(head, stmt.test, False))
        return join_envs([normal_exit] + breaks)

    def _exec_For(self, stmt: ast.For, env: Env) -> Optional[Env]:
        def enter(state):
            if state is None:
                return None
            state = dict(state)
            self._bind(stmt.target, Nullness.UNKNOWN, state)
            return state

        head, breaks = self._run_loop(env, enter, stmt.body)
        normal_exit = self._exec_block(stmt.orelse, head)
        return join_envs([normal_exit] + breaks)

    _exec_AsyncFor = _exec_For

    def _run_loop(self, env: Env, enter: Callable[[Optional[Env]], Optional[Env]],
                  body: List[ast.stmt]) -> Tuple[Optional[Env], List[Optional[Env]]]:
        """
        Iterate a loop body to a fixpoint; returns the head state and break states.

        The head only grows, and each name can move up the lattice at most
        twice, so the iteration terminates.
        """
        head: Optional[Env] = env
        breaks: List[Optional[Env]] = []
        while True:
            self._loops.append(([], []))
            body_out = self._exec_block(body, enter(head))
            breaks, continues = self._loops.pop()
            new_head = join_envs([head, body_out] + continues)
            if new_head == head:
                break
            head = new_head
        return head, breaks

    def _exec_Break(self, stmt, env):
        if self._loops:
            self._loops[-1][0].append(env)
        return None

    def _exec_Continue(self, stmt, env):
        if self._loops:
            self._loops[-1][1].append(env)
        return None

    def _exec_Try(self, stmt: ast.Try, env: Env) -> Optional[Env]:
        self._raise_points.append([])
        try:
            body_out = self._exec_block(stmt.body, env)
        finally:
            raise_points = self._raise_points.pop()
        # An exception may leave the body after any statement, nested ones included
        handler_in = join_envs([env] + raise_points)

        outs = [self._exec_block(stmt.orelse, body_out)]
        for handler in stmt.handlers:
            state = dict(handler_in)
            if handler.name:
                state[handler.name] = Nullness.NON_NULL
            outs.append(self._exec_block(handler.body, state))
        out = join_envs(outs)

        if stmt.finalbody:
            final_out = self._exec_block(stmt.finalbody, out if out is not None else handler_in)
            out = final_out if out is not None else None
        return out

    _exec_TryStar = _exec_Try

    def _exec_With(self, stmt: ast.With, env: Env) -> Optional[Env]:
        env = dict(env)
        for item in stmt.items:
            if item.optional_vars is not None:
                self._bind(item.optional_vars, Nullness.UNKNOWN, env)
        return self._exec_block(stmt.body, env)

    _exec_AsyncWith = _exec_With

    def _exec_Match(self, stmt, env: Env) -> Optional[Env]:
        outs = []
        exhaustive = False
        for case in stmt.cases:
            state = self._match_case(stmt.subject, case.pattern, env)
            if case.guard is not None:
                state = self.assume(state, case.guard, True)
            elif _irrefutable(case.pattern):
                exhaustive = True
            outs.append(self._exec_block(case.body, state))
        if not exhaustive:
            outs.append(env)
        return join_envs(outs)

    def _match_case(self, subject: ast.expr, pattern, env: Env) -> Optional[Env]:
        if isinstance(pattern, ast.MatchSingleton) and isinstance(subject, ast.Name):
            required = Nullness.NULL if pattern.value is None else Nullness.NON_NULL
            return refine(env, subject.id, required)
        state = dict(env)
        for node in ast.walk(pattern):
            name = getattr(node, "name", None) or getattr(node, "rest", None)
            if isinstance(name, str):
                state[name] = Nullness.UNKNOWN
        return state

    def _exec_FunctionDef(self, stmt, env: Env) -> Env:
        env = dict(env)
        env[stmt.name] = Nullness.NON_NULL
        return env

    _exec_AsyncFunctionDef = _exec_FunctionDef
    _exec_ClassDef = _exec_FunctionDef

    def _exec_Import(self, stmt, env: Env) -> Env:
        env = dict(env)
        for alias in stmt.names:
            env[(alias.asname or alias.name).split(".")[0]] = Nullness.NON_NULL
        return env

    _exec_ImportFrom = _exec_Import

    def _bind(self, target: ast.expr, value: Nullness, env: Env):
        if isinstance(target, ast.Name):
            env[target.id] = value
        elif isinstance(target, (ast.Tuple, ast.List)):
            for elt in target.elts:
                self._bind(elt, Nullness.UNKNOWN, env)
        elif isinstance(target, ast.Starred):
            self._bind(target.value, Nullness.NON_NULL, env)

    def _effects(self, expr: ast.expr, env: Env) -> Env:
        """Apply assignment expressions (walrus) found inside expr"""
        named = [n for n in ast.walk(expr) if isinstance(n, ast.NamedExpr)]
        if not named:
            return env
        env = dict(env)
        for node in named:
            self._bind(node.target, self.evaluate(node.value, env), env)
        return env

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def assume(self, env: Optional[Env], test: ast.expr, truth: bool) -> Optional[Env]:
        """Refine env with `test` evaluating to `truth`; None if impossible"""
        if env is None:
            return None

        if isinstance(test, ast.Constant):
            return env if bool(test.value) == truth else None

        if isinstance(test, ast.UnaryOp) and isinstance(test.op, ast.Not):
            return self.assume(env, test.operand, not truth)

        if isinstance(test, ast.BoolOp):
            conjunction = isinstance(test.op, ast.And)
            if conjunction == truth:
                # all operands share the outcome
                for value in test.values:
                    env = self.assume(env, value, truth)
                return env
            # the first operand with the opposite outcome decides
            outs = []
            prefix: Optional[Env] = env
            for value in test.values:
                outs.append(self.assume(prefix, value, truth))
                prefix = self.assume(prefix, value, not truth)
            return join_envs(outs)

        if isinstance(test, ast.Compare):
            check = match_null_check(test)
            if check is None:
                return env
            is_null = check.asserts_null == truth
            return refine(env, check.param, Nullness.NULL if is_null else Nullness.NON_NULL)

        if isinstance(test, ast.Name):
            # a truthy value is never None; a falsy one may or may not be
            return refine(env, test.id, Nullness.NON_NULL) if truth else env

        if isinstance(test, ast.NamedExpr):
            env = self._effects(test, env)
            return self.assume(env, test.target, truth)

        if (truth and isinstance(test, ast.Call) and isinstance(test.func, ast.Name)
                and test.func.id == "isinstance" and len(test.args) == 2
                and isinstance(test.args[0], ast.Name) and not _mentions_none_type(test.args[1])):
            return refine(env, test.args[0].id, Nullness.NON_NULL)

        return env

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def evaluate(self, expr: ast.expr, env: Env) -> Nullness:
        if isinstance(expr, ast.Constant):
            return Nullness.NULL if expr.value is None else Nullness.NON_NULL

        if isinstance(expr, ast.Name):
            return env.get(expr.id, Nullness.UNKNOWN)

        if isinstance(expr, (ast.JoinedStr, ast.List, ast.Tuple, ast.Dict, ast.Set,
                             ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp,
                             ast.Lambda, ast.BinOp, ast.UnaryOp, ast.Compare)):
            return Nullness.NON_NULL

        if isinstance(expr, ast.NamedExpr):
            return self.evaluate(expr.value, env)

        if isinstance(expr, ast.IfExp):
            parts = []
            then_env = self.assume(env, expr.test, True)
            if then_env is not None:
                parts.append(self.evaluate(expr.body, then_env))
            else_env = self.assume(env, expr.test, False)
            if else_env is not None:
                parts.append(self.evaluate(expr.orelse, else_env))
            return reduce(join, parts) if parts else Nullness.NON_NULL

        if isinstance(expr, ast.BoolOp):
            return self._evaluate_bool_op(expr, env)

        if (isinstance(expr, ast.Call) and isinstance(expr.func, ast.Name)
                and expr.func.id in NON_NULL_BUILTINS and expr.func.id not in env):
            return Nullness.NON_NULL

        return Nullness.UNKNOWN

    def _evaluate_bool_op(self, expr: ast.BoolOp, env: Env) -> Nullness:
        """
        `a or b` yields the first truthy operand, else the last one.
        `a and b` yields the first falsy operand, else the last one.
        """
        disjunction = isinstance(expr.op, ast.Or)
        parts = []
        state: Optional[Env] = env
        for value in expr.values[:-1]:
            if state is None:
                break
            # Value is returned when its truthiness ends the chain
            if self.assume(state, value, disjunction) is not None:
                if disjunction:
                    parts.append(Nullness.NON_NULL)
                else:
                    parts.append(self.evaluate(value, state))
            state = self.assume(state, value, not disjunction)
        if state is not None:
            parts.append(self.evaluate(expr.values[-1], state))
        return reduce(join, parts) if parts else Nullness.NON_NULL


def _mentions_none_type(node: ast.expr) -> bool:
    for child in ast.walk(node):
        if isinstance(child, ast.Name) and child.id == "NoneType":
            return True
        if isinstance(child, ast.Constant) and child.value is None:
            return True
    return False


def _irrefutable(pattern) -> bool:
    return isinstance(pattern, ast.MatchAs) and pattern.pattern is None


def default_oracle_factory(function_node: ast.AST, assumptions: Dict[str, Nullness]) -> NullnessOracle:
    return ContractDataflowOracle(function_node, assumptions)
