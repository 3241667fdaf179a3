"""Whitelisted ``where`` expression evaluator.

Expressions are parsed with :mod:`ast` and walked by a small interpreter;
nothing is passed to ``eval``. Only a fixed attribute schema is visible:

==================  =============================================
``name``            package name (str)
``version``         version string (str)
``private``         private flag (bool)
``dependencies``    workspace dependency names (list of str)
``devDependencies`` dev dependency names (list of str); alias ``dev_dependencies``
``path``            absolute package directory (str)
==================  =============================================

Supported syntax: literals (str, int, float, bool, None, lists/tuples of
literals), comparisons (``== != < <= > >= in not in``), ``and``/``or``/
``not``, and the ``startswith``/``endswith``/``includes`` methods called on
an attribute. JavaScript spellings (``===``, ``!==``, ``&&``, ``||``, ``!``,
``true``, ``false``, ``null``) are accepted as well.

Example::

    pred = Predicate('name === "pkg1" || "pkg3" in dependencies')
    pred(package)  # -> bool
"""

from __future__ import annotations

import ast
import operator
import re
from typing import Any, Callable

from monotopo.exceptions import PredicateEvaluationError
from monotopo.workspace.models import Package

ATTRIBUTES: frozenset[str] = frozenset({
    "name",
    "version",
    "private",
    "dependencies",
    "devDependencies",
    "dev_dependencies",
    "path",
})

_JS_CONSTANTS: dict[str, Any] = {"true": True, "false": False, "null": None}

# A string literal (kept verbatim) or a JavaScript operator to translate.
_JS_TOKEN_RE = re.compile(
    r"""(?P<string>"(?:\\.|[^"\\])*"|'(?:\\.|[^'\\])*')"""
    r"""|(?P<op>===|!==|&&|\|\||!(?!=))"""
)
_JS_OPERATORS = {"===": "==", "!==": "!=", "&&": " and ", "||": " or ", "!": " not "}

_COMPARATORS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda left, right: left in right,
    ast.NotIn: lambda left, right: left not in right,
}

_METHODS = frozenset({"startswith", "endswith", "includes"})


def _translate_js(expression: str) -> str:
    """Rewrite JavaScript operators outside string literals."""

    def _replace(match: re.Match[str]) -> str:
        if match.group("string") is not None:
            return match.group("string")
        return _JS_OPERATORS[match.group("op")]

    return _JS_TOKEN_RE.sub(_replace, expression)


def package_attributes(package: Package) -> dict[str, Any]:
    """Build the attribute namespace a ``where`` expression sees."""
    dev = sorted(package.dev_dependencies)
    return {
        "name": package.name,
        "version": package.version,
        "private": package.private,
        "dependencies": sorted(package.dependencies),
        "devDependencies": dev,
        "dev_dependencies": dev,
        "path": str(package.path),
    }


class Predicate:
    """A compiled ``where`` expression.

    Parsing and validation happen in the constructor, so syntax errors and
    disallowed constructs are reported before any package is evaluated.
    Unknown attribute names are reported on construction as well.

    Raises:
        PredicateEvaluationError: On invalid expressions, and from
            ``__call__`` on type errors during evaluation.
    """

    def __init__(self, expression: str) -> None:
        self.expression = expression
        source = _translate_js(expression).strip()
        if not source:
            raise PredicateEvaluationError(expression, "empty expression")
        try:
            self._tree = ast.parse(source, mode="eval")
            self._validate(self._tree.body)
        except SyntaxError as exc:
            raise PredicateEvaluationError(expression, f"syntax error ({exc.msg})") from exc
        except (RecursionError, MemoryError) as exc:
            # The parser reports runaway nesting as either error depending on version.
            raise PredicateEvaluationError(expression, "expression is nested too deeply") from exc

    def __repr__(self) -> str:
        return f"Predicate({self.expression!r})"

    def __call__(self, package: Package) -> bool:
        namespace = package_attributes(package)
        try:
            return bool(self._eval(self._tree.body, namespace))
        except TypeError as exc:
            raise PredicateEvaluationError(
                self.expression, f"{exc} (package {package.name!r})"
            ) from exc
        except RecursionError as exc:
            raise self._fail("expression is nested too deeply") from exc

    # -- validation ---------------------------------------------------------

    def _fail(self, reason: str) -> PredicateEvaluationError:
        return PredicateEvaluationError(self.expression, reason)

    def _validate(self, node: ast.AST) -> None:
        if isinstance(node, ast.BoolOp):
            for value in node.values:
                self._validate(value)
        elif isinstance(node, ast.UnaryOp):
            if not isinstance(node.op, (ast.Not, ast.USub)):
                raise self._fail(f"unsupported operator {type(node.op).__name__}")
            self._validate(node.operand)
        elif isinstance(node, ast.Compare):
            for op in node.ops:
                if type(op) not in _COMPARATORS:
                    raise self._fail(f"unsupported comparison {type(op).__name__}")
            self._validate(node.left)
            for comparator in node.comparators:
                self._validate(comparator)
        elif isinstance(node, ast.Name):
            if node.id not in ATTRIBUTES and node.id not in _JS_CONSTANTS:
                raise self._fail(
                    f"unknown attribute {node.id!r}"
                    f" (expected one of: {', '.join(sorted(ATTRIBUTES))})"
                )
        elif isinstance(node, ast.Constant):
            if not isinstance(node.value, (str, int, float, bool, type(None))):
                raise self._fail(f"unsupported literal {node.value!r}")
        elif isinstance(node, (ast.List, ast.Tuple)):
            for element in node.elts:
                self._validate(element)
        elif isinstance(node, ast.Call):
            self._validate_call(node)
        else:
            raise self._fail(f"unsupported syntax {type(node).__name__}")

    def _validate_call(self, node: ast.Call) -> None:
        func = node.func
        if not (isinstance(func, ast.Attribute) and func.attr in _METHODS):
            raise self._fail("only startswith/endswith/includes calls are allowed")
        if node.keywords or len(node.args) != 1:
            raise self._fail(f"{func.attr}() takes exactly one positional argument")
        self._validate(func.value)
        self._validate(node.args[0])

    # -- evaluation ---------------------------------------------------------

    def _eval(self, node: ast.AST, namespace: dict[str, Any]) -> Any:
        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self._eval(value, namespace)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self._eval(value, namespace)
                if result:
                    return result
            return result
        if isinstance(node, ast.UnaryOp):
            operand = self._eval(node.operand, namespace)
            return not operand if isinstance(node.op, ast.Not) else -operand
        if isinstance(node, ast.Compare):
            left = self._eval(node.left, namespace)
            for op, comparator in zip(node.ops, node.comparators):
                right = self._eval(comparator, namespace)
                if not _COMPARATORS[type(op)](left, right):
                    return False
                left = right
            return True
        if isinstance(node, ast.Name):
            if node.id in namespace:
                return namespace[node.id]
            return _JS_CONSTANTS[node.id]
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, (ast.List, ast.Tuple)):
            return [self._eval(element, namespace) for element in node.elts]
        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Attribute):
                raise self._fail("only method calls on attributes are allowed")
            target = self._eval(node.func.value, namespace)
            argument = self._eval(node.args[0], namespace)
            if node.func.attr == "includes":
                return argument in target
            if not isinstance(target, str):
                raise TypeError(f"{node.func.attr}() requires a string attribute")
            return getattr(target, node.func.attr)(argument)
        raise self._fail(f"unsupported syntax {type(node).__name__}")


PackagePredicate = Callable[[Package], bool]


def compile_predicate(where: str | PackagePredicate) -> PackagePredicate:
    """Return a callable predicate for *where*.

    Strings are compiled into a ``Predicate``; callables are returned
    unchanged so callers can supply a typed predicate function directly.
    """
    if callable(where):
        return where
    return Predicate(where)
