"""Tests for the whitelisted ``where`` expression evaluator."""

from __future__ import annotations

from pathlib import Path

import pytest

from monotopo.core import Predicate, compile_predicate
from monotopo.exceptions import PredicateEvaluationError
from monotopo.workspace.models import Package


@pytest.fixture
def web() -> Package:
    return Package(
        name="@acme/web",
        version="2.3.0",
        path=Path("/repo/apps/web"),
        dependencies={"@acme/ui": "^1.0.0"},
        dev_dependencies={"jest": "29.0.0"},
        private=True,
    )


@pytest.fixture
def ui() -> Package:
    return Package(name="@acme/ui", version="1.0.0", path=Path("/repo/libs/ui"))


class TestPythonSyntax:
    """Expressions written with Python operators."""

    def test_equality(self, web: Package, ui: Package) -> None:
        pred = Predicate('name == "@acme/web"')
        assert pred(web) is True
        assert pred(ui) is False

    def test_boolean_attribute(self, web: Package, ui: Package) -> None:
        assert Predicate("private")(web) is True
        assert Predicate("not private")(ui) is True

    def test_dependency_membership(self, web: Package, ui: Package) -> None:
        pred = Predicate('"@acme/ui" in dependencies')
        assert pred(web) is True
        assert pred(ui) is False

    def test_dev_dependency_alias(self, web: Package) -> None:
        assert Predicate('"jest" in devDependencies')(web) is True
        assert Predicate('"jest" in dev_dependencies')(web) is True

    def test_not_in(self, ui: Package) -> None:
        assert Predicate('name not in ["@acme/web", "@acme/api"]')(ui) is True

    def test_string_methods(self, web: Package) -> None:
        assert Predicate('name.startswith("@acme/")')(web) is True
        assert Predicate('path.endswith("web")')(web) is True

    def test_combined(self, web: Package, ui: Package) -> None:
        pred = Predicate('name.startswith("@acme/") and (private or version == "1.0.0")')
        assert pred(web) is True
        assert pred(ui) is True

    def test_chained_comparison(self, ui: Package) -> None:
        assert Predicate('"0.9.0" < version <= "1.0.0"')(ui) is True

    def test_empty_dependencies_is_falsy(self, ui: Package) -> None:
        assert Predicate("dependencies")(ui) is False


class TestJavaScriptSyntax:
    """Expressions written for JavaScript-based tooling keep working."""

    def test_strict_equality(self, web: Package, ui: Package) -> None:
        pred = Predicate('name === "@acme/web"')
        assert pred(web) is True
        assert pred(ui) is False

    def test_strict_inequality(self, ui: Package) -> None:
        assert Predicate('name !== "@acme/web"')(ui) is True

    def test_logical_operators(self, web: Package, ui: Package) -> None:
        pred = Predicate('!private && version === "1.0.0" || name === "@acme/web"')
        assert pred(ui) is True
        assert pred(web) is True

    def test_literals(self, web: Package) -> None:
        assert Predicate("private === true")(web) is True
        assert Predicate("private === false")(web) is False

    def test_includes(self, web: Package) -> None:
        assert Predicate('dependencies.includes("@acme/ui")')(web) is True

    def test_operators_inside_strings_untouched(self) -> None:
        odd = Package(name="a&&b", version="1.0.0", path=Path("/repo/x"))
        assert Predicate('name == "a&&b"')(odd) is True

    def test_not_equal_kept(self, ui: Package) -> None:
        assert Predicate('name != "x"')(ui) is True


class TestRejectedExpressions:
    """Invalid or unsafe expressions fail before evaluation."""

    @pytest.mark.parametrize(
        "expression",
        [
            "__import__('os').system('true')",
            "open('/etc/passwd')",
            "name.upper() == 'X'",
            "name[0] == 'x'",
            "[n for n in dependencies]",
            "lambda: True",
            "name.__class__",
            "name + 'x'",
            "startswith('web')",
        ],
    )
    def test_disallowed_syntax(self, expression: str) -> None:
        with pytest.raises(PredicateEvaluationError) as excinfo:
            Predicate(expression)
        assert excinfo.value.expression == expression

    def test_unknown_attribute(self) -> None:
        with pytest.raises(PredicateEvaluationError, match="unknown attribute 'license'"):
            Predicate('license == "MIT"')

    def test_syntax_error(self) -> None:
        with pytest.raises(PredicateEvaluationError, match="syntax error"):
            Predicate('name == "x')

    def test_empty(self) -> None:
        with pytest.raises(PredicateEvaluationError, match="empty"):
            Predicate("   ")

    @pytest.mark.parametrize("depth", [1500, 5000])
    def test_deeply_nested_expression(self, depth: int) -> None:
        expression = "not " * depth + "private"
        with pytest.raises(PredicateEvaluationError) as excinfo:
            Predicate(expression)
        assert excinfo.value.expression == expression

    def test_type_error_during_evaluation(self, ui: Package) -> None:
        pred = Predicate("version < 3")
        with pytest.raises(PredicateEvaluationError, match="@acme/ui"):
            pred(ui)


class TestCompilePredicate:
    """Tests for ``compile_predicate``."""

    def test_callable_passthrough(self, ui: Package) -> None:
        def check(pkg: Package) -> bool:
            return pkg.version == "1.0.0"

        assert compile_predicate(check) is check

    def test_string_compiled(self, ui: Package) -> None:
        pred = compile_predicate('name == "@acme/ui"')
        assert isinstance(pred, Predicate)
        assert pred(ui) is True

    def test_evaluation_does_not_mutate(self, web: Package) -> None:
        before = web.to_dict()
        Predicate('"@acme/ui" in dependencies and private')(web)
        assert web.to_dict() == before
