# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : evaluator.py
#   file_relpath : src/htmlincluder/core/evaluator.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Capability-scoped evaluation of inline expressions.

An expression attribute (``rawJson`` by default) holds a single Python
expression. Two forms are accepted:

* a ``lambda`` taking one argument, invoked with the capability table::

      <!--#data rawJson="lambda p: p.site_name()" -->

* any other expression, evaluated with the capability table bound to the
  configured capability name (``plugins`` by default)::

      <!--#jsonInsert rawJson="plugins.latest_posts(3)" -->

Nothing else is in scope: no builtins, no module globals. Before evaluation
the expression is checked so that it only references the capability name,
lambda parameters and comprehension targets, and never touches attributes
starting with an underscore. If the result is awaitable it is awaited, and
``await`` may also be written inside the expression::

      <!--#data rawJson="(await plugins.fetch_user()).name" -->

This restricts the names an expression can see; it is not a security sandbox.
"""

from __future__ import annotations

import ast
import inspect
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

from htmlincluder.config.logging import get_logger
from htmlincluder.core.errors import EvaluationError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from htmlincluder.config.logging import IncluderLogger

logger: IncluderLogger = get_logger(__name__)

DEFAULT_CAPABILITY_NAME: Final[str] = "plugins"


class CapabilityTable(Mapping[str, Any]):
    """Read-only mapping of capability name to callable.

    Entries are reachable both by key (``table["fetch"]``) and by attribute
    (``table.fetch``), so expressions can be written either way.
    """

    __slots__ = ("_entries",)

    _entries: Mapping[str, Any]

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_entries", MappingProxyType(dict(entries or {})))

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._entries[name]
        except KeyError:
            raise AttributeError(f"no capability named '{name}'") from None

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("capability table is read-only")

    def __repr__(self) -> str:
        return f"CapabilityTable({sorted(self._entries)!r})"


class _NameCollector(ast.NodeVisitor):
    """Collect names bound inside the expression (lambda parameters, comprehension targets)."""

    def __init__(self) -> None:
        self.bound: set[str] = set()

    def visit_arguments(self, node: ast.arguments) -> None:
        for arg in [*node.posonlyargs, *node.args, *node.kwonlyargs]:
            self.bound.add(arg.arg)
        if node.vararg is not None:
            self.bound.add(node.vararg.arg)
        if node.kwarg is not None:
            self.bound.add(node.kwarg.arg)
        self.generic_visit(node)

    def visit_comprehension(self, node: ast.comprehension) -> None:
        for target in ast.walk(node.target):
            if isinstance(target, ast.Name):
                self.bound.add(target.id)
        self.generic_visit(node)


def check_expression(tree: ast.Expression, capability_name: str) -> str | None:
    """Return a reason the expression is rejected, or None if it may run."""
    collector = _NameCollector()
    collector.visit(tree)
    allowed: set[str] = {capability_name, *collector.bound}
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and node.id not in allowed:
            return f"name '{node.id}' is not available"
        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            return f"attribute '{node.attr}' is not accessible"
        if isinstance(node, ast.NamedExpr):
            return "assignment expressions are not allowed"
    return None


def _syntax_reason(exc: SyntaxError | ValueError) -> str:
    if isinstance(exc, SyntaxError):
        return f"syntax error: {exc.msg}"
    return f"invalid expression: {exc}"


class ExpressionEvaluator:
    """Evaluate inline expressions against a capability table.

    Args:
        capability_name: Name the capability table is bound to.
    """

    def __init__(self, capability_name: str = DEFAULT_CAPABILITY_NAME) -> None:
        self.capability_name: str = capability_name

    def compile(
        self,
        text: str,
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> tuple[ast.Expression, Any]:
        """Parse and check ``text``.

        Returns:
            tuple[ast.Expression, Any]: The parsed tree and its code object.

        Raises:
            EvaluationError: If the text does not parse or compile, or
                references anything outside the capability table.
        """
        try:
            tree: ast.Expression = ast.parse(text.strip(), mode="eval")
        except (SyntaxError, ValueError) as exc:
            raise EvaluationError(_syntax_reason(exc), path=path, span=span) from exc
        reason: str | None = check_expression(tree, self.capability_name)
        if reason is not None:
            raise EvaluationError(reason, path=path, span=span)
        try:
            code: Any = compile(
                tree, "<expression>", "eval", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT
            )
        except (SyntaxError, ValueError) as exc:
            raise EvaluationError(_syntax_reason(exc), path=path, span=span) from exc
        return tree, code

    async def evaluate(
        self,
        text: str,
        table: Mapping[str, Any],
        *,
        path: str | None = None,
        span: tuple[int, int] | None = None,
    ) -> Any:
        """Evaluate ``text`` and return its settled value.

        Args:
            text: The expression source.
            table: The capability table; the expression's only namespace.
            path: Host document, reported on failure.
            span: Offsets of the directive, reported on failure.

        Returns:
            Any: The settled result.

        Raises:
            EvaluationError: On parse, check, runtime or settlement failure.
        """
        capabilities: CapabilityTable = (
            table if isinstance(table, CapabilityTable) else CapabilityTable(table)
        )
        tree, code = self.compile(text, path=path, span=span)
        scope: dict[str, Any] = {"__builtins__": {}, self.capability_name: capabilities}
        try:
            value: Any = eval(code, scope)  # noqa: S307 - names are checked above
            if isinstance(tree.body, ast.Lambda):
                value = value(capabilities)
            while inspect.isawaitable(value):
                value = await value
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(
                f"{type(exc).__name__}: {exc}", path=path, span=span
            ) from exc
        logger.trace("Evaluated expression %r -> %r", text, value)
        return value
