"""Numeric evaluation of expression trees.

Two entry points share the same operator semantics:

- :func:`evaluate` computes one float and raises on domain errors
  (division by ~0, ``ln`` of a non-positive value, unbound variables).
- :func:`evaluate_array` evaluates over NumPy arrays with broadcasting and
  marks out-of-domain points with NaN instead of raising, which is what a host
  sampling an expression on a grid needs.

``^`` follows C ``pow``: an undefined real power yields NaN and a pole or an
overflow yields infinity, so the power operator never raises.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional

import numpy as np

from .errors import (
    DivisionByZeroError,
    MalformedExpressionError,
    NonPositiveLogArgumentError,
    UnboundVariableError,
)
from .nodes import EPSILON, BinaryOp, Node, Number, UnaryFunction, Variable, fold_tree

__all__ = ["apply_unary", "apply_binary", "real_power", "evaluate", "evaluate_array"]


def real_power(base: float, exponent: float) -> float:
    """Return ``base ** exponent`` over the reals with C ``pow`` semantics."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and exponent.is_integer() and exponent % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # 0 ** negative is a pole; negative ** fractional has no real value.
        return math.inf if base == 0 else math.nan


def _trig(fn: Any, x: float) -> float:
    try:
        return fn(x)
    except ValueError:
        return math.nan


def apply_unary(code: str, x: float) -> float:
    """Apply the function with one-letter ``code`` to ``x``.

    Raises
    ------
    NonPositiveLogArgumentError
        If ``code`` is ``"l"`` (ln) and ``x <= 0``.
    """
    if code == "s":
        return _trig(math.sin, x)
    if code == "c":
        return _trig(math.cos, x)
    if code == "t":
        return _trig(math.tan, x)
    if code == "l":
        if x <= 0:
            raise NonPositiveLogArgumentError(x)
        return math.log(x)
    raise ValueError(f"Unknown function code {code!r}.")


def apply_binary(op: str, x: float, y: float) -> float:
    """Apply binary operator ``op`` to ``x`` and ``y``.

    Raises
    ------
    DivisionByZeroError
        If ``op`` is ``"/"`` and ``|y| < EPSILON``.
    """
    if op == "+":
        return x + y
    if op == "-":
        return x - y
    if op == "*":
        return x * y
    if op == "/":
        if abs(y) < EPSILON:
            raise DivisionByZeroError(y)
        return x / y
    if op == "^":
        return real_power(x, y)
    raise ValueError(f"Unknown binary operator {op!r}.")


def evaluate(node: Optional[Node], bindings: Optional[Mapping[str, float]] = None) -> float:
    """Compute the value of ``node`` under ``bindings``.

    Parameters
    ----------
    node : Node
        Root of the tree to evaluate.
    bindings : Mapping[str, float], optional
        Variable values keyed by their one-letter names.

    Returns
    -------
    float

    Raises
    ------
    UnboundVariableError
        If a variable in the tree is missing from ``bindings``.
    DivisionByZeroError
        If a divisor's magnitude is below ``EPSILON``.
    NonPositiveLogArgumentError
        If ``ln`` receives a value ``<= 0``.
    MalformedExpressionError
        If ``node`` is ``None``.

    Examples
    --------
    >>> from expr_toolkit.parser import parse_postfix
    >>> evaluate(parse_postfix("23+5*"))
    25.0
    >>> evaluate(parse_postfix("ab/"), {"a": 1.0, "b": 4.0})
    0.25
    """
    if node is None:
        raise MalformedExpressionError(0)
    values = {} if bindings is None else bindings

    def visit(current: Node, args: tuple[float, ...]) -> float:
        if isinstance(current, Number):
            return current.value
        if isinstance(current, Variable):
            if current.name not in values:
                raise UnboundVariableError(current.name)
            return float(values[current.name])
        if isinstance(current, UnaryFunction):
            return apply_unary(current.code, args[0])
        assert isinstance(current, BinaryOp)
        return apply_binary(current.op, *args)

    return fold_tree(node, visit)


def evaluate_array(node: Optional[Node], bindings: Mapping[str, Any]) -> np.ndarray:
    """Evaluate ``node`` element-wise over array-valued ``bindings``.

    Values are broadcast together with NumPy rules. Points where the scalar
    evaluator would raise a domain error come out as NaN.

    Raises
    ------
    UnboundVariableError
        If a variable in the tree is missing from ``bindings``.
    MalformedExpressionError
        If ``node`` is ``None``.

    Examples
    --------
    >>> import numpy as np
    >>> from expr_toolkit.parser import parse_postfix
    >>> evaluate_array(parse_postfix("a1/"), {"a": np.array([1.0, 2.0])})
    array([1., 2.])
    """
    if node is None:
        raise MalformedExpressionError(0)
    arrays = {name: np.asarray(value, dtype=float) for name, value in bindings.items()}

    def visit(current: Node, args: tuple[np.ndarray, ...]) -> np.ndarray:
        if isinstance(current, Number):
            return np.float64(current.value)
        if isinstance(current, Variable):
            if current.name not in arrays:
                raise UnboundVariableError(current.name)
            return arrays[current.name]
        if isinstance(current, UnaryFunction):
            return _unary_array(current.code, args[0])
        assert isinstance(current, BinaryOp)
        return _binary_array(current.op, *args)

    with np.errstate(all="ignore"):
        return np.asarray(fold_tree(node, visit), dtype=float)


def _unary_array(code: str, x: np.ndarray) -> np.ndarray:
    if code == "s":
        return np.sin(x)
    if code == "c":
        return np.cos(x)
    if code == "t":
        return np.tan(x)
    positive = x > 0
    return np.where(positive, np.log(np.where(positive, x, 1.0)), np.nan)


def _binary_array(op: str, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    if op == "+":
        return x + y
    if op == "-":
        return x - y
    if op == "*":
        return x * y
    if op == "/":
        safe = np.abs(y) >= EPSILON
        return np.where(safe, x / np.where(safe, y, 1.0), np.nan)
    return np.power(x, y)
