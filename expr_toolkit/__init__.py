"""Top-level public API for the ``expr_toolkit`` package.

This module re-exports the host-facing surface so callers can import from a
single namespace, for example:

>>> from expr_toolkit import ExprTree, compose  # doctest: +SKIP

It exposes both the :class:`ExprTree` owner object and the lower-level,
node-based building blocks (parser, passes, layout) for integrations that
manage trees themselves.
"""

from .compose import compose, substitute, wrap_in_function
from .derivative import derivative
from .errors import (
    DivisionByZeroError,
    EmptyOperandError,
    EvaluationError,
    ExprError,
    ExpressionTooDeepError,
    IllegalCharacterError,
    InsufficientOperandsError,
    InvalidOperatorError,
    MalformedExpressionError,
    NonPositiveLogArgumentError,
    ParseError,
    UnboundVariableError,
    UnsupportedDerivativeError,
)
from .evaluator import evaluate, evaluate_array
from .ExprTree import ExprTree
from .layout import Layout, LayoutOptions, hit_test, layout_tree
from .nodes import (
    BinaryOp,
    Node,
    Number,
    UnaryFunction,
    Variable,
    clone,
    collect_variables,
    count_nodes,
    make_binary_op,
    make_number,
    make_unary_function,
    make_variable,
    release,
    structurally_equal,
    tree_depth,
)
from .parser import parse_postfix
from .serializer import to_infix, to_postfix
from .simplify import simplify
from .sympy_bridge import to_latex, to_sympy

__version__ = "0.1.0"
