"""Exception taxonomy for the expression engine.

Every failure raised by the engine derives from :class:`ExprError` and carries
a stable ``kind`` string so host applications can map errors to user-facing
messages without matching on class names.

Hierarchy
---------
- :class:`ExprError`
    - :class:`ParseError`
        - :class:`IllegalCharacterError`
        - :class:`InsufficientOperandsError`
        - :class:`MalformedExpressionError`
        - :class:`ExpressionTooDeepError`
    - :class:`EvaluationError`
        - :class:`UnboundVariableError`
        - :class:`DivisionByZeroError`
        - :class:`NonPositiveLogArgumentError`
    - :class:`UnsupportedDerivativeError`
    - :class:`InvalidOperatorError`
    - :class:`EmptyOperandError`
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ExprError",
    "ParseError",
    "IllegalCharacterError",
    "InsufficientOperandsError",
    "MalformedExpressionError",
    "ExpressionTooDeepError",
    "EvaluationError",
    "UnboundVariableError",
    "DivisionByZeroError",
    "NonPositiveLogArgumentError",
    "UnsupportedDerivativeError",
    "InvalidOperatorError",
    "EmptyOperandError",
]


class ExprError(Exception):
    """Base class for all expression-engine failures."""

    kind: str = "ExprError"


class ParseError(ExprError, ValueError):
    """Raised when a postfix token stream cannot be turned into a tree.

    Parameters
    ----------
    message : str
        Human-readable description.
    position : int, optional
        Zero-based index into the source text where parsing stopped.
    """

    kind = "ParseError"

    def __init__(self, message: str, *, position: Optional[int] = None) -> None:
        super().__init__(message)
        self.position = position


class IllegalCharacterError(ParseError):
    """Raised when the parser meets a character outside the token grammar."""

    kind = "IllegalCharacter"

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Illegal character {char!r} at position {position}.", position=position)
        self.char = char


class InsufficientOperandsError(ParseError):
    """Raised when an operator is read with fewer than two operands stacked."""

    kind = "InsufficientOperands"

    def __init__(self, operator: str, position: int, available: int) -> None:
        super().__init__(
            f"Operator {operator!r} at position {position} needs two operands, "
            f"found {available}.",
            position=position,
        )
        self.operator = operator
        self.available = available


class MalformedExpressionError(ParseError):
    """Raised when the operand stack does not end with exactly one tree."""

    kind = "MalformedExpression"

    def __init__(self, remaining: int) -> None:
        super().__init__(
            f"Malformed expression: expected exactly one result on the stack, found {remaining}."
        )
        self.remaining = remaining


class ExpressionTooDeepError(ParseError):
    """Raised when a parsed tree would exceed the configured depth limit."""

    kind = "ExpressionTooDeep"

    def __init__(self, depth: int, max_depth: int, position: int) -> None:
        super().__init__(
            f"Expression depth {depth} at position {position} exceeds the limit of {max_depth}.",
            position=position,
        )
        self.depth = depth
        self.max_depth = max_depth


class EvaluationError(ExprError, ArithmeticError):
    """Base class for failures while computing a numeric value."""

    kind = "EvaluationError"


class UnboundVariableError(EvaluationError):
    """Raised when evaluation meets a variable missing from the bindings."""

    kind = "UnboundVariable"

    def __init__(self, name: str) -> None:
        super().__init__(f"Variable {name!r} has no assigned value.")
        self.name = name


class DivisionByZeroError(EvaluationError, ZeroDivisionError):
    """Raised when a divisor's magnitude falls below the engine epsilon."""

    kind = "DivisionByZero"

    def __init__(self, divisor: float) -> None:
        super().__init__(f"Division by zero (divisor {divisor!r}).")
        self.divisor = divisor


class NonPositiveLogArgumentError(EvaluationError):
    """Raised when ``ln`` is applied to a value that is not strictly positive."""

    kind = "NonPositiveLogArgument"

    def __init__(self, argument: float) -> None:
        super().__init__(f"ln argument must be > 0, got {argument!r}.")
        self.argument = argument


class UnsupportedDerivativeError(ExprError):
    """Raised when differentiation meets a node shape it has no rule for."""

    kind = "UnsupportedDerivative"


class InvalidOperatorError(ExprError, ValueError):
    """Raised when composition is asked to use a non-binary operator."""

    kind = "InvalidOperator"

    def __init__(self, operator: str) -> None:
        super().__init__(f"{operator!r} is not a binary operator; use one of + - * / ^.")
        self.operator = operator


class EmptyOperandError(ExprError, ValueError):
    """Raised when an operation needs a populated tree but was given an empty one."""

    kind = "EmptyOperand"
