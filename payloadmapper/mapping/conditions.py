"""
Guard condition evaluation for 'if(...)' clauses.

Guards are small boolean expressions over references and literals:

    &.isActive == true
    ^.form.count > 0 && @user.name != 'guest'

The expression is split on whitespace, references are replaced by the values they
point to and the token stream is evaluated by a restricted evaluator. Nothing in
a guard is ever executed as code.
"""
import operator
import re
from typing import Any, Callable, ClassVar, Dict, List, Pattern

from payloadmapper.mapping.exceptions import SpecParseError
from payloadmapper.mapping.field_spec import FieldReference
from payloadmapper.mapping.paths import UNDEFINED


def _loose_equals(left: Any, right: Any) -> bool:
    # undefined and null compare equal to each other, as in the guard language
    if left is UNDEFINED or right is UNDEFINED:
        return left in (UNDEFINED, None) and right in (UNDEFINED, None)
    return left == right


class _Operand:
    """Wraps a resolved value so it is never mistaken for an operator token."""
    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value


class ConditionEvaluator:
    """
    Evaluates guard expressions.

    Args:
        resolve: Callable turning a FieldReference (^, & or @name) into its value.
            Errors it raises (e.g. FieldReferenceError) propagate to the caller.
    """

    token_pattern: ClassVar[Pattern] = re.compile(r"'[^']*'|\"[^\"]*\"|\S+")
    number_pattern: ClassVar[Pattern] = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

    comparison_operators: ClassVar[Dict[str, Callable[[Any, Any], bool]]] = {
        "==": _loose_equals,
        "===": _loose_equals,
        "!=": lambda left, right: not _loose_equals(left, right),
        "!==": lambda left, right: not _loose_equals(left, right),
        "<": operator.lt,
        "<=": operator.le,
        ">": operator.gt,
        ">=": operator.ge,
    }
    and_tokens: ClassVar[tuple] = ("&&", "and")
    or_tokens: ClassVar[tuple] = ("||", "or")
    literals: ClassVar[Dict[str, Any]] = {
        "true": True,
        "false": False,
        "null": None,
        "undefined": UNDEFINED,
    }

    def __init__(self, resolve: Callable[[FieldReference], Any]):
        self.resolve = resolve

    def evaluate(self, expression: str) -> bool:
        """
        Evaluate a guard expression.

        Returns:
            True when the expression holds. An empty or None expression is True.

        Raises:
            SpecParseError: If the expression does not follow the guard grammar or
                compares values that cannot be ordered
        """
        if expression is None or not expression.strip():
            return True
        tokens = self.substitute(self.tokenize(expression), expression)
        return self._evaluate_or(tokens, expression)

    def tokenize(self, expression: str) -> List[str]:
        return self.token_pattern.findall(expression)

    def substitute(self, tokens: List[str], expression: str) -> list:
        """Replace reference tokens and literals by operands; leave operators as strings."""
        result = []
        for token in tokens:
            if self._is_operator(token):
                result.append(token)
                continue
            reference = FieldReference.parse(token)
            if reference.is_external:
                result.append(_Operand(self.resolve(reference)))
            else:
                result.append(_Operand(self.parse_literal(token, expression)))
        return result

    def parse_literal(self, token: str, expression: str) -> Any:
        if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
            return token[1:-1]
        if token in self.literals:
            return self.literals[token]
        if self.number_pattern.match(token):
            try:
                return int(token)
            except ValueError:
                return float(token)
        raise SpecParseError(f"Unexpected token '{token}' in guard", source=expression)

    def _is_operator(self, token: str) -> bool:
        return token in self.comparison_operators or token in self.and_tokens or token in self.or_tokens

    def _split(self, tokens: list, separators: tuple) -> List[list]:
        groups, current = [], []
        for token in tokens:
            if isinstance(token, str) and token in separators:
                groups.append(current)
                current = []
            else:
                current.append(token)
        groups.append(current)
        return groups

    def _evaluate_or(self, tokens: list, expression: str) -> bool:
        return any(self._evaluate_and(group, expression) for group in self._split(tokens, self.or_tokens))

    def _evaluate_and(self, tokens: list, expression: str) -> bool:
        return all(self._evaluate_comparison(group, expression) for group in self._split(tokens, self.and_tokens))

    def _evaluate_comparison(self, tokens: list, expression: str) -> bool:
        if len(tokens) == 1 and isinstance(tokens[0], _Operand):
            return bool(tokens[0].value)

        if (
            len(tokens) != 3
            or not isinstance(tokens[0], _Operand)
            or not isinstance(tokens[1], str)
            or not isinstance(tokens[2], _Operand)
        ):
            raise SpecParseError("Expected '<operand> <operator> <operand>'", source=expression)

        left, op, right = tokens[0].value, tokens[1], tokens[2].value
        try:
            return bool(self.comparison_operators[op](left, right))
        except TypeError as e:
            raise SpecParseError(f"Cannot compare {left!r} {op} {right!r}: {e}", source=expression) from e
