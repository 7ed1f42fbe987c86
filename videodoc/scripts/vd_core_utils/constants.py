"""
Symbolic timing constants.

Compositions usually declare their step lengths once and reuse them:

    const STEP = 90;
    <Sequence from={STEP * 2} durationInFrames={STEP}>

Only ALL_CAPS names are resolved (camelCase locals are ignored on purpose),
and only declarations with a bare integer literal seed the table. Expressions
are evaluated by a small arithmetic parser, never by eval().
"""

import re
from typing import Dict, List, Optional

CONSTANT_NAME = r'[A-Z][A-Z0-9_]*'

_DECLARATION_PATTERN = re.compile(
    r'\b(?:const|let|var)\s+(' + CONSTANT_NAME + r')\s*=\s*([^;,\n]+)'
)
_IDENTIFIER_PATTERN = re.compile(r'\b(' + CONSTANT_NAME + r')\b')
# ASCII digits only: '٣' is not a frame count
_INTEGER_PATTERN = re.compile(r'^\d+$', re.ASCII)
_ARITHMETIC_PATTERN = re.compile(r'^[\d\s+\-*/()]+$', re.ASCII)
_TOKEN_PATTERN = re.compile(r'\s*(?:(\d+)|(.))', re.ASCII)

# Deeper nesting (parentheses or unary signs) is unresolved
MAX_NESTING = 64
# Longer integer literals are unresolved (far beyond any frame count)
MAX_LITERAL_DIGITS = 15


def extract_constants(source: str) -> Dict[str, int]:
    """
    Collect `const|let|var NAME = <integer>` declarations.

    Later declarations of the same name win. Literals longer than
    MAX_LITERAL_DIGITS are left out.
    """
    constants: Dict[str, int] = {}
    for match in _DECLARATION_PATTERN.finditer(source):
        name = match.group(1)
        raw_value = match.group(2).strip()
        if _INTEGER_PATTERN.match(raw_value) and len(raw_value) <= MAX_LITERAL_DIGITS:
            constants[name] = int(raw_value)
    return constants


class ExpressionError(ValueError):
    """Arithmetic expression could not be evaluated."""


def _tokenize(expr: str) -> List[str]:
    tokens = []
    pos = 0
    expr = expr.rstrip()
    while pos < len(expr):
        match = _TOKEN_PATTERN.match(expr, pos)
        number, symbol = match.groups()
        tokens.append(number if number is not None else symbol)
        pos = match.end()
    return tokens


class _ArithmeticParser:
    """
    Recursive-descent evaluator for + - * / and parentheses.

        expr   := term (('+' | '-') term)*
        term   := factor (('*' | '/') factor)*
        factor := ('+' | '-') factor | NUMBER | '(' expr ')'
    """

    def __init__(self, tokens: List[str]):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ExpressionError("unexpected end of expression")
        self.pos += 1
        return token

    def parse(self) -> float:
        value = self._expr()
        if self._peek() is not None:
            raise ExpressionError(f"unexpected token {self._peek()!r}")
        return value

    def _expr(self) -> float:
        value = self._term()
        while self._peek() in ("+", "-"):
            if self._take() == "+":
                value += self._term()
            else:
                value -= self._term()
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in ("*", "/"):
            op = self._take()
            rhs = self._factor()
            if op == "*":
                value *= rhs
            elif rhs == 0:
                raise ExpressionError("division by zero")
            else:
                value /= rhs
        return value

    def _factor(self) -> float:
        token = self._take()
        if token in ("+", "-", "("):
            self.depth += 1
            if self.depth > MAX_NESTING:
                raise ExpressionError("expression nested too deeply")
            try:
                return self._nested(token)
            finally:
                self.depth -= 1
        if _INTEGER_PATTERN.match(token):
            if len(token) > MAX_LITERAL_DIGITS:
                raise ExpressionError(f"number too long: {len(token)} digits")
            return int(token)
        raise ExpressionError(f"unexpected token {token!r}")

    def _nested(self, token: str) -> float:
        if token == "+":
            return self._factor()
        if token == "-":
            return -self._factor()
        value = self._expr()
        if self._take() != ")":
            raise ExpressionError("missing ')'")
        return value


def evaluate_arithmetic(expr: str) -> float:
    """Evaluate an integer arithmetic expression. Raises ExpressionError."""
    return _ArithmeticParser(_tokenize(expr)).parse()


def substitute_constants(expr: str, constants: Dict[str, int]) -> str:
    """Replace known ALL_CAPS names with their values; unknown names stay."""
    return _IDENTIFIER_PATTERN.sub(
        lambda m: str(constants[m.group(1)]) if m.group(1) in constants else m.group(1),
        expr,
    )


def resolve_expression(expr: str, constants: Dict[str, int]) -> Optional[int]:
    """
    Resolve a timing expression to whole frames.

    Args:
        expr: Raw attribute value, e.g. "90", "STEP" or "STEP * 2 + INTRO"
        constants: Table from extract_constants()

    Returns:
        Integer frame value, or None when the expression is unresolved
        (unknown name, other syntax, division by zero, fractional result,
        over-long literal, nesting deeper than MAX_NESTING, overflow)
    """
    expr = expr.strip()
    resolved = substitute_constants(expr, constants)
    if not _ARITHMETIC_PATTERN.match(resolved):
        return None

    # ValueError covers ExpressionError and NaN; OverflowError covers infinity
    try:
        value = evaluate_arithmetic(resolved)
        if value != int(value):
            return None
        return int(value)
    except (ValueError, OverflowError):
        return None
