"""
Restricted arithmetic expressions for calculation questions.

Formulas are parsed into a small tagged AST and evaluated against the
drawn variable values only. Nothing is executed: the grammar covers
numbers, variables (bare ``dist`` or braced ``{dist}``), ``+ - * /``,
``^``/``**`` for powers, unary signs, parentheses and an allow-list of
math functions and constants.

    expr   := term (("+" | "-") term)*
    term   := unary (("*" | "/") unary)*
    unary  := ("+" | "-") unary | power
    power  := atom (("^" | "**") unary)?
    atom   := NUMBER | NAME | "{" NAME "}" | NAME "(" args ")" | "(" expr ")"
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Callable, Mapping

from resident.core.errors import FormulaError

FUNCTIONS: dict[str, Callable[..., float]] = {
    "abs": abs,
    "sqrt": math.sqrt,
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "pow": math.pow,
    "min": min,
    "max": max,
    "round": round,
    "floor": math.floor,
    "ceil": math.ceil,
}

CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

# Formula size limits; both keep recursion below the interpreter limit
MAX_TOKENS = 500
MAX_DEPTH = 100

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<var>\{\s*[A-Za-z_]\w*\s*\})
  | (?P<name>[A-Za-z_]\w*)
  | (?P<op>\*\*|[-+*/^(),])
    """,
    re.VERBOSE,
)


# ========================================
# AST
# ========================================


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class UnaryOp:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    name: str
    args: tuple["Node", ...]


Node = Number | Variable | UnaryOp | BinaryOp | Call


# ========================================
# Parsing
# ========================================


def tokenize(source: str) -> list[tuple[str, str]]:
    """Split a formula into (kind, text) tokens."""
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if not match:
            raise FormulaError(f"Unexpected character {source[pos]!r} at position {pos} in {source!r}")
        kind = match.lastgroup
        text = match.group()
        pos = match.end()
        if kind == "ws":
            continue
        if kind == "var":
            kind, text = "name", text.strip("{} \t")
        elif kind == "op" and text == "**":
            text = "^"
        tokens.append((kind, text))
    return tokens


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0
        self.depth = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise FormulaError("Empty formula")
        if len(self.tokens) > MAX_TOKENS:
            raise FormulaError(f"Formula has more than {MAX_TOKENS} tokens")
        node = self._expr()
        if self.pos != len(self.tokens):
            raise FormulaError(f"Unexpected token {self._peek()[1]!r} in {self.source!r}")
        return node

    def _peek(self) -> tuple[str, str]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return ("end", "")

    def _take(self) -> tuple[str, str]:
        token = self._peek()
        self.pos += 1
        return token

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_DEPTH:
            raise FormulaError(f"Formula nests deeper than {MAX_DEPTH} levels")

    def _expect(self, text: str) -> None:
        kind, value = self._take()
        if value != text:
            raise FormulaError(f"Expected {text!r} but found {value or 'end of formula'!r} in {self.source!r}")

    def _expr(self) -> Node:
        node = self._term()
        while self._peek() in (("op", "+"), ("op", "-")):
            op = self._take()[1]
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Node:
        node = self._unary()
        while self._peek() in (("op", "*"), ("op", "/")):
            op = self._take()[1]
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Node:
        if self._peek() in (("op", "+"), ("op", "-")):
            op = self._take()[1]
            self._enter()
            node = UnaryOp(op, self._unary())
            self.depth -= 1
            return node
        return self._power()

    def _power(self) -> Node:
        base = self._atom()
        if self._peek() == ("op", "^"):
            self._take()
            self._enter()
            node = BinaryOp("^", base, self._unary())
            self.depth -= 1
            return node
        return base

    def _atom(self) -> Node:
        kind, text = self._take()
        if kind == "number":
            return Number(float(text))
        if kind == "name":
            if self._peek() == ("op", "("):
                return self._call(text)
            return Variable(text)
        if (kind, text) == ("op", "("):
            self._enter()
            node = self._expr()
            self._expect(")")
            self.depth -= 1
            return node
        raise FormulaError(f"Unexpected {text or 'end of formula'!r} in {self.source!r}")

    def _call(self, name: str) -> Node:
        if name not in FUNCTIONS:
            raise FormulaError(f"Function {name!r} is not allowed")
        self._expect("(")
        self._enter()
        args: list[Node] = []
        if self._peek() != ("op", ")"):
            args.append(self._expr())
            while self._peek() == ("op", ","):
                self._take()
                args.append(self._expr())
        self._expect(")")
        self.depth -= 1
        return Call(name, tuple(args))


def parse_formula(source: str) -> Node:
    """Parse a formula string into an AST."""
    return _Parser(source).parse()


# ========================================
# Evaluation
# ========================================


def evaluate(node: Node, variables: Mapping[str, float]) -> float:
    """Evaluate an AST using only the given variables and the allow-listed names."""
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        if node.name in variables:
            return float(variables[node.name])
        if node.name in CONSTANTS:
            return CONSTANTS[node.name]
        raise FormulaError(f"Unknown variable {node.name!r}")
    if isinstance(node, UnaryOp):
        value = evaluate(node.operand, variables)
        return -value if node.op == "-" else value
    if isinstance(node, BinaryOp):
        left = evaluate(node.left, variables)
        right = evaluate(node.right, variables)
        try:
            if node.op == "+":
                return left + right
            if node.op == "-":
                return left - right
            if node.op == "*":
                return left * right
            if node.op == "/":
                return left / right
            return math.pow(left, right)
        except ZeroDivisionError as e:
            raise FormulaError("Division by zero") from e
        except (ValueError, OverflowError) as e:
            raise FormulaError(f"Invalid power {left}^{right}: {e}") from e
    if isinstance(node, Call):
        args = [evaluate(arg, variables) for arg in node.args]
        try:
            return float(FUNCTIONS[node.name](*args))
        except (TypeError, ValueError, OverflowError) as e:
            raise FormulaError(f"{node.name}() failed: {e}") from e
    raise FormulaError(f"Unsupported node {node!r}")


def referenced_names(node: Node) -> set[str]:
    """Collect variable names used by a formula (constants excluded)."""
    if isinstance(node, Variable):
        return set() if node.name in CONSTANTS else {node.name}
    if isinstance(node, UnaryOp):
        return referenced_names(node.operand)
    if isinstance(node, BinaryOp):
        return referenced_names(node.left) | referenced_names(node.right)
    if isinstance(node, Call):
        names: set[str] = set()
        for arg in node.args:
            names |= referenced_names(arg)
        return names
    return set()


class Formula:
    """A parsed formula that can be evaluated many times."""

    def __init__(self, source: str):
        self.source = source
        self.tree = parse_formula(source)
        self.names = referenced_names(self.tree)

    def evaluate(self, variables: Mapping[str, float]) -> float:
        missing = self.names - set(variables)
        if missing:
            raise FormulaError(f"Missing values for {sorted(missing)} in {self.source!r}")
        result = evaluate(self.tree, variables)
        if not math.isfinite(result):
            raise FormulaError(f"Formula {self.source!r} produced a non-finite result")
        return result

    def __repr__(self) -> str:
        return f"Formula({self.source!r})"
