"""Jerboa interpreter — public API."""

from __future__ import annotations

from typing import TextIO

from .ast import Program
from .emit import to_source as to_source
from .evaluator import EvalError as EvalError, Evaluator as Evaluator
from .parse import ParserError as ParserError, parse as parse
from .tokens import Lexer as Lexer, tokenize as tokenize
from .values import Value


def evaluate(source: str, *, stdout: TextIO | None = None) -> list[Value]:
    """Parse and evaluate Jerboa source. Returns one value per top-level statement."""
    return Evaluator(source, stdout=stdout).eval_program()


def render(source: str) -> str:
    """Parse Jerboa source and render it back in canonical, parenthesized form."""
    program: Program = parse(source)
    return to_source(program)
