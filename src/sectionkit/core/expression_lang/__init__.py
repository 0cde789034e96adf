"""
Template expression language.

Tokenizer, parser and evaluator for the JavaScript expression subset used in
component templates. Replaces executing template text in a host interpreter:
expressions only ever see the parameter namespace they are given.

Usage:
    from sectionkit.core.expression_lang import evaluate_source

    evaluate_source("paddingTop + 'rem'", {"paddingTop": 6})
    # result == "6rem"
    evaluate_source("missing.value", {})
    # result is UNDEFINED
"""

from sectionkit.core.expression_lang.evaluator import (
    ExpressionEvalError,
    evaluate,
    evaluate_source,
    evaluate_truthy,
)
from sectionkit.core.expression_lang.parser import ExpressionParseError, parse_expr
from sectionkit.core.expression_lang.tokenizer import ExpressionTokenError

__all__ = [
    "ExpressionEvalError",
    "ExpressionParseError",
    "ExpressionTokenError",
    "evaluate",
    "evaluate_source",
    "evaluate_truthy",
    "parse_expr",
]
