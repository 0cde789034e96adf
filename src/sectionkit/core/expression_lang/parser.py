"""
Recursive descent parser for template expressions.

Grammar (precedence low to high):
    expr        → conditional
    conditional → or_expr ("?" expr ":" expr)?
    or_expr     → and_expr ("||" and_expr)*
    and_expr    → equality ("&&" equality)*
    equality    → relational (("==" | "!=" | "===" | "!==") relational)*
    relational  → additive (("<" | ">" | "<=" | ">=") additive)*
    additive    → multiply (("+" | "-") multiply)*
    multiply    → unary (("*" | "/" | "%") unary)*
    unary       → ("!" | "-" | "+") unary | postfix
    postfix     → primary ("." name | "[" expr "]")*
    primary     → literal | func_call | IDENT | "(" expr ")"
    literal     → NUMBER | STRING | "true" | "false" | "null" | "undefined"
    func_call   → IDENT "(" (expr ("," expr)*)? ")"

A chain of plain ``.name`` accesses on an identifier parses to a single
:class:`FieldRef`; anything else (brackets, access on a parenthesised or
called value) becomes nested :class:`MemberExpr`.
"""

from __future__ import annotations

from collections.abc import Callable

from sectionkit.core.expression_lang.tokenizer import (
    ExpressionTokenError,
    Token,
    TokenKind,
    tokenize,
)
from sectionkit.core.ir.expressions import (
    BinaryExpr,
    BinaryOp,
    ConditionalExpr,
    Expr,
    FieldRef,
    FuncCall,
    Literal,
    MemberExpr,
    UnaryExpr,
    UnaryOp,
    UndefinedLiteral,
)


class ExpressionParseError(Exception):
    """Error during expression parsing."""

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.pos = pos


_EQUALITY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.EQ: BinaryOp.EQ,
    TokenKind.NE: BinaryOp.NE,
    TokenKind.STRICT_EQ: BinaryOp.STRICT_EQ,
    TokenKind.STRICT_NE: BinaryOp.STRICT_NE,
}

_RELATIONAL_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.LT: BinaryOp.LT,
    TokenKind.GT: BinaryOp.GT,
    TokenKind.LE: BinaryOp.LE,
    TokenKind.GE: BinaryOp.GE,
}

_ADDITIVE_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.PLUS: BinaryOp.ADD,
    TokenKind.MINUS: BinaryOp.SUB,
}

_MULTIPLY_OPS: dict[TokenKind, BinaryOp] = {
    TokenKind.STAR: BinaryOp.MUL,
    TokenKind.SLASH: BinaryOp.DIV,
    TokenKind.PERCENT: BinaryOp.MOD,
}

_UNARY_OPS: dict[TokenKind, UnaryOp] = {
    TokenKind.NOT: UnaryOp.NOT,
    TokenKind.MINUS: UnaryOp.NEG,
    TokenKind.PLUS: UnaryOp.POS,
}

# Tokens usable as a property name after "."
_NAME_KINDS = (
    TokenKind.IDENT,
    TokenKind.TRUE,
    TokenKind.FALSE,
    TokenKind.NULL,
    TokenKind.UNDEFINED,
)


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionParseError(
                f"Expected {kind}, got {tok.kind} ({tok.value!r})",
                tok.pos,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_expr(self) -> Expr:
        """Top-level: conditional."""
        return self.parse_conditional()

    def parse_conditional(self) -> Expr:
        """or_expr ('?' expr ':' expr)?"""
        test = self.parse_or_expr()
        if not self.match(TokenKind.QUESTION):
            return test
        consequent = self.parse_expr()
        self.expect(TokenKind.COLON)
        alternate = self.parse_expr()
        return ConditionalExpr(test=test, consequent=consequent, alternate=alternate)

    def parse_or_expr(self) -> Expr:
        """and_expr ('||' and_expr)*"""
        left = self.parse_and_expr()
        while self.match(TokenKind.OR):
            right = self.parse_and_expr()
            left = BinaryExpr(op=BinaryOp.OR, left=left, right=right)
        return left

    def parse_and_expr(self) -> Expr:
        """equality ('&&' equality)*"""
        left = self.parse_binary(_EQUALITY_OPS, self.parse_relational)
        while self.match(TokenKind.AND):
            right = self.parse_binary(_EQUALITY_OPS, self.parse_relational)
            left = BinaryExpr(op=BinaryOp.AND, left=left, right=right)
        return left

    def parse_relational(self) -> Expr:
        return self.parse_binary(_RELATIONAL_OPS, self.parse_additive)

    def parse_additive(self) -> Expr:
        return self.parse_binary(_ADDITIVE_OPS, self.parse_multiply)

    def parse_multiply(self) -> Expr:
        return self.parse_binary(_MULTIPLY_OPS, self.parse_unary)

    def parse_binary(self, ops: dict[TokenKind, BinaryOp], operand: Callable[[], Expr]) -> Expr:
        """Left-associative chain of one precedence level."""
        left = operand()
        while self.current.kind in ops:
            op = ops[self.advance().kind]
            right = operand()
            left = BinaryExpr(op=op, left=left, right=right)
        return left

    def parse_unary(self) -> Expr:
        """('!' | '-' | '+') unary | postfix"""
        if self.current.kind in _UNARY_OPS:
            op = _UNARY_OPS[self.advance().kind]
            operand = self.parse_unary()
            return UnaryExpr(op=op, operand=operand)
        return self.parse_postfix()

    def parse_postfix(self) -> Expr:
        """primary ('.' name | '[' expr ']')*"""
        expr = self.parse_primary()
        while True:
            if self.match(TokenKind.DOT):
                name_tok = self.current
                if name_tok.kind not in _NAME_KINDS:
                    raise ExpressionParseError(
                        f"Expected property name, got {name_tok.kind} ({name_tok.value!r})",
                        name_tok.pos,
                    )
                self.advance()
                if isinstance(expr, FieldRef):
                    expr = FieldRef(path=[*expr.path, name_tok.value])
                else:
                    expr = MemberExpr(target=expr, key=Literal(value=name_tok.value))
            elif self.match(TokenKind.LBRACKET):
                key = self.parse_expr()
                self.expect(TokenKind.RBRACKET)
                expr = MemberExpr(target=expr, key=key)
            else:
                return expr

    def parse_primary(self) -> Expr:
        """literal | func_call | IDENT | '(' expr ')'"""
        tok = self.current

        # Parenthesized expression
        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return expr

        # Literals
        if tok.kind == TokenKind.NUMBER:
            self.advance()
            if "." in tok.value:
                return Literal(value=float(tok.value))
            return Literal(value=int(tok.value))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(value=tok.value)
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(value=True)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(value=False)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(value=None)
        if tok.kind == TokenKind.UNDEFINED:
            self.advance()
            return UndefinedLiteral()

        # Identifier: could be function call or field reference
        if tok.kind == TokenKind.IDENT:
            if self.peek(1).kind == TokenKind.LPAREN:
                return self._parse_func_call()
            self.advance()
            return FieldRef(path=[tok.value])

        raise ExpressionParseError(
            f"Unexpected token: {tok.kind} ({tok.value!r})",
            tok.pos,
        )

    def _parse_func_call(self) -> FuncCall:
        """IDENT '(' (expr (',' expr)*)? ')'"""
        name_tok = self.expect(TokenKind.IDENT)
        self.expect(TokenKind.LPAREN)

        args: list[Expr] = []
        if self.current.kind != TokenKind.RPAREN:
            args.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expr())

        self.expect(TokenKind.RPAREN)
        return FuncCall(name=name_tok.value, args=args)


def parse_expr(source: str) -> Expr:
    """Parse an expression string into an AST.

    Args:
        source: Expression string (e.g., "bg.type == 'image' && bg.parallax")

    Returns:
        Parsed expression AST.

    Raises:
        ExpressionParseError: If the expression is invalid.
    """
    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(str(e), e.pos) from e

    parser = _Parser(tokens)
    expr = parser.parse_expr()

    # Ensure all tokens consumed
    if parser.current.kind != TokenKind.EOF:
        raise ExpressionParseError(
            f"Unexpected token after expression: {parser.current.value!r}",
            parser.current.pos,
        )

    return expr
