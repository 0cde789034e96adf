"""
Expression AST for component template expressions.

Template expressions appear in ``{{expr}}`` tokens and in the ``mbr-if``,
``mbr-class`` and ``mbr-style`` directives. The syntax is the JavaScript
expression subset that component authors actually write:

- Literals: ``10``, ``0.5``, ``'text'``, ``"text"``, ``true``, ``false``,
  ``null``, ``undefined``
- Field references: ``showTitle``, ``bg.value``, ``overlay.opacity``
- Member access: ``items[0]``, ``bg['type']``, ``title.length``
- Arithmetic: ``+ - * / %`` (``+`` concatenates strings)
- Comparison: ``== != === !== < > <= >=``
- Logic: ``&& || !``
- Conditional: ``bg.type == 'image' ? 'cover' : 'none'``
- Function calls: ``max(paddingTop, 2)``
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class BinaryOp(StrEnum):
    """Binary operators for expressions."""

    # Arithmetic
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    # Comparison
    EQ = "=="
    NE = "!="
    STRICT_EQ = "==="
    STRICT_NE = "!=="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    # Logical
    AND = "&&"
    OR = "||"


class UnaryOp(StrEnum):
    """Unary operators for expressions."""

    NEG = "-"
    POS = "+"
    NOT = "!"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A literal value: number, string, boolean or null."""

    value: int | float | str | bool | None = Field(description="The literal value")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if self.value is None:
            return "null"
        if isinstance(self.value, str):
            return repr(self.value)
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


class UndefinedLiteral(BaseModel):
    """The ``undefined`` keyword."""

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "undefined"


class FieldRef(BaseModel):
    """
    Reference to a parameter, possibly through nested objects.

    Examples:
        - FieldRef(path=["showTitle"]) → showTitle
        - FieldRef(path=["bg", "value"]) → bg.value
    """

    path: list[str] = Field(description="Field path segments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return ".".join(self.path)


class MemberExpr(BaseModel):
    """Member access on an arbitrary target: ``target[key]`` or ``(expr).key``."""

    target: Expr
    key: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.target}[{self.key}]"


class BinaryExpr(BaseModel):
    """Binary operation: left op right."""

    op: BinaryOp
    left: Expr
    right: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.left} {self.op.value} {self.right})"


class UnaryExpr(BaseModel):
    """Unary operation: op operand."""

    op: UnaryOp
    operand: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.op.value}{self.operand}"


class ConditionalExpr(BaseModel):
    """Ternary: test ? consequent : alternate."""

    test: Expr
    consequent: Expr
    alternate: Expr

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.test} ? {self.consequent} : {self.alternate})"


class FuncCall(BaseModel):
    """
    Function call: name(arg1, arg2, ...).

    Only a closed set of pure built-ins is callable: min, max, abs, round.
    """

    name: str = Field(description="Function name")
    args: list[Expr] = Field(default_factory=list, description="Arguments")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        args_str = ", ".join(str(a) for a in self.args)
        return f"{self.name}({args_str})"


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

Expr = (
    Literal
    | UndefinedLiteral
    | FieldRef
    | MemberExpr
    | BinaryExpr
    | UnaryExpr
    | ConditionalExpr
    | FuncCall
)

# Rebuild models for recursive forward references
MemberExpr.model_rebuild()
BinaryExpr.model_rebuild()
UnaryExpr.model_rebuild()
ConditionalExpr.model_rebuild()
FuncCall.model_rebuild()
