"""
Typed models shared across sectionkit.
"""

from .controls import Control, ControlAttrs, ParameterSchema, SelectOption
from .expressions import (
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
from .render import (
    PATH_PLACEHOLDER,
    ComponentSource,
    RenderedOutput,
    RenderOptions,
    StyleSpec,
)

__all__ = [
    # Controls
    "Control",
    "ControlAttrs",
    "ParameterSchema",
    "SelectOption",
    # Expressions
    "BinaryExpr",
    "BinaryOp",
    "ConditionalExpr",
    "Expr",
    "FieldRef",
    "FuncCall",
    "Literal",
    "MemberExpr",
    "UnaryExpr",
    "UnaryOp",
    "UndefinedLiteral",
    # Render
    "PATH_PLACEHOLDER",
    "ComponentSource",
    "RenderOptions",
    "RenderedOutput",
    "StyleSpec",
]
