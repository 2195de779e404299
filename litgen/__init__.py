from .errors import (
    LitgenError, StructuralError, UnterminatedExpression, UnterminatedDirective,
    TemplateSyntaxError, UndefinedParameter, NegativeIndent, ExecutionFault, LineCountDrift, SentinelCollision,
)
from .codegen import TextBuilder
from .template import Template, Literal, Expr, compile_template
from .render import Varargs, render, emit, to_text
from .runtime import ScriptRuntime, BoundTemplate, SCRIPT_API
from .scanner import DirectiveBlock, scan, OPENER, BEGIN_SENTINEL, END_SENTINEL
from .rewriter import RegenConfig, BlockResult, RewriteReport, regenerate, rewrite_source, rewrite_file

__all__ = [
    # errors
    "LitgenError", "StructuralError", "UnterminatedExpression", "UnterminatedDirective",
    "TemplateSyntaxError", "UndefinedParameter", "NegativeIndent", "ExecutionFault", "LineCountDrift", "SentinelCollision",
    # templates & rendering
    "TextBuilder", "Template", "Literal", "Expr", "compile_template",
    "Varargs", "render", "emit", "to_text", "ScriptRuntime", "BoundTemplate", "SCRIPT_API",
    # directives
    "DirectiveBlock", "scan", "OPENER", "BEGIN_SENTINEL", "END_SENTINEL",
    "RegenConfig", "BlockResult", "RewriteReport", "regenerate", "rewrite_source", "rewrite_file",
]
