from __future__ import annotations

from stacked.api import compile_source, emit_source, parse_source, run_source
from stacked.backend import Backend, EmitResult, Execution, HandoffBackend, SimulatorBackend
from stacked.builder import InstructionBuilder, Program, build_program
from stacked.config import CompilerSettings, UnknownCharPolicy, load_settings
from stacked.errors import (
    BuildError,
    CodegenError,
    CompileError,
    Diagnostic,
    LexError,
    NumericError,
    OperandTypeError,
    ParseError,
    ResolutionError,
    StackOverflowError,
    StackUnderflowError,
    UnknownHandleError,
)
from stacked.lexer import Lexer, Token, TokenKind, tokenize
from stacked.ops import IntrinsicKind, Op, OpKind
from stacked.resolve import ResolvedCall, ResolvedProgram, resolve_program
from stacked.schemas import HandoffDocument
from stacked.stack import OperandStack, StringTable

__all__ = [
    "__version__",
    # Facade
    "parse_source",
    "compile_source",
    "emit_source",
    "run_source",
    # Front-end
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    "InstructionBuilder",
    "Program",
    "build_program",
    "Op",
    "OpKind",
    "IntrinsicKind",
    # Resolution
    "OperandStack",
    "StringTable",
    "ResolvedCall",
    "ResolvedProgram",
    "resolve_program",
    # Backends
    "Backend",
    "EmitResult",
    "Execution",
    "SimulatorBackend",
    "HandoffBackend",
    "HandoffDocument",
    # Config
    "CompilerSettings",
    "UnknownCharPolicy",
    "load_settings",
    # Errors
    "CompileError",
    "LexError",
    "ParseError",
    "NumericError",
    "ResolutionError",
    "StackUnderflowError",
    "StackOverflowError",
    "OperandTypeError",
    "UnknownHandleError",
    "BuildError",
    "CodegenError",
    "Diagnostic",
]

__version__ = "0.1.0"
