"""
Error types for the MiniC pipeline with source-context formatting
One exception class per stage, all sharing a common base
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class SourceSpan:
    """Source location of a token, 1-based"""
    filename: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int
    text: str = ""

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_col}"
        return f"{self.filename}:{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class MiniCError(Exception):
    """Base class for every error raised by the pipeline"""
    stage = "Error"

    def __init__(self, message: str, span: Optional[SourceSpan] = None):
        self.message = message
        self.span = span
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.span:
            return f"{self.stage} at {self.span}: {self.message}"
        return f"{self.stage}: {self.message}"


class MiniCLexError(MiniCError):
    """Unsupported character or malformed numeral"""
    stage = "Lexical error"


class MiniCParseError(MiniCError):
    """Token stream does not match the grammar"""
    stage = "Parse error"

    def __init__(self, message: str, span: Optional[SourceSpan] = None,
                 expected: Optional[List[str]] = None, got: Optional[str] = None):
        self.expected = expected or []
        self.got = got
        super().__init__(message, span)


class MiniCSemanticsError(MiniCError):
    """Declaration rules violated (undefined or redeclared variable)"""
    stage = "Semantics error"


class MiniCRuntimeError(MiniCError):
    """Evaluation failure"""
    stage = "Runtime error"


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")

    return '\n'.join(context_parts)


def format_error(error: MiniCError, source_text: Optional[str] = None) -> str:
    """Format an error with the offending source lines when they are known"""
    result = str(error)

    if isinstance(error, MiniCParseError):
        if error.expected:
            result += f"\n  Expected: {', '.join(error.expected)}"
        if error.got:
            result += f"\n  Got: {error.got}"

    if source_text and error.span:
        result += "\n" + get_context_lines(source_text, error.span.start_line, error.span.start_col)

    return result
