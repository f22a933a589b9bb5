"""
Error handling for the MiniC pipeline with detailed error reports
Every stage raises one of the exceptions below; only the driver turns them
into a diagnostic and an exit status
"""

from typing import Any, Dict, List, Optional


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MiniCError(Exception):
    """Base class for every fatal MiniC error"""
    kind = "Error"

    def __init__(self, message: str, span: Optional[Any] = None, context: str = ""):
        self.message = message
        self.span = span
        self.context = context
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.span:
            return f"{self.kind} at {self.span}: {self.message}"
        return f"{self.kind}: {self.message}"


class MiniCIOError(MiniCError):
    """The source text could not be read"""
    kind = "I/O error"


class MiniCLexError(MiniCError):
    """Unrecognised character in the source text"""
    kind = "Lexical error"

    def __init__(self, message: str, char: str, span: Optional[Any] = None):
        self.char = char
        super().__init__(message, span)


class MiniCParseError(MiniCError):
    """Syntax error, positioned on the offending token"""
    kind = "Syntax error"

    def __init__(self, message: str, token: Optional[Any] = None, context: str = ""):
        self.token = token
        super().__init__(message, token.span if token is not None else None, context)

    @property
    def position(self) -> int:
        """Index of the offending token in the token sequence"""
        return self.token.index if self.token is not None else 0

    def _format_error(self) -> str:
        if self.token is not None and self.span:
            return f"{self.kind} at pos={self.position} ({self.span}): {self.message}"
        if self.token is not None:
            return f"{self.kind} at pos={self.position}: {self.message}"
        return super()._format_error()


class MiniCRuntimeError(MiniCError):
    """Evaluation error: undefined variable, division by zero, store overflow, bad node"""
    kind = "Runtime error"

    def __init__(self, message: str, span: Optional[Any] = None,
                 env_snapshot: Optional[Dict[str, int]] = None):
        self.env_snapshot = env_snapshot
        super().__init__(message, span)


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_error_report(
    kind: str,
    message: str,
    line: int = 0,
    column: int = 0,
    position: Optional[int] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable error report structure"""
    return {
        'kind': kind,
        'message': message,
        'line': line,
        'column': column,
        'position': position,
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_error_report(report: Dict) -> str:
    """Format an error report as a string"""
    header = report['kind']
    if report['line']:
        header += f" at line {report['line']}, column {report['column']}"
    if report['position'] is not None:
        header += f" (token {report['position']})"
    error_msg = f"{header}:\n"
    error_msg += f"  {report['message']}\n"

    if report['got']:
        error_msg += f"  Got: {report['got']}\n"

    if report['context']:
        error_msg += f"{report['context']}\n"

    if report['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in report['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


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


def describe_token(token: Any) -> str:
    """Describe what was actually found at the error location"""
    if token is None:
        return "unknown"
    if token.type == "EOF":
        return "end of input"
    if token.span is None:
        return f"'{token}'"
    return f"'{token.span.text}'"


def generate_suggestions(kind: str, message: str, got: Optional[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if "expected ';'" in message:
        suggestions.append("Statements must end with ';'")

    if "expected ')'" in message:
        suggestions.append("Every '(' needs a matching ')'")

    if "expected '='" in message:
        suggestions.append("Bindings are written 'let name = expression;'")

    if "expected identifier" in message:
        suggestions.append("Variable names must start with a letter")

    if "undefined variable" in message:
        suggestions.append("Assign the variable with 'let' before using it")

    if "overflow" in message:
        suggestions.append("Use fewer distinct variable names or raise --capacity")

    if "nested too deeply" in message:
        suggestions.append("Split the expression with intermediate 'let' bindings")

    if kind == MiniCLexError.kind and got:
        suggestions.append("Only digits, letters, whitespace and + - * / = ; ( ) are allowed")

    return suggestions


def make_report_from_exception(exc: MiniCError, source_text: Optional[str] = None) -> Dict:
    """Convert a MiniC exception into an error report dict"""
    span = exc.span
    line_num = span.start_line if span else 0
    col_num = span.start_col if span else 0

    got = None
    position = None
    if isinstance(exc, MiniCParseError):
        got = describe_token(exc.token)
        position = exc.position
    elif isinstance(exc, MiniCLexError):
        got = repr(exc.char)

    context = None
    if source_text is not None and span:
        context = get_context_lines(source_text, line_num, col_num)

    return make_error_report(
        kind=exc.kind,
        message=exc.message,
        line=line_num,
        column=col_num,
        position=position,
        got=got,
        context=context,
        suggestions=generate_suggestions(exc.kind, exc.message, got)
    )


# ============================================================================
# ERROR HANDLER
# ============================================================================

class MiniCErrorHandler:
    """Renders any MiniC error against the source it came from"""
    def __init__(self, source_text: Optional[str] = None, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def report(self, exc: MiniCError) -> str:
        """Build the full diagnostic text for an error"""
        report = make_report_from_exception(exc, self.source_text)
        return f"{self.filename}: {format_error_report(report)}"
