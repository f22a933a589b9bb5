"""
MiniC Tokenizer
Turns a source text buffer into an immutable token sequence with source spans
"""

from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass

# Import pyparsing with error handling
try:
    from pyparsing import Word, alphas, alphanums, nums, one_of, col, lineno
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import MiniCLexError
from utilities import accumulate_digits


# Token kinds
NUMBER = "NUMBER"
IDENTIFIER = "IDENTIFIER"
LET = "LET"
PRINT = "PRINT"
PLUS = "PLUS"
MINUS = "MINUS"
MULT = "MULT"
DIV = "DIV"
EQUAL = "EQUAL"
SEMICOLON = "SEMICOLON"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
EOF = "EOF"

KEYWORDS: Dict[str, str] = {
    'let': LET,
    'print': PRINT,
}

PUNCTUATION: Dict[str, str] = {
    '+': PLUS,
    '-': MINUS,
    '*': MULT,
    '/': DIV,
    '=': EQUAL,
    ';': SEMICOLON,
    '(': LPAREN,
    ')': RPAREN,
}

# Dump names that differ from the token kind
_DUMP_NAMES = {
    IDENTIFIER: "IDENT",
}


@dataclass(frozen=True)
class SourceSpan:
    """Source location information for a token or node"""
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


@dataclass(frozen=True)
class Token:
    """MiniC token with source information"""
    type: str
    value: Any
    span: Optional[SourceSpan] = None
    index: int = 0

    def __str__(self) -> str:
        name = _DUMP_NAMES.get(self.type, self.type)
        if self.type in (NUMBER, IDENTIFIER):
            return f"{name}({self.value})"
        return name


class MiniCTokenizer:
    """MiniC tokenizer built from pyparsing token patterns"""

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        """Setup all token patterns for MiniC"""

        # Numbers: maximal run of decimal digits
        number = Word(nums).set_parse_action(lambda t: (NUMBER, accumulate_digits(t[0])))

        # Identifiers and keywords: a letter, then letters or digits
        word = Word(alphas, alphanums).set_parse_action(
            lambda t: (KEYWORDS.get(t[0], IDENTIFIER), t[0])
        )

        # Single character operators and punctuation
        punctuation = one_of(list(PUNCTUATION)).set_parse_action(
            lambda t: (PUNCTUATION[t[0]], t[0])
        )

        # Keep tabs so match locations index the original text
        self.token_pattern = (number | word | punctuation).parse_with_tabs()

    def _make_span(self, text: str, start: int, end: int) -> SourceSpan:
        """Build a span covering text[start:end]"""
        return SourceSpan(
            self.filename,
            lineno(start, text), col(start, text),
            lineno(end, text), col(end, text),
            text[start:end]
        )

    def _check_gap(self, text: str, start: int, end: int) -> None:
        """Text between two tokens may only be whitespace"""
        for pos in range(start, end):
            if not text[pos].isspace():
                char = text[pos]
                span = self._make_span(text, pos, pos + 1)
                raise MiniCLexError(f"Unknown character '{char}'", char, span)

    def tokenize(self, text: str) -> Tuple[Token, ...]:
        """Tokenize MiniC source code, always ending with exactly one EOF token"""
        tokens: List[Token] = []
        last_end = 0

        for result, start, end in self.token_pattern.scan_string(text):
            self._check_gap(text, last_end, start)
            kind, value = result[0]
            tokens.append(Token(kind, value, self._make_span(text, start, end), len(tokens)))
            last_end = end

        self._check_gap(text, last_end, len(text))
        tokens.append(Token(EOF, None, self._make_span(text, len(text), len(text)), len(tokens)))
        return tuple(tokens)


def tokenize(text: str, filename: str = "<input>") -> Tuple[Token, ...]:
    """Tokenize MiniC source code"""
    return MiniCTokenizer(filename).tokenize(text)


def format_tokens(tokens) -> str:
    """Token dump, one token per line"""
    return "".join(f"{token}\n" for token in tokens)
