"""
MiniC Parser
Recursive-descent parser building a statement/expression tree from tokens
"""

from typing import List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
import sys

from error_handling import MiniCParseError
from lexing import (
    SourceSpan, Token, tokenize,
    NUMBER, IDENTIFIER, LET, PRINT, PLUS, MINUS, MULT, DIV,
    EQUAL, SEMICOLON, LPAREN, RPAREN, EOF,
)


# Deepest allowed nesting of parenthesised expressions
MAX_NESTING = 200

# Operator token kinds and the symbol each one builds
OPERATORS = {
    PLUS: '+',
    MINUS: '-',
    MULT: '*',
    DIV: '/',
}


# ============================================================================
# AST NODES
# ============================================================================

@dataclass(frozen=True)
class Expression:
    """Base class for expression nodes"""


@dataclass(frozen=True)
class Number(Expression):
    value: int
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Variable(Expression):
    name: str
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Statement:
    """Base class for top-level statements"""


@dataclass(frozen=True)
class Assignment(Statement):
    name: str
    value: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Print(Statement):
    value: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression
    span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program:
    """Statements in source order"""
    statements: Tuple[Statement, ...] = ()

    def __iter__(self):
        return iter(self.statements)

    def __len__(self) -> int:
        return len(self.statements)


Node = Union[Expression, Statement, Program]


# ============================================================================
# PARSER
# ============================================================================

class MiniCParser:
    """Recursive-descent parser over a token sequence

    The cursor only moves forward; there is no backtracking and the first
    syntax error aborts the parse.
    """

    def __init__(self, tokens: Sequence[Token], debug: bool = False):
        if not tokens or tokens[-1].type != EOF:
            raise ValueError("token sequence must end with an EOF token")
        self.tokens = tokens
        self.pos = 0
        self.depth = 0
        self.debug = debug

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        """Consume the current token and return it"""
        token = self.tokens[self.pos]
        if token.type != EOF:
            self.pos += 1
        return token

    def expect(self, kind: str, message: str) -> Token:
        """Consume a token of the given kind or fail"""
        if self.current.type != kind:
            raise MiniCParseError(message, self.current)
        return self.advance()

    def parse_group(self) -> Expression:
        """Parse '(' expr ')', limited to MAX_NESTING levels"""
        if self.depth >= MAX_NESTING:
            raise MiniCParseError("expression nested too deeply", self.current)
        self.depth += 1
        self.advance()
        expression = self.parse_expression()
        self.expect(RPAREN, "expected ')'")
        self.depth -= 1
        return expression

    def parse_program(self) -> Program:
        """Parse statements until EOF"""
        statements: List[Statement] = []
        while self.current.type != EOF:
            statement = self.parse_statement()
            if self.debug:
                print(f"Parsed statement {len(statements) + 1}: {type(statement).__name__}", file=sys.stderr)
            statements.append(statement)
        return Program(tuple(statements))

    def parse_statement(self) -> Statement:
        """Parse one statement"""
        start = self.current

        if start.type == LET:
            self.advance()
            name = self.expect(IDENTIFIER, "expected identifier after 'let'")
            self.expect(EQUAL, "expected '='")
            value = self.parse_expression()
            self.expect(SEMICOLON, "expected ';'")
            return Assignment(name.value, value, span=start.span)

        if start.type == PRINT:
            self.advance()
            value = self.parse_expression()
            self.expect(SEMICOLON, "expected ';'")
            return Print(value, span=start.span)

        if start.type == LPAREN:
            # A parenthesised statement ends at its ')'; operators after it are not joined
            expression = self.parse_group()
            if self.current.type == SEMICOLON:
                self.advance()
            return ExpressionStatement(expression, span=start.span)

        expression = self.parse_expression()
        if self.current.type == SEMICOLON:
            self.advance()
        return ExpressionStatement(expression, span=start.span)

    def parse_expression(self) -> Expression:
        """Parse `primary (OP expr)*`

        Everything after an operator becomes the right operand, so all four
        operators share one precedence level and group to the right:
        5 - 3 - 2 is 5 - (3 - 2). The chain is collected flat and folded
        from the right, so its length is not bounded by the call stack.
        """
        operands = [self.parse_primary()]
        op_tokens: List[Token] = []

        while self.current.type in OPERATORS:
            op_tokens.append(self.advance())
            operands.append(self.parse_primary())

        expression = operands.pop()
        while op_tokens:
            op_token = op_tokens.pop()
            expression = BinaryOp(OPERATORS[op_token.type], operands.pop(), expression,
                                  span=op_token.span)

        return expression

    def parse_primary(self) -> Expression:
        """Parse a number, a variable or a parenthesised expression"""
        token = self.current

        if token.type == NUMBER:
            self.advance()
            return Number(token.value, span=token.span)

        if token.type == IDENTIFIER:
            self.advance()
            return Variable(token.value, span=token.span)

        if token.type == LPAREN:
            return self.parse_group()

        raise MiniCParseError("unexpected token", token)


def parse(tokens: Sequence[Token], debug: bool = False) -> Program:
    """Parse a token sequence into a program"""
    return MiniCParser(tokens, debug).parse_program()


def parse_source(text: str, filename: str = "<input>", debug: bool = False) -> Program:
    """Tokenize and parse MiniC source code"""
    return parse(tokenize(text, filename), debug)


# Factory functions for creating parsers
def create_parser(debug: bool = False):
    """Create a MiniC parser: a callable from token sequence to program"""
    def parser(tokens: Sequence[Token]) -> Program:
        return parse(tokens, debug)
    return parser


def create_debug_parser():
    """Create a MiniC parser with debug enabled"""
    return create_parser(debug=True)


# ============================================================================
# TREE DUMP
# ============================================================================

def format_ast(node: Node, indent: int = 0) -> str:
    """Pretty print a tree, two spaces per level"""
    pad = "  " * indent

    if isinstance(node, Program):
        return "".join(format_ast(statement, indent) for statement in node.statements)
    if isinstance(node, Number):
        return f"{pad}AST_NUMBER({node.value})\n"
    if isinstance(node, Variable):
        return f"{pad}AST_VAR({node.name})\n"
    if isinstance(node, BinaryOp):
        # Walk the right spine in a loop; each step is one level deeper
        parts = []
        while isinstance(node, BinaryOp):
            parts.append(f"{'  ' * indent}AST_BINARY_OP({node.op})\n")
            parts.append(format_ast(node.left, indent + 1))
            node = node.right
            indent += 1
        parts.append(format_ast(node, indent))
        return "".join(parts)
    if isinstance(node, Assignment):
        return f"{pad}AST_ASSIGN({node.name})\n" + format_ast(node.value, indent + 1)
    if isinstance(node, Print):
        return f"{pad}AST_PRINT\n" + format_ast(node.value, indent + 1)
    if isinstance(node, ExpressionStatement):
        return format_ast(node.expression, indent)
    return f"{pad}Unknown AST node\n"
