"""
MiniC Programming Language Parser
Recursive-descent parser with one token of lookahead, building the AST

Grammar
-------------------------------------------------------------------------
Program       : FunctionDef EOF
FunctionDef   : "function" IDENT LPAREN Params RPAREN Compound
Params        : Param (COMMA Param)*
Param         : Type IDENT
Compound      : LBRACE Stmt+ RBRACE
Stmt          : Compound | AssignStmt | DeclareStmt | EmptyStmt
DeclareStmt   : Type IDENT SEMI
AssignStmt    : IDENT ASSIGN Expr SEMI
EmptyStmt     : (RBRACE is the lookahead)
Expr          : Term ((ADD | SUB) Term)*
Term          : Factor ((MUL | DIV) Factor)*
Factor        : (ADD | SUB) Factor | INT_CONST | FLOAT_CONST | LPAREN Expr RPAREN | IDENT
Type          : INT | FLOAT
"""

from typing import List, TextIO, Union

from error_handling import MiniCError, MiniCParseError
from lexing import Lexer, Token, TokenKind, print_token
from syntax_tree import (
    Assign, BinaryOp, Compound, Declare, Empty, Expr, FunctionDef,
    NumberLiteral, Param, Program, Stmt, UnaryOp, Variable, pretty_print_ast
)


FUNCTION_KEYWORD = "function"

TYPE_TOKENS = {TokenKind.INT: "int", TokenKind.FLOAT: "float"}

STATEMENT_STARTS = (TokenKind.LBRACE, TokenKind.IDENT, TokenKind.INT, TokenKind.FLOAT, TokenKind.RBRACE)


class MiniCGrammar:
    """One parsing method per non-terminal, consuming tokens from a lexer"""

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self.current_token = lexer.next_token()

    def _eat(self, kind: TokenKind) -> Token:
        """Consume the lookahead if it has the expected kind"""
        token = self.current_token
        if token.kind != kind:
            raise self._unexpected([kind.name])
        self.current_token = self.lexer.next_token()
        return token

    def _unexpected(self, expected: List[str]) -> MiniCParseError:
        token = self.current_token
        return MiniCParseError(
            f"Unexpected token. Expected: {' or '.join(expected)} Got: {token.kind.name}",
            token.span,
            expected=expected,
            got=f"{token.kind.name} {token.lexeme!r}"
        )

    # ------------------------------------------------------------------------
    # Program structure
    # ------------------------------------------------------------------------

    def program(self) -> Program:
        node = Program(self.function_definition())
        self.end_of_input()
        return node

    def end_of_input(self) -> None:
        self._eat(TokenKind.EOF)

    def function_definition(self) -> FunctionDef:
        if self.current_token.kind != TokenKind.IDENT or self.current_token.lexeme != FUNCTION_KEYWORD:
            raise self._unexpected([repr(FUNCTION_KEYWORD)])
        self._eat(TokenKind.IDENT)

        name = self._eat(TokenKind.IDENT).lexeme
        self._eat(TokenKind.LPAREN)
        params = self.params()
        self._eat(TokenKind.RPAREN)
        body = self.compound()
        return FunctionDef(name, params, body)

    def params(self):
        nodes = [self.param()]
        while self.current_token.kind == TokenKind.COMMA:
            self._eat(TokenKind.COMMA)
            nodes.append(self.param())
        return tuple(nodes)

    def param(self) -> Param:
        declared_type = self.type_spec()
        name = self._eat(TokenKind.IDENT).lexeme
        return Param(declared_type, name)

    def type_spec(self) -> str:
        kind = self.current_token.kind
        if kind not in TYPE_TOKENS:
            raise self._unexpected([TokenKind.INT.name, TokenKind.FLOAT.name])
        self._eat(kind)
        return TYPE_TOKENS[kind]

    # ------------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------------

    def compound(self) -> Compound:
        self._eat(TokenKind.LBRACE)
        statements = self.statement_list()
        self._eat(TokenKind.RBRACE)
        return Compound(statements)

    def statement_list(self):
        nodes = [self.statement()]
        while self.current_token.kind != TokenKind.RBRACE:
            nodes.append(self.statement())
        return tuple(nodes)

    def statement(self) -> Stmt:
        kind = self.current_token.kind
        if kind == TokenKind.LBRACE:
            return self.compound()
        elif kind == TokenKind.IDENT:
            return self.assign_statement()
        elif kind in TYPE_TOKENS:
            return self.declare_statement()
        elif kind == TokenKind.RBRACE:
            return Empty()
        raise self._unexpected([k.name for k in STATEMENT_STARTS])

    def declare_statement(self) -> Declare:
        declared_type = self.type_spec()
        name = self._eat(TokenKind.IDENT)
        self._eat(TokenKind.SEMI)
        return Declare(name.lexeme, declared_type, name.span)

    def assign_statement(self) -> Assign:
        target = self.variable()
        self._eat(TokenKind.ASSIGN)
        value = self.expression()
        self._eat(TokenKind.SEMI)
        return Assign(target, value)

    # ------------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------------

    def expression(self) -> Expr:
        node = self.term()
        while self.current_token.kind in (TokenKind.ADD, TokenKind.SUB):
            op = self._eat(self.current_token.kind).lexeme
            node = BinaryOp(op, node, self.term())
        return node

    def term(self) -> Expr:
        node = self.factor()
        while self.current_token.kind in (TokenKind.MUL, TokenKind.DIV):
            op = self._eat(self.current_token.kind).lexeme
            node = BinaryOp(op, node, self.factor())
        return node

    def factor(self) -> Expr:
        kind = self.current_token.kind
        if kind in (TokenKind.ADD, TokenKind.SUB):
            op = self._eat(kind).lexeme
            return UnaryOp(op, self.factor())
        elif kind == TokenKind.INT_CONST:
            return NumberLiteral("int", self._eat(kind).lexeme)
        elif kind == TokenKind.FLOAT_CONST:
            return NumberLiteral("float", self._eat(kind).lexeme)
        elif kind == TokenKind.LPAREN:
            self._eat(TokenKind.LPAREN)
            node = self.expression()
            self._eat(TokenKind.RPAREN)
            return node
        return self.variable()

    def variable(self) -> Variable:
        token = self._eat(TokenKind.IDENT)
        return Variable(token.lexeme, token.span)


def nesting_error(grammar: MiniCGrammar) -> MiniCParseError:
    return MiniCParseError("Nesting too deep", grammar.current_token.span)


class MiniCParser:
    """Main MiniC parser combining lexer and grammar"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def _lexer(self, source: Union[str, TextIO], filename: str) -> Lexer:
        return Lexer(source, filename, on_token=print_token if self.debug else None)

    def parse_string(self, text: str, filename: str = "<input>") -> Program:
        """Parse a complete MiniC program from a string"""
        grammar = MiniCGrammar(self._lexer(text, filename))
        try:
            program = grammar.program()
        except RecursionError:
            raise nesting_error(grammar) from None
        if self.debug:
            print(pretty_print_ast(program), end="")
        return program

    def parse_file(self, filepath: str) -> Program:
        """Parse a MiniC source file"""
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return self.parse_string(f.read(), filepath)
        except FileNotFoundError:
            raise MiniCParseError(f"File not found: {filepath}")
        except UnicodeDecodeError as e:
            raise MiniCParseError(f"Cannot decode file {filepath}: {e}")

    def parse_expression(self, text: str, filename: str = "<input>") -> Expr:
        """Parse a single MiniC expression"""
        grammar = MiniCGrammar(self._lexer(text, filename))
        try:
            node = grammar.expression()
        except RecursionError:
            raise nesting_error(grammar) from None
        grammar.end_of_input()
        return node

    def tokenize(self, text: str, filename: str = "<input>") -> List[Token]:
        """Tokenize MiniC source code"""
        return self._lexer(text, filename).tokenize()


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> MiniCParser:
    """Create a MiniC parser"""
    return MiniCParser(debug=debug)


def create_debug_parser() -> MiniCParser:
    """Create a MiniC parser with debug enabled"""
    return MiniCParser(debug=True)


if __name__ == "__main__":
    parser = create_debug_parser()

    try:
        test_program = """
        function main(int a)
        {
            float y;
            y = 2.5 * (1.5 + 0.5);
        }
        """
        parser.parse_string(test_program)
    except MiniCError as e:
        print(e)
