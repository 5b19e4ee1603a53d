"""
MiniC Lexer
Turns source text into a stream of typed tokens, one token at a time
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO, Union

from pyparsing import Regex, col, lineno, one_of

from error_handling import MiniCLexError, SourceSpan


class TokenKind(Enum):
    """The closed set of token kinds"""
    INT = "int"
    FLOAT = "float"
    INT_CONST = "integer constant"
    FLOAT_CONST = "float constant"
    MUL = "*"
    DIV = "/"
    ADD = "+"
    SUB = "-"
    EOF = "end of input"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    SEMI = ";"
    ASSIGN = "="
    IDENT = "identifier"
    FUNCDEF = "function definition"
    ARG = "argument"
    COMMA = ","


@dataclass(frozen=True)
class Token:
    """MiniC token with source information"""
    kind: TokenKind
    lexeme: str
    span: Optional[SourceSpan] = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.kind.name}({self.lexeme!r})"


PUNCTUATION = {
    '=': TokenKind.ASSIGN,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    ',': TokenKind.COMMA,
    ';': TokenKind.SEMI,
    '/': TokenKind.DIV,
    '*': TokenKind.MUL,
    '+': TokenKind.ADD,
    '-': TokenKind.SUB,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
}

KEYWORDS = {
    'int': TokenKind.INT,
    'float': TokenKind.FLOAT,
}


TokenObserver = Callable[[Token], None]


def print_token(token: Token) -> None:
    """Observer used by debug parsers"""
    print(f"Token: {token}")


class Lexer:
    """Forward-only scanner exposing one token of lookahead to the parser"""

    def __init__(self, source: Union[str, TextIO], filename: str = "<input>",
                 on_token: Optional[TokenObserver] = None):
        if hasattr(source, 'read'):
            source = source.read()
        self.text = source
        self.filename = filename
        self.on_token = on_token
        self._pos = 0
        self._finished = False
        self._setup_token_patterns()
        self._matches = self.scanner.scan_string(self.text)

    def _setup_token_patterns(self):
        """Setup the pyparsing elements recognising each token class"""

        # A letter, then letters or digits; _trim_identifier narrows what \w lets through
        identifier = Regex(r'[^\W\d_][^\W_]*').set_parse_action(lambda t: ("IDENTIFIER", t[0]))

        # A digit, then digits and dots; validity is decided after the match
        numeral = Regex(r'\d[\d.]*').set_parse_action(lambda t: ("NUMERAL", t[0]))

        punctuation = one_of(list(PUNCTUATION)).set_parse_action(lambda t: ("PUNCTUATION", t[0]))

        # Keep tabs so match offsets index the original text
        self.scanner = (identifier | numeral | punctuation).parse_with_tabs()

    def next_token(self) -> Token:
        """Return the next token; EOF is returned indefinitely at the end"""
        if self._finished:
            token = self._make_token(TokenKind.EOF, "", len(self.text))
        else:
            token = self._scan()
        if self.on_token:
            self.on_token(token)
        return token

    def tokenize(self) -> List[Token]:
        """Drain the lexer, EOF token included"""
        tokens = [self.next_token()]
        while tokens[-1].kind != TokenKind.EOF:
            tokens.append(self.next_token())
        return tokens

    def _scan(self) -> Token:
        match = next(self._matches, None)

        if match is None:
            self._check_skipped(len(self.text))
            self._finished = True
            return self._make_token(TokenKind.EOF, "", len(self.text))

        results, start, end = match
        self._check_skipped(start)
        self._pos = end

        category, lexeme = results[0]
        if category == "IDENTIFIER":
            lexeme = self._trim_identifier(lexeme, start)
            self._pos = start + len(lexeme)
            return self._make_token(KEYWORDS.get(lexeme, TokenKind.IDENT), lexeme, start)
        elif category == "NUMERAL":
            return self._make_token(self._classify_numeral(lexeme, start), lexeme, start)
        return self._make_token(PUNCTUATION[lexeme], lexeme, start)

    def _check_skipped(self, stop: int) -> None:
        """Everything the scanner stepped over must be whitespace"""
        for loc in range(self._pos, stop):
            char = self.text[loc]
            if not char.isspace():
                raise MiniCLexError(f"Unsupported character '{char}'", self._span(loc, char))

    def _trim_identifier(self, lexeme: str, loc: int) -> str:
        """Cut an identifier at the first character that is not a letter or decimal digit"""
        for index, char in enumerate(lexeme):
            if char.isalpha() or (index > 0 and char.isdecimal()):
                continue
            if index == 0:
                raise MiniCLexError(f"Unsupported character '{char}'", self._span(loc, char))
            # The rest is left unconsumed and reported by the next scan
            return lexeme[:index]
        return lexeme

    def _classify_numeral(self, lexeme: str, loc: int) -> TokenKind:
        try:
            int(lexeme)
            return TokenKind.INT_CONST
        except ValueError:
            pass
        try:
            float(lexeme)
            return TokenKind.FLOAT_CONST
        except ValueError:
            raise MiniCLexError(f"Malformed numeral '{lexeme}'", self._span(loc, lexeme)) from None

    def _make_token(self, kind: TokenKind, lexeme: str, loc: int) -> Token:
        return Token(kind, lexeme, self._span(loc, lexeme))

    def _span(self, loc: int, text: str) -> SourceSpan:
        line = lineno(loc, self.text)
        column = col(loc, self.text)
        return SourceSpan(self.filename, line, column, line, column + len(text), text)

