"""Jerboa tokenizer — scans source text into tokens, one at a time."""

from __future__ import annotations


# Token kind constants
TK_EOF = "EOF"
TK_ILLEGAL = "ILLEGAL"
TK_IDENT = "IDENT"
TK_INT = "INT"
TK_STRING = "STRING"

TK_ASSIGN = "="
TK_PLUS = "+"
TK_MINUS = "-"
TK_ASTERISK = "*"
TK_SLASH = "/"
TK_PERCENT = "%"
TK_BANG = "!"
TK_EQ = "=="
TK_NOT_EQ = "!="
TK_LT = "<"
TK_GT = ">"
TK_LT_EQ = "<="
TK_GT_EQ = ">="
TK_AND = "&&"
TK_OR = "||"

TK_COMMA = ","
TK_SEMICOLON = ";"
TK_COLON = ":"
TK_LPAREN = "("
TK_RPAREN = ")"
TK_LBRACE = "{"
TK_RBRACE = "}"
TK_LBRACKET = "["
TK_RBRACKET = "]"

TK_FUNCTION = "FN"
TK_LET = "LET"
TK_TRUE = "TRUE"
TK_FALSE = "FALSE"
TK_IF = "IF"
TK_ELSE = "ELSE"
TK_RETURN = "RETURN"

KEYWORDS: dict[str, str] = {
    "fn": TK_FUNCTION,
    "let": TK_LET,
    "true": TK_TRUE,
    "false": TK_FALSE,
    "if": TK_IF,
    "else": TK_ELSE,
    "return": TK_RETURN,
}

# Two-character operators, matched before their one-character prefixes
DOUBLE_OPS: dict[str, str] = {
    "==": TK_EQ,
    "!=": TK_NOT_EQ,
    "<=": TK_LT_EQ,
    ">=": TK_GT_EQ,
    "&&": TK_AND,
    "||": TK_OR,
}

SINGLE_OPS: dict[str, str] = {
    "=": TK_ASSIGN,
    "+": TK_PLUS,
    "-": TK_MINUS,
    "*": TK_ASTERISK,
    "/": TK_SLASH,
    "%": TK_PERCENT,
    "!": TK_BANG,
    "<": TK_LT,
    ">": TK_GT,
    ",": TK_COMMA,
    ";": TK_SEMICOLON,
    ":": TK_COLON,
    "(": TK_LPAREN,
    ")": TK_RPAREN,
    "{": TK_LBRACE,
    "}": TK_RBRACE,
    "[": TK_LBRACKET,
    "]": TK_RBRACKET,
}

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    '"': '"',
}


class Token:
    """A token with kind, matched text, and position."""

    def __init__(self, kind: str, literal: str, line: int = 0, col: int = 0):
        self.kind: str = kind
        self.literal: str = literal
        self.line: int = line
        self.col: int = col

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.literal == other.literal

    def __hash__(self) -> int:
        return hash((self.kind, self.literal))

    def __repr__(self) -> str:
        return (
            "Token("
            + self.kind
            + ", "
            + repr(self.literal)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )

    def describe(self) -> str:
        """Short human-readable form for error messages."""
        if self.kind == TK_EOF:
            return "end of input"
        return "'" + self.literal + "' at line " + str(self.line) + " col " + str(self.col)


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


class Lexer:
    """Character scanner. Yields EOF forever once the input is exhausted."""

    def __init__(self, source: str):
        self.source: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1

    def _peek_char(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= len(self.source):
            return ""
        return self.source[idx]

    def _advance_char(self) -> str:
        c = self.source[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def _skip_trivia(self) -> None:
        while self.pos < len(self.source):
            c = self._peek_char()
            if c in " \t\r\n":
                self._advance_char()
            elif c == "/" and self._peek_char(1) == "/":
                while self.pos < len(self.source) and self._peek_char() != "\n":
                    self._advance_char()
            else:
                break

    def next_token(self) -> Token:
        self._skip_trivia()
        line = self.line
        col = self.col
        if self.pos >= len(self.source):
            return Token(TK_EOF, "", line, col)

        c = self._peek_char()

        if _is_alpha(c):
            start = self.pos
            while self.pos < len(self.source) and _is_alnum(self._peek_char()):
                self._advance_char()
            word = self.source[start : self.pos]
            return Token(KEYWORDS.get(word, TK_IDENT), word, line, col)

        if _is_digit(c):
            start = self.pos
            while self.pos < len(self.source) and _is_digit(self._peek_char()):
                self._advance_char()
            return Token(TK_INT, self.source[start : self.pos], line, col)

        if c == '"':
            return self._scan_string(line, col)

        pair = c + self._peek_char(1)
        if pair in DOUBLE_OPS:
            self._advance_char()
            self._advance_char()
            return Token(DOUBLE_OPS[pair], pair, line, col)

        self._advance_char()
        if c in SINGLE_OPS:
            return Token(SINGLE_OPS[c], c, line, col)
        return Token(TK_ILLEGAL, c, line, col)

    def _scan_string(self, line: int, col: int) -> Token:
        """Scan a double-quoted string. Bad escapes and missing quotes are ILLEGAL."""
        start = self.pos
        self._advance_char()  # opening quote
        chars: list[str] = []
        while True:
            if self.pos >= len(self.source):
                return Token(TK_ILLEGAL, self.source[start:], line, col)
            c = self._advance_char()
            if c == '"':
                return Token(TK_STRING, "".join(chars), line, col)
            if c == "\\":
                esc = self._peek_char()
                if esc not in ESCAPE_MAP:
                    return Token(TK_ILLEGAL, self.source[start : self.pos + 1], line, col)
                self._advance_char()
                chars.append(ESCAPE_MAP[esc])
            else:
                chars.append(c)


def tokenize(source: str) -> list[Token]:
    """Scan all tokens up to and including the first EOF."""
    lexer = Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.kind == TK_EOF:
            return tokens
