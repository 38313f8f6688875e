"""
Lexer for Lox - Recursive Descent Parser

Tokenizes Lox source code into a stream of tokens.

Features:
- Single-pass tokenization
- Line tracking (0-based, advanced on every newline)
- `//` line comments
- Error collection: lexing problems are recorded on `Lexer.errors`
  instead of aborting the caller
"""

from typing import List, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: int):
        self.message = message
        self.line = line
        super().__init__(f"{message} at line {line}")


class Lexer:
    """
    Lox lexer.

    Priority per position: whitespace, `//` comment, single-character
    punctuation, one-or-two character operators, identifiers/keywords,
    integers, strings.
    """

    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'fun': TT.FUN,
        'for': TT.FOR,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
    }

    SINGLE = {
        '(': TT.LPAR,
        ')': TT.RPAR,
        '{': TT.LBRACE,
        '}': TT.RBRACE,
        ',': TT.COMMA,
        '.': TT.DOT,
        '-': TT.MINUS,
        '+': TT.PLUS,
        ';': TT.SEMI,
        '/': TT.SLASH,
        '*': TT.STAR,
        '%': TT.MOD,
    }

    # first char -> (one-char type, two-char type); the second char is always '='
    ONE_OR_TWO = {
        '!': (TT.NEG, TT.NEQ),
        '=': (TT.ASSIGN, TT.EQ),
        '<': (TT.LT, TT.LTE),
        '>': (TT.GT, TT.GTE),
    }

    ESCAPES = {'"': '"', '\\': '\\'}

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 0
        self.tokens: List[Tok] = []
        self.errors: List[LexError] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list (always EOF-terminated)"""
        while self.pos < len(self.source):
            if not self.scan_token():
                break

        self.emit(TT.EOF, '')
        return self.tokens

    def scan_token(self) -> bool:
        """Scan next token. Returns False when tokenizing must stop."""
        ch = self.peek()

        if ch in (' ', '\t', '\r'):
            self.advance()
            return True

        if ch == '\n':
            self.advance()
            self.line += 1
            return True

        if ch == '/' and self.peek(1) == '/':
            self.skip_comment()
            return True

        if ch in self.SINGLE:
            self.advance()
            self.emit(self.SINGLE[ch], ch)
            return True

        if ch in self.ONE_OR_TWO:
            self.scan_operator()
            return True

        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return True

        if self.is_digit(ch):
            self.scan_number()
            return True

        if ch == '"':
            return self.scan_string()

        self.errors.append(LexError(f"Unexpected character {ch!r}", self.line))
        self.advance()
        return True

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_operator(self):
        """Scan `!`, `=`, `<`, `>` with optional trailing `=`"""
        ch = self.advance()
        single, double = self.ONE_OR_TWO[ch]

        if self.peek() == '=':
            self.advance()
            self.emit(double, ch + '=')
        else:
            self.emit(single, ch)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        start = self.pos

        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        value = self.source[start:self.pos]
        self.emit(self.KEYWORDS.get(value, TT.IDENT), value)

    def scan_number(self):
        """Scan integer literal (no fraction, no exponent)"""
        start = self.pos

        while self.is_digit(self.peek()):
            self.advance()

        self.emit(TT.NUMBER, self.source[start:self.pos])

    def scan_string(self) -> bool:
        """Scan "..." literal; the emitted lexeme has the quotes stripped"""
        start_line = self.line
        self.advance()  # opening quote
        chars: List[str] = []

        while self.pos < len(self.source) and self.peek() != '"':
            ch = self.advance()

            if ch == '\\' and self.pos < len(self.source):
                nxt = self.advance()
                chars.append(self.ESCAPES.get(nxt, ch + nxt))
                if nxt == '\n':
                    self.line += 1
                continue

            if ch == '\n':
                self.line += 1
            chars.append(ch)

        if self.pos >= len(self.source):
            self.errors.append(LexError("Unterminated string", start_line))
            return False

        self.advance()  # closing quote
        self.emit(TT.STRING, ''.join(chars), line=start_line)
        return True

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    @staticmethod
    def is_digit(ch: str) -> bool:
        """ASCII 0-9 only; other Unicode digits are not number literals"""
        return '0' <= ch <= '9'

    def advance(self) -> str:
        """Consume one character and return it"""
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def skip_comment(self):
        """Skip comment until end of line (the newline itself is left for scan_token)"""
        while self.pos < len(self.source) and self.peek() != '\n':
            self.advance()

    def emit(self, token_type: TT, value: str, line: Optional[int] = None):
        """Emit a token"""
        self.tokens.append(Tok(
            type=token_type,
            lexeme=value,
            line=self.line if line is None else line,
        ))


def tokenize(source: str) -> List[Tok]:
    """Convenience function: tokenize source, raising the first LexError"""
    lexer = Lexer(source)
    tokens = lexer.tokenize()

    if lexer.errors:
        raise lexer.errors[0]

    return tokens
