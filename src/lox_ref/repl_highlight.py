"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable, Dict, List

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxLexer
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORDS = {
    TT.AND, TT.CLASS, TT.ELSE, TT.FUN, TT.FOR, TT.IF, TT.OR, TT.PRINT,
    TT.RETURN, TT.SUPER, TT.THIS, TT.VAR, TT.WHILE,
}
_OPERATORS = {
    TT.MINUS, TT.PLUS, TT.SLASH, TT.STAR, TT.MOD, TT.NEG, TT.NEQ,
    TT.ASSIGN, TT.EQ, TT.GT, TT.GTE, TT.LT, TT.LTE,
}

def token_group(tok: Tok) -> str:
    if tok.type in _KEYWORDS:
        return "keyword"
    if tok.type in (TT.TRUE, TT.FALSE):
        return "boolean"
    if tok.type == TT.NIL:
        return "constant"
    if tok.type == TT.NUMBER:
        return "number"
    if tok.type == TT.STRING:
        return "string"
    if tok.type == TT.IDENT:
        return "identifier"
    if tok.type in _OPERATORS:
        return "operator"
    return "punctuation"

class LoxHighlighter(Lexer):
    """Colour each line by re-lexing the whole document.

    Tokens only carry a line number, so each line is scanned left to right
    to find where the token's text starts; whatever lies between tokens keeps
    the default style except `//` comments.
    """

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        by_line: Dict[int, List[Tok]] = {}

        for tok in LoxLexer(document.text).tokenize():
            if tok.type != TT.EOF:
                by_line.setdefault(tok.line, []).append(tok)

        def get_line(lineno: int) -> StyleAndTextTuples:
            text = lines[lineno]
            out: StyleAndTextTuples = []
            col = 0

            for tok in by_line.get(lineno, []):
                needle = f'"{tok.lexeme}"' if tok.type == TT.STRING else tok.lexeme
                start = text.find(needle, col)
                if start < 0:
                    continue
                if start > col:
                    out.append(("", text[col:start]))
                out.append((GROUP_STYLE[token_group(tok)], needle))
                col = start + len(needle)

            rest = text[col:]
            comment = rest.find("//")
            if comment >= 0:
                out.append(("", rest[:comment]))
                out.append((GROUP_STYLE["comment"], rest[comment:]))
            elif rest:
                out.append(("", rest))

            return out

        return get_line
