"""
Recursive Descent Parser for Lox

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent, one method per precedence level
- AST: dataclass nodes from tree.py

Errors never abort the whole pass. A ParseError raised while parsing a
declaration is recorded on `Parser.errors`, the parser resynchronizes at the
next statement boundary and carries on, so one run reports every problem it
can find.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from .lexer_rd import LexError, Lexer
from .token_types import TT, Tok
from .tree import (
    Assign, Binary, Block, Call, Class, Expr, Expression, Function, Get, Grouping,
    If, Lambda, Literal, Logical, Print, Return, Set, Stmt, This, Unary, Var,
    Variable, While,
)

MAX_ARGS = 255

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        where = ""
        if token is not None:
            where = " at end" if token.type == TT.EOF else f" at '{token.lexeme}'"
        super().__init__(
            f"{message}{where}, line {token.line}" if token else message
        )


class LoxSyntaxError(Exception):
    """All lexer and parser errors found in one source text."""
    def __init__(self, errors: Sequence[Exception]):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=, right-associative)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (<, <=, >, >=)
    6. term (+, -)
    7. factor (*, /, %)
    8. unary (!, -)
    9. call (f(...), obj.field)
    10. primary (literals, identifiers, this, parens, fun expressions)
    """

    SYNC_KEYWORDS = {TT.CLASS, TT.FUN, TT.VAR, TT.FOR, TT.IF, TT.WHILE, TT.PRINT, TT.RETURN}

    def __init__(self, tokens: List[Tok]):
        if not tokens or tokens[-1].type != TT.EOF:
            last_line = tokens[-1].line if tokens else 0
            tokens = list(tokens) + [Tok(TT.EOF, '', last_line)]
        self.tokens = tokens
        self.pos = 0
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.tokens[self.pos]

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.current.type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        tok = self.current
        if not self.at_end():
            self.pos += 1
        return tok

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError(message, self.current)
        return self.advance()

    def expect_semi(self, message: str) -> None:
        """Consume a statement terminator; a missing one is reported, not fatal"""
        if not self.match(TT.SEMI):
            self.errors.append(ParseError(message, self.current))

    def synchronize(self) -> None:
        """Skip to the next likely statement boundary after an error"""
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMI:
                return
            if self.current.type in self.SYNC_KEYWORDS:
                return
            self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Stmt]:
        """Parse entire program"""
        program: List[Stmt] = []

        while not self.at_end():
            try:
                stmt = self.declaration()
            except RecursionError:
                # reported once per top-level declaration, where the stack has room again
                self.errors.append(ParseError("Expression nested too deeply", self.current))
                self.synchronize()
                continue
            if stmt is not None:
                program.append(stmt)

        return program

    # ========================================================================
    # Declarations
    # ========================================================================

    def declaration(self) -> Optional[Stmt]:
        try:
            if self.match(TT.CLASS):
                return self.class_declaration()
            if self.check(TT.FUN) and self.tokens[self.pos + 1].type == TT.IDENT:
                self.advance()
                return self.function("function")
            if self.match(TT.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError as exc:
            self.errors.append(exc)
            self.synchronize()
            return None

    def class_declaration(self) -> Class:
        line = self.previous().line
        name = self.expect(TT.IDENT, "Expected class name")
        self.expect(TT.LBRACE, "Expected '{' before class body")

        methods: List[Function] = []
        while not self.check(TT.RBRACE) and not self.at_end():
            methods.append(self.function("method"))

        self.expect(TT.RBRACE, "Expected '}' after class body")
        return Class(name.lexeme, methods, line=line)

    def function(self, kind: str) -> Function:
        name = self.expect(TT.IDENT, f"Expected {kind} name")
        params, body = self.function_rest(kind)
        return Function(name.lexeme, params, body, line=name.line)

    def function_rest(self, kind: str) -> Tuple[List[str], Block]:
        """Parse `(params) { body }` shared by declarations, methods and fun expressions"""
        self.expect(TT.LPAR, f"Expected '(' after {kind} name")
        params: List[str] = []

        if not self.check(TT.RPAR):
            while True:
                if len(params) >= MAX_ARGS:
                    self.errors.append(ParseError(f"Can't have more than {MAX_ARGS} parameters", self.current))
                params.append(self.expect(TT.IDENT, "Expected parameter name").lexeme)
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR, "Expected ')' after parameters")
        brace = self.expect(TT.LBRACE, f"Expected '{{' before {kind} body")
        return params, Block(self.block(), line=brace.line)

    def var_declaration(self) -> Var:
        line = self.previous().line
        name = self.expect(TT.IDENT, "Expected variable name")

        if self.match(TT.ASSIGN):
            initializer = self.expression()
        else:
            initializer = Literal(None, line=name.line)

        self.expect_semi("Expected ';' after variable declaration")
        return Var(name.lexeme, initializer, line=line)

    # ========================================================================
    # Statements
    # ========================================================================

    def statement(self) -> Stmt:
        if self.match(TT.PRINT):
            return self.print_statement()
        if self.match(TT.IF):
            return self.if_statement()
        if self.match(TT.WHILE):
            return self.while_statement()
        if self.match(TT.FOR):
            return self.for_statement()
        if self.match(TT.RETURN):
            return self.return_statement()
        if self.match(TT.LBRACE):
            line = self.previous().line
            return Block(self.block(), line=line)
        return self.expression_statement()

    def print_statement(self) -> Print:
        line = self.previous().line
        value = self.expression()
        self.expect_semi("Expected ';' after value")
        return Print(value, line=line)

    def return_statement(self) -> Return:
        line = self.previous().line
        value = None
        if not self.check(TT.SEMI):
            value = self.expression()
        self.expect_semi("Expected ';' after return value")
        return Return(value, line=line)

    def expression_statement(self) -> Expression:
        expr = self.expression()
        self.expect_semi("Expected ';' after expression")
        return Expression(expr, line=expr.line)

    def if_statement(self) -> If:
        """
        if ( expr ) stmt [else stmt]

        A dangling else binds to the nearest if, so `else if` chains nest.
        """
        line = self.previous().line
        self.expect(TT.LPAR, "Expected '(' after 'if'")
        condition = self.expression()
        self.expect(TT.RPAR, "Expected ')' after if condition")

        then_branch = self.statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.statement()

        return If(condition, then_branch, else_branch, line=line)

    def while_statement(self) -> While:
        line = self.previous().line
        self.expect(TT.LPAR, "Expected '(' after 'while'")
        condition = self.expression()
        self.expect(TT.RPAR, "Expected ')' after condition")
        return While(condition, self.statement(), line=line)

    def for_statement(self) -> Stmt:
        """
        for ( init? ; cond? ; incr? ) body

        Desugars to:  { init; while (cond or true) { body; incr; } }
        """
        line = self.previous().line
        self.expect(TT.LPAR, "Expected '(' after 'for'")

        initializer: Optional[Stmt]
        if self.match(TT.SEMI):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition: Expr = Literal(True, line=line)
        if not self.check(TT.SEMI):
            condition = self.expression()
        self.expect_semi("Expected ';' after loop condition")

        increment: Optional[Expr] = None
        if not self.check(TT.RPAR):
            increment = self.expression()
        self.expect(TT.RPAR, "Expected ')' after for clauses")

        body = self.statement()

        if increment is not None:
            body = Block([body, Expression(increment, line=increment.line)], line=line)

        loop: Stmt = While(condition, body, line=line)

        if initializer is not None:
            loop = Block([initializer, loop], line=line)

        return loop

    def block(self) -> List[Stmt]:
        """Parse declarations up to the closing brace (the '{' is already consumed)"""
        statements: List[Stmt] = []

        while not self.check(TT.RBRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.expect(TT.RBRACE, "Expected '}' after block")
        return statements

    # ========================================================================
    # Expressions
    # ========================================================================

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        expr = self.logic_or()

        if self.check(TT.ASSIGN):
            equals = self.advance()
            value = self.assignment()

            if isinstance(expr, Variable):
                return Assign(expr.name, value, line=expr.line)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value, line=expr.line)

            self.errors.append(ParseError("Invalid assignment target", equals))

        return expr

    def _binary_level(self, operand: Callable[[], Expr], ops: Sequence[TT], node=Binary) -> Expr:
        """Left-associative loop shared by every binary precedence level"""
        expr = operand()

        while self.check(*ops):
            op = self.advance()
            right = operand()
            expr = node(op.type, expr, right, line=op.line)

        return expr

    def logic_or(self) -> Expr:
        return self._binary_level(self.logic_and, (TT.OR,), node=Logical)

    def logic_and(self) -> Expr:
        return self._binary_level(self.equality, (TT.AND,), node=Logical)

    def equality(self) -> Expr:
        return self._binary_level(self.comparison, (TT.EQ, TT.NEQ))

    def comparison(self) -> Expr:
        return self._binary_level(self.term, (TT.GT, TT.GTE, TT.LT, TT.LTE))

    def term(self) -> Expr:
        return self._binary_level(self.factor, (TT.MINUS, TT.PLUS))

    def factor(self) -> Expr:
        return self._binary_level(self.unary, (TT.SLASH, TT.STAR, TT.MOD))

    def unary(self) -> Expr:
        if self.check(TT.NEG, TT.MINUS):
            op = self.advance()
            return Unary(op.type, self.unary(), line=op.line)
        return self.call()

    def call(self) -> Expr:
        expr = self.primary()

        while True:
            if self.match(TT.LPAR):
                expr = self.finish_call(expr)
            elif self.match(TT.DOT):
                name = self.expect(TT.IDENT, "Expected property name after '.'")
                expr = Get(expr, name.lexeme, line=name.line)
            else:
                break

        return expr

    def finish_call(self, callee: Expr) -> Call:
        paren = self.previous()
        arguments: List[Expr] = []

        if not self.check(TT.RPAR):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.errors.append(ParseError(f"Can't have more than {MAX_ARGS} arguments", self.current))
                arguments.append(self.expression())
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR, "Expected ')' after arguments")
        return Call(callee, arguments, line=paren.line)

    def primary(self) -> Expr:
        tok = self.current

        match tok.type:
            case TT.FALSE:
                self.advance()
                return Literal(False, line=tok.line)
            case TT.TRUE:
                self.advance()
                return Literal(True, line=tok.line)
            case TT.NIL:
                self.advance()
                return Literal(None, line=tok.line)
            case TT.NUMBER:
                self.advance()
                return Literal(int(tok.lexeme), line=tok.line)
            case TT.STRING:
                self.advance()
                return Literal(tok.lexeme, line=tok.line)
            case TT.THIS:
                self.advance()
                return This(line=tok.line)
            case TT.IDENT:
                self.advance()
                return Variable(tok.lexeme, line=tok.line)
            case TT.LPAR:
                self.advance()
                inner = self.expression()
                self.expect(TT.RPAR, "Expected ')' after expression")
                return Grouping(inner, line=tok.line)
            case TT.FUN:
                self.advance()
                params, body = self.function_rest("function")
                return Lambda(params, body, line=tok.line)
            case TT.SUPER:
                raise ParseError("Inheritance is not supported; 'super' is reserved", tok)
            case _:
                raise ParseError("Expected expression", tok)


def parse_source(source: str) -> List[Stmt]:
    """Tokenize and parse source, raising LoxSyntaxError if anything was reported"""
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    parser = Parser(tokens)
    program = parser.parse()

    errors: List[Exception] = [*lexer.errors, *parser.errors]
    if errors:
        errors.sort(key=lambda e: e.line if e.line is not None else -1)
        raise LoxSyntaxError(errors)

    return program


__all__ = ['LexError', 'LoxSyntaxError', 'ParseError', 'Parser', 'parse_source']
