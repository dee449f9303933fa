"""
CIAMS Language Parser

Parses CIAMS token lists into abstract syntax trees.

This module implements a recursive-descent parser over the flat token list
produced by `ciams_lexer`. It inspects token kinds and lexemes only and never
looks at raw source text.

Supported Constructs
--------------------
- Expressions (infix, lowest precedence first):
    * Equality: `==`, `!=`
    * Comparison: `<`, `>`, `<=`, `>=`
    * Term: `+`, `-`
    * Factor: `*`, `/`, `%`
    * Unary prefix: `!`, `-`
    * Primary: numbers, strings, identifiers, `( expr )`

- Statements:
    * Bindings: `Init x = expr;`, `x = expr;`
    * Control flow: `if`/`else`, `for`, `while`, `Loop`, `Repeat`, `try`/`catch`,
      `Match`/`Case`/`Default`, `Return;`, `Break;`, `Continue;`, `throw expr;`
    * Declarations: `Func`, `Struct`, `Class`, `Start { ... } Return;`
    * Placeholders: `Async`, `Await`, `Mutex`, `Alloc`, `Free`
    * Macros: `| name : ... |` (the region is delimited and skipped)

Parser Behavior
---------------
- Fails fast: the first unmet expectation raises `ParseError`; there is no
  recovery and no error aggregation.
- Every token that cannot start a statement is rejected, including reserved
  keywords that have no statement form.
- Binary operators fold left-to-right; unary operators nest to the right.

Entry Points
------------
- `Parser(tokens).parse()`: Parse a token list, raising `ParseError` on failure.
- `parse_program(tokens)`: Same, returning `ParseSuccess` or `ParseFailure`.
- `parse_source(source)`: Tokenize then `parse_program`.

Raises
------
ParseError
    A `SyntaxError` subclass carrying the offending line, column, token and a
    description of what was expected.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Union

from ciams.ciams_ast import (
    Alloc,
    Assign,
    ASTNode,
    Async,
    Await,
    BinaryExpr,
    Break,
    ClassDecl,
    Continue,
    For,
    Free,
    FuncDecl,
    Identifier,
    If,
    Init,
    Literal,
    Loop,
    Macro,
    Match,
    MatchCase,
    Mutex,
    Program,
    Repeat,
    Return,
    Start,
    StructDecl,
    Throw,
    TryCatch,
    UnaryExpr,
    While,
)
from ciams.ciams_constants import KEYWORD_KINDS, TokenKind
from ciams.ciams_lexer import Token, tokenize

logger = logging.getLogger(__name__)

EQUALITY_OPS = (TokenKind.IMMUTABLE_ASSIGN, TokenKind.NEQ)
COMPARISON_OPS = (TokenKind.LT, TokenKind.GT, TokenKind.LE, TokenKind.GE)
TERM_OPS = (TokenKind.PLUS, TokenKind.MINUS)
FACTOR_OPS = (TokenKind.MUL, TokenKind.DIV, TokenKind.MOD)
UNARY_OPS = (TokenKind.NOT, TokenKind.MINUS)


class ParseError(SyntaxError):
    """Raised on the first token that does not fit the grammar.

    Attributes:
        expected (str): Human-readable description of the unmet expectation.
        token (Token): The offending token.
        line (int): Line of the offending token.
        column (int): Column of the offending token.
    """

    def __init__(self, expected: str, token: Token) -> None:
        super().__init__(
            f"{expected} at line {token.line}, col {token.column} "
            f"(got {token.kind.name} {token.lexeme!r})"
        )
        self.expected = expected
        self.token = token
        self.line = token.line
        self.column = token.column


class ParseSuccess:
    ok = True

    def __init__(self, program: Program) -> None:
        self.program = program

    def unwrap(self) -> Program:
        return self.program

    def __repr__(self) -> str:
        return f"ParseSuccess({self.program!r})"


class ParseFailure:
    ok = False

    def __init__(self, error: ParseError) -> None:
        self.error = error

    def unwrap(self) -> Program:
        raise self.error

    def __repr__(self) -> str:
        return f"ParseFailure({str(self.error)!r})"


ParseResult = Union[ParseSuccess, ParseFailure]


class Parser:
    """
    CIAMS Parser Class

    Transforms a token list into a `Program` tree. One instance parses one token
    list: the cursor (`position`) belongs to the instance and is not shared.

    Attributes
    ----------
    tokens : list[Token]
        The input token list, normally terminated by END_OF_STREAM.
    position : int
        Current index into the token list.
    statement_parsers : dict[TokenKind, Callable[[], ASTNode]]
        Statement productions keyed by the kind of their first token.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0

        self.statement_parsers: dict[TokenKind, Callable[[], ASTNode]] = {
            TokenKind.INIT: self.parse_init,
            TokenKind.IDENTIFIER: self.parse_assignment,
            TokenKind.IF: self.parse_if,
            TokenKind.FOR: self.parse_for,
            TokenKind.WHILE: self.parse_while,
            TokenKind.LOOP: self.parse_loop,
            TokenKind.REPEAT: self.parse_repeat,
            TokenKind.TRY: self.parse_try,
            TokenKind.PIPE: self.parse_macro,
            TokenKind.FUNC: self.parse_function,
            TokenKind.RETURN: self.parse_return,
            TokenKind.MATCH: self.parse_match,
            TokenKind.ASYNC: self.parse_async,
            TokenKind.AWAIT: self.parse_await,
            TokenKind.MUTEX: self.parse_mutex,
            TokenKind.STRUCT: self.parse_struct,
            TokenKind.CLASS: self.parse_class,
            TokenKind.ALLOC: self.parse_alloc,
            TokenKind.FREE: self.parse_free,
            TokenKind.START: self.parse_start,
            TokenKind.THROW: self.parse_throw,
            TokenKind.BREAK: self.parse_break,
            TokenKind.CONTINUE: self.parse_continue,
        }

    # Cursor helpers

    def current(self) -> Token:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        if self.tokens:
            last = self.tokens[-1]
            return Token(TokenKind.END_OF_STREAM, "", last.line, last.column)
        return Token(TokenKind.END_OF_STREAM, "")

    def at_end(self) -> bool:
        return self.current().kind == TokenKind.END_OF_STREAM

    def advance(self) -> Token:
        """Consumes and returns the current token. Never moves past END_OF_STREAM."""
        tok = self.current()
        if not self.at_end():
            self.position += 1
        return tok

    def check(self, *kinds: TokenKind) -> bool:
        return self.current().kind in kinds

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.check(*kinds):
            return self.advance()
        return None

    def consume(self, kind: TokenKind, expected: str) -> Token:
        if self.check(kind):
            return self.advance()
        raise ParseError(expected, self.current())

    # Program and blocks

    def parse(self) -> Program:
        """Parse the whole token list into a Program."""
        body: list[ASTNode] = []
        while not self.at_end():
            body.append(self.parse_statement())
        logger.debug("Parsed %d top-level statements", len(body))
        return Program(body)

    def parse_statement(self) -> ASTNode:
        """Parse one statement, dispatching on the kind of the current token."""
        tok = self.current()
        handler = self.statement_parsers.get(tok.kind)
        if handler is not None:
            return handler()
        if tok.kind in KEYWORD_KINDS:
            raise ParseError(
                f"Expected a statement; keyword '{tok.lexeme}' cannot start one", tok
            )
        raise ParseError("Expected a statement", tok)

    def parse_block(self, construct: str) -> list[ASTNode]:
        """Parse a `{}`-enclosed statement list belonging to `construct`."""
        self.consume(TokenKind.LBRACE, f"Expected '{{' to open {construct} block")
        stmts: list[ASTNode] = []
        while not self.check(TokenKind.RBRACE) and not self.at_end():
            stmts.append(self.parse_statement())
        self.consume(TokenKind.RBRACE, f"Expected '}}' to close {construct} block")
        return stmts

    # Bindings

    def parse_init(self) -> Init:
        init_tok = self.advance()
        name_tok = self.consume(
            TokenKind.IDENTIFIER, "Expected variable name after 'Init'"
        )
        self.consume(TokenKind.ASSIGN, "Expected '=' after variable name in Init")
        value = self.parse_expression()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after Init")
        return Init(name_tok.lexeme, value, line=init_tok.line, col=init_tok.column)

    def parse_assignment(self) -> Assign:
        name_tok = self.advance()
        self.consume(
            TokenKind.ASSIGN, f"Expected '=' after '{name_tok.lexeme}' in assignment"
        )
        value = self.parse_expression()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after assignment")
        return Assign(name_tok.lexeme, value, line=name_tok.line, col=name_tok.column)

    # Control flow

    def parse_if(self) -> If:
        """Parse `if (cond) { ... }` with an optional `else { ... }`."""
        if_tok = self.advance()
        self.consume(TokenKind.LPAREN, "Expected '(' after 'if'")
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN, "Expected ')' after if condition")
        then_body = self.parse_block("if")

        else_body: list[ASTNode] | None = None
        if self.match(TokenKind.ELSE):
            else_body = self.parse_block("else")

        return If(condition, then_body, else_body, line=if_tok.line, col=if_tok.column)

    def parse_for(self) -> For:
        """Parse `for (Init i = 0; cond; step) { ... }`; each header part may be empty.

        The initializer must be an `Init` statement, which brings its own `;`.
        """
        for_tok = self.advance()
        self.consume(TokenKind.LPAREN, "Expected '(' after 'for'")

        initializer: Init | None = None
        if self.check(TokenKind.INIT):
            initializer = self.parse_init()
        else:
            self.consume(
                TokenKind.SEMICOLON, "Expected 'Init' initializer or ';' in for header"
            )

        condition: ASTNode | None = None
        if not self.check(TokenKind.SEMICOLON):
            condition = self.parse_expression()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after for condition")

        increment: ASTNode | None = None
        if not self.check(TokenKind.RPAREN):
            increment = self.parse_expression()
        self.consume(TokenKind.RPAREN, "Expected ')' after for header")

        body = self.parse_block("for")
        return For(
            initializer,
            condition,
            increment,
            body,
            line=for_tok.line,
            col=for_tok.column,
        )

    def parse_while(self) -> While:
        while_tok = self.advance()
        self.consume(TokenKind.LPAREN, "Expected '(' after 'while'")
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN, "Expected ')' after while condition")
        body = self.parse_block("while")
        return While(condition, body, line=while_tok.line, col=while_tok.column)

    def parse_loop(self) -> Loop:
        tok = self.advance()
        return Loop(self.parse_block("Loop"), line=tok.line, col=tok.column)

    def parse_repeat(self) -> Repeat:
        tok = self.advance()
        return Repeat(self.parse_block("Repeat"), line=tok.line, col=tok.column)

    def parse_try(self) -> TryCatch:
        """Parse `try { ... } catch { ... }`. No exception name is bound."""
        try_tok = self.advance()
        try_body = self.parse_block("try")
        self.consume(TokenKind.CATCH, "Expected 'catch' after try block")
        catch_body = self.parse_block("catch")
        return TryCatch(try_body, catch_body, line=try_tok.line, col=try_tok.column)

    def parse_match(self) -> Match:
        """
        Parse a match statement of the form:

            Match (subject) {
                Case pattern : { ... }
                Default : { ... }
            }

        Entries are kept in source order; at most one Default is allowed.
        """
        match_tok = self.advance()
        self.consume(TokenKind.LPAREN, "Expected '(' after 'Match'")
        subject = self.parse_expression()
        self.consume(TokenKind.RPAREN, "Expected ')' after match subject")
        self.consume(TokenKind.LBRACE, "Expected '{' to open match body")

        cases: list[MatchCase] = []
        default_body: list[ASTNode] | None = None
        while not self.check(TokenKind.RBRACE) and not self.at_end():
            if self.check(TokenKind.CASE):
                case_tok = self.advance()
                pattern = self.parse_expression()
                self.consume(TokenKind.COLON, "Expected ':' after case pattern")
                body = self.parse_block("case")
                cases.append(
                    MatchCase(pattern, body, line=case_tok.line, col=case_tok.column)
                )
            elif self.check(TokenKind.DEFAULT):
                default_tok = self.advance()
                if default_body is not None:
                    raise ParseError("Expected at most one 'Default' entry", default_tok)
                self.consume(TokenKind.COLON, "Expected ':' after 'Default'")
                default_body = self.parse_block("default")
            else:
                raise ParseError("Expected 'Case' or 'Default' in match body", self.current())

        self.consume(TokenKind.RBRACE, "Expected '}' to close match body")
        return Match(
            subject, cases, default_body, line=match_tok.line, col=match_tok.column
        )

    def parse_return(self) -> Return:
        tok = self.advance()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after 'Return'")
        return Return(line=tok.line, col=tok.column)

    def parse_break(self) -> Break:
        tok = self.advance()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after 'Break'")
        return Break(line=tok.line, col=tok.column)

    def parse_continue(self) -> Continue:
        tok = self.advance()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after 'Continue'")
        return Continue(line=tok.line, col=tok.column)

    def parse_throw(self) -> Throw:
        tok = self.advance()
        value = self.parse_expression()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after throw value")
        return Throw(value, line=tok.line, col=tok.column)

    # Declarations

    def parse_function(self) -> FuncDecl:
        """Parse `Func name(a, b) { ... }`. Parameters are bare identifiers."""
        func_tok = self.advance()
        name_tok = self.consume(
            TokenKind.IDENTIFIER, "Expected function name after 'Func'"
        )
        self.consume(TokenKind.LPAREN, "Expected '(' after function name")

        params: list[str] = []
        if not self.check(TokenKind.RPAREN):
            while True:
                param_tok = self.consume(TokenKind.IDENTIFIER, "Expected parameter name")
                params.append(param_tok.lexeme)
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RPAREN, "Expected ')' after parameters")

        body = self.parse_block("function")
        return FuncDecl(
            name_tok.lexeme, params, body, line=func_tok.line, col=func_tok.column
        )

    def parse_start(self) -> Start:
        """Parse the entry block `Start { ... } Return;`."""
        start_tok = self.advance()
        body = self.parse_block("Start")
        self.consume(TokenKind.RETURN, "Expected 'Return' after Start block")
        self.consume(TokenKind.SEMICOLON, "Expected ';' after 'Return'")
        return Start(body, line=start_tok.line, col=start_tok.column)

    def parse_struct(self) -> StructDecl:
        """Parse `Struct Name { field; field; }`."""
        struct_tok = self.advance()
        name_tok = self.consume(
            TokenKind.IDENTIFIER, "Expected struct name after 'Struct'"
        )
        self.consume(TokenKind.LBRACE, "Expected '{' to open struct body")

        fields: list[str] = []
        while not self.check(TokenKind.RBRACE) and not self.at_end():
            field_tok = self.consume(TokenKind.IDENTIFIER, "Expected struct field name")
            self.consume(TokenKind.SEMICOLON, "Expected ';' after struct field")
            fields.append(field_tok.lexeme)

        self.consume(TokenKind.RBRACE, "Expected '}' to close struct body")
        return StructDecl(
            name_tok.lexeme, fields, line=struct_tok.line, col=struct_tok.column
        )

    def parse_class(self) -> ClassDecl:
        class_tok = self.advance()
        name_tok = self.consume(TokenKind.IDENTIFIER, "Expected class name after 'Class'")
        body = self.parse_block("class")
        return ClassDecl(
            name_tok.lexeme, body, line=class_tok.line, col=class_tok.column
        )

    def parse_macro(self) -> Macro:
        """Parse `| name : ... |`, discarding every token between ':' and '|'."""
        pipe_tok = self.advance()
        name_tok = self.consume(TokenKind.IDENTIFIER, "Expected macro name after '|'")
        self.consume(TokenKind.COLON, "Expected ':' after macro name")

        skipped = 0
        while not self.check(TokenKind.PIPE) and not self.at_end():
            self.advance()
            skipped += 1
        self.consume(TokenKind.PIPE, f"Expected '|' to close macro '{name_tok.lexeme}'")

        logger.debug("Skipped %d tokens in macro %r", skipped, name_tok.lexeme)
        return Macro(name_tok.lexeme, line=pipe_tok.line, col=pipe_tok.column)

    # Concurrency and memory placeholders

    def parse_async(self) -> Async:
        tok = self.advance()
        return Async(self.parse_block("Async"), line=tok.line, col=tok.column)

    def parse_await(self) -> Await:
        tok = self.advance()
        value = self.parse_expression()
        self.consume(TokenKind.SEMICOLON, "Expected ';' after awaited expression")
        return Await(value, line=tok.line, col=tok.column)

    def parse_mutex(self) -> Mutex:
        tok = self.advance()
        return Mutex(self.parse_block("Mutex"), line=tok.line, col=tok.column)

    def parse_alloc(self) -> Alloc:
        """Parse `Alloc name(size);`."""
        tok = self.advance()
        name_tok = self.consume(TokenKind.IDENTIFIER, "Expected name after 'Alloc'")
        self.consume(TokenKind.LPAREN, "Expected '(' before allocation size")
        size = self.parse_expression()
        self.consume(TokenKind.RPAREN, "Expected ')' after allocation size")
        self.consume(TokenKind.SEMICOLON, "Expected ';' after Alloc")
        return Alloc(name_tok.lexeme, size, line=tok.line, col=tok.column)

    def parse_free(self) -> Free:
        tok = self.advance()
        name_tok = self.consume(TokenKind.IDENTIFIER, "Expected name after 'Free'")
        self.consume(TokenKind.SEMICOLON, "Expected ';' after Free")
        return Free(name_tok.lexeme, line=tok.line, col=tok.column)

    # Expressions

    def parse_expression(self) -> ASTNode:
        return self.parse_equality()

    def parse_binary_level(
        self, operators: tuple[TokenKind, ...], operand: Callable[[], ASTNode]
    ) -> ASTNode:
        """Parse one left-associative precedence level."""
        left = operand()
        while self.check(*operators):
            op_tok = self.advance()
            right = operand()
            left = BinaryExpr(
                left, op_tok.lexeme, right, line=op_tok.line, col=op_tok.column
            )
        return left

    def parse_equality(self) -> ASTNode:
        return self.parse_binary_level(EQUALITY_OPS, self.parse_comparison)

    def parse_comparison(self) -> ASTNode:
        return self.parse_binary_level(COMPARISON_OPS, self.parse_term)

    def parse_term(self) -> ASTNode:
        return self.parse_binary_level(TERM_OPS, self.parse_factor)

    def parse_factor(self) -> ASTNode:
        return self.parse_binary_level(FACTOR_OPS, self.parse_unary)

    def parse_unary(self) -> ASTNode:
        op_tok = self.match(*UNARY_OPS)
        if op_tok is not None:
            operand = self.parse_unary()
            return UnaryExpr(
                op_tok.lexeme, operand, line=op_tok.line, col=op_tok.column
            )
        return self.parse_primary()

    def parse_primary(self) -> ASTNode:
        tok = self.current()

        if tok.kind == TokenKind.NUMBER:
            self.advance()
            return Literal(tok.lexeme, "int", line=tok.line, col=tok.column)

        if tok.kind == TokenKind.STRING_LITERAL:
            self.advance()
            return Literal(tok.lexeme[1:-1], "string", line=tok.line, col=tok.column)

        if tok.kind == TokenKind.IDENTIFIER:
            self.advance()
            return Identifier(tok.lexeme, line=tok.line, col=tok.column)

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenKind.RPAREN, "Expected ')' after expression")
            return expr

        raise ParseError("Expected expression", tok)


def parse_program(tokens: list[Token]) -> ParseResult:
    """Parse `tokens`, returning the outcome as a value instead of raising.

    Returns:
        ParseSuccess wrapping the Program, or ParseFailure wrapping the first
        ParseError encountered. Input nested deeper than the interpreter's
        recursion limit allows is reported as a ParseError at the token where
        the descent stopped.
    """
    parser = Parser(tokens)
    try:
        program = parser.parse()
    except ParseError as err:
        logger.debug("Parse failed: %s", err)
        return ParseFailure(err)
    except RecursionError:
        err = ParseError("Expression or block nested too deeply", parser.current())
        logger.debug("Parse failed: %s", err)
        return ParseFailure(err)
    return ParseSuccess(program)


def parse_source(
    source: str, keywords: Mapping[str, TokenKind] | None = None
) -> ParseResult:
    """Tokenize `source` and parse it; see `parse_program`."""
    return parse_program(tokenize(source, keywords))


__all__ = [
    "ParseError",
    "ParseFailure",
    "ParseResult",
    "ParseSuccess",
    "Parser",
    "parse_program",
    "parse_source",
]
