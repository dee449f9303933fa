"""
Defines the abstract syntax tree (AST) node structure for the CIAMS language.

Classes:
    ASTNode:
        Base class of every node. Tracks the source position of the node's defining
        token and provides structural equality, a readable repr and dict serialization.

    Statement nodes:
        Program, Init, Assign, If, For, While, Loop, Repeat, TryCatch, Return,
        FuncDecl, Macro, Match, MatchCase, Start, Throw, Break, Continue, Async,
        Await, Mutex, StructDecl, ClassDecl, Alloc, Free

    Expression nodes:
        BinaryExpr, UnaryExpr, Literal, Identifier

Each node declares its fields in `_fields`; that set is exhaustive, so consumers
may rely on no other attributes being populated. The parser builds a strict
tree: every node sits in exactly one parent slot and nothing is shared.

Usage:
    This module is the output contract of the parser. Test suites compare nodes
    structurally, or compare `to_dict()` output with positions stripped.

Example:
    node = Init("x", Literal("1", "int", line=1, col=10), line=1, col=1)
"""

from collections.abc import Iterator
from typing import Any

ASTDict = dict[str, Any]


class ASTNode:
    """
    Base class of all CIAMS AST nodes.

    Attributes:
        kind (str): Node tag (e.g. "init", "binary").
        line (int): Source line of the node's defining token.
        col (int): Source column of the node's defining token.
    """

    kind: str = "node"
    _fields: tuple[str, ...] = ()

    def __init__(self, line: int = 0, col: int = 0) -> None:
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        parts = [f"{name}={getattr(self, name)!r}" for name in self._fields]
        return f"{type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if type(self) is not type(other):
            return False
        return (
            self.line == other.line
            and self.col == other.col
            and all(getattr(self, f) == getattr(other, f) for f in self._fields)
        )

    __hash__ = None  # type: ignore[assignment]

    def children(self) -> Iterator["ASTNode"]:
        """Yields the direct child nodes in field order."""
        for name in self._fields:
            value = getattr(self, name)
            if isinstance(value, ASTNode):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, ASTNode):
                        yield item

    def walk(self) -> Iterator["ASTNode"]:
        """Yields this node and every descendant, depth-first.

        Uses an explicit stack, so long operator chains do not hit the
        interpreter's recursion limit.
        """
        stack: list[ASTNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    def to_dict(self) -> ASTDict:
        """
        Serializes the subtree to nested dicts and lists.

        Keys are "kind", then each field in `_fields` order, then "line" and
        "col". Child slots are filled from an explicit work stack rather than
        by recursion.
        """
        root: ASTDict = {}
        pending: list[tuple[ASTNode, ASTDict]] = [(self, root)]
        while pending:
            node, result = pending.pop()
            result["kind"] = node.kind
            for name in node._fields:
                value = getattr(node, name)
                if isinstance(value, ASTNode):
                    slot: ASTDict = {}
                    result[name] = slot
                    pending.append((value, slot))
                elif isinstance(value, list):
                    items: list[Any] = []
                    for item in value:
                        if isinstance(item, ASTNode):
                            item_slot: ASTDict = {}
                            items.append(item_slot)
                            pending.append((item, item_slot))
                        else:
                            items.append(item)
                    result[name] = items
                else:
                    result[name] = value
            result["line"] = node.line
            result["col"] = node.col
        return root


# Expressions


class Literal(ASTNode):
    """A number or string literal; `literal_type` is "int" or "string"."""

    kind = "literal"
    _fields = ("value", "literal_type")

    def __init__(self, value: str, literal_type: str, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.value = value
        self.literal_type = literal_type


class Identifier(ASTNode):
    kind = "identifier"
    _fields = ("name",)

    def __init__(self, name: str, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name


class BinaryExpr(ASTNode):
    """A left-associative binary operation; positioned at the operator token."""

    kind = "binary"
    _fields = ("left", "operator", "right")

    def __init__(
        self, left: ASTNode, operator: str, right: ASTNode, line: int = 0, col: int = 0
    ):
        super().__init__(line, col)
        self.left = left
        self.operator = operator
        self.right = right


class UnaryExpr(ASTNode):
    """A prefix `!` or `-` applied to a single operand."""

    kind = "unary"
    _fields = ("operator", "operand")

    def __init__(self, operator: str, operand: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.operator = operator
        self.operand = operand


# Statements


class Program(ASTNode):
    """Root of a parse: the ordered top-level statements."""

    kind = "program"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode] | None = None, line: int = 1, col: int = 1):
        super().__init__(line, col)
        self.body: list[ASTNode] = body if body is not None else []


class Init(ASTNode):
    """Binds a new name: `Init x = expr;`."""

    kind = "init"
    _fields = ("name", "initializer")

    def __init__(self, name: str, initializer: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
        self.initializer = initializer


class Assign(ASTNode):
    """Rebinds a name: `x = expr;`. Prior existence is not checked."""

    kind = "assign"
    _fields = ("name", "value")

    def __init__(self, name: str, value: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
        self.value = value


class If(ASTNode):
    kind = "if"
    _fields = ("condition", "then_body", "else_body")

    def __init__(
        self,
        condition: ASTNode,
        then_body: list[ASTNode],
        else_body: list[ASTNode] | None = None,
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(line, col)
        self.condition = condition
        self.then_body = then_body
        self.else_body = else_body


class For(ASTNode):
    """C-style loop; every header part is optional, the initializer is an Init."""

    kind = "for"
    _fields = ("initializer", "condition", "increment", "body")

    def __init__(
        self,
        initializer: Init | None,
        condition: ASTNode | None,
        increment: ASTNode | None,
        body: list[ASTNode],
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(line, col)
        self.initializer = initializer
        self.condition = condition
        self.increment = increment
        self.body = body


class While(ASTNode):
    kind = "while"
    _fields = ("condition", "body")

    def __init__(
        self, condition: ASTNode, body: list[ASTNode], line: int = 0, col: int = 0
    ):
        super().__init__(line, col)
        self.condition = condition
        self.body = body


class Loop(ASTNode):
    """Unconditional repetition; left only through Break or Continue."""

    kind = "loop"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.body = body


class Repeat(ASTNode):
    """Same shape as Loop, kept as its own kind so later stages can tell them apart."""

    kind = "repeat"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.body = body


class TryCatch(ASTNode):
    kind = "try"
    _fields = ("try_body", "catch_body")

    def __init__(
        self,
        try_body: list[ASTNode],
        catch_body: list[ASTNode],
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(line, col)
        self.try_body = try_body
        self.catch_body = catch_body


class Return(ASTNode):
    kind = "return"


class Break(ASTNode):
    kind = "break"


class Continue(ASTNode):
    kind = "continue"


class FuncDecl(ASTNode):
    kind = "func"
    _fields = ("name", "parameters", "body")

    def __init__(
        self,
        name: str,
        parameters: list[str],
        body: list[ASTNode],
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(line, col)
        self.name = name
        self.parameters = parameters
        self.body = body


class Macro(ASTNode):
    """A `| name : ... |` region. The body tokens are skipped, not stored."""

    kind = "macro"
    _fields = ("name",)

    def __init__(self, name: str, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name


class MatchCase(ASTNode):
    kind = "case"
    _fields = ("pattern", "body")

    def __init__(
        self, pattern: ASTNode, body: list[ASTNode], line: int = 0, col: int = 0
    ):
        super().__init__(line, col)
        self.pattern = pattern
        self.body = body


class Match(ASTNode):
    kind = "match"
    _fields = ("subject", "cases", "default_body")

    def __init__(
        self,
        subject: ASTNode,
        cases: list[MatchCase],
        default_body: list[ASTNode] | None = None,
        line: int = 0,
        col: int = 0,
    ):
        super().__init__(line, col)
        self.subject = subject
        self.cases = cases
        self.default_body = default_body


class Start(ASTNode):
    """Program entry block: `Start { ... } Return;`."""

    kind = "start"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.body = body


class Throw(ASTNode):
    kind = "throw"
    _fields = ("value",)

    def __init__(self, value: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.value = value


class Async(ASTNode):
    """Placeholder for an asynchronous block; never scheduled by the front end."""

    kind = "async"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.body = body


class Await(ASTNode):
    kind = "await"
    _fields = ("value",)

    def __init__(self, value: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.value = value


class Mutex(ASTNode):
    kind = "mutex"
    _fields = ("body",)

    def __init__(self, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.body = body


class StructDecl(ASTNode):
    kind = "struct"
    _fields = ("name", "fields")

    def __init__(self, name: str, fields: list[str], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
        self.fields = fields


class ClassDecl(ASTNode):
    kind = "class"
    _fields = ("name", "body")

    def __init__(self, name: str, body: list[ASTNode], line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
        self.body = body


class Alloc(ASTNode):
    kind = "alloc"
    _fields = ("name", "size")

    def __init__(self, name: str, size: ASTNode, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
        self.size = size


class Free(ASTNode):
    kind = "free"
    _fields = ("name",)

    def __init__(self, name: str, line: int = 0, col: int = 0):
        super().__init__(line, col)
        self.name = name
