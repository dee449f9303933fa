"""
Token taxonomy and lexical tables for the CIAMS language.

This module is the single source of truth shared by the lexer, the parser and
the keyword alias mapper:

Contents:
    TokenKind: Closed enumeration of every token category.
    KEYWORD_KINDS: All reserved-word kinds, including those with no default spelling.
    KEYWORDS: Read-only default keyword table (spelling -> kind).
    SINGLE_CHAR_TOKENS: Characters that always form a token on their own.
    OPERATOR_CHARS: Characters that may start a two-character operator.
    TWO_CHAR_OPERATORS: Greedy two-character operator spellings.
    DISCARDED_KINDS: Kinds dropped before the token list reaches the parser.

The reserved taxonomy is much larger than the grammar the parser accepts; the
unused members are kept so later stages can claim them without renumbering.
"""

from enum import Enum, auto
from types import MappingProxyType


class TokenKind(Enum):
    # Core control flow
    START = auto()
    RETURN = auto()
    IF = auto()
    ELSE = auto()
    FOR = auto()
    WHILE = auto()
    LOOP = auto()
    REPEAT = auto()
    TRY = auto()
    CATCH = auto()
    THROW = auto()
    DEFER = auto()
    BREAK = auto()
    CONTINUE = auto()
    HALT = auto()
    PAUSE = auto()

    # Concurrency / sync
    ASYNC = auto()
    AWAIT = auto()
    MUTEX = auto()
    COROUTINE = auto()
    SCHEDULE = auto()
    EVENT = auto()
    TRIGGER = auto()
    WATCH = auto()
    LISTEN = auto()

    # Variables and declarations
    INIT = auto()
    LET = auto()
    VAL = auto()
    VAR = auto()
    CONST = auto()
    STATIC = auto()
    DYNAMIC = auto()
    INT = auto()
    FLOAT = auto()
    BOOL = auto()
    STRING = auto()
    CHAR = auto()
    NULLVAL = auto()
    TRUEVAL = auto()
    FALSEVAL = auto()

    # Memory and scope
    ALLOC = auto()
    FREE = auto()
    POINTER = auto()
    MEMORY = auto()
    REFERENCE = auto()
    SCOPE = auto()
    BOUNDARY = auto()
    SWEEP = auto()
    GARBAGE = auto()

    # Logic words
    AND = auto()
    OR = auto()
    XOR = auto()
    NAND = auto()
    NOR = auto()
    IMPLIES = auto()
    CONDITIONAL = auto()

    # Macro scripts
    MACRO_BEGIN = auto()
    MACRO_END = auto()
    TEXTURIZER = auto()
    INLINE_MACRO = auto()

    # Structures / data constructs
    STRUCT = auto()
    CLASS = auto()
    ENUM = auto()
    FUNC = auto()
    CALL = auto()
    TUPLE = auto()
    ARRAY = auto()
    LIST = auto()
    MATRIX = auto()
    VECTOR = auto()
    NODE = auto()
    CHILD = auto()
    BRANCH = auto()
    NEST = auto()

    # Categories, labels, descriptors
    CATEGORY = auto()
    LABEL = auto()
    DESCRIPTOR = auto()
    TYPEDEF = auto()

    # Files, I/O, runtime
    FILE = auto()
    FOLDER = auto()
    SOCKET = auto()
    API = auto()
    LINK = auto()
    BIND = auto()
    WRAP = auto()
    INTEROP = auto()
    INPUT = auto()
    OUTPUT = auto()
    IO = auto()
    OPEN = auto()
    CLOSE = auto()
    READ = auto()
    WRITE = auto()
    COMPILE = auto()
    RENDER = auto()
    REPLACE = auto()
    ACCEPT = auto()

    # Security
    ENCRYPT = auto()
    DECRYPT = auto()
    OBFUSCATE = auto()
    CIPHER = auto()
    PROXY = auto()
    FIREWALL = auto()
    SECURE = auto()
    UNSECURE = auto()
    PRIVATE = auto()
    PUBLIC = auto()
    DENY = auto()
    ALLOW = auto()
    BYPASS = auto()
    VALIDATE = auto()
    CONFIGURE = auto()

    # Event and task scheduling
    TASK = auto()
    ROUTINE = auto()
    SUBROUTINE = auto()
    FUNC_CALL = auto()
    SCHEDULER = auto()
    TIMER = auto()
    COUNTER = auto()
    CHECKPOINT = auto()
    EVENT_BLOCK = auto()
    TRIGGER_BLOCK = auto()

    # Diagnostics
    DEBUG = auto()
    INSPECT = auto()
    LOG = auto()
    TRACE = auto()
    ERROR = auto()
    WARNING = auto()
    ASSERT = auto()
    RAISE_FLAG = auto()
    WATCHDOG = auto()

    # Pattern matching
    MATCH = auto()
    CASE = auto()
    DEFAULT = auto()
    QUERY = auto()
    LOOKUP = auto()
    STATE = auto()
    TRUTH = auto()
    PROOF = auto()
    CONTEXT = auto()

    # Collections
    APPEND = auto()
    INSERT = auto()
    REMOVE = auto()
    REPLACE_ITEM = auto()
    COLLECT = auto()
    FILTER = auto()
    FOLD = auto()
    REDUCE = auto()
    MAP = auto()

    # Networking
    PING = auto()
    SEND = auto()
    RECEIVE = auto()
    CONNECT = auto()
    DISCONNECT = auto()
    LISTEN_SOCKET = auto()

    # Symbolic, meta, validation
    REFER = auto()
    CROSSREF = auto()
    RESOLVE = auto()
    RESULT = auto()
    CHECKSUM = auto()
    KEY = auto()
    SCALE = auto()
    WEIGHT = auto()

    # Flow modifiers
    ALT = auto()
    TRICKLE = auto()
    SUBVERT = auto()
    EXCEPT = auto()
    INSTEAD_OF = auto()
    SIMULATE = auto()
    ROTATE = auto()
    DELETE = auto()

    # Operators
    ASSIGN = auto()  # =
    IMMUTABLE_ASSIGN = auto()  # ==
    PLUS = auto()  # +
    MINUS = auto()  # -
    MUL = auto()  # *
    DIV = auto()  # /
    MOD = auto()  # %
    EXPONENT = auto()  # ^
    NOT = auto()  # !
    NEQ = auto()  # !=
    LT = auto()  # <
    GT = auto()  # >
    LE = auto()  # <=
    GE = auto()  # >=
    TRANSITION = auto()  # ->
    RAISE = auto()  # ~>
    CONFIG = auto()  # <~
    THROW_ARROW = auto()  # <-
    ROLLBACK = auto()  # <<
    RUN = auto()  # >>
    SPECIFIER = auto()  # @
    MODIFIER = auto()  # $
    PIPE = auto()  # |

    # Punctuation
    SEMICOLON = auto()
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()

    # Literals
    NUMBER = auto()
    STRING_LITERAL = auto()
    IDENTIFIER = auto()

    # Sentinels
    COMMENT = auto()
    MULTILINE_COMMENT = auto()
    END_OF_STREAM = auto()
    UNKNOWN = auto()


KEYWORD_KINDS: frozenset[TokenKind] = frozenset(
    kind
    for kind in TokenKind
    if TokenKind.START.value <= kind.value <= TokenKind.DELETE.value
)

KEYWORDS = MappingProxyType(
    {
        "Start": TokenKind.START,
        "Return": TokenKind.RETURN,
        "Init": TokenKind.INIT,
        "if": TokenKind.IF,
        "else": TokenKind.ELSE,
        "for": TokenKind.FOR,
        "while": TokenKind.WHILE,
        "try": TokenKind.TRY,
        "catch": TokenKind.CATCH,
        "throw": TokenKind.THROW,
        "Loop": TokenKind.LOOP,
        "Repeat": TokenKind.REPEAT,
        "Match": TokenKind.MATCH,
        "Case": TokenKind.CASE,
        "Default": TokenKind.DEFAULT,
        "Async": TokenKind.ASYNC,
        "Await": TokenKind.AWAIT,
        "Mutex": TokenKind.MUTEX,
        "Struct": TokenKind.STRUCT,
        "Class": TokenKind.CLASS,
        "Func": TokenKind.FUNC,
        "Alloc": TokenKind.ALLOC,
        "Free": TokenKind.FREE,
        "Break": TokenKind.BREAK,
        "Continue": TokenKind.CONTINUE,
        "Defer": TokenKind.DEFER,
    }
)

SINGLE_CHAR_TOKENS = MappingProxyType(
    {
        "(": TokenKind.LPAREN,
        ")": TokenKind.RPAREN,
        "{": TokenKind.LBRACE,
        "}": TokenKind.RBRACE,
        "[": TokenKind.LBRACKET,
        "]": TokenKind.RBRACKET,
        ";": TokenKind.SEMICOLON,
        ":": TokenKind.COLON,
        ".": TokenKind.DOT,
        ",": TokenKind.COMMA,
        "|": TokenKind.PIPE,
        "+": TokenKind.PLUS,
        "/": TokenKind.DIV,
        "%": TokenKind.MOD,
        "^": TokenKind.EXPONENT,
        "@": TokenKind.SPECIFIER,
        "$": TokenKind.MODIFIER,
    }
)

# Single-character fallback for characters that may open a two-character form.
# "~" has no fallback and lexes as UNKNOWN on its own.
OPERATOR_CHARS = MappingProxyType(
    {
        "-": TokenKind.MINUS,
        "<": TokenKind.LT,
        ">": TokenKind.GT,
        "=": TokenKind.ASSIGN,
        "!": TokenKind.NOT,
        "~": None,
    }
)

TWO_CHAR_OPERATORS = MappingProxyType(
    {
        "->": TokenKind.TRANSITION,
        "~>": TokenKind.RAISE,
        "<~": TokenKind.CONFIG,
        "<-": TokenKind.THROW_ARROW,
        "<<": TokenKind.ROLLBACK,
        ">>": TokenKind.RUN,
        "==": TokenKind.IMMUTABLE_ASSIGN,
        "!=": TokenKind.NEQ,
        "<=": TokenKind.LE,
        ">=": TokenKind.GE,
    }
)

DISCARDED_KINDS: frozenset[TokenKind] = frozenset(
    {TokenKind.COMMENT, TokenKind.MULTILINE_COMMENT}
)

__all__ = [
    "DISCARDED_KINDS",
    "KEYWORDS",
    "KEYWORD_KINDS",
    "OPERATOR_CHARS",
    "SINGLE_CHAR_TOKENS",
    "TWO_CHAR_OPERATORS",
    "TokenKind",
]
