import logging

from errors import LexError
from values import I64_MAX

logger = logging.getLogger(__name__)

BUILTIN_NAMES = (
    "join", "split", "count", "length", "uppercase", "lowercase", "trim", "replace",
    "push", "pop", "first", "last", "read_file", "write_file",
)

KEYWORDS = {
    "print": "PRINT",
    "true": "TRUE",
    "false": "FALSE",
    "if": "IF",
    "else": "ELSE",
    "elseif": "ELSEIF",
    "while": "WHILE",
    "for": "FOR",
}

SINGLE_CHAR_TOKENS = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    ";": "SEMI",
    ",": "COMMA",
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACKET",
    "]": "RBRACKET",
    "{": "LBRACE",
    "}": "RBRACE",
}

# char -> (single kind or None, kind when followed by the pair char, pair char)
PAIRED_TOKENS = {
    "=": ("ASSIGN", "EQEQ", "="),
    "!": ("NOT", "NOTEQ", "="),
    "<": ("LT", "LTE", "="),
    ">": ("GT", "GTE", "="),
    "&": (None, "AND", "&"),
    "|": (None, "OR", "|"),
}

TOKEN_KINDS = frozenset(
    ["NUMBER", "STRING", "IDENT", "BUILTIN", "SLASH", "EOF"]
    + list(KEYWORDS.values())
    + list(SINGLE_CHAR_TOKENS.values())
    + [kind for single, double, _ in PAIRED_TOKENS.values() for kind in (single, double) if kind]
)


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def describe(self):
        # human-readable form for error messages
        if self.type == "EOF":
            return "end of input"
        if self.type == "STRING":
            return f'string "{self.value}"'
        if self.value is not None:
            return f"{self.type.lower()} '{self.value}'"
        return f"'{token_text(self.type)}'"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.type == other.type and self.value == other.value

    def __hash__(self):
        return hash((self.type, self.value))

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"


def token_text(kind):
    """Source spelling of a fixed token kind (``"LBRACE"`` -> ``"{"``)."""
    for text, k in SINGLE_CHAR_TOKENS.items():
        if k == kind:
            return text
    for ch, (single, double, pair) in PAIRED_TOKENS.items():
        if kind == single:
            return ch
        if kind == double:
            return ch + pair
    for word, k in KEYWORDS.items():
        if k == kind:
            return word
    if kind == "SLASH":
        return "/"
    return kind


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char.isspace():
            self.advance()

    def skip_comment(self):
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and (self.current_char.isalpha() or self.current_char == "_"):
            result += self.current_char
            self.advance()

        if result in KEYWORDS:
            return Token(KEYWORDS[result], line=start_line, column=start_col)
        if result in BUILTIN_NAMES:
            return Token("BUILTIN", result, line=start_line, column=start_col)
        return Token("IDENT", result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while self.current_char is not None and is_digit(self.current_char):
            result += self.current_char
            self.advance()

        value = int(result)
        if value > I64_MAX:
            raise LexError(f"Integer literal out of range: {result}", start_line, start_col)
        return Token("NUMBER", value, line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""
        while self.current_char is not None and self.current_char != '"':
            result += self.current_char
            self.advance()

        if self.current_char is None:
            raise LexError("Unterminated string literal", start_line, start_col)

        self.advance()  # skip closing quote
        return Token("STRING", result, line=start_line, column=start_col)

    def read_operator(self):
        start_line, start_col = self.line, self.column
        ch = self.current_char
        single, double, pair = PAIRED_TOKENS[ch]
        if self.peek() == pair:
            self.advance()
            self.advance()
            return Token(double, line=start_line, column=start_col)
        if single is None:
            raise LexError(f"Expected '{ch}{pair}', got a single '{ch}'", start_line, start_col)
        self.advance()
        return Token(single, line=start_line, column=start_col)

    def next_token(self):
        while self.current_char is not None:
            if self.current_char.isspace():
                self.skip_whitespace()
                continue

            if self.current_char == "/":
                if self.peek() == "/":
                    self.skip_comment()
                    continue
                tok = Token("SLASH", line=self.line, column=self.column)
                self.advance()
                return tok

            if self.current_char.isalpha() or self.current_char == "_":
                return self.read_identifier()

            if is_digit(self.current_char):
                return self.read_number()

            if self.current_char == '"':
                return self.read_string()

            if self.current_char in PAIRED_TOKENS:
                return self.read_operator()

            if self.current_char in SINGLE_CHAR_TOKENS:
                tok = Token(SINGLE_CHAR_TOKENS[self.current_char], line=self.line, column=self.column)
                self.advance()
                return tok

            raise LexError(f"Unknown character: {self.current_char!r}", self.line, self.column)

        # EOF repeats forever so the parser can always ask for one more
        return Token("EOF", line=self.line, column=self.column)

    def tokens(self):
        while True:
            tok = self.next_token()
            logger.debug("token %r at %d:%d", tok, tok.line, tok.column)
            yield tok
            if tok.type == "EOF":
                return

    def __iter__(self):
        return self.tokens()


def is_digit(ch):
    return "0" <= ch <= "9"
