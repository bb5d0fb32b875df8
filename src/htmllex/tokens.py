from enum import IntEnum


class TokenKind(IntEnum):
    ERROR = 0
    EOF = 1
    START_TAG = 2
    END_TAG = 3
    ATTRIBUTE_NAME = 4
    ATTRIBUTE_VALUE = 5
    TEXT = 6


_LABELS = {
    TokenKind.START_TAG: "start tag: \t",
    TokenKind.END_TAG: "end tag: \t",
    TokenKind.ATTRIBUTE_NAME: "attr name: \t",
    TokenKind.ATTRIBUTE_VALUE: "attr val: \t",
    TokenKind.TEXT: "text: \t\t",
}


class Token:
    """A single lexical unit. Tokens are immutable once built."""

    __slots__ = ("kind", "value")

    def __init__(self, kind, value=None):
        if kind == TokenKind.EOF:
            value = None
        elif value is None:
            value = ""
        object.__setattr__(self, "kind", TokenKind(kind))
        object.__setattr__(self, "value", value)

    def __setattr__(self, name, value):
        raise AttributeError(f"Token is immutable, cannot set {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"Token is immutable, cannot delete {name!r}")

    @property
    def is_terminal(self):
        return self.kind == TokenKind.EOF or self.kind == TokenKind.ERROR

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __hash__(self):
        return hash((self.kind, self.value))

    def __repr__(self):
        if self.kind == TokenKind.EOF:
            return "Token(EOF)"
        return f"Token({self.kind.name}, {self.value!r})"

    def __str__(self):
        if self.kind == TokenKind.EOF:
            return "EOF"
        if self.kind == TokenKind.ERROR:
            return self.value
        return f"{_LABELS[self.kind]}{self.value}"


def start_tag(name):
    return Token(TokenKind.START_TAG, name)


def end_tag(name):
    return Token(TokenKind.END_TAG, name)


def attribute_name(name):
    return Token(TokenKind.ATTRIBUTE_NAME, name)


def attribute_value(value):
    return Token(TokenKind.ATTRIBUTE_VALUE, value)


def text(data):
    return Token(TokenKind.TEXT, data)


def error(message):
    return Token(TokenKind.ERROR, message)


EOF_TOKEN = Token(TokenKind.EOF)
