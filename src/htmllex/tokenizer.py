from collections import deque
from enum import IntEnum

from .buffer import CharSource, SourceError
from .tokens import EOF_TOKEN, Token, TokenKind


class State(IntEnum):
    DATA = 0
    TAG_OPEN = 1
    TAG_NAME = 2
    END_TAG = 3
    BEFORE_ATTRIBUTE_NAME = 4
    ATTRIBUTE_NAME = 5
    ATTRIBUTE_VALUE = 6
    SELF_CLOSING_START_TAG = 7
    DONE = 8


class LexError(Exception):
    """Raised in strict mode once the terminal Error token has been produced."""

    def __init__(self, token):
        super().__init__(token.value)
        self.token = token
        self.message = token.value


class TokenizerOpts:
    __slots__ = (
        "debug",
        "emit_trailing_text",
        "reject_unterminated_values",
        "resume_after_self_closing",
        "strict",
    )

    def __init__(
        self,
        debug=False,
        strict=False,
        resume_after_self_closing=False,
        reject_unterminated_values=False,
        emit_trailing_text=False,
    ):
        self.debug = bool(debug)
        self.strict = bool(strict)
        # Behaviour switches; all off keeps the historical token stream.
        self.resume_after_self_closing = bool(resume_after_self_closing)
        self.reject_unterminated_values = bool(reject_unterminated_values)
        self.emit_trailing_text = bool(emit_trailing_text)


# Information separators count as whitespace for str.isspace() but not in markup.
_NOT_SPACE = "\x1c\x1d\x1e\x1f"


def _is_space(c):
    return c.isspace() and c not in _NOT_SPACE


def _as_source(source):
    if isinstance(source, CharSource):
        return source
    if isinstance(source, str):
        return CharSource(source)
    if hasattr(source, "read"):
        return CharSource.from_stream(source)
    raise TypeError(f"Cannot tokenize {type(source).__name__}; expected str, CharSource or text stream")


class Tokenizer:
    """Single-run finite state machine turning characters into tokens.

    ``run()`` collects every token into ``self.tokens``; ``iter_tokens()``
    hands them out lazily, advancing the machine one state per pull. Either
    may be called once per instance.
    """

    __slots__ = ("_at_eof", "_pending", "_read_error", "_started", "buffer", "opts", "source", "state", "tokens")

    def __init__(self, source, opts=None):
        self.source = _as_source(source)
        self.opts = opts or TokenizerOpts()
        self.state = State.DATA
        self.buffer = []
        self.tokens = []
        self._pending = deque()
        self._read_error = None
        self._started = False
        self._at_eof = False

    def run(self):
        tokens = self.tokens
        for token in self.iter_tokens():
            tokens.append(token)
        return tokens

    def iter_tokens(self):
        if self._started:
            raise RuntimeError("Tokenizer instances are single-use")
        self._started = True
        return self._drive()

    def __iter__(self):
        return self.iter_tokens()

    def _drive(self):
        pending = self._pending
        last = None
        while self.state != State.DONE:
            if self._step():
                self._switch(State.DONE)
            while pending:
                last = pending.popleft()
                yield last
        if self.opts.strict and last is not None and last.kind == TokenKind.ERROR:
            raise LexError(last)

    def _step(self):
        state = self.state
        if state == State.DATA:
            return self._state_data()
        if state == State.TAG_OPEN:
            return self._state_tag_open()
        if state == State.TAG_NAME:
            return self._state_tag_name()
        if state == State.END_TAG:
            return self._state_end_tag()
        if state == State.BEFORE_ATTRIBUTE_NAME:
            return self._state_before_attribute_name()
        if state == State.ATTRIBUTE_NAME:
            return self._state_attribute_name()
        if state == State.ATTRIBUTE_VALUE:
            return self._state_attribute_value()
        if state == State.SELF_CLOSING_START_TAG:
            return self._state_self_closing_start_tag()
        raise AssertionError(f"No handler for state {state!r}")

    # ---------------------
    # State handlers
    # ---------------------

    def _state_data(self):
        if self._at_eof:
            self._emit(EOF_TOKEN)
            return True
        if self._skip_whitespace():
            buffer = self.buffer
            while True:
                c = self._get_char()
                if c is None:
                    break
                if c == "<":
                    self._flush_text()
                    self._switch(State.TAG_OPEN)
                    return False
                buffer.append(c)
        if self._read_error is not None:
            return self._fail("EOF in data")
        if self.opts.emit_trailing_text and self.buffer:
            # EOF follows on the next step.
            self._flush_text()
            self._at_eof = True
            return False
        self.buffer.clear()
        self._emit(EOF_TOKEN)
        return True

    def _state_tag_open(self):
        c = self._get_char()
        if c is None:
            # A lone '<' is never valid markup.
            return self._fail("EOF after <")
        self.buffer.clear()
        if c == "/":
            self._switch(State.END_TAG)
            return False
        self._append_tag_name(c)
        self._switch(State.TAG_NAME)
        return False

    def _state_tag_name(self):
        while True:
            c = self._get_char()
            if c is None:
                return self._fail("EOF in tag name")
            if c == ">" or c == "/" or _is_space(c):
                self._emit_buffer(TokenKind.START_TAG)
                if c == ">":
                    self._switch(State.DATA)
                    return False
                if c == "/":
                    if not self.opts.resume_after_self_closing:
                        return True
                    self._switch(State.SELF_CLOSING_START_TAG)
                    return False
                self._switch(State.BEFORE_ATTRIBUTE_NAME)
                return False
            self._append_tag_name(c)

    def _state_self_closing_start_tag(self):
        c = self._get_char()
        if c != ">":
            return self._fail("Expected > after /")
        self._switch(State.DATA)
        return False

    def _state_end_tag(self):
        buffer = self.buffer
        while True:
            c = self._get_char()
            if c is None:
                return self._fail("EOF in end tag")
            if c == ">":
                self._emit_buffer(TokenKind.END_TAG)
                self._switch(State.DATA)
                return False
            buffer.append(c)

    def _state_before_attribute_name(self):
        if not self._skip_whitespace():
            return self._fail("EOF before attribute name")
        c = self._get_char()
        if c is None:
            return self._fail("EOF before attribute name")
        if c == ">":
            self._switch(State.DATA)
            return False
        if c.isalpha():
            self.buffer.append(c)
            self._switch(State.ATTRIBUTE_NAME)
            return False
        return self._fail("Unexpected character before attribute name")

    def _state_attribute_name(self):
        buffer = self.buffer
        while True:
            c = self._get_char()
            if c is None:
                return self._fail("EOF in attribute name")
            if c == "=" or _is_space(c):
                self._emit_buffer(TokenKind.ATTRIBUTE_NAME)
                self._switch(State.ATTRIBUTE_VALUE)
                return False
            buffer.append(c)

    def _state_attribute_value(self):
        quote = self._get_char()
        if quote != '"' and quote != "'":
            return self._fail("Expected quote to open attribute value")
        buffer = self.buffer
        while True:
            c = self._get_char()
            if c is None:
                if self.opts.reject_unterminated_values:
                    return self._fail("EOF in attribute value")
                break
            if c == quote:
                break
            buffer.append(c)
        self._emit_buffer(TokenKind.ATTRIBUTE_VALUE)
        self._switch(State.BEFORE_ATTRIBUTE_NAME)
        return False

    # ---------------------
    # Low-level helpers
    # ---------------------

    def _get_char(self):
        if self._read_error is not None:
            return None
        try:
            return self.source.next()
        except SourceError as exc:
            self._read_error = str(exc)
            self._debug(f"Read failure: {exc}")
            return None

    def _skip_whitespace(self):
        """Consume a run of whitespace. Returns False if input ran out."""
        while True:
            c = self._get_char()
            if c is None:
                return False
            if not _is_space(c):
                break
        self.source.unread()
        return True

    def _append_tag_name(self, c):
        if "A" <= c <= "Z":
            c = chr(ord(c) + 32)
        self.buffer.append(c)

    def _flush_text(self):
        if not self.buffer:
            return
        self._emit_buffer(TokenKind.TEXT)

    def _emit_buffer(self, kind):
        value = "".join(self.buffer)
        self.buffer.clear()
        self._emit(Token(kind, value))

    def _emit(self, token):
        if self.opts.debug:
            self._debug(f"Token: {token!r}")
        self._pending.append(token)

    def _fail(self, message):
        if self._read_error is not None:
            message = f"Read failure: {self._read_error}"
        self.buffer.clear()
        self._emit(Token(TokenKind.ERROR, message))
        return True

    def _switch(self, state):
        if self.opts.debug:
            self._debug(f"State: {self.state.name} -> {state.name}")
        self.state = state

    def _debug(self, message):
        if self.opts.debug:
            print(message)


def tokenize(html, opts=None):
    """Tokenize ``html`` (a str, text stream or CharSource) into a list of tokens."""
    return Tokenizer(html, opts).run()


def iter_tokens(html, opts=None):
    """Lazily tokenize ``html``; tokens are produced as the caller pulls them."""
    return Tokenizer(html, opts).iter_tokens()
