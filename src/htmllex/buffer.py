from collections import deque


class SourceError(Exception):
    """Reading from the underlying character source failed."""


class CharSource:
    __slots__ = ("_buffers", "_chunk_size", "_last", "_reader", "_unread")

    def __init__(self, data=None, reader=None, chunk_size=4096):
        # read(0) returns "" which would look like end of input; -1 reads everything at once.
        if not isinstance(chunk_size, int) or (chunk_size <= 0 and chunk_size != -1):
            raise ValueError(f"chunk_size must be a positive int or -1, got {chunk_size!r}")
        self._buffers = deque()
        self._reader = reader
        self._chunk_size = chunk_size
        self._last = None
        self._unread = False
        if data:
            self.push_back(data)

    @classmethod
    def from_stream(cls, stream, chunk_size=4096):
        """Wrap a text stream; characters are pulled from it one chunk at a time."""
        if not hasattr(stream, "read"):
            raise TypeError(f"Expected a text stream, got {type(stream).__name__}")
        return cls(reader=stream.read, chunk_size=chunk_size)

    def push_back(self, chunk):
        if chunk:
            self._buffers.append([chunk, 0])

    def is_empty(self):
        self._discard_empty_prefix()
        if not self._buffers:
            self._fill()
        return not self._buffers

    def peek(self):
        if self.is_empty():
            return None
        chunk, index = self._buffers[0]
        return chunk[index]

    def next(self):
        if self.is_empty():
            self._last = None
            self._unread = False
            return None
        chunk, index = self._buffers[0]
        char = chunk[index]
        index += 1
        if index >= len(chunk):
            self._buffers.popleft()
        else:
            self._buffers[0][1] = index
        self._last = char
        self._unread = False
        return char

    def unread(self):
        """Push the last character returned by next() back onto the source."""
        if self._last is None or self._unread:
            raise SourceError("Nothing to unread")
        self._buffers.appendleft([self._last, 0])
        self._unread = True

    def _fill(self):
        if self._reader is None:
            return
        try:
            chunk = self._reader(self._chunk_size)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise SourceError(str(exc) or type(exc).__name__) from exc
        if not chunk:
            self._reader = None
            return
        if not isinstance(chunk, str):
            raise SourceError(f"Expected str from source, got {type(chunk).__name__}")
        self._buffers.append([chunk, 0])

    def _discard_empty_prefix(self):
        while self._buffers and self._buffers[0][1] >= len(self._buffers[0][0]):
            self._buffers.popleft()
