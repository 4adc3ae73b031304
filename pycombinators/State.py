import codecs
import logging
import warnings
from collections import Counter
from typing import Any, BinaryIO, Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

PREFILL_DEFAULT = 1024     # characters pulled from the source per refill
READ_CHUNK_DEFAULT = 4096  # bytes per read() on byte sources


class StreamError(Exception):
    """Misuse of a ParseState. Never a parse failure."""


class HoldError(StreamError):
    """A Hold was resolved twice or on a stream that did not issue it."""


class UnresolvedHoldError(HoldError):
    """A stream was closed while holds were still outstanding."""


class UnresolvedHoldWarning(RuntimeWarning):
    """Issued when a Hold is garbage collected without release() or reset()."""


class Hold:
    """
    A checkpoint in a ParseState.

    Every Hold must be passed exactly once to either ParseState.release()
    (keep what was consumed since) or ParseState.reset() (go back to it).
    """
    __slots__ = ("_state", "_ix", "_resolved")

    def __init__(self, state: 'ParseState', ix: int):
        self._state = state
        self._ix = ix
        self._resolved = False

    @property
    def index(self) -> int:
        """Absolute position the hold refers to."""
        return self._ix

    @property
    def resolved(self) -> bool:
        return self._resolved

    def __repr__(self) -> str:
        status = "resolved" if self._resolved else "open"
        return f"Hold({self._ix}, {status})"

    def __del__(self):
        if not self._resolved:
            warnings.warn(
                f"Dropped unresolved hold at index {self._ix}; "
                "every hold must be released or reset",
                UnresolvedHoldWarning,
            )


def _decode_utf8(reader: Any, chunk_size: int) -> Iterator[str]:
    """Yield text chunks from a byte source, skipping malformed sequences."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")
    read = getattr(reader, "read", None)
    chunks = iter(lambda: read(chunk_size), b"") if read is not None else iter(reader)
    for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


class ParseState:
    """
    A character stream with backtracking.

    Characters are pulled from the source in blocks of at most `prefill` and
    kept in a buffer; the unused part of a larger source piece waits until the
    next refill. Holds pin their position in the buffer; anything older than the
    oldest outstanding hold (and more than one character behind the cursor)
    is dropped the next time the buffer is refilled.
    """

    def __init__(self, source: Union[str, Iterable[str]], prefill: int = PREFILL_DEFAULT):
        if prefill <= 0:
            raise ValueError(f"prefill must be positive, got {prefill}")
        self.prefill = prefill
        if isinstance(source, (bytes, bytearray)):
            raise TypeError("byte input must go through ParseState.from_reader()")
        self._source: Optional[Iterator[str]] = iter(source)
        self._pending = ""  # rest of the last source piece
        self._pending_pos = 0
        self._buf: List[str] = []
        self._base = 0      # absolute index of _buf[0]
        self._current = 0   # cursor into _buf
        # absolute index -> number of outstanding holds there
        self._holds: Counter = Counter()
        self._outstanding = 0

    @classmethod
    def from_reader(cls,
                    reader: Union[BinaryIO, Iterable[bytes]],
                    prefill: int = PREFILL_DEFAULT,
                    chunk_size: int = READ_CHUNK_DEFAULT) -> 'ParseState':
        """
        Build a stream over UTF-8 encoded bytes.

        `reader` is either a binary file object (anything with read(n)) or an
        iterable of bytes chunks. Malformed byte sequences are skipped.
        """
        return cls(_decode_utf8(reader, chunk_size), prefill=prefill)

    # --- Position ---

    def index(self) -> int:
        """Return the absolute position in the input."""
        return self._base + self._current

    @property
    def outstanding_holds(self) -> int:
        return self._outstanding

    @property
    def retained(self) -> int:
        """Number of characters currently kept in the buffer."""
        return len(self._buf)

    def finished(self) -> bool:
        """True if the source is exhausted and every buffered char was consumed."""
        return self.peek() is None

    # --- Holds ---

    def hold(self) -> Hold:
        """Remember the current position and protect it from reclamation."""
        ix = self.index()
        self._holds[ix] += 1
        self._outstanding += 1
        return Hold(self, ix)

    def release(self, h: Hold) -> None:
        """Commit everything consumed since `h`."""
        self._resolve(h)

    def reset(self, h: Hold) -> None:
        """Move the cursor back to where `h` was taken."""
        self._resolve(h)
        self._current = h._ix - self._base

    def _resolve(self, h: Hold) -> None:
        if h._state is not self:
            raise HoldError(f"{h!r} was issued by a different stream")
        if h._resolved:
            raise HoldError(f"{h!r} was already released or reset")
        h._resolved = True
        self._outstanding -= 1
        self._holds[h._ix] -= 1
        if self._holds[h._ix] == 0:
            # floor may advance
            del self._holds[h._ix]

    def close(self) -> None:
        """Check that every hold taken on this stream was resolved."""
        if self._outstanding:
            raise UnresolvedHoldError(
                f"{self._outstanding} hold(s) still outstanding at index {self.index()}")

    def __enter__(self) -> 'ParseState':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()

    # --- Reading ---

    def next(self) -> Optional[str]:
        """Consume and return the next character, or None at end of input."""
        if self._current >= len(self._buf) and not self._fill():
            return None
        c = self._buf[self._current]
        self._current += 1
        return c

    def peek(self) -> Optional[str]:
        """Return the next character without consuming it."""
        if self._current < len(self._buf):
            return self._buf[self._current]
        c = self.next()
        if c is not None:
            self._current -= 1
        return c

    def undo_next(self) -> None:
        """Un-consume the last character returned by next()."""
        if self._current == 0:
            raise StreamError(f"nothing to undo at index {self.index()}")
        self._current -= 1

    def __iter__(self) -> 'ParseState':
        return self

    def __next__(self) -> str:
        c = self.next()
        if c is None:
            raise StopIteration
        return c

    def _fill(self) -> bool:
        """Append up to `prefill` characters to the buffer. False if none are left."""
        if self._source is None:
            return False
        self._reclaim()
        added = 0
        while added < self.prefill:
            if self._pending_pos >= len(self._pending):
                piece = next(self._source, None)
                if piece is None:
                    logger.debug("source exhausted at index %d", self._base + len(self._buf))
                    self._source = None
                    break
                self._pending, self._pending_pos = piece, 0
                continue
            end = self._pending_pos + self.prefill - added
            chunk = self._pending[self._pending_pos:end]
            self._pending_pos += len(chunk)
            self._buf.extend(chunk)
            added += len(chunk)
        return added > 0

    def _reclaim(self) -> None:
        floor = min(self._holds) if self._holds else self.index()
        # keep one character behind the cursor for undo_next()
        drop = min(floor - self._base, self._current - 1)
        if drop <= 0:
            return
        del self._buf[:drop]
        self._base += drop
        self._current -= drop
        logger.debug("reclaimed %d buffered chars, window now starts at %d", drop, self._base)

    def __repr__(self) -> str:
        return f"ParseState(index={self.index()}, retained={len(self._buf)}, holds={self._outstanding})"
