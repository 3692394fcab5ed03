"""IO helpers for reading a top-level JSON array incrementally."""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Iterator

_WHITESPACE = " \t\n\r"
# a decode error this close to the end of the buffer may just be a cut token
_TAIL_SLACK = 32


class JSONStreamError(ValueError):
    """The byte stream is not a well-formed JSON array."""


def _may_be_truncated(exc: json.JSONDecodeError, buf: str) -> bool:
    if exc.msg.startswith("Unterminated string"):
        return True
    return len(buf) - exc.pos <= _TAIL_SLACK


@dataclass
class BufferStats:
    """High-water mark of decoded text held by :func:`iter_json_array`."""

    peak_chars: int = 0
    elements: int = 0

    def observe(self, size: int) -> None:
        if size > self.peak_chars:
            self.peak_chars = size


def iter_json_array(
    chunks: Iterable[bytes],
    stats: BufferStats | None = None,
    max_element_chars: int | None = None,
) -> Iterator[Any]:
    """Yield the elements of a JSON array spread across ``chunks``.

    Only the unconsumed tail of the text is retained between chunks, so memory
    is bounded by the chunk size plus the largest single element rather than
    the size of the whole document. Floats decode as :class:`Decimal`.

    A syntax error inside text already received fails at once instead of
    waiting for more data. ``max_element_chars`` caps how much text a single
    pending element may hold before the stream is rejected.
    """

    stats = stats if stats is not None else BufferStats()
    decoder = json.JSONDecoder(parse_float=Decimal)
    text_decoder = codecs.getincrementaldecoder("utf-8-sig")()
    source = iter(chunks)
    buf = ""
    pos = 0
    eof = False
    state = "open"

    def fill() -> bool:
        nonlocal buf, pos, eof
        if eof:
            return False
        chunk = next(source, None)
        if chunk is None:
            eof = True
        try:
            text = text_decoder.decode(chunk or b"", final=eof)
        except UnicodeDecodeError as exc:
            raise JSONStreamError(f"invalid UTF-8 in blob: {exc}") from exc
        buf = buf[pos:] + text
        pos = 0
        stats.observe(len(buf))
        return not eof or bool(text)

    def grow() -> None:
        # at least double the pending text before decoding it again
        target = 2 * (len(buf) - pos)
        while fill():
            pending = len(buf) - pos
            if max_element_chars is not None and pending > max_element_chars:
                raise JSONStreamError(f"array element exceeds {max_element_chars} characters")
            if pending >= target:
                return

    def next_significant() -> str:
        nonlocal pos
        while True:
            while pos < len(buf) and buf[pos] in _WHITESPACE:
                pos += 1
            if pos < len(buf):
                return buf[pos]
            if not fill() and eof and pos >= len(buf):
                return ""

    while True:
        char = next_significant()
        if state == "open":
            if char != "[":
                raise JSONStreamError("expected a JSON array at top level")
            pos += 1
            state = "first"
        elif state == "first" and char == "]":
            pos += 1
            state = "closed"
        elif state in ("first", "value"):
            if not char:
                raise JSONStreamError("unexpected end of data inside array")
            while True:
                try:
                    value, end = decoder.raw_decode(buf, pos)
                except json.JSONDecodeError as exc:
                    if eof or not _may_be_truncated(exc, buf):
                        raise JSONStreamError(str(exc)) from exc
                    grow()
                    continue
                # a value touching the end of the buffer may still be growing
                if end == len(buf) and not eof:
                    fill()
                    continue
                break
            pos = end
            stats.elements += 1
            yield value
            state = "separator"
        elif state == "separator":
            if char == ",":
                pos += 1
                state = "value"
            elif char == "]":
                pos += 1
                state = "closed"
            elif not char:
                raise JSONStreamError("unexpected end of data inside array")
            else:
                raise JSONStreamError(f"expected ',' or ']' but found {char!r}")
        else:
            if char:
                raise JSONStreamError("extra data after the closing ']'")
            return


__all__ = ["BufferStats", "JSONStreamError", "iter_json_array"]
