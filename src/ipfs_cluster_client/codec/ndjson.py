"""Newline-delimited JSON framing for streamed cluster responses."""

from __future__ import annotations

import codecs
import json
from typing import Any, AsyncIterable, AsyncIterator, Callable, TypeVar

from ipfs_cluster_client.errors import DecodeError

T = TypeVar("T")


class LineDecoder:
    """Turns arbitrarily split UTF-8 byte chunks into complete text lines.

    Multi-byte characters cut by a chunk boundary are held back by the
    incremental decoder until their remaining bytes arrive. Both ``\\n`` and
    ``\\r\\n`` terminate a line; whitespace-only lines are dropped.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
        self._buffer = ""

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a chunk and return the lines it completed."""
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._buffer += self._decode(chunk, final=False)
        *lines, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in lines if line.strip()]

    def flush(self) -> list[str]:
        """End of stream: return the unterminated trailing line, if any."""
        self._buffer += self._decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return [tail.rstrip("\r")] if tail.strip() else []

    def _decode(self, data: bytes, final: bool) -> str:
        try:
            return self._decoder.decode(data, final=final)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"stream is not valid UTF-8: {exc}") from exc


def _parse_line(line: str, parse: Callable[[str], T]) -> T:
    try:
        return parse(line)
    except DecodeError as exc:
        if exc.line is None:
            exc.line = line
        raise
    except ValueError as exc:
        raise DecodeError(f"malformed line in stream: {line!r}", line=line) from exc


async def aiter_records(
    chunks: AsyncIterable[bytes],
    parse: Callable[[str], T] = json.loads,
) -> AsyncIterator[T]:
    """Lazily parse each non-blank line of ``chunks``, in arrival order.

    Single pass: the underlying iterable is consumed as records are pulled.
    A line that fails to parse raises ``DecodeError`` with ``line`` set;
    records yielded before it stay delivered. The source is closed on every
    exit path, including a consumer that stops early.
    """
    decoder = LineDecoder()
    try:
        async for chunk in chunks:
            for line in decoder.feed(chunk):
                yield _parse_line(line, parse)
        for line in decoder.flush():
            yield _parse_line(line, parse)
    finally:
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()


def parse_records(text: str, parse: Callable[[str], Any] = json.loads) -> list[Any]:
    """Parse an already buffered NDJSON body."""
    decoder = LineDecoder()
    lines = decoder.feed(text) + decoder.flush()
    return [_parse_line(line, parse) for line in lines]
