"""Bridge between push-style microphone callbacks and async recognizers."""

from __future__ import annotations

import asyncio
import logging

_logger = logging.getLogger("ce_translator.audio")


class AudioChunkStream:
    """Finite async iterator of audio chunks for a single capture.

    ``push`` may be called from any thread. ``close`` ends the stream after every
    chunk pushed before it has been delivered. A closed stream cannot be reopened;
    each capture creates a new one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self._closed = False
        self.chunks_received = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, chunk: bytes) -> None:
        if self._closed or not chunk:
            return
        try:
            self._loop.call_soon_threadsafe(self._enqueue, chunk)
        except RuntimeError:
            _logger.debug("audio_chunk_dropped", extra={"reason": "event loop closed"})

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, None)
        except RuntimeError:
            _logger.debug("audio_stream_close_dropped", extra={"reason": "event loop closed"})

    def _enqueue(self, chunk: bytes) -> None:
        self.chunks_received += 1
        self._queue.put_nowait(chunk)

    def __aiter__(self) -> AudioChunkStream:
        return self

    async def __anext__(self) -> bytes:
        chunk = await self._queue.get()
        if chunk is None:
            raise StopAsyncIteration
        return chunk
