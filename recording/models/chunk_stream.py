"""
Chunk Stream

Append-only, finite sequence of encoded media chunks for one recording.
"""

import asyncio
from typing import AsyncIterator, List


class ChunkStream:
    """
    Chunks produced while recording is active.

    Any number of readers can iterate; each iteration starts from the first
    chunk and waits for new ones until the stream is closed. A closed
    stream never grows again: the next recording gets a new ChunkStream.

    Usage:
        async for chunk in recorder.chunks:
            upload(chunk)
    """

    def __init__(self):
        self.chunks: List[bytes] = []
        self._closed = False
        self._changed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    @property
    def total_bytes(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)

    def append(self, chunk: bytes) -> bool:
        """Add a chunk. Returns False once the stream is closed."""
        if self._closed:
            return False
        self.chunks.append(chunk)
        self._wake()
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._wake()

    def join(self) -> bytes:
        return b"".join(self.chunks)

    def _wake(self) -> None:
        self._changed.set()
        self._changed = asyncio.Event()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        index = 0
        while True:
            while index < len(self.chunks):
                yield self.chunks[index]
                index += 1
            if self._closed:
                return
            await self._changed.wait()
