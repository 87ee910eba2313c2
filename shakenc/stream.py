"""Chunked streaming driver.

The driver owns one reusable buffer and moves a source through it chunk by
chunk. Chunk boundaries are an I/O artifact only: transforms see consecutive
slices and their absolute offsets, so the output is the same for any buffer
size.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable, Optional

from .errors import LengthMismatchError, StreamIOError

logger = logging.getLogger(__name__)

ChunkTransform = Callable[[memoryview, int], None]
ChunkProducer = Callable[[memoryview], None]
ProgressCallback = Callable[[int], None]


class StreamDriver:
    """Read, transform and write a byte stream through a fixed-size buffer.

    Args:
        buffer_size: Chunk capacity in bytes. Must be positive.
    """

    def __init__(self, buffer_size: int) -> None:
        if not isinstance(buffer_size, int) or buffer_size <= 0:
            raise ValueError("buffer_size must be a positive integer")
        self.buffer_size = buffer_size
        self._buffer = bytearray(buffer_size)

    def run(
        self,
        source: BinaryIO,
        length: int,
        transform: ChunkTransform,
        *,
        sink: Optional[BinaryIO] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """Drive ``source`` to end-of-data.

        Each chunk is passed to ``transform(chunk, offset)`` and then written
        to ``sink`` when one is given. ``length`` is the source size learned
        when it was opened.

        Returns:
            Total bytes processed, always equal to ``length``.

        Raises:
            LengthMismatchError: If the source ends before ``length`` bytes,
                or yields more than ``length``. Excess bytes are neither
                transformed nor written.
            StreamIOError: If reading or writing fails.
        """

        if length < 0:
            raise ValueError("length must be non-negative")

        view = memoryview(self._buffer)
        processed = 0
        while True:
            try:
                read_len = source.readinto(view)
            except OSError as e:
                raise StreamIOError(f"read failed at byte {processed}: {e}") from e

            if not read_len:
                if processed != length:
                    raise LengthMismatchError(length, processed)
                logger.debug("end of stream after %d bytes", processed)
                return processed

            if processed + read_len > length:
                raise LengthMismatchError(length, processed + read_len)

            chunk = view[:read_len]
            transform(chunk, processed)
            if sink is not None:
                _write_all(sink, chunk, processed)
            processed += read_len
            if progress is not None:
                progress(read_len)

    def generate(
        self,
        sink: BinaryIO,
        length: int,
        produce: ChunkProducer,
        *,
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """Write ``length`` bytes produced chunk by chunk into ``sink``.

        ``produce(chunk)`` must fill the whole chunk; chunks are at most
        ``buffer_size`` bytes and only the last one is shorter.
        """

        if length < 0:
            raise ValueError("length must be non-negative")

        view = memoryview(self._buffer)
        processed = 0
        while processed != length:
            write_len = min(self.buffer_size, length - processed)
            chunk = view[:write_len]
            produce(chunk)
            _write_all(sink, chunk, processed)
            processed += write_len
            if progress is not None:
                progress(write_len)

        logger.debug("generated %d bytes", processed)
        return processed


def _write_all(sink: BinaryIO, chunk: memoryview, offset: int) -> None:
    try:
        written = sink.write(chunk)
        # raw (unbuffered) files may accept a short write
        while written is not None and written < len(chunk):
            if written == 0:
                raise StreamIOError(f"write failed at byte {offset}: sink accepted no bytes")
            offset += written
            chunk = chunk[written:]
            written = sink.write(chunk)
    except OSError as e:
        raise StreamIOError(f"write failed at byte {offset}: {e}") from e
