"""
Two stage export pipeline.

A producer thread drains a cursor page by page and sends every document
through a bounded channel. A consumer thread flattens each document and
writes one line per document, in cursor order. The first failure on either
side cancels the other side and is the error reported to the caller.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import IO, Any, Dict, Iterator, Optional

from .coercer import coerce_value, is_real_value
from .config import RunConfig
from .constants import CHANNEL_POLL_INTERVAL, DEFAULT_CHANNEL_CAPACITY
from .cursor import Cursor
from .errors import ConfigError, EstabError, FetchError, PipelineCancelled
from .flattener import flatten
from .resolver import resolve
from .writer import LineWriter

logger = logging.getLogger(__name__)


@dataclass
class ExportStats:
    """Counts reported by a finished export"""

    documents: int = 0
    rows: int = 0
    skipped: int = 0


class DocumentChannel:
    """
    Bounded single-producer, single-consumer handoff.

    send() blocks while the channel is full and drain() blocks while it is
    empty. Both re-check the cancellation event every poll_interval
    seconds. Once the producer has closed the channel, documents already
    sent are always handed to the consumer, even after cancellation.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY, poll_interval: float = CHANNEL_POLL_INTERVAL):
        if capacity < 1:
            raise ConfigError(f"Channel capacity must be at least 1, got {capacity}")
        self.poll_interval = poll_interval
        self._queue: "queue.Queue[Dict[str, Any]]" = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, document: Dict[str, Any], cancelled: threading.Event) -> None:
        if self._closed.is_set():
            raise RuntimeError("send on closed channel")
        while True:
            if cancelled.is_set():
                raise PipelineCancelled("Consumer stopped before the document was delivered")
            try:
                self._queue.put(document, timeout=self.poll_interval)
                return
            except queue.Full:
                continue

    def close(self) -> None:
        self._closed.set()

    def drain(self, cancelled: threading.Event) -> Iterator[Dict[str, Any]]:
        """Yield documents until the channel is closed and empty."""
        while True:
            if cancelled.is_set() and not self._closed.is_set():
                raise PipelineCancelled("Export cancelled while waiting for documents")
            try:
                document = self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._closed.is_set() and self._queue.empty():
                    return
                continue
            yield document


def produce(cursor: Cursor, channel: DocumentChannel, cancelled: threading.Event) -> int:
    """
    Publish every document of every page onto the channel.

    Runs until the cursor returns None. Cursor exceptions other than
    EstabError are raised as FetchError. The channel is closed exactly once,
    on success and on failure.

    Returns:
        Number of documents published
    """
    published = 0
    pages = 0
    try:
        while True:
            if cancelled.is_set():
                raise PipelineCancelled("Export cancelled before fetching the next page")

            try:
                page = cursor.next_page()
            except EstabError:
                raise
            except Exception as e:
                raise FetchError(f"Error fetching page {pages + 1}: {str(e)}") from e

            if page is None:
                logger.info(f"Fetched {pages} pages, {published} documents")
                return published

            pages += 1
            logger.debug(f"Page {pages}: {len(page)} documents")
            for document in page:
                channel.send(document, cancelled)
                published += 1
    finally:
        channel.close()


def _write_single_values(document: Dict[str, Any], config: RunConfig, writer: LineWriter) -> bool:
    value = resolve(document, config.paths[0])
    if config.skip_empty and not is_real_value(value, config.zero_as_null):
        return False
    tokens = coerce_value(value, config, config.fields[0])
    if tokens:
        writer.write_line("\n".join(tokens))
    return True


def consume(channel: DocumentChannel, config: RunConfig, writer: LineWriter, cancelled: threading.Event) -> ExportStats:
    """
    Write one line per document received from the channel.

    A document is fully rendered before anything is written, so a failing
    document leaves no partial line behind.

    Returns:
        ExportStats for the documents written or skipped
    """
    stats = ExportStats()
    for document in channel.drain(cancelled):
        stats.documents += 1

        if config.raw:
            writer.write_document(document)
        elif config.single_value:
            if not _write_single_values(document, config, writer):
                stats.skipped += 1
                continue
        else:
            row = flatten(document, config)
            if config.skip_empty and not row.has_data:
                logger.debug(f"Skipping document {stats.documents}: no value for any field")
                stats.skipped += 1
                continue
            writer.write_line(row.render(config.delimiter))
        stats.rows += 1

    return stats


def run_pipeline(
    cursor: Cursor,
    config: RunConfig,
    writer: LineWriter,
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    cancelled: Optional[threading.Event] = None,
) -> ExportStats:
    """
    Run producer and consumer concurrently until both finish.

    The first worker to fail sets the shared cancellation event. A
    PipelineCancelled raised by the other worker in response is shadowed
    by the original error, which is re-raised here.

    Args:
        cursor: Source of document pages
        config: Run configuration
        writer: Output sink, used by the consumer only
        capacity: Documents the producer may publish ahead of the consumer
        cancelled: Event to cancel the run from outside

    Returns:
        ExportStats from the consumer

    Raises:
        FetchError, MalformedValueError, WriteError: First failure of the run
        PipelineCancelled: If the run was cancelled from outside
    """
    channel = DocumentChannel(capacity)
    if cancelled is None:
        cancelled = threading.Event()

    first_error: Optional[BaseException] = None
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="estab") as executor:
        producer = executor.submit(produce, cursor, channel, cancelled)
        consumer = executor.submit(consume, channel, config, writer, cancelled)

        try:
            for future in as_completed((producer, consumer)):
                error = future.exception()
                if error is None:
                    continue
                cancelled.set()
                side = "producer" if future is producer else "consumer"
                if first_error is None:
                    first_error = error
                    logger.debug(f"{side} failed first: {error!r}")
                elif isinstance(first_error, PipelineCancelled) and not isinstance(error, PipelineCancelled):
                    first_error = error
        except BaseException:
            # Interrupted while waiting: stop both workers before the executor joins them
            cancelled.set()
            raise

    if first_error is not None:
        raise first_error

    stats = consumer.result()
    logger.info(f"Wrote {stats.rows} rows from {stats.documents} documents ({stats.skipped} skipped)")
    return stats


def export(
    cursor: Cursor,
    config: RunConfig,
    stream: IO[str],
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    cancelled: Optional[threading.Event] = None,
) -> ExportStats:
    """
    Export every document of a cursor to a text stream.

    Writes the header line first when configured (not in raw mode). The
    stream is flushed on every exit path; lines written before a failure
    stay in the stream.
    """
    with LineWriter(stream) as writer:
        if config.header and not config.raw:
            writer.write_line(config.header_line())
        return run_pipeline(cursor, config, writer, capacity=capacity, cancelled=cancelled)
