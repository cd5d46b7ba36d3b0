# 17.10.26

import time
import logging
import threading
from typing import List, Optional, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed


# External libraries
import httpx


# Internal utilities
from MovieDownloader.exceptions import Cancelled, TransferAborted
from MovieDownloader.utils.http_client import is_retryable_error
from MovieDownloader.source.utils.object import Segment
from MovieDownloader.source.utils.tracker import TransferTracker, TransferState


# Variable
logger = logging.getLogger(__name__)
CHUNK_SIZE = 65536
WAIT_STEP = 0.1


class SegmentDownloader:
    def __init__(self, client: httpx.Client, tracker: TransferTracker, max_workers: int = 8, max_retries: int = 4, backoff_factor: float = 0.5,
        max_backoff: float = 8.0, cancel_event: Optional[threading.Event] = None):
        """
        Fetch manifest segments with a fixed-size worker pool.

        Args:
            - client (httpx.Client): Shared client, its timeout applies to every request.
            - tracker (TransferTracker): Receives byte, segment and retry updates.
            - max_workers (int): Simultaneous segment fetches.
            - max_retries (int): Attempts per segment before giving up.
            - backoff_factor (float): First retry delay in seconds, doubled on each attempt.
            - max_backoff (float): Upper bound for a single retry delay.
            - cancel_event (threading.Event, optional): Set by the caller to stop the transfer.
        """
        self.client = client
        self.tracker = tracker
        self.max_workers = max(1, max_workers)
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.cancel_event = cancel_event or threading.Event()
        self.stop_event = threading.Event()

    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set() or self.stop_event.is_set()

    def get_backoff(self, attempt: int) -> float:
        return min(self.backoff_factor * (2 ** (attempt - 1)), self.max_backoff)

    def _wait(self, delay: float) -> bool:
        """Sleep up to delay seconds. Returns True as soon as the transfer is cancelled or stopped."""
        deadline = time.monotonic() + delay

        while not self.is_cancelled():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False

            # _stop() sets stop_event and wakes this at once, caller cancellation is polled
            self.stop_event.wait(min(remaining, WAIT_STEP))

        return True

    def _get(self, url: str) -> bytes:
        chunks = []

        with self.client.stream("GET", url) as response:
            response.raise_for_status()

            for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                if self.is_cancelled():
                    raise Cancelled(f"Fetch of {url} cancelled")

                chunks.append(chunk)
                self.tracker.add_bytes(len(chunk))

        return b"".join(chunks)

    def fetch(self, url: str, label: str) -> bytes:
        """
        Download one url with bounded retries and exponential backoff.

        Raises:
            Cancelled: The caller cancelled, or another segment already failed.
            TransferAborted: Retries exhausted or a non-retryable answer (e.g. 404).
        """
        for attempt in range(1, self.max_retries + 1):
            if self.is_cancelled():
                raise Cancelled(f"{label} cancelled")

            try:
                content = self._get(url)
                logger.debug(f"Downloaded {label} ({len(content)} bytes)")
                return content

            except httpx.HTTPError as e:
                if not is_retryable_error(e):
                    logger.error(f"{label} failed with a non-retryable error: {e}")
                    raise TransferAborted(f"{label} failed: {e}", cause=e, attempts=attempt) from e

                if attempt == self.max_retries:
                    logger.error(f"{label} permanently failed after {attempt} attempts")
                    raise TransferAborted(f"{label} failed after {attempt} attempts: {e}", cause=e, attempts=attempt) from e

                delay = self.get_backoff(attempt)
                logger.warning(f"{label} failed (attempt {attempt}/{self.max_retries}), retrying in {delay:.1f}s: {e}")
                self.tracker.retry()

                if self._wait(delay):
                    raise Cancelled(f"{label} cancelled during retry wait")

                self.tracker.set_state(TransferState.FETCHING)

        raise TransferAborted(f"{label} failed")

    def download_segment(self, segment: Segment) -> bytes:
        try:
            return self.fetch(segment.url, f"Segment {segment.number}")
        except TransferAborted as e:
            e.segment = segment.number
            raise

    def download_all(self, segments: Sequence[Segment]) -> List[bytes]:
        """
        Fetch every segment and return their contents indexed by manifest position.
        Completion order never affects the returned order.

        Raises:
            TransferAborted: A segment failed for good. Pending fetches are stopped.
            Cancelled: The caller cancelled (cancel_event or Ctrl+C).
        """
        buffer: List[Optional[bytes]] = [None] * len(segments)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.download_segment, segment): index for index, segment in enumerate(segments)}

            try:
                for future in as_completed(futures):
                    buffer[futures[future]] = future.result()
                    self.tracker.segment_done()

            except (TransferAborted, Cancelled):
                # Stop running workers, drop queued ones and what was buffered so far
                self._stop(executor, buffer)
                raise

            except KeyboardInterrupt as e:
                self._stop(executor, buffer)
                raise Cancelled("Download cancelled by user", cause=e) from e

        return buffer

    def _stop(self, executor: ThreadPoolExecutor, buffer: List[Optional[bytes]]) -> None:
        self.stop_event.set()
        executor.shutdown(wait=False, cancel_futures=True)
        buffer.clear()
