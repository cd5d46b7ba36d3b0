# 17.10.26

import os
import time
import logging
import tempfile
import threading
from typing import Callable, Dict, Iterable, List, Optional


# External libraries
import httpx


# Internal utilities
from MovieDownloader.exceptions import Cancelled, MovieDownloaderError, SinkUnwritable, TransferAborted
from MovieDownloader.source.decrypt import Decryptor
from MovieDownloader.source.utils.object import KeyInfo, Manifest
from MovieDownloader.source.utils.tracker import TransferTracker, TransferState


# Logic
from .segments import SegmentDownloader


# Variable
logger = logging.getLogger(__name__)
RENAME_ATTEMPTS = 5


class TransferResult:
    def __init__(self, tracker: TransferTracker, path: Optional[str] = None, size: int = 0, error: Optional[MovieDownloaderError] = None):
        self.tracker = tracker
        self.path = path
        self.size = size
        self.error = error

    @property
    def success(self) -> bool:
        return self.error is None and self.path is not None

    @property
    def state(self) -> TransferState:
        return self.tracker.state

    def raise_for_error(self) -> "TransferResult":
        if self.error is not None:
            raise self.error
        return self

    def __repr__(self):
        if self.success:
            return f"TransferResult(path='{self.path}', size={self.size})"
        return f"TransferResult(error={self.error.kind}: {self.error})"


class TransferEngine:
    def __init__(self, client: httpx.Client, max_workers: int = 8, max_retries: int = 4, backoff_factor: float = 0.5, max_backoff: float = 8.0):
        self.client = client
        self.max_workers = max_workers
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff

    def download(self, manifest: Manifest, destination: str, cancel_event: Optional[threading.Event] = None,
        on_progress: Optional[Callable[[TransferTracker], None]] = None) -> TransferResult:
        """
        Fetch every segment of the manifest and write them, in declared order, to destination.

        The file shows up at destination only once it is complete: bytes go to a temporary
        file in the same directory which is renamed over destination at the end.

        Parameters:
            - manifest (Manifest): Output of the playlist resolver, consumed once.
            - destination (str): Final file path. Its directory must exist.
            - cancel_event (threading.Event, optional): Set it to cancel the transfer.
            - on_progress (callable, optional): Receives the TransferTracker on every update.

        Returns:
            TransferResult: path and size on success, otherwise the classified error
            (TransferAborted, SinkUnwritable or Cancelled).
        """
        cancel_event = cancel_event or threading.Event()
        tracker = TransferTracker(len(manifest.segments), on_progress=on_progress)

        try:
            tracker.set_state(TransferState.FETCHING)
            downloader = SegmentDownloader(
                self.client,
                tracker,
                max_workers=self.max_workers,
                max_retries=self.max_retries,
                backoff_factor=self.backoff_factor,
                max_backoff=self.max_backoff,
                cancel_event=cancel_event
            )

            decryptors = self._get_decryptors(downloader, manifest)

            buffer = downloader.download_all(manifest.segments)
            self._check_cancel(cancel_event)

            tracker.set_state(TransferState.ASSEMBLING)
            chunks = self._assemble(buffer, manifest, decryptors)
            self._check_cancel(cancel_event)

            tracker.set_state(TransferState.PERSISTING)
            size = self._persist(chunks, destination, cancel_event)

        except (TransferAborted, SinkUnwritable, Cancelled) as e:
            tracker.set_state(TransferState.FAILED)
            logger.error(f"Transfer to {destination} failed ({e.kind}): {e}")
            return TransferResult(tracker, error=e)

        tracker.set_state(TransferState.DONE)
        logger.info(f"Saved {size} bytes to {destination} in {tracker.elapsed:.1f}s")
        return TransferResult(tracker, path=destination, size=size)

    def _check_cancel(self, cancel_event: threading.Event) -> None:
        if cancel_event.is_set():
            raise Cancelled("Transfer cancelled")

    def _get_decryptors(self, downloader: SegmentDownloader, manifest: Manifest) -> Dict[KeyInfo, Decryptor]:
        decryptors = {}

        for number, key in enumerate(manifest.keys, start=1):
            if key.method.upper() != "AES-128":
                raise TransferAborted(f"Unsupported encryption method {key.method}")

            key_data = downloader.fetch(key.uri, f"Key {number}")
            try:
                decryptors[key] = Decryptor(key_data, iv=key.iv, media_sequence=manifest.media_sequence)
            except ValueError as e:
                raise TransferAborted(f"Invalid key from {key.uri}: {e}", cause=e) from e

        return decryptors

    def _assemble(self, buffer: List[bytes], manifest: Manifest, decryptors: Dict[KeyInfo, Decryptor]) -> List[bytes]:
        if not decryptors:
            return buffer

        try:
            for index, segment in enumerate(manifest.segments):
                key = manifest.key_for(segment)
                if key is not None:
                    buffer[index] = decryptors[key].decrypt_segment(buffer[index], index)
        except ValueError as e:
            raise TransferAborted(f"Cannot decrypt segment {index}: {e}", cause=e, segment=index) from e

        return buffer

    def _persist(self, chunks: Iterable[bytes], destination: str, cancel_event: threading.Event) -> int:
        directory = os.path.dirname(os.path.abspath(destination))
        size = 0

        try:
            fd, temp_path = tempfile.mkstemp(dir=directory, prefix=f".{os.path.basename(destination)}.", suffix=".temp")
        except OSError as e:
            raise SinkUnwritable(f"Cannot write into {directory}: {e}", cause=e) from e

        try:
            with os.fdopen(fd, "wb") as file:
                for chunk in chunks:
                    self._check_cancel(cancel_event)
                    size += file.write(chunk)

                file.flush()
                os.fsync(file.fileno())

            # Last point where cancelling leaves nothing behind
            self._check_cancel(cancel_event)
            self._replace(temp_path, destination)

        except OSError as e:
            raise SinkUnwritable(f"Cannot write {destination}: {e}", cause=e) from e

        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

        return size

    def _replace(self, temp_path: str, destination: str) -> None:
        for attempt in range(1, RENAME_ATTEMPTS + 1):
            try:
                os.replace(temp_path, destination)
                return

            except PermissionError as e:
                # Windows keeps the handle busy for a moment after close
                if attempt == RENAME_ATTEMPTS:
                    raise
                logger.warning(f"Rename attempt {attempt}/{RENAME_ATTEMPTS} failed: {e}")
                time.sleep(0.5)
