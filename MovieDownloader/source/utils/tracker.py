# 16.10.26

import time
import enum
import logging
import threading
from typing import Callable, List, Optional


# Variable
logger = logging.getLogger(__name__)


class TransferState(enum.Enum):
    INIT = "init"
    FETCHING = "fetching"
    RETRY_WAIT = "retry_wait"
    ASSEMBLING = "assembling"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class TransferTracker:
    def __init__(self, total_segments: int, on_progress: Optional[Callable[["TransferTracker"], None]] = None):
        """
        Per-transfer bookkeeping shared by the segment workers.

        Args:
            - total_segments (int): Number of segments in the manifest.
            - on_progress (callable, optional): Called with the tracker after every update.
              Exceptions raised by it are logged and ignored.
        """
        self.total_segments = total_segments
        self.on_progress = on_progress
        self.state = TransferState.INIT
        self.history: List[TransferState] = [TransferState.INIT]
        self.completed_segments = 0
        self.downloaded_bytes = 0
        self.retries = 0
        self.start_time = time.time()
        self._lock = threading.Lock()

    def set_state(self, state: TransferState) -> None:
        with self._lock:
            if self.state in (TransferState.DONE, TransferState.FAILED):
                return
            self.state = state
            self.history.append(state)

        logger.debug(f"Transfer state -> {state.value}")
        self._notify()

    def add_bytes(self, size: int) -> None:
        with self._lock:
            self.downloaded_bytes += size
        self._notify()

    def segment_done(self) -> None:
        with self._lock:
            self.completed_segments += 1
        self._notify()

    def retry(self) -> None:
        with self._lock:
            self.retries += 1
        self.set_state(TransferState.RETRY_WAIT)

    @property
    def elapsed(self) -> float:
        return time.time() - self.start_time

    @property
    def speed(self) -> float:
        elapsed = self.elapsed
        return self.downloaded_bytes / elapsed if elapsed > 0 else 0.0

    def _notify(self) -> None:
        if self.on_progress is None:
            return

        try:
            self.on_progress(self)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")
