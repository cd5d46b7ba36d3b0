# 17.10.26

from .downloader import TransferEngine, TransferResult
from .segments import SegmentDownloader

__all__ = [
    "TransferEngine",
    "TransferResult",
    "SegmentDownloader"
]
