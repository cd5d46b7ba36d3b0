# 17.10.26

from .client import CatalogClient
from .exceptions import (
    MovieDownloaderError,
    CatalogUnavailable,
    SelectionNotFound,
    ContentNotAvailable,
    ServiceError,
    TransferAborted,
    SinkUnwritable,
    Cancelled
)

__title__ = "MovieDownloader"
__version__ = "1.0.0"

__all__ = [
    "CatalogClient",
    "MovieDownloaderError",
    "CatalogUnavailable",
    "SelectionNotFound",
    "ContentNotAvailable",
    "ServiceError",
    "TransferAborted",
    "SinkUnwritable",
    "Cancelled"
]
