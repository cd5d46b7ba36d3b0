# 15.10.26

from .object import CatalogEntry, Season, Episode, EntriesManager, ResolutionTarget
from .resolver import resolve

__all__ = [
    "CatalogEntry",
    "Season",
    "Episode",
    "EntriesManager",
    "ResolutionTarget",
    "resolve"
]
