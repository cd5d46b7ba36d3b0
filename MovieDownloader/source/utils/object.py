# 16.10.26

from typing import List, NamedTuple, Optional, Tuple


class KeyInfo(NamedTuple):
    method: str
    uri: str
    iv: Optional[str] = None


class Segment(NamedTuple):
    url: str
    number: int
    duration: float = 0.0
    key: Optional[KeyInfo] = None

    def __repr__(self):
        return f"Segment({self.number}, {self.url})"


class Stream:
    def __init__(self, stream_type: str, playlist_url: Optional[str] = None):
        self.type = stream_type
        self.playlist_url = playlist_url
        self.bitrate = 0
        self.resolution = 'unknown'
        self.width = 0
        self.height = 0
        self.fps = 'unknown'
        self.codecs = 'unknown'

    def get_description(self) -> str:
        return f"{self.type}_{self.resolution}"

    def __repr__(self):
        return f"Stream({self.type}, {self.resolution}, {self.bitrate})"


class Manifest(NamedTuple):
    """
    Single-use description of what to fetch for one title/episode. Segments are kept
    in declared order, which is the order bytes are written out.
    """
    source_url: str
    segments: Tuple[Segment, ...]
    key: Optional[KeyInfo] = None
    media_sequence: int = 0
    resolution: Optional[str] = None
    bandwidth: Optional[int] = None

    def key_for(self, segment: Segment) -> Optional[KeyInfo]:
        """Key protecting a segment: its own #EXT-X-KEY, else the playlist-wide one."""
        key = segment.key if segment.key is not None else self.key
        if key is None or key.method.upper() == "NONE":
            return None
        return key

    @property
    def keys(self) -> List[KeyInfo]:
        """Distinct keys in first-use order."""
        keys = []
        for segment in self.segments:
            key = self.key_for(segment)
            if key is not None and key not in keys:
                keys.append(key)
        return keys

    @property
    def is_encrypted(self) -> bool:
        return len(self.keys) > 0

    @property
    def duration(self) -> float:
        return sum(segment.duration for segment in self.segments)

    @classmethod
    def single(cls, url: str) -> "Manifest":
        """Manifest for a direct file url, fetched as one segment."""
        return cls(source_url=url, segments=(Segment(url, 0),))
