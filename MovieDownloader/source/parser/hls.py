# 16.10.26

import re
import logging
from typing import List, Optional, Tuple
from urllib.parse import urljoin


# Logic
from ..utils.object import Stream, Segment, KeyInfo


# Variable
logger = logging.getLogger(__name__)


def is_master_playlist(content: str) -> bool:
    return '#EXT-X-STREAM-INF' in content


class HLSParser:
    def __init__(self, m3u8_url: str, content: str):
        self.m3u8_url = m3u8_url
        self.content = content

    def parse_streams(self) -> List[Stream]:
        """Return the video variants declared in a master playlist, in declared order."""
        streams = []
        lines = self.content.split('\n')
        i = 0

        while i < len(lines):
            line = lines[i].strip()

            if line.startswith('#EXT-X-STREAM-INF:'):
                stream = self._parse_stream_inf(line)

                # The uri is the next non-comment line
                j = i + 1
                while j < len(lines) and (not lines[j].strip() or lines[j].strip().startswith('#')):
                    j += 1

                if j < len(lines):
                    stream.playlist_url = urljoin(self.m3u8_url, lines[j].strip())
                    streams.append(stream)
                i = j + 1
                continue

            i += 1

        return streams

    def _parse_stream_inf(self, line: str) -> Stream:
        stream = Stream('video')

        bandwidth_match = re.search(r'BANDWIDTH=(\d+)', line)
        if bandwidth_match:
            stream.bitrate = int(bandwidth_match.group(1))

        resolution_match = re.search(r'RESOLUTION=(\d+x\d+)', line)
        if resolution_match:
            stream.resolution = resolution_match.group(1)
            width, height = stream.resolution.split('x')
            stream.width = int(width)
            stream.height = int(height)

        fps_match = re.search(r'FRAME-RATE=([\d.]+)', line)
        if fps_match:
            stream.fps = fps_match.group(1)

        codecs_match = re.search(r'CODECS="([^"]+)"', line)
        if codecs_match:
            stream.codecs = codecs_match.group(1)

        return stream

    def parse_segments(self) -> Tuple[List[Segment], Optional[KeyInfo], int]:
        """
        Parse a media playlist.

        Every segment carries the #EXT-X-KEY in force when it was declared, so rotated
        keys and METHOD=NONE sections are kept per segment.

        Returns:
            tuple: (segments in declared order, key shared by every segment or None,
            media sequence)
        """
        segments = []
        key = None
        used_keys = set()
        media_sequence = 0
        duration = 0.0

        for line in self.content.split('\n'):
            line = line.strip()
            if not line:
                continue

            if line.startswith('#EXT-X-MEDIA-SEQUENCE:'):
                media_sequence = int(line.split(':', 1)[1])

            elif line.startswith('#EXT-X-KEY:'):
                method_match = re.search(r'METHOD=([^,]+)', line)
                uri_match = re.search(r'URI="([^"]+)"', line)
                iv_match = re.search(r'IV=0[xX]([0-9a-fA-F]+)', line)

                if method_match and method_match.group(1) == 'NONE':
                    key = None
                elif method_match and uri_match:
                    key = KeyInfo(
                        method=method_match.group(1),
                        uri=urljoin(self.m3u8_url, uri_match.group(1)),
                        iv=iv_match.group(1) if iv_match else None
                    )
                    logger.info(f"Found encryption: {key.method}, key: {key.uri}, IV: {key.iv}")

            elif line.startswith('#EXTINF:'):
                duration_match = re.search(r'#EXTINF:([\d.]+)', line)
                duration = float(duration_match.group(1)) if duration_match else 0.0

            elif not line.startswith('#'):
                segments.append(Segment(urljoin(self.m3u8_url, line), len(segments), duration, key))
                used_keys.add(key)
                duration = 0.0

        if len(used_keys) > 1:
            logger.info(f"Playlist rotates between {len(used_keys)} keys")

        shared_key = next(iter(used_keys)) if len(used_keys) == 1 else None
        logger.info(f"Found {len(segments)} segments, duration: {sum(s.duration for s in segments):.1f}s")
        return segments, shared_key, media_sequence


def select_stream(streams: List[Stream], quality: str = "best") -> Optional[Stream]:
    """
    Pick a variant by quality: 'best', 'worst' or a target height such as '720'.
    A height picks the tallest variant not above it, or the smallest one if all are above.
    """
    if not streams:
        return None

    ordered = sorted(streams, key=lambda s: (s.height, s.bitrate))
    quality = str(quality).lower().rstrip('p')

    if quality == "worst":
        return ordered[0]
    if quality == "best" or not quality.isdigit():
        return ordered[-1]

    target = int(quality)
    candidates = [s for s in ordered if s.height <= target]
    return candidates[-1] if candidates else ordered[0]
