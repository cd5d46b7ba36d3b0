# 16.10.26

import logging
from typing import Optional


# External import
from Cryptodome.Cipher import AES
from Cryptodome.Util.Padding import unpad


# Variable
logger = logging.getLogger(__name__)


class Decryptor:
    def __init__(self, key_data: bytes, iv: Optional[str] = None, media_sequence: int = 0):
        """
        AES-128-CBC decryptor for HLS segments.

        Args:
            - key_data (bytes): 16 byte key fetched from the key uri.
            - iv (str, optional): Hex IV from the #EXT-X-KEY tag. When missing the IV is
              the segment media sequence number, big-endian on 16 bytes.
            - media_sequence (int): Value of #EXT-X-MEDIA-SEQUENCE.
        """
        if len(key_data) != 16:
            raise ValueError(f"AES-128 key must be 16 bytes, got {len(key_data)}")

        self.key_data = key_data
        self.iv = bytes.fromhex(iv.rjust(32, '0')) if iv else None
        self.media_sequence = media_sequence

    def segment_iv(self, index: int) -> bytes:
        if self.iv is not None:
            return self.iv
        return (self.media_sequence + index).to_bytes(16, byteorder='big')

    def decrypt_segment(self, content: bytes, index: int) -> bytes:
        cipher = AES.new(self.key_data, AES.MODE_CBC, self.segment_iv(index))
        decrypted = cipher.decrypt(content)

        try:
            return unpad(decrypted, AES.block_size)
        except ValueError:
            logger.debug(f"Segment {index} has no PKCS7 padding, keeping raw output")
            return decrypted
