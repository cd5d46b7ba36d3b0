from .decrypt import Decryptor

__all__ = [
    "Decryptor"
]
