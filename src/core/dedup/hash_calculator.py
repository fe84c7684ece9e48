"""
Content Hash Calculator
=======================

Provides cryptographic content hashing for catalog image files.
Supports MD5, SHA1, SHA256 and SHA512. Two files are treated as
duplicates only when their digests are equal, so weak checksums
are deliberately not offered.
"""

import hashlib
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Union
from pathlib import Path

from src.core import config


class FileUnreadableError(Exception):
    """Raised when a file is missing, not a regular file, or cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


@dataclass
class HashResult:
    """
    Dataclass to store the result of a hash calculation.
    """
    hash_value: str
    algorithm: str
    timestamp: float
    bit_length: int
    metadata: Dict[str, Any] = field(default_factory=dict)


class ContentHashCalculator:
    """
    Class to calculate content fingerprints for files and byte payloads.
    """

    SUPPORTED_CRYPTO_ALGOS = {
        'md5': hashlib.md5,
        'sha1': hashlib.sha1,
        'sha256': hashlib.sha256,
        'sha512': hashlib.sha512
    }

    def __init__(self, block_size: int = config.HASH_READ_BLOCK_SIZE):
        self.block_size = block_size

    def _new_hasher(self, algorithm: str):
        algo_name = algorithm.lower()
        if algo_name not in self.SUPPORTED_CRYPTO_ALGOS:
            raise ValueError(f"Unsupported cryptographic algorithm: {algorithm}")
        return algo_name, self.SUPPORTED_CRYPTO_ALGOS[algo_name]()

    def calculate_file_hash(
        self,
        file_path: Union[str, Path],
        algorithm: str = config.DEFAULT_HASH_ALGORITHM
    ) -> HashResult:
        """
        Calculates a cryptographic hash of a file's full contents.

        The file is read in blocks of ``block_size`` bytes.

        Raises:
            FileUnreadableError: If the path does not exist, is not a regular
                file, or reading it fails.
            ValueError: If the algorithm is not supported.
        """
        algo_name, hasher = self._new_hasher(algorithm)

        if not os.path.exists(file_path):
            raise FileUnreadableError(file_path, "file does not exist")
        if not os.path.isfile(file_path):
            raise FileUnreadableError(file_path, "not a regular file")

        byte_size = 0
        try:
            with open(file_path, 'rb') as f:
                while True:
                    buf = f.read(self.block_size)
                    if not buf:
                        break
                    hasher.update(buf)
                    byte_size += len(buf)
        except OSError as e:
            raise FileUnreadableError(file_path, str(e)) from e

        return HashResult(
            hash_value=hasher.hexdigest(),
            algorithm=algo_name,
            timestamp=time.time(),
            bit_length=hasher.digest_size * 8,
            metadata={'byte_size': byte_size, 'path': str(file_path)}
        )
