"""
File Hash Calculator
====================

Provides the two fingerprints the deduplication engine compares:

- ContentHasher: SHA-256 over the full decrypted content, for exact
  duplicates.
- PerceptualImageHasher: an average hash over an N x N luma grid, for images
  that look the same but were re-encoded or resized.

Both are pure and keep no state between calls, so one instance can be shared
across worker threads.
"""

import hashlib
import io
import logging
from dataclasses import dataclass
from typing import Optional, Union

import imagehash
import numpy as np
from PIL import Image

from vaultdedup.core import config
from vaultdedup.core.dedup.errors import ImageDecodeError
from vaultdedup.core.dedup.hash_comparison import calculate_bit_similarity

logger = logging.getLogger(__name__)


class ContentHasher:
    """
    Full-content cryptographic fingerprint.

    Equal digests mean byte-identical content; the empty byte string hashes
    to the well-known SHA-256 of nothing rather than failing.
    """

    algorithm = config.CONTENT_HASH_ALGORITHM

    def hash(self, data: Union[bytes, bytearray, memoryview]) -> str:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Content must be bytes, got {type(data).__name__}")
        hasher = hashlib.new(self.algorithm)
        hasher.update(data)
        return hasher.hexdigest()


@dataclass(frozen=True)
class PerceptualFingerprint:
    """
    Average-hash bits in row-major order, '1' where a cell is brighter than
    the image mean.
    """
    bits: str
    grid_size: int = config.DEFAULT_GRID_SIZE

    def __post_init__(self):
        if len(self.bits) != self.grid_size * self.grid_size:
            raise ValueError(
                f"Fingerprint has {len(self.bits)} bits, expected {self.grid_size ** 2}"
            )
        if set(self.bits) - {"0", "1"}:
            raise ValueError("Fingerprint bits must be '0' or '1'")

    def __len__(self) -> int:
        return len(self.bits)

    def __str__(self) -> str:
        return self.bits

    def to_image_hash(self) -> imagehash.ImageHash:
        """The same bits as an `imagehash.ImageHash` (supports `-` for Hamming distance)."""
        array = np.array([c == "1" for c in self.bits], dtype=bool)
        return imagehash.ImageHash(array.reshape(self.grid_size, self.grid_size))

    def to_hex(self) -> str:
        return str(self.to_image_hash())


class PerceptualImageHasher:
    """
    Average hash ("aHash") calculator.

    The image is decoded to RGB, downsampled to grid_size x grid_size, each
    cell converted to luma with 0.299R + 0.587G + 0.114B, and one bit emitted
    per cell: 1 if the cell's luma exceeds the mean luma, else 0.
    """

    def __init__(self, grid_size: int = config.DEFAULT_GRID_SIZE):
        if grid_size < config.MIN_GRID_SIZE or grid_size > config.MAX_GRID_SIZE:
            raise ValueError(f"Unsupported grid size: {grid_size}")
        self.grid_size = grid_size

    def load_image_from_bytes(self, binary_data: bytes) -> Image.Image:
        """
        Loads and fully decodes an image from bytes, converted to RGB.
        """
        try:
            image = Image.open(io.BytesIO(binary_data))
            # Force the decoder to run now; Image.open is lazy
            image.load()
            if image.mode != 'RGB':
                image = image.convert('RGB')
            return image
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Failed to load image from bytes: {e}")

    def compute(self, image: Image.Image) -> PerceptualFingerprint:
        """Average hash of an already decoded image."""
        n = self.grid_size
        if image.mode != 'RGB':
            image = image.convert('RGB')
        small = image.resize((n, n), Image.Resampling.LANCZOS)

        pixels = np.asarray(small, dtype=np.float64)
        red_w, green_w, blue_w = config.LUMA_WEIGHTS
        luma = pixels[:, :, 0] * red_w + pixels[:, :, 1] * green_w + pixels[:, :, 2] * blue_w

        cells = luma.ravel().tolist()
        mean = sum(cells) / len(cells)
        bits = "".join("1" if cell > mean else "0" for cell in cells)
        return PerceptualFingerprint(bits=bits, grid_size=n)

    def hash(self, source: Union[bytes, Image.Image], file_id: Optional[str] = None) -> Optional[PerceptualFingerprint]:
        """
        Fingerprint an image given as encoded bytes or a PIL image.

        Returns None when the image cannot be decoded so the caller can drop
        the file from the perceptual pass without aborting the batch.
        """
        try:
            if isinstance(source, Image.Image):
                image = source
            else:
                image = self.load_image_from_bytes(source)
            return self.compute(image)
        except (ImageDecodeError, OSError, ValueError) as e:
            # OSError/ValueError: Pillow can still fail while resampling a truncated raster
            logger.warning(f"Skipping image {file_id or '<unnamed>'} in perceptual pass: {e}")
            return None

    def similarity(self, a: Optional[PerceptualFingerprint], b: Optional[PerceptualFingerprint]) -> float:
        """Share of equal bit positions; 0.0 for mismatched or missing fingerprints."""
        if a is None or b is None:
            return 0.0
        return calculate_bit_similarity(a.bits, b.bits)
