"""CHIP-8 frame buffer: 64x32 monochrome pixels with XOR sprite drawing."""

from typing import Sequence, Tuple

import jax.numpy as jnp
import numpy as np
from flax.struct import PyTreeNode, field

from chipper.constants import SCREEN_WIDTH, SCREEN_HEIGHT

# Pre-computed column offsets and bit shifts for one 8-pixel sprite row
_columns = jnp.arange(8)
_shifts = (7 - _columns).astype(jnp.uint8)

BLACK = (0x00, 0x00, 0x00, 0x00)
WHITE = (0xFF, 0xFF, 0xFF, 0xFF)


def _empty_pixels() -> jnp.ndarray:
    return jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.uint8)


class FrameBuffer(PyTreeNode):
    """Row-major pixel grid, ``pixels[y, x]`` is 0 (empty) or 1 (filled). Origin top-left."""
    pixels: jnp.ndarray = field(default_factory=_empty_pixels)

    def clear(self) -> "FrameBuffer":
        """Return an all-empty frame buffer."""
        return self.replace(pixels=_empty_pixels())

    def draw(self, x: int, y: int, rows: Sequence[int]) -> Tuple["FrameBuffer", bool]:
        """XOR an 8-pixel-wide sprite at (x, y), wrapping at both screen edges.

        Args:
            x: Column of the sprite's top-left corner
            y: Row of the sprite's top-left corner
            rows: Sprite bytes, one per row, high bit leftmost

        Returns:
            The new frame buffer and whether any filled pixel was erased
        """
        if len(rows) == 0:
            return self, False

        sprite_rows = jnp.asarray(rows, dtype=jnp.uint8)
        bits = (sprite_rows[:, None] >> _shifts[None, :]) & 1

        ys = (y + jnp.arange(len(rows)))[:, None] % SCREEN_HEIGHT
        xs = (x + _columns)[None, :] % SCREEN_WIDTH
        sprite = jnp.zeros_like(self.pixels).at[ys, xs].set(bits.astype(jnp.uint8))

        collision = bool(jnp.any(self.pixels & sprite))
        return self.replace(pixels=self.pixels ^ sprite), collision

    def pixel(self, x: int, y: int) -> int:
        return int(self.pixels[y, x])

    def slab(self, x: int, y: int, columns: int, rows: int) -> np.ndarray:
        """Copy of the ``rows`` x ``columns`` block whose top-left corner is (x, y)."""
        return np.asarray(self.pixels[y:y + rows, x:x + columns])

    def to_rgba(self, empty: Sequence[int] = BLACK, filled: Sequence[int] = WHITE) -> bytes:
        """Project to a flat RGBA byte string, 4 bytes per pixel, row-major from top-left."""
        palette = np.array([empty, filled], dtype=np.uint8)
        return palette[np.asarray(self.pixels)].tobytes()

    def __str__(self) -> str:
        return "\n".join("".join(str(int(p)) for p in row) for row in np.asarray(self.pixels))
