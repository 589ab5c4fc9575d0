"""Image export for finished pixel buffers.

The renderer produces a flat buffer of RGB triples, row-major from the top
row. These helpers reshape it into an image array and write it with Pillow,
which picks the encoder (PNG, PPM, ...) from the file extension.

Example:
    >>> from pathtracer.output.export import save_image
    >>> save_image(buffer, 200, 100, "renders/render.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def buffer_to_image(
    buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Reshape a flat pixel buffer into an image array.

    Args:
        buffer: Array of shape (width * height, 3) with dtype uint8.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3), first row at the top.

    Raises:
        ValueError: If the buffer size does not match the dimensions.
    """
    buffer = np.asarray(buffer)
    if buffer.shape != (width * height, 3):
        raise ValueError(
            f"Buffer shape {buffer.shape} does not match a {width}x{height} RGB image"
        )
    if buffer.dtype != np.uint8:
        raise ValueError(f"Buffer must have dtype uint8, got {buffer.dtype}")
    return buffer.reshape(height, width, 3)


def save_image(
    buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
    filepath: str | Path,
) -> Path:
    """Save a pixel buffer as an image file.

    Missing parent directories are created.

    Args:
        buffer: Array of shape (width * height, 3) with dtype uint8.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output path. The extension selects the format.

    Returns:
        The path the image was written to.
    """
    filepath = Path(filepath)
    image = buffer_to_image(buffer, width, height)

    filepath.parent.mkdir(parents=True, exist_ok=True)

    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)
    return filepath
