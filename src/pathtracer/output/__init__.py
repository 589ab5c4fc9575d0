"""Output module for writing rendered images.

Components:
    export: Reshape pixel buffers and save them via Pillow (PNG, PPM, ...)
"""

from .export import buffer_to_image, save_image

__all__ = [
    "buffer_to_image",
    "save_image",
]
