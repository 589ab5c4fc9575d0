"""Parallel render loop: per-pixel sample accumulation and quantization.

Each output pixel is one independent unit of work. The render kernel's
outermost loop runs over pixel indices, and Taichi spreads it across the CPU
thread pool. Every pixel reads only the shared, read-only scene and camera,
draws jitter and scattering randomness from its worker thread's private
ti.random() state, and writes to its own slot of the pixel buffer. Pixel k
therefore always lands at buffer position k, whatever order threads finish in.

Per pixel (i, j), with j counting rows upward from the bottom of the image:
    1. Average ``samples`` radiance estimates at u = (i + du) / width,
       v = (j + dv) / height, where du, dv are uniform in [0, 1) (or 0.5 with
       jitter disabled).
    2. Gamma-correct each channel with a square root.
    3. Quantize to 8 bits with floor(channel * 255.99). Pixels whose channels
       fall outside [0, 255] (NaN or negative radiance from a math defect) are
       replaced by a sentinel color and reported with a warning.

The finished buffer is row-major starting from the top row of the image, one
RGB triple per pixel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import PinholeCamera
    >>> from pathtracer.core.render import RenderConfig, Renderer
    >>> from pathtracer.scene.presets import default_scene
    >>>
    >>> renderer = Renderer(
    ...     default_scene().build(),
    ...     PinholeCamera.default(),
    ...     RenderConfig(width=200, height=100, samples=16),
    ... )
    >>> buffer = renderer.render()  # (200 * 100, 3) uint8
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import Camera, PinholeCamera, get_ray
from pathtracer.core.integrator import radiance
from pathtracer.core.ray import vec3
from pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (pixels_done, pixels_total)
ProgressCallback = Callable[[int, int], None]

# Substituted for pixels whose quantized value is out of range
SENTINEL_COLOR = (0, 0, 0)

# Scale applied before flooring so that 1.0 maps to 255
QUANTIZE_SCALE = 255.99


@dataclass(frozen=True)
class RenderConfig:
    """Parameters of a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Antialiasing samples averaged per pixel.
        depth_limit: Maximum number of bounces per light path.
        jitter: Randomize the sample position inside each pixel. When False,
            every sample goes through the pixel center (i + 0.5, j + 0.5).
    """

    width: int
    height: int
    samples: int = 1
    depth_limit: int = 50
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples < 1:
            raise ValueError(f"samples must be at least 1, got {self.samples}")
        if self.depth_limit < 0:
            raise ValueError(f"depth_limit must be non-negative, got {self.depth_limit}")

    @property
    def num_pixels(self) -> int:
        return self.width * self.height


def quantize_pixels(
    colors: npt.NDArray[np.floating],
    sentinel: tuple[int, int, int] = SENTINEL_COLOR,
) -> npt.NDArray[np.uint8]:
    """Convert gamma-corrected colors to 8-bit channels.

    Args:
        colors: Array of shape (N, 3) with channels nominally in [0, 1].
        sentinel: Color used for pixels with any channel outside [0, 255]
            after scaling (including NaN and infinities).

    Returns:
        Array of shape (N, 3) with dtype uint8.
    """
    colors = np.asarray(colors)
    with np.errstate(invalid="ignore", over="ignore"):
        scaled = np.floor(colors.astype(np.float64) * QUANTIZE_SCALE)
        in_range = np.isfinite(scaled) & (scaled >= 0.0) & (scaled <= 255.0)

    bad = ~np.all(in_range, axis=-1)

    quantized = np.empty(scaled.shape, dtype=np.uint8)
    quantized[~bad] = scaled[~bad].astype(np.uint8)
    quantized[bad] = sentinel

    num_bad = int(np.count_nonzero(bad))
    if num_bad:
        first = int(np.flatnonzero(bad)[0])
        logger.warning(
            "%d pixel(s) had invalid color values (first at index %d, value %s); "
            "substituted %s",
            num_bad,
            first,
            colors[first].tolist(),
            sentinel,
        )

    return quantized


@ti.data_oriented
class Renderer:
    """Renders a scene through a camera into an 8-bit pixel buffer.

    The scene and camera are fixed for the lifetime of the renderer. Each call
    to render() produces a fresh image.

    Attributes:
        scene: The scene being rendered.
        camera: The camera configuration.
        config: Image size, sample count and depth limit.
    """

    def __init__(self, scene: Scene, camera: PinholeCamera, config: RenderConfig) -> None:
        self.scene = scene
        self.camera = camera
        self.config = config

        self._camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._camera_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._camera_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._camera_lower_left = ti.Vector.field(3, dtype=ti.f32, shape=())

        self._camera_origin[None] = list(camera.origin)
        self._camera_horizontal[None] = list(camera.horizontal)
        self._camera_vertical[None] = list(camera.vertical)
        self._camera_lower_left[None] = list(camera.lower_left)

        # Gamma-corrected color per pixel, row-major from the top row
        self._pixels = ti.Vector.field(3, dtype=ti.f32, shape=config.num_pixels)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @ti.func
    def _device_camera(self) -> Camera:
        return Camera(
            origin=self._camera_origin[None],
            horizontal=self._camera_horizontal[None],
            vertical=self._camera_vertical[None],
            lower_left=self._camera_lower_left[None],
        )

    @ti.kernel
    def _render_span(
        self,
        start: ti.i32,
        end: ti.i32,
        width: ti.i32,
        height: ti.i32,
        samples: ti.i32,
        depth_limit: ti.i32,
        jitter: ti.i32,
    ):
        """Render pixels [start, end) of the buffer in parallel."""
        for k in range(start, end):
            camera = self._device_camera()

            # Buffer rows run top to bottom; v grows bottom to top
            i = k % width
            j = height - 1 - k // width

            color = vec3(0.0, 0.0, 0.0)
            for _ in range(samples):
                du = 0.5
                dv = 0.5
                if jitter != 0:
                    du = ti.random(ti.f32)
                    dv = ti.random(ti.f32)

                u = (ti.cast(i, ti.f32) + du) / ti.cast(width, ti.f32)
                v = (ti.cast(j, ti.f32) + dv) / ti.cast(height, ti.f32)
                ray = get_ray(camera, u, v)
                color += radiance(self.scene, ray, 0, depth_limit)

            color /= ti.cast(samples, ti.f32)
            self._pixels[k] = tm.sqrt(color)

    def render_colors(
        self,
        callback: ProgressCallback | None = None,
        batch_rows: int | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render the image and return gamma-corrected float colors.

        Args:
            callback: Optional progress callback, called after each batch with
                (pixels_done, pixels_total).
            batch_rows: Image rows per kernel launch. Defaults to the whole
                image without a callback, and to about 1% of the rows with one.

        Returns:
            Array of shape (width * height, 3), row-major from the top row.
        """
        cfg = self.config
        if batch_rows is None:
            batch_rows = cfg.height if callback is None else max(1, cfg.height // 100)
        if batch_rows < 1:
            raise ValueError(f"batch_rows must be at least 1, got {batch_rows}")

        logger.debug(
            "Rendering %dx%d, %d spp, depth limit %d, %d object(s)",
            cfg.width,
            cfg.height,
            cfg.samples,
            cfg.depth_limit,
            len(self.scene),
        )

        total = cfg.num_pixels
        for row_start in range(0, cfg.height, batch_rows):
            row_end = min(row_start + batch_rows, cfg.height)
            self._render_span(
                row_start * cfg.width,
                row_end * cfg.width,
                cfg.width,
                cfg.height,
                cfg.samples,
                cfg.depth_limit,
                int(cfg.jitter),
            )
            if callback is not None:
                callback(row_end * cfg.width, total)

        return self._pixels.to_numpy()

    def render(
        self,
        callback: ProgressCallback | None = None,
        batch_rows: int | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the image into an 8-bit pixel buffer.

        Returns:
            Array of shape (width * height, 3) with dtype uint8, row-major
            from the top row of the image.
        """
        return quantize_pixels(self.render_colors(callback, batch_rows))

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.config.samples}, depth_limit={self.config.depth_limit})"
        )


def render(
    scene: Scene,
    camera: PinholeCamera,
    config: RenderConfig,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a scene in one call.

    Args:
        scene: The scene to render.
        camera: The camera to render through.
        config: Image size, sample count and depth limit.
        callback: Optional progress callback receiving (pixels_done, pixels_total).

    Returns:
        The 8-bit pixel buffer, shape (width * height, 3).
    """
    return Renderer(scene, camera, config).render(callback)
