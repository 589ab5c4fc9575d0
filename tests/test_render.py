"""Tests for the parallel render loop.

Tests cover:
- RenderConfig validation
- 8-bit quantization and the invalid-pixel sentinel
- Buffer shape, orientation and determinism
- Progress callbacks
"""

import logging

import numpy as np
import pytest


def _mirror_scene():
    """A scene whose renders are deterministic without jitter (perfect mirrors only)."""
    from pathtracer.scene.manager import SceneManager

    manager = SceneManager()
    manager.add_mirror_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.9, 0.6, 0.3))
    manager.add_mirror_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.8, 0.8))
    return manager.build()


def _expected_empty_image(width, height):
    """Sky-only image for the default camera with pixel-center sampling."""
    pixels = []
    for row in range(height):
        j = height - 1 - row
        for i in range(width):
            u = (i + 0.5) / width
            v = (j + 0.5) / height
            direction = np.array([-2.0 + 4.0 * u, -1.0 + 2.0 * v, -1.0])
            t = 0.5 * (direction[1] / np.linalg.norm(direction) + 1.0)
            color = (1.0 - t) * np.array([1.0, 1.0, 1.0]) + t * np.array([0.5, 0.7, 1.0])
            pixels.append(np.floor(np.sqrt(color) * 255.99))
    return np.array(pixels)


class TestRenderConfig:
    def test_defaults(self):
        from pathtracer.core.render import RenderConfig

        config = RenderConfig(width=4, height=3)
        assert config.samples == 1
        assert config.depth_limit == 50
        assert config.jitter is True
        assert config.num_pixels == 12

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0, "height": 10},
            {"width": 10, "height": -1},
            {"width": 10, "height": 10, "samples": 0},
            {"width": 10, "height": 10, "depth_limit": -1},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        from pathtracer.core.render import RenderConfig

        with pytest.raises(ValueError):
            RenderConfig(**kwargs)

    def test_zero_depth_limit_allowed(self):
        from pathtracer.core.render import RenderConfig

        assert RenderConfig(width=1, height=1, depth_limit=0).depth_limit == 0


class TestQuantize:
    def test_scaling_and_floor(self):
        from pathtracer.core.render import quantize_pixels

        colors = np.array([[0.0, 0.5, 1.0], [0.25, 0.75, 0.999]], dtype=np.float32)
        result = quantize_pixels(colors)

        assert result.dtype == np.uint8
        np.testing.assert_array_equal(result, [[0, 127, 255], [63, 191, 255]])

    @pytest.mark.parametrize(
        "bad",
        [
            [np.nan, 0.5, 0.5],
            [-0.1, 0.5, 0.5],
            [0.5, 1.01, 0.5],
            [0.5, 0.5, np.inf],
        ],
    )
    def test_out_of_range_pixels_get_sentinel(self, bad, caplog):
        from pathtracer.core.render import SENTINEL_COLOR, quantize_pixels

        colors = np.array([[0.5, 0.5, 0.5], bad], dtype=np.float32)
        with caplog.at_level(logging.WARNING, logger="pathtracer.core.render"):
            result = quantize_pixels(colors)

        np.testing.assert_array_equal(result[0], [127, 127, 127])
        np.testing.assert_array_equal(result[1], SENTINEL_COLOR)
        assert "1 pixel(s) had invalid color values" in caplog.text

    def test_custom_sentinel(self):
        from pathtracer.core.render import quantize_pixels

        colors = np.array([[np.nan, np.nan, np.nan]], dtype=np.float32)
        result = quantize_pixels(colors, sentinel=(255, 0, 255))
        np.testing.assert_array_equal(result, [[255, 0, 255]])

    def test_valid_pixels_do_not_warn(self, caplog):
        from pathtracer.core.render import quantize_pixels

        with caplog.at_level(logging.WARNING):
            quantize_pixels(np.full((10, 3), 0.3, dtype=np.float32))
        assert caplog.records == []


class TestRenderer:
    def test_buffer_shape_and_dtype(self):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer
        from pathtracer.scene.presets import default_scene

        config = RenderConfig(width=8, height=4, samples=2, depth_limit=5)
        renderer = Renderer(default_scene().build(), PinholeCamera.default(), config)
        buffer = renderer.render()

        assert buffer.shape == (32, 3)
        assert buffer.dtype == np.uint8
        assert renderer.width == 8
        assert renderer.height == 4

    def test_empty_scene_is_sky_gradient(self, empty_scene):
        """Row 0 of the buffer is the top of the image."""
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        width, height = 6, 4
        config = RenderConfig(width=width, height=height, samples=1, jitter=False)
        buffer = Renderer(empty_scene, PinholeCamera.default(), config).render()

        expected = _expected_empty_image(width, height)
        assert np.abs(buffer.astype(np.int32) - expected).max() <= 1

        image = buffer.reshape(height, width, 3).astype(np.int32)
        # Sky gets bluer (less red) toward the top of the image
        assert image[0, width // 2, 0] < image[-1, width // 2, 0]

    def test_deterministic_without_jitter(self):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        config = RenderConfig(width=16, height=8, samples=3, depth_limit=10, jitter=False)
        renderer = Renderer(_mirror_scene(), PinholeCamera.default(), config)

        first = renderer.render()
        second = renderer.render()
        np.testing.assert_array_equal(first, second)

    def test_depth_limit_zero_blacks_out_objects(self):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer
        from pathtracer.scene.presets import default_scene

        width, height = 20, 10
        config = RenderConfig(width=width, height=height, samples=1, depth_limit=0, jitter=False)
        buffer = Renderer(default_scene().build(), PinholeCamera.default(), config).render()
        image = buffer.reshape(height, width, 3)

        # Center of the image looks at the red sphere
        np.testing.assert_array_equal(image[height // 2, width // 2], [0, 0, 0])
        # Top row sees only sky
        assert (image[0].astype(np.int32).sum(axis=1) > 0).all()

    def test_batch_size_does_not_change_result(self):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        config = RenderConfig(width=10, height=6, samples=1, depth_limit=10, jitter=False)
        renderer = Renderer(_mirror_scene(), PinholeCamera.default(), config)

        whole = renderer.render()
        batched = renderer.render(batch_rows=1)
        np.testing.assert_array_equal(whole, batched)

    def test_progress_callback(self):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        calls = []
        config = RenderConfig(width=5, height=3, samples=1, jitter=False)
        renderer = Renderer(_mirror_scene(), PinholeCamera.default(), config)
        renderer.render(callback=lambda done, total: calls.append((done, total)), batch_rows=1)

        assert calls == [(5, 15), (10, 15), (15, 15)]

    def test_invalid_batch_rows(self, empty_scene):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        renderer = Renderer(empty_scene, PinholeCamera.default(), RenderConfig(width=2, height=2))
        with pytest.raises(ValueError):
            renderer.render(batch_rows=0)

    def test_colors_are_gamma_corrected_floats(self, empty_scene):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        config = RenderConfig(width=4, height=2, jitter=False)
        colors = Renderer(empty_scene, PinholeCamera.default(), config).render_colors()

        assert colors.shape == (8, 3)
        assert (colors >= 0.0).all()
        assert (colors <= 1.0).all()
        # Blue channel of the sky is always 1
        np.testing.assert_allclose(colors[:, 2], 1.0, atol=1e-6)

    def test_render_function(self, empty_scene):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, render

        buffer = render(empty_scene, PinholeCamera.default(), RenderConfig(width=3, height=2))
        assert buffer.shape == (6, 3)

    def test_repr(self, empty_scene):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer

        renderer = Renderer(empty_scene, PinholeCamera.default(), RenderConfig(width=3, height=2))
        assert "width=3" in repr(renderer)


class TestEndToEnd:
    """Whole-package import and render of the default scene."""

    def test_package_imports(self):
        import pathtracer.cli
        import pathtracer.core.render
        import pathtracer.scene.scene

        assert callable(pathtracer.cli.main)
        assert pathtracer.core.render.Renderer is not None
        assert pathtracer.scene.scene.Scene is not None

    def test_default_scene_renders(self, caplog):
        from pathtracer.camera.pinhole import PinholeCamera
        from pathtracer.core.render import RenderConfig, Renderer
        from pathtracer.scene.presets import default_scene

        width, height = 20, 10
        config = RenderConfig(width=width, height=height, samples=4, depth_limit=10)
        with caplog.at_level(logging.WARNING, logger="pathtracer.core.render"):
            buffer = Renderer(default_scene().build(), PinholeCamera.default(), config).render()

        assert caplog.records == []
        image = buffer.reshape(height, width, 3).astype(np.int32)
        # The lit red sphere in the middle is not black
        assert image[height // 2, width // 2].sum() > 0
        # Sky at the top keeps a full blue channel
        assert (image[0, :, 2] >= 250).all()
