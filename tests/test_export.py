"""Tests for image export."""

import numpy as np
import pytest
from PIL import Image


def _gradient_buffer(width, height):
    buffer = np.zeros((width * height, 3), dtype=np.uint8)
    buffer[:, 0] = np.arange(width * height) % 256
    buffer[:, 2] = 200
    return buffer


class TestBufferToImage:
    def test_reshape(self):
        from pathtracer.output.export import buffer_to_image

        buffer = _gradient_buffer(4, 3)
        image = buffer_to_image(buffer, 4, 3)
        assert image.shape == (3, 4, 3)
        # First buffer row is the top image row
        np.testing.assert_array_equal(image[0], buffer[:4])
        np.testing.assert_array_equal(image[2, 3], buffer[11])

    def test_size_mismatch_raises(self):
        from pathtracer.output.export import buffer_to_image

        with pytest.raises(ValueError, match="does not match"):
            buffer_to_image(_gradient_buffer(4, 3), 5, 3)

    def test_dtype_mismatch_raises(self):
        from pathtracer.output.export import buffer_to_image

        with pytest.raises(ValueError, match="uint8"):
            buffer_to_image(np.zeros((6, 3), dtype=np.float32), 3, 2)


class TestSaveImage:
    @pytest.mark.parametrize("suffix", [".png", ".ppm"])
    def test_save_and_reload(self, tmp_path, suffix):
        from pathtracer.output.export import save_image

        buffer = _gradient_buffer(8, 5)
        path = save_image(buffer, 8, 5, tmp_path / f"render{suffix}")

        assert path.exists()
        with Image.open(path) as img:
            assert img.size == (8, 5)
            assert img.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(img).reshape(-1, 3), buffer)

    def test_creates_parent_directories(self, tmp_path):
        from pathtracer.output.export import save_image

        path = save_image(_gradient_buffer(2, 2), 2, 2, tmp_path / "a" / "b" / "out.png")
        assert path.exists()
