import numpy as np
import pytest
from PIL import Image, UnidentifiedImageError

from ocr_bridge.decoder import decode_image


def test_color_png_is_bgr(tmp_path):
    path = tmp_path / "red.png"
    Image.new("RGB", (4, 3), color=(255, 0, 0)).save(path)

    decoded = decode_image(str(path))

    assert decoded.shape == (3, 4, 3)
    assert decoded.dtype == np.uint8
    assert decoded[0, 0].tolist() == [0, 0, 255]  # red in BGR


def test_grayscale_and_alpha_images_become_three_channels(tmp_path):
    gray = tmp_path / "gray.png"
    Image.new("L", (5, 5), color=128).save(gray)
    rgba = tmp_path / "rgba.png"
    Image.new("RGBA", (5, 5), color=(0, 255, 0, 10)).save(rgba)

    assert decode_image(str(gray)).shape == (5, 5, 3)
    decoded = decode_image(str(rgba))
    assert decoded.shape == (5, 5, 3)
    assert decoded[0, 0].tolist() == [0, 255, 0]


def test_jpeg_is_decoded(tmp_path):
    path = tmp_path / "photo.jpg"
    Image.new("RGB", (16, 8), color=(255, 255, 255)).save(path, format="JPEG")
    assert decode_image(str(path)).shape == (8, 16, 3)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        decode_image(str(tmp_path / "missing.png"))


def test_corrupt_file_raises(corrupt_png):
    with pytest.raises(UnidentifiedImageError):
        decode_image(str(corrupt_png))


def test_directory_raises(tmp_path):
    with pytest.raises(OSError):
        decode_image(str(tmp_path))
