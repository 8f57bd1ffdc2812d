"""Decode image files into the BGR arrays PaddleOCR consumes."""

from __future__ import annotations

import cv2
import numpy as np
from PIL import Image


def decode_image(path: str) -> np.ndarray:
    """
    Load the file at ``path`` into an H x W x 3 uint8 BGR array.

    Raises FileNotFoundError for missing files, PIL.UnidentifiedImageError for
    data Pillow does not recognize and OSError for truncated or corrupt files.
    """
    with Image.open(path) as pil_image:
        pil_image.load()
        rgb = pil_image.convert("RGB")
    return cv2.cvtColor(np.array(rgb), cv2.COLOR_RGB2BGR)
