import numpy as np
import pytest
from PIL import Image

WHITE = (255, 255, 255)
RED = (200, 30, 30)


def make_sheet(cols=5, rows=4, cell=64, bg=WHITE, fg=RED, margin=16):
    """Grid sheet on a uniform background with a filled square in every cell."""
    pixels = np.zeros((rows * cell, cols * cell, 4), dtype=np.uint8)
    pixels[:, :, :3] = bg
    pixels[:, :, 3] = 255
    for row in range(rows):
        for col in range(cols):
            y, x = row * cell, col * cell
            pixels[y + margin:y + cell - margin, x + margin:x + cell - margin, :3] = fg
    return Image.fromarray(pixels)


@pytest.fixture
def sheet_image():
    return make_sheet()


@pytest.fixture
def sheet_path(tmp_path, sheet_image):
    path = tmp_path / "sheet.png"
    sheet_image.save(path)
    return path
