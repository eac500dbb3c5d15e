"""Модели данных для изображений.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: `ImageData` неизменяем; `PixelBuffer` явно мутируемый и имеет одного владельца.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class ImageData:
    """Неизменяемая модель исходного изображения и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Загруженное изображение PIL (RGBA).
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, например "RGBA".
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]


class PixelBuffer:
    """RGBA-буфер пикселей поверх непрерывного массива numpy формы (H, W, 4), uint8.

    Классификатор фона и компоновщик меняют буфер на месте. Если нужны две версии
    (например, до и после уменьшения), делайте `copy()` явно.
    """
    __slots__ = ("pixels",)

    def __init__(self, pixels: np.ndarray) -> None:
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Ожидался массив (H, W, 4), получено {pixels.shape}")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.uint8)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Полностью прозрачный буфер (0, 0, 0, 0)."""
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls(np.array(rgba, dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    def to_image(self) -> Image.Image:
        # (H, W, 4) uint8 is always decoded as RGBA
        return Image.fromarray(self.pixels)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    def paste(self, other: "PixelBuffer", x: int, y: int) -> None:
        """Копирует `other` в позицию (x, y), обрезая по краям буфера."""
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + other.width, self.width), min(y + other.height, self.height)
        if x0 >= x1 or y0 >= y1:
            return
        self.pixels[y0:y1, x0:x1] = other.pixels[y0 - y:y1 - y, x0 - x:x1 - x]
