"""Загрузка изображений с диска, определение цвета фона и сохранение результата.

Принципы:
- SRP: класс отвечает только за ввод-вывод и базовое извлечение свойств.
- LSP/ISP: возвращает `ImageData` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from spritemaster.models.image_model import ImageData
from spritemaster.models.layout import GridLayout
from spritemaster.models.options import RGB


class ImageService:
    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `ImageData` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            ValueError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as opened:
                pil_image = opened.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise ValueError(f"Файл не является изображением: {path}") from exc

        width, height = pil_image.size
        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        return ImageData(
            path=path,
            pil_image=pil_image,
            width=width,
            height=height,
            mode=pil_image.mode,
            size_bytes=size_bytes,
        )

    def detect_background_color(self, image: Image.Image, layout: GridLayout, sample: int = 2) -> RGB:
        """Автоматическая догадка о цвете фона по левому верхнему углу первой ячейки.

        Берётся медиана по каждому каналу в квадрате `sample` x `sample` пикселей
        (не больше самой ячейки), чтобы одиночный шумный пиксель не сбивал цвет.
        """
        cell_w, cell_h = layout.source_cell_size(image.width, image.height)
        side_w = max(1, min(sample, int(cell_w)))
        side_h = max(1, min(sample, int(cell_h)))
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        corner = [rgba.getpixel((x, y)) for y in range(side_h) for x in range(side_w)]
        middle = len(corner) // 2
        r = sorted(p[0] for p in corner)[middle]
        g = sorted(p[1] for p in corner)[middle]
        b = sorted(p[2] for p in corner)[middle]
        return int(r), int(g), int(b)

    def save_bytes(self, data: bytes, file_path: str | Path) -> Path:
        """Записывает закодированный результат на диск, создавая каталоги."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
