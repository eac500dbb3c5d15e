"""Контроллер сессии редактора: состояние между загрузкой листа и сохранением результата.

SOLID:
- SRP: хранит выбор пользователя и связывает его с сервисами (без логики обработки изображений).
- DIP: зависит от сервисов как от ролей; реализации подставляются через поля.
Clean Code:
- Методы компактны; тяжёлая логика вынесена в сервисы.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from spritemaster.models.errors import ProcessError
from spritemaster.models.image_model import ImageData
from spritemaster.models.layout import DEFAULT_LAYOUT, GridLayout
from spritemaster.models.options import RGB, EncodedImage, FrameOffset, ProcessOptions, RemovalMode
from spritemaster.services.image_service import ImageService
from spritemaster.services.process_service import ProcessService

logger = logging.getLogger(__name__)

DEFAULT_TARGET_HEIGHT = 128


def _round_half_up(value: float) -> int:
    """Округление с половиной вверх: 2.5 -> 3."""
    return math.floor(value + 0.5)


@dataclass
class AppController:
    """Состояние редактора без привязки к UI.

    Ответственности:
    - Загрузка листа через `ImageService` и сброс смещений/размеров.
    - Поддержка пропорций при вводе целевого размера кадра.
    - Запуск `ProcessService` с текущими параметрами и хранение результата.
    """
    layout: GridLayout = DEFAULT_LAYOUT
    image_service: ImageService = field(default_factory=ImageService)
    process_service: ProcessService = field(default_factory=ProcessService)

    current_image: Optional[ImageData] = None
    original_frame_size: Optional[Tuple[float, float]] = None
    target_size: Tuple[int, int] = (64, 64)
    tolerance: int = 10
    bg_color: Optional[RGB] = None
    offsets: Dict[str, List[FrameOffset]] = field(default_factory=dict)
    removal_mode: RemovalMode = RemovalMode.EDGE_FLOOD
    last_result: Optional[EncodedImage] = None

    def load_image(self, file_path: str | Path) -> ImageData:
        """Загружает лист и приводит состояние редактора к начальному."""
        image_data = self.image_service.load_image(file_path)
        self.current_image = image_data

        frame_w, frame_h = self.layout.source_cell_size(image_data.width, image_data.height)
        self.original_frame_size = (frame_w, frame_h)
        self.target_size = (_round_half_up(DEFAULT_TARGET_HEIGHT * frame_w / frame_h), DEFAULT_TARGET_HEIGHT)

        self.offsets = self.layout.initial_offsets()
        self.bg_color = self.image_service.detect_background_color(image_data.pil_image, self.layout)
        self.last_result = None
        logger.info(
            "Loaded %s (%dx%d), frame %.1fx%.1f, background %s",
            image_data.path, image_data.width, image_data.height, frame_w, frame_h, self.bg_color,
        )
        return image_data

    # ---- Target size (keeps the source frame aspect ratio) ----
    def _aspect_ratio(self) -> Optional[float]:
        if self.original_frame_size is None:
            return None
        frame_w, frame_h = self.original_frame_size
        return frame_w / frame_h

    def set_target_width(self, width: int) -> None:
        ratio = self._aspect_ratio()
        if ratio is None:
            return
        self.target_size = (width, _round_half_up(width / ratio))

    def set_target_height(self, height: int) -> None:
        ratio = self._aspect_ratio()
        if ratio is None:
            return
        self.target_size = (_round_half_up(height * ratio), height)

    # ---- Editor inputs ----
    def set_offset(self, action: str, frame_index: int, axis: str, value: int) -> None:
        """Меняет одну координату смещения кадра. Несуществующий кадр игнорируется."""
        if axis not in ("x", "y"):
            raise ValueError(f"Ось должна быть 'x' или 'y': {axis!r}")
        frames = self.offsets.get(action)
        if frames is None or not 0 <= frame_index < len(frames):
            return
        current = frames[frame_index]
        frames[frame_index] = FrameOffset(value, current.y) if axis == "x" else FrameOffset(current.x, value)

    def set_tolerance(self, tolerance: int) -> None:
        self.tolerance = max(0, min(100, int(tolerance)))

    def set_removal_mode(self, mode: RemovalMode | str) -> None:
        self.removal_mode = RemovalMode(mode)

    def set_bg_color(self, color: RGB) -> None:
        self.bg_color = color

    # ---- Processing ----
    def build_options(self) -> ProcessOptions:
        width, height = self.target_size
        return ProcessOptions(
            target_frame_width=width,
            target_frame_height=height,
            tolerance=self.tolerance,
            bg_color=self.bg_color,
            offsets={action: list(frames) for action, frames in self.offsets.items()},
            removal_mode=self.removal_mode,
        )

    def process(self) -> EncodedImage:
        """Обрабатывает текущий лист.

        Raises:
            RuntimeError: если изображение ещё не загружено.
            ProcessError: ошибки конвейера пробрасываются как есть.
        """
        if self.current_image is None:
            raise RuntimeError("Сначала загрузите изображение")
        try:
            result = self.process_service.process(self.current_image.pil_image, self.layout, self.build_options())
        except ProcessError:
            logger.exception("Processing failed for %s", self.current_image.path)
            raise
        self.last_result = result
        return result

    def save(self, file_path: str | Path) -> Path:
        if self.last_result is None:
            raise RuntimeError("Нет результата для сохранения")
        return self.image_service.save_bytes(self.last_result.data, file_path)
