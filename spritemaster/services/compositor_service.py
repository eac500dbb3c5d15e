"""Компоновка одного кадра: вырезка ячейки, масштабирование, смещение, удаление фона."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from PIL import Image

from spritemaster.config import Settings
from spritemaster.models.errors import InvalidTargetSizeError, MissingBackgroundColorError
from spritemaster.models.image_model import PixelBuffer
from spritemaster.models.layout import GridLayout
from spritemaster.models.options import FrameOffset, ProcessOptions
from spritemaster.services.background_service import get_remover

logger = logging.getLogger(__name__)


def check_target_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise InvalidTargetSizeError(f"Размер кадра должен быть положительным: {width}x{height}")


class FrameCompositor:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or Settings()

    def source_box(self, source: Image.Image, layout: GridLayout, row: int, col: int) -> Tuple[float, float, float, float]:
        """Прямоугольник ячейки (left, top, right, bottom) в координатах исходного листа."""
        cell_w, cell_h = layout.source_cell_size(source.width, source.height)
        left, top = col * cell_w, row * cell_h
        return left, top, left + cell_w, top + cell_h

    def composite_frame(
        self,
        source: Image.Image,
        layout: GridLayout,
        row: int,
        col: int,
        offset: FrameOffset,
        options: ProcessOptions,
    ) -> PixelBuffer:
        """Собирает кадр ячейки (row, col) размера target_frame_width x target_frame_height.

        Ячейка масштабируется до целевого размера и кладётся левым верхним углом в
        (offset.x, offset.y); непокрытые пиксели остаются (0, 0, 0, 0). Затем
        выбранный режим удаляет фон на месте.

        Raises:
            InvalidTargetSizeError: до выделения буфера, если размер <= 0.
            MissingBackgroundColorError: если `options.bg_color` не задан.
        """
        target_w, target_h = options.target_frame_width, options.target_frame_height
        check_target_size(target_w, target_h)
        if options.bg_color is None:
            raise MissingBackgroundColorError("Цвет фона не определён")

        rgba = source if source.mode == "RGBA" else source.convert("RGBA")
        resized = rgba.resize(
            (target_w, target_h),
            self._settings.resample_filter,
            box=self.source_box(rgba, layout, row, col),
        )
        frame = PixelBuffer.blank(target_w, target_h)
        frame.paste(PixelBuffer.from_image(resized), offset.x, offset.y)

        get_remover(options.removal_mode).remove(frame, options.bg_color, options.tolerance)
        return frame

    def extract_action_frames(
        self,
        source: Image.Image,
        layout: GridLayout,
        action: str,
        options: ProcessOptions,
    ) -> List[PixelBuffer]:
        """Кадры одного действия по порядку, с учётом смещений (для предпросмотра анимации)."""
        frames: List[PixelBuffer] = []
        for row, col in layout.action_cells(action):
            offset = options.offset_for(action, col) or FrameOffset()
            frames.append(self.composite_frame(source, layout, row, col, offset, options))
        logger.debug("Extracted %d frames for %s", len(frames), action)
        return frames
