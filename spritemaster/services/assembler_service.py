"""Сборка выходного листа из скомпонованных кадров.

Принципы:
- SRP: обходит сетку и раскладывает кадры; обработка кадра делегирована `FrameCompositor`.
- DIP: компоновщик передаётся в конструктор.
"""
from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from spritemaster.models.cancellation import CancellationToken
from spritemaster.models.image_model import PixelBuffer
from spritemaster.models.layout import GridLayout
from spritemaster.models.options import FrameOffset, ProcessOptions
from spritemaster.services.compositor_service import FrameCompositor, check_target_size

logger = logging.getLogger(__name__)


class SheetAssembler:
    def __init__(self, compositor: Optional[FrameCompositor] = None) -> None:
        self._compositor = compositor or FrameCompositor()

    def assemble(
        self,
        source: Image.Image,
        layout: GridLayout,
        options: ProcessOptions,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PixelBuffer:
        """Возвращает лист col_count*W x row_count*H, где W/H — целевой размер кадра.

        Ячейки без действия пропускаются и остаются полностью прозрачными.
        Отсутствующее смещение кадра считается нулевым.
        """
        frame_w, frame_h = options.target_frame_width, options.target_frame_height
        check_target_size(frame_w, frame_h)
        sheet = PixelBuffer.blank(frame_w * layout.col_count, frame_h * layout.row_count)

        composed = 0
        for row in range(layout.row_count):
            for col in range(layout.col_count):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                action = layout.cell_for_coordinate(row, col)
                if action is None:
                    continue
                offset = options.offset_for(action, col)
                if offset is None:
                    logger.debug("No offset for %s[%d], using (0, 0)", action, col)
                    offset = FrameOffset()
                frame = self._compositor.composite_frame(source, layout, row, col, offset, options)
                sheet.paste(frame, col * frame_w, row * frame_h)
                composed += 1

        logger.debug("Assembled %d frames into %dx%d sheet", composed, sheet.width, sheet.height)
        return sheet
