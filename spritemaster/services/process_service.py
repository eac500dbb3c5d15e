"""Единая точка входа конвейера: проверка параметров, сборка листа, кодирование.

Принципы:
- SRP: оркестрация этапов; алгоритмы живут в отдельных сервисах.
- Fail fast: все фатальные ошибки поднимаются до выделения буферов.
"""
from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from spritemaster.config import Settings
from spritemaster.models.cancellation import CancellationToken
from spritemaster.models.errors import (
    InvalidSourceImageError,
    InvalidToleranceError,
    MissingBackgroundColorError,
)
from spritemaster.models.image_model import PixelBuffer
from spritemaster.models.layout import GridLayout
from spritemaster.models.options import EncodedImage, ProcessOptions
from spritemaster.services.assembler_service import SheetAssembler
from spritemaster.services.compositor_service import FrameCompositor, check_target_size
from spritemaster.services.encoder_service import SizeConstrainedEncoder

logger = logging.getLogger(__name__)


class ProcessService:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.compositor = FrameCompositor(self.settings)
        self.assembler = SheetAssembler(self.compositor)
        self.encoder = SizeConstrainedEncoder(self.settings)

    def validate(self, source: Image.Image, layout: GridLayout, options: ProcessOptions) -> None:
        """Проверяет предусловия обработки.

        Raises:
            MissingBackgroundColorError: цвет фона не задан.
            InvalidTargetSizeError: целевой размер кадра <= 0.
            InvalidToleranceError: допуск вне [0, 100].
            InvalidSourceImageError: изображение меньше одного пикселя на ячейку сетки.
        """
        if options.bg_color is None:
            raise MissingBackgroundColorError("Цвет фона не определён")
        check_target_size(options.target_frame_width, options.target_frame_height)
        if not 0 <= options.tolerance <= 100:
            raise InvalidToleranceError(f"Допуск должен быть в [0, 100]: {options.tolerance}")
        if source.width < layout.col_count or source.height < layout.row_count:
            raise InvalidSourceImageError(
                f"Изображение {source.width}x{source.height} меньше сетки {layout.col_count}x{layout.row_count}"
            )

    def assemble(
        self,
        source: PixelBuffer | Image.Image,
        layout: GridLayout,
        options: ProcessOptions,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PixelBuffer:
        """Собирает исправленный лист без кодирования.

        `PixelBuffer` переводится в изображение PIL один раз, до проверок.
        """
        if isinstance(source, PixelBuffer):
            source = source.to_image()
        self.validate(source, layout, options)
        return self.assembler.assemble(source, layout, options, cancel_token)

    def process(
        self,
        source: PixelBuffer | Image.Image,
        layout: GridLayout,
        options: ProcessOptions,
        cancel_token: Optional[CancellationToken] = None,
    ) -> EncodedImage:
        """Полный прогон: лист -> PNG в пределах бюджета (по возможности).

        Превышение бюджета после всех попыток не считается ошибкой:
        проверяйте `EncodedImage.over_budget`.
        """
        sheet = self.assemble(source, layout, options, cancel_token)
        result = self.encoder.encode(sheet, cancel_token)
        logger.info(
            "Processed %dx%d sheet -> %dx%d PNG, %d bytes, %d shrink attempts",
            sheet.width, sheet.height, result.width, result.height, result.size, result.attempts,
        )
        return result
