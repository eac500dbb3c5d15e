"""Кодирование листа в PNG с уменьшением до укладывания в бюджет размера.

Цикл ограничен `Settings.max_attempts`: на попытке n холст масштабируется
до shrink_factor ** n от размеров собранного листа. Если после последней
попытки PNG всё ещё больше бюджета, возвращается последний результат
(`EncodedImage.over_budget` = True), это не ошибка.
"""
from __future__ import annotations

import io
import logging
import math
from typing import List, Optional, Tuple

from PIL import Image

from spritemaster.config import Settings
from spritemaster.models.cancellation import CancellationToken
from spritemaster.models.errors import EncodingUnavailableError
from spritemaster.models.image_model import PixelBuffer
from spritemaster.models.options import EncodeAttempt, EncodedImage

logger = logging.getLogger(__name__)


class SizeConstrainedEncoder:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or Settings()

    def encode_png(self, image: Image.Image) -> bytes:
        """Один вызов кодировщика PNG.

        Raises:
            EncodingUnavailableError: если Pillow не смог закодировать или вернул пустой результат.
        """
        stream = io.BytesIO()
        try:
            image.save(stream, format="PNG", optimize=self._settings.png_optimize)
        except (OSError, KeyError, ValueError) as exc:
            raise EncodingUnavailableError(f"Не удалось закодировать PNG: {exc}") from exc
        data = stream.getvalue()
        if not data:
            raise EncodingUnavailableError("Кодировщик PNG вернул пустой результат")
        return data

    def shrink_size(self, width: int, height: int, attempt: int) -> Tuple[int, int]:
        """Размер холста для попытки `attempt` (1..max_attempts) от исходных размеров."""
        scale = self._settings.shrink_factor ** attempt
        return max(1, math.floor(width * scale)), max(1, math.floor(height * scale))

    def encode(self, sheet: PixelBuffer, cancel_token: Optional[CancellationToken] = None) -> EncodedImage:
        settings = self._settings
        original = sheet.to_image()
        current = original
        attempts = 0
        history: List[EncodeAttempt] = []

        while True:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            data = self.encode_png(current)
            history.append(EncodeAttempt(current.width, current.height, len(data)))
            logger.debug("Encode attempt %d: %dx%d -> %d bytes", attempts, current.width, current.height, len(data))

            if len(data) <= settings.byte_budget:
                break
            if attempts >= settings.max_attempts:
                logger.warning(
                    "PNG is %d bytes after %d shrink attempts, budget is %d bytes",
                    len(data), attempts, settings.byte_budget,
                )
                break

            attempts += 1
            current = original.resize(
                self.shrink_size(original.width, original.height, attempts),
                settings.resample_filter,
            )

        return EncodedImage(
            data=data,
            width=current.width,
            height=current.height,
            attempts=attempts,
            budget=settings.byte_budget,
            history=tuple(history),
        )
