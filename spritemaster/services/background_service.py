"""Удаление фона кадра: цветовой ключ и заливка от краёв.

Принципы:
- OCP: режимы реализованы как взаимозаменяемые стратегии `BackgroundRemover`.
- SRP: стратегии делят один предикат совпадения с фоном и только меняют альфа-канал.

Совпадение с фоном — L1-расстояние по RGB: |r-R| + |g-G| + |b-B| <= tolerance * 3.
Альфа-канал в сравнении не участвует: уже прозрачный пиксель классифицируется
по своему RGB. Ни один режим не меняет RGB, поэтому повторный проход ничего не меняет.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, Sequence

import numpy as np

from spritemaster.models.image_model import PixelBuffer
from spritemaster.models.options import RGB, RemovalMode

logger = logging.getLogger(__name__)


def is_background_match(pixel: Sequence[int], bg_color: RGB, tolerance: int) -> bool:
    """Проверяет один пиксель (r, g, b[, a]) на совпадение с цветом фона."""
    diff = abs(int(pixel[0]) - bg_color[0]) + abs(int(pixel[1]) - bg_color[1]) + abs(int(pixel[2]) - bg_color[2])
    return diff <= tolerance * 3


def background_mask(buffer: PixelBuffer, bg_color: RGB, tolerance: int) -> np.ndarray:
    """Булева маска (H, W): True там, где пиксель совпадает с фоном.

    Векторизованная версия `is_background_match` для всего буфера.
    """
    rgb = buffer.pixels[:, :, :3].astype(np.int16)
    diff = np.abs(rgb - np.asarray(bg_color, dtype=np.int16)).sum(axis=2)
    return diff <= tolerance * 3


class BackgroundRemover(ABC):
    """Стратегия удаления фона. Меняет буфер на месте и возвращает число стёртых пикселей."""
    mode: RemovalMode

    @abstractmethod
    def remove(self, buffer: PixelBuffer, bg_color: RGB, tolerance: int) -> int:
        ...


class ColorKeyRemover(BackgroundRemover):
    """Стирает каждый совпавший пиксель, независимо от связности с краем."""
    mode = RemovalMode.COLOR_KEY

    def remove(self, buffer: PixelBuffer, bg_color: RGB, tolerance: int) -> int:
        mask = background_mask(buffer, bg_color, tolerance)
        buffer.alpha[mask] = 0
        erased = int(mask.sum())
        logger.debug("Color key removed %d px of %dx%d", erased, buffer.width, buffer.height)
        return erased


class EdgeFloodRemover(BackgroundRemover):
    """Заливка в ширину от совпавших пикселей границы, 4-связность.

    Пиксель стирается тогда и только тогда, когда от него до края есть путь
    из совпадающих с фоном пикселей. Замкнутые внутренние области цвета фона остаются.
    """
    mode = RemovalMode.EDGE_FLOOD

    def remove(self, buffer: PixelBuffer, bg_color: RGB, tolerance: int) -> int:
        width, height = buffer.width, buffer.height
        if width == 0 or height == 0:
            return 0
        # flat indices: i = y * width + x
        matches = background_mask(buffer, bg_color, tolerance).ravel()
        visited = np.zeros(width * height, dtype=bool)
        queue: deque = deque()

        border = np.zeros((height, width), dtype=bool)
        border[0, :] = border[-1, :] = True
        border[:, 0] = border[:, -1] = True
        for index in np.flatnonzero(border.ravel() & matches):
            visited[index] = True
            queue.append(int(index))

        while queue:
            index = queue.popleft()
            y, x = divmod(index, width)
            # up / down / left / right
            if y > 0:
                self._visit(index - width, matches, visited, queue)
            if y < height - 1:
                self._visit(index + width, matches, visited, queue)
            if x > 0:
                self._visit(index - 1, matches, visited, queue)
            if x < width - 1:
                self._visit(index + 1, matches, visited, queue)

        buffer.alpha[visited.reshape(height, width)] = 0
        erased = int(visited.sum())
        logger.debug("Edge flood removed %d px of %dx%d", erased, width, height)
        return erased

    @staticmethod
    def _visit(index: int, matches: np.ndarray, visited: np.ndarray, queue: deque) -> None:
        if not visited[index] and matches[index]:
            visited[index] = True
            queue.append(index)


_REMOVERS: Dict[RemovalMode, BackgroundRemover] = {
    RemovalMode.EDGE_FLOOD: EdgeFloodRemover(),
    RemovalMode.COLOR_KEY: ColorKeyRemover(),
}


def get_remover(mode: RemovalMode | str) -> BackgroundRemover:
    """Возвращает стратегию для режима ("edge" / "color" или `RemovalMode`).

    Raises:
        ValueError: если режим неизвестен.
    """
    return _REMOVERS[RemovalMode(mode)]
