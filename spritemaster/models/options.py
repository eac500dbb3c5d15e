"""Параметры обработки и результат кодирования.

Принципы:
- SRP: только структуры данных, проверки выполняет `ProcessService`.
- Чистый код: неизменяемые результаты (`frozen=True`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

RGB = Tuple[int, int, int]


class RemovalMode(str, Enum):
    """Алгоритм удаления фона."""
    EDGE_FLOOD = "edge"
    COLOR_KEY = "color"


@dataclass(frozen=True)
class FrameOffset:
    """Смещение кадра в пикселях, может быть отрицательным."""
    x: int = 0
    y: int = 0


@dataclass
class ProcessOptions:
    """Настройки одного запуска обработки.

    Fields:
        target_frame_width: Ширина кадра на выходе, px.
        target_frame_height: Высота кадра на выходе, px.
        tolerance: Допуск совпадения с фоном, 0..100.
        bg_color: Цвет фона (r, g, b) или None, если ещё не определён.
        offsets: Имя действия -> смещения кадров по порядку.
        removal_mode: Режим удаления фона.
    """
    target_frame_width: int
    target_frame_height: int
    tolerance: int = 10
    bg_color: Optional[RGB] = None
    offsets: Dict[str, List[FrameOffset]] = field(default_factory=dict)
    removal_mode: RemovalMode = RemovalMode.EDGE_FLOOD

    def offset_for(self, action: str, index: int) -> Optional[FrameOffset]:
        """Смещение кадра или None, если оно не задано."""
        frames = self.offsets.get(action) or []
        if 0 <= index < len(frames):
            return frames[index]
        return None


@dataclass(frozen=True)
class EncodeAttempt:
    """Одна попытка кодирования: размеры холста и размер результата в байтах."""
    width: int
    height: int
    size: int


@dataclass(frozen=True)
class EncodedImage:
    """Закодированный PNG и история попыток сжатия.

    `attempts` — число выполненных уменьшений (0, если первый результат уложился в бюджет).
    """
    data: bytes
    width: int
    height: int
    attempts: int
    budget: int
    history: Tuple[EncodeAttempt, ...] = ()

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def over_budget(self) -> bool:
        return self.size > self.budget
