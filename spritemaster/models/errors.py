"""Типизированные ошибки конвейера обработки спрайт-листа."""
from __future__ import annotations


class ProcessError(Exception):
    """Базовая ошибка обработки. Поднимается до любой мутации буферов."""


class MissingBackgroundColorError(ProcessError, ValueError):
    """Цвет фона не задан (не определён автоматически и не выбран вручную)."""


class InvalidTargetSizeError(ProcessError, ValueError):
    """Целевая ширина или высота кадра <= 0."""


class InvalidToleranceError(ProcessError, ValueError):
    """Допуск вне диапазона [0, 100]."""


class InvalidSourceImageError(ProcessError, ValueError):
    """Исходное изображение нельзя разбить на ячейки сетки."""


class EncodingUnavailableError(ProcessError, RuntimeError):
    """Кодировщик изображения недоступен или не вернул результат."""


class ProcessCancelledError(ProcessError):
    """Обработка прервана через `CancellationToken`."""


class LayoutError(ValueError):
    """Нарушены инварианты раскладки сетки."""
