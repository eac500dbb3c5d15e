"""Настройки конвейера: бюджет размера, число попыток сжатия, фильтр масштабирования.

Значения по умолчанию можно переопределить переменными окружения
``SPRITEMASTER_*``. Настройки передаются в сервисы явно, глобального состояния нет.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from PIL import Image

RESAMPLE_FILTERS: Dict[str, Image.Resampling] = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
    "box": Image.Resampling.BOX,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Параметры кодирования и масштабирования.

    Fields:
        byte_budget: Максимальный размер PNG, байт.
        max_attempts: Максимум уменьшений холста.
        shrink_factor: Множитель размеров на каждую попытку, (0, 1).
        resample: Имя фильтра из `RESAMPLE_FILTERS`.
        png_optimize: Передавать ли `optimize=True` кодировщику PNG.
    """
    byte_budget: int = 100 * 1024
    max_attempts: int = 5
    shrink_factor: float = 0.9
    resample: str = "bilinear"
    png_optimize: bool = False

    def __post_init__(self) -> None:
        if self.byte_budget <= 0:
            raise ValueError(f"byte_budget must be positive: {self.byte_budget}")
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0: {self.max_attempts}")
        if not 0.0 < self.shrink_factor < 1.0:
            raise ValueError(f"shrink_factor must be in (0, 1): {self.shrink_factor}")
        if self.resample not in RESAMPLE_FILTERS:
            raise ValueError(f"Unknown resample filter: {self.resample}")

    @property
    def resample_filter(self) -> Image.Resampling:
        return RESAMPLE_FILTERS[self.resample]


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """Собирает `Settings` из значений по умолчанию, окружения и явных аргументов.

    Явные `overrides` (если не None) имеют приоритет над окружением.

    Raises:
        ValueError: если значение переменной окружения не разбирается.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, object] = {}
    try:
        if "SPRITEMASTER_BYTE_BUDGET" in env:
            values["byte_budget"] = int(env["SPRITEMASTER_BYTE_BUDGET"])
        if "SPRITEMASTER_MAX_ATTEMPTS" in env:
            values["max_attempts"] = int(env["SPRITEMASTER_MAX_ATTEMPTS"])
        if "SPRITEMASTER_SHRINK_FACTOR" in env:
            values["shrink_factor"] = float(env["SPRITEMASTER_SHRINK_FACTOR"])
    except ValueError as exc:
        raise ValueError(f"Invalid SPRITEMASTER_* setting: {exc}") from exc
    if "SPRITEMASTER_RESAMPLE" in env:
        values["resample"] = env["SPRITEMASTER_RESAMPLE"].strip().lower()
    if "SPRITEMASTER_PNG_OPTIMIZE" in env:
        values["png_optimize"] = _parse_bool("SPRITEMASTER_PNG_OPTIMIZE", env["SPRITEMASTER_PNG_OPTIMIZE"])

    values.update({key: value for key, value in overrides.items() if value is not None})
    return replace(Settings(), **values)
