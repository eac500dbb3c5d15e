"""Модель сетки спрайт-листа: строки, столбцы и принадлежность ячеек действиям.

Принципы:
- SRP: только описание раскладки и поиск по ней, без работы с пикселями.
- Чистый код: неизменяемость (`frozen=True`), инварианты проверяются при создании.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from spritemaster.models.errors import LayoutError
from spritemaster.models.options import FrameOffset


@dataclass(frozen=True)
class ActionEntry:
    """Анимация, занимающая одну строку сетки, кадры с 0 по frame_count - 1."""
    row: int
    frame_count: int


@dataclass(frozen=True)
class GridLayout:
    """Раскладка листа.

    Fields:
        row_count: Количество строк сетки.
        col_count: Количество столбцов сетки.
        actions: Имя действия -> `ActionEntry`. Порядок сохраняется.
    """
    row_count: int
    col_count: int
    actions: Mapping[str, ActionEntry] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.row_count < 1 or self.col_count < 1:
            raise LayoutError(f"Сетка должна быть не меньше 1x1: {self.row_count}x{self.col_count}")
        owners: Dict[int, str] = {}
        for name, entry in self.actions.items():
            if not 0 <= entry.row < self.row_count:
                raise LayoutError(f"Строка {entry.row} действия {name!r} вне сетки")
            if not 1 <= entry.frame_count <= self.col_count:
                raise LayoutError(f"Число кадров {entry.frame_count} действия {name!r} вне [1, {self.col_count}]")
            if entry.row in owners:
                raise LayoutError(f"Строка {entry.row} занята действиями {owners[entry.row]!r} и {name!r}")
            owners[entry.row] = name
        # read-only view so the layout stays immutable after validation
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions)))

    def __deepcopy__(self, memo: dict) -> "GridLayout":
        # immutable, so a copy may share the same instance
        return self

    def cell_for_coordinate(self, row: int, col: int) -> Optional[str]:
        """Возвращает имя действия, которому принадлежит ячейка, или None."""
        for name, entry in self.actions.items():
            if entry.row == row and 0 <= col < entry.frame_count:
                return name
        return None

    def action_cells(self, action: str) -> List[Tuple[int, int]]:
        """Ячейки (row, col) действия в порядке кадров.

        Raises:
            KeyError: если действия нет в раскладке.
        """
        entry = self.actions[action]
        return [(entry.row, col) for col in range(entry.frame_count)]

    def cells(self) -> Iterator[Tuple[int, int, str]]:
        """Все занятые ячейки построчно: (row, col, action)."""
        for row in range(self.row_count):
            for col in range(self.col_count):
                action = self.cell_for_coordinate(row, col)
                if action is not None:
                    yield row, col, action

    def source_cell_size(self, width: int, height: int) -> Tuple[float, float]:
        """Размер одной ячейки исходного листа (может быть дробным)."""
        return width / self.col_count, height / self.row_count

    def initial_offsets(self) -> Dict[str, List[FrameOffset]]:
        """Нулевые смещения для каждого кадра каждого действия."""
        return {name: [FrameOffset() for _ in range(entry.frame_count)] for name, entry in self.actions.items()}


DEFAULT_LAYOUT = GridLayout(
    row_count=4,
    col_count=5,  # by the widest action (Attack)
    actions={
        "Idle": ActionEntry(row=0, frame_count=4),
        "Hit": ActionEntry(row=1, frame_count=1),
        "Walk": ActionEntry(row=2, frame_count=4),
        "Attack": ActionEntry(row=3, frame_count=5),
    },
)
