from __future__ import annotations

import threading

from spritemaster.models.errors import ProcessCancelledError


class CancellationToken:
    """Флаг отмены, который проверяется в начале каждой итерации конвейера."""
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ProcessCancelledError("Обработка отменена")
