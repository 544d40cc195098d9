"""Иерархия ошибок генератора иконок.

Принципы:
- Все ошибки ядра наследуют `IconGenError` и несут контекст (платформа, размер, стадия).
- Ошибки не перехватываются по пути: первая ошибка прерывает весь запуск.
"""
from __future__ import annotations

from typing import Optional


class IconGenError(Exception):
    """Базовая ошибка генератора.

    Attributes:
        platform: Имя платформы (например, "ios"), если известно.
        size: Размер иконки в пикселях, если известен.
        stage: Стадия конвейера: "load", "resize", "badge", "opacity", "encode", "catalog".
    """

    def __init__(
        self,
        message: str,
        *,
        platform: Optional[str] = None,
        size: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.platform = platform
        self.size = size
        self.stage = stage

    def with_context(
        self,
        *,
        platform: Optional[str] = None,
        size: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> "IconGenError":
        """Дополняет контекст, не перезаписывая уже заданные поля. Возвращает self."""
        if self.platform is None:
            self.platform = platform
        if self.size is None:
            self.size = size
        if self.stage is None:
            self.stage = stage
        return self

    def __str__(self) -> str:
        parts = []
        if self.platform is not None:
            parts.append(f"platform={self.platform}")
        if self.size is not None:
            parts.append(f"size={self.size}")
        if self.stage is not None:
            parts.append(f"stage={self.stage}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class InputValidationError(IconGenError):
    """Исходное изображение непригодно: не найдено, повреждено, не квадратное."""


class ConfigurationError(IconGenError):
    """Неверная конфигурация: бейдж не загружается, плохой список размеров или цвет."""


class EncodingInvariantError(IconGenError):
    """Внутренняя ошибка: энкодер получил растр не того размера или без нужного слота."""
