"""Модель исходного изображения.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image


@dataclass(frozen=True)
class SourceImage:
    """Проверенное квадратное исходное изображение и его метаданные.

    Fields:
        path: Путь к исходному файлу.
        pil_image: Декодированное изображение PIL в режиме "RGBA".
        width: Ширина, px.
        height: Высота, px (всегда равна ширине).
        mode: Режим PIL исходного файла до конвертации, например "P" или "RGB".
        size_bytes: Размер файла, если доступен.
    """
    path: Path
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    size_bytes: Optional[int]

    @property
    def edge(self) -> int:
        return self.width
