"""Загрузка исходного изображения с диска и проверка его пригодности.

Принципы:
- SRP: класс отвечает только за загрузку, декодирование и базовые проверки.
- Все отказы превращаются в `InputValidationError` до того, как что-либо записано.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from icongen.errors import InputValidationError
from icongen.models.image_model import SourceImage

logger = logging.getLogger(__name__)


class ImageService:
    def load_image(self, file_path: str | Path) -> SourceImage:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `SourceImage` c полностью декодированным `PIL.Image.Image` в режиме RGBA.

        Raises:
            InputValidationError: файл не существует, не распознан как изображение,
                повреждён, анимирован, имеет неподдерживаемый режим или не квадратный.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise InputValidationError(f"Файл не найден: {path}", stage="load")

        try:
            with Image.open(path) as opened:
                if getattr(opened, "n_frames", 1) > 1:
                    raise InputValidationError(f"Анимированные изображения не поддерживаются: {path}", stage="load")
                source_mode = opened.mode
                opened.load()
                pil_image = opened.convert("RGBA")
        except UnidentifiedImageError as exc:
            raise InputValidationError(f"Файл не является изображением: {path}", stage="load") from exc
        except (OSError, ValueError) as exc:
            # усечённый файл или режим, который PIL не умеет конвертировать в RGBA
            raise InputValidationError(f"Не удалось декодировать изображение {path}: {exc}", stage="load") from exc

        return self.validate(pil_image, path=path, mode=source_mode)

    def validate(self, pil_image: Image.Image, path: Path = Path("<memory>"), mode: Optional[str] = None) -> SourceImage:
        """Проверяет уже декодированное изображение и упаковывает его в `SourceImage`."""
        width, height = pil_image.size
        if width != height:
            raise InputValidationError(
                f"Исходное изображение должно быть квадратным, получено {width}x{height}", stage="load"
            )
        if width == 0:
            raise InputValidationError("Пустое изображение", stage="load")
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.info("Loaded %s (%dx%d, mode %s)", path, width, height, mode or pil_image.mode)
        return SourceImage(
            path=path,
            pil_image=pil_image,
            width=width,
            height=height,
            mode=mode or pil_image.mode,
            size_bytes=size_bytes,
        )
