from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image

from icongen.errors import ConfigurationError

RESAMPLE_FILTER = Image.Resampling.LANCZOS


class RasterService:
    # ---------- Вспомогательные функции ----------
    def _to_rgba_np(self, image: Image.Image) -> np.ndarray:
        """
        Возвращает numpy-массив float32 формы (H, W, 4) в диапазоне [0, 255].
        """
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return np.asarray(rgba, dtype=np.float32)

    def _from_float_np(self, arr: np.ndarray) -> Image.Image:
        """
        Округляет массив к uint8 и собирает RGBA-изображение.
        """
        out = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
        return Image.fromarray(out)  # (H, W, 4) uint8 -> RGBA

    # ---------- 1) Ресэмплинг ----------
    def resize(self, source: Image.Image, size: int) -> Image.Image:
        """
        Новый квадратный растр size x size, фильтр Ланцоша (3 лепестка) и вверх, и вниз.
        Квадратность источника не перепроверяется: она гарантирована при загрузке.
        """
        if size <= 0:
            raise ConfigurationError(f"Размер иконки должен быть положительным: {size}", size=size, stage="resize")
        rgba = source if source.mode == "RGBA" else source.convert("RGBA")
        if rgba.size == (size, size):
            return rgba.copy()
        return rgba.resize((size, size), RESAMPLE_FILTER)

    # ---------- 2) Непрозрачность для iOS ----------
    def force_opaque(self, icon: Image.Image, background: Tuple[int, int, int]) -> Image.Image:
        """
        «Расплющивание» на фон: rgb = rgb * a + bg * (1 - a), где a = alpha / 255.
        Альфа результата = 255 для всех пикселей.
        """
        arr = self._to_rgba_np(icon)
        alpha = arr[..., 3:4] / 255.0
        bg = np.asarray(background[:3], dtype=np.float32).reshape(1, 1, 3)
        out = np.empty_like(arr)
        out[..., :3] = arr[..., :3] * alpha + bg * (1.0 - alpha)
        out[..., 3] = 255.0
        return self._from_float_np(out)

    # ---------- 3) Круглая маска (Android round) ----------
    def apply_circular_mask(self, icon: Image.Image) -> Image.Image:
        """
        Круглая альфа-маска: диаметр = сторона, центр в центре растра.
        Край сглажен на ширину одного пикселя (покрытие по расстоянию от центра пикселя).
        """
        arr = self._to_rgba_np(icon)
        h, w = arr.shape[:2]
        radius = w / 2.0
        ys, xs = np.mgrid[0:h, 0:w].astype(np.float32)
        dist = np.hypot(xs + 0.5 - radius, ys + 0.5 - h / 2.0)
        coverage = np.clip(radius - dist + 0.5, 0.0, 1.0)
        arr[..., 3] = arr[..., 3] * coverage
        return self._from_float_np(arr)

    # ---------- 4) Наложение (source-over) ----------
    def alpha_over(self, base: Image.Image, overlay: Image.Image, dest: Tuple[int, int] = (0, 0)) -> Image.Image:
        """
        Накладывает overlay на копию base по правилу source-over; base не мутируется.
        """
        out = base if base.mode == "RGBA" else base.convert("RGBA")
        out = out.copy()
        layer = overlay if overlay.mode == "RGBA" else overlay.convert("RGBA")
        out.alpha_composite(layer, dest=dest)
        return out
