"""Dev-бейдж: жук в центре иконки и красная полосатая лента снизу.

Принципы:
- SRP: сервис только накладывает бейдж; угол поворота приходит уже разрешённым
  либо разрешается из явно переданного генератора случайных чисел.
- Входное изображение не мутируется, всегда возвращается новый растр.
"""
from __future__ import annotations

import logging
import random
from functools import lru_cache
from typing import Callable, Dict, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, UnidentifiedImageError

from icongen.errors import ConfigurationError
from icongen.models.icon_model import BadgeConfig, BugVariant
from icongen.models.size_tables import RIBBON_MIN_EDGE
from icongen.services.raster_service import RESAMPLE_FILTER, RasterService

logger = logging.getLogger(__name__)

BADGE_BASE = 256
BADGE_FRACTION = 4  # сторона бейджа = сторона иконки / 4

PLATE_COLOR = (255, 244, 214, 215)
RIBBON_LIGHT = (214, 32, 48, 190)
RIBBON_DARK = (150, 0, 24, 190)

Color = Tuple[int, int, int, int]


# ---------- Встроенные жуки (рисуются внутри вписанной окружности, чтобы поворот ничего не обрезал) ----------
def _draw_moth(draw: ImageDraw.ImageDraw) -> None:
    upper, lower, body = (150, 118, 86, 255), (118, 92, 66, 255), (66, 48, 38, 255)
    draw.ellipse((40, 56, 124, 140), fill=upper)
    draw.ellipse((132, 56, 216, 140), fill=upper)
    draw.ellipse((60, 120, 124, 190), fill=lower)
    draw.ellipse((132, 120, 196, 190), fill=lower)
    draw.ellipse((70, 84, 94, 108), fill=(236, 214, 170, 255))
    draw.ellipse((162, 84, 186, 108), fill=(236, 214, 170, 255))
    draw.ellipse((116, 60, 140, 196), fill=body)
    draw.line([(124, 64), (100, 34)], fill=body, width=4)
    draw.line([(132, 64), (156, 34)], fill=body, width=4)


def _draw_spider(draw: ImageDraw.ImageDraw) -> None:
    ink = (28, 28, 32, 255)
    for i in range(4):
        y0 = 104 + i * 12
        knee_y = 70 + i * 30
        foot_y = 92 + i * 28
        draw.line([(116, y0), (72, knee_y), (44, foot_y)], fill=ink, width=6, joint="curve")
        draw.line([(140, y0), (184, knee_y), (212, foot_y)], fill=ink, width=6, joint="curve")
    draw.ellipse((108, 76, 148, 116), fill=ink)
    draw.ellipse((96, 108, 160, 180), fill=ink)
    draw.ellipse((118, 84, 126, 92), fill=(220, 40, 40, 255))
    draw.ellipse((130, 84, 138, 92), fill=(220, 40, 40, 255))


def _draw_beetle(draw: ImageDraw.ImageDraw) -> None:
    shell, ink = (36, 92, 60, 255), (24, 36, 28, 255)
    for i in range(3):
        y = 104 + i * 34
        draw.line([(92, y), (60, y - 14), (50, y + 6)], fill=ink, width=6, joint="curve")
        draw.line([(164, y), (196, y - 14), (206, y + 6)], fill=ink, width=6, joint="curve")
    draw.ellipse((104, 44, 152, 86), fill=ink)
    draw.ellipse((84, 72, 172, 204), fill=shell)
    draw.line([(128, 80), (128, 202)], fill=ink, width=4)


def _draw_ladybug(draw: ImageDraw.ImageDraw) -> None:
    shell, ink = (214, 40, 40, 255), (20, 20, 20, 255)
    draw.ellipse((100, 40, 156, 88), fill=ink)
    draw.ellipse((64, 64, 192, 196), fill=shell)
    draw.line([(128, 70), (128, 194)], fill=ink, width=4)
    for cx, cy in ((96, 104), (160, 104), (88, 148), (168, 148), (108, 176), (148, 176)):
        draw.ellipse((cx - 11, cy - 11, cx + 11, cy + 11), fill=ink)


_BUG_DRAWERS: Dict[BugVariant, Callable[[ImageDraw.ImageDraw], None]] = {
    BugVariant.MOTH: _draw_moth,
    BugVariant.SPIDER: _draw_spider,
    BugVariant.BEETLE: _draw_beetle,
    BugVariant.LADYBUG: _draw_ladybug,
}


@lru_cache(maxsize=None)
def _builtin_graphic(variant: BugVariant) -> Image.Image:
    drawer = _BUG_DRAWERS.get(variant)
    if drawer is None:
        raise ConfigurationError(f"Нет графики бейджа для варианта: {variant}", stage="badge")
    canvas = Image.new("RGBA", (BADGE_BASE, BADGE_BASE), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    draw.ellipse((0, 0, BADGE_BASE - 1, BADGE_BASE - 1), fill=PLATE_COLOR)
    drawer(draw)
    return canvas


@lru_cache(maxsize=16)
def _asset_graphic(path: str) -> Image.Image:
    try:
        with Image.open(path) as opened:
            opened.load()
            graphic = opened.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise ConfigurationError(f"Не удалось загрузить картинку бейджа {path}: {exc}", stage="badge") from exc

    # не квадратную картинку центрируем на прозрачном квадрате
    w, h = graphic.size
    edge = max(w, h)
    if w != h:
        square = Image.new("RGBA", (edge, edge), (0, 0, 0, 0))
        square.paste(graphic, ((edge - w) // 2, (edge - h) // 2))
        graphic = square
    return graphic


class BadgeService:
    def __init__(self, raster: Optional[RasterService] = None) -> None:
        self._raster = raster or RasterService()

    def load_graphic(self, config: BadgeConfig) -> Image.Image:
        """Исходная картинка бейджа для конфигурации.

        Raises:
            ConfigurationError: если картинку нельзя загрузить или вариант неизвестен.
        """
        if config.asset_path:
            return _asset_graphic(str(config.asset_path))
        if not isinstance(config.variant, BugVariant):
            raise ConfigurationError(f"Неизвестный вариант жука: {config.variant!r}", stage="badge")
        return _builtin_graphic(config.variant)

    def apply_badge(self, icon: Image.Image, config: BadgeConfig, rng: Optional[random.Random] = None) -> Image.Image:
        """Накладывает dev-бейдж на иконку.

        Args:
            icon: Квадратная RGBA-иконка конечного размера.
            config: Настройки бейджа; при `enabled=False` иконка возвращается как есть.
            rng: Генератор для случайного угла, если конфигурация ещё не разрешена.

        Returns:
            Новый растр того же размера с жуком (1/4 стороны, по центру) и,
            начиная с 32 px, красной лентой на нижней четверти.
        """
        if not config.enabled:
            return icon

        if not config.is_resolved:
            config = config.resolve(rng if rng is not None else random.Random())

        edge = icon.width
        out = icon if icon.mode == "RGBA" else icon.convert("RGBA")

        badge_edge = edge // BADGE_FRACTION
        if badge_edge > 0:
            badge = self.load_graphic(config)
            angle = float(config.rotation) % 360.0
            if angle:
                badge = badge.rotate(angle, resample=Image.Resampling.BICUBIC, expand=False)
            badge = badge.resize((badge_edge, badge_edge), RESAMPLE_FILTER)
            offset = ((edge - badge_edge) // 2, (icon.height - badge_edge) // 2)
            out = self._raster.alpha_over(out, badge, dest=offset)

        if edge >= RIBBON_MIN_EDGE:
            band = self.ribbon_layer(edge)
            out = self._raster.alpha_over(out, band, dest=(0, icon.height - band.height))

        return out

    def ribbon_layer(self, edge: int) -> Image.Image:
        """
        Полупрозрачная лента высотой edge // 4 с диагональными полосами шириной max(2, edge // 16).
        """
        band_height = edge // 4
        stripe = max(2, edge // 16)
        ys, xs = np.mgrid[0:band_height, 0:edge]
        light = ((xs + ys) // stripe) % 2 == 0
        layer = np.empty((band_height, edge, 4), dtype=np.uint8)
        layer[light] = RIBBON_LIGHT
        layer[~light] = RIBBON_DARK
        return Image.fromarray(layer)
