"""Командная строка: разбор флагов и их превращение в `IconRequest`.

Ядро конвейера никогда не видит сырых флагов: сюда стекается вся логика
сочетаний (--desktop-only, --mobile-only, явные платформы, --png).
"""
from __future__ import annotations

import argparse
import logging
import math
from typing import FrozenSet, Optional, Sequence, Tuple, Union

from PIL import ImageColor

from icongen.errors import ConfigurationError
from icongen.models.icon_model import RANDOM_ROTATION, BadgeConfig, BugVariant, IconRequest, PlatformTarget

logger = logging.getLogger(__name__)

DESKTOP = frozenset({PlatformTarget.WINDOWS, PlatformTarget.MACOS, PlatformTarget.LINUX, PlatformTarget.TAURI_DESKTOP})
MOBILE = frozenset({PlatformTarget.ANDROID, PlatformTarget.IOS})
ALL_PLATFORMS = frozenset(PlatformTarget)

# флаг argparse -> платформа
PLATFORM_FLAGS = (
    ("windows", PlatformTarget.WINDOWS),
    ("macos", PlatformTarget.MACOS),
    ("linux", PlatformTarget.LINUX),
    ("android", PlatformTarget.ANDROID),
    ("ios", PlatformTarget.IOS),
    ("tauri_desktop", PlatformTarget.TAURI_DESKTOP),
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icon-gen",
        description="Generate various icons for all major platforms",
    )
    parser.add_argument("input", metavar="INPUT", help="Path to the square source icon (PNG with transparency recommended)")
    parser.add_argument("-o", "--output", metavar="DIR", default="./icons", help="Output directory (default: ./icons)")
    parser.add_argument(
        "-p", "--png", metavar="SIZES", default=None,
        help="Comma-separated custom PNG sizes; when set, these replace the Linux PNG set",
    )

    only = parser.add_argument_group("presets")
    only.add_argument("--ico-only", action="store_true", help="Generate only the ICO file (Windows)")
    only.add_argument("--icns-only", action="store_true", help="Generate only macOS icons (ICNS)")
    only.add_argument("--desktop-only", action="store_true", help="Windows, macOS, Linux and Tauri desktop icons")
    only.add_argument("--mobile-only", action="store_true", help="Android and iOS icons")

    platforms = parser.add_argument_group("platforms")
    platforms.add_argument("--windows", action="store_true", help="Generate icons for Windows")
    platforms.add_argument("--macos", action="store_true", help="Generate icons for macOS")
    platforms.add_argument("--linux", action="store_true", help="Generate icons for Linux desktops")
    platforms.add_argument("--android", action="store_true", help="Generate icons for Android")
    platforms.add_argument("--ios", action="store_true", help="Generate icons for iOS")
    platforms.add_argument("--tauri-desktop", action="store_true", help="Generate the Tauri desktop bundle icons")
    platforms.add_argument("--ios-color", metavar="COLOR", default=None, help="Background color for iOS icons (CSS color, default #ffffff)")

    dev = parser.add_argument_group("development badge")
    dev.add_argument("--dev-mode", action="store_true", help="Overlay a bug badge and a red ribbon on every icon")
    dev.add_argument("--dev-bug", metavar="VARIANT", default=BugVariant.MOTH.value,
                     help="Bug variant: " + ", ".join(v.value for v in BugVariant))
    dev.add_argument("--dev-rotation", metavar="ANGLE", default=None, help="Badge rotation in degrees or 'random'")
    dev.add_argument("--dev-badge-image", metavar="PATH", default=None, help="Custom badge graphic instead of the built-in bug")
    dev.add_argument("--seed", type=int, default=None, help="Seed for the random badge rotation")

    parser.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    parser.add_argument("--log-level", default=None, help="Console log level (default: INFO)")
    return parser


# ---- Parsing helpers ----
def parse_sizes(text: str) -> Tuple[int, ...]:
    """'16,32, 64' -> (16, 32, 64). Непустой список положительных целых."""
    sizes = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            size = int(chunk)
        except ValueError as exc:
            raise ConfigurationError(f"Неверный размер PNG: {chunk!r}") from exc
        if size <= 0:
            raise ConfigurationError(f"Размер PNG должен быть положительным: {size}")
        sizes.append(size)
    if not sizes:
        raise ConfigurationError(f"Пустой список размеров PNG: {text!r}")
    return tuple(sizes)


def parse_color(text: str) -> Tuple[int, int, int]:
    """CSS-цвет ('#fff', '#0000FF', 'navy', 'rgb(0,0,255)') -> RGB; альфа отбрасывается."""
    try:
        rgb = ImageColor.getrgb(text.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Неверный цвет: {text!r}") from exc
    return rgb[0], rgb[1], rgb[2]


def parse_variant(text: str) -> BugVariant:
    try:
        return BugVariant(text.strip().lower())
    except ValueError as exc:
        known = ", ".join(v.value for v in BugVariant)
        raise ConfigurationError(f"Неизвестный вариант жука {text!r}; доступны: {known}") from exc


def parse_rotation(text: Optional[str]) -> Union[None, float, str]:
    if text is None:
        return None
    if text.strip().lower() == RANDOM_ROTATION:
        return RANDOM_ROTATION
    try:
        angle = float(text)
    except ValueError as exc:
        raise ConfigurationError(f"Неверный угол поворота бейджа: {text!r}") from exc
    if not math.isfinite(angle):
        raise ConfigurationError(f"Угол поворота бейджа должен быть конечным: {text!r}")
    return angle


def parse_workers(value) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        workers = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Неверное число потоков: {value!r}") from exc
    if workers <= 0:
        raise ConfigurationError(f"Число потоков должно быть положительным: {workers}")
    return workers


# ---- Resolution ----
def resolve_platforms(args: argparse.Namespace) -> FrozenSet[PlatformTarget]:
    """Превращает комбинацию флагов в набор платформ.

    Пустой набор возможен только вместе с --png: тогда пишутся лишь свои размеры PNG.
    """
    custom = bool(args.png)
    explicit = frozenset(target for flag, target in PLATFORM_FLAGS if getattr(args, flag))
    if args.ico_only:
        return frozenset({PlatformTarget.WINDOWS})
    if args.icns_only:
        return frozenset({PlatformTarget.MACOS})
    if args.desktop_only:
        return frozenset() if custom else DESKTOP
    if args.mobile_only:
        return MOBILE
    if explicit:
        return explicit
    return frozenset() if custom else ALL_PLATFORMS


def custom_png_applies(args: argparse.Namespace) -> bool:
    """--png действует только вместо набора Linux: без флагов, с --desktop-only или с --linux."""
    if not args.png:
        return False
    if args.ico_only or args.icns_only or args.mobile_only:
        return False
    if args.desktop_only:
        return True
    explicit = [flag for flag, _ in PLATFORM_FLAGS if getattr(args, flag)]
    return not explicit or "linux" in explicit


def build_request(args: argparse.Namespace, ios_color_default: str = "#ffffff") -> IconRequest:
    png_sizes = None
    if args.png:
        png_sizes = parse_sizes(args.png)
        if not custom_png_applies(args):
            logger.warning("--png ignored: custom sizes only replace the Linux set")
            png_sizes = None
    badge = BadgeConfig(
        enabled=args.dev_mode,
        variant=parse_variant(args.dev_bug),
        rotation=parse_rotation(args.dev_rotation),
        asset_path=args.dev_badge_image,
    )
    return IconRequest(
        platforms=resolve_platforms(args),
        badge=badge,
        ios_background=parse_color(args.ios_color or ios_color_default),
        png_sizes=png_sizes,
        seed=args.seed,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
