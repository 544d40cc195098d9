"""Таблицы размеров платформ.

Чистые данные: изменение набора размеров платформы = правка только этого модуля.
"""
from __future__ import annotations

from typing import Dict, Tuple

from icongen.models.icon_model import (
    ContainerKind,
    ContainerSpec,
    PlatformTable,
    PlatformTarget,
    SizeSpec,
)

ICO_SIZES: Tuple[int, ...] = (16, 24, 32, 48, 64, 256)

# (OSType, сторона в px); PNG-совместимые типы, по паре 1x/2x на логический размер
ICNS_SLOTS: Tuple[Tuple[str, int], ...] = (
    ("icp4", 16),
    ("ic11", 32),
    ("icp5", 32),
    ("ic12", 64),
    ("ic07", 128),
    ("ic13", 256),
    ("ic08", 256),
    ("ic14", 512),
    ("ic09", 512),
    ("ic10", 1024),
)
ICNS_SIZES: Tuple[int, ...] = tuple(sorted({px for _, px in ICNS_SLOTS}))

ANDROID_DENSITIES: Tuple[Tuple[str, int], ...] = (
    ("mdpi", 48),
    ("hdpi", 72),
    ("xhdpi", 96),
    ("xxhdpi", 144),
    ("xxxhdpi", 192),
)
ANDROID_ICON = "ic_launcher.png"
ANDROID_ROUND_ICON = "ic_launcher_round.png"

RIBBON_MIN_EDGE = 32

CONTAINER_SIZES: Dict[ContainerKind, Tuple[int, ...]] = {
    ContainerKind.ICO: ICO_SIZES,
    ContainerKind.ICNS: ICNS_SIZES,
}


def _mac(points: int, scale: int) -> SizeSpec:
    suffix = "" if scale == 1 else f"@{scale}x"
    return SizeSpec(
        pixels=points * scale,
        filename=f"icon_{points}x{points}{suffix}.png",
        scale=scale,
        logical=f"{points}x{points}",
        idiom="mac",
    )


def _ios(points: float, scale: int, idiom: str, role: str | None) -> SizeSpec:
    label = f"{points:g}"
    if idiom == "ios-marketing":
        filename = f"AppIcon-{label}x{label}.png"
    else:
        filename = f"AppIcon-{label}x{label}@{scale}x.png"
    return SizeSpec(
        pixels=int(round(points * scale)),
        filename=filename,
        scale=scale,
        logical=f"{label}x{label}",
        idiom=idiom,
        role=role,
    )


def _png(pixels: int, filename: str | None = None, scale: int = 1) -> SizeSpec:
    return SizeSpec(pixels=pixels, filename=filename or f"{pixels}x{pixels}.png", scale=scale)


_TABLES: Dict[PlatformTarget, PlatformTable] = {
    PlatformTarget.WINDOWS: PlatformTable(
        target=PlatformTarget.WINDOWS,
        containers=(ContainerSpec("icon.ico", ContainerKind.ICO),),
    ),
    PlatformTarget.MACOS: PlatformTable(
        target=PlatformTarget.MACOS,
        rasters=tuple(_mac(points, scale) for points in (16, 32, 128, 256, 512) for scale in (1, 2)),
        containers=(ContainerSpec("icon.icns", ContainerKind.ICNS),),
        catalog=True,
    ),
    PlatformTarget.LINUX: PlatformTable(
        target=PlatformTarget.LINUX,
        rasters=(_png(32), _png(64), _png(128), _png(256), _png(512, "icon.png")),
    ),
    PlatformTarget.ANDROID: PlatformTable(
        target=PlatformTarget.ANDROID,
        rasters=tuple(
            SizeSpec(pixels=px, filename=f"mipmap-{density}/{ANDROID_ICON}", density=density)
            for density, px in ANDROID_DENSITIES
        ),
        round_variants=True,
    ),
    PlatformTarget.IOS: PlatformTable(
        target=PlatformTarget.IOS,
        rasters=(
            _ios(20, 1, "ipad", "notificationCenter"),
            _ios(20, 2, "iphone", "notificationCenter"),
            _ios(20, 3, "iphone", "notificationCenter"),
            _ios(29, 1, "ipad", "companionSettings"),
            _ios(29, 2, "iphone", "companionSettings"),
            _ios(29, 3, "iphone", "companionSettings"),
            _ios(40, 1, "ipad", "spotlight"),
            _ios(40, 2, "iphone", "spotlight"),
            _ios(40, 3, "iphone", "spotlight"),
            _ios(60, 2, "iphone", "appLauncher"),
            _ios(60, 3, "iphone", "appLauncher"),
            _ios(76, 1, "ipad", "appLauncher"),
            _ios(76, 2, "ipad", "appLauncher"),
            _ios(83.5, 2, "ipad", "appLauncher"),
            _ios(1024, 1, "ios-marketing", None),
        ),
        opaque=True,
        catalog=True,
    ),
    PlatformTarget.TAURI_DESKTOP: PlatformTable(
        target=PlatformTarget.TAURI_DESKTOP,
        rasters=(_png(32), _png(128), _png(256, "128x128@2x.png", scale=2)),
        containers=(
            ContainerSpec("icon.ico", ContainerKind.ICO),
            ContainerSpec("icon.icns", ContainerKind.ICNS),
        ),
    ),
}


def table_for(target: PlatformTarget) -> PlatformTable:
    return _TABLES[target]


def sizes_for(target: PlatformTarget) -> Tuple[SizeSpec, ...]:
    """Упорядоченные растры платформы (без контейнеров)."""
    return _TABLES[target].rasters


def pixel_sizes_for(target: PlatformTarget) -> Tuple[int, ...]:
    """Все различные стороны в px, нужные платформе: растры и слоты контейнеров."""
    table = _TABLES[target]
    sizes = {spec.pixels for spec in table.rasters}
    for container in table.containers:
        sizes.update(CONTAINER_SIZES[container.kind])
    return tuple(sorted(sizes))


def custom_png_specs(sizes: Tuple[int, ...]) -> Tuple[SizeSpec, ...]:
    """Растры режима `--png`: `{n}x{n}.png`, повторы отбрасываются, порядок сохраняется."""
    return tuple(_png(px) for px in dict.fromkeys(sizes))
