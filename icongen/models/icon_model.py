"""Модели данных конвейера генерации иконок.

Принципы:
- SRP: только структуры данных; вся обработка живёт в сервисах.
- Чистый код: неизменяемость (`frozen=True`), платформы описываются данными, а не ветками кода.
"""
from __future__ import annotations

import json
import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union

from icongen.errors import ConfigurationError

RANDOM_ROTATION = "random"


class PlatformTarget(Enum):
    """Целевая платформа. Значение = имя выходного подкаталога, порядок = порядок вывода."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    ANDROID = "android"
    IOS = "ios"
    TAURI_DESKTOP = "tauri-desktop"

    @property
    def order(self) -> int:
        return list(PlatformTarget).index(self)


class ContainerKind(Enum):
    ICO = "ico"
    ICNS = "icns"


class BugVariant(Enum):
    MOTH = "moth"
    SPIDER = "spider"
    BEETLE = "beetle"
    LADYBUG = "ladybug"


@dataclass(frozen=True)
class SizeSpec:
    """Один растр, который платформа требует записать в PNG.

    Fields:
        pixels: Сторона растра, px.
        filename: Имя файла относительно каталога платформы.
        scale: Множитель (1x/2x/3x).
        logical: Размер в точках для каталога ассетов, например "60x60".
        idiom: Устройство в терминах Apple: "iphone", "ipad", "ios-marketing", "mac".
        role: Роль иконки, например "appLauncher".
        density: Android-бакет плотности (mdpi…xxxhdpi).
    """
    pixels: int
    filename: str
    scale: int = 1
    logical: Optional[str] = None
    idiom: Optional[str] = None
    role: Optional[str] = None
    density: Optional[str] = None


@dataclass(frozen=True)
class ContainerSpec:
    filename: str
    kind: ContainerKind


@dataclass(frozen=True)
class PlatformTable:
    """Полное описание выходов одной платформы."""
    target: PlatformTarget
    rasters: Tuple[SizeSpec, ...] = ()
    containers: Tuple[ContainerSpec, ...] = ()
    opaque: bool = False  # iOS: альфа запрещена
    round_variants: bool = False  # Android: ic_launcher_round рядом с каждым растром
    catalog: bool = False  # iOS/macOS: Contents.json


@dataclass(frozen=True)
class BadgeConfig:
    """Настройки dev-бейджа.

    Fields:
        enabled: Включён ли бейдж.
        variant: Какой жук рисуется.
        rotation: None (по умолчанию для варианта), угол в градусах или "random".
        asset_path: Собственная картинка бейджа вместо встроенной.
    """
    enabled: bool = False
    variant: BugVariant = BugVariant.MOTH
    rotation: Union[None, float, str] = None
    asset_path: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.rotation, float) and math.isfinite(self.rotation)

    def resolve(self, rng: random.Random) -> "BadgeConfig":
        """Возвращает копию с конкретным углом поворота.

        Явный угол сохраняется; "random" и моль без угла получают равномерный
        угол из [0, 360), взятый из `rng`; остальные варианты получают 0.

        Raises:
            ConfigurationError: если угол не конечен (NaN, бесконечность).
        """
        if isinstance(self.rotation, (int, float)) and not isinstance(self.rotation, bool):
            if not math.isfinite(self.rotation):
                raise ConfigurationError(f"Угол поворота бейджа должен быть конечным: {self.rotation!r}", stage="badge")
            return replace(self, rotation=float(self.rotation) % 360.0)
        if self.rotation == RANDOM_ROTATION or (self.rotation is None and self.variant is BugVariant.MOTH):
            return replace(self, rotation=rng.random() * 360.0)
        return replace(self, rotation=0.0)


@dataclass(frozen=True)
class AssetCatalogEntry:
    filename: str
    idiom: str
    scale: str
    size: str
    role: Optional[str] = None
    subtype: Optional[str] = None
    expected_size: Optional[str] = None

    def to_dict(self) -> dict:
        # порядок ключей фиксирован, отсутствующие поля не пишутся
        out = {"filename": self.filename, "idiom": self.idiom}
        if self.role is not None:
            out["role"] = self.role
        out["scale"] = self.scale
        out["size"] = self.size
        if self.expected_size is not None:
            out["expected_size"] = self.expected_size
        if self.subtype is not None:
            out["subtype"] = self.subtype
        return out


@dataclass(frozen=True)
class AssetCatalog:
    """Документ Contents.json для Xcode."""
    images: Tuple[AssetCatalogEntry, ...]
    author: str = "icon-gen"
    version: int = 1

    def to_dict(self) -> dict:
        return {
            "images": [entry.to_dict() for entry in self.images],
            "info": {"author": self.author, "version": self.version},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"


@dataclass(frozen=True)
class EncodedArtifact:
    """Готовый файл: путь относительно выходного каталога и содержимое."""
    path: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class IconRequest:
    """Уже разрешённый набор параметров одного запуска (без сырых флагов CLI)."""
    platforms: FrozenSet[PlatformTarget]
    badge: BadgeConfig = BadgeConfig()
    ios_background: Tuple[int, int, int] = (255, 255, 255)
    png_sizes: Optional[Tuple[int, ...]] = None
    seed: Optional[int] = None
