"""Генерация Contents.json (Apple Asset Catalog) для iOS и macOS."""
from __future__ import annotations

from typing import Iterable, List, Tuple

from icongen.models.icon_model import AssetCatalog, AssetCatalogEntry, PlatformTarget, SizeSpec
from icongen.models.size_tables import sizes_for

CATALOG_FILENAME = "Contents.json"
CATALOG_PLATFORMS = (PlatformTarget.IOS, PlatformTarget.MACOS)


class CatalogService:
    def __init__(self, author: str = "icon-gen") -> None:
        self.author = author

    def entry_for(self, spec: SizeSpec) -> AssetCatalogEntry:
        """Запись каталога для одного растра из таблицы платформы."""
        size = spec.logical or f"{spec.pixels}x{spec.pixels}"
        return AssetCatalogEntry(
            filename=spec.filename,
            idiom=spec.idiom or "universal",
            scale=f"{spec.scale}x",
            size=size,
            role=spec.role,
            expected_size=size,
        )

    def build_catalog(self, entries: Iterable[AssetCatalogEntry], platform: PlatformTarget) -> AssetCatalog:
        """Собирает документ каталога.

        Порядок записей определяется таблицей размеров платформы, а не порядком,
        в котором записи пришли (они могут прийти из параллельных задач).
        Записи с именами вне таблицы идут в конце, по имени файла.

        Raises:
            ValueError: если платформа не использует каталоги ассетов.
        """
        if platform not in CATALOG_PLATFORMS:
            raise ValueError(f"Каталог ассетов не поддерживается для {platform.value}")

        rank = {spec.filename: i for i, spec in enumerate(sizes_for(platform))}
        tail = len(rank)

        def sort_key(entry: AssetCatalogEntry) -> Tuple[int, str]:
            return rank.get(entry.filename, tail), entry.filename

        ordered: List[AssetCatalogEntry] = sorted(entries, key=sort_key)
        return AssetCatalog(images=tuple(ordered), author=self.author)
