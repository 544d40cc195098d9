"""Контроллер конвейера: ресэмплинг -> бейдж -> непрозрачность -> кодирование.

SOLID:
- SRP: класс только оркестрирует сервисы; пиксельная логика и форматы живут в сервисах.
- DIP: сервисы внедряются полями dataclass, тесты могут подменить любой.
Порядок внутри одного артефакта фиксирован: бейдж до непрозрачности, непрозрачность до кодирования.
"""
from __future__ import annotations

import logging
import os
import random
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from PIL import Image

from icongen.errors import IconGenError
from icongen.models.icon_model import (
    BadgeConfig,
    EncodedArtifact,
    IconRequest,
    PlatformTable,
    PlatformTarget,
    SizeSpec,
)
from icongen.models.size_tables import (
    ANDROID_ICON,
    ANDROID_ROUND_ICON,
    custom_png_specs,
    pixel_sizes_for,
    table_for,
)
from icongen.services.badge_service import BadgeService
from icongen.services.catalog_service import CATALOG_FILENAME, CatalogService
from icongen.services.encoders import PngEncoder, encoder_for
from icongen.services.raster_service import RasterService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PipelineController:
    """Строит все артефакты для одного исходного изображения.

    Ответственности:
    - Один раз разрешить конфигурацию бейджа (угол) из генератора, засеянного на запуск.
    - Ресэмплировать источник один раз на каждый различный размер и наложить бейдж.
    - Для каждой платформы: непрозрачность (iOS), круглые варианты (Android),
      кодирование PNG/ICO/ICNS, Contents.json (iOS/macOS).
    - Вернуть артефакты в детерминированном порядке; при первой ошибке остановиться.
    """
    raster: RasterService = field(default_factory=RasterService)
    badge: Optional[BadgeService] = None
    catalog: CatalogService = field(default_factory=CatalogService)
    workers: Optional[int] = None

    def __post_init__(self) -> None:
        if self.badge is None:
            self.badge = BadgeService(self.raster)
        if self.workers is None:
            self.workers = os.cpu_count() or 1

    def run(self, source: Image.Image, request: IconRequest) -> List[EncodedArtifact]:
        """Выполняет конвейер и возвращает артефакты (путь относительно выходного каталога + байты).

        Raises:
            IconGenError: первая ошибка любой стадии, с контекстом платформы/размера/стадии.
        """
        source = source if source.mode == "RGBA" else source.convert("RGBA")
        source.load()

        rng = random.Random(request.seed)
        badge = request.badge.resolve(rng) if request.badge.enabled else request.badge
        if badge.enabled:
            logger.info("Dev badge: %s, rotation %.1f°", badge.variant.value, badge.rotation)

        tables = self._selected_tables(request)
        custom = custom_png_specs(request.png_sizes) if request.png_sizes else ()

        sizes = set(spec.pixels for spec in custom)
        for table in tables:
            sizes.update(pixel_sizes_for(table.target))
        ordered_sizes = sorted(sizes)

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="icongen") as pool:
            # 1) один ресэмплинг + бейдж на каждый различный размер
            rendered = self._run_all(
                pool,
                [lambda size=size: self._render(source, size, badge) for size in ordered_sizes],
            )
            bitmaps: Dict[int, Image.Image] = dict(zip(ordered_sizes, rendered))

            # 2) артефакты платформ независимы друг от друга
            jobs: List[Callable[[], List[EncodedArtifact]]] = []
            if custom:
                jobs.append(lambda: self._custom_artifacts(custom, bitmaps))
            for table in tables:
                jobs.append(lambda table=table: self._platform_artifacts(table, bitmaps, request))
            groups = self._run_all(pool, jobs)

        artifacts = [artifact for group in groups for artifact in group]
        logger.info("Generated %d artifacts for %d platform(s)", len(artifacts), len(tables))
        return artifacts

    # ---- Stages ----
    def _selected_tables(self, request: IconRequest) -> List[PlatformTable]:
        targets = sorted(request.platforms, key=lambda target: target.order)
        if request.png_sizes:
            # свои размеры PNG заменяют стандартный набор Linux
            targets = [target for target in targets if target is not PlatformTarget.LINUX]
        return [table_for(target) for target in targets]

    def _render(self, source: Image.Image, size: int, badge: BadgeConfig) -> Image.Image:
        try:
            icon = self.raster.resize(source, size)
            logger.debug("Resampled %dx%d", size, size)
        except IconGenError as exc:
            exc.with_context(size=size, stage="resize")
            raise
        try:
            return self.badge.apply_badge(icon, badge)
        except IconGenError as exc:
            exc.with_context(size=size, stage="badge")
            raise

    def _custom_artifacts(self, specs: Sequence[SizeSpec], bitmaps: Dict[int, Image.Image]) -> List[EncodedArtifact]:
        artifacts = []
        for spec in specs:
            try:
                data = PngEncoder(spec.pixels).encode(bitmaps)
            except IconGenError as exc:
                exc.with_context(platform="png", size=spec.pixels, stage="encode")
                raise
            artifacts.append(EncodedArtifact(spec.filename, data))
        logger.info("Generated %d custom PNG size(s)", len(artifacts))
        return artifacts

    def _platform_artifacts(
        self, table: PlatformTable, bitmaps: Dict[int, Image.Image], request: IconRequest
    ) -> List[EncodedArtifact]:
        prefix = table.target.value
        stage = "encode"
        try:
            if table.opaque:
                stage = "opacity"
                bitmaps = {
                    size: self.raster.force_opaque(bitmaps[size], request.ios_background)
                    for size in pixel_sizes_for(table.target)
                }

            artifacts: List[EncodedArtifact] = []
            for spec in table.rasters:
                stage = "encode"
                encoder = PngEncoder(spec.pixels)
                artifacts.append(EncodedArtifact(f"{prefix}/{spec.filename}", encoder.encode(bitmaps)))
                if table.round_variants:
                    stage = "mask"
                    rounded = {spec.pixels: self.raster.apply_circular_mask(bitmaps[spec.pixels])}
                    round_name = spec.filename.replace(ANDROID_ICON, ANDROID_ROUND_ICON)
                    artifacts.append(EncodedArtifact(f"{prefix}/{round_name}", encoder.encode(rounded)))

            for container in table.containers:
                stage = "encode"
                data = encoder_for(container.kind).encode(bitmaps)
                artifacts.append(EncodedArtifact(f"{prefix}/{container.filename}", data))

            if table.catalog:
                stage = "catalog"
                entries = [self.catalog.entry_for(spec) for spec in table.rasters]
                document = self.catalog.build_catalog(entries, table.target)
                artifacts.append(EncodedArtifact(f"{prefix}/{CATALOG_FILENAME}", document.to_json().encode("utf-8")))
        except IconGenError as exc:
            exc.with_context(platform=prefix, stage=stage)
            raise

        logger.info("Generated %s icons (%d files)", prefix, len(artifacts))
        return artifacts

    # ---- Helpers ----
    def _run_all(self, pool: ThreadPoolExecutor, jobs: Sequence[Callable[[], T]]) -> List[T]:
        """Запускает задачи в пуле и возвращает результаты в порядке задач.

        При первой ошибке отменяет ещё не начатые задачи и пробрасывает её.
        """
        futures: List[Future] = [pool.submit(job) for job in jobs]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in futures:
            if future in done and future.exception() is not None:
                for other in pending:
                    other.cancel()
                raise future.exception()
        return [future.result() for future in futures]
