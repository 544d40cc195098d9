"""Запись готовых артефактов на диск."""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable, List

from icongen.models.icon_model import EncodedArtifact

logger = logging.getLogger(__name__)


class OutputService:
    def write_artifacts(self, artifacts: Iterable[EncodedArtifact], root: str | Path) -> List[Path]:
        """Пишет артефакты под каталогом root, создавая подкаталоги.

        Вызывается только после того, как конвейер построил все артефакты.
        Ошибки файловой системы (`OSError`) не перехватываются.

        Returns:
            Список записанных путей в порядке артефактов.
        """
        root = Path(root)
        written: List[Path] = []
        for artifact in artifacts:
            relative = PurePosixPath(artifact.path)
            if relative.is_absolute() or ".." in relative.parts:
                raise ValueError(f"Недопустимый путь артефакта: {artifact.path}")
            target = root.joinpath(*relative.parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(artifact.data)
            logger.debug("Wrote %s (%d bytes)", target, len(artifact.data))
            written.append(target)
        logger.info("Wrote %d files to %s", len(written), root)
        return written
