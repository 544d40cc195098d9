from __future__ import annotations

import logging
from typing import Optional, Sequence

from icongen.config import Config
from icongen.controllers.pipeline_controller import PipelineController
from icongen.errors import ConfigurationError, EncodingInvariantError, InputValidationError
from icongen.logger import setup_logging
from icongen.services.catalog_service import CatalogService
from icongen.services.image_service import ImageService
from icongen.services.output_service import OutputService
from icongen.ui import cli

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERNAL = 3


class IconGenApp:
    def __init__(self, config: Optional[Config] = None) -> None:
        self._config = config or Config()
        self._image_service = ImageService()
        self._output_service = OutputService()

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        args = cli.parse_args(argv)
        setup_logging(
            args.log_level or self._config.get("ICONGEN_LOG_LEVEL"),
            self._config.get("ICONGEN_LOG_DIR"),
        )

        try:
            request = cli.build_request(args, ios_color_default=self._config.get("ICONGEN_IOS_COLOR"))
            workers = cli.parse_workers(args.workers or self._config.get("ICONGEN_WORKERS"))
            source = self._image_service.load_image(args.input)

            controller = PipelineController(
                catalog=CatalogService(author=self._config.get("ICONGEN_CATALOG_AUTHOR")),
                workers=workers,
            )
            artifacts = controller.run(source.pil_image, request)
            # пишем только когда все артефакты готовы: частичных наборов не бывает
            self._output_service.write_artifacts(artifacts, args.output)
        except EncodingInvariantError as exc:
            logger.error("Internal error: %s", exc)
            return EXIT_INTERNAL
        except InputValidationError as exc:
            logger.error("Invalid input: %s", exc)
            return EXIT_FAILURE
        except ConfigurationError as exc:
            logger.error("Invalid configuration: %s", exc)
            return EXIT_FAILURE
        except OSError as exc:
            logger.error("Could not write icons: %s", exc)
            return EXIT_FAILURE

        logger.info("Done: %d files in %s", len(artifacts), args.output)
        return EXIT_OK
