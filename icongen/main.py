"""Точка входа в приложение."""
import sys

from icongen.app import IconGenApp


def main() -> None:
    """Разбирает аргументы, генерирует иконки и завершает процесс с кодом результата."""
    app = IconGenApp()
    sys.exit(app.run())


if __name__ == "__main__":
    main()
