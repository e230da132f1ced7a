"""
Модуль для настройки и управления логированием приложения.

Логгер передается компонентам явно, поэтому в тестах можно подменить
поток вывода или имя логгера без изменения глобального состояния.
"""

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, TextIO

from .config_loader import LoggingConfig


LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        # Запись общая для всех обработчиков, меняем только копию
        if record.levelname in self.COLORS:
            record = copy.copy(record)
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


class RotateDirLogger:
    """Класс для управления логированием приложения rotatedir."""

    def __init__(self, config: LoggingConfig, name: str = 'rotatedir', stream: Optional[TextIO] = None):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
            name: Имя логгера
            stream: Поток для консольного вывода (по умолчанию stdout)
        """
        self.config = config
        self.name = name
        self.stream = stream if stream is not None else sys.stdout
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным и (при необходимости) файловым выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(level)

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        # Цвет только для терминала
        is_tty = getattr(self.stream, 'isatty', lambda: False)()
        console_formatter_class = ColoredFormatter if is_tty else logging.Formatter

        console_handler = logging.StreamHandler(self.stream)
        console_handler.setFormatter(console_formatter_class(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if self.config.log_file:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            # Файловый обработчик с ротацией
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # Конвертируем MB в байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def close(self) -> None:
        """Закрывает и отключает обработчики."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def log_run_start(self, base_path: Path, history_path: Path, expire_days: int) -> None:
        """
        Логирует начало прохода по каталогу.

        Пробный и обычный запуск пишут одинаковый лог, поэтому режим
        здесь не указывается.

        Args:
            base_path: Сканируемый каталог
            history_path: Каталог истории
            expire_days: Срок устаревания в днях
        """
        self.logger.info(f"🚀 Ротация {base_path} → {history_path} (срок: {expire_days} дн.)")

    def log_run_end(self, archived: int, skipped: int, ignored: int, failed: int) -> None:
        """
        Логирует завершение прохода.

        Args:
            archived: Перенесено в историю
            skipped: Пропущено как свежие
            ignored: Исключено из рассмотрения
            failed: Ошибок вычисления даты
        """
        self.logger.info(f"✅ Ротация завершена")
        self.logger.info(f"📊 Статистика:")
        self.logger.info(f"   • Архивировано: {archived}")
        self.logger.info(f"   • Пропущено: {skipped}")
        self.logger.info(f"   • Исключено: {ignored}")
        self.logger.info(f"   • Ошибок mtime: {failed}")

    def log_options(self, options: dict) -> None:
        """Логирует параметры запуска."""
        self.logger.debug(f"⚙️ Параметры: {options}")

    def log_entry_fresh(self, entry) -> None:
        """Логирует пропуск записи, которая еще не устарела."""
        self.logger.debug(f"⏳ Пропуск {entry!r}: слишком свежий")

    def log_entry_ignored(self, path: Path) -> None:
        """Логирует запись из списка исключений."""
        self.logger.debug(f"🙈 Исключено: {path}")

    def log_entry_archived(self, entry, bucket: Path) -> None:
        """
        Логирует перенос записи в каталог истории.

        Args:
            entry: Архивируемая запись
            bucket: Каталог даты
        """
        self.logger.info(f"📦 Архивация {entry!r} в {bucket}")

    def log_directory_created(self, path: Path) -> None:
        """Логирует создание отсутствующего каталога."""
        self.logger.info(f"📁 Создание отсутствующего каталога {path}")

    def log_resolve_error(self, path: Path, error: Exception) -> None:
        """
        Логирует ошибку вычисления даты изменения.

        Args:
            path: Путь к записи
            error: Исключение
        """
        self.logger.warning(f"⚠️ Не удалось вычислить mtime для {path}: {error}")

    def log_archive_error(self, path: Path, error: Exception) -> None:
        """
        Логирует ошибку при переносе записи.

        Args:
            path: Путь к записи
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при архивации {path}: {error}")

    def log_config_loaded(self, config_path: str) -> None:
        """Логирует успешную загрузку конфигурации."""
        self.logger.info(f"⚙️ Конфигурация загружена из {config_path}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")
