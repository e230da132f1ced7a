"""
Модуль бизнес-логики ротации каталога.

Обходит записи верхнего уровня в базовом каталоге, вычисляет их
эффективную дату изменения и переносит устаревшие в каталог истории.
"""

import os
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional

from .config_loader import Config
from .history import HistoryDir, should_archive
from .logger import RotateDirLogger
from .models import Entry
from .mtime_resolver import ModTimeResolver


class RotationError(Exception):
    """Исключение для ошибок ротации."""
    pass


class RotationStats:
    """Класс для хранения статистики ротации."""

    def __init__(self):
        self.scanned_entries = 0
        self.archived_entries = 0
        self.skipped_entries = 0
        self.ignored_entries = 0
        self.failed_resolutions = 0
        self.start_time = None
        self.end_time = None
        self.archived_paths: List[Path] = []

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность ротации в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'scanned_entries': self.scanned_entries,
            'archived_entries': self.archived_entries,
            'skipped_entries': self.skipped_entries,
            'ignored_entries': self.ignored_entries,
            'failed_resolutions': self.failed_resolutions,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'archived_paths': [str(p) for p in self.archived_paths]
        }


def _normalize(path) -> Path:
    """Абсолютный путь без разыменования ссылок."""
    return Path(os.path.normpath(os.path.abspath(path)))


class Rotator:
    """Основной класс ротации каталога."""

    def __init__(self, config: Config, logger: RotateDirLogger,
                 resolver: Optional[ModTimeResolver] = None,
                 history: Optional[HistoryDir] = None):
        """
        Инициализация ротатора.

        Args:
            config: Конфигурация приложения
            logger: Логгер для записи операций
            resolver: Вычислитель дат (по умолчанию ModTimeResolver)
            history: Каталог истории (по умолчанию создается при запуске)
        """
        self.config = config
        self.logger = logger
        self.resolver = resolver or ModTimeResolver(logger)
        self.history = history
        self.stats = RotationStats()

    def list_candidates(self) -> List[Path]:
        """
        Получает список записей верхнего уровня для проверки.

        Каталог истории и записи из списка исключений не возвращаются.
        Скрытые записи возвращаются.

        Returns:
            List[Path]: Отсортированный список путей

        Raises:
            RotationError: Если базовый каталог недоступен
        """
        rotation = self.config.rotation
        history_path = _normalize(rotation.history_path)

        try:
            children = sorted(rotation.base_path.iterdir())
        except OSError as e:
            self.logger.log_critical_error(f"Не удалось прочитать каталог {rotation.base_path}", e)
            raise RotationError(f"Ошибка чтения каталога {rotation.base_path}: {e}")

        candidates = []
        for path in children:
            if _normalize(path) == history_path:
                continue
            if path.name in rotation.ignore:
                self.stats.ignored_entries += 1
                self.logger.log_entry_ignored(path)
                continue
            candidates.append(path)

        return candidates

    def run(self, today: Optional[date] = None) -> RotationStats:
        """
        Выполняет один проход ротации.

        Args:
            today: Текущая дата (вычисляется один раз на запуск)

        Returns:
            RotationStats: Статистика ротации

        Raises:
            RotationError: Если базовый каталог недоступен
            ArchiveError: Если каталог истории или перемещение записи недоступны
        """
        rotation = self.config.rotation
        if today is None:
            today = date.today()

        self.stats = RotationStats()
        self.stats.start_time = datetime.now()

        if not rotation.base_path.is_dir():
            self.logger.log_critical_error(f"Каталог не найден: {rotation.base_path}")
            raise RotationError(f"Каталог не найден: {rotation.base_path}")

        self.logger.log_options({
            'base': str(rotation.base_path),
            'history_base': str(rotation.history_path),
            'expire': rotation.expire_days,
            'ignore': rotation.ignore,
            'on_conflict': rotation.on_conflict
        })
        self.logger.log_run_start(rotation.base_path, rotation.history_path, rotation.expire_days)

        if self.history is None:
            self.history = HistoryDir(
                rotation.history_path,
                self.logger,
                dry_run=rotation.dry_run,
                on_conflict=rotation.on_conflict
            )

        failures_before = self.resolver.failures

        for path in self.list_candidates():
            entry = Entry(path, self.resolver)
            self.stats.scanned_entries += 1

            if should_archive(entry, rotation.expire_days, today):
                self.history.archive(entry)
                self.stats.archived_entries += 1
                self.stats.archived_paths.append(path)
            else:
                self.stats.skipped_entries += 1
                self.logger.log_entry_fresh(entry)

        self.stats.failed_resolutions = self.resolver.failures - failures_before
        self.stats.end_time = datetime.now()

        self.logger.log_run_end(
            archived=self.stats.archived_entries,
            skipped=self.stats.skipped_entries,
            ignored=self.stats.ignored_entries,
            failed=self.stats.failed_resolutions
        )

        return self.stats


def create_rotator(config: Config, logger: RotateDirLogger) -> Rotator:
    """
    Удобная функция для создания объекта ротатора.

    Args:
        config: Конфигурация приложения
        logger: Логгер

    Returns:
        Rotator: Объект ротатора
    """
    return Rotator(config, logger)
