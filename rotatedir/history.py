"""
Модуль архивации записей в каталог истории.

Устаревшие записи переносятся в структуру <history>/<YYYY-MM-DD>/<имя>,
где дата - эффективная дата изменения записи.
"""

import os
import shutil
from datetime import date, timedelta
from pathlib import Path
from typing import Set

from .config_loader import CONFLICT_POLICIES
from .logger import RotateDirLogger
from .models import Entry


class ArchiveError(Exception):
    """Исключение для ошибок архивации."""
    pass


class ArchiveCollisionError(ArchiveError):
    """Исключение для случая, когда в каталоге даты уже есть запись с тем же именем."""
    pass


def should_archive(entry: Entry, expire_days: int, today: date) -> bool:
    """
    Проверяет, устарела ли запись.

    Запись с датой ровно на границе срока еще не архивируется.

    Args:
        entry: Запись
        expire_days: Срок устаревания в днях
        today: Текущая дата

    Returns:
        bool: True если запись нужно перенести в историю
    """
    return entry.effective_date + timedelta(days=expire_days) < today


class HistoryDir:
    """Каталог истории с подкаталогами по датам."""

    def __init__(self, root, logger: RotateDirLogger, dry_run: bool = False, on_conflict: str = 'fail'):
        """
        Инициализация каталога истории.

        Args:
            root: Корень каталога истории
            logger: Логгер для записи операций
            dry_run: Только логировать, не изменяя файловую систему
            on_conflict: 'fail' - ошибка при совпадении имен, 'rename' - добавить суффикс
        """
        if on_conflict not in CONFLICT_POLICIES:
            raise ValueError(f"Некорректная политика конфликтов: {on_conflict}")

        self.root = Path(root)
        self.logger = logger
        self.dry_run = dry_run
        self.on_conflict = on_conflict

        # Каталоги, которые были бы созданы в пробном запуске
        self._planned_dirs: Set[Path] = set()

        self.ensure_exists(self.root)

    def bucket_for(self, entry: Entry) -> Path:
        """
        Получает путь к каталогу даты для записи.

        Args:
            entry: Запись

        Returns:
            Path: <history>/<YYYY-MM-DD>
        """
        return self.root / entry.effective_date.isoformat()

    def ensure_exists(self, path) -> Path:
        """
        Создает каталог если он не существует.

        Args:
            path: Путь к каталогу

        Returns:
            Path: Путь к каталогу

        Raises:
            ArchiveError: Если каталог не удалось создать
        """
        path = Path(path)
        if path.is_dir() or path in self._planned_dirs:
            return path

        self.logger.log_directory_created(path)

        if self.dry_run:
            self._planned_dirs.add(path)
            return path

        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.log_archive_error(path, e)
            raise ArchiveError(f"Ошибка создания каталога {path}: {e}")

        return path

    def archive(self, entry: Entry) -> Path:
        """
        Переносит запись в каталог даты.

        Args:
            entry: Устаревшая запись

        Returns:
            Path: Путь к записи в истории (в пробном запуске - предполагаемый)

        Raises:
            ArchiveCollisionError: Если в каталоге даты уже есть такое имя (политика 'fail')
            ArchiveError: Если перемещение не удалось
        """
        bucket = self.bucket_for(entry)
        self.logger.log_entry_archived(entry, bucket)

        self.ensure_exists(bucket)
        target_path = self._get_target_path(bucket, entry)

        if self.dry_run:
            return target_path

        try:
            # Каталоги переносятся целиком, ссылки - как ссылки
            shutil.move(str(entry.path), str(target_path))
        except OSError as e:
            self.logger.log_archive_error(entry.path, e)
            raise ArchiveError(f"Ошибка перемещения {entry.path} в {target_path}: {e}")

        return target_path

    def _get_target_path(self, bucket: Path, entry: Entry) -> Path:
        """Получает путь назначения с учетом политики конфликтов."""
        target_path = bucket / entry.name
        if not os.path.lexists(target_path):
            return target_path

        if self.on_conflict == 'rename':
            return self._get_unique_filename(bucket, entry.name)

        error = ArchiveCollisionError(f"В каталоге {bucket} уже есть {entry.name}")
        self.logger.log_archive_error(entry.path, error)
        raise error

    def _get_unique_filename(self, directory: Path, filename: str) -> Path:
        """
        Получает уникальное имя в каталоге.

        Args:
            directory: Каталог для проверки
            filename: Исходное имя

        Returns:
            Path: Уникальное имя вида name_N.ext
        """
        # Для скрытых имен (.bashrc) точка в начале не отделяет расширение
        name_parts = filename.rsplit('.', 1)
        if len(name_parts) == 2 and name_parts[0]:
            base_name, extension = name_parts
            extension = '.' + extension
        else:
            base_name = filename
            extension = ''

        counter = 1
        while True:
            new_path = directory / f"{base_name}_{counter}{extension}"
            if not os.path.lexists(new_path):
                return new_path
            counter += 1
