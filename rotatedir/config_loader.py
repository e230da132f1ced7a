"""
Модуль для загрузки и валидации конфигурации приложения.

Параметры берутся из необязательного файла настроек (INI) и
перекрываются аргументами командной строки.
"""

import configparser
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field


DEFAULT_HISTORY_DIR = "HISTORY"
DEFAULT_EXPIRE_DAYS = 7
CONFLICT_POLICIES = ('fail', 'rename')
VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class RotationConfig:
    """Конфигурация ротации каталога."""
    base_path: Path
    history_path: Path
    expire_days: int = DEFAULT_EXPIRE_DAYS
    dry_run: bool = False
    ignore: List[str] = field(default_factory=list)
    on_conflict: str = 'fail'


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = 'WARNING'
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Основная конфигурация приложения."""
    rotation: RotationConfig
    logging: LoggingConfig


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу настроек (необязательный)
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None
        self._overrides: dict = {}
        self._base_path: Optional[Path] = None

    def load_config(self, base_path, history_base=None, expire_days: Optional[int] = None,
                    verbose: bool = False, dry_run: bool = False,
                    ignore: Optional[List[str]] = None, on_conflict: Optional[str] = None,
                    log_file=None) -> Config:
        """
        Загружает конфигурацию: файл настроек, затем аргументы командной строки.

        Args:
            base_path: Сканируемый каталог
            history_base: Каталог истории (по умолчанию <base>/HISTORY)
            expire_days: Срок устаревания в днях
            verbose: Подробное логирование (уровень DEBUG)
            dry_run: Только логировать, не изменяя файловую систему
            ignore: Имена записей верхнего уровня, которые не рассматриваются
            on_conflict: Политика при совпадении имен (fail или rename)
            log_file: Файл лога

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если файл настроек не найден
            ValueError: Если конфигурация некорректна
        """
        if self.config_path is not None and not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        self._base_path = Path(base_path)
        self._overrides = {
            'history_base': history_base,
            'expire_days': expire_days,
            'verbose': verbose,
            'dry_run': dry_run,
            'ignore': ignore,
            'on_conflict': on_conflict,
            'log_file': log_file,
        }

        config_parser = configparser.ConfigParser()

        try:
            if self.config_path is not None:
                config_parser.read(self.config_path, encoding='utf-8')

            rotation_config = self._load_rotation_config(config_parser)
            logging_config = self._load_logging_config(config_parser)
        except (configparser.Error, ValueError) as e:
            raise ValueError(f"Ошибка загрузки конфигурации: {e}")

        self._config = Config(rotation=rotation_config, logging=logging_config)
        self._validate_config()

        return self._config

    def _load_rotation_config(self, parser: configparser.ConfigParser) -> RotationConfig:
        """Загружает конфигурацию ротации."""
        section = 'rotation'
        overrides = self._overrides

        history_base = overrides['history_base'] or parser.get(section, 'history_base', fallback=None)
        history_path = Path(history_base) if history_base else self._base_path / DEFAULT_HISTORY_DIR

        expire_days = overrides['expire_days']
        if expire_days is None:
            expire_days = parser.getint(section, 'expire', fallback=DEFAULT_EXPIRE_DAYS)

        dry_run = overrides['dry_run'] or parser.getboolean(section, 'dry', fallback=False)

        # Списки из файла и командной строки объединяются
        ignore = [name.strip() for name in parser.get(section, 'ignore', fallback='').split(',') if name.strip()]
        for name in overrides['ignore'] or []:
            if name not in ignore:
                ignore.append(name)

        on_conflict = overrides['on_conflict'] or parser.get(section, 'on_conflict', fallback='fail')

        return RotationConfig(
            base_path=self._base_path,
            history_path=history_path,
            expire_days=expire_days,
            dry_run=dry_run,
            ignore=ignore,
            on_conflict=on_conflict
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'
        overrides = self._overrides

        if overrides['verbose']:
            level = 'DEBUG'
        else:
            level = parser.get(section, 'level', fallback='WARNING')

        log_file = overrides['log_file'] or parser.get(section, 'log_file', fallback=None)

        return LoggingConfig(
            level=level,
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ValueError("Конфигурация не загружена")

        rotation = self._config.rotation

        # Проверка путей
        if not rotation.base_path.exists():
            raise ValueError(f"Каталог не существует: {rotation.base_path}")
        if not rotation.base_path.is_dir():
            raise ValueError(f"Путь не является каталогом: {rotation.base_path}")

        # Проверка параметров ротации
        if rotation.expire_days < 0:
            raise ValueError("Срок устаревания не может быть отрицательным")

        if rotation.on_conflict not in CONFLICT_POLICIES:
            raise ValueError(f"Некорректная политика конфликтов: {rotation.on_conflict}")

        # Проверка параметров логирования
        if self._config.logging.level.upper() not in VALID_LEVELS:
            raise ValueError(f"Некорректный уровень логирования: {self._config.logging.level}")

        if self._config.logging.max_log_size <= 0:
            raise ValueError("Размер файла лога должен быть больше 0")

        if self._config.logging.backup_count < 0:
            raise ValueError("Количество резервных копий лога не может быть отрицательным")


def load_config(base_path, config_path: Optional[str] = None, **overrides) -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        base_path: Сканируемый каталог
        config_path: Путь к файлу настроек
        **overrides: Значения из командной строки

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config(base_path, **overrides)
