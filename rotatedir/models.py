"""
Модели данных: запись каталога и результат вычисления даты изменения.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Union


@dataclass(frozen=True)
class Resolved:
    """Успешно вычисленное время последнего изменения (timestamp)."""
    timestamp: float


@dataclass(frozen=True)
class Failed:
    """Ошибка файловой системы при вычислении времени изменения."""
    path: Path
    cause: OSError


ResolveResult = Union[Resolved, Failed]


class Entry:
    """Запись верхнего уровня в сканируемом каталоге (файл, каталог или ссылка)."""

    def __init__(self, path, resolver):
        """
        Args:
            path: Путь к записи
            resolver: Объект с методом resolve(path) -> date
        """
        self._path = Path(path)
        self._resolver = resolver
        self._effective_date: Optional[date] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def effective_date(self) -> date:
        """Дата последнего изменения; вычисляется один раз."""
        if self._effective_date is None:
            self._effective_date = self._resolver.resolve(self._path)
        return self._effective_date

    def __repr__(self):
        return f"<Entry mdate=[{self.effective_date.isoformat()}] path=[{self._path}]>"
