"""
Модуль вычисления эффективной даты изменения записи.

Каталог считается настолько свежим, насколько свеж самый свежий его
потомок. Символические ссылки не разыменовываются и считаются
бесконечно старыми.
"""

import stat
import time
from datetime import date
from pathlib import Path
from typing import Callable

from .logger import RotateDirLogger
from .models import Failed, Resolved, ResolveResult


# Начало эпохи: ссылки всегда подлежат архивации
EPOCH_TIMESTAMP = 0.0


class ModTimeResolver:
    """Вычисляет дату последнего изменения файла, каталога или ссылки."""

    def __init__(self, logger: RotateDirLogger, clock: Callable[[], float] = time.time):
        """
        Args:
            logger: Логгер для записи ошибок
            clock: Источник текущего времени (подставляется при ошибке)
        """
        self.logger = logger
        self.clock = clock
        self.failures = 0

    def resolve_timestamp(self, path) -> ResolveResult:
        """
        Вычисляет время последнего изменения без подстановки значения при ошибке.

        Args:
            path: Путь к записи

        Returns:
            Resolved с timestamp или Failed с путем и исключением
        """
        # Обход через явный стек: глубина дерева не ограничена лимитом рекурсии
        pending = [Path(path)]
        latest = None

        while pending:
            current = pending.pop()
            try:
                st = current.lstat()

                if stat.S_ISLNK(st.st_mode):
                    timestamp = EPOCH_TIMESTAMP
                else:
                    timestamp = st.st_mtime
                    if stat.S_ISDIR(st.st_mode):
                        # iterdir() включает скрытые записи и не возвращает '.' и '..'
                        pending.extend(current.iterdir())

            except OSError as e:
                return Failed(current, e)

            latest = timestamp if latest is None else max(latest, timestamp)

        return Resolved(latest)

    def resolve(self, path) -> date:
        """
        Возвращает дату последнего изменения записи.

        При ошибке файловой системы запись считается измененной сейчас:
        она переживет текущий запуск и будет проверена в следующий раз.

        Args:
            path: Путь к записи

        Returns:
            date: Эффективная дата изменения
        """
        result = self.resolve_timestamp(path)

        if isinstance(result, Failed):
            self.failures += 1
            self.logger.log_resolve_error(result.path, result.cause)
            timestamp = self.clock()
        else:
            timestamp = result.timestamp

        return date.fromtimestamp(timestamp)
