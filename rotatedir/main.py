"""
Главный модуль CLI интерфейса утилиты ротации каталога.

Переносит устаревшие файлы и каталоги из BASE в каталог истории,
сгруппированный по датам, чтобы история оставалась наблюдаемой.
"""

import argparse
import sys
from typing import List, Optional

from .config_loader import CONFLICT_POLICIES, DEFAULT_EXPIRE_DAYS, load_config
from .history import ArchiveError
from .logger import RotateDirLogger
from .rotator import RotationError, create_rotator


class RotateDirCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config = None
        self.logger = None
        self.rotator = None

    def setup(self, args) -> bool:
        """
        Инициализирует CLI: конфигурация, логгер, ротатор.

        Args:
            args: Аргументы командной строки

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = load_config(
                args.base,
                config_path=args.config,
                history_base=args.history_base,
                expire_days=args.expire,
                verbose=args.verbose,
                dry_run=args.dry,
                ignore=args.ignore,
                on_conflict=args.on_conflict,
                log_file=args.log_file
            )

            self.logger = RotateDirLogger(self.config.logging)
            self.rotator = create_rotator(self.config, self.logger)

            if args.config:
                self.logger.log_config_loaded(args.config)
            return True

        except (OSError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

    def cmd_rotate(self, args) -> int:
        """
        Выполняет ротацию.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            self.rotator.run()
            return 0

        except (RotationError, ArchiveError) as e:
            print(f"❌ Ошибка ротации: {e}")
            return 1
        finally:
            if self.logger:
                self.logger.close()


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    # -h занят под --history-base, справка доступна через --help
    parser = argparse.ArgumentParser(
        prog='rotatedir',
        description="Переносит устаревшие файлы и каталоги в каталог истории, "
                    "сгруппированный по датам. Вся история остается доступной для просмотра и поиска.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Примеры использования:

  # Ротация с параметрами по умолчанию (история в BASE/HISTORY, срок 7 дней)
  rotatedir /data/builds

  # Пробный запуск с подробным логом
  rotatedir /data/builds --dry --verbose

  # Собственный каталог истории, срок 30 дней, исключения
  rotatedir /data/builds -h /archive/builds -e 30 -i latest -i .keep
        """
    )

    parser.add_argument(
        'base',
        metavar='BASE',
        help='Каталог для ротации'
    )
    parser.add_argument(
        '-h', '--history-base',
        metavar='DIR',
        help='Каталог истории (по умолчанию: BASE/HISTORY)'
    )
    parser.add_argument(
        '-e', '--expire',
        metavar='N',
        type=int,
        help=f'Через сколько дней запись переносится в историю (по умолчанию: {DEFAULT_EXPIRE_DAYS})'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Подробный вывод'
    )
    parser.add_argument(
        '-d', '--dry',
        action='store_true',
        help='Не переносить записи, только логировать'
    )
    parser.add_argument(
        '-i', '--ignore',
        metavar='NAME',
        action='append',
        help='Не рассматривать запись с таким именем. Можно указывать несколько раз'
    )
    parser.add_argument(
        '-c', '--config',
        help='Путь к файлу настроек (INI)'
    )
    parser.add_argument(
        '--on-conflict',
        choices=CONFLICT_POLICIES,
        help='Что делать, если в каталоге даты уже есть такое имя (по умолчанию: fail)'
    )
    parser.add_argument(
        '--log-file',
        help='Дополнительно писать лог в файл с ротацией'
    )
    parser.add_argument(
        '--help',
        action='help',
        help='Показать эту справку и выйти'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = RotateDirCLI()

    if not cli.setup(args):
        return 1

    try:
        return cli.cmd_rotate(args)

    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
