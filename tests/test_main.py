"""
Тесты для модуля main.py
"""

import os
import pytest
from datetime import date, datetime, time, timedelta
from pathlib import Path
from unittest.mock import Mock, patch

from rotatedir.config_loader import Config, LoggingConfig, RotationConfig
from rotatedir.history import ArchiveError
from rotatedir.main import RotateDirCLI, create_parser, main
from rotatedir.rotator import RotationError


NOON = datetime.combine(date.today(), time(12))


def make_old_file(path: Path, days: int) -> Path:
    path.write_text(path.name)
    ts = (NOON - timedelta(days=days)).timestamp()
    os.utime(path, (ts, ts))
    return path


class TestCreateParser:
    """Тесты для парсера аргументов."""

    def test_defaults(self):
        """Тест значений по умолчанию."""
        args = create_parser().parse_args(["/data"])

        assert args.base == "/data"
        assert args.history_base is None
        assert args.expire is None
        assert args.verbose is False
        assert args.dry is False
        assert args.ignore is None
        assert args.config is None
        assert args.on_conflict is None

    def test_short_flags(self):
        """Тест коротких флагов; -h означает каталог истории."""
        args = create_parser().parse_args(
            ["/data", "-h", "/archive", "-e", "30", "-v", "-d", "-i", "latest", "-i", ".keep"]
        )

        assert args.history_base == "/archive"
        assert args.expire == 30
        assert args.verbose is True
        assert args.dry is True
        assert args.ignore == ["latest", ".keep"]

    def test_long_flags(self):
        """Тест длинных флагов."""
        args = create_parser().parse_args([
            "/data", "--history-base", "/archive", "--expire", "1", "--verbose", "--dry",
            "--ignore", "tmp", "--config", "settings.ini", "--on-conflict", "rename",
            "--log-file", "rotatedir.log"
        ])

        assert args.history_base == "/archive"
        assert args.expire == 1
        assert args.ignore == ["tmp"]
        assert args.config == "settings.ini"
        assert args.on_conflict == "rename"
        assert args.log_file == "rotatedir.log"

    def test_missing_base_is_usage_error(self, capsys):
        """Тест: без BASE - ошибка использования с ненулевым кодом."""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args([])

        assert exc_info.value.code == 2
        assert "BASE" in capsys.readouterr().err

    def test_help(self, capsys):
        """Тест: справка доступна через --help."""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--help"])

        assert exc_info.value.code == 0
        assert "--history-base" in capsys.readouterr().out


class TestRotateDirCLI:
    """Тесты для класса RotateDirCLI."""

    @pytest.fixture
    def mock_config(self, tmp_path):
        """Создает конфигурацию."""
        return Config(
            rotation=RotationConfig(base_path=tmp_path, history_path=tmp_path / "HISTORY"),
            logging=LoggingConfig()
        )

    @patch('rotatedir.main.load_config')
    @patch('rotatedir.main.RotateDirLogger')
    @patch('rotatedir.main.create_rotator')
    def test_setup_success(self, mock_create_rotator, mock_logger_class, mock_load_config, mock_config):
        """Тест успешной инициализации CLI."""
        mock_load_config.return_value = mock_config
        mock_logger_instance = Mock()
        mock_logger_class.return_value = mock_logger_instance
        mock_rotator_instance = Mock()
        mock_create_rotator.return_value = mock_rotator_instance

        args = create_parser().parse_args(["/data", "-e", "3", "-c", "settings.ini"])
        cli = RotateDirCLI()
        result = cli.setup(args)

        assert result is True
        assert cli.config == mock_config
        assert cli.logger == mock_logger_instance
        assert cli.rotator == mock_rotator_instance

        mock_load_config.assert_called_once_with(
            "/data",
            config_path="settings.ini",
            history_base=None,
            expire_days=3,
            verbose=False,
            dry_run=False,
            ignore=None,
            on_conflict=None,
            log_file=None
        )
        mock_logger_class.assert_called_once_with(mock_config.logging)
        mock_create_rotator.assert_called_once_with(mock_config, mock_logger_instance)
        mock_logger_instance.log_config_loaded.assert_called_once_with("settings.ini")

    @patch('rotatedir.main.load_config')
    def test_setup_failure(self, mock_load_config, capsys):
        """Тест неудачной инициализации CLI."""
        mock_load_config.side_effect = ValueError("Каталог не существует: /data")

        cli = RotateDirCLI()
        result = cli.setup(create_parser().parse_args(["/data"]))

        assert result is False
        assert cli.config is None
        assert cli.logger is None
        assert cli.rotator is None
        assert "❌ Ошибка инициализации" in capsys.readouterr().out

    def test_cmd_rotate_success(self):
        """Тест успешной ротации."""
        cli = RotateDirCLI()
        cli.logger = Mock()
        cli.rotator = Mock()

        assert cli.cmd_rotate(Mock()) == 0
        cli.rotator.run.assert_called_once()
        cli.logger.close.assert_called_once()

    @pytest.mark.parametrize("error", [
        RotationError("Каталог не найден"),
        ArchiveError("Ошибка перемещения")
    ])
    def test_cmd_rotate_failure(self, error, capsys):
        """Тест: ошибки ротации и архивации дают код 1."""
        cli = RotateDirCLI()
        cli.logger = Mock()
        cli.rotator = Mock()
        cli.rotator.run.side_effect = error

        assert cli.cmd_rotate(Mock()) == 1
        assert "❌ Ошибка ротации" in capsys.readouterr().out
        cli.logger.close.assert_called_once()


class TestMain:
    """Сквозные тесты главной функции."""

    def test_rotates_directory(self, tmp_path):
        """Тест полного запуска."""
        old = make_old_file(tmp_path / "a.txt", 10)
        fresh = make_old_file(tmp_path / "b.txt", 1)

        assert main([str(tmp_path)]) == 0

        bucket = tmp_path / "HISTORY" / (NOON - timedelta(days=10)).date().isoformat()
        assert (bucket / "a.txt").exists()
        assert not old.exists()
        assert fresh.exists()

    def test_quiet_by_default(self, tmp_path, capsys):
        """Тест: без --verbose выводятся только предупреждения."""
        make_old_file(tmp_path / "a.txt", 10)

        assert main([str(tmp_path)]) == 0
        assert capsys.readouterr().out == ""

    def test_dry_run_verbose(self, tmp_path, capsys):
        """Тест пробного запуска с подробным логом."""
        old = make_old_file(tmp_path / "a.txt", 10)
        make_old_file(tmp_path / "b.txt", 1)

        assert main([str(tmp_path), "--dry", "--verbose"]) == 0

        output = capsys.readouterr().out
        assert old.exists()
        assert not (tmp_path / "HISTORY").exists()
        assert "📦 Архивация" in output
        assert "a.txt" in output
        assert "слишком свежий" in output

    def test_custom_history_and_ignore(self, tmp_path):
        """Тест каталога истории и исключений из командной строки."""
        base = tmp_path / "data"
        base.mkdir()
        make_old_file(base / "a.txt", 10)
        make_old_file(base / "keep.txt", 10)
        history = tmp_path / "archive"

        assert main([str(base), "-h", str(history), "-e", "5", "-i", "keep.txt"]) == 0

        assert (base / "keep.txt").exists()
        assert (history / (NOON - timedelta(days=10)).date().isoformat() / "a.txt").exists()

    def test_missing_base_directory(self, tmp_path, capsys):
        """Тест: несуществующий BASE - код 1."""
        assert main([str(tmp_path / "missing")]) == 1
        assert "❌ Ошибка инициализации" in capsys.readouterr().out

    def test_malformed_settings_file(self, tmp_path, capsys):
        """Тест: файл настроек без заголовка секции - код 1 без трассировки."""
        base = tmp_path / "data"
        base.mkdir()
        old = make_old_file(base / "a.txt", 10)
        settings = tmp_path / "settings.ini"
        settings.write_text("expire = 7\n", encoding='utf-8')

        assert main([str(base), "-c", str(settings)]) == 1

        output = capsys.readouterr().out
        assert "❌ Ошибка инициализации" in output
        assert "Ошибка загрузки конфигурации" in output
        assert old.exists()

    def test_collision_exit_code(self, tmp_path, capsys):
        """Тест: конфликт имен - код 1."""
        make_old_file(tmp_path / "a.txt", 10)
        bucket = tmp_path / "HISTORY" / (NOON - timedelta(days=10)).date().isoformat()
        bucket.mkdir(parents=True)
        (bucket / "a.txt").write_text("earlier")

        assert main([str(tmp_path)]) == 1
        assert "❌ Ошибка ротации" in capsys.readouterr().out
        assert (tmp_path / "a.txt").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
