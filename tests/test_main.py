"""Tests for the server entry point."""

from unittest.mock import patch

import pytest

import main
from gateway import config as config_module
from gateway.config import Settings


class TestMain:
    """Test startup checks in main()."""

    def test_invalid_environment_exits(self, monkeypatch, capsys):
        monkeypatch.setattr(config_module, "settings", None)
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with patch("uvicorn.run") as mock_run, pytest.raises(SystemExit) as exc_info:
            main.main()

        assert exc_info.value.code == 1
        assert "Failed to start gateway" in capsys.readouterr().out
        mock_run.assert_not_called()

    def test_invalid_startup_config_exits(self, monkeypatch, capsys):
        monkeypatch.setattr(config_module, "settings", Settings(_env_file=None, sse_keepalive_secs=0))

        with patch("uvicorn.run") as mock_run, pytest.raises(SystemExit) as exc_info:
            main.main()

        assert exc_info.value.code == 1
        assert "keepalive" in capsys.readouterr().out
        mock_run.assert_not_called()

    def test_runs_uvicorn(self, monkeypatch):
        monkeypatch.setattr(config_module, "settings", Settings(_env_file=None, port=4000))

        with patch("uvicorn.run") as mock_run:
            main.main()

        assert mock_run.call_args.args[0] == "gateway.web.app:app"
        assert mock_run.call_args.kwargs["port"] == 4000
