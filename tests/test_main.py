"""main のテスト."""

import json
import logging
import sys
from unittest.mock import AsyncMock, patch

from marketscraper.config import Settings
from marketscraper.main import run, setup_logging


class TestSetupLogging:
    """setup_logging のテスト."""

    def test_console_handler_uses_stderr(self, tmp_path):
        """標準出力は JSON 専用なのでログは stderr に出すこと."""
        with patch("marketscraper.main.LOG_DIR", tmp_path / "logs"), \
                patch("marketscraper.main.logging.basicConfig") as mock_config:
            setup_logging(Settings(debug=True))

        kwargs = mock_config.call_args.kwargs
        stream_handler, file_handler = kwargs["handlers"]
        file_handler.close()

        assert kwargs["level"] == logging.DEBUG
        assert stream_handler.stream is sys.stderr
        assert (tmp_path / "logs").is_dir()


class TestRun:
    """run のテスト."""

    @patch("marketscraper.main.setup_logging")
    @patch("marketscraper.main.handle_request", new_callable=AsyncMock)
    def test_success(self, mock_handle, mock_logging, capsys):
        mock_handle.return_value = (200, {"keyword": "notebook", "count": 0, "products": []})

        code = run(["notebook", "--page", "2", "--pages", "3"])

        assert code == 0
        params, _settings = mock_handle.await_args.args
        assert params == {"keyword": "notebook", "page": "2", "pages": "3"}
        assert json.loads(capsys.readouterr().out)["keyword"] == "notebook"
        mock_logging.assert_called_once()

    @patch("marketscraper.main.setup_logging")
    @patch("marketscraper.main.handle_request", new_callable=AsyncMock)
    def test_failure_exit_code(self, mock_handle, mock_logging, capsys):
        mock_handle.return_value = (500, {"error": "Scraping of https://www.amazon.com/ failed.",
                                          "details": "timeout"})

        code = run(["notebook"])

        assert code == 1
        assert json.loads(capsys.readouterr().out)["details"] == "timeout"

    @patch("marketscraper.main.handle_request", new_callable=AsyncMock)
    def test_stdout_is_json_with_logging(self, mock_handle, tmp_path, capsys):
        """ロギング有効でも標準出力は JSON としてパースできること."""
        mock_handle.return_value = (200, {"keyword": "notebook", "count": 0, "products": []})
        root = logging.getLogger()
        saved_handlers = root.handlers[:]
        saved_level = root.level
        root.handlers.clear()
        try:
            with patch("marketscraper.main.LOG_DIR", tmp_path):
                code = run(["notebook"])
            added = [h for h in root.handlers if h not in saved_handlers]
        finally:
            for handler in root.handlers:
                if handler not in saved_handlers:
                    handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        assert code == 0
        assert len(added) == 2
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"keyword": "notebook", "count": 0, "products": []}
        assert "検索結果取得 開始" in captured.err
