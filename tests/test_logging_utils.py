"""Tests for logging_utils.py - log file selection."""

from archrice_installer.logging_utils import FALLBACK_LOG_NAME, open_log_file


class TestOpenLogFile:
    def test_uses_requested_path(self, tmp_path):
        wanted = tmp_path / "logs" / "install.log"

        handler, chosen = open_log_file(str(wanted))
        handler.close()

        assert chosen == str(wanted)
        assert wanted.exists()

    def test_falls_back_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        handler, chosen = open_log_file(str(blocker / "install.log"))
        handler.close()

        assert chosen == str(tmp_path / FALLBACK_LOG_NAME)
        assert (tmp_path / FALLBACK_LOG_NAME).exists()
