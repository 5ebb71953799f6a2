"""Tests for lib/command.py - the subprocess boundary."""

import logging

import pytest

from archrice_installer.lib.command import CommandError, run_cmd


class TestRunCmd:
    def test_success(self, fake_commands):
        fake_commands.respond("echo", stdout="hi\n")

        r = run_cmd(["echo", "hi"])

        assert (r.returncode, r.stdout) == (0, "hi\n")
        assert fake_commands.calls == [["echo", "hi"]]

    def test_failure_raises(self, fake_commands):
        fake_commands.fail("false", returncode=3, stderr="nope")

        with pytest.raises(CommandError) as exc:
            run_cmd(["false"])

        assert exc.value.returncode == 3
        assert exc.value.argv == ["false"]
        assert "nope" in str(exc.value)
        assert isinstance(exc.value, RuntimeError)

    def test_failure_tolerated_without_check(self, fake_commands):
        fake_commands.fail("false")
        assert run_cmd(["false"], check=False).returncode == 1

    def test_dry_run_does_not_execute(self, fake_commands):
        r = run_cmd(["parted", "-s", "/dev/sda", "mklabel", "gpt"], dry_run=True)

        assert r.returncode == 0
        assert fake_commands.calls == []

    def test_input_is_not_logged(self, fake_commands, caplog):
        with caplog.at_level(logging.DEBUG):
            run_cmd(["chpasswd"], input_text="root:s3cret\n")

        assert fake_commands.inputs == ["root:s3cret\n"]
        assert "s3cret" not in caplog.text
        assert "CMD chpasswd" in caplog.text

    def test_missing_executable(self):
        with pytest.raises(CommandError) as exc:
            run_cmd(["definitely-not-a-real-command-xyz"])
        assert exc.value.returncode == 127

        assert run_cmd(["definitely-not-a-real-command-xyz"], check=False).returncode == 127
