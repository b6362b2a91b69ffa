"""CLI argument handling and logging setup tests."""

from __future__ import annotations

import io
import logging
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest import mock

from lazycm import cli, logs


class CliArgumentTests(unittest.TestCase):
    def _run(self, argv: list[str]) -> mock.Mock:
        with mock.patch("lazycm.cli.run_app") as run_app, mock.patch("lazycm.cli.configure_logging") as configure:
            cli.main(argv)
        self.configure = configure
        return run_app

    def test_no_arguments_starts_without_command(self) -> None:
        run_app = self._run([])

        run_app.assert_called_once_with(None, shell=None, tab_size=None, config_path=None)
        self.configure.assert_called_once_with(verbose=False)

    def test_command_and_options_are_forwarded(self) -> None:
        run_app = self._run(
            ["--shell", "/bin/bash", "--tab-size", "4", "--config", "/tmp/cm.json", "--verbose", "grep -rn TODO ."]
        )

        run_app.assert_called_once_with(
            "grep -rn TODO .",
            shell="/bin/bash",
            tab_size=4,
            config_path=Path("/tmp/cm.json"),
        )
        self.configure.assert_called_once_with(verbose=True)

    def test_tab_size_zero_is_accepted(self) -> None:
        run_app = self._run(["--tab-size", "0"])

        self.assertEqual(run_app.call_args.kwargs["tab_size"], 0)

    def test_invalid_tab_size_exits_with_usage_error(self) -> None:
        for value in ("-1", "wide"):
            with self.subTest(value=value):
                with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
                    self._run(["--tab-size", value])
                self.assertEqual(ctx.exception.code, 2)

    def test_more_than_one_command_is_rejected(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            self._run(["ls", "pwd"])


class LoggingSetupTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        self._saved_handlers = list(root.handlers)
        self._saved_level = root.level

    def tearDown(self) -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self._saved_handlers:
                handler.close()
        root.handlers[:] = self._saved_handlers
        root.setLevel(self._saved_level)

    def test_records_go_to_the_log_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "lazycm.log"
            self.assertEqual(logs.configure_logging(verbose=True, path=path), path)
            logging.getLogger("lazycm.test").debug("hello from the test")
            for handler in logging.getLogger().handlers:
                handler.flush()

            self.assertIn("hello from the test", path.read_text(encoding="utf-8"))

    def test_default_level_is_info(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logs.configure_logging(path=Path(tmp) / "x.log")
            self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
