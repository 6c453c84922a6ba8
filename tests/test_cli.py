import io
import json
import os
import sys
import tempfile
import textwrap
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

import yaml

from strata import __main__ as cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.config_dir = Path(tmp.name)

        patcher = mock.patch.object(cli, "init_logging")
        self.init_logging = patcher.start()
        self.addCleanup(patcher.stop)

        env_patcher = mock.patch.dict(os.environ, {}, clear=True)
        env_patcher.start()
        self.addCleanup(env_patcher.stop)

    def write(self, name: str, content: str) -> None:
        (self.config_dir / name).write_text(textwrap.dedent(content), encoding="utf-8")

    def run_cli(self, *args: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(["--config-dir", str(self.config_dir), *args])
        return code, out.getvalue()

    def test_prints_effective_yaml(self) -> None:
        self.write("config.yaml", "app_name: cli-app\nserver_port: 8080\n")
        self.write("config.prod.yaml", "server_port: 443\n")

        code, output = self.run_cli("--env", "prod")

        self.assertEqual(code, 0)
        data = yaml.safe_load(output)
        self.assertEqual(data["app_name"], "cli-app")
        self.assertEqual(data["server_port"], 443)
        self.assertIsNone(data["mysql"])

    def test_environment_from_app_env(self) -> None:
        self.write("config.yaml", "server_port: 1\n")
        self.write("config.test.yaml", "server_port: 2\n")
        os.environ["APP_ENV"] = "test"

        code, output = self.run_cli("--format", "json")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["server_port"], 2)

    def test_decode_failure_exit_code(self) -> None:
        self.write("config.yaml", "server_port: not-a-port\n")

        code, output = self.run_cli()

        self.assertEqual(code, cli.EXIT_CONFIG_MALFORMED)
        self.assertEqual(output, "")

    def test_validation_failure_exit_code(self) -> None:
        module_dir = self.config_dir / "mods"
        module_dir.mkdir()
        (module_dir / "strata_cli_checks.py").write_text(
            textwrap.dedent(
                """
                def require_port(config):
                    if config.server_port <= 0:
                        raise ValueError("server_port must be positive")
                """
            ),
            encoding="utf-8",
        )
        self.write("config.yaml", "server_port: 0\n")

        with mock.patch.object(sys, "path", [str(module_dir), *sys.path]):
            code, _ = self.run_cli("--validator", "strata_cli_checks:require_port")
        sys.modules.pop("strata_cli_checks", None)

        self.assertEqual(code, cli.EXIT_CONFIG_INVALID)

    def test_reconfigures_logging_from_app_config(self) -> None:
        self.write("config.yaml", "app_log_level: debug\n")

        code, _ = self.run_cli()

        self.assertEqual(code, 0)
        settings = self.init_logging.call_args_list[-1].args[0]
        self.assertEqual(settings.level, "debug")

    def test_rejects_malformed_model_path(self) -> None:
        with mock.patch.object(sys, "stderr", io.StringIO()) as err, self.assertRaises(SystemExit) as ctx:
            self.run_cli("--model", "strata.config.models.AppConfig")

        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("Expected module:attribute", err.getvalue())

    def test_rejects_unknown_model_or_validator(self) -> None:
        for args in (
            ("--model", "strata_no_such_module:Thing"),
            ("--model", "strata.config.models:NoSuchConfig"),
            ("--model", "strata.config.environment:get_server_port"),
            ("--validator", "strata.config.models:no_such_check"),
        ):
            with self.subTest(args=args):
                with mock.patch.object(sys, "stderr", io.StringIO()), self.assertRaises(SystemExit) as ctx:
                    self.run_cli(*args)
                self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
