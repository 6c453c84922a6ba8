import unittest

from strata.config.environment import AppEnvironment, get_app_environment, get_server_port, parse_config_dir


class AppEnvironmentTests(unittest.TestCase):
    def test_predicates(self) -> None:
        self.assertTrue(AppEnvironment.PROD.is_production())
        self.assertTrue(AppEnvironment.DEV.is_development())
        self.assertTrue(AppEnvironment.TEST.is_test())
        self.assertTrue(AppEnvironment.INTEGRATION.is_integration())
        self.assertFalse(AppEnvironment.DEV.is_production())

    def test_string_value(self) -> None:
        self.assertEqual(str(AppEnvironment.PROD), "prod")
        self.assertEqual(AppEnvironment.TEST, "test")

    def test_get_app_environment(self) -> None:
        self.assertIs(get_app_environment(environ={"APP_ENV": "prod"}), AppEnvironment.PROD)
        self.assertIs(get_app_environment(environ={}), AppEnvironment.DEV)
        self.assertEqual(get_app_environment(environ={"APP_ENV": "staging"}), "staging")
        self.assertIs(get_app_environment("STAGE", "test", environ={}), AppEnvironment.TEST)


class ServerPortTests(unittest.TestCase):
    def test_port_from_environment(self) -> None:
        self.assertEqual(get_server_port("8080", environ={"PORT": "9090"}), "9090")

    def test_default_port(self) -> None:
        self.assertEqual(get_server_port("8080", environ={}), "8080")
        self.assertEqual(get_server_port("8080", environ={"PORT": ""}), "8080")


class ParseConfigDirTests(unittest.TestCase):
    def test_flag(self) -> None:
        self.assertEqual(parse_config_dir("./configs", ["--config-dir", "/etc/app", "--other"]), "/etc/app")

    def test_default(self) -> None:
        self.assertEqual(parse_config_dir("./configs", ["run"]), "./configs")


if __name__ == "__main__":
    unittest.main()
