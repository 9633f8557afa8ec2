import unittest
from unittest.mock import patch

from travel_agent_loop.app_config import RuntimeEnv, parse_app_config, resolve_provider_api_key, resolve_runtime_env


def _env(**overrides) -> RuntimeEnv:
    values = dict(
        provider_api_key="",
        provider_env_var="ANTHROPIC_API_KEY",
        amadeus_client_id="id",
        amadeus_client_secret="secret",
        google_project_id=None,
        llm_secret_name=None,
        port=None,
    )
    values.update(overrides)
    return RuntimeEnv(**values)


class ParseAppConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = parse_app_config({})
        self.assertEqual("anthropic", config.provider_name)
        self.assertEqual(config.model, config.title_model)
        self.assertEqual(8, config.max_tool_rounds)
        self.assertEqual("https://test.api.amadeus.com", config.amadeus_base_url)
        self.assertEqual(3000, config.port)

    def test_overrides(self) -> None:
        config = parse_app_config({
            "Provider": " OpenAI ",
            "Model": "gpt-4o",
            "TitleModel": "gpt-4o-mini",
            "MaxToolRounds": "0",
            "AmadeusBaseUrl": "https://api.amadeus.com/",
            "Port": "8080",
        })
        self.assertEqual("openai", config.provider_name)
        self.assertEqual("gpt-4o-mini", config.title_model)
        self.assertEqual(1, config.max_tool_rounds)
        self.assertEqual("https://api.amadeus.com", config.amadeus_base_url)
        self.assertEqual(8080, config.port)


class RuntimeEnvTests(unittest.TestCase):
    def test_reads_provider_specific_key(self) -> None:
        with patch.dict(
            "os.environ",
            {"OPENAI_API_KEY": "sk-test", "AMADEUS_CLIENT_ID": "cid", "PORT": "9000"},
            clear=True,
        ):
            env = resolve_runtime_env("openai")
        self.assertEqual("sk-test", env.provider_api_key)
        self.assertEqual("OPENAI_API_KEY", env.provider_env_var)
        self.assertEqual("cid", env.amadeus_client_id)
        self.assertEqual("", env.amadeus_client_secret)
        self.assertEqual(9000, env.port)


class ResolveProviderApiKeyTests(unittest.TestCase):
    def test_env_key_wins(self) -> None:
        with patch("travel_agent_loop.app_config.fetch_secret") as fetch:
            self.assertEqual("k", resolve_provider_api_key(_env(provider_api_key="k", google_project_id="p", llm_secret_name="s")))
        fetch.assert_not_called()

    def test_falls_back_to_secret_manager(self) -> None:
        with patch("travel_agent_loop.app_config.fetch_secret", return_value="from-secret") as fetch:
            key = resolve_provider_api_key(_env(google_project_id="proj", llm_secret_name="llm-key"))
        self.assertEqual("from-secret", key)
        fetch.assert_called_once_with("proj", "llm-key")

    def test_secret_manager_failure_degrades_to_empty(self) -> None:
        with patch("travel_agent_loop.app_config.fetch_secret", side_effect=RuntimeError("no credentials")):
            key = resolve_provider_api_key(_env(google_project_id="proj", llm_secret_name="llm-key"))
        self.assertEqual("", key)

    def test_no_secret_configured(self) -> None:
        with patch("travel_agent_loop.app_config.fetch_secret") as fetch:
            self.assertEqual("", resolve_provider_api_key(_env()))
        fetch.assert_not_called()
