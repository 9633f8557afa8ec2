from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from travel_agent_loop.tools.amadeus.amadeus_client import DEFAULT_BASE_URL


@dataclass
class RuntimeEnv:
    provider_api_key: str
    provider_env_var: str
    amadeus_client_id: str
    amadeus_client_secret: str
    google_project_id: str | None
    llm_secret_name: str | None
    port: int | None


@dataclass
class AppConfig:
    provider_name: str
    model: str
    title_model: str
    max_tokens: int
    temperature: float
    max_tool_result_chars: int
    max_tool_rounds: int
    model_timeout_seconds: float
    tool_timeout_seconds: float
    session_db_path: str
    amadeus_base_url: str
    host: str
    port: int
    log_level: str
    log_consumers: list | None


def load_json_config() -> dict:
    config_path = Path.cwd() / "config.json"
    if config_path.exists():
        with open(config_path) as f:
            return json.load(f)
    return {}


def _to_int(value: object, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return int(value)


def parse_app_config(config: dict) -> AppConfig:
    model = config.get("Model", "claude-sonnet-4-5-20250929")
    return AppConfig(
        provider_name=config.get("Provider", "anthropic").strip().lower(),
        model=model,
        title_model=config.get("TitleModel") or model,
        max_tokens=int(config.get("MaxTokens", 4096)),
        temperature=float(config.get("Temperature", 0.7)),
        max_tool_result_chars=int(config.get("MaxToolResultChars", 40_000)),
        max_tool_rounds=max(1, int(config.get("MaxToolRounds", 8))),
        model_timeout_seconds=float(config.get("ModelTimeoutSeconds", 60)),
        tool_timeout_seconds=float(config.get("ToolTimeoutSeconds", 30)),
        session_db_path=str(config.get("SessionDbPath", ".travel_agent/sessions.db")),
        amadeus_base_url=str(config.get("AmadeusBaseUrl", DEFAULT_BASE_URL)).rstrip("/"),
        host=str(config.get("Host", "0.0.0.0")),
        port=_to_int(config.get("Port"), 3000),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(provider_name: str) -> RuntimeEnv:
    if provider_name == "openai":
        provider_api_key = os.environ.get("OPENAI_API_KEY", "")
        provider_env_var = "OPENAI_API_KEY"
    else:
        provider_api_key = os.environ.get("ANTHROPIC_API_KEY", "")
        provider_env_var = "ANTHROPIC_API_KEY"

    port = os.environ.get("PORT", "").strip()
    return RuntimeEnv(
        provider_api_key=provider_api_key,
        provider_env_var=provider_env_var,
        amadeus_client_id=os.environ.get("AMADEUS_CLIENT_ID", ""),
        amadeus_client_secret=os.environ.get("AMADEUS_CLIENT_SECRET", ""),
        google_project_id=os.environ.get("GOOGLE_PROJECT_ID") or None,
        llm_secret_name=os.environ.get("LLM_SECRET_NAME") or None,
        port=int(port) if port else None,
    )


def fetch_secret(project_id: str, secret_name: str) -> str:
    """Latest version of a Google Secret Manager secret, decoded as UTF-8."""
    from google.cloud import secretmanager

    client = secretmanager.SecretManagerServiceClient()
    name = f"projects/{project_id}/secrets/{secret_name}/versions/latest"
    logger.info(f"Fetching secret: {name}")
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("utf-8").strip()


def resolve_provider_api_key(env: RuntimeEnv) -> str:
    """The model key from the environment, else from Secret Manager. Empty if neither works."""
    if env.provider_api_key:
        return env.provider_api_key
    if not (env.google_project_id and env.llm_secret_name):
        logger.warning(f"{env.provider_env_var} is not set and no secret is configured")
        return ""

    logger.info(f"{env.provider_env_var} not found in env, trying Secret Manager")
    try:
        key = fetch_secret(env.google_project_id, env.llm_secret_name)
    except Exception as ex:
        logger.error(f"Failed to retrieve API key from Secret Manager: {type(ex).__name__}: {ex}")
        return ""
    if key:
        logger.info("Retrieved API key from Secret Manager")
    return key
