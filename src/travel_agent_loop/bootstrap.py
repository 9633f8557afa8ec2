from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx
from loguru import logger

from travel_agent_loop.agent import TravelAgent
from travel_agent_loop.agent_config import AgentConfig
from travel_agent_loop.app_config import AppConfig, RuntimeEnv, resolve_provider_api_key
from travel_agent_loop.memory import EventEmitter, MemoryStore, SessionLocks, SessionManager
from travel_agent_loop.provider import LLMProvider, create_provider
from travel_agent_loop.system_prompt import get_system_prompt
from travel_agent_loop.title_generator import TitleGenerator
from travel_agent_loop.tool_registry import ToolRegistry, build_registry
from travel_agent_loop.tools.amadeus.amadeus_auth import AmadeusTokenCache
from travel_agent_loop.tools.amadeus.amadeus_client import AmadeusClient, create_http_client


@dataclass
class AppRuntime:
    provider_name: str
    memory_store: MemoryStore
    sessions: SessionManager
    locks: SessionLocks
    amadeus: AmadeusClient
    registry: ToolRegistry
    title_generator: TitleGenerator
    agent: TravelAgent | None
    log_descriptions: list[str] = field(default_factory=list)

    async def aclose(self) -> None:
        await self.title_generator.aclose()
        await self.amadeus.aclose()
        self.memory_store.close()


def _build_provider(app: AppConfig, env: RuntimeEnv) -> LLMProvider | None:
    api_key = resolve_provider_api_key(env)
    if not api_key:
        logger.error(f"{env.provider_env_var} is unavailable; chat is disabled")
        return None
    try:
        return create_provider(app.provider_name, api_key)
    except ValueError as ex:
        logger.error(f"Model provider not initialized: {ex}")
        return None


def bootstrap_runtime(
    app: AppConfig,
    env: RuntimeEnv,
    *,
    provider: LLMProvider | None = None,
    http_client: httpx.AsyncClient | None = None,
    log_descriptions: list[str] | None = None,
) -> AppRuntime:
    """Wire storage, the Amadeus client, tools and the model into an ``AppRuntime``.

    ``provider`` and ``http_client`` override the ones built from configuration.
    A missing model key leaves ``agent`` as None; everything else still works.
    """
    db_path = Path(app.session_db_path)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    memory_store = MemoryStore(str(db_path))
    sessions = SessionManager(memory_store, EventEmitter(memory_store))
    locks = SessionLocks()

    if not (env.amadeus_client_id and env.amadeus_client_secret):
        logger.warning("AMADEUS_CLIENT_ID/AMADEUS_CLIENT_SECRET not set; tool calls will fail")
    http = http_client or create_http_client(app.amadeus_base_url)
    tokens = AmadeusTokenCache(http, env.amadeus_client_id, env.amadeus_client_secret)
    amadeus = AmadeusClient(http, tokens)
    registry = build_registry(amadeus)

    if provider is None:
        provider = _build_provider(app, env)

    title_generator = TitleGenerator(
        provider=provider,
        model=app.title_model,
        sessions=sessions,
        locks=locks,
    )

    agent: TravelAgent | None = None
    if provider is not None:
        agent = TravelAgent(
            AgentConfig(
                model=app.model,
                max_tokens=app.max_tokens,
                temperature=app.temperature,
                system_prompt=get_system_prompt(),
                max_tool_rounds=app.max_tool_rounds,
                max_tool_result_chars=app.max_tool_result_chars,
                model_timeout_seconds=app.model_timeout_seconds,
                tool_timeout_seconds=app.tool_timeout_seconds,
            ),
            provider=provider,
            registry=registry,
            sessions=sessions,
            locks=locks,
            title_generator=title_generator,
        )

    return AppRuntime(
        provider_name=app.provider_name,
        memory_store=memory_store,
        sessions=sessions,
        locks=locks,
        amadeus=amadeus,
        registry=registry,
        title_generator=title_generator,
        agent=agent,
        log_descriptions=log_descriptions or [],
    )
