import uvicorn
from dotenv import load_dotenv
from loguru import logger

from travel_agent_loop.app_config import load_json_config, parse_app_config, resolve_runtime_env
from travel_agent_loop.bootstrap import bootstrap_runtime
from travel_agent_loop.logging_config import setup_logging
from travel_agent_loop.server import create_app


def main() -> None:
    load_dotenv()

    app_config = parse_app_config(load_json_config())
    log_descriptions = setup_logging(level=app_config.log_level, consumers=app_config.log_consumers)
    env = resolve_runtime_env(app_config.provider_name)

    runtime = bootstrap_runtime(app_config, env, log_descriptions=log_descriptions)
    port = env.port or app_config.port

    print("travel-agent-loop")
    print("Tools:")
    for name in runtime.registry.names:
        print(f"  - {name}")
    print(f"Provider: {app_config.provider_name if runtime.agent else 'unavailable'} ({app_config.model})")
    print(f"Sessions: {runtime.memory_store.path}")
    if log_descriptions:
        print(f"Logging: {', '.join(log_descriptions)}")
    print(f"Listening on http://{app_config.host}:{port}")
    print()

    logger.info(f"Starting server on {app_config.host}:{port}")
    uvicorn.run(create_app(runtime), host=app_config.host, port=port, log_config=None)


if __name__ == "__main__":
    main()
