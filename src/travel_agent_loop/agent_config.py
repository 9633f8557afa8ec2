from dataclasses import dataclass


@dataclass
class AgentConfig:
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    temperature: float = 0.7
    system_prompt: str = ""
    max_tool_rounds: int = 8
    max_tool_result_chars: int = 40_000
    model_timeout_seconds: float = 60.0
    tool_timeout_seconds: float = 30.0
