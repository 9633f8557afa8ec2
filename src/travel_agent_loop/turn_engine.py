from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from loguru import logger

from travel_agent_loop.errors import TurnFailedError, UnknownToolError
from travel_agent_loop.history import append_text_turn
from travel_agent_loop.memory.models import DataType
from travel_agent_loop.provider import LLMProvider, message_text
from travel_agent_loop.tool_registry import ToolRegistry


class TurnState(StrEnum):
    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_TOOLS = "dispatching_tools"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ToolResult:
    tool_use_id: str
    name: str
    content: dict[str, Any]
    is_error: bool = False
    data_type: DataType | None = None


@dataclass
class TurnResult:
    text: str
    data: Any = None
    data_type: DataType | None = None
    rounds: int = 0
    state: TurnState = TurnState.AWAITING_MODEL

    def transition(self, state: TurnState) -> None:
        logger.debug(f"Turn state {self.state} -> {state} (round {self.rounds})")
        self.state = state


class TurnEngine:
    def __init__(
        self,
        *,
        provider: LLMProvider,
        model: str,
        max_tokens: int,
        temperature: float,
        system_prompt: str,
        registry: ToolRegistry,
        max_tool_rounds: int = 8,
        max_tool_result_chars: int = 40_000,
        model_timeout_seconds: float = 60.0,
        tool_timeout_seconds: float = 30.0,
        on_record_tool_call: Callable[..., None] | None = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._system_prompt = system_prompt
        self._registry = registry
        self._converted_tools = provider.convert_tools(registry.tools)
        self._max_tool_rounds = max_tool_rounds
        self._max_tool_result_chars = max_tool_result_chars
        self._model_timeout_seconds = model_timeout_seconds
        self._tool_timeout_seconds = tool_timeout_seconds
        self._on_record_tool_call = on_record_tool_call

    async def run(self, *, history: list[dict], user_message: str) -> TurnResult:
        """Drive one turn: model rounds and tool rounds until the model answers in text.

        ``history`` is already in provider format and is not mutated.
        """
        messages = [dict(m) for m in history]
        append_text_turn(messages, "user", user_message)

        result = TurnResult(text="")

        while True:
            message, tool_use_blocks, stop_reason = await self._call_model(messages, result)
            messages.append(message)

            if not tool_use_blocks:
                if stop_reason == "max_tokens":
                    logger.warning(f"Model reply was cut off at max_tokens ({self._max_tokens})")
                result.text = message_text(message)
                result.transition(TurnState.DONE)
                logger.info(f"Turn completed after {result.rounds} tool round(s)")
                return result

            if result.rounds >= self._max_tool_rounds:
                result.transition(TurnState.FAILED)
                logger.error(f"Model kept requesting tools after {self._max_tool_rounds} round(s); giving up")
                raise TurnFailedError(
                    "max_rounds",
                    f"Exceeded the maximum of {self._max_tool_rounds} tool rounds",
                )

            result.transition(TurnState.DISPATCHING_TOOLS)
            result.rounds += 1
            tool_results = await self.execute_tools(tool_use_blocks)

            if result.data is None:
                for tool_result in tool_results:
                    if tool_result.is_error or tool_result.data_type is None:
                        continue
                    data = tool_result.content.get("data")
                    if data is not None:
                        result.data = data
                        result.data_type = tool_result.data_type
                        break

            messages.append({"role": "user", "content": [self._to_block(r) for r in tool_results]})
            result.transition(TurnState.AWAITING_MODEL)

    async def _call_model(self, messages: list[dict], result: TurnResult) -> tuple[dict, list[dict], str]:
        try:
            return await asyncio.wait_for(
                self._provider.chat(
                    self._model,
                    self._max_tokens,
                    self._temperature,
                    self._system_prompt,
                    messages,
                    self._converted_tools,
                ),
                timeout=self._model_timeout_seconds,
            )
        except TimeoutError as ex:
            result.transition(TurnState.FAILED)
            logger.error(f"Model round timed out after {self._model_timeout_seconds}s")
            raise TurnFailedError("model_timeout", "The language model did not respond in time") from ex
        except Exception as ex:
            result.transition(TurnState.FAILED)
            logger.error(f"Model round failed: {type(ex).__name__}: {ex}")
            raise TurnFailedError("model_error", f"The language model request failed: {ex}") from ex

    async def execute_tools(self, tool_use_blocks: list[dict]) -> list[ToolResult]:
        """Run every call of one round concurrently; the round ends when all have finished."""

        async def run_one(block: dict) -> ToolResult:
            tool_name = block["name"]
            tool_use_id = block["id"]
            tool_input = block.get("input") or {}

            try:
                tool = self._registry.get(tool_name)
            except UnknownToolError as ex:
                logger.error(f"Model requested an undeclared tool: {tool_name!r}")
                return self._record(ToolResult(tool_use_id, tool_name, {"error": str(ex)}, is_error=True), tool_input)

            try:
                content = await asyncio.wait_for(tool.execute(tool_input), timeout=self._tool_timeout_seconds)
            except TimeoutError:
                message = f'Tool "{tool_name}" timed out after {self._tool_timeout_seconds:g}s'
                logger.warning(message)
                return self._record(ToolResult(tool_use_id, tool_name, {"error": message}, is_error=True), tool_input)
            except Exception as ex:
                logger.warning(f'Tool "{tool_name}" failed: {type(ex).__name__}: {ex}')
                return self._record(ToolResult(tool_use_id, tool_name, {"error": str(ex)}, is_error=True), tool_input)

            return self._record(
                ToolResult(tool_use_id, tool_name, content, data_type=tool.ui_data_type),
                tool_input,
            )

        return list(await asyncio.gather(*(run_one(b) for b in tool_use_blocks)))

    def _record(self, result: ToolResult, tool_input: dict) -> ToolResult:
        if self._on_record_tool_call is not None:
            try:
                self._on_record_tool_call(
                    tool_call_id=result.tool_use_id,
                    tool_name=result.name,
                    tool_input=tool_input,
                    result_text=self._serialize(result.content),
                    is_error=result.is_error,
                )
            except Exception as ex:
                logger.warning(f"Recording tool call {result.name} failed: {ex}")
        return result

    def _to_block(self, result: ToolResult) -> dict:
        block = {
            "type": "tool_result",
            "tool_use_id": result.tool_use_id,
            "content": self._truncate_tool_result(self._serialize(result.content), result.name),
        }
        if result.is_error:
            block["is_error"] = True
        return block

    @staticmethod
    def _serialize(content: dict) -> str:
        return json.dumps(content, ensure_ascii=False, default=str)

    def _truncate_tool_result(self, result: str, tool_name: str) -> str:
        if self._max_tool_result_chars <= 0 or len(result) <= self._max_tool_result_chars:
            return result

        original_length = len(result)
        truncated = result[: self._max_tool_result_chars]
        message = (
            f"\n\n[OUTPUT TRUNCATED: Showing {self._max_tool_result_chars:,} "
            f"of {original_length:,} characters from {tool_name}]"
        )
        logger.warning(
            f"{tool_name} output truncated from {original_length:,} "
            f"to {self._max_tool_result_chars:,} chars"
        )
        return truncated + message
