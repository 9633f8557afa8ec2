from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Tool(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def input_schema(self) -> dict[str, Any]: ...

    @property
    def ui_data_type(self) -> str | None:
        """Result card type shown to the user, or None if the result is model-only."""
        ...

    async def execute(self, tool_input: dict[str, Any]) -> dict[str, Any]: ...
