from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import reduce
from typing import Iterable

from bettertodo.core.providers import (
    AssistantTurn,
    Provider,
    ProviderClient,
    TextOnly,
    ToolCall,
    ToolResult,
    ToolResultTurn,
    Turn,
    UserTurn,
)
from bettertodo.core.tools.dispatch import ToolContext, ToolDispatcher
from bettertodo.core.tools.errors import ToolError

from .schemas import ExecutionLogEntry
from .store import AgentTaskStore

MAX_ITERATIONS = 10
DEFAULT_SUMMARY = "Execution completed."

logger = logging.getLogger("bettertodo.agent.loop")


def fold_final_text(texts: Iterable[str], initial: str = "") -> str:
    """Return the last non-empty text, or ``initial`` when every text is empty."""
    return reduce(lambda acc, text: text if text.strip() else acc, texts, initial)


@dataclass
class LoopOutcome:
    final_text: str
    iterations: int
    tool_calls: int


class AgenticLoop:
    def __init__(
        self,
        client: ProviderClient,
        dispatcher: ToolDispatcher,
        store: AgentTaskStore,
        max_iterations: int = MAX_ITERATIONS,
    ) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.store = store
        self.max_iterations = max_iterations

    def run(
        self,
        task_id: str,
        provider: Provider,
        api_key: str,
        system_prompt: str,
        user_message: str,
        ctx: ToolContext,
    ) -> LoopOutcome:
        turns: list[Turn] = [UserTurn(text=user_message)]
        texts: list[str] = []
        iterations = 0
        tool_calls = 0

        while iterations < self.max_iterations:
            iterations += 1
            # Provider failures propagate and fail the whole run.
            response = self.client.complete_with_tools(provider, api_key, system_prompt, turns)
            texts.append(response.text)
            if isinstance(response, TextOnly):
                break

            results: list[ToolResult] = []
            for call in response.calls:
                results.append(self._execute(task_id, call, ctx))
                tool_calls += 1
            turns.append(AssistantTurn(text=response.text, tool_calls=list(response.calls)))
            turns.append(ToolResultTurn(results=results))
        else:
            logger.warning("iteration limit reached", extra={"extra_fields": {"iterations": iterations}})

        final_text = fold_final_text(texts) or DEFAULT_SUMMARY
        logger.info(
            "agentic_loop_finished",
            extra={"extra_fields": {"iterations": iterations, "tool_calls": tool_calls, "provider": provider}},
        )
        return LoopOutcome(final_text=final_text, iterations=iterations, tool_calls=tool_calls)

    def _execute(self, task_id: str, call: ToolCall, ctx: ToolContext) -> ToolResult:
        entry = ExecutionLogEntry(tool_name=call.name, tool_input=json.dumps(call.arguments, ensure_ascii=False))
        # Pending entry is written before the tool runs.
        index = self.store.append_execution_log_entry(task_id, entry)

        try:
            result = self.dispatcher.execute(call, ctx)
        except ToolError as exc:
            payload = json.dumps({"error": str(exc)}, ensure_ascii=False)
            logger.warning("tool_failed", extra={"extra_fields": {"tool": call.name, "error": str(exc)}})
            if index is not None:
                self.store.update_execution_log_entry(task_id, index, "error", payload)
            return ToolResult(call_id=call.id, content=payload, is_error=True)

        payload = json.dumps(result, ensure_ascii=False, default=str)
        if index is not None:
            self.store.update_execution_log_entry(task_id, index, "success", payload)
        return ToolResult(call_id=call.id, content=payload)
