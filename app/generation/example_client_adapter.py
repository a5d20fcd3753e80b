"""Offline chat client.

Use this module as a reference when implementing new provider adapters.
Implement BaseChatClient and register the provider in ChatClientFactory.
"""

import itertools

from app.generation.client_base import BaseChatClient, ChatMessage


class ExampleChatClient(BaseChatClient):
    """Example client that answers every turn with a deterministic markdown reply.

    No network calls. Useful for local development and tests.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def create_chat_completion(
        self,
        *,
        model: str,
        messages: list[ChatMessage],
    ) -> str:
        _ = model
        call = next(self._counter)
        last = messages[-1]["content"] if messages else ""
        preview = " ".join(last.split())[:80]
        return f"```markdown\nReply {call} ({len(messages)} messages): {preview}\n```"
