"""Multi-turn conversation driver over a chat completion client."""

import re
from dataclasses import dataclass, field

from app.generation.client_base import BaseChatClient, ChatMessage
from app.generation.exceptions import UpstreamError
from app.logging.logger import Log

_CODE_FENCE = re.compile(r"```[\w-]*")


def strip_code_fences(text: str) -> str:
    """Remove code-fence markers with any language tag, and surrounding whitespace."""
    return _CODE_FENCE.sub("", text).strip()


@dataclass
class Conversation:
    """Running transcript of one chain of turns."""

    messages: list[ChatMessage] = field(default_factory=list)

    def add(self, role: str, content: str) -> None:
        self.messages.append({"role": role, "content": content})

    def __len__(self) -> int:
        return len(self.messages)


class ConversationDriver:
    """Runs prompt turns against a chat client and returns cleaned replies.

    Stateless apart from configuration: every call works on the conversation
    it is given, so separate conversations may run on separate threads.
    """

    def __init__(self, *, client: BaseChatClient, model: str, system_prompt: str) -> None:
        self._client = client
        self._model = model
        self._system_prompt = system_prompt

    def start(self) -> Conversation:
        conversation = Conversation()
        conversation.add("system", self._system_prompt)
        return conversation

    def run_turn(self, conversation: Conversation, user_message: str) -> str:
        """Append a user turn, call the API with the full transcript, return the reply.

        Raises:
            UpstreamError: if the API call fails or returns no usable content.
        """
        conversation.add("user", user_message)
        Log.debug(f"Sending conversation of {len(conversation)} messages to {self._model}")
        raw = self._client.create_chat_completion(
            model=self._model,
            messages=list(conversation.messages),
        )
        if not isinstance(raw, str):
            raise UpstreamError("Text generation returned a non-text reply")
        reply = strip_code_fences(raw)
        conversation.add("assistant", reply)
        return reply
