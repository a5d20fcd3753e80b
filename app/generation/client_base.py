from abc import ABC, abstractmethod

ChatMessage = dict[str, str]


class BaseChatClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        messages: list[ChatMessage],
    ) -> str:
        """Return the assistant reply for the full message transcript.

        Raises:
            UpstreamError: on transport failure or a malformed response.
        """
