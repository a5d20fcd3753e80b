import httpx
import openai

from app.generation.client_base import BaseChatClient, ChatMessage
from app.generation.exceptions import UpstreamError


class OpenAIChatClient(BaseChatClient):
    """Chat client built on the OpenAI-compatible chat completions API.

    The SDK timeout bounds every call so a hung upstream cannot stall a queue forever.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        messages: list[ChatMessage],
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise UpstreamError(f"OpenAI API network error: {exc}") from exc
        except openai.APIError as exc:
            raise UpstreamError(f"OpenAI API error: {exc}") from exc

        if not getattr(response, "choices", None):
            raise UpstreamError("OpenAI API Error: Response is missing choices.")
        content = response.choices[0].message.content
        if content is None:
            raise UpstreamError("OpenAI API Error: Response is missing content.")
        return content
