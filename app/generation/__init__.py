from app.generation.client_base import BaseChatClient
from app.generation.conversation import Conversation, ConversationDriver, strip_code_fences
from app.generation.factory import ChatClientFactory

__all__ = [
    "BaseChatClient",
    "ChatClientFactory",
    "Conversation",
    "ConversationDriver",
    "strip_code_fences",
]
