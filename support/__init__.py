from .chat import SupportChatService

__all__ = ["SupportChatService"]
