from nim_proxy.models.chat import ChatCompletionRequest, ChatMessage

__all__ = ["ChatCompletionRequest", "ChatMessage"]
