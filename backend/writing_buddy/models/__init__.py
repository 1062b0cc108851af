from writing_buddy.models.session import ChatMessage, WritingSession

__all__ = ["ChatMessage", "WritingSession"]
