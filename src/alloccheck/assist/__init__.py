from alloccheck.assist.strategy import AssistStrategy, KeywordAssistStrategy

__all__ = ["AssistStrategy", "KeywordAssistStrategy"]
