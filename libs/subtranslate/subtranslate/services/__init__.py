"""Service layer helpers."""

from subtranslate.services.llm_logger import FileLogWriter, LLMRequestLogger, LogWriter, RequestMeta

__all__ = ["FileLogWriter", "LLMRequestLogger", "LogWriter", "RequestMeta"]
