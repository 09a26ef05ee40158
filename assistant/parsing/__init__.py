from assistant.parsing.sanitizer import sanitize
from assistant.parsing.validator import ResponseValidator

__all__ = ["sanitize", "ResponseValidator"]
