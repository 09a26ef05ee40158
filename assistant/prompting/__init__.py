from assistant.prompting.request_builder import (
    CONTEXT_WHITELIST,
    BuiltRequest,
    RequestBuilder,
    build_context,
    project,
)

__all__ = [
    "CONTEXT_WHITELIST",
    "BuiltRequest",
    "RequestBuilder",
    "build_context",
    "project",
]
