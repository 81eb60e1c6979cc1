"""
Context-bound logging for multi-step runs.

A chunked comparison logs many records that belong to one diff id; binding
that id once keeps every record of the run filterable in JSON output.
"""

import logging
from collections.abc import MutableMapping
from typing import Any


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that merges bound context into every record's ``extra``.

    Keyword arguments that are not logging options are treated as per-call
    context:

        run_logger = ContextLogger("tablediff.cli", diff_id="nightly")
        run_logger.info("Chunk committed", chunk_index=3, added=12)
        # record carries diff_id, chunk_index and added

    ``bind()`` returns a child adapter with additional context.
    """

    _LOG_OPTIONS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def __init__(self, name: str | logging.Logger, **context: Any):
        logger = name if isinstance(name, logging.Logger) else logging.getLogger(name)
        super().__init__(logger, dict(context))

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        options = {key: kwargs[key] for key in self._LOG_OPTIONS & kwargs.keys()}
        call_context = {key: value for key, value in kwargs.items() if key not in self._LOG_OPTIONS}
        options["extra"] = {**self.extra, **call_context, **options.get("extra", {})}
        return msg, options

    def bind(self, **context: Any) -> "ContextLogger":
        return ContextLogger(self.logger, **{**self.extra, **context})

    def get_context(self) -> dict[str, Any]:
        return dict(self.extra)
