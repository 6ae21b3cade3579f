"""Field-enriched loggers.

``with_fields`` returns a new adapter each time; the parent's fields are copied,
never mutated, so derived loggers can be shared between concurrent tasks.
"""


import logging
from collections.abc import MutableMapping
from typing import Any


class FieldLogger(logging.LoggerAdapter):
    """LoggerAdapter that appends ``key=value`` pairs to every message."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        fields = self.extra or {}
        if fields:
            suffix = " ".join(f"{k}={v}" for k, v in fields.items())
            msg = f"{msg} | {suffix}"
        kwargs.setdefault("extra", {}).update(fields)
        return msg, kwargs

    def with_fields(self, **fields: Any) -> "FieldLogger":
        return FieldLogger(self.logger, {**(self.extra or {}), **fields})


def with_fields(logger: logging.Logger | FieldLogger, **fields: Any) -> FieldLogger:
    """Derive a logger carrying *fields* on top of whatever *logger* already carries."""
    if isinstance(logger, FieldLogger):
        return logger.with_fields(**fields)
    return FieldLogger(logger, dict(fields))
