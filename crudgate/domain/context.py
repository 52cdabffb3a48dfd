"""Per-request context threaded from the route through controller and repository.

Carries the correlation token and a logger that stamps it on every record,
so nothing downstream has to build its own per-call logger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID, uuid4


class CorrelationAdapter(logging.LoggerAdapter):
    """Prefixes messages with the correlation id and exposes it as a record attribute."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("correlation_id", self.extra["correlation_id"])
        kwargs["extra"] = extra
        return f"{self.extra['correlation_id']}: {msg}", kwargs


@dataclass(frozen=True)
class RequestContext:
    correlation_id: UUID = field(default_factory=uuid4)
    actor_id: int | None = None
    logger_name: str = "crudgate"

    @classmethod
    def from_header(
        cls, correlation_header: str | None, actor_header: str | None = None
    ) -> RequestContext:
        """Build a context from raw header values; malformed values are replaced."""
        try:
            correlation_id = UUID(correlation_header) if correlation_header else uuid4()
        except ValueError:
            correlation_id = uuid4()
        try:
            actor_id = int(actor_header) if actor_header else None
        except ValueError:
            actor_id = None
        return cls(correlation_id=correlation_id, actor_id=actor_id)

    def get_logger(self, name: str | None = None) -> CorrelationAdapter:
        return CorrelationAdapter(
            logging.getLogger(name or self.logger_name),
            {"correlation_id": str(self.correlation_id)},
        )
