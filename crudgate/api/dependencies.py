"""FastAPI dependencies shared by every resource router."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crudgate.domain.context import RequestContext
from crudgate.infrastructure.database import get_session
from crudgate.infrastructure.persistence.unit_of_work import UnitOfWork

CORRELATION_HEADER = "X-Correlation-ID"
ACTOR_HEADER = "X-Actor-Id"


def get_request_context(
    request: Request,
    x_correlation_id: Optional[str] = Header(default=None),
    x_actor_id: Optional[str] = Header(default=None),
) -> RequestContext:
    context = RequestContext.from_header(x_correlation_id, x_actor_id)
    request.state.correlation_id = str(context.correlation_id)
    return context


def get_unit_of_work(
    session: AsyncSession = Depends(get_session),
    context: RequestContext = Depends(get_request_context),
) -> UnitOfWork:
    """One unit of work per request; it is discarded with the session unless committed."""
    return UnitOfWork(session, context)
