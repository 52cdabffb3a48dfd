"""API-level action results.

Controllers return ActionResult values instead of framework responses so
they can be exercised without an HTTP stack; routes render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response


@dataclass(frozen=True)
class ActionResult:
    status_code: int
    content: Any = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def to_response(self) -> Response:
        if self.content is None and self.is_success:
            return Response(status_code=self.status_code)
        return JSONResponse(status_code=self.status_code, content=jsonable_encoder(self.content))


def ok(content: Any = None) -> ActionResult:
    return ActionResult(status.HTTP_200_OK, content)


def bad_request(message: str) -> ActionResult:
    return ActionResult(status.HTTP_400_BAD_REQUEST, {"detail": message})


def forbidden(message: str) -> ActionResult:
    return ActionResult(status.HTTP_403_FORBIDDEN, {"detail": message})


def not_found(message: str) -> ActionResult:
    return ActionResult(status.HTTP_404_NOT_FOUND, {"detail": message})
