"""
Uniform response envelopes and error translation.

Endpoints wrap their work in a coroutine function and pass it to
``handle``.  ``execute`` runs it and returns either ``Success`` or
``Failure``; ``render`` turns that result into a JSON response:

* success: ``{success, data, message?, pagination?, meta: {timestamp}}``
* failure: ``{success: false, error, code, details?, meta: {timestamp}}``

Application errors keep their own status code and message.  Any other
exception is logged with its traceback and reported as a generic 500
so internal details never reach the client.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..core.errors import AppError, InternalError
from ..repositories.base import Page


logger = logging.getLogger(__name__)


@dataclass
class Success:
    value: Any
    message: Optional[str] = None
    status_code: int = 200


@dataclass
class Failure:
    error: AppError


Result = Union[Success, Failure]


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def meta() -> Dict[str, Any]:
    return {"timestamp": timestamp()}


def success_body(value: Any, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if isinstance(value, Page):
        body["data"] = jsonable_encoder(value.data)
        body["pagination"] = jsonable_encoder(value.pagination)
    else:
        body["data"] = jsonable_encoder(value)
    if message:
        body["message"] = message
    body["meta"] = meta()
    return body


def error_body(error: AppError) -> Dict[str, Any]:
    return {"success": False, **error.to_dict(), "meta": meta()}


def render(result: Result) -> JSONResponse:
    if isinstance(result, Failure):
        return JSONResponse(status_code=result.error.status_code, content=error_body(result.error))
    return JSONResponse(
        status_code=result.status_code, content=success_body(result.value, result.message)
    )


async def execute(
    action: Callable[[], Awaitable[Any]],
    *,
    message: Optional[str] = None,
    status_code: int = 200,
) -> Result:
    try:
        value = await action()
    except AppError as exc:
        logger.info("Request failed with %s: %s", exc.code, exc.message)
        return Failure(exc)
    except Exception:
        logger.exception("Unhandled error while processing request")
        return Failure(InternalError())
    return Success(value, message=message, status_code=status_code)


async def handle(
    action: Callable[[], Awaitable[Any]],
    *,
    message: Optional[str] = None,
    status_code: int = 200,
) -> JSONResponse:
    """Run ``action`` and render its outcome as an envelope."""
    return render(await execute(action, message=message, status_code=status_code))
