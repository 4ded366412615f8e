"""
producescheck/status_codes.py
═════════════════════════════

Status-code knowledge about MVC result types.

  • ``resolve_status_code(name)``  — status code implied by a result-type
                                     name (exact table, then keyword
                                     substring fallback)
  • ``is_status_bearing(type)``    — does the type derive from one of the
                                     status-carrying result markers
  • ``http_status_token(code)``    — normalized standard name of a code
                                     (``404`` → ``"notfound"``)

All tables here are read-only module data and safe to share between
threads.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from producescheck.symbols import TypeRef, iter_base_chain

_log = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — STATUS CODE TABLE
# ═════════════════════════════════════════════════════════════════════════

KNOWN_RESULT_TYPES: Mapping[str, int] = MappingProxyType({
    "OkResult": 200,
    "OkObjectResult": 200,
    "CreatedResult": 201,
    "CreatedAtActionResult": 201,
    "CreatedAtRouteResult": 201,
    "AcceptedResult": 202,
    "NoContentResult": 204,
    "BadRequestResult": 400,
    "BadRequestObjectResult": 400,
    "UnauthorizedResult": 401,
    "ForbidResult": 403,
    "NotFoundResult": 404,
    "NotFoundObjectResult": 404,
    "ConflictResult": 409,
})

# Tested in this order; the first keyword contained in the name wins.
STATUS_KEYWORDS: Tuple[Tuple[str, int], ...] = (
    ("Ok", 200),
    ("Created", 201),
    ("Accepted", 202),
    ("NoContent", 204),
    ("BadRequest", 400),
    ("Unauthorized", 401),
    ("Forbidden", 403),
    ("NotFound", 404),
    ("Conflict", 409),
)


def resolve_status_code(type_name: str) -> Optional[int]:
    """
    Status code implied by a result-type name, or ``None``.

    Exact names from :data:`KNOWN_RESULT_TYPES` win.  Otherwise the name
    is searched (case-sensitively) for each keyword of
    :data:`STATUS_KEYWORDS` in order, so ``CustomNotFoundResult`` resolves
    to 404 while ``TeapotResult`` stays unresolved.
    """
    code = KNOWN_RESULT_TYPES.get(type_name)
    if code is not None:
        return code
    for keyword, keyword_code in STATUS_KEYWORDS:
        if keyword in type_name:
            return keyword_code
    return None


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — RESPONSE TYPE CLASSIFIER
# ═════════════════════════════════════════════════════════════════════════

STATUS_MARKERS: Tuple[str, ...] = ("StatusCodeResult", "ObjectResult")


def is_status_bearing(
    type_ref: Optional[TypeRef],
    markers: Sequence[str] = STATUS_MARKERS,
) -> bool:
    """True if *type_ref* or any of its base types is named in *markers*."""
    for current in iter_base_chain(type_ref):
        if current.name in markers:
            return True
    return False


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — STANDARD STATUS NAMES
# ═════════════════════════════════════════════════════════════════════════

def http_status_token(code: int) -> Optional[str]:
    """
    Lower-case standard name of *code* with separators removed.

    ``200`` → ``"ok"``, ``404`` → ``"notfound"``, ``400`` → ``"badrequest"``.
    Codes without a standard name give ``None``.
    """
    try:
        status = HTTPStatus(code)
    except ValueError:
        _log.debug("No standard HTTP status name for %s", code)
        return None
    return status.name.replace("_", "").lower()


__all__ = [
    "KNOWN_RESULT_TYPES",
    "STATUS_KEYWORDS",
    "STATUS_MARKERS",
    "resolve_status_code",
    "is_status_bearing",
    "http_status_token",
]
