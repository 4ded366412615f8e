"""
producescheck/compatibility.py
══════════════════════════════

Does a return site satisfy a response declaration?

Two independent questions, answered separately and combined by the
redundancy detector:

  status   — does the site's result type imply the declared status code
  payload  — is the site's payload type the declared type, a subclass of
             it, or an implementation of it

Status matching has two paths:

  integer path  The result type must be status-bearing; its name is
                resolved through the status-code table and compared with
                the declared code.  Authoritative.
  name path     For plain integer constants only: the standard name of
                the declared code (``notfound``) must appear in the
                lower-cased result-type name.  Enum-typed constants skip
                this path.
"""

from __future__ import annotations

from typing import Optional, Sequence

from producescheck.status_codes import (
    STATUS_MARKERS,
    http_status_token,
    is_status_bearing,
    resolve_status_code,
)
from producescheck.symbols import ConstantKind, TypeRef, iter_base_chain


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — PAYLOAD COMPATIBILITY
# ═════════════════════════════════════════════════════════════════════════

def payload_matches(
    site_payload: Optional[TypeRef],
    declared_payload: TypeRef,
) -> bool:
    """
    True if *site_payload* is *declared_payload*, derives from it, or
    directly implements it at some step of its base chain.

    A site without a discoverable payload never satisfies a declared one.
    """
    if site_payload is None:
        return False
    if site_payload == declared_payload:
        return True
    for current in iter_base_chain(site_payload):
        if current == declared_payload:
            return True
        for interface in current.interfaces:
            if interface == declared_payload:
                return True
    return False


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — STATUS CODE MATCHING
# ═════════════════════════════════════════════════════════════════════════

def status_code_matches(
    produced_type: Optional[TypeRef],
    status_code: int,
    markers: Sequence[str] = STATUS_MARKERS,
) -> bool:
    """Integer path: the code implied by the result type equals *status_code*."""
    if produced_type is None or not is_status_bearing(produced_type, markers):
        return False
    implied = resolve_status_code(produced_type.name)
    return implied is not None and implied == status_code


def status_name_matches(
    produced_type: Optional[TypeRef],
    status_code: int,
    status_kind: ConstantKind,
    markers: Sequence[str] = STATUS_MARKERS,
) -> bool:
    """Name path: the standard status name occurs in the result-type name.

    Always False for enum-typed constants.
    """
    if produced_type is None or status_kind is ConstantKind.ENUM:
        return False
    if not is_status_bearing(produced_type, markers):
        return False
    token = http_status_token(status_code)
    if token is None:
        return False
    return token in produced_type.name.lower()


def status_matches(
    produced_type: Optional[TypeRef],
    status_code: int,
    status_kind: ConstantKind = ConstantKind.PRIMITIVE,
    markers: Sequence[str] = STATUS_MARKERS,
) -> bool:
    """Combined decision used by the redundancy detector."""
    if not status_code_matches(produced_type, status_code, markers):
        return False
    if status_kind is ConstantKind.ENUM:
        return True
    return status_name_matches(produced_type, status_code, status_kind, markers)


__all__ = [
    "payload_matches",
    "status_code_matches",
    "status_name_matches",
    "status_matches",
]
