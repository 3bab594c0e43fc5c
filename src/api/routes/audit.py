"""Audit trail read route."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from src.api.dependencies.governance import get_audit_outbox
from src.api.models.audit import AuditEventResponse, AuditPageResponse
from src.api.problem_details import PROBLEM_TYPE_PREFIX
from src.application.ports.audit_sink import MAX_AUDIT_PAGE_SIZE, AuditQuery
from src.application.services.audit_outbox import AuditOutbox
from src.domain.models.audit_event import ActorKind, AuditEventType

router = APIRouter(prefix="/v1/audit", tags=["audit"])


def _invalid_filter(request: Request, name: str, value: str, allowed: list[str]) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "type": f"{PROBLEM_TYPE_PREFIX}:audit:invalid-filter",
            "title": "Invalid Filter",
            "status": 400,
            "detail": f"{name} must be one of {', '.join(allowed)}, got {value!r}",
            "instance": str(request.url),
            "field": name,
        },
    )


@router.get("", response_model=AuditPageResponse, summary="Read the audit trail")
async def list_audit_events(
    request: Request,
    event_type: str | None = Query(default=None),
    actor_kind: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=MAX_AUDIT_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    outbox: AuditOutbox = Depends(get_audit_outbox),
) -> AuditPageResponse:
    """Page through audit events, newest first."""
    try:
        parsed_type = AuditEventType(event_type) if event_type else None
    except ValueError:
        raise _invalid_filter(
            request, "event_type", event_type, [t.value for t in AuditEventType]
        ) from None
    try:
        parsed_kind = ActorKind(actor_kind) if actor_kind else None
    except ValueError:
        raise _invalid_filter(
            request, "actor_kind", actor_kind, [k.value for k in ActorKind]
        ) from None

    events, total = await outbox.query(
        AuditQuery(
            event_type=parsed_type,
            actor_kind=parsed_kind,
            limit=limit,
            offset=offset,
        )
    )
    return AuditPageResponse(
        events=[
            AuditEventResponse(
                id=e.id,
                event_type=e.event_type.value,
                actor_kind=e.actor_kind.value,
                actor_id=e.actor_id,
                subject_type=e.subject_type,
                subject_id=e.subject_id,
                details=e.details,
                created_at=e.created_at,
            )
            for e in events
        ],
        total=total,
        limit=limit,
        offset=offset,
    )
