# a1_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from django.db import transaction

from a1_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    establishment_id: Optional[UUID]
    actor_user_id: Optional[int]
    metadata: Dict[str, Any] = field(default_factory=dict)


class AuditService:
    """
    Single writer for AuditEvent. Write services call it inside their own
    transaction, so an event exists only if the change it describes does.
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        establishment_id: UUID | None,
        actor_user_id: int | None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        record = AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            establishment_id=establishment_id,
            actor_user_id=actor_user_id,
            metadata=metadata or {},
        )
        AuditEvent.objects.create(**asdict(record))

        logger.info(
            "Audit %s %s:%s establishment=%s actor=%s",
            event_code,
            entity_type,
            entity_id,
            establishment_id,
            actor_user_id,
        )
        return record
