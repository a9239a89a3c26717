"""
Event Store service for append-only audit logging.

Mutations are logged inside the same transaction that applies them, so an
event exists exactly when its change was committed.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from achievement_registry.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.RECORD_ARCHIVED,
            entity_type="record",
            entity_id=record.id,
            principal=caller,
            payload={"archived_count": state.archived_count},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: Any,
        principal: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        logical_time: Optional[int] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: "record" or "permission"
            entity_id: Record id or principal; stored as text
            principal: The caller that triggered the event
            payload: Additional event data
            logical_time: Host clock value at the time of the event

        Returns:
            The created EventLog row
        """
        event = EventLog(
            event_type=event_type.value,
            entity_type=entity_type,
            entity_id=str(entity_id),
            principal=principal,
            payload=dict(payload or {}),
            logical_time=logical_time,
        )

        self.session.add(event)
        # Caller commits with the rest of the transaction
        return event

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: Any,
        limit: int = 100,
        offset: int = 0,
    ) -> List[EventLog]:
        """
        Get the event history for a specific entity, oldest first.
        """
        query = select(EventLog).where(
            and_(
                EventLog.entity_type == entity_type,
                EventLog.entity_id == str(entity_id),
            )
        )

        query = query.order_by(EventLog.id).offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())
