"""
Record registry service.

Owns record storage, identifier allocation, validation and the
archive/restore lifecycle. Every mutating operation consults the permission
gate first and runs as one serialized transaction: it either commits in full
or raises and leaves no trace.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from achievement_registry.config import Settings, get_settings
from achievement_registry.database import (
    build_engine,
    build_session_maker,
    build_write_session_maker,
    close_db,
    init_db,
    is_memory_url,
)
from achievement_registry.kernel.clock import LogicalClock, MonotonicGuard, SequenceClock
from achievement_registry.kernel.errors import (
    InvalidRecordId,
    RecordNotFound,
    RegistryError,
    RegistryNotInitialized,
)
from achievement_registry.kernel.events.event_store import EventStore
from achievement_registry.kernel.models.event_log import EventLog, EventType
from achievement_registry.kernel.models.permission import PermissionEntry
from achievement_registry.kernel.models.record import MAX_RECORD_ID, AcademicRecord
from achievement_registry.kernel.models.registry_state import REGISTRY_STATE_ID, RegistryState
from achievement_registry.kernel.permissions.permission_service import PermissionGate, RegistryPolicy
from achievement_registry.kernel.registry.validation import (
    is_addressable_id,
    validate_new_record,
    validate_record_id,
)
from achievement_registry.logging_config import configure_logging_from_settings, get_logger, operation_scope
from achievement_registry.orchestration.state_machine import RecordStateMachine
from achievement_registry.schemas.record import EventView, RecordView, RegistryStatistics

logger = get_logger(__name__)


class AchievementRegistry:
    """
    Authenticated registry of academic achievement records.

    Usage:
        registry = AchievementRegistry(engine, bootstrap_admin="admin")
        await registry.initialize()
        await registry.set_permission_level("admin", "teacher", 2)
        record_id = await registry.create_record("teacher", "alice", "math", 92)
        record = await registry.get_record(record_id)

    The caller principal is always an explicit argument; the registry only
    authorizes identities the host has already authenticated.

    Several registries may share one database. Writes hold the database write
    lock (BEGIN IMMEDIATE on SQLite, row locks elsewhere) and counters change
    through single UPDATE statements.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        bootstrap_admin: str,
        null_principal: Optional[str] = None,
        policy: Optional[RegistryPolicy] = None,
        clock: Optional[LogicalClock] = None,
    ):
        if not bootstrap_admin or not bootstrap_admin.strip():
            raise ValueError("bootstrap_admin must be a non-empty principal")
        self.engine = engine
        self.bootstrap_admin = bootstrap_admin
        self.null_principal = null_principal
        self.policy = policy or RegistryPolicy()
        self._session_maker = build_session_maker(engine)
        self._write_session_maker = build_write_session_maker(engine)
        self._sequence_clock: Optional[SequenceClock] = None
        if clock is None:
            self._sequence_clock = SequenceClock()
            self._clock: LogicalClock = self._sequence_clock
        else:
            self._clock = MonotonicGuard(clock)
        self._write_lock = asyncio.Lock()
        # A single shared in-memory connection cannot serve reads mid-write
        self._serialize_reads = is_memory_url(str(engine.url))
        self._initialized = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        clock: Optional[LogicalClock] = None,
        *,
        configure_logs: bool = True,
    ) -> "AchievementRegistry":
        """Build a registry and its engine from configuration."""
        settings = settings or get_settings()
        if configure_logs:
            configure_logging_from_settings(settings)
        engine = build_engine(settings.database_url, echo=settings.debug)
        return cls(
            engine,
            bootstrap_admin=settings.bootstrap_admin,
            null_principal=settings.null_principal,
            policy=RegistryPolicy.from_settings(settings),
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Create tables and the counter row if missing.

        Safe to call on an existing database: counters are left untouched and
        the built-in clock resumes after the newest stored logical time.
        """
        await init_db(self.engine)
        async with self._write_lock:
            async with self._write_session_maker() as session:
                async with session.begin():
                    state = await session.get(RegistryState, REGISTRY_STATE_ID)
                    if state is None:
                        session.add(RegistryState(
                            id=REGISTRY_STATE_ID,
                            next_record_id=0,
                            archived_count=0,
                        ))
                    await self._sync_sequence_clock(session)

        self._initialized = True
        logger.info(
            "Registry initialized",
            extra={"bootstrap_admin": self.bootstrap_admin, "policy": repr(self.policy)},
        )

    async def close(self) -> None:
        await close_db(self.engine)
        self._initialized = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RegistryNotInitialized("Call initialize() before using the registry")

    def _gate(self, session: AsyncSession) -> PermissionGate:
        return PermissionGate(
            session,
            self.bootstrap_admin,
            self.null_principal,
            clock=self._clock,
        )

    async def _sync_sequence_clock(self, session: AsyncSession) -> None:
        """Move the built-in clock past every logical time already stored."""
        if self._sequence_clock is None:
            return
        row = (await session.execute(select(
            select(func.max(AcademicRecord.created_at)).scalar_subquery(),
            select(func.max(PermissionEntry.granted_at)).scalar_subquery(),
            select(func.max(EventLog.logical_time)).scalar_subquery(),
        ))).one()
        latest = max((value for value in row if value is not None), default=None)
        if latest is not None and latest > self._sequence_clock.current:
            self._sequence_clock.advance_to(latest)

    @asynccontextmanager
    async def _write(self, operation: str, caller: Optional[str]) -> AsyncIterator[AsyncSession]:
        """Serialized read-modify-write transaction holding the write lock."""
        self._require_initialized()
        with operation_scope(operation, caller):
            async with self._write_lock:
                try:
                    async with self._write_session_maker() as session:
                        async with session.begin():
                            # Other registries on the same database share the logical time line
                            await self._sync_sequence_clock(session)
                            yield session
                except RegistryError as exc:
                    logger.warning(
                        "Operation rejected",
                        extra={"code": exc.code, "reason": exc.message},
                    )
                    raise

    @asynccontextmanager
    async def _read(self, operation: str, caller: Optional[str] = None) -> AsyncIterator[AsyncSession]:
        """Read-only session; committed rows only."""
        self._require_initialized()
        with operation_scope(operation, caller):
            try:
                if self._serialize_reads:
                    async with self._write_lock:
                        async with self._session_maker() as session:
                            yield session
                else:
                    async with self._session_maker() as session:
                        yield session
            except RegistryError as exc:
                logger.warning(
                    "Read rejected",
                    extra={"code": exc.code, "reason": exc.message},
                )
                raise

    @staticmethod
    async def _load_state(session: AsyncSession) -> RegistryState:
        state = await session.get(RegistryState, REGISTRY_STATE_ID)
        if state is None:
            raise RegistryNotInitialized("Registry counters are missing")
        return state

    @staticmethod
    async def _load_record(session: AsyncSession, record_id: int) -> AcademicRecord:
        # Out-of-range ids can never have been allocated
        if not is_addressable_id(record_id):
            raise RecordNotFound(record_id)
        record = await session.get(AcademicRecord, record_id, with_for_update=True)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    async def _allocate_record_id(self, session: AsyncSession) -> int:
        record_id = await session.scalar(
            update(RegistryState)
            .where(
                RegistryState.id == REGISTRY_STATE_ID,
                RegistryState.next_record_id < MAX_RECORD_ID,
            )
            .values(next_record_id=RegistryState.next_record_id + 1)
            .returning(RegistryState.next_record_id)
        )
        if record_id is None:
            await self._load_state(session)
            raise InvalidRecordId("Record id space exhausted", record_id=MAX_RECORD_ID + 1)
        return record_id

    @staticmethod
    async def _shift_archived_count(session: AsyncSession, delta: int) -> int:
        archived_count = await session.scalar(
            update(RegistryState)
            .where(RegistryState.id == REGISTRY_STATE_ID)
            .values(archived_count=RegistryState.archived_count + delta)
            .returning(RegistryState.archived_count)
        )
        if archived_count is None:
            raise RegistryNotInitialized("Registry counters are missing")
        return archived_count

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def create_record(
        self,
        caller: str,
        student_identifier: str,
        category: str,
        performance_score: int,
    ) -> int:
        """
        Store a new active record and return its id.

        Ids start at 1 and grow by one per successful creation; failed calls
        do not consume an id.
        """
        async with self._write("create_record", caller) as session:
            await self._gate(session).require_level(
                caller, self.policy.create_min_level, "create_record"
            )
            validate_new_record(student_identifier, category, performance_score)

            record_id = await self._allocate_record_id(session)
            created_at = self._clock.now()
            session.add(AcademicRecord(
                id=record_id,
                student_identifier=student_identifier,
                performance_score=performance_score,
                category=category,
                created_at=created_at,
                archived=False,
            ))

            await EventStore(session).log(
                event_type=EventType.RECORD_CREATED,
                entity_type="record",
                entity_id=record_id,
                principal=caller,
                payload={
                    "student_identifier": student_identifier,
                    "category": category,
                    "performance_score": performance_score,
                },
                logical_time=created_at,
            )
            logger.info("Record created", extra={"record_id": record_id, "category": category})
        return record_id

    async def get_record(self, record_id: int, caller: Optional[str] = None) -> RecordView:
        """Return a read-only copy of a record, archived or not."""
        async with self._read("get_record", caller) as session:
            await self._gate(session).require_level(
                caller, self.policy.read_min_level, "get_record"
            )
            validate_record_id(record_id)
            record = await session.get(AcademicRecord, record_id)
            if record is None:
                raise RecordNotFound(record_id)
            return RecordView.model_validate(record)

    async def list_records(
        self,
        caller: Optional[str] = None,
        *,
        include_archived: bool = True,
        category: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[RecordView]:
        """List records in id order."""
        async with self._read("list_records", caller) as session:
            await self._gate(session).require_level(
                caller, self.policy.read_min_level, "list_records"
            )
            query = select(AcademicRecord)
            if not include_archived:
                query = query.where(AcademicRecord.archived.is_(False))
            if category is not None:
                query = query.where(AcademicRecord.category == category)
            query = query.order_by(AcademicRecord.id).offset(offset).limit(limit)

            result = await session.execute(query)
            return [RecordView.model_validate(r) for r in result.scalars().all()]

    async def get_record_history(
        self,
        record_id: int,
        caller: Optional[str] = None,
    ) -> List[EventView]:
        """Audit trail of one record, oldest first."""
        async with self._read("get_record_history", caller) as session:
            await self._gate(session).require_level(
                caller, self.policy.read_min_level, "get_record_history"
            )
            validate_record_id(record_id)
            if await session.get(AcademicRecord, record_id) is None:
                raise RecordNotFound(record_id)

            events = await EventStore(session).get_entity_history("record", record_id)
            return [EventView.model_validate(e) for e in events]

    async def _transition(
        self,
        caller: str,
        record_id: int,
        apply: Callable[[AcademicRecord], EventType],
        operation: str,
    ) -> None:
        async with self._write(operation, caller) as session:
            await self._gate(session).require_level(
                caller, self.policy.archive_min_level, operation
            )
            record = await self._load_record(session, record_id)
            event_type = apply(record)
            archived_count = await self._shift_archived_count(
                session, 1 if record.archived else -1
            )

            await EventStore(session).log(
                event_type=event_type,
                entity_type="record",
                entity_id=record_id,
                principal=caller,
                payload={"archived_count": archived_count},
                logical_time=self._clock.now(),
            )
            logger.info(
                "Record state changed",
                extra={"record_id": record_id, "to_state": record.state.value},
            )

    async def archive_record(self, caller: str, record_id: int) -> None:
        """Mark an active record archived."""
        await self._transition(caller, record_id, RecordStateMachine.archive, "archive_record")

    async def restore_record(self, caller: str, record_id: int) -> None:
        """Return an archived record to active."""
        await self._transition(caller, record_id, RecordStateMachine.restore, "restore_record")

    async def get_statistics(self) -> RegistryStatistics:
        async with self._read("get_statistics") as session:
            state = await self._load_state(session)
            return RegistryStatistics(
                total_created=state.next_record_id,
                archived_count=state.archived_count,
                active_count=state.next_record_id - state.archived_count,
            )

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    async def get_permission_level(self, principal: str) -> int:
        async with self._read("get_permission_level") as session:
            return await self._gate(session).get_permission_level(principal)

    async def set_permission_level(self, caller: str, target: str, level: int) -> None:
        """Assign level 1, 2 or 3 to ``target``; bootstrap administrator only."""
        async with self._write("set_permission_level", caller) as session:
            await self._gate(session).set_permission_level(caller, target, level)

    async def revoke_permission(self, caller: str, target: str) -> bool:
        """Drop the stored level of ``target``; bootstrap administrator only."""
        async with self._write("revoke_permission", caller) as session:
            return await self._gate(session).revoke_permission(caller, target)
