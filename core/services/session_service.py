"""
Session Scheduler - books, lists and transitions tutoring sessions.

Conflict detection:
    A new `scheduled` session may not overlap any other `scheduled` session of
    either participant on the same date. Windows are half-open [start, end),
    so back-to-back bookings are allowed.

    The scan and the insert run in one transaction while holding per
    participant+date advisory locks, so two concurrent bookings for the same
    person cannot both pass the scan.
"""
import logging
from datetime import date, datetime, time
from typing import Optional
from uuid import uuid4

from sqlalchemy import and_, case, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import commit_or_rollback
from core.exceptions import ConflictError, ValidationError
from core.scheduling import (
    acquire_schedule_locks,
    compute_duration_minutes,
    find_overlapping,
    month_bounds,
)
from core.services.access_guard import AccessGuard
from models.connection import ConnectionStatus
from models.session import Session, SessionStatus

logger = logging.getLogger(__name__)

MAX_UPCOMING_LIMIT = 100


def _parse_status(value: str) -> SessionStatus:
    try:
        return SessionStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(SessionStatus.values())}")


class SessionService:
    """
    Service for tutoring session scheduling.

    This service:
    1. Books sessions on accepted connections with conflict detection
    2. Lists a user's sessions (filtered, upcoming) and aggregates stats
    3. Updates session status/notes and deletes still-scheduled sessions
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.guard = AccessGuard(db)

    # =========================================================================
    # Conflict Detection
    # =========================================================================

    async def find_conflicts(
        self,
        participant_ids: tuple[str, str],
        scheduled_date: date,
        start_time: time,
        end_time: time,
        exclude_session_id: Optional[str] = None,
    ) -> list[Session]:
        """
        Find scheduled sessions of either participant overlapping a window.

        Args:
            participant_ids: (tutor_id, student_id) of the booking
            scheduled_date: Day of the booking
            start_time: Window start (inclusive)
            end_time: Window end (exclusive)
            exclude_session_id: Session to ignore (when re-scheduling itself)

        Returns:
            Conflicting sessions, empty if the window is free
        """
        tutor_id, student_id = participant_ids
        query = select(Session).where(
            and_(
                Session.scheduled_date == scheduled_date,
                Session.status == SessionStatus.SCHEDULED,
                or_(
                    Session.tutor_id.in_([tutor_id, student_id]),
                    Session.student_id.in_([tutor_id, student_id]),
                ),
            )
        )
        if exclude_session_id is not None:
            query = query.where(Session.id != exclude_session_id)

        result = await self.db.execute(query)
        same_day = list(result.scalars().all())
        return find_overlapping(same_day, start_time, end_time)

    async def _check_window_free(
        self,
        tutor_id: str,
        student_id: str,
        scheduled_date: date,
        start_time: time,
        end_time: time,
        exclude_session_id: Optional[str] = None,
    ) -> None:
        """Lock both participants' day and raise ConflictError if the window is taken.

        On conflict the transaction is rolled back, which also releases the locks.
        """
        await acquire_schedule_locks(self.db, (tutor_id, student_id), scheduled_date)
        conflicts = await self.find_conflicts(
            (tutor_id, student_id), scheduled_date, start_time, end_time, exclude_session_id
        )
        if conflicts:
            conflict_ids = [s.id for s in conflicts]
            await self.db.rollback()
            logger.warning(
                "Time conflict for tutor %s / student %s on %s %s-%s with sessions %s",
                tutor_id, student_id, scheduled_date, start_time, end_time, conflict_ids,
            )
            raise ConflictError("Time conflict: Another session is scheduled at this time")

    # =========================================================================
    # Session Management
    # =========================================================================

    async def create_session(
        self,
        connection_id: str,
        caller_id: str,
        title: str,
        scheduled_date: date,
        start_time: time,
        end_time: time,
        description: Optional[str] = None,
        subject: Optional[str] = None,
        meeting_link: Optional[str] = None,
    ) -> Session:
        """
        Book a session on an accepted connection.

        Args:
            connection_id: Accepted connection to book on
            caller_id: Acting user (either participant)
            title: Session title
            scheduled_date: Day of the session
            start_time: Start (HH:MM)
            end_time: End (HH:MM), same day, after start
            description: Optional free text
            subject: Optional subject label
            meeting_link: Optional video link, stored as given

        Returns:
            Created Session with tutor and student loaded

        Raises:
            NotFoundError: If the connection does not exist
            ForbiddenError: If caller is not a participant or connection is not accepted
            ValidationError: If title is missing or the window is not positive
            ConflictError: If either participant already has an overlapping session
        """
        connection = await self.guard.assert_participant(
            connection_id, caller_id, ConnectionStatus.ACCEPTED
        )

        if not title or not title.strip():
            raise ValidationError("Missing required fields")

        duration_minutes = compute_duration_minutes(start_time, end_time)
        if duration_minutes <= 0:
            raise ValidationError("End time must be after start time")

        await self._check_window_free(
            connection.tutor_id, connection.student_id, scheduled_date, start_time, end_time
        )

        session = Session(
            id=str(uuid4()),
            connection_id=connection.id,
            tutor_id=connection.tutor_id,
            student_id=connection.student_id,
            title=title.strip(),
            description=description or "",
            subject=subject or "",
            scheduled_date=scheduled_date,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            status=SessionStatus.SCHEDULED,
            meeting_link=meeting_link or "",
        )
        self.db.add(session)
        await commit_or_rollback(self.db, "create session")
        await self.db.refresh(session, attribute_names=["tutor", "student"])

        logger.info(
            "Created session %s on connection %s for %s %s-%s (%d min)",
            session.id, connection_id, scheduled_date, start_time, end_time, duration_minutes,
        )
        return session

    async def list_sessions(
        self,
        identity_id: str,
        status: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[Session]:
        """
        List the user's sessions, newest date and start time first.

        Args:
            identity_id: Tutor or student
            status: Optional status filter
            month: Optional month (1-12) of scheduled_date
            year: Optional year of scheduled_date

        Raises:
            ValidationError: If status or month is invalid
        """
        conditions = [or_(Session.tutor_id == identity_id, Session.student_id == identity_id)]

        if status is not None:
            conditions.append(Session.status == _parse_status(status))

        if month is not None and not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")

        if month is not None and year is not None:
            start, end = month_bounds(year, month)
            conditions.append(Session.scheduled_date >= start)
            conditions.append(Session.scheduled_date < end)
        elif month is not None:
            conditions.append(extract("month", Session.scheduled_date) == month)
        elif year is not None:
            conditions.append(extract("year", Session.scheduled_date) == year)

        result = await self.db.execute(
            select(Session)
            .where(and_(*conditions))
            .order_by(Session.scheduled_date.desc(), Session.start_time.desc())
        )
        return list(result.scalars().all())

    async def list_upcoming(
        self,
        identity_id: str,
        limit: int = 5,
        now: Optional[datetime] = None,
    ) -> list[Session]:
        """
        List scheduled sessions starting after `now`, soonest first.

        Args:
            identity_id: Tutor or student
            limit: Maximum number of sessions (1-100)
            now: Reference time, defaults to the current local time

        Raises:
            ValidationError: If limit is out of range
        """
        if not 1 <= limit <= MAX_UPCOMING_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_UPCOMING_LIMIT}")

        now = now or datetime.now()
        today = now.date()
        current_time = now.time().replace(microsecond=0)

        result = await self.db.execute(
            select(Session)
            .where(
                and_(
                    or_(Session.tutor_id == identity_id, Session.student_id == identity_id),
                    Session.status == SessionStatus.SCHEDULED,
                    or_(
                        Session.scheduled_date > today,
                        and_(Session.scheduled_date == today, Session.start_time > current_time),
                    ),
                )
            )
            .order_by(Session.scheduled_date.asc(), Session.start_time.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def update_status(
        self,
        session_id: str,
        caller_id: str,
        new_status: str,
        notes: Optional[str] = None,
    ) -> Session:
        """
        Set a session's status label and optionally its notes.

        Any status may follow any other. Moving a session back to `scheduled`
        re-checks its window, since another booking may have taken it.

        Args:
            session_id: Session to update
            caller_id: Tutor or student of the session
            new_status: scheduled, completed, cancelled or no_show
            notes: Replaces existing notes when given; otherwise notes are kept

        Raises:
            ValidationError: If the status is unknown
            NotFoundError: If the session does not exist
            ForbiddenError: If caller is not a participant
            ConflictError: If re-scheduling into an occupied window
        """
        status = _parse_status(new_status)
        session = await self.guard.assert_session_participant(session_id, caller_id)

        if status == SessionStatus.SCHEDULED and not session.is_scheduled:
            await self._check_window_free(
                session.tutor_id,
                session.student_id,
                session.scheduled_date,
                session.start_time,
                session.end_time,
                exclude_session_id=session.id,
            )

        previous = SessionStatus(session.status)
        session.status = status
        if notes:
            session.notes = notes
        session.updated_at = datetime.utcnow()
        await commit_or_rollback(self.db, "update session status")

        logger.info("Session %s status %s -> %s by %s", session_id, previous.value, status.value, caller_id)
        return session

    async def delete_session(self, session_id: str, caller_id: str) -> None:
        """
        Delete a session that is still scheduled.

        Completed, cancelled and no-show sessions are kept as history.

        Raises:
            NotFoundError: If the session does not exist
            ForbiddenError: If caller is not a participant
            ValidationError: If the session is no longer scheduled
        """
        session = await self.guard.assert_session_participant(session_id, caller_id)

        if not session.is_scheduled:
            raise ValidationError("Only scheduled sessions can be deleted")

        await self.db.delete(session)
        await commit_or_rollback(self.db, "delete session")

        logger.info("Deleted session %s by %s", session_id, caller_id)

    async def get_stats(self, identity_id: str) -> dict:
        """Counts by status plus total minutes of completed sessions."""

        def count_status(status: SessionStatus):
            return func.coalesce(func.sum(case((Session.status == status, 1), else_=0)), 0)

        result = await self.db.execute(
            select(
                func.count(Session.id).label("total_sessions"),
                count_status(SessionStatus.SCHEDULED).label("scheduled_sessions"),
                count_status(SessionStatus.COMPLETED).label("completed_sessions"),
                count_status(SessionStatus.CANCELLED).label("cancelled_sessions"),
                count_status(SessionStatus.NO_SHOW).label("no_show_sessions"),
                func.coalesce(
                    func.sum(
                        case((Session.status == SessionStatus.COMPLETED, Session.duration_minutes), else_=0)
                    ),
                    0,
                ).label("total_minutes_taught"),
            ).where(or_(Session.tutor_id == identity_id, Session.student_id == identity_id))
        )
        row = result.one()
        return {key: int(value or 0) for key, value in row._mapping.items()}
