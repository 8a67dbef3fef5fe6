from typing import Callable, List, Optional
import logging

from socialdata.config import settings
from socialdata.db.collections import EVENTS, EVENT_PARTICIPANTS
from socialdata.db.query import Query, ASCENDING
from socialdata.db.store import DocumentStore, SERVER_TIMESTAMP
from socialdata.exceptions import ConflictError, NotFoundError
from socialdata.models.event import Event, EventParticipant, ParticipantStatus
from socialdata.realtime.manager import ListenerRegistration
from socialdata.schemas.event_schema import EventCreate, EventUpdate
from socialdata.services.counters import adjust_counter
from socialdata.services.validation import check_event, ensure_valid

logger = logging.getLogger(__name__)

class EventService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_event(self, event_data: EventCreate) -> str:
        """Create an event and enroll its creator as going"""
        try:
            ensure_valid(check_event(event_data))

            document = event_data.to_document()
            document.update({
                "currentParticipants": 1,
                "createdAt": SERVER_TIMESTAMP,
                "updatedAt": SERVER_TIMESTAMP,
            })

            event_id = await self.store.add(EVENTS, document)

            # Add creator as participant
            await self.store.add(EVENT_PARTICIPANTS, {
                "eventId": event_id,
                "userId": event_data.created_by,
                "userName": event_data.creator_name,
                "status": "going",
                "joinedAt": SERVER_TIMESTAMP,
            })

            logger.info(f"Created event {event_id} by user {event_data.created_by}")

            return event_id

        except Exception as e:
            logger.error(f"Error creating event: {e}")
            raise

    async def get_events(self, limit: Optional[int] = None) -> List[Event]:
        """Get events by start date, soonest first"""
        try:
            query = Query(EVENTS).order_by("startDate", ASCENDING).limit(
                limit if limit is not None else settings.DEFAULT_PAGE_SIZE
            )
            snapshots = await self.store.find(query)
            return [Event.from_snapshot(snapshot) for snapshot in snapshots]
        except Exception as e:
            logger.error(f"Error getting events: {e}")
            raise

    async def get_event(self, event_id: str) -> Optional[Event]:
        """Get an event by ID"""
        try:
            snapshot = await self.store.get(EVENTS, event_id)
            if snapshot is None:
                return None
            return Event.from_snapshot(snapshot)
        except Exception as e:
            logger.error(f"Error getting event: {e}")
            raise

    async def update_event(self, event_id: str, event_update: EventUpdate) -> None:
        """Update an event; date order is checked against the stored dates"""
        try:
            errors = check_event(event_update, partial=True)

            if not errors and (event_update.start_date or event_update.end_date):
                event = await self.get_event(event_id)
                if event is None:
                    raise NotFoundError(f"No document to update: {EVENTS}/{event_id}")
                errors = check_event({
                    "start_date": event_update.start_date or event.start_date,
                    "end_date": event_update.end_date or event.end_date,
                }, partial=True)

            ensure_valid(errors)

            changes = event_update.to_changes()
            changes["updatedAt"] = SERVER_TIMESTAMP

            await self.store.update(EVENTS, event_id, changes)

            logger.info(f"Updated event {event_id}")

        except Exception as e:
            logger.error(f"Error updating event: {e}")
            raise

    async def join_event(
        self,
        event_id: str,
        user_id: str,
        user_name: str,
        status: ParticipantStatus = "going"
    ) -> str:
        """Record a user's RSVP; one participant record per user.

        current_participants counts "going" RSVPs. A new "going" RSVP is
        refused once max_participants is reached.
        """
        try:
            event = await self.get_event(event_id)
            if event is None:
                raise NotFoundError("Event not found")

            existing = await self.get_event_participant(event_id, user_id)

            if existing is not None and existing.status == status:
                return existing.id

            was_going = existing is not None and existing.status == "going"
            now_going = status == "going"

            if now_going and not was_going and event.is_full:
                raise ConflictError("Event is full")

            if existing is None:
                participant_id = await self.store.add(EVENT_PARTICIPANTS, {
                    "eventId": event_id,
                    "userId": user_id,
                    "userName": user_name,
                    "status": status,
                    "joinedAt": SERVER_TIMESTAMP,
                })
            else:
                participant_id = existing.id
                await self.store.update(EVENT_PARTICIPANTS, participant_id, {"status": status})

            if now_going != was_going:
                # Update participant count
                await adjust_counter(
                    self.store, EVENTS, event_id, "currentParticipants", 1 if now_going else -1
                )

            logger.info(f"User {user_id} RSVP'd {status} to event {event_id}")

            return participant_id

        except Exception as e:
            logger.error(f"Error joining event: {e}")
            raise

    async def get_event_participant(self, event_id: str, user_id: str) -> Optional[EventParticipant]:
        """Get one user's participant record"""
        snapshots = await self.store.find(
            self._participants_query(event_id).where("userId", user_id).limit(1)
        )
        if not snapshots:
            return None
        return EventParticipant.from_snapshot(snapshots[0])

    async def get_event_participants(self, event_id: str) -> List[EventParticipant]:
        """Get an event's participants in RSVP order"""
        try:
            snapshots = await self.store.find(self._participants_query(event_id))
            return self._sorted(snapshots)
        except Exception as e:
            logger.error(f"Error getting event participants: {e}")
            raise

    async def subscribe_to_event_participants(
        self,
        event_id: str,
        callback: Callable[[List[EventParticipant]], None]
    ) -> ListenerRegistration:
        """Deliver an event's participants now and on every change"""
        def deliver(snapshots):
            return callback(self._sorted(snapshots))

        return await self.store.listen(self._participants_query(event_id), deliver)

    @staticmethod
    def _participants_query(event_id: str) -> Query:
        return Query(EVENT_PARTICIPANTS).where("eventId", event_id)

    @staticmethod
    def _sorted(snapshots) -> List[EventParticipant]:
        participants = [EventParticipant.from_snapshot(snapshot) for snapshot in snapshots]
        participants.sort(key=lambda participant: participant.joined_at)
        return participants
