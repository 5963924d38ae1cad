"""Builds the read-only context bundle injected into every agent turn."""

import logging
from datetime import date, datetime, tzinfo
from typing import Callable, List, Optional, Union

from ..auth.session import SessionProvider, require_user_id
from ..errors import PlannerError
from ..scheduling.models import ContextBundle, Event, Preferences
from ..scheduling.normalization import (
    day_bounds,
    resolve_timezone,
    summarize_event,
    timezone_name,
)
from ..scheduling.policy import PLANNER_RULES
from ..storage.event_store import EventStore
from ..storage.preferences_store import PreferencesStore

logger = logging.getLogger(__name__)


class ContextAssembler:
    """Assembles a ContextBundle for a user and reference date.

    Context is advisory: ``build`` never raises. Any failure to resolve the
    user or read the stores yields a well-formed bundle with empty events
    and preferences, so explicit tool calls can still go ahead.
    """

    def __init__(
        self,
        event_store: EventStore,
        preferences_store: PreferencesStore,
        default_timezone: str = "UTC",
        app_name: str = "Day Planner",
        rules: Optional[List[str]] = None,
        now: Optional[Callable[[tzinfo], datetime]] = None,
    ):
        """
        Initialize context assembler.

        Args:
            event_store: Event persistence collaborator
            preferences_store: Preferences collaborator
            default_timezone: Zone used when the user has none (the caller's detected zone)
            app_name: Application name shown to the agent
            rules: Behavioral rules attached to every bundle
            now: Clock returning the current time in a zone (for tests)
        """
        self.event_store = event_store
        self.preferences_store = preferences_store
        self.default_timezone = default_timezone
        self.app_name = app_name
        self.rules = list(rules) if rules is not None else list(PLANNER_RULES)
        self._now = now or (lambda tz: datetime.now(tz))

    def _resolve_day(
        self, reference_date: Union[date, str, None], tz: tzinfo
    ) -> date:
        if isinstance(reference_date, datetime):
            if reference_date.tzinfo is None:
                return reference_date.date()
            return reference_date.astimezone(tz).date()
        if isinstance(reference_date, date):
            return reference_date
        if isinstance(reference_date, str) and reference_date.strip():
            try:
                return date.fromisoformat(reference_date.strip())
            except ValueError:
                logger.warning(f"Invalid reference date '{reference_date}', using today")
        return self._now(tz).date()

    async def _load_preferences(self, user_id: str) -> Preferences:
        try:
            preferences = await self.preferences_store.get(user_id)
        except Exception as e:
            logger.warning(f"Context: preferences unavailable for {user_id}: {e}")
            return Preferences()
        return preferences or Preferences()

    async def _load_events(self, user_id: str, bundle_range) -> List[Event]:
        try:
            return await self.event_store.list_range(
                user_id, bundle_range.start, bundle_range.end
            )
        except Exception as e:
            logger.warning(f"Context: events unavailable for {user_id}: {e}")
            return []

    async def build(
        self,
        session: Optional[SessionProvider],
        reference_date: Union[date, str, None] = None,
    ) -> ContextBundle:
        """
        Build the context bundle for one turn.

        Args:
            session: Current session (principal is resolved from it)
            reference_date: Day under consideration; defaults to today in the resolved zone

        Returns:
            ContextBundle (empty events/preferences on any failure)
        """
        user_id = None
        try:
            user_id = await require_user_id(session)
        except PlannerError as e:
            logger.warning(f"Context: {e.message}; returning empty bundle")
        except Exception as e:
            logger.warning(f"Context: session lookup failed: {e}", exc_info=True)

        preferences = await self._load_preferences(user_id) if user_id else Preferences()

        tz = resolve_timezone(preferences.timezone, self.default_timezone)
        try:
            day = self._resolve_day(reference_date, tz)
            day_range = day_bounds(day, tz)
        except OverflowError:
            logger.warning(f"Reference date {reference_date} is out of range, using today")
            day = self._now(tz).date()
            day_range = day_bounds(day, tz)

        events = await self._load_events(user_id, day_range) if user_id else []

        bundle = ContextBundle(
            timezone=timezone_name(tz),
            reference_date=day,
            day_range=day_range,
            events=[summarize_event(e, tz) for e in events],
            goals=preferences.enabled_goals(),
            time_blocks=[b.to_context() for b in preferences.enabled_time_blocks()],
            rules=list(self.rules),
            app_name=self.app_name,
        )
        logger.debug(
            f"Context built for {user_id or 'anonymous'}: {day.isoformat()} "
            f"({bundle.timezone}), {len(bundle.events)} event(s)"
        )
        return bundle
