"""
Per-user dependency container.

A ``Workspace`` wires one key/value store into the ledger, roster, tracked
topics, profile and analytics aggregator. Views get the current user's
workspace through :func:`current_workspace`, which builds it once per
request; nothing is shared between requests.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from flask import current_app, g
from flask_login import current_user

from studypal.analysis.analytics import AnalyticsAggregator, display_timezone
from studypal.analysis.tracked_topics import chart_topics, derive_tracked_topics
from studypal.errors import StorageUnavailable
from studypal.storage import KeyValueStore, SQLStore
from studypal.stores import (
    ActivityLedger,
    ProfileStore,
    RosterStore,
    TrackedTopicStore,
    account_defaults,
)

logger = logging.getLogger(__name__)


class Workspace:
    """Everything one user's pages read and write.

    Args:
        store: Backing key/value store for this user.
        tz: Display timezone for calendar-day bucketing.
        clock: Returns the current aware datetime; injectable for tests.
        profile_defaults: Profile values derived from the signed-in account.
    """

    def __init__(
        self,
        store: KeyValueStore,
        tz: timezone = timezone.utc,
        clock: Callable[[], datetime] | None = None,
        profile_defaults: dict | None = None,
    ):
        self.store = store
        self.tz = tz
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._profile_defaults = profile_defaults
        self._load()

    def _load(self) -> None:
        self.ledger = ActivityLedger(self.store, clock=self.clock)
        self.roster = RosterStore(self.store)
        self.topics = TrackedTopicStore(self.store)
        self.profile = ProfileStore(self.store, defaults=self._profile_defaults)
        self.analytics = AnalyticsAggregator(self.ledger, self.tz, clock=self.clock)

    def tracked_topics(self) -> list[str]:
        """Topics derived from the practice tests in the ledger."""
        return derive_tracked_topics(self.ledger.list())

    def chart_topics(self) -> list[str]:
        """Managed topics plus derived ones, for the mastery chart."""
        return chart_topics((t.topic for t in self.topics.list()), self.tracked_topics())

    def reset(self) -> None:
        """Wipe every stored key of this user and reload all stores."""
        try:
            self.store.clear()
        except StorageUnavailable as e:
            logger.warning(f"Could not clear storage during reset: {e}")
        self._load()
        logger.info("Workspace reset")


def workspace_for(user, app=None) -> Workspace:
    app = app or current_app
    return Workspace(
        SQLStore(user.storage_namespace),
        tz=display_timezone(app.config.get('DISPLAY_TIMEZONE_OFFSET', 0)),
        profile_defaults=account_defaults(user),
    )


def current_workspace() -> Workspace:
    """The signed-in user's workspace, built once per request."""
    if 'workspace' not in g:
        g.workspace = workspace_for(current_user._get_current_object())
    return g.workspace
