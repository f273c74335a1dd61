"""
Shared fakes for the chat core tests.
"""
import pytest

from core.exceptions import PersistenceError
from core.models import Profile


class RecordingNotifier:
    """Notifier that records every notification instead of sending it."""

    def __init__(self):
        self.events = []
        self.dead = set()

    def status_changed(self, participant_id, status, room_id=None):
        self.events.append(("status", participant_id, status, room_id))

    def system_notice(self, participant_id, text):
        self.events.append(("system", participant_id, text))

    def message_delivered(self, to_id, from_tag, content, timestamp):
        self.events.append(("message", to_id, from_tag, content, timestamp))

    def message_acknowledged(self, participant_id, content, timestamp):
        self.events.append(("ack", participant_id, content, timestamp))

    def online_count_changed(self, count):
        self.events.append(("user_count", None, count))

    def is_connected(self, participant_id):
        return participant_id not in self.dead

    def of_kind(self, kind, participant_id=None):
        return [
            event for event in self.events
            if event[0] == kind and (participant_id is None or event[1] == participant_id)
        ]

    def statuses(self, participant_id):
        return [(event[2], event[3]) for event in self.of_kind("status", participant_id)]

    def notices(self, participant_id):
        return [event[2] for event in self.of_kind("system", participant_id)]

    def clear(self):
        self.events.clear()


class FakeMessageStore:
    """In-memory message store."""

    def __init__(self):
        self.messages = []
        self.views = 0
        self.fail = False

    async def append(self, room_id, sender_id, content):
        if self.fail:
            raise PersistenceError("database is down")
        self.messages.append((room_id, sender_id, content))

    async def count_all(self):
        return len(self.messages)

    async def increment_views(self):
        self.views += 1

    async def total_views(self):
        return self.views


def make_profile(gender="any", preference="any", interests=None):
    return Profile.build(gender, preference, interests or [])


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store():
    return FakeMessageStore()
