"""Tests for the event bus."""

from ghadmin.models.status import FetchErrorEvent, OrgStatus
from ghadmin.services.events import FETCH_ERROR, STATUS_UPDATED, EventBus


def test_subscribers_receive_json_payloads():
    bus = EventBus()
    seen = []
    bus.subscribe(lambda name, payload: seen.append((name, payload)))

    bus.emit(STATUS_UPDATED, OrgStatus(is_connected=True, organizations=["alice"]))

    assert seen == [(STATUS_UPDATED, {
        "is_connected": True,
        "is_polling": False,
        "organizations": ["alice"],
        "selected_org": "",
        "default_org": "",
    })]


def test_unsubscribe():
    bus = EventBus()
    seen = []
    unsubscribe = bus.subscribe(lambda name, payload: seen.append(name))

    bus.emit(STATUS_UPDATED, OrgStatus())
    unsubscribe()
    bus.emit(STATUS_UPDATED, OrgStatus())

    assert seen == [STATUS_UPDATED]


def test_failing_subscriber_does_not_block_others():
    bus = EventBus()
    seen = []

    def broken(name, payload):
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(lambda name, payload: seen.append(name))

    bus.emit(FETCH_ERROR, FetchErrorEvent(org="acme", type="repos", error="500"))

    assert seen == [FETCH_ERROR]


def test_backlog_is_sequenced_and_bounded():
    bus = EventBus(backlog_size=3)
    for _ in range(5):
        bus.emit(STATUS_UPDATED, OrgStatus())

    assert [e.seq for e in bus.since()] == [3, 4, 5]
    assert [e.seq for e in bus.since(4)] == [5]
    assert bus.since(5) == []
