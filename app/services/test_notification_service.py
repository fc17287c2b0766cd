# app/services/test_notification_service.py
import json

from app.services.document_store import InMemoryDocumentStore
from app.services.notification_service import NotificationService


def test_publish_overwrites_latest_event_per_topic():
    events = InMemoryDocumentStore('events')
    notifier = NotificationService(events)

    notifier.publish('p1', {'version': 1})
    notifier.publish('p1', {'version': 2})

    event = events.get('p1')
    assert event['event'] == 'post_updated'
    assert json.loads(event['payload']) == {'version': 2}
    assert events.count() == 1


def test_publish_failure_is_swallowed(monkeypatch):
    """알림 실패는 로그만 남기고 호출자에게 전파되지 않아야 함"""
    events = InMemoryDocumentStore('events')

    def _broken_set(doc_id, data):
        raise RuntimeError("events collection unavailable")

    monkeypatch.setattr(events, 'set', _broken_set)
    NotificationService(events).publish('p1', {'version': 1})


def test_background_publish_completes_on_shutdown():
    events = InMemoryDocumentStore('events')
    notifier = NotificationService(events, max_workers=2)
    for i in range(5):
        notifier.publish(f"c{i}", {'n': i}, event='conversation_updated')
    notifier.shutdown()

    assert events.count() == 5
    assert events.get('c3')['event'] == 'conversation_updated'
