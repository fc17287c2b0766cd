# app/services/test_document_store.py
"""메모리 문서 저장소의 원자적 갱신/조회 동작 테스트"""
import threading
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import AuthorizationError, NotFoundError
from app.services.document_store import InMemoryDocumentStore


@pytest.fixture
def store():
    store = InMemoryDocumentStore('posts')
    store.set('p1', {'post_id': 'p1', 'likes': [], 'version': 0})
    return store


def test_get_returns_copy(store):
    doc = store.get('p1')
    doc['likes'].append('mallory')
    assert store.get('p1')['likes'] == []


def test_update_increments_version(store):
    saved = store.update('p1', lambda data: {**data, 'likes': ['alice']})
    assert saved['version'] == 1
    assert store.get('p1') == saved


def test_update_missing_document_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.update('missing', lambda data: data)


def test_failed_mutator_leaves_document_untouched(store):
    def _mutate(data):
        data['likes'].append('alice')
        raise AuthorizationError("denied")

    with pytest.raises(AuthorizationError):
        store.update('p1', _mutate)
    assert store.get('p1') == {'post_id': 'p1', 'likes': [], 'version': 0}


def test_failed_write_discards_mutation(store, monkeypatch):
    def _broken_write(doc_id, data):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(store, '_write', _broken_write)
    with pytest.raises(RuntimeError):
        store.update('p1', lambda data: {**data, 'likes': ['alice']})
    monkeypatch.undo()
    assert store.get('p1')['likes'] == []


def test_concurrent_updates_are_not_lost(store):
    """동시에 여러 스레드가 갱신해도 모든 변경이 반영되어야 함"""
    def _like(user_id):
        def _mutate(data):
            data['likes'].append(user_id)
            return data
        store.update('p1', _mutate)

    threads = [threading.Thread(target=_like, args=(f"user-{i}",)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    doc = store.get('p1')
    assert sorted(doc['likes']) == sorted(f"user-{i}" for i in range(20))
    assert doc['version'] == 20


def test_query_filters_orders_and_paginates():
    store = InMemoryDocumentStore('posts')
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i in range(5):
        store.set(f"p{i}", {
            'post_id': f"p{i}",
            'author_id': 'alice' if i % 2 == 0 else 'bob',
            'tags': ['even'] if i % 2 == 0 else [],
            'created_at': base + timedelta(minutes=i),
        })

    newest_first = store.query(order_by='created_at', descending=True, offset=1, limit=2)
    assert [d['post_id'] for d in newest_first] == ['p3', 'p2']

    alice = store.query(filters=[('author_id', '==', 'alice')], order_by='created_at')
    assert [d['post_id'] for d in alice] == ['p0', 'p2', 'p4']
    assert store.count(filters=[('tags', 'array_contains', 'even')]) == 3
    assert store.count() == 5


def test_query_rejects_unknown_operator(store):
    with pytest.raises(ValueError):
        store.query(filters=[('likes', '>', 1)])


def test_get_many_skips_missing(store):
    store.set('p2', {'post_id': 'p2'})
    found = store.get_many(['p1', 'p2', 'p3'])
    assert set(found) == {'p1', 'p2'}


@pytest.fixture
def users():
    users = InMemoryDocumentStore('users')
    users.set('alice', {'user_id': 'alice', 'following': [], 'version': 0})
    users.set('bob', {'user_id': 'bob', 'followers': [], 'version': 0})
    return users


def _follow(documents):
    documents['alice']['following'].append('bob')
    documents['bob']['followers'].append('alice')
    return documents


def test_update_many_writes_every_document(users):
    saved = users.update_many(['alice', 'bob'], _follow)

    assert saved['alice']['following'] == ['bob']
    assert users.get('bob')['followers'] == ['alice']
    assert users.get('alice')['version'] == 1
    assert users.get('bob')['version'] == 1


def test_update_many_missing_document_writes_nothing(users):
    with pytest.raises(NotFoundError):
        users.update_many(['alice', 'carol'], lambda documents: documents)
    assert users.get('alice')['version'] == 0


def test_update_many_rolls_back_partial_write(users, monkeypatch):
    original_write = users._write

    def _fail_on_bob(doc_id, data):
        if doc_id == 'bob':
            raise RuntimeError("store unavailable")
        original_write(doc_id, data)

    monkeypatch.setattr(users, '_write', _fail_on_bob)
    with pytest.raises(RuntimeError):
        users.update_many(['alice', 'bob'], _follow)
    monkeypatch.undo()

    assert users.get('alice') == {'user_id': 'alice', 'following': [], 'version': 0}
    assert users.get('bob') == {'user_id': 'bob', 'followers': [], 'version': 0}


def test_get_or_create_keeps_first_document():
    store = InMemoryDocumentStore('conversations')

    first, created = store.get_or_create('alice:bob', {'opened_by': 'alice'})
    second, created_again = store.get_or_create('alice:bob', {'opened_by': 'bob'})

    assert created is True
    assert created_again is False
    assert first == second == {'opened_by': 'alice'}
