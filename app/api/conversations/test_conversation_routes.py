# app/api/conversations/test_conversation_routes.py
"""1:1 대화방(DM) API 테스트"""
import json
import threading

import pytest


@pytest.fixture
def conversation(client, auth_headers, register_user):
    register_user("alice", username="Alice")
    register_user("bob", username="Bob")
    res = client.post('/api/chat/with/bob', headers=auth_headers("alice"))
    assert res.status_code == 200
    return res.get_json()


def test_get_or_create_is_idempotent_for_both_sides(client, auth_headers, conversation):
    again = client.post('/api/chat/with/alice', headers=auth_headers("bob")).get_json()
    assert again["conversation_id"] == conversation["conversation_id"]
    assert [p["username"] for p in conversation["participants"]] == ["Alice", "Bob"]
    assert conversation["messages"] == []


def test_cannot_start_conversation_with_self(client, auth_headers):
    res = client.post('/api/chat/with/alice', headers=auth_headers("alice"))
    assert res.status_code == 400


def test_send_message_appends_and_publishes(client, auth_headers, conversation, events):
    conversation_id = conversation["conversation_id"]

    res = client.post(f'/api/chat/{conversation_id}/messages', json={"text": "  hey bob  "},
                      headers=auth_headers("alice"))
    assert res.status_code == 200
    client.post(f'/api/chat/{conversation_id}/messages', json={"text": "hi alice"}, headers=auth_headers("bob"))

    body = client.get(f'/api/chat/{conversation_id}', headers=auth_headers("bob")).get_json()
    assert [(m["from_user"]["username"], m["text"]) for m in body["messages"]] == [
        ("Alice", "hey bob"), ("Bob", "hi alice"),
    ]
    event = events.get(conversation_id)
    assert event["event"] == "conversation_updated"
    assert len(json.loads(event["payload"])["messages"]) == 2


def test_non_participant_is_rejected(client, auth_headers, conversation):
    conversation_id = conversation["conversation_id"]
    assert client.get(f'/api/chat/{conversation_id}', headers=auth_headers("carol")).status_code == 403
    res = client.post(f'/api/chat/{conversation_id}/messages', json={"text": "let me in"},
                      headers=auth_headers("carol"))
    assert res.status_code == 403


def test_blank_message_and_missing_conversation(client, auth_headers, conversation):
    conversation_id = conversation["conversation_id"]
    res = client.post(f'/api/chat/{conversation_id}/messages', json={"text": "   "}, headers=auth_headers("alice"))
    assert res.status_code == 400
    assert client.get('/api/chat/missing', headers=auth_headers("alice")).status_code == 404


def test_list_conversations_most_recent_first(client, auth_headers, conversation, register_user):
    register_user("carol", username="Carol")
    other = client.post('/api/chat/with/carol', headers=auth_headers("alice")).get_json()
    client.post(f'/api/chat/{conversation["conversation_id"]}/messages', json={"text": "bump"},
                headers=auth_headers("alice"))

    listed = client.get('/api/chat', headers=auth_headers("alice")).get_json()
    assert [c["conversation_id"] for c in listed] == [conversation["conversation_id"], other["conversation_id"]]
    assert len(client.get('/api/chat', headers=auth_headers("carol")).get_json()) == 1


def test_padded_message_is_measured_after_trimming(client, auth_headers, conversation):
    conversation_id = conversation["conversation_id"]
    res = client.post(f'/api/chat/{conversation_id}/messages', json={"text": " " * 600 + "hi" + " " * 600},
                      headers=auth_headers("alice"))
    assert res.status_code == 200
    assert res.get_json()["messages"][-1]["text"] == "hi"


def test_concurrent_first_contact_creates_one_conversation(app, register_user):
    register_user("alice")
    register_user("bob")
    conversation_service = app.services['conversations']
    results = []

    def _open(current_user_id, other_user_id):
        results.append(conversation_service.get_or_create_conversation(current_user_id, other_user_id))

    threads = [
        threading.Thread(target=_open, args=("alice", "bob") if i % 2 else ("bob", "alice"))
        for i in range(20)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({conversation["conversation_id"] for conversation in results}) == 1
    assert conversation_service.conversations_store.count() == 1
