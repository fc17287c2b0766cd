# app/api/posts/test_post_routes.py
"""게시물 CRUD, 좋아요, 피드 페이지네이션 API 테스트"""
import json


def create_post(client, headers, **payload):
    return client.post('/api/posts', json=payload, headers=headers)


def test_create_post_requires_content_or_image(client, auth_headers, register_user):
    register_user("alice", username="Alice")
    headers = auth_headers("alice")

    assert create_post(client, headers).status_code == 400
    assert create_post(client, headers, content="   ").status_code == 400
    assert create_post(client, headers, content="x" * 2001).status_code == 400

    res = create_post(client, headers, image_url="https://cdn.example.com/cat.png")
    assert res.status_code == 201
    body = res.get_json()
    assert body["content"] == ""
    assert body["image_url"] == "https://cdn.example.com/cat.png"
    assert body["author"]["username"] == "Alice"
    assert body["comments"] == []
    assert body["like_count"] == 0


def test_feed_is_newest_first_with_pagination(client, auth_headers, register_user):
    register_user("alice")
    headers = auth_headers("alice")
    for i in range(5):
        assert create_post(client, headers, content=f"post {i}").status_code == 201

    res = client.get('/api/posts?page=1&limit=2', headers=headers)
    assert res.status_code == 200
    body = res.get_json()
    assert [p["content"] for p in body["posts"]] == ["post 4", "post 3"]
    assert body["pagination"] == {"current_page": 1, "total_pages": 3, "total_posts": 5, "has_more": True}

    last = client.get('/api/posts?page=3&limit=2', headers=headers).get_json()
    assert [p["content"] for p in last["posts"]] == ["post 0"]
    assert last["pagination"]["has_more"] is False


def test_user_posts_filters_by_author(client, auth_headers, register_user):
    register_user("alice")
    register_user("bob")
    create_post(client, auth_headers("alice"), content="from alice")
    create_post(client, auth_headers("bob"), content="from bob")

    body = client.get('/api/posts/user/bob', headers=auth_headers("alice")).get_json()
    assert [p["content"] for p in body["posts"]] == ["from bob"]
    assert body["pagination"]["total_posts"] == 1


def test_toggle_like(client, auth_headers, register_user, events):
    register_user("alice")
    post_id = create_post(client, auth_headers("alice"), content="like me").get_json()["post_id"]

    liked = client.put(f'/api/posts/like/{post_id}', headers=auth_headers("bob")).get_json()
    assert liked["likes"] == ["bob"]
    assert liked["like_count"] == 1
    assert liked["is_liked"] is True
    assert json.loads(events.get(post_id)["payload"])["like_count"] == 1

    unliked = client.put(f'/api/posts/like/{post_id}', headers=auth_headers("bob")).get_json()
    assert unliked["likes"] == []
    assert unliked["is_liked"] is False

    assert client.put('/api/posts/like/missing', headers=auth_headers("bob")).status_code == 404


def test_delete_post_author_only(client, auth_headers, register_user):
    register_user("alice")
    post_id = create_post(client, auth_headers("alice"), content="bye").get_json()["post_id"]

    assert client.delete(f'/api/posts/{post_id}', headers=auth_headers("bob")).status_code == 403
    assert client.delete(f'/api/posts/{post_id}', headers=auth_headers("alice")).status_code == 200
    assert client.get(f'/api/posts/{post_id}', headers=auth_headers("alice")).status_code == 404
    assert client.delete(f'/api/posts/{post_id}', headers=auth_headers("alice")).status_code == 404
