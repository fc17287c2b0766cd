# conftest.py
"""
공용 pytest 픽스처

- TestingConfig 로 앱을 생성하므로 Firebase 연결 없이 메모리 저장소로 동작합니다.
- 토큰 발급은 외부 인증 서버의 책임이므로, 테스트에서는 flask_jwt_extended 로 직접 발급합니다.
"""
import pytest
from flask_jwt_extended import create_access_token

from app import create_app


@pytest.fixture
def app():
    return create_app('testing')


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _headers(user_id: str) -> dict:
        with app.app_context():
            token = create_access_token(identity=user_id)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def register_user(app):
    """공개 프로필을 미리 저장하여 응답의 작성자 요약 정보가 채워지도록 합니다."""
    def _register(user_id: str, username: str = None, avatar: str = None) -> dict:
        return app.services['users'].upsert_profile(user_id, {"username": username or user_id, "avatar": avatar})
    return _register


@pytest.fixture
def events(app):
    """알림 서비스가 기록한 이벤트 저장소."""
    return app.services['notifications'].events_store
