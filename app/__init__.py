# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정
from app.core.config import config_by_name
from app.core.exceptions import ChatterBoxError
from app.utils.json_utils import TreeJSONProvider

# - API 블루프린트
from app.api.users.routes import users_bp
from app.api.posts.routes import posts_bp
from app.api.comments.routes import comments_bp
from app.api.conversations.routes import conversations_bp

# - 서비스 모듈
from app.services.document_store import FirestoreDocumentStore, InMemoryDocumentStore
from app.services.notification_service import NotificationService
from app.api.users.services import UserService
from app.api.posts.services import PostService
from app.api.comments.services import CommentService
from app.api.conversations.services import ConversationService


def _init_firebase(app: Flask):
    if firebase_admin._apps:
        return
    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if not cred_path or not os.path.exists(cred_path):
        raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
    cred = credentials.Certificate(cred_path)
    firebase_admin.initialize_app(cred)


def create_app(config_name: Optional[str] = None):
    """
    Flask 애플리케이션 팩토리 함수.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    # 답글 트리 깊이에 제한이 없으므로 재귀하지 않는 JSON provider 사용
    app.json = TreeJSONProvider(app)
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    backend = app.config['STORE_BACKEND']
    if backend == 'firestore':
        _init_firebase(app)
        store_factory = FirestoreDocumentStore
    elif backend == 'memory':
        store_factory = InMemoryDocumentStore
    else:
        raise ValueError(f"지원하지 않는 STORE_BACKEND 입니다: {backend}")

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스 먼저 생성
    app.services['notifications'] = NotificationService(
        store_factory('events'), max_workers=app.config['NOTIFIER_MAX_WORKERS']
    )
    app.services['users'] = UserService(store_factory('users'))

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    app.services['posts'] = PostService(
        posts_store=store_factory('posts'),
        user_service=app.services['users'],
        notification_service=app.services['notifications'],
        max_post_length=app.config['MAX_POST_LENGTH'],
    )
    app.services['comments'] = CommentService(
        post_service=app.services['posts'],
        max_comment_length=app.config['MAX_COMMENT_LENGTH'],
    )
    app.services['conversations'] = ConversationService(
        conversations_store=store_factory('conversations'),
        user_service=app.services['users'],
        notification_service=app.services['notifications'],
        max_message_length=app.config['MAX_COMMENT_LENGTH'],
    )
    logging.info(f"서비스 초기화 완료 (store backend: {backend})")

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api/posts')
    app.register_blueprint(conversations_bp, url_prefix='/api/chat')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(ChatterBoxError)
    def handle_domain_error(err):
        # 검증(400) / 권한(403) / 리소스 없음(404) 오류
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return err
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
