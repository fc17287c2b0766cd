# app/core/config.py

import os # 'os' 모듈: 운영체제와 상호작용하는 기능을 제공합니다. 여기서는 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 이 키는 JWT 토큰의 서명 검증에 사용됩니다. 토큰 발급은 외부 인증 서버의 책임입니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 문서 저장소 종류: 'firestore' (운영) 또는 'memory' (로컬 개발/테스트)
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'firestore')

    # 댓글/답글/메시지 및 게시물 본문의 최대 길이
    MAX_COMMENT_LENGTH = int(os.getenv('MAX_COMMENT_LENGTH', 1000))
    MAX_POST_LENGTH = int(os.getenv('MAX_POST_LENGTH', 2000))
    FEED_PAGE_SIZE = int(os.getenv('FEED_PAGE_SIZE', 10))

    # 변경 알림을 발행하는 백그라운드 스레드 수. 0 이면 요청 스레드에서 바로 발행합니다.
    NOTIFIER_MAX_WORKERS = int(os.getenv('NOTIFIER_MAX_WORKERS', 2))

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다. Config 클래스를 상속받아 공통 설정을 그대로 사용합니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트에 연결하기 위한 서비스 계정 키 파일 경로를 환경 변수에서 가져옵니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. 외부 서비스 없이 메모리 저장소로 동작합니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('TEST_JWT_SECRET_KEY', 'chatterbox-testing-secret-key-0123456789')
    STORE_BACKEND = 'memory'
    NOTIFIER_MAX_WORKERS = 0
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')

class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

# config_by_name: 문자열 키와 해당 환경의 설정 클래스를 매핑하는 딕셔너리입니다.
# app/__init__.py의 create_app 함수에서 FLASK_ENV 값에 따라 적절한 설정을 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
