# app/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간 처리를 위한 중앙화된 유틸리티 모듈

- 백엔드의 모든 시각은 UTC timezone-aware datetime 으로 통일합니다.
- Firestore 저장/읽기 시 변환 규칙을 한곳에서 관리합니다.
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)

            # timezone-naive인 경우 UTC로 가정
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)

            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        변환 규칙:
        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return obj.astimezone(timezone.utc)
        elif isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore에서 읽은 데이터의 datetime 필드를 UTC datetime 으로 정규화

        - Firestore timestamp(DatetimeWithNanoseconds 포함) -> timezone-aware datetime (UTC)
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            if obj.tzinfo is None:
                return obj.replace(tzinfo=timezone.utc)
            return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
        elif isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        저장소나 요청에서 받은 datetime 값을 검증하고 UTC datetime 으로 변환

        Raises:
            ValueError: 잘못된 형식이거나 파싱할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name}은 필수 필드입니다")

        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)

        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)

        logger.error(f"{field_name} 검증 실패: {value!r}")
        raise ValueError(f"{field_name}은 문자열 또는 datetime 객체여야 합니다")


# 편의를 위한 글로벌 함수들
def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def for_firestore(obj: Any) -> Any:
    """Firestore 저장용 변환"""
    return DateTimeUtils.for_firestore(obj)

def from_firestore(obj: Any) -> Any:
    """Firestore 읽기용 변환"""
    return DateTimeUtils.from_firestore(obj)
