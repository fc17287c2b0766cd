# app/utils/test_datetime_utils.py
"""
시간 처리 유틸리티 테스트

사용법: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from app.utils.datetime_utils import DateTimeUtils


def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc

    # +09:00 은 UTC 로 환산되어야 함
    assert DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00").hour == 1


@pytest.mark.parametrize("bad", ["", "not-a-date"])
def test_parse_iso_datetime_rejects_garbage(bad):
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime(bad)


def test_for_firestore():
    """Firestore 변환 테스트"""
    test_data = {
        'created_at': datetime(2024, 1, 15, 10, 30),
        'nested': {'event_date': date(2023, 12, 25)},
        'comment_nodes': [{'created_at': datetime(2024, 1, 1, tzinfo=timezone(timedelta(hours=9)))}],
        'text': 'hello',
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert converted['created_at'].tzinfo == timezone.utc
    assert converted['nested']['event_date'] == datetime(2023, 12, 25, tzinfo=timezone.utc)
    assert converted['comment_nodes'][0]['created_at'] == datetime(2023, 12, 31, 15, tzinfo=timezone.utc)
    assert converted['text'] == 'hello'


def test_from_firestore_normalizes_to_utc():
    naive = datetime(2024, 1, 15, 10, 30)
    kst = datetime(2024, 1, 15, 19, 30, tzinfo=timezone(timedelta(hours=9)))

    converted = DateTimeUtils.from_firestore({'a': naive, 'b': [kst]})

    assert converted['a'] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert converted['b'][0] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert converted['b'][0].tzinfo == timezone.utc


def test_validate_datetime_field():
    assert DateTimeUtils.validate_datetime_field("2024-01-15T10:30:00Z") == \
        datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert DateTimeUtils.validate_datetime_field(datetime(2024, 1, 15)).tzinfo == timezone.utc

    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(None, "created_at")
    with pytest.raises(ValueError):
        DateTimeUtils.validate_datetime_field(12345, "created_at")


def test_now_is_utc():
    assert DateTimeUtils.now().tzinfo == timezone.utc
