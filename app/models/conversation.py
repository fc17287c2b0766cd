# app/models/conversation.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class Message:
    """대화방 문서 안에 순서대로 저장되는 메시지."""
    message_id: str
    from_id: str
    text: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)


@dataclass
class Conversation:
    """
    Firestore 'conversations' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    participant_key 는 두 참여자 ID 를 정렬해 ':' 로 이은 값이며, 1:1 대화방의 문서 ID 로도 사용합니다.
    """
    conversation_id: str
    participants: List[str]
    participant_key: str
    messages: List[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
    version: int = 0


def participant_key(user_a: str, user_b: str) -> str:
    return ":".join(sorted([user_a, user_b]))
