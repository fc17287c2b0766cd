# app/models/user.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    계정/인증 정보는 외부 인증 제공자가 관리하며, 여기에는 공개 프로필만 저장합니다.
    followers/following 은 서로 대칭이며 팔로우/언팔로우 시 한 트랜잭션에서 함께 갱신됩니다.
    """
    user_id: str
    username: str
    avatar: Optional[str] = None
    bio: str = ""
    followers: List[str] = field(default_factory=list)
    following: List[str] = field(default_factory=list)
    join_date: datetime = field(default_factory=DateTimeUtils.now)
