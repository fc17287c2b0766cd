# app/api/users/services.py
import logging
from dataclasses import asdict
from typing import Optional, Dict, Any, Iterable, List

from app.core.exceptions import NotFoundError, ValidationError
from app.models.user import User
from app.services.document_store import DocumentStore

MAX_SEARCH_RESULTS = 20


class UserService:
    """
    사용자 공개 프로필 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 게시물/댓글/메시지 응답에 포함되는 작성자 요약 정보를 일괄 조회합니다.
    - 팔로우/언팔로우는 두 사용자 문서를 한 트랜잭션에서 함께 갱신합니다.
    """
    def __init__(self, users_store: DocumentStore):
        self.users_store = users_store

    def upsert_profile(self, user_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """현재 사용자의 공개 프로필을 생성하거나 갱신합니다. 팔로우 정보는 유지됩니다."""
        username = (data.get('username') or "").strip()
        if not username:
            raise ValidationError("username은 비어 있을 수 없습니다.")

        _, created = self.users_store.get_or_create(user_id, asdict(User(user_id=user_id, username=username)))

        def _apply(doc: Dict[str, Any]) -> Dict[str, Any]:
            doc['username'] = username
            doc['avatar'] = data.get('avatar') or None
            if 'bio' in data:
                doc['bio'] = data['bio']
            return doc

        saved = self.users_store.update(user_id, _apply)
        logging.info(f"사용자 프로필 저장 완료 (user_id: {user_id}, 신규: {created})")
        return self._public_profile(saved, user_id)

    def get_user_profile(self, user_id: str, viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """팔로워/팔로잉 수와 조회자의 팔로우 여부를 포함한 공개 프로필. 없으면 None."""
        doc = self.users_store.get(user_id)
        if doc is None:
            return None
        return self._public_profile(doc, viewer_id)

    @staticmethod
    def _public_profile(doc: Dict[str, Any], viewer_id: Optional[str]) -> Dict[str, Any]:
        followers = doc.get('followers') or []
        return {
            **doc,
            "followers_count": len(followers),
            "following_count": len(doc.get('following') or []),
            "is_following": viewer_id in followers if viewer_id else False,
        }

    # --- 팔로우 ---
    def follow(self, current_user_id: str, target_user_id: str) -> Dict[str, Any]:
        if current_user_id == target_user_id:
            raise ValidationError("자기 자신은 팔로우할 수 없습니다.")

        def _follow(docs: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
            current, target = docs[current_user_id], docs[target_user_id]
            if current_user_id in (target.get('followers') or []):
                raise ValidationError("이미 팔로우 중인 사용자입니다.")
            target['followers'] = (target.get('followers') or []) + [current_user_id]
            current['following'] = (current.get('following') or []) + [target_user_id]
            return docs

        saved = self.users_store.update_many([current_user_id, target_user_id], _follow)
        logging.info(f"팔로우 완료 ({current_user_id} -> {target_user_id})")
        return {"following": True, "followers_count": len(saved[target_user_id]['followers'])}

    def unfollow(self, current_user_id: str, target_user_id: str) -> Dict[str, Any]:
        """팔로우 중이 아니어도 오류 없이 언팔로우 상태를 반환합니다."""
        if current_user_id == target_user_id:
            raise ValidationError("자기 자신은 언팔로우할 수 없습니다.")

        def _unfollow(docs: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
            current, target = docs[current_user_id], docs[target_user_id]
            target['followers'] = [u for u in target.get('followers') or [] if u != current_user_id]
            current['following'] = [u for u in current.get('following') or [] if u != target_user_id]
            return docs

        saved = self.users_store.update_many([current_user_id, target_user_id], _unfollow)
        logging.info(f"언팔로우 완료 ({current_user_id} -> {target_user_id})")
        return {"following": False, "followers_count": len(saved[target_user_id]['followers'])}

    def get_followers(self, user_id: str) -> List[Dict[str, Any]]:
        return self._related_users(user_id, 'followers')

    def get_following(self, user_id: str) -> List[Dict[str, Any]]:
        return self._related_users(user_id, 'following')

    def _related_users(self, user_id: str, field_name: str) -> List[Dict[str, Any]]:
        doc = self.users_store.get(user_id)
        if doc is None:
            raise NotFoundError("사용자를 찾을 수 없습니다.")
        related_ids = doc.get(field_name) or []
        found = self.users_store.get_many(related_ids)
        # 팔로우한 순서 유지, 삭제된 사용자는 제외
        return [found[related_id] for related_id in related_ids if related_id in found]

    # --- 목록/검색 ---
    def list_users(self, current_user_id: str) -> List[Dict[str, Any]]:
        """현재 사용자를 제외한 전체 사용자 목록 (username 순)."""
        docs = self.users_store.query(order_by='username')
        return [doc for doc in docs if doc['user_id'] != current_user_id]

    def search_users(self, query: Optional[str]) -> List[Dict[str, Any]]:
        """
        사용자 ID 가 정확히 일치하면 그 사용자만, 아니면 username 부분 일치(대소문자 무시)로 검색합니다.
        Firestore 는 부분 문자열 쿼리를 지원하지 않으므로 username 순으로 읽어 걸러냅니다.
        """
        q = (query or "").strip()
        if not q:
            return []

        exact = self.users_store.get(q)
        if exact is not None:
            return [exact]

        needle = q.lower()
        matches = [
            doc for doc in self.users_store.query(order_by='username')
            if needle in (doc.get('username') or "").lower()
        ]
        return matches[:MAX_SEARCH_RESULTS]

    def get_summaries(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """
        주어진 사용자 ID 들의 작성자 요약 정보를 한 번의 조회로 반환합니다.
        존재하지 않는 사용자는 username/avatar 가 None 인 요약으로 채웁니다.
        """
        ids = set(user_ids)
        found = self.users_store.get_many(ids)
        summaries = {}
        for user_id in ids:
            user_data = found.get(user_id)
            if user_data is None:
                logging.warning(f"작성자 정보를 찾을 수 없음 (user_id: {user_id})")
                summaries[user_id] = {"user_id": user_id, "username": None, "avatar": None}
            else:
                summaries[user_id] = {
                    "user_id": user_id,
                    "username": user_data.get('username'),
                    "avatar": user_data.get('avatar'),
                }
        return summaries
