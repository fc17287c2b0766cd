# app/api/conversations/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Dict, Any, List

from app.api.conversations.schemas import ConversationResponseSchema
from app.api.users.services import UserService
from app.core.comment_tree import clean_text, MAX_COMMENT_LENGTH
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.conversation import Conversation, Message, participant_key
from app.services.document_store import DocumentStore
from app.services.notification_service import NotificationService
from app.utils.datetime_utils import DateTimeUtils


class ConversationService:
    """
    1:1 대화방(DM) 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 메시지 추가는 저장소 트랜잭션 안에서 수행되어 동시 전송 시에도 유실되지 않습니다.
    - 새 메시지가 저장되면 'conversation_updated' 이벤트를 발행합니다.
    """
    def __init__(self, conversations_store: DocumentStore, user_service: UserService,
                 notification_service: NotificationService, max_message_length: int = MAX_COMMENT_LENGTH):
        self.conversations_store = conversations_store
        self.user_service = user_service
        self.notification_service = notification_service
        self.max_message_length = max_message_length

    def get_or_create_conversation(self, current_user_id: str, other_user_id: str) -> Dict[str, Any]:
        """두 사용자 사이의 대화방을 찾고, 없으면 새로 생성합니다."""
        if current_user_id == other_user_id:
            raise ValidationError("자기 자신과는 대화방을 만들 수 없습니다.")

        # 두 사용자 쌍의 키를 문서 ID 로 사용하므로 동시에 요청해도 대화방은 하나만 생성된다
        key = participant_key(current_user_id, other_user_id)
        conversation = Conversation(
            conversation_id=key,
            participants=[current_user_id, other_user_id],
            participant_key=key,
        )
        data, created = self.conversations_store.get_or_create(key, asdict(conversation))
        if created:
            logging.info(f"대화방 생성 완료 (conversation_id: {key})")
        return self.expand_conversation(data)

    def list_conversations(self, user_id: str) -> List[Dict[str, Any]]:
        """현재 사용자가 참여한 대화방을 최근 활동순으로 조회합니다."""
        docs = self.conversations_store.query(
            filters=[('participants', 'array_contains', user_id)], order_by='updated_at', descending=True
        )
        return self.expand_conversations(docs)

    def get_conversation(self, conversation_id: str, user_id: str) -> Dict[str, Any]:
        data = self.conversations_store.get(conversation_id)
        if data is None:
            raise NotFoundError("대화방을 찾을 수 없습니다.")
        if user_id not in data.get('participants', []):
            raise AuthorizationError("대화방에 접근할 권한이 없습니다.")
        return self.expand_conversation(data)

    def send_message(self, conversation_id: str, user_id: str, text: str) -> Dict[str, Any]:
        """대화방에 메시지를 추가하고, 참여자들에게 변경을 알립니다."""
        cleaned = clean_text(text, self.max_message_length)

        def _append(data: Dict[str, Any]) -> Dict[str, Any]:
            if user_id not in data.get('participants', []):
                raise AuthorizationError("대화방에 접근할 권한이 없습니다.")
            now = DateTimeUtils.now()
            message = Message(message_id=str(uuid.uuid4()), from_id=user_id, text=cleaned, created_at=now)
            data.setdefault('messages', []).append(asdict(message))
            data['updated_at'] = now
            return data

        saved = self.conversations_store.update(conversation_id, _append)
        expanded = self.expand_conversation(saved)
        logging.info(f"메시지 전송 완료 (conversation_id: {conversation_id}, user_id: {user_id})")

        try:
            payload = ConversationResponseSchema().dump(expanded)
            self.notification_service.publish(conversation_id, payload, event="conversation_updated")
        except Exception as e:
            logging.error(f"대화방 변경 알림 실패 (conversation_id: {conversation_id}): {e}", exc_info=True)
        return expanded

    def expand_conversation(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.expand_conversations([data])[0]

    def expand_conversations(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """참여자와 메시지 발신자의 요약 정보를 한 번에 조회하여 채워 넣습니다."""
        user_ids = set()
        for data in docs:
            user_ids.update(data.get('participants', []))
            user_ids.update(message['from_id'] for message in data.get('messages', []))
        summaries = self.user_service.get_summaries(user_ids)

        return [{
            "conversation_id": data['conversation_id'],
            "participants": [summaries[user_id] for user_id in data.get('participants', [])],
            "messages": [{
                "message_id": message['message_id'],
                "from_user": summaries[message['from_id']],
                "text": message['text'],
                "created_at": message['created_at'],
            } for message in data.get('messages', [])],
            "created_at": data['created_at'],
            "updated_at": data['updated_at'],
            "version": data.get('version', 0),
        } for data in docs]
