# app/services/notification_service.py
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from app.services.document_store import DocumentStore
from app.utils import json_utils
from app.utils.datetime_utils import DateTimeUtils


class NotificationService:
    """
    변경된 리소스를 관심 있는 클라이언트에게 알리는 공용 서비스 클래스.

    주제(topic)마다 'events' 컬렉션의 문서 하나를 최신 상태로 덮어씁니다.
    payload 는 JSON 문자열로 저장합니다. 답글 트리는 깊이 제한이 없지만 Firestore 맵은 20단계까지만 중첩됩니다.
    클라이언트는 해당 문서를 Firestore 실시간 리스너로 구독하여 화면을 갱신합니다.
    알림은 fire-and-forget 이며, 실패해도 호출한 변경 작업에는 영향을 주지 않습니다.
    """
    def __init__(self, events_store: DocumentStore, max_workers: int = 0):
        self.events_store = events_store
        # max_workers == 0 이면 호출한 스레드에서 바로 발행합니다 (테스트 환경)
        self.executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='notifier') if max_workers > 0 else None
        )

    def publish(self, topic_id: str, payload: Dict[str, Any], event: str = "post_updated") -> None:
        """
        :param topic_id: 구독 단위 ID (post_id, conversation_id 등)
        :param payload: 클라이언트에 전달할 직렬화된 리소스
        :param event: 이벤트 이름
        """
        if self.executor is not None:
            self.executor.submit(self._write_event, topic_id, payload, event)
        else:
            self._write_event(topic_id, payload, event)

    def _write_event(self, topic_id: str, payload: Dict[str, Any], event: str) -> None:
        try:
            self.events_store.set(topic_id, {
                "topic_id": topic_id,
                "event": event,
                "payload": json_utils.dumps(payload, ensure_ascii=False),
                "published_at": DateTimeUtils.now(),
            })
            logging.info(f"{event} 이벤트 발행 완료 (topic: {topic_id})")
        except Exception as e:
            logging.error(f"이벤트 발행 중 오류 발생 (topic: {topic_id}): {e}", exc_info=True)

    def shutdown(self) -> None:
        if self.executor is not None:
            self.executor.shutdown(wait=True)
