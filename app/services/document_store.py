# app/services/document_store.py
"""
문서 저장소 추상화.

서비스 계층은 Firestore 클라이언트를 직접 다루지 않고 DocumentStore 를 주입받습니다.
- FirestoreDocumentStore: 운영 환경. 읽기-수정-쓰기를 Firestore 트랜잭션 안에서 수행합니다.
- InMemoryDocumentStore: 테스트/로컬 개발용. 잠금과 깊은 복사로 같은 원자성을 보장합니다.

update() 는 문서마다 version 필드를 1씩 증가시키며, mutator 가 예외를 던지면
저장된 문서는 전혀 변경되지 않습니다.
"""
import copy
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.exceptions import NotFoundError
from app.utils.datetime_utils import DateTimeUtils

Filter = Tuple[str, str, Any]
Mutator = Callable[[Dict[str, Any]], Dict[str, Any]]
# {doc_id: 문서} 를 받아 같은 형태로 반환
MultiMutator = Callable[[Dict[str, Dict[str, Any]]], Dict[str, Dict[str, Any]]]

SUPPORTED_OPERATORS = ('==', 'array_contains')


class DocumentStore:
    """컬렉션 하나를 다루는 저장소 인터페이스."""

    collection_name: str

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_many(self, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        raise NotImplementedError

    def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, doc_id: str) -> None:
        raise NotImplementedError

    def query(self, filters: Optional[List[Filter]] = None, order_by: Optional[str] = None,
              descending: bool = False, offset: int = 0, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def count(self, filters: Optional[List[Filter]] = None) -> int:
        raise NotImplementedError

    def update(self, doc_id: str, mutator: Mutator) -> Dict[str, Any]:
        """문서를 읽고 mutator 로 변경한 뒤 원자적으로 저장하고, 저장된 문서를 반환합니다."""
        raise NotImplementedError

    def update_many(self, doc_ids: Iterable[str], mutator: MultiMutator) -> Dict[str, Dict[str, Any]]:
        """
        여러 문서를 한 트랜잭션에서 읽고 변경합니다. (예: 팔로우 시 두 사용자 문서)
        하나라도 없으면 NotFoundError 이며 어떤 문서도 저장되지 않습니다.
        """
        raise NotImplementedError

    def get_or_create(self, doc_id: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        """문서가 없을 때만 data 로 생성합니다. (저장된 문서, 새로 생성했는지 여부) 를 반환합니다."""
        raise NotImplementedError

    def _not_found(self, doc_id: str) -> NotFoundError:
        return NotFoundError(f"{self.collection_name} 문서를 찾을 수 없습니다. (id: {doc_id})")


class FirestoreDocumentStore(DocumentStore):

    def __init__(self, collection_name: str, db=None):
        self.collection_name = collection_name
        self.db = db or firestore.client()
        self.collection_ref = self.db.collection(collection_name)

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self.collection_ref.document(doc_id).get()
        if not doc.exists:
            return None
        return DateTimeUtils.from_firestore(doc.to_dict())

    def get_many(self, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        refs = [self.collection_ref.document(doc_id) for doc_id in set(doc_ids)]
        if not refs:
            return {}
        return {
            doc.id: DateTimeUtils.from_firestore(doc.to_dict())
            for doc in self.db.get_all(refs) if doc.exists
        }

    def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        self.collection_ref.document(doc_id).set(DateTimeUtils.for_firestore(data))

    def delete(self, doc_id: str) -> None:
        self.collection_ref.document(doc_id).delete()

    def _build_query(self, filters: Optional[List[Filter]]):
        query = self.collection_ref
        for field_name, op, value in filters or []:
            query = query.where(filter=FieldFilter(field_name, op, value))
        return query

    def query(self, filters=None, order_by=None, descending=False, offset=0, limit=None):
        query = self._build_query(filters)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [DateTimeUtils.from_firestore(doc.to_dict()) for doc in query.stream()]

    def count(self, filters=None) -> int:
        results = self._build_query(filters).count().get()
        return int(results[0][0].value)

    def update(self, doc_id: str, mutator: Mutator) -> Dict[str, Any]:
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction, doc_ref):
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise self._not_found(doc_id)
            data = mutator(DateTimeUtils.from_firestore(snapshot.to_dict()))
            data['version'] = int(data.get('version') or 0) + 1
            transaction.set(doc_ref, DateTimeUtils.for_firestore(data))
            return data

        return _update_in_transaction(transaction, self.collection_ref.document(doc_id))

    def update_many(self, doc_ids, mutator):
        transaction = self.db.transaction()
        refs = {doc_id: self.collection_ref.document(doc_id) for doc_id in dict.fromkeys(doc_ids)}

        @firestore.transactional
        def _update_in_transaction(transaction):
            # 트랜잭션 안에서는 모든 읽기가 쓰기보다 먼저 와야 함
            documents = {}
            for doc_id, doc_ref in refs.items():
                snapshot = doc_ref.get(transaction=transaction)
                if not snapshot.exists:
                    raise self._not_found(doc_id)
                documents[doc_id] = DateTimeUtils.from_firestore(snapshot.to_dict())

            documents = mutator(documents)
            for doc_id, doc_ref in refs.items():
                data = documents[doc_id]
                data['version'] = int(data.get('version') or 0) + 1
                transaction.set(doc_ref, DateTimeUtils.for_firestore(data))
            return documents

        return _update_in_transaction(transaction)

    def get_or_create(self, doc_id, data):
        try:
            self.collection_ref.document(doc_id).create(DateTimeUtils.for_firestore(data))
            return data, True
        except AlreadyExists:
            return self.get(doc_id), False


class InMemoryDocumentStore(DocumentStore):

    def __init__(self, collection_name: str):
        self.collection_name = collection_name
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            doc = self._documents.get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def get_many(self, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {
                doc_id: copy.deepcopy(self._documents[doc_id])
                for doc_id in set(doc_ids) if doc_id in self._documents
            }

    def set(self, doc_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._write(doc_id, copy.deepcopy(data))

    def delete(self, doc_id: str) -> None:
        with self._lock:
            self._documents.pop(doc_id, None)

    def _write(self, doc_id: str, data: Dict[str, Any]) -> None:
        self._documents[doc_id] = data

    @staticmethod
    def _matches(doc: Dict[str, Any], filters: Optional[List[Filter]]) -> bool:
        for field_name, op, value in filters or []:
            if op not in SUPPORTED_OPERATORS:
                raise ValueError(f"지원하지 않는 필터 연산자입니다: {op}")
            actual = doc.get(field_name)
            if op == '==' and actual != value:
                return False
            if op == 'array_contains' and value not in (actual or []):
                return False
        return True

    def query(self, filters=None, order_by=None, descending=False, offset=0, limit=None):
        with self._lock:
            docs = [doc for doc in self._documents.values() if self._matches(doc, filters)]
            if order_by:
                docs.sort(key=lambda doc: doc.get(order_by), reverse=descending)
            end = None if limit is None else offset + limit
            return copy.deepcopy(docs[offset:end])

    def count(self, filters=None) -> int:
        with self._lock:
            return sum(1 for doc in self._documents.values() if self._matches(doc, filters))

    def update(self, doc_id: str, mutator: Mutator) -> Dict[str, Any]:
        with self._lock:
            current = self._documents.get(doc_id)
            if current is None:
                raise self._not_found(doc_id)
            data = mutator(copy.deepcopy(current))
            data['version'] = int(data.get('version') or 0) + 1
            self._write(doc_id, data)
            return copy.deepcopy(data)

    def update_many(self, doc_ids: Iterable[str], mutator: MultiMutator) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            ids = list(dict.fromkeys(doc_ids))
            for doc_id in ids:
                if doc_id not in self._documents:
                    raise self._not_found(doc_id)

            documents = mutator({doc_id: copy.deepcopy(self._documents[doc_id]) for doc_id in ids})
            previous = {doc_id: self._documents[doc_id] for doc_id in ids}
            try:
                for doc_id in ids:
                    data = documents[doc_id]
                    data['version'] = int(data.get('version') or 0) + 1
                    self._write(doc_id, data)
            except Exception:
                # 일부만 저장된 상태를 남기지 않도록 되돌림
                self._documents.update(previous)
                raise
            return copy.deepcopy(documents)

    def get_or_create(self, doc_id: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
        with self._lock:
            current = self._documents.get(doc_id)
            if current is not None:
                return copy.deepcopy(current), False
            self._write(doc_id, copy.deepcopy(data))
            return copy.deepcopy(data), True
