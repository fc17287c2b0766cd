# app/core/comment_tree.py
"""
게시물 한 건의 댓글/답글 트리를 조작하는 순수 로직 모듈.

- 모든 함수는 이미 로드된 Post 객체를 제자리에서(in-place) 변경하고 그 Post 를 반환합니다.
- 영속화(저장)와 알림은 호출자(CommentService)의 책임입니다.
- 트리 깊이에 제한이 없으므로 탐색은 재귀 대신 명시적 스택으로 수행합니다.
"""
import uuid
from datetime import datetime
from typing import Iterator, List, Optional, Set, Tuple, Union

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.post import Comment, Post, Reply
from app.utils.datetime_utils import DateTimeUtils

MAX_COMMENT_LENGTH = 1000

Node = Union[Comment, Reply]


def clean_text(text: Optional[str], max_length: int = MAX_COMMENT_LENGTH) -> str:
    """앞뒤 공백을 제거한 본문을 반환합니다. 비어 있거나 너무 길면 ValidationError."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValidationError("내용을 입력해주세요.")
    if len(cleaned) > max_length:
        raise ValidationError(f"내용은 {max_length}자 이하여야 합니다.")
    return cleaned


def _new_reply(author_id: str, text: str, now: Optional[datetime]) -> Reply:
    return Reply(reply_id=str(uuid.uuid4()), author_id=author_id, text=text, created_at=now or DateTimeUtils.now())


def find_comment(post: Post, comment_id: str) -> Comment:
    """최상위 댓글만 대상으로 ID 를 찾습니다."""
    for comment in post.comments:
        if comment.comment_id == comment_id:
            return comment
    raise NotFoundError("댓글을 찾을 수 없습니다.")


def iter_replies(replies: List[Reply]) -> Iterator[Tuple[List[Reply], int, Reply]]:
    """
    답글 숲을 전위 순회(노드 방문 후 자식들을 순서대로)하며
    (노드를 소유한 리스트, 인덱스, 노드) 를 생성합니다.
    """
    stack = [(replies, i) for i in reversed(range(len(replies)))]
    while stack:
        siblings, index = stack.pop()
        reply = siblings[index]
        yield siblings, index, reply
        stack.extend((reply.replies, i) for i in reversed(range(len(reply.replies))))


def find_reply(replies: List[Reply], reply_id: str) -> Optional[Reply]:
    """전위 순회에서 처음 일치하는 답글을 반환합니다."""
    for _, _, reply in iter_replies(replies):
        if reply.reply_id == reply_id:
            return reply
    return None


def _locate_reply(replies: List[Reply], reply_id: str) -> Optional[Tuple[List[Reply], int]]:
    for siblings, index, reply in iter_replies(replies):
        if reply.reply_id == reply_id:
            return siblings, index
    return None


def add_comment(post: Post, author_id: str, text: str,
                max_length: int = MAX_COMMENT_LENGTH, now: Optional[datetime] = None) -> Post:
    cleaned = clean_text(text, max_length)
    post.comments.append(Comment(
        comment_id=str(uuid.uuid4()),
        author_id=author_id,
        text=cleaned,
        created_at=now or DateTimeUtils.now(),
    ))
    return post


def add_reply(post: Post, comment_id: str, author_id: str, text: str,
              max_length: int = MAX_COMMENT_LENGTH, now: Optional[datetime] = None) -> Post:
    cleaned = clean_text(text, max_length)
    comment = find_comment(post, comment_id)
    comment.replies.append(_new_reply(author_id, cleaned, now))
    return post


def add_nested_reply(post: Post, comment_id: str, parent_reply_id: str, author_id: str, text: str,
                     max_length: int = MAX_COMMENT_LENGTH, now: Optional[datetime] = None) -> Post:
    cleaned = clean_text(text, max_length)
    comment = find_comment(post, comment_id)
    parent = find_reply(comment.replies, parent_reply_id)
    if parent is None:
        raise NotFoundError("상위 답글을 찾을 수 없습니다.")
    parent.replies.append(_new_reply(author_id, cleaned, now))
    return post


def delete_comment(post: Post, comment_id: str, acting_user_id: str) -> Post:
    for index, comment in enumerate(post.comments):
        if comment.comment_id == comment_id:
            if comment.author_id != acting_user_id:
                raise AuthorizationError("댓글을 삭제할 권한이 없습니다.")
            del post.comments[index]
            return post
    raise NotFoundError("댓글을 찾을 수 없습니다.")


def delete_reply(post: Post, comment_id: str, reply_id: str, acting_user_id: str) -> Post:
    comment = find_comment(post, comment_id)
    location = _locate_reply(comment.replies, reply_id)
    if location is None:
        raise NotFoundError("답글을 찾을 수 없습니다.")
    siblings, index = location
    # 권한 확인은 삭제 대상 노드 기준, 변경 전에 수행
    if siblings[index].author_id != acting_user_id:
        raise AuthorizationError("답글을 삭제할 권한이 없습니다.")
    del siblings[index]
    return post


def iter_nodes(post: Post) -> Iterator[Node]:
    """게시물의 모든 댓글과 답글을 전위 순서로 순회합니다."""
    for comment in post.comments:
        yield comment
        for _, _, reply in iter_replies(comment.replies):
            yield reply


def collect_author_ids(post: Post) -> Set[str]:
    """게시물 작성자와 트리 전체(깊이 무관)의 작성자 ID 집합."""
    author_ids = {post.author_id}
    author_ids.update(node.author_id for node in iter_nodes(post))
    return author_ids
