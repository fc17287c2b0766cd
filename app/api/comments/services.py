# app/api/comments/services.py

import logging
from typing import Any, Callable, Dict

from app.api.posts.services import PostService
from app.core import comment_tree
from app.models.post import Post


class CommentService:
    """
    댓글/답글 트리 변경을 담당하는 서비스 클래스.

    모든 변경은 한 번의 원자적 읽기-수정-쓰기로 수행됩니다.
    1. 저장소 트랜잭션 안에서 게시물을 읽어 트리를 변경하고 저장 (검증/권한 오류 시 아무것도 저장되지 않음)
    2. 저장이 끝난 뒤 변경된 게시물을 알림 서비스로 발행
    3. 작성자 정보가 모두 채워진 게시물 전체를 반환
    """
    def __init__(self, post_service: PostService, max_comment_length: int = comment_tree.MAX_COMMENT_LENGTH):
        self.post_service = post_service
        self.posts_store = post_service.posts_store
        self.max_comment_length = max_comment_length

    def _mutate(self, post_id: str, acting_user_id: str, operation: Callable[[Post], Any]) -> Dict[str, Any]:
        def _apply(data: Dict[str, Any]) -> Dict[str, Any]:
            post = Post.from_dict(data)
            operation(post)
            return post.to_dict()

        saved = Post.from_dict(self.posts_store.update(post_id, _apply))
        expanded = self.post_service.expand_post(saved, acting_user_id)
        self.post_service.publish(expanded)
        return expanded

    def add_comment(self, post_id: str, author_id: str, text: str) -> Dict[str, Any]:
        """게시물의 댓글 목록 맨 끝에 새 댓글을 추가합니다."""
        expanded = self._mutate(post_id, author_id, lambda post: comment_tree.add_comment(
            post, author_id, text, max_length=self.max_comment_length))
        logging.info(f"댓글 작성 완료 (post_id: {post_id}, user_id: {author_id})")
        return expanded

    def add_reply(self, post_id: str, comment_id: str, author_id: str, text: str) -> Dict[str, Any]:
        """최상위 댓글에 직접 답글을 추가합니다."""
        expanded = self._mutate(post_id, author_id, lambda post: comment_tree.add_reply(
            post, comment_id, author_id, text, max_length=self.max_comment_length))
        logging.info(f"답글 작성 완료 (post_id: {post_id}, comment_id: {comment_id}, user_id: {author_id})")
        return expanded

    def add_nested_reply(self, post_id: str, comment_id: str, parent_reply_id: str,
                         author_id: str, text: str) -> Dict[str, Any]:
        """댓글 아래 임의 깊이의 답글(parent_reply_id)에 하위 답글을 추가합니다."""
        expanded = self._mutate(post_id, author_id, lambda post: comment_tree.add_nested_reply(
            post, comment_id, parent_reply_id, author_id, text, max_length=self.max_comment_length))
        logging.info(f"중첩 답글 작성 완료 (post_id: {post_id}, parent_reply_id: {parent_reply_id}, user_id: {author_id})")
        return expanded

    def delete_comment(self, post_id: str, comment_id: str, acting_user_id: str) -> Dict[str, Any]:
        """댓글과 그 아래 모든 답글을 삭제합니다. (작성자 본인만 가능)"""
        expanded = self._mutate(post_id, acting_user_id, lambda post: comment_tree.delete_comment(
            post, comment_id, acting_user_id))
        logging.info(f"댓글 삭제 완료 (post_id: {post_id}, comment_id: {comment_id}, user_id: {acting_user_id})")
        return expanded

    def delete_reply(self, post_id: str, comment_id: str, reply_id: str, acting_user_id: str) -> Dict[str, Any]:
        """임의 깊이의 답글과 그 하위 트리를 삭제합니다. (작성자 본인만 가능)"""
        expanded = self._mutate(post_id, acting_user_id, lambda post: comment_tree.delete_reply(
            post, comment_id, reply_id, acting_user_id))
        logging.info(f"답글 삭제 완료 (post_id: {post_id}, reply_id: {reply_id}, user_id: {acting_user_id})")
        return expanded
