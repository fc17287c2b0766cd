# app/api/posts/services.py
import logging
import math
import uuid
from typing import Optional, Dict, Any, Tuple, List

from app.api.posts.schemas import PostResponseSchema
from app.api.users.services import UserService
from app.core.comment_tree import collect_author_ids
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.post import Post, Comment, Reply
from app.services.document_store import DocumentStore
from app.services.notification_service import NotificationService

MAX_PAGE_SIZE = 50


class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 게시물 CRUD, 좋아요 토글, 피드 페이지네이션을 포함합니다.
    - 모든 응답은 작성자 요약 정보가 채워진(확장된) 게시물 딕셔너리입니다.
    """
    def __init__(self, posts_store: DocumentStore, user_service: UserService,
                 notification_service: NotificationService, max_post_length: int = 2000):
        self.posts_store = posts_store
        self.user_service = user_service
        self.notification_service = notification_service
        self.max_post_length = max_post_length

    def create_post(self, user_id: str, content: str, image_url: Optional[str]) -> Dict[str, Any]:
        """새로운 게시글을 생성하고 저장합니다."""
        content = (content or "").strip()
        if not content and not image_url:
            raise ValidationError("게시물 내용 또는 이미지 중 하나는 필요합니다.")
        if len(content) > self.max_post_length:
            raise ValidationError(f"게시물은 {self.max_post_length}자 이하여야 합니다.")

        post = Post(post_id=str(uuid.uuid4()), author_id=user_id, content=content, image_url=image_url or None)
        self.posts_store.set(post.post_id, post.to_dict())
        logging.info(f"게시글 생성 완료 (post_id: {post.post_id}, user_id: {user_id})")
        return self.expand_post(post, user_id)

    def get_feed(self, viewer_id: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """최신순 전체 피드를 페이지 단위로 조회합니다."""
        return self._paginate(viewer_id, [], page, limit)

    def get_user_posts(self, user_id: str, viewer_id: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """특정 사용자가 작성한 게시글을 최신순으로 조회합니다."""
        return self._paginate(viewer_id, [('author_id', '==', user_id)], page, limit)

    def _paginate(self, viewer_id, filters, page: int, limit: int):
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        skip = (page - 1) * limit

        docs = self.posts_store.query(filters=filters, order_by='created_at', descending=True, offset=skip, limit=limit)
        total = self.posts_store.count(filters=filters)
        posts = self.expand_posts([Post.from_dict(doc) for doc in docs], viewer_id)

        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "total_posts": total,
            "has_more": skip + len(posts) < total,
        }
        return posts, pagination

    def load_post(self, post_id: str) -> Post:
        data = self.posts_store.get(post_id)
        if data is None:
            raise NotFoundError("게시물을 찾을 수 없습니다.")
        return Post.from_dict(data)

    def get_post(self, post_id: str, viewer_id: str) -> Dict[str, Any]:
        return self.expand_post(self.load_post(post_id), viewer_id)

    def delete_post(self, post_id: str, user_id: str) -> None:
        post = self.load_post(post_id)
        if post.author_id != user_id:
            raise AuthorizationError("게시물을 삭제할 권한이 없습니다.")
        self.posts_store.delete(post_id)
        logging.info(f"게시글 삭제 완료 (post_id: {post_id}, user_id: {user_id})")

    def toggle_like(self, post_id: str, user_id: str) -> Dict[str, Any]:
        """좋아요를 누르거나 취소합니다. 읽기-수정-쓰기는 저장소 트랜잭션 안에서 수행됩니다."""
        def _toggle(data: Dict[str, Any]) -> Dict[str, Any]:
            likes = data.get('likes') or []
            if user_id in likes:
                likes.remove(user_id)
            else:
                likes.append(user_id)
            data['likes'] = likes
            return data

        saved = Post.from_dict(self.posts_store.update(post_id, _toggle))
        expanded = self.expand_post(saved, user_id)
        self.publish(expanded)
        return expanded

    def publish(self, expanded_post: Dict[str, Any]) -> None:
        """변경된 게시물을 구독 중인 클라이언트에게 알립니다. 실패는 로그로만 남깁니다."""
        try:
            payload = PostResponseSchema(exclude=('is_liked',)).dump(expanded_post)
            self.notification_service.publish(expanded_post['post_id'], payload, event="post_updated")
        except Exception as e:
            logging.error(f"게시물 변경 알림 실패 (post_id: {expanded_post.get('post_id')}): {e}", exc_info=True)

    # --- 응답 확장 로직 ---
    def expand_post(self, post: Post, viewer_id: Optional[str]) -> Dict[str, Any]:
        return self.expand_posts([post], viewer_id)[0]

    def expand_posts(self, posts: List[Post], viewer_id: Optional[str]) -> List[Dict[str, Any]]:
        """
        게시물들의 모든 작성자 ID(깊이 무관)를 모아 한 번에 조회한 뒤,
        게시물/댓글/답글 각각에 작성자 요약 정보를 채워 넣습니다.
        """
        author_ids = set()
        for post in posts:
            author_ids.update(collect_author_ids(post))
        authors = self.user_service.get_summaries(author_ids)

        return [{
            "post_id": post.post_id,
            "author": authors[post.author_id],
            "content": post.content,
            "image_url": post.image_url,
            "likes": list(post.likes),
            "like_count": len(post.likes),
            "is_liked": viewer_id in post.likes if viewer_id else False,
            "comments": [self._expand_comment(comment, authors) for comment in post.comments],
            "created_at": post.created_at,
            "updated_at": post.updated_at,
            "version": post.version,
        } for post in posts]

    def _expand_comment(self, comment: Comment, authors: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "comment_id": comment.comment_id,
            "author": authors[comment.author_id],
            "text": comment.text,
            "created_at": comment.created_at,
            "replies": self._expand_replies(comment.replies, authors),
        }

    def _expand_replies(self, replies: List[Reply], authors: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
        # 스택으로 순회하며 각 노드의 딕셔너리를 부모의 replies 리스트에 연결.
        # 결과는 스키마를 거치지 않고 그대로 응답에 실리므로 시각은 ISO 문자열로 변환한다.
        expanded: List[Dict[str, Any]] = []
        stack = [(reply, expanded) for reply in reversed(replies)]
        while stack:
            reply, target = stack.pop()
            node = {
                "reply_id": reply.reply_id,
                "author": authors[reply.author_id],
                "text": reply.text,
                "created_at": reply.created_at.isoformat(),
                "replies": [],
            }
            target.append(node)
            stack.extend((child, node["replies"]) for child in reversed(reply.replies))
        return expanded
