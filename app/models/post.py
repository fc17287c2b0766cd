# app/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from app.utils.datetime_utils import DateTimeUtils


@dataclass
class Reply:
    """
    답글 노드. 자신의 하위 답글(replies)을 순서대로 소유하며 깊이 제한이 없는 트리를 이룹니다.
    """
    reply_id: str
    author_id: str
    text: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    replies: List['Reply'] = field(default_factory=list)


@dataclass
class Comment:
    """게시물에 직접 달린 최상위 댓글. 답글 트리의 루트입니다."""
    comment_id: str
    author_id: str
    text: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    replies: List[Reply] = field(default_factory=list)


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    댓글 트리는 저장 시 comment_nodes 라는 평탄화된 목록으로 변환됩니다.
    """
    post_id: str
    author_id: str
    content: str = ""
    image_url: Optional[str] = None
    likes: List[str] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
    version: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "post_id": self.post_id,
            "author_id": self.author_id,
            "content": self.content,
            "image_url": self.image_url,
            "likes": list(self.likes),
            "comment_nodes": flatten_comments(self.comments),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Post':
        return cls(
            post_id=data["post_id"],
            author_id=data["author_id"],
            content=data.get("content") or "",
            image_url=data.get("image_url") or None,
            likes=list(data.get("likes") or []),
            comments=build_comment_tree(data.get("comment_nodes") or []),
            created_at=DateTimeUtils.validate_datetime_field(data.get("created_at"), "created_at"),
            updated_at=DateTimeUtils.validate_datetime_field(
                data.get("updated_at") or data.get("created_at"), "updated_at"
            ),
            version=int(data.get("version") or 0),
        )


def flatten_comments(comments: List[Comment]) -> List[Dict[str, Any]]:
    """
    댓글 트리를 전위 순회(pre-order) 순서의 평탄한 노드 목록으로 변환합니다.
    부모 노드는 항상 자식보다 먼저 나오므로 build_comment_tree 로 그대로 복원됩니다.
    Firestore 의 중첩 깊이 제한(20단계)을 피하기 위해 트리를 그대로 저장하지 않습니다.
    """
    nodes = []
    stack = [(comment, None) for comment in reversed(comments)]
    while stack:
        node, parent_id = stack.pop()
        node_id = node.comment_id if isinstance(node, Comment) else node.reply_id
        nodes.append({
            "node_id": node_id,
            "parent_id": parent_id,
            "author_id": node.author_id,
            "text": node.text,
            "created_at": node.created_at,
        })
        stack.extend((child, node_id) for child in reversed(node.replies))
    return nodes


def build_comment_tree(nodes: List[Dict[str, Any]]) -> List[Comment]:
    """평탄화된 노드 목록을 parent_id 기준으로 연결하여 댓글 트리를 복원합니다."""
    comments: List[Comment] = []
    by_id: Dict[str, Any] = {}
    for raw in nodes:
        node_id = raw["node_id"]
        if node_id in by_id:
            raise ValueError(f"중복된 댓글 노드 ID 입니다: {node_id}")
        created_at = DateTimeUtils.validate_datetime_field(raw.get("created_at"), "created_at")
        parent_id = raw.get("parent_id")
        if parent_id is None:
            node = Comment(comment_id=node_id, author_id=raw["author_id"], text=raw["text"], created_at=created_at)
            comments.append(node)
        else:
            parent = by_id.get(parent_id)
            if parent is None:
                raise ValueError(f"부모 노드를 찾을 수 없습니다: {node_id} -> {parent_id}")
            node = Reply(reply_id=node_id, author_id=raw["author_id"], text=raw["text"], created_at=created_at)
            parent.replies.append(node)
        by_id[node_id] = node
    return comments
