# app/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from app.api.comments.schemas import CommentResponseSchema
from app.api.users.schemas import AuthorSchema

# --- API 요청/응답 스키마 ---

class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문의 유효성을 검사합니다."""
    # 길이 검사는 공백 제거 후 PostService 에서 MAX_POST_LENGTH 기준으로 수행합니다.
    content = fields.Str(load_default="")
    image_url = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=2048))

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not (data.get('content') or "").strip() and not data.get('image_url'):
            raise ValidationError("게시물 내용 또는 이미지 중 하나는 필요합니다.", "content")

class PaginationSchema(Schema):
    current_page = fields.Int(required=True)
    total_pages = fields.Int(required=True)
    total_posts = fields.Int(required=True)
    has_more = fields.Bool(required=True)

class PostResponseSchema(Schema):
    """게시글 정보 응답을 위한 최종 JSON 형식을 정의합니다. 댓글 트리 전체를 포함합니다."""
    post_id = fields.Str(dump_only=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.Str(required=True)
    image_url = fields.Str(allow_none=True)
    likes = fields.List(fields.Str(), required=True)
    like_count = fields.Int(required=True)
    comments = fields.List(fields.Nested(CommentResponseSchema), required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    version = fields.Int(required=True)
    is_liked = fields.Bool(dump_only=True, dump_default=False)

class PostListResponseSchema(Schema):
    posts = fields.List(fields.Nested(PostResponseSchema), required=True)
    pagination = fields.Nested(PaginationSchema, required=True)
