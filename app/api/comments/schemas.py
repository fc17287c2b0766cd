# app/api/comments/schemas.py
from marshmallow import Schema, fields
from app.api.users.schemas import AuthorSchema # 작성자 요약 정보는 사용자 스키마의 것을 재사용

class CommentCreateSchema(Schema):
    """
    POST /api/posts/comment/{post_id} 및 답글 작성 엔드포인트
    댓글/답글 생성을 요청할 때의 데이터 형식을 정의합니다.
    공백 제거 후의 빈 값/길이 검사는 서비스 계층(clean_text)에서 설정값 기준으로 수행합니다.
    """
    text = fields.Str(required=True, error_messages={"required": "text는 필수 항목입니다."})

class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.

    replies 는 PostService 가 스택으로 만든 JSON 형태의 답글 트리를 그대로 내보냅니다.
    각 답글은 {reply_id, author, text, created_at(ISO 8601), replies} 이며,
    깊이에 제한이 없으므로 스키마를 자기 자신으로 중첩하지 않습니다.
    """
    comment_id = fields.Str(required=True)
    author = fields.Nested(AuthorSchema, required=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
    replies = fields.Raw(dump_default=list)
