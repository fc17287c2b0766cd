# app/api/conversations/schemas.py
from marshmallow import Schema, fields
from app.api.users.schemas import AuthorSchema

class MessageCreateSchema(Schema):
    """POST /api/chat/{conversation_id}/messages 요청 본문의 유효성을 검사합니다."""
    # 공백 제거 후의 빈 값/길이 검사는 서비스 계층에서 MAX_COMMENT_LENGTH 기준으로 수행합니다.
    text = fields.Str(required=True, error_messages={"required": "text는 필수 항목입니다."})

class MessageResponseSchema(Schema):
    message_id = fields.Str(required=True)
    from_user = fields.Nested(AuthorSchema, required=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)

class ConversationResponseSchema(Schema):
    """대화방 응답 스키마. 참여자와 메시지 발신자의 요약 정보를 포함합니다."""
    conversation_id = fields.Str(required=True)
    participants = fields.List(fields.Nested(AuthorSchema), required=True)
    messages = fields.List(fields.Nested(MessageResponseSchema), required=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(required=True)
    version = fields.Int(required=True)
