# app/api/users/schemas.py
from marshmallow import Schema, fields, validate


class AuthorSchema(Schema):
    """게시물, 댓글, 답글, 메시지 응답에 포함될 작성자 요약 정보 스키마."""
    user_id = fields.Str(required=True)
    username = fields.Str(allow_none=True)
    avatar = fields.Str(allow_none=True)


class ProfileUpdateSchema(Schema):
    """
    PUT /api/users/me
    공개 프로필 생성/갱신 요청 본문의 유효성을 검사하는 스키마.
    """
    username = fields.Str(required=True, validate=validate.Length(min=1, max=50),
                          error_messages={"required": "username은 필수 항목입니다."})
    avatar = fields.Str(allow_none=True, validate=validate.Length(max=2048))
    bio = fields.Str(validate=validate.Length(max=500))


class UserSummarySchema(Schema):
    """사용자 목록/검색/팔로워 목록의 항목 스키마."""
    user_id = fields.Str(required=True)
    username = fields.Str(allow_none=True)
    avatar = fields.Str(allow_none=True)
    bio = fields.Str()


class UserPublicResponseSchema(UserSummarySchema):
    """
    GET /api/users/{user_id}
    다른 사용자의 공개 프로필 정보를 응답할 때 사용하는 스키마.
    """
    join_date = fields.DateTime()
    followers_count = fields.Int(dump_default=0)
    following_count = fields.Int(dump_default=0)
    is_following = fields.Bool(dump_default=False)


class FollowResponseSchema(Schema):
    """팔로우/언팔로우 결과."""
    message = fields.Str()
    following = fields.Bool(required=True)
    followers_count = fields.Int(required=True)
