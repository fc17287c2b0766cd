# app/api/comments/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.comments.schemas import CommentCreateSchema
from app.api.posts.schemas import PostResponseSchema

# 댓글 트리 관련 오류(400/403/404)는 app/__init__.py 의 전역 에러 핸들러가 JSON 으로 변환합니다.
comments_bp = Blueprint('comments_bp', __name__)


def _validation_error(err: ValidationError):
    return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


@comments_bp.route('/comment/<string:post_id>', methods=['POST'])
@jwt_required()
def add_comment(post_id: str):
    """특정 게시글에 새로운 댓글을 작성하고, 갱신된 게시물 전체를 반환합니다."""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    post = comment_service.add_comment(post_id, user_id, data['text'])
    return jsonify(PostResponseSchema().dump(post)), 200


@comments_bp.route('/comment/<string:post_id>/<string:comment_id>/reply', methods=['POST'])
@jwt_required()
def add_reply(post_id: str, comment_id: str):
    """최상위 댓글에 답글을 작성합니다."""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    post = comment_service.add_reply(post_id, comment_id, user_id, data['text'])
    return jsonify(PostResponseSchema().dump(post)), 200


@comments_bp.route('/comment/<string:post_id>/<string:comment_id>/reply/<string:reply_id>', methods=['POST'])
@jwt_required()
def add_nested_reply(post_id: str, comment_id: str, reply_id: str):
    """깊이에 상관없이 기존 답글에 하위 답글을 작성합니다."""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return _validation_error(err)
    post = comment_service.add_nested_reply(post_id, comment_id, reply_id, user_id, data['text'])
    return jsonify(PostResponseSchema().dump(post)), 200


@comments_bp.route('/comment/<string:post_id>/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(post_id: str, comment_id: str):
    """
    댓글을 삭제합니다. (작성자 본인만 가능)
    - 댓글 아래의 모든 답글도 함께 삭제됩니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    post = comment_service.delete_comment(post_id, comment_id, user_id)
    return jsonify(PostResponseSchema().dump(post)), 200


@comments_bp.route('/comment/<string:post_id>/<string:comment_id>/<string:reply_id>', methods=['DELETE'])
@comments_bp.route('/comment/<string:post_id>/<string:comment_id>/reply/<string:reply_id>', methods=['DELETE'])
@jwt_required()
def delete_reply(post_id: str, comment_id: str, reply_id: str):
    """깊이에 상관없이 답글과 그 하위 답글을 삭제합니다. (작성자 본인만 가능)"""
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    post = comment_service.delete_reply(post_id, comment_id, reply_id, user_id)
    return jsonify(PostResponseSchema().dump(post)), 200
