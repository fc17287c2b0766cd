# app/api/posts/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.posts.schemas import PostCreateSchema, PostResponseSchema, PostListResponseSchema

posts_bp = Blueprint('posts_bp', __name__)


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """새 게시물을 작성합니다. 내용 또는 이미지 URL 중 하나는 필수입니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    try:
        data = PostCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    new_post = post_service.create_post(user_id, data['content'], data['image_url'])
    return jsonify(PostResponseSchema().dump(new_post)), 201


@posts_bp.route('', methods=['GET'])
@jwt_required()
def get_feed():
    """전체 피드를 최신순으로 페이지 단위 조회합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['FEED_PAGE_SIZE'], type=int)
    try:
        posts, pagination = post_service.get_feed(user_id, page, limit)
        return jsonify(PostListResponseSchema().dump({"posts": posts, "pagination": pagination})), 200
    except Exception as e:
        logging.error(f"피드 조회 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "피드 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/user/<string:author_id>', methods=['GET'])
@jwt_required()
def get_user_posts(author_id: str):
    """특정 사용자가 작성한 게시물을 최신순으로 조회합니다."""
    post_service = current_app.services['posts']
    user_id = get_jwt_identity()
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', current_app.config['FEED_PAGE_SIZE'], type=int)
    try:
        posts, pagination = post_service.get_user_posts(author_id, user_id, page, limit)
        return jsonify(PostListResponseSchema().dump({"posts": posts, "pagination": pagination})), 200
    except Exception as e:
        logging.error(f"사용자 게시물 조회 중 오류 발생 (author_id: {author_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "게시물 조회 중 오류가 발생했습니다."}), 500


@posts_bp.route('/<string:post_id>', methods=['GET'])
@jwt_required()
def get_post(post_id: str):
    post_service = current_app.services['posts']
    post = post_service.get_post(post_id, get_jwt_identity())
    return jsonify(PostResponseSchema().dump(post)), 200


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """게시물을 삭제합니다. (작성자 본인만 가능)"""
    post_service = current_app.services['posts']
    post_service.delete_post(post_id, get_jwt_identity())
    return jsonify({"message": "게시물이 삭제되었습니다."}), 200


@posts_bp.route('/like/<string:post_id>', methods=['PUT'])
@jwt_required()
def toggle_like(post_id: str):
    """좋아요를 누르거나 취소하고, 갱신된 게시물 전체를 반환합니다."""
    post_service = current_app.services['posts']
    post = post_service.toggle_like(post_id, get_jwt_identity())
    return jsonify(PostResponseSchema().dump(post)), 200
