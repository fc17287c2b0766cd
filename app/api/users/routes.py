# app/api/users/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.users.schemas import (
    ProfileUpdateSchema, UserPublicResponseSchema, UserSummarySchema, FollowResponseSchema
)

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/me', methods=['PUT'])
@jwt_required()
def upsert_my_profile():
    """현재 로그인된 사용자의 공개 프로필(username, avatar, bio)을 저장합니다."""
    user_service = current_app.services['users']
    user_id = get_jwt_identity()
    try:
        data = ProfileUpdateSchema().load(request.get_json(silent=True) or {})
        profile = user_service.upsert_profile(user_id, data)
        return jsonify(UserPublicResponseSchema().dump(profile)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400


@users_bp.route('', methods=['GET'])
@jwt_required()
def list_users():
    """현재 사용자를 제외한 사용자 목록을 조회합니다."""
    user_service = current_app.services['users']
    users = user_service.list_users(get_jwt_identity())
    return jsonify(UserSummarySchema(many=True).dump(users)), 200


@users_bp.route('/search', methods=['GET'])
@jwt_required()
def search_users():
    """?q= 로 사용자 ID(정확히 일치) 또는 username(부분 일치)을 검색합니다."""
    user_service = current_app.services['users']
    users = user_service.search_users(request.args.get('q'))
    return jsonify(UserSummarySchema(many=True).dump(users)), 200


@users_bp.route('/<string:user_id>', methods=['GET'])
@jwt_required()
def get_user_profile(user_id: str):
    """특정 사용자의 공개 프로필 정보를 조회합니다. 팔로워/팔로잉 수와 팔로우 여부를 포함합니다."""
    user_service = current_app.services['users']
    try:
        user_profile = user_service.get_user_profile(user_id, get_jwt_identity())
        if not user_profile:
            return jsonify({"error_code": "USER_NOT_FOUND", "message": "사용자를 찾을 수 없습니다."}), 404
        return jsonify(UserPublicResponseSchema().dump(user_profile)), 200
    except Exception as e:
        logging.error(f"사용자 프로필 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "PROFILE_FETCH_FAILED", "message": "프로필 조회 중 오류가 발생했습니다."}), 500


@users_bp.route('/<string:user_id>/followers', methods=['GET'])
@jwt_required()
def get_followers(user_id: str):
    user_service = current_app.services['users']
    return jsonify(UserSummarySchema(many=True).dump(user_service.get_followers(user_id))), 200


@users_bp.route('/<string:user_id>/following', methods=['GET'])
@jwt_required()
def get_following(user_id: str):
    user_service = current_app.services['users']
    return jsonify(UserSummarySchema(many=True).dump(user_service.get_following(user_id))), 200


@users_bp.route('/<string:user_id>/follow', methods=['POST'])
@jwt_required()
def follow_user(user_id: str):
    """사용자를 팔로우합니다. 자기 자신이나 이미 팔로우 중인 사용자는 400."""
    user_service = current_app.services['users']
    result = user_service.follow(get_jwt_identity(), user_id)
    return jsonify(FollowResponseSchema().dump({"message": "팔로우했습니다.", **result})), 200


# 언팔로우는 DELETE /<id>/follow 와 POST /<id>/unfollow 두 경로 모두 지원
@users_bp.route('/<string:user_id>/follow', methods=['DELETE'])
@users_bp.route('/<string:user_id>/unfollow', methods=['POST'])
@jwt_required()
def unfollow_user(user_id: str):
    user_service = current_app.services['users']
    result = user_service.unfollow(get_jwt_identity(), user_id)
    return jsonify(FollowResponseSchema().dump({"message": "언팔로우했습니다.", **result})), 200
