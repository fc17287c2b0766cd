# app/api/conversations/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from app.api.conversations.schemas import MessageCreateSchema, ConversationResponseSchema

conversations_bp = Blueprint('conversations_bp', __name__)


@conversations_bp.route('/with/<string:user_id>', methods=['POST'])
@jwt_required()
def get_or_create_conversation(user_id: str):
    """다른 사용자와의 1:1 대화방을 조회하거나 새로 생성합니다."""
    conversation_service = current_app.services['conversations']
    conversation = conversation_service.get_or_create_conversation(get_jwt_identity(), user_id)
    return jsonify(ConversationResponseSchema().dump(conversation)), 200


@conversations_bp.route('', methods=['GET'])
@jwt_required()
def list_conversations():
    conversation_service = current_app.services['conversations']
    user_id = get_jwt_identity()
    try:
        conversations = conversation_service.list_conversations(user_id)
        return jsonify(ConversationResponseSchema(many=True).dump(conversations)), 200
    except Exception as e:
        logging.error(f"대화방 목록 조회 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "대화방 목록 조회 중 오류가 발생했습니다."}), 500


@conversations_bp.route('/<string:conversation_id>', methods=['GET'])
@jwt_required()
def get_conversation(conversation_id: str):
    """대화방과 전체 메시지를 조회합니다. (참여자만 가능)"""
    conversation_service = current_app.services['conversations']
    conversation = conversation_service.get_conversation(conversation_id, get_jwt_identity())
    return jsonify(ConversationResponseSchema().dump(conversation)), 200


@conversations_bp.route('/<string:conversation_id>/messages', methods=['POST'])
@jwt_required()
def send_message(conversation_id: str):
    """대화방에 메시지를 전송합니다. (참여자만 가능)"""
    conversation_service = current_app.services['conversations']
    try:
        data = MessageCreateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    conversation = conversation_service.send_message(conversation_id, get_jwt_identity(), data['text'])
    return jsonify(ConversationResponseSchema().dump(conversation)), 200
