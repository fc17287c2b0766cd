# app/core/exceptions.py


class ChatterBoxError(Exception):
    """서비스 계층에서 발생하는 모든 도메인 예외의 기반 클래스."""
    error_code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class ValidationError(ChatterBoxError):
    """텍스트가 비어 있거나 허용 길이를 초과한 경우."""
    error_code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(ChatterBoxError):
    """게시물, 댓글, 답글(깊이 무관) 또는 대화방이 존재하지 않는 경우."""
    error_code = "RESOURCE_NOT_FOUND"
    status_code = 404


class AuthorizationError(ChatterBoxError):
    """요청한 사용자가 대상의 작성자(또는 참여자)가 아닌 경우."""
    error_code = "FORBIDDEN"
    status_code = 403
