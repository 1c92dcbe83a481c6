class ApiError(Exception):
    """
    기본 API 예외의 최상위 클래스
    - 모든 커스텀 API 예외가 이 클래스를 상속
    - FastAPI의 예외 핸들러에 의해 {"error": message} 형태로 응답
    """
    def __init__(self, message: str):
        """
        - message: 사용자에게 전달할 예외 메시지 문자열
        """
        # 예외 메시지 설정
        self.message = message
        # 상위 Exception 초기화
        super().__init__(message)


class BadRequestError(ApiError):
    """400 Bad Request (입력값 검증 실패)"""
    pass


class NotFoundError(ApiError):
    """404 Not Found"""
    pass


class ConflictError(ApiError):
    """유니크 제약 위반 (이미 좋아요한 게시글 등)"""
    pass


class InternalServerError(ApiError):
    """500 Internal Server Error (내부 상세 정보는 노출하지 않음)"""
    pass
