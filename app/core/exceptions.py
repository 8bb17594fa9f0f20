# app/core/exceptions.py

"""
정비 엔진의 도메인 예외 계층을 정의하는 모듈입니다.

서비스 계층은 FastAPI에 의존하지 않고 이 예외들을 발생시키며,
main.py에 등록된 예외 핸들러가 이를 `{"error": "..."}` JSON 응답으로 변환합니다.
"""

from fastapi import status


class DomainError(Exception):
    """모든 도메인 오류의 기반 클래스. 사용자에게 보여줄 메시지와 HTTP 상태 코드를 가집니다."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """필수 값 누락, 잘못된 상태 전이, 요금제 미허용 유형 등."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    """레코드가 없거나 다른 테넌트 소유인 경우 (두 경우 모두 같은 메시지)."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN

