# app/core/rate_limit.py

"""
slowapi 기반 요청 제한기 모듈입니다.

공개 QR 신고처럼 인증 없이 호출되는 엔드포인트에서 사용하며,
키는 클라이언트 IP가 아니라 경로의 설비 ID입니다 (설비당 시간창 제한).
저장소는 프로세스 메모리이므로 다중 워커 환경에서는 워커별로 따로 계산됩니다.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from app.core.config import settings

RATE_LIMITED_MESSAGE = "Muitas tentativas. Aguarde antes de reportar novamente."

# 예: "5/3600 seconds"
PUBLIC_REPORT_RATE = f"{settings.PUBLIC_REPORT_LIMIT}/{settings.PUBLIC_REPORT_WINDOW_SECONDS} seconds"

limiter = Limiter(key_func=get_remote_address)


def equipment_key(request: Request) -> str:
    """경로 파라미터의 설비 ID로 제한 키를 만듭니다."""
    return f"public-report:{request.path_params.get('equipment_id')}"
