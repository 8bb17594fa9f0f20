# app/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 한곳에서 노출하는 모듈입니다.

- 데이터베이스 세션 (get_session).
- 현재 인증된 사용자 및 테넌트 컨텍스트.
- 권한/요금제 검사 의존성 팩토리 (require_permission).
- 주입 가능한 시계 (get_clock).
"""

# flake8: noqa
from app.core.database import get_session
from app.core.clock import Clock, get_clock
from app.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    oauth2_scheme,
    get_current_user_from_token,
    get_current_active_user,
    get_tenant_context,
    require_permission,
    TenantContext,
)
