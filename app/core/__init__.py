# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

여러 도메인이 함께 사용하는 기능을 모아 둡니다:

- `config.py`: 애플리케이션 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 비동기 엔진, 요청별 세션, 트랜잭션 블록(atomic).
- `security.py`: 비밀번호 해싱, JWT 발급/검증, 테넌트 컨텍스트.
- `permissions.py`: 역할별 권한 맵과 요금제별 기능 제한.
- `dependencies.py`: 라우터에서 사용하는 공통 의존성 함수.
- `clock.py`, `events.py`, `rate_limit.py`, `exceptions.py`: 시계, 이벤트 버스, 요청 제한기, 도메인 예외.
- `crud_base.py`: 테넌트 범위 CRUD 기본 클래스.
"""

# 패키지 메타데이터
__title__ = "BioMed CMMS Core"
__description__ = "Core components for the maintenance lifecycle API."
__version__ = "0.1.0"
__all__ = []
