# tests/__init__.py

"""
FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

- `core/`: DB에 의존하지 않는 계산 모듈(주기, SLA, 신뢰도, 요청 제한, 권한, 이벤트 버스) 단위 테스트.
- `domains/`: 각 도메인(usr, fms, ven, mnt, phy)의 API 및 서비스 통합 테스트.
- `conftest.py`: 인메모리 SQLite 엔진, 고정 시계, 역할별 인증 클라이언트 등 공용 픽스처.
"""

__title__ = "BioMed CMMS API Tests"
__version__ = "0.1.0"
__all__ = []
