# app/__init__.py

"""
의료기기 정비(임상공학) 관리 API의 메인 패키지입니다.

FastAPI 애플리케이션의 진입점 (main.py)과
공통 설정, 데이터베이스 연결, 보안/권한, 시계(clock), 도메인 이벤트를 담는 core 서브패키지,
그리고 각 비즈니스 도메인(usr, fms, ven, mnt, phy)을 대표하는 domains 서브패키지로 구성됩니다.
"""

APP_NAME = "BioMed CMMS API"
APP_VERSION = "0.1.0"
API_PREFIX = "/api/v1"  # API 라우트의 공통 접두사 (main.py에서 적용)

__version__ = APP_VERSION
__title__ = APP_NAME
__description__ = "Clinical engineering maintenance lifecycle & compliance API backend."
__all__ = []
