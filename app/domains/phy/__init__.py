# app/domains/phy/__init__.py

"""
FastAPI 애플리케이션의 'phy' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'phy' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'phy' 도메인은 의학 물리 시험(품질 관리, 불변성 시험, 방사선 측정 등)을 관리합니다.
교정 정비가 해결되면 해당 설비의 완료된 시험은 무효화되어 재예약이 필요합니다.
"""

# 이벤트 핸들러를 이벤트 버스에 등록합니다 (임포트 시점에 구독).
from . import handlers  # noqa: F401

# 패키지 메타데이터
__title__ = "BioMed Medical Physics Domain"
__description__ = "Medical-physics compliance tests and their invalidation rule."
__version__ = "0.1.0"
