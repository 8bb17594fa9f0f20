# app/domains/mnt/__init__.py

"""
FastAPI 애플리케이션의 'mnt' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'mnt' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'mnt' 도메인은 정비 수명주기 엔진의 중심입니다.

주요 서브모듈:
- `models.py`, `schemas.py`, `crud.py`, `routers.py`: 표준 도메인 구성.
- `services.py`: 상태 전이, 주기 재생성, 일괄 작업, 작업 지시서 발번.
- `periodicity.py`, `sla.py`, `reliability.py`, `lifecycle.py`: DB에 의존하지 않는 계산 모듈.
- `events.py`: 다른 도메인이 구독하는 도메인 이벤트.
"""

# 패키지 메타데이터
__title__ = "BioMed Maintenance Lifecycle Domain"
__description__ = "Preventive maintenance, corrective tickets, service orders and checklists."
__version__ = "0.1.0"
