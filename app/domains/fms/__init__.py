# app/domains/fms/__init__.py

"""
FastAPI 애플리케이션의 'fms' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'fms' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'fms' 도메인은 의료기기(설비)와 설비 유형을 관리합니다.
설비의 위험 등급(A/B/C)은 고장 접수 SLA와 비상 계획 필수 여부를 결정합니다.
"""

# 패키지 메타데이터
__title__ = "BioMed Equipment Domain"
__description__ = "Medical equipment registry with criticality and status."
__version__ = "0.1.0"
