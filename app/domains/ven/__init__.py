# app/domains/ven/__init__.py

"""
FastAPI 애플리케이션의 'ven' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'ven' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'ven' 도메인은 정비/교정/시험을 수행하는 외부 공급업체를 관리합니다.
"""

# 패키지 메타데이터
__title__ = "BioMed Providers Domain"
__description__ = "External service providers referenced by service records."
__version__ = "0.1.0"
