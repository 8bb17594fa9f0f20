# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'usr' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'usr' 도메인은 테넌트(병원/기관)와 사용자, 로그인 토큰 발급을 관리합니다.
각 테넌트는 요금제(plan)를 가지며, 작업 지시서 일련번호 카운터를 보관합니다.
"""

# 패키지 메타데이터
__title__ = "BioMed Users & Tenants Domain"
__description__ = "Tenants, users, roles and bearer-token login."
__version__ = "0.1.0"
