# tests/domains/__init__.py

"""
도메인별 통합 테스트 패키지입니다.
각 테스트는 새 인메모리 DB와 고정 시계(FIXED_NOW) 위에서 실제 로그인한 클라이언트로 API를 호출합니다.
"""
