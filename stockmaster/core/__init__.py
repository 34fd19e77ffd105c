# stockmaster/core/__init__.py

"""
애플리케이션 전반에서 사용되는 공통 구성요소 패키지입니다.

- config.py: 환경 변수 기반 설정
- database.py: 비동기 엔진 및 세션 관리
- crud_base.py: 공통 CRUD 기본 클래스
- security.py: 비밀번호 해싱, JWT, 역할 기반 권한 검사
- dependencies.py: FastAPI 의존성 모음
- exceptions.py: 공통 오류 응답(JSON envelope) 핸들러
- tasks.py: ARQ 워커 공통 태스크
"""
