# stockmaster/domains/ven/__init__.py

"""
FastAPI 애플리케이션의 'ven' (공급업체) 도메인 패키지입니다.
입고(Receipt) 문서가 참조하는 공급업체 마스터를 관리합니다.
"""

__title__ = "Stock Master Supplier Domain"
__description__ = "Manages suppliers referenced by goods receipts."
__version__ = "0.1.0"
__all__ = []
