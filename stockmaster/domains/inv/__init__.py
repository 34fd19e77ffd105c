# stockmaster/domains/inv/__init__.py

"""
FastAPI 애플리케이션의 'inv' (재고) 도메인 패키지입니다.

제품 마스터와 위치별 재고, 재고 원장, 입고 문서를 관리합니다.
재고 수량 변경은 모두 `services.py`의 재고 엔진을 거칩니다.
"""

__title__ = "Stock Master Inventory Domain"
__description__ = "Products, per-location stock, the stock ledger and receipts."
__version__ = "0.1.0"
__all__ = []
