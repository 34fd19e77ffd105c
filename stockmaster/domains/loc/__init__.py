# stockmaster/domains/loc/__init__.py

"""
FastAPI 애플리케이션의 'loc' (창고/위치) 도메인 패키지입니다.

창고(Warehouse)와 그 하위 위치(Location)를 관리합니다.
재고는 위치 단위로 집계되며, 실제 재고 행은 'inv' 도메인이 소유합니다.
"""

__title__ = "Stock Master Location Domain"
__description__ = "Manages warehouses and the storage locations inside them."
__version__ = "0.1.0"
__all__ = []
