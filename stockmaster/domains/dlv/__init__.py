# stockmaster/domains/dlv/__init__.py

"""
FastAPI 애플리케이션의 'dlv' (고객/출고) 도메인 패키지입니다.

주요 서브모듈:
- `models.py`: Customer, DeliveryOrder, DeliveryOrderLine, DeliveryStatus.
- `services.py`: 상태 전이 표와 피킹/포장/출고 확정.
- `crud.py`, `schemas.py`, `routers.py`.
"""

__title__ = "Stock Master Delivery Domain"
__description__ = "Manages customers and outgoing delivery orders."
__version__ = "0.1.0"
__all__ = []
