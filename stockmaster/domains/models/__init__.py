# stockmaster/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델을 한 곳에서 임포트합니다.
SQLModel.metadata 가 모든 테이블을 인식하도록 보장하며, Alembic 과 테스트에서 사용합니다.
"""

# usr (User, UserRole, OTPToken)
from stockmaster.domains.usr.models import User, UserRole, OTPToken

# loc (Warehouse, Location, LocationType)
from stockmaster.domains.loc.models import Warehouse, Location, LocationType

# ven (Supplier)
from stockmaster.domains.ven.models import Supplier

# inv (제품, 재고, 원장, 입고)
from stockmaster.domains.inv.models import (
    ProductCategory, Product, StockLocation, StockMovement,
    MovementType, DocumentType, Receipt, ReceiptItem, ReceiptStatus,
)

# dlv (Customer, DeliveryOrder, DeliveryOrderLine)
from stockmaster.domains.dlv.models import Customer, DeliveryOrder, DeliveryOrderLine, DeliveryStatus

__all__ = [
    "User", "UserRole", "OTPToken",
    "Warehouse", "Location", "LocationType",
    "Supplier",
    "ProductCategory", "Product", "StockLocation", "StockMovement",
    "MovementType", "DocumentType", "Receipt", "ReceiptItem", "ReceiptStatus",
    "Customer", "DeliveryOrder", "DeliveryOrderLine", "DeliveryStatus",
]
