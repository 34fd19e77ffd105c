# scripts/seed_data.py
# 실행: python -m scripts.seed_data [--create-tables]

"""
데모용 기초 데이터를 생성합니다.
공급업체, 제품 분류, 제품, 창고, 위치를 만들고 기초 재고는 재고 엔진(조정)으로 반영합니다.
이미 존재하는 코드/SKU 는 건너뜁니다.
"""

import asyncio
import logging
import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from stockmaster.core.database import create_db_and_tables, get_async_session_context
from stockmaster.domains.inv import crud as inv_crud
from stockmaster.domains.inv import schemas as inv_schemas
from stockmaster.domains.inv import services as inv_services
from stockmaster.domains.loc import crud as loc_crud
from stockmaster.domains.loc import schemas as loc_schemas
from stockmaster.domains.loc.models import LocationType
from stockmaster.domains.usr import crud as usr_crud
from stockmaster.domains.usr import schemas as usr_schemas
from stockmaster.domains.usr.models import UserRole
from stockmaster.domains.ven import crud as ven_crud
from stockmaster.domains.ven import schemas as ven_schemas

logger = logging.getLogger(__name__)
cli = typer.Typer()

SUPPLIERS = [
    {"name": "TechCorp Supplies", "code": "TECH001", "email": "orders@techcorp.com", "phone": "+1-555-0101"},
    {"name": "Global Electronics", "code": "ELEC002", "email": "supply@globalelectronics.com", "phone": "+1-555-0102"},
    {"name": "Office Essentials Inc", "code": "OFFC003", "email": "procurement@officeessentials.com", "phone": "+1-555-0103"},
]

CATEGORIES = ["Electronics", "Office Supplies", "Furniture", "IT Equipment", "Consumables"]

# (name, sku, category, unit, reorder_level, reorder_quantity, initial stock)
PRODUCTS = [
    ("Wireless Mouse", "ELEC-MOUSE-001", "Electronics", "piece", 20, 100, 150),
    ("USB-C Cable 1m", "ELEC-CABLE-002", "Electronics", "piece", 50, 200, 40),
    ("A4 Copy Paper", "OFFC-PAPER-001", "Office Supplies", "box", 10, 50, 80),
    ("Ballpoint Pen (Blue)", "OFFC-PEN-002", "Office Supplies", "box", 15, 60, 12),
    ("Ergonomic Office Chair", "FURN-CHAIR-001", "Furniture", "unit", 5, 10, 18),
    ("27in Monitor", "IT-MON-001", "IT Equipment", "unit", 5, 20, 25),
    ("Printer Toner", "CONS-TONER-001", "Consumables", "unit", 8, 30, 6),
]

WAREHOUSES = [
    {
        "name": "Main Warehouse", "code": "WH-MAIN", "address": "100 Logistics Way",
        "locations": [
            ("Receiving Bay", "MAIN-RCV", LocationType.RECEIVING),
            ("Rack A-01", "MAIN-A01", LocationType.STORAGE),
            ("Rack A-02", "MAIN-A02", LocationType.STORAGE),
            ("Shipping Dock", "MAIN-SHP", LocationType.SHIPPING),
        ],
    },
    {
        "name": "Secondary Warehouse", "code": "WH-SEC", "address": "200 Storage Road",
        "locations": [
            ("Rack B-01", "SEC-B01", LocationType.STORAGE),
            ("Damaged Goods", "SEC-DMG", LocationType.DAMAGED),
        ],
    },
]


async def seed(db: AsyncSession, admin_email: str, admin_password: str) -> None:
    admin = await usr_crud.user.get_by_email(db, email=admin_email)
    if not admin:
        admin = await usr_crud.user.create(db, obj_in=usr_schemas.UserCreate(
            email=admin_email, name="Admin User", password=admin_password, role=UserRole.ADMIN
        ))
        typer.echo(f"관리자 계정 생성: {admin_email}")

    for data in SUPPLIERS:
        if not await ven_crud.supplier.get_by_code(db, code=data["code"]):
            await ven_crud.supplier.create(db, obj_in=ven_schemas.SupplierCreate(**data))
    typer.echo(f"공급업체 {len(SUPPLIERS)}건 확인")

    categories = {}
    for name in CATEGORIES:
        category = await inv_crud.category.get_by_attribute(db, attribute="name", value=name)
        if not category:
            category = await inv_crud.category.create(db, obj_in=inv_schemas.ProductCategoryCreate(name=name))
        categories[name] = category

    storage_locations = []
    for data in WAREHOUSES:
        warehouse = await loc_crud.warehouse.get_by_code(db, code=data["code"])
        if not warehouse:
            warehouse = await loc_crud.warehouse.create(db, obj_in=loc_schemas.WarehouseCreate(
                name=data["name"], code=data["code"], address=data["address"]
            ))
        for name, code, location_type in data["locations"]:
            location = await loc_crud.location.get_by_code(db, code=code)
            if not location:
                location = await loc_crud.location.create(db, obj_in=loc_schemas.LocationCreate(
                    name=name, code=code, warehouse_id=warehouse.id, type=location_type
                ))
            if location_type == LocationType.STORAGE:
                storage_locations.append(location)
    typer.echo(f"창고 {len(WAREHOUSES)}곳, 보관 위치 {len(storage_locations)}곳 확인")

    created = 0
    for index, (name, sku, category_name, unit, reorder_level, reorder_quantity, stock) in enumerate(PRODUCTS):
        if await inv_crud.product.get_by_sku(db, sku=sku):
            continue
        product = await inv_crud.product.create(db, obj_in=inv_schemas.ProductCreate(
            name=name,
            sku=sku,
            category_id=categories[category_name].id,
            unit_of_measure=unit,
            initial_stock=stock,
            reorder_level=reorder_level,
            reorder_quantity=reorder_quantity,
        ))
        location = storage_locations[index % len(storage_locations)]
        await inv_services.adjust_stock(
            db,
            adjust_in=inv_schemas.StockAdjustRequest(
                product_id=product.id,
                location_id=location.id,
                adjustment_type=inv_schemas.AdjustmentType.SET,
                quantity=stock,
                reason="Initial stock",
            ),
            user_id=admin.id,
        )
        created += 1
    typer.echo(f"제품 {created}건 생성 (기초 재고 반영)")


@cli.command()
def main(
    admin_email: str = typer.Option("admin@stockmaster.com", "--admin-email", help="시드 관리자 이메일"),
    admin_password: str = typer.Option("admin12345", "--admin-password", help="시드 관리자 비밀번호 (8자 이상)"),
    create_tables: bool = typer.Option(False, "--create-tables", help="시드 전에 테이블을 생성합니다 (개발용)"),
):
    """데모 데이터를 생성합니다."""
    logging.basicConfig(level=logging.INFO)

    async def run():
        if create_tables:
            await create_db_and_tables()
        async with get_async_session_context() as db:
            await seed(db, admin_email, admin_password)

    asyncio.run(run())
    typer.echo("시드 완료")


if __name__ == "__main__":
    cli()
