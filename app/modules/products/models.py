from app.database.database import Base
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal
from app.common.mixins import BaseMixin


# Proveedores que surten cada producto
product_suppliers = Table(
    "product_suppliers",
    Base.metadata,
    Column("product_id", Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("supplier_id", Uuid(as_uuid=True), ForeignKey("suppliers.id", ondelete="CASCADE"), primary_key=True),
)


class Product(Base, BaseMixin):
    __tablename__ = "products"

    product_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    price = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))       # Precio de venta
    cost_price = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))  # Costo
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(20), nullable=True)  # Ej: unidad, caja, kg
    barcode = Column(String(50), nullable=True)
    min_quantity = Column(Integer, nullable=False, default=5)  # Umbral de stock bajo
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Relationships
    suppliers = relationship("Supplier", secondary=product_suppliers)

    __table_args__ = (
        UniqueConstraint("tenant_id", "product_name", name="uq_product_tenant_name"),
        UniqueConstraint("tenant_id", "barcode", name="uq_product_tenant_barcode"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_quantity

    @property
    def supplier_ids(self):
        return [supplier.id for supplier in self.suppliers]
