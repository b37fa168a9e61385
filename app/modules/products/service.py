from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from fastapi import HTTPException, status
from uuid import UUID
from typing import Optional, List
import math
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.modules.products.models import Product
from app.modules.products.schemas import ProductCreate, ProductUpdate, PaginatedProductResponse, ProductOut
from app.modules.suppliers.models import Supplier

logger = logging.getLogger(__name__)


def _get_suppliers(db: Session, supplier_ids: List[UUID], tenant_id: UUID) -> List[Supplier]:
    suppliers = []
    for supplier_id in dict.fromkeys(supplier_ids):
        supplier = db.query(Supplier).filter(
            Supplier.id == supplier_id,
            Supplier.tenant_id == tenant_id
        ).first()
        if not supplier:
            raise NotFoundError(f"Proveedor {supplier_id} no encontrado")
        suppliers.append(supplier)
    return suppliers


def _validate_unique(db: Session, tenant_id: UUID, product_name: Optional[str], barcode: Optional[str],
                     exclude_id: Optional[UUID] = None):
    if product_name:
        query = db.query(Product).filter(Product.tenant_id == tenant_id, Product.product_name == product_name)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError(f"Ya existe un producto con el nombre {product_name}")
    if barcode:
        query = db.query(Product).filter(Product.tenant_id == tenant_id, Product.barcode == barcode)
        if exclude_id:
            query = query.filter(Product.id != exclude_id)
        if query.first():
            raise ConflictError(f"Ya existe un producto con el código de barras {barcode}")


def create_product(db: Session, data: ProductCreate, tenant_id: UUID) -> Product:
    """Crear producto validando nombre y código de barras únicos"""
    try:
        _validate_unique(db, tenant_id, data.product_name, data.barcode)
        suppliers = _get_suppliers(db, data.supplier_ids, tenant_id)

        product = Product(tenant_id=tenant_id, **data.model_dump(exclude={"supplier_ids"}))
        product.suppliers = suppliers
        db.add(product)
        db.commit()
        db.refresh(product)

        logger.info(f"Producto {product.product_name} creado en tenant {tenant_id}")
        return product

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creando producto: {str(e)}"
        )


def get_product(db: Session, product_id: UUID, tenant_id: UUID) -> Product:
    product = db.query(Product).filter(
        Product.id == product_id,
        Product.tenant_id == tenant_id
    ).first()
    if not product:
        raise NotFoundError("Producto no encontrado")
    return product


def list_products(db: Session, tenant_id: UUID, page: int = 1, limit: int = 100,
                  name: Optional[str] = None) -> PaginatedProductResponse:
    """Listado paginado, opcionalmente filtrado por nombre"""
    query = db.query(Product).filter(Product.tenant_id == tenant_id)
    if name:
        query = query.filter(Product.product_name.ilike(f"%{name}%"))

    total = query.with_entities(func.count(Product.id)).scalar()
    products = query.order_by(Product.product_name).offset((page - 1) * limit).limit(limit).all()
    total_pages = math.ceil(total / limit) if total else 0

    return PaginatedProductResponse(
        products=[ProductOut.model_validate(product) for product in products],
        total=total,
        page=page,
        limit=limit,
        hasNext=page < total_pages,
        hasPrev=page > 1
    )


def search_products(db: Session, tenant_id: UUID, term: str) -> List[Product]:
    pattern = f"%{term}%"
    return db.query(Product).filter(
        Product.tenant_id == tenant_id,
        or_(
            Product.product_name.ilike(pattern),
            Product.description.ilike(pattern),
            Product.category.ilike(pattern),
            Product.barcode.ilike(pattern)
        )
    ).order_by(Product.product_name).all()


def get_low_stock_products(db: Session, tenant_id: UUID) -> List[Product]:
    """Productos con quantity <= min_quantity"""
    return db.query(Product).filter(
        Product.tenant_id == tenant_id,
        Product.quantity <= Product.min_quantity
    ).order_by(Product.quantity).all()


def get_products_by_category(db: Session, tenant_id: UUID, category: str) -> List[Product]:
    return db.query(Product).filter(
        Product.tenant_id == tenant_id,
        Product.category == category
    ).order_by(Product.product_name).all()


def get_products_by_supplier(db: Session, tenant_id: UUID, supplier_id: UUID) -> List[Product]:
    return db.query(Product).filter(
        Product.tenant_id == tenant_id,
        Product.suppliers.any(Supplier.id == supplier_id)
    ).order_by(Product.product_name).all()


def update_product(db: Session, product_id: UUID, data: ProductUpdate, tenant_id: UUID) -> Product:
    try:
        product = get_product(db, product_id, tenant_id)
        update_data = data.model_dump(exclude_unset=True)

        _validate_unique(db, tenant_id, update_data.get("product_name"), update_data.get("barcode"),
                         exclude_id=product.id)

        supplier_ids = update_data.pop("supplier_ids", None)
        if supplier_ids is not None:
            product.suppliers = _get_suppliers(db, supplier_ids, tenant_id)

        for field, value in update_data.items():
            setattr(product, field, value)

        db.commit()
        db.refresh(product)
        return product

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error actualizando producto: {str(e)}"
        )


def adjust_quantity(db: Session, product_id: UUID, delta: int, tenant_id: UUID) -> Product:
    """Sumar delta al stock; el resultado no puede ser negativo"""
    try:
        product = get_product(db, product_id, tenant_id)
        new_quantity = product.quantity + delta
        if new_quantity < 0:
            raise ValidationError(
                f"Stock insuficiente para {product.product_name}: disponible {product.quantity}, ajuste {delta}"
            )

        product.quantity = new_quantity
        db.commit()
        db.refresh(product)

        if product.is_low_stock:
            logger.warning(f"Stock bajo para {product.product_name}: {product.quantity}")
        return product

    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error ajustando stock: {str(e)}"
        )


def delete_product(db: Session, product_id: UUID, tenant_id: UUID) -> dict:
    try:
        product = get_product(db, product_id, tenant_id)
        name = product.product_name
        product.suppliers.clear()
        db.delete(product)
        db.commit()
        return {"message": f"Producto {name} eliminado"}
    except HTTPException:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error eliminando producto: {str(e)}"
        )
