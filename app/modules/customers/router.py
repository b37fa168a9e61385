from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.core.config import settings
from app.database.database import get_db
from app.dependencies.companyDependencies import TenantId
from app.modules.customers.service import CustomerService
from app.modules.customers.schemas import (
    CustomerCreate, CustomerUpdate, CustomerOut, CustomerDetail, PaymentLink, BalanceOut
)
from app.modules.invoices.schemas import InvoiceOut, PartyInvoiceCreate
from app.modules.payments.schemas import PaymentOut
from app.modules.cheques.schemas import ChequeOut

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(customer_data: CustomerCreate, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Crear cliente; el nombre y la razón social son únicos por empresa"""
    service = CustomerService(db)
    return service.create_customer(customer_data, tenant_id)


@router.get("/", response_model=List[CustomerOut])
def list_customers(
    tenant_id: TenantId,
    customer_type: Optional[str] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    service = CustomerService(db)
    return service.list_customers(tenant_id, customer_type, limit, offset)


@router.get("/search", response_model=List[CustomerOut])
def search_customers(tenant_id: TenantId, q: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.search_customers(tenant_id, q)


@router.get("/salesman/{salesman_id}", response_model=List[CustomerOut])
def get_customers_by_salesman(salesman_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.get_customers_by_salesman(salesman_id, tenant_id)


@router.get("/{customer_id}", response_model=CustomerDetail)
def get_customer(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return CustomerDetail.from_customer(service.get_customer(customer_id, tenant_id))


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: UUID, customer_data: CustomerUpdate, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.update_customer(customer_id, customer_data, tenant_id)


@router.delete("/{customer_id}")
def delete_customer(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.delete_customer(customer_id, tenant_id)


@router.post("/{customer_id}/invoices", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def add_invoice_to_customer(
    customer_id: UUID, invoice_data: PartyInvoiceCreate, tenant_id: TenantId, db: Session = Depends(get_db)
):
    """Crear una factura de venta para el cliente"""
    service = CustomerService(db)
    return service.add_invoice(customer_id, invoice_data, tenant_id)


@router.get("/{customer_id}/invoices", response_model=List[InvoiceOut])
def get_customer_invoices(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.get_customer_invoices(customer_id, tenant_id)


@router.post("/{customer_id}/payments", response_model=CustomerDetail)
def add_payment_to_customer(customer_id: UUID, link: PaymentLink, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Agregar un pago a la lista del cliente (sin duplicados)"""
    service = CustomerService(db)
    return CustomerDetail.from_customer(service.add_payment(customer_id, link.payment_id, tenant_id))


@router.delete("/{customer_id}/payments/{payment_id}", response_model=CustomerDetail)
def remove_payment_from_customer(customer_id: UUID, payment_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return CustomerDetail.from_customer(service.remove_payment(customer_id, payment_id, tenant_id))


@router.get("/{customer_id}/payments", response_model=List[PaymentOut])
def get_customer_payments(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.get_customer_payments(customer_id, tenant_id)


@router.get("/{customer_id}/cheques", response_model=List[ChequeOut])
def get_customer_cheques(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    service = CustomerService(db)
    return service.get_customer_cheques(customer_id, tenant_id)


@router.post("/{customer_id}/reconcile", response_model=BalanceOut)
def reconcile_customer_balance(customer_id: UUID, tenant_id: TenantId, db: Session = Depends(get_db)):
    """Recalcular el saldo del cliente desde sus facturas y pagos"""
    service = CustomerService(db)
    customer = service.reconcile_balance(customer_id, tenant_id)
    return BalanceOut(customer_id=customer.id, balance_due=customer.balance_due)
