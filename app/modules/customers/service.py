"""
Servicios de negocio para el módulo de Clientes

- CRUD con unicidad de nombre y razón social por empresa
- Facturas de venta creadas desde el cliente
- Lista de pagos sin duplicados y saldo reconciliado
- Consulta de facturas, pagos y cheques del cliente
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy import or_
from typing import List, Optional
from uuid import UUID
import logging

from app.common.exceptions import ValidationError, NotFoundError, ConflictError
from app.modules.customers.models import Customer
from app.modules.customers.schemas import CustomerCreate, CustomerUpdate
from app.modules.companies.service import ensure_company_exists
from app.modules.invoices.models import Invoice
from app.modules.invoices.schemas import PartyInvoiceCreate
from app.modules.invoices.service import InvoiceService
from app.modules.invoices.settlement import SettlementService
from app.modules.payments.models import Payment
from app.modules.cheques.models import Cheque
from app.modules.users.models import User

logger = logging.getLogger(__name__)


class CustomerService:
    """Servicio principal para gestión de clientes"""

    def __init__(self, db: Session):
        self.db = db
        self.settlement = SettlementService(db)

    def _validate_unique(self, tenant_id: UUID, customer_name: Optional[str], company_name: Optional[str],
                         exclude_id: Optional[UUID] = None):
        if customer_name:
            query = self.db.query(Customer).filter(
                Customer.tenant_id == tenant_id,
                Customer.customer_name == customer_name
            )
            if exclude_id:
                query = query.filter(Customer.id != exclude_id)
            if query.first():
                raise ConflictError(f"Ya existe un cliente con el nombre {customer_name}")
        if company_name:
            query = self.db.query(Customer).filter(
                Customer.tenant_id == tenant_id,
                Customer.company_name == company_name
            )
            if exclude_id:
                query = query.filter(Customer.id != exclude_id)
            if query.first():
                raise ConflictError(f"Ya existe un cliente con la razón social {company_name}")

    def _validate_salesman(self, salesman_id: Optional[UUID]):
        if salesman_id and not self.db.query(User).filter(User.id == salesman_id).first():
            raise NotFoundError("Vendedor no encontrado")

    def create_customer(self, customer_data: CustomerCreate, tenant_id: UUID) -> Customer:
        """Crear un nuevo cliente"""
        try:
            ensure_company_exists(self.db, tenant_id)
            self._validate_salesman(customer_data.salesman_id)
            self._validate_unique(tenant_id, customer_data.customer_name, customer_data.company_name)

            customer = Customer(tenant_id=tenant_id, **customer_data.model_dump())
            self.db.add(customer)
            self.db.commit()
            self.db.refresh(customer)

            logger.info(f"Cliente {customer.customer_name} creado en tenant {tenant_id}")
            return customer

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creando cliente: {str(e)}"
            )

    def get_customer(self, customer_id: UUID, tenant_id: UUID) -> Customer:
        customer = self.db.query(Customer).filter(
            Customer.id == customer_id,
            Customer.tenant_id == tenant_id
        ).first()
        if not customer:
            raise NotFoundError("Cliente no encontrado")
        return customer

    def list_customers(self, tenant_id: UUID, customer_type: Optional[str] = None,
                       limit: int = 100, offset: int = 0) -> List[Customer]:
        query = self.db.query(Customer).filter(Customer.tenant_id == tenant_id)
        if customer_type:
            query = query.filter(Customer.customer_type == customer_type)
        return query.order_by(Customer.customer_name).offset(offset).limit(limit).all()

    def search_customers(self, tenant_id: UUID, term: str) -> List[Customer]:
        pattern = f"%{term}%"
        return self.db.query(Customer).filter(
            Customer.tenant_id == tenant_id,
            or_(
                Customer.customer_name.ilike(pattern),
                Customer.company_name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.location.ilike(pattern)
            )
        ).order_by(Customer.customer_name).all()

    def get_customers_by_salesman(self, salesman_id: UUID, tenant_id: UUID) -> List[Customer]:
        return self.db.query(Customer).filter(
            Customer.tenant_id == tenant_id,
            Customer.salesman_id == salesman_id
        ).order_by(Customer.customer_name).all()

    def update_customer(self, customer_id: UUID, customer_data: CustomerUpdate, tenant_id: UUID) -> Customer:
        """Actualizar cliente validando vendedor y unicidad"""
        try:
            customer = self.get_customer(customer_id, tenant_id)
            update_data = customer_data.model_dump(exclude_unset=True)

            if "salesman_id" in update_data:
                self._validate_salesman(update_data["salesman_id"])
            self._validate_unique(
                tenant_id, update_data.get("customer_name"), update_data.get("company_name"),
                exclude_id=customer.id
            )

            for field, value in update_data.items():
                setattr(customer, field, value)

            self.db.commit()
            self.db.refresh(customer)
            return customer

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error actualizando cliente: {str(e)}"
            )

    def delete_customer(self, customer_id: UUID, tenant_id: UUID) -> dict:
        """Eliminar cliente sin facturas ni pagos asociados"""
        try:
            customer = self.get_customer(customer_id, tenant_id)

            has_invoices = self.db.query(Invoice).filter(Invoice.customer_id == customer.id).first()
            has_payments = self.db.query(Payment).filter(Payment.customer_id == customer.id).first()
            if has_invoices or has_payments:
                raise ValidationError("No se puede eliminar un cliente con facturas o pagos registrados")

            self.db.query(Cheque).filter(Cheque.customer_id == customer.id).delete(synchronize_session=False)
            self.db.delete(customer)
            self.db.commit()
            return {"message": "Cliente eliminado"}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error eliminando cliente: {str(e)}"
            )

    def add_invoice(self, customer_id: UUID, invoice_data: PartyInvoiceCreate, tenant_id: UUID) -> Invoice:
        """Crear una factura de venta para el cliente y sumarla a su saldo"""
        customer = self.get_customer(customer_id, tenant_id)
        invoice = InvoiceService(self.db).create_party_invoice(invoice_data, tenant_id, customer=customer)
        logger.info(f"Factura {invoice.invoice_number} agregada al cliente {customer.id}")
        return invoice

    def get_customer_invoices(self, customer_id: UUID, tenant_id: UUID) -> List[Invoice]:
        return list(self.get_customer(customer_id, tenant_id).invoice_list)

    def get_customer_payments(self, customer_id: UUID, tenant_id: UUID) -> List[Payment]:
        return list(self.get_customer(customer_id, tenant_id).payment_list)

    def get_customer_cheques(self, customer_id: UUID, tenant_id: UUID) -> List[Cheque]:
        customer = self.get_customer(customer_id, tenant_id)
        return self.db.query(Cheque).filter(
            Cheque.tenant_id == tenant_id,
            Cheque.customer_id == customer.id
        ).order_by(Cheque.cheque_date).all()

    def add_payment(self, customer_id: UUID, payment_id: UUID, tenant_id: UUID) -> Customer:
        """Agregar un pago a la lista del cliente; repetirlo no tiene efecto"""
        try:
            customer = self.get_customer(customer_id, tenant_id)
            payment = self.db.query(Payment).filter(
                Payment.id == payment_id,
                Payment.tenant_id == tenant_id
            ).first()
            if not payment:
                raise NotFoundError("Pago no encontrado")
            if payment.customer_id != customer.id:
                raise ValidationError("El pago pertenece a otro cliente")

            if self.settlement.link(customer.payment_list, payment):
                self.settlement.reconcile_customer(customer)
                self.db.commit()
                self.db.refresh(customer)
            return customer

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error agregando pago al cliente: {str(e)}"
            )

    def remove_payment(self, customer_id: UUID, payment_id: UUID, tenant_id: UUID) -> Customer:
        """Quitar un pago de la lista del cliente y reconciliar su saldo"""
        try:
            customer = self.get_customer(customer_id, tenant_id)
            payment = next((p for p in customer.payment_list if p.id == payment_id), None)
            if payment is None:
                raise NotFoundError("El pago no está en la lista del cliente")

            self.settlement.unlink(customer.payment_list, payment)
            self.settlement.reconcile_customer(customer)
            self.db.commit()
            self.db.refresh(customer)
            return customer

        except StaleDataError:
            self.db.rollback()
            raise ConflictError("El cliente fue modificado por otra operación; intente de nuevo")
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error quitando pago del cliente: {str(e)}"
            )

    def reconcile_balance(self, customer_id: UUID, tenant_id: UUID) -> Customer:
        """Recalcular balance_due desde facturas y pagos"""
        try:
            customer = self.get_customer(customer_id, tenant_id)
            self.settlement.reconcile_customer(customer)
            self.db.commit()
            self.db.refresh(customer)
            return customer
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error reconciliando saldo: {str(e)}"
            )
