"""
Fixtures compartidas por los tests de los módulos

Los tests corren contra SQLite en memoria; la base se crea una vez por sesión
y cada test trabaja en su propia empresa (tenant), de modo que los datos de
un test no afectan a los demás.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from uuid import uuid4

from app.database.database import Base, SessionLocal, engine
from app.database.registry import load_models
from app.main import app
from app.modules.companies.models import Company
from app.modules.users.models import User, UserRole

load_models()
Base.metadata.create_all(bind=engine)


@pytest.fixture
def db_session():
    """Sesión directa a la base para preparar datos o verificar efectos"""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sample_company(db_session):
    company = Company(name=f"Empresa {uuid4().hex[:8]}", contact_email="admin@empresa.com")
    db_session.add(company)
    db_session.commit()
    db_session.refresh(company)
    return company


@pytest.fixture
def sample_user(db_session, sample_company):
    user = User(
        first_name="Ana",
        last_name="Gómez",
        username=f"ana_{uuid4().hex[:8]}",
        password="not-a-real-hash",
        role=UserRole.ACCOUNTANT,
        company_id=sample_company.id
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def sample_driver(db_session):
    driver = User(
        first_name="Luis",
        last_name="Pérez",
        username=f"driver_{uuid4().hex[:8]}",
        password="not-a-real-hash",
        role=UserRole.DRIVER
    )
    db_session.add(driver)
    db_session.commit()
    db_session.refresh(driver)
    return driver


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def tenant_client(sample_company):
    """Cliente HTTP que envía X-Company-ID de la empresa de prueba"""
    return TestClient(app, headers={"X-Company-ID": str(sample_company.id)})


@pytest.fixture
def customer(tenant_client):
    response = tenant_client.post("/customers/", json={"customer_name": "Cliente Uno", "phone": "555-0101"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def supplier(tenant_client):
    response = tenant_client.post("/suppliers/", json={"supplier_name": "Proveedor Uno"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def service_provider(tenant_client):
    response = tenant_client.post(
        "/suppliers/", json={"supplier_name": "Limpiezas SRL", "supplier_type": "service_provider"}
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def sales_invoice(tenant_client, customer):
    """Factura de venta: 10 × 100 + 16% de impuesto = 1160.00"""
    response = tenant_client.post("/invoices/", json={
        "type": "sales",
        "customer_id": customer["id"],
        "due_date": "2030-12-31",
        "items": [{"product_name": "Caja de agua", "quantity": "10", "unit_price": "100"}]
    })
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def purchase_invoice(tenant_client, supplier):
    response = tenant_client.post("/invoices/", json={
        "type": "purchase",
        "supplier_id": supplier["id"],
        "items": [{"product_name": "Materia prima", "quantity": "5", "unit_price": "100"}]
    })
    assert response.status_code == 201
    return response.json()
