"""
Importa todos los modelos para registrarlos en Base.metadata

Lo usan app.main (create_all en desarrollo), alembic/env.py (autogenerate)
y los tests.
"""


def load_models():
    import app.common.sequences  # noqa: F401
    import app.modules.companies.models  # noqa: F401
    import app.modules.users.models  # noqa: F401
    import app.modules.subscription_requests.models  # noqa: F401
    import app.modules.customers.models  # noqa: F401
    import app.modules.suppliers.models  # noqa: F401
    import app.modules.products.models  # noqa: F401
    import app.modules.invoices.models  # noqa: F401
    import app.modules.payments.models  # noqa: F401
    import app.modules.expenses.models  # noqa: F401
    import app.modules.cheques.models  # noqa: F401
    import app.modules.services.models  # noqa: F401
    import app.modules.orders.models  # noqa: F401
