"""
Módulo de Egresos (Expenses)

Pagos realizados a proveedores. Un egreso puede liquidar una factura de compra
y registrarse en el historial de gastos de un servicio. Su alta y baja
mantienen sincronizados el ledger de la factura, la lista de egresos del
proveedor, su saldo y el total de gastos del servicio.
"""
