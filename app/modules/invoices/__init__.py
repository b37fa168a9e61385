"""
Módulo de Facturación (Invoices)

Facturas de venta (liquidadas con pagos de clientes) y de compra (liquidadas
con egresos a proveedores):

- Total = Σ(total_price de los ítems) × (1 + impuesto), con redondeo a 2 decimales
- Ledger de pagos/egresos por factura con recálculo de saldo y estado
  (pending -> partially_paid -> paid)
- Reinicio a pending al retirar el último pago
- Borrado con limpieza de referencias y reconciliación de saldos de la parte

Tablas principales:
- invoices: Facturas
- invoice_line_items: Ítems de factura
- invoice_payment_entries / invoice_expense_entries: Ledger de liquidación
- customer_invoices / supplier_invoices: Listas de referencia de las partes
"""
