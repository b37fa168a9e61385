"""
Módulo de Órdenes

Órdenes de venta (cliente) y de compra (proveedor) con ítems, total sin
impuesto y seguimiento de entrega: estado de entrega, dirección y conductor
asignado.
"""
