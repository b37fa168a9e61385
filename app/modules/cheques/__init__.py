"""
Módulo de Cheques

Cheques recibidos de clientes o emitidos a proveedores. Cada cheque pertenece
exactamente a un cliente o a un proveedor y puede respaldar un pago o un
egreso, nunca ambos. La regla se valida en el esquema, en el servicio y antes
de cada flush de la sesión.
"""
