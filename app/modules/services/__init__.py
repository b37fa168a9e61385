"""
Módulo de Servicios

Servicios contratados a uno o más prestadores (proveedores de tipo
service_provider), con su historial de gastos y las facturas asociadas.
total_expenses se recalcula desde el historial antes de cada flush.
"""
