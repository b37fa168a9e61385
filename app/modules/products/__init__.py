"""
Módulo de Productos

Catálogo de productos por empresa con stock simple, umbral de stock bajo y
proveedores que los surten.
"""
