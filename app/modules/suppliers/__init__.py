"""
Módulo de Proveedores
"""
