"""
Módulo de Clientes
"""
