"""
Módulo de Usuarios

Usuarios globales (no pertenecen a un tenant): vendedores, conductores,
contadores y administradores. La contraseña se guarda como hash bcrypt y
nunca se devuelve.
"""
