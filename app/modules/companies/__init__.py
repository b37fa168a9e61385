"""
Módulo de Empresas

La empresa es el tenant: su id viaja en el header X-Company-ID de las rutas
de negocio. Gestiona datos de contacto, configuración (moneda, prefijo de
facturas, ...), suscripción con vencimiento automático y usuarios
autorizados.
"""
