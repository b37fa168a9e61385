"""
Módulo de Pagos

Cobros recibidos de clientes. Un pago puede liquidar una factura de venta; al
crearlo o eliminarlo se actualizan el ledger de la factura, la lista de pagos
del cliente y su saldo en una sola transacción. Los pagos con cheque eliminan
sus cheques al borrarse.
"""
