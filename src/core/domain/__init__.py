"""Valores del dominio del cliente.

Por qué:
- Aquí viven descriptores, errores y resultados: valores inmutables.
- El dominio no conoce transportes concretos, CLI ni presentación.
"""
