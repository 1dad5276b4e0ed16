"""Interfaces/abstracciones del Core.

Por qué:
- Define el contrato (Protocol) del transporte que implementan los adaptadores.
- Permite invertir dependencias: el cliente depende de la abstracción y los
  tests la sustituyen por dobles deterministas.
"""
