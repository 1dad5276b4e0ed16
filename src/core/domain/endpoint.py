"""Descriptores de endpoint.

Por qué un Protocol + un modelo concreto:
- El llamador puede describir el destino con cualquier objeto que exponga
  `endpoint` (enums, modelos propios), igual que los scanners cumplen un contrato.
- `Endpoint` cubre el caso común sin obligar a crear clases.

Nota:
- Un descriptor puede ser vacío o inválido. Se valida con `resolve_url`
  antes de tocar la red; nunca se asume válido.
"""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field

_ALLOWED_SCHEMES = ("http", "https")


@runtime_checkable
class ClientSetup(Protocol):
    """Contrato mínimo de un descriptor: produce la dirección como texto."""

    @property
    def endpoint(self) -> str:
        ...


class Endpoint(BaseModel):
    """Descriptor inmutable construido por el llamador para una petición."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(
        default="",
        description="Dirección destino (puede estar vacía o mal formada).",
    )

    @classmethod
    def build(
        cls,
        base_url: str,
        path: str = "",
        params: Mapping[str, str] | None = None,
    ) -> "Endpoint":
        """Compone `base_url` + `path` + query string.

        No valida: si `base_url` es basura, el resultado también lo será y
        `resolve_url` lo rechazará.
        """

        url = base_url.rstrip("/")
        if path:
            url = f"{url}/{path.lstrip('/')}"
        if params:
            try:
                url = str(httpx.URL(url, params=dict(params)))
            except httpx.InvalidURL:
                pass
        return cls(endpoint=url)


def resolve_url(descriptor: ClientSetup) -> httpx.URL | None:
    """Resuelve el descriptor a una URL absoluta http(s).

    Devuelve `None` si la dirección está vacía, no se puede parsear o no es
    una URL absoluta con esquema http/https y host.
    """

    raw = descriptor.endpoint
    if not isinstance(raw, str) or not raw.strip():
        return None
    if raw != raw.strip() or any(ch.isspace() for ch in raw):
        return None

    try:
        url = httpx.URL(raw)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None

    if url.scheme not in _ALLOWED_SCHEMES or not url.host:
        return None
    return url
