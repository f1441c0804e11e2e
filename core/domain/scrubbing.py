"""
Limpieza de secretos en contextos de diagnóstico.

Las claves con nombre de secreto (password, token, ...) se eliminan a
cualquier profundidad, sin distinguir mayúsculas ni `-`/`_`.
"""

from collections.abc import Mapping
from typing import Any

SECRET_KEYS = frozenset(
    {"password", "passwd", "token", "secret", "authorization", "api_key", "apikey"}
)


def _is_secret(key: Any) -> bool:
    normalized = str(key).lower().replace("-", "_")
    return any(secret in normalized for secret in SECRET_KEYS)


def scrub_secrets(value: Any) -> Any:
    """Devuelve una copia de `value` sin claves sensibles."""
    if isinstance(value, Mapping):
        return {k: scrub_secrets(v) for k, v in value.items() if not _is_secret(k)}
    if isinstance(value, (list, tuple)):
        return [scrub_secrets(v) for v in value]
    return value
