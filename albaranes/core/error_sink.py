"""
Destinos para el registro de errores del servidor.

La capa HTTP recibe un sink en su construcción (ver create_app); no hay
ninguna instancia global compartida.
"""
from typing import Protocol

import httpx

from albaranes.core.logger import logger


class ErrorSink(Protocol):
    def write(self, message: str) -> None:
        ...


class LoggerSink:
    def write(self, message: str) -> None:
        logger.error(message)


class WebhookSink:
    """Envía cada mensaje como texto a un webhook entrante (Slack o similar)."""

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    def write(self, message: str) -> None:
        try:
            httpx.post(self.url, json={"text": message}, timeout=self.timeout)
        except httpx.HTTPError as e:
            # El log de errores nunca debe tumbar la petición
            logger.warning(f"No se pudo enviar el error al webhook: {e}")
            logger.error(message)


def build_error_sink(webhook_url: str | None, timeout: float = 10.0) -> ErrorSink:
    if webhook_url:
        return WebhookSink(webhook_url, timeout=timeout)
    return LoggerSink()
