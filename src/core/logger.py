"""
Logging da aplicação.

Tudo vai para stdout, onde o Google Cloud Logging recolhe as linhas do
container. Dentro de uma requisição, cada linha leva método e caminho.
"""

import logging
import os
import sys

from flask import has_request_context, request

FORMATO_PADRAO = '[%(asctime)s] %(levelname)s in %(module)s%(requisicao)s: %(message)s'


class FiltroRequisicao(logging.Filter):
    """Acrescenta ' [GET /admin/agenda/dia]' quando há requisição ativa."""

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            record.requisicao = f" [{request.method} {request.path}]"
        else:
            record.requisicao = ''
        return True


def get_logger(name: str) -> logging.Logger:
    """
    Logger do módulo 'name' com o formato padrão. O nível vem de LOG_LEVEL
    (INFO se ausente ou inválido).
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        nivel = os.environ.get('LOG_LEVEL', 'INFO').upper()
        logger.setLevel(getattr(logging, nivel, logging.INFO))

        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(FiltroRequisicao())
        handler.setFormatter(logging.Formatter(FORMATO_PADRAO))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
