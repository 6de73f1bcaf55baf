"""
Módulo de Conexão com o Banco de Dados (Core)

Mantém o cliente do Google Firestore usado pelos "Service Layers" da
aplicação. O cliente fica em app.extensions['firestore'] e é criado na
primeira utilização, o que permite substituí-lo (ex.: testes).
"""

from typing import Any, Dict, List, Optional
from flask import current_app
from google.cloud import firestore

from src.core.logger import get_logger

logger = get_logger(__name__)

CHAVE_EXTENSAO = 'firestore'

def init_app(app) -> None:
    """Reserva o slot do cliente na aplicação (criação preguiçosa)."""
    app.extensions.setdefault(CHAVE_EXTENSAO, None)

def get_db():
    """
    Retorna o cliente do Firestore da aplicação atual.
    O SDK busca as credenciais em 'GOOGLE_APPLICATION_CREDENTIALS'.
    """
    client = current_app.extensions.get(CHAVE_EXTENSAO)
    if client is None:
        projeto = current_app.config.get('GOOGLE_CLOUD_PROJECT')
        client = firestore.Client(project=projeto) if projeto else firestore.Client()
        current_app.extensions[CHAVE_EXTENSAO] = client
        logger.info("Conexão com o Firestore estabelecida com sucesso.")
    return client

def doc_para_dict(doc) -> Dict[str, Any]:
    dados = doc.to_dict() or {}
    dados['id'] = doc.id
    return dados

def listar(colecao: str, filtros: Optional[List[tuple]] = None) -> List[Dict[str, Any]]:
    """
    Lê todos os documentos de uma coleção, opcionalmente filtrados
    por tuplas (campo, operador, valor).
    """
    consulta = get_db().collection(colecao)
    for campo, operador, valor in (filtros or []):
        consulta = consulta.where(campo, operador, valor)
    return [doc_para_dict(doc) for doc in consulta.stream()]

def obter(colecao: str, doc_id: str) -> Optional[Dict[str, Any]]:
    if not doc_id:
        return None
    doc = get_db().collection(colecao).document(doc_id).get()
    if not doc.exists:
        return None
    return doc_para_dict(doc)

def sanitizar(valor: Any) -> Any:
    """
    Remove recursivamente chaves com valor None.
    O Firestore aceita null, mas o esquema compartilhado trata campo
    ausente e campo nulo como coisas diferentes.
    """
    if isinstance(valor, dict):
        return {k: sanitizar(v) for k, v in valor.items() if v is not None}
    if isinstance(valor, (list, tuple)):
        return [sanitizar(v) for v in valor if v is not None]
    return valor
