import copy
import os
import uuid
from datetime import datetime, timezone

# A configuração falha sem SECRET_KEY: definir antes de importar 'config'
os.environ.setdefault('SECRET_KEY', 'chave-de-teste')
os.environ.setdefault('FIREBASE_API_KEY', 'api-key-de-teste')
os.environ.setdefault('GOOGLE_CLOUD_PROJECT', 'oficina-teste')

import pytest
from google.api_core import exceptions as gexc
from google.cloud import firestore

from config import Config
from src import create_app
from src.core.constants import PERMISSOES_ADMIN


# ===========================================================================
# Firestore em memória
# ===========================================================================

class SnapshotFalso:
    def __init__(self, doc_id, dados):
        self.id = doc_id
        self._dados = dados
        self.exists = dados is not None

    def to_dict(self):
        return copy.deepcopy(self._dados) if self._dados is not None else None


def _resolver(valor, atual=None):
    if isinstance(valor, firestore.Increment):
        return (atual or 0) + valor.value
    if valor is firestore.SERVER_TIMESTAMP:
        return datetime.now(timezone.utc)
    return copy.deepcopy(valor)


class DocumentoFalso:
    def __init__(self, db, colecao, doc_id):
        self._db = db
        self.colecao = colecao
        self.id = doc_id

    @property
    def _tabela(self):
        return self._db.dados.setdefault(self.colecao, {})

    def get(self):
        return SnapshotFalso(self.id, copy.deepcopy(self._tabela.get(self.id)))

    def set(self, dados, merge=False):
        base = dict(self._tabela.get(self.id) or {}) if merge else {}
        for campo, valor in dados.items():
            base[campo] = _resolver(valor, base.get(campo))
        self._tabela[self.id] = base

    def create(self, dados):
        if self.id in self._tabela:
            raise gexc.AlreadyExists(f"{self.colecao}/{self.id}")
        self.set(dados)

    def update(self, dados):
        if self.id not in self._tabela:
            raise gexc.NotFound(f"{self.colecao}/{self.id}")
        atual = self._tabela[self.id]
        for campo, valor in dados.items():
            atual[campo] = _resolver(valor, atual.get(campo))

    def delete(self):
        self._tabela.pop(self.id, None)


def _compara(valor, operador, alvo):
    if operador == '==':
        return valor == alvo
    if operador == 'in':
        return valor in alvo
    if operador == 'array_contains':
        return isinstance(valor, list) and alvo in valor
    if valor is None:
        return False
    if operador == '>=':
        return valor >= alvo
    if operador == '<=':
        return valor <= alvo
    raise NotImplementedError(operador)


class ConsultaFalsa:
    def __init__(self, db, colecao, filtros=()):
        self._db = db
        self.colecao = colecao
        self._filtros = tuple(filtros)

    def where(self, campo, operador, valor):
        if campo == '__name__' and operador == 'in':
            valor = [getattr(v, 'id', v) for v in valor]
        return ConsultaFalsa(self._db, self.colecao, self._filtros + ((campo, operador, valor),))

    def stream(self):
        for doc_id, dados in list(self._db.dados.get(self.colecao, {}).items()):
            if all(_compara(doc_id if campo == '__name__' else dados.get(campo), op, valor)
                   for campo, op, valor in self._filtros):
                yield SnapshotFalso(doc_id, copy.deepcopy(dados))


class ColecaoFalsa(ConsultaFalsa):
    def document(self, doc_id=None):
        return DocumentoFalso(self._db, self.colecao, doc_id or uuid.uuid4().hex[:20])

    def add(self, dados):
        ref = self.document()
        ref.set(dados)
        return None, ref


class BatchFalso:
    """Aplica tudo ou nada no commit, como o WriteBatch."""

    def __init__(self, db):
        self._db = db
        self._operacoes = []

    def set(self, ref, dados, merge=False):
        self._operacoes.append(lambda: ref.set(dados, merge=merge))

    def create(self, ref, dados):
        self._operacoes.append(lambda: ref.create(dados))

    def update(self, ref, dados):
        self._operacoes.append(lambda: ref.update(dados))

    def delete(self, ref):
        self._operacoes.append(ref.delete)

    def commit(self):
        self._db.commits += 1
        copia = copy.deepcopy(self._db.dados)
        try:
            for operacao in self._operacoes:
                operacao()
        except Exception:
            self._db.dados = copia
            raise


class FirestoreFalso:
    def __init__(self):
        self.dados = {}
        self.commits = 0

    def collection(self, nome):
        return ColecaoFalsa(self, nome)

    def batch(self):
        return BatchFalso(self)

    # Atalhos para os testes
    def inserir(self, colecao, doc_id, dados):
        self.dados.setdefault(colecao, {})[doc_id] = copy.deepcopy(dados)

    def documento(self, colecao, doc_id):
        return self.dados.get(colecao, {}).get(doc_id)

    def todos(self, colecao):
        return self.dados.get(colecao, {})


# ===========================================================================
# Fixtures
# ===========================================================================

class ConfigDeTeste(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False
    LOGIN_EMAIL_DOMAIN = 'oficinadoaluno.com.br'


USUARIO_ADMIN = {
    'uid': 'admin-1',
    'nome': 'Secretaria',
    'email': 'secretaria@oficinadoaluno.com.br',
    'papel': 'admin',
    'permissoes': {p: True for p in PERMISSOES_ADMIN},
}

USUARIO_PROFESSOR = {
    'uid': 'prof-1',
    'nome': 'Ana Souza',
    'email': 'ana@oficinadoaluno.com.br',
    'papel': 'teacher',
}


@pytest.fixture
def db():
    return FirestoreFalso()


@pytest.fixture
def app(db):
    app = create_app(ConfigDeTeste)
    app.extensions['firestore'] = db
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def _cliente_logado(app, usuario):
    cliente = app.test_client()
    with cliente.session_transaction() as sessao:
        sessao['usuario'] = dict(usuario)
    return cliente


@pytest.fixture
def admin_client(app):
    return _cliente_logado(app, USUARIO_ADMIN)


@pytest.fixture
def professor_client(app):
    return _cliente_logado(app, USUARIO_PROFESSOR)


@pytest.fixture
def cliente_logado(app):
    """Fábrica para sessões com dados específicos (ex.: permissões restritas)."""
    return lambda usuario: _cliente_logado(app, usuario)
