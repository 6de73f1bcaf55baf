"""
Estado de Sessão

Representa explicitamente o estado de autenticação do usuário
(carregando / não autenticado / autenticado com papel) e notifica
observadores a cada transição. A instância do observador é criada pela
Application Factory e fica em app.extensions['sessao'].
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from flask import current_app, session

from src.core.logger import get_logger

logger = get_logger(__name__)

CARREGANDO = 'loading'
NAO_AUTENTICADO = 'unauthenticated'
AUTENTICADO = 'authenticated'

CHAVE_SESSAO = 'usuario'


@dataclass(frozen=True)
class EstadoSessao:
    status: str
    usuario: Optional[Dict] = None
    papel: Optional[str] = None

    @property
    def autenticado(self) -> bool:
        return self.status == AUTENTICADO

    def to_dict(self) -> Dict:
        return {'status': self.status, 'user': self.usuario, 'role': self.papel}


ESTADO_CARREGANDO = EstadoSessao(CARREGANDO)
ESTADO_ANONIMO = EstadoSessao(NAO_AUTENTICADO)


def estado_autenticado(usuario: Dict, papel: str) -> EstadoSessao:
    return EstadoSessao(AUTENTICADO, usuario=usuario, papel=papel)


@dataclass
class ObservadorSessao:
    """Registro de callbacks chamados a cada mudança de estado."""
    ouvintes: List[Callable[[EstadoSessao, EstadoSessao], None]] = field(default_factory=list)

    def inscrever(self, ouvinte: Callable[[EstadoSessao, EstadoSessao], None]) -> Callable[[], None]:
        self.ouvintes.append(ouvinte)

        def cancelar():
            if ouvinte in self.ouvintes:
                self.ouvintes.remove(ouvinte)
        return cancelar

    def notificar(self, anterior: EstadoSessao, novo: EstadoSessao) -> None:
        for ouvinte in list(self.ouvintes):
            try:
                ouvinte(anterior, novo)
            except Exception as e:
                logger.error(f"Erro em ouvinte de sessão: {e}", exc_info=True)


def registrar_transicao(anterior: EstadoSessao, novo: EstadoSessao) -> None:
    email = (novo.usuario or anterior.usuario or {}).get('email')
    logger.info(f"Sessão: {anterior.status} -> {novo.status} ({email}, papel={novo.papel})")


# === INTEGRAÇÃO COM A SESSÃO DO FLASK ===

def _observador() -> ObservadorSessao:
    return current_app.extensions['sessao']


def estado_atual() -> EstadoSessao:
    dados = session.get(CHAVE_SESSAO)
    if not dados:
        return ESTADO_ANONIMO
    return estado_autenticado(dados, dados.get('papel'))


def abrir_sessao(usuario: Dict, papel: str) -> EstadoSessao:
    anterior = estado_atual()
    _observador().notificar(anterior, ESTADO_CARREGANDO)
    novo = estado_autenticado({**usuario, 'papel': papel}, papel)
    session[CHAVE_SESSAO] = novo.usuario
    session.modified = True
    _observador().notificar(ESTADO_CARREGANDO, novo)
    return novo


def encerrar_sessao() -> EstadoSessao:
    anterior = estado_atual()
    session.pop(CHAVE_SESSAO, None)
    if anterior.autenticado:
        _observador().notificar(anterior, ESTADO_ANONIMO)
    return ESTADO_ANONIMO
