"""
Camada de Serviço (Service Layer) da Autenticação

Conversa com o Firebase Authentication (Identity Toolkit REST) e resolve
o papel do usuário a partir das coleções 'collaborators' e 'professionals'.
"""

from typing import Dict, Optional, Tuple

import requests
from flask import current_app

from src.core.constants import (
    COLECAO_COLABORADORES, COLECAO_PROFISSIONAIS, PAPEL_ADMIN, PAPEL_PROFESSOR,
    PERMISSOES_ADMIN,
)
from src.core.database import obter
from src.core.erros import ErroAutenticacao
from src.core.logger import get_logger
from src.core.models import Colaborador, Profissional

logger = get_logger(__name__)


def login_para_email(login: str, dominio: Optional[str] = None) -> str:
    """
    Converte o 'login' escolhido pela equipe em e-mail para o provedor.
    Logins que já contêm '@' são usados como estão.
    """
    login = (login or '').strip()
    if '@' in login:
        return login
    dominio = dominio or current_app.config['LOGIN_EMAIL_DOMAIN']
    return f"{login}@{dominio}"


def _chamar_identity_toolkit(metodo: str, payload: Dict) -> Dict:
    api_key = current_app.config.get('FIREBASE_API_KEY')
    if not api_key:
        raise ErroAutenticacao('CONFIGURATION_NOT_FOUND', "FIREBASE_API_KEY não configurada.")

    url = f"{current_app.config['IDENTITY_TOOLKIT_URL']}/accounts:{metodo}"
    try:
        resposta = requests.post(
            url,
            params={'key': api_key},
            json={**payload, 'returnSecureToken': True},
            timeout=current_app.config.get('AUTH_TIMEOUT', 10),
        )
    except requests.RequestException as e:
        logger.error(f"Falha de rede no Identity Toolkit ({metodo}): {e}")
        raise ConnectionError(str(e)) from e

    dados = resposta.json() if resposta.content else {}
    if resposta.status_code != 200:
        codigo = (dados.get('error') or {}).get('message', 'UNKNOWN')
        raise ErroAutenticacao(codigo)
    return dados


def autenticar(email: str, senha: str) -> Dict:
    """Verifica e-mail/senha. Retorna {'uid', 'email', 'idToken'}."""
    dados = _chamar_identity_toolkit('signInWithPassword', {'email': email, 'password': senha})
    return {'uid': dados['localId'], 'email': dados.get('email', email), 'idToken': dados.get('idToken')}


def criar_identidade(login: str, senha: str) -> str:
    """Cria a identidade no provedor e retorna o uid (usado como ID do documento)."""
    email = login_para_email(login)
    dados = _chamar_identity_toolkit('signUp', {'email': email, 'password': senha})
    logger.info(f"Identidade criada: {email}")
    return dados['localId']


def resolver_papel(uid: str) -> Tuple[Optional[str], Optional[Dict]]:
    """
    Colaborador com acesso 'admin' -> painel administrativo;
    colaborador só com 'teacher' ou profissional cadastrado -> painel do professor.
    Retorna (None, None) se o uid não estiver em nenhuma das coleções.
    """
    dados = obter(COLECAO_COLABORADORES, uid)
    if dados:
        colaborador = Colaborador.from_dict(dados, uid)
        if PAPEL_ADMIN in colaborador.acesso_sistema:
            return PAPEL_ADMIN, {
                'uid': uid,
                'nome': colaborador.nome,
                'permissoes': colaborador.permissoes_admin,
            }
        if not colaborador.acesso_sistema:
            # Cadastros antigos, anteriores ao controle por painel, têm acesso total
            return PAPEL_ADMIN, {
                'uid': uid,
                'nome': colaborador.nome,
                'permissoes': {p: True for p in PERMISSOES_ADMIN},
            }
        if PAPEL_PROFESSOR in colaborador.acesso_sistema:
            return PAPEL_PROFESSOR, {'uid': uid, 'nome': colaborador.nome}

    dados = obter(COLECAO_PROFISSIONAIS, uid)
    if dados:
        profissional = Profissional.from_dict(dados, uid)
        if profissional.status != 'ativo':
            logger.warning(f"Login de profissional inativo recusado: {uid}")
            return None, None
        return PAPEL_PROFESSOR, {'uid': uid, 'nome': profissional.nome}

    return None, None


def efetuar_login(login: str, senha: str) -> Tuple[str, Dict]:
    email = login_para_email(login)
    identidade = autenticar(email, senha)
    papel, perfil = resolver_papel(identidade['uid'])
    if papel is None:
        logger.error(f"Usuário sem cadastro em 'collaborators' ou 'professionals': {email}")
        raise ErroAutenticacao('USER_NOT_REGISTERED')
    perfil['email'] = identidade['email']
    logger.info(f"Login efetuado: {email} (Papel: {papel})")
    return papel, perfil
