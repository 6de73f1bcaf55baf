"""
Tradução de Erros dos Provedores

Converte exceções do Firestore (google.api_core) e códigos do Firebase
Authentication em mensagens amigáveis em português + status HTTP.
"""

from typing import Tuple

from flask import jsonify
from google.api_core import exceptions as gexc

MENSAGEM_GENERICA = "Ocorreu um erro. Tente novamente."
MENSAGEM_SEM_PERMISSAO = "Você não tem permissão para realizar esta operação."
MENSAGEM_CONFIGURACAO = "Erro de configuração do banco de dados. Contate o suporte."
MENSAGEM_CONEXAO = "Erro de conexão. Verifique sua internet."
MENSAGEM_LOGIN_EM_USO = "Erro: O login (email) já está em uso."
MENSAGEM_SENHA_FRACA = "Erro: A senha é muito fraca. Use pelo menos 6 caracteres."
MENSAGEM_LOGIN_INVALIDO = "Login ou senha inválidos."
MENSAGEM_CONTA_NAO_ENCONTRADA = "Sua conta não foi encontrada. Entre em contato com o suporte."
MENSAGEM_NAO_ENCONTRADO = "Registro não encontrado."
MENSAGEM_DADOS_INVALIDOS = "Dados inválidos."

# Códigos devolvidos pelo Identity Toolkit (campo error.message)
_ERROS_AUTH = {
    'EMAIL_EXISTS': (MENSAGEM_LOGIN_EM_USO, 409),
    'WEAK_PASSWORD': (MENSAGEM_SENHA_FRACA, 400),
    'EMAIL_NOT_FOUND': (MENSAGEM_LOGIN_INVALIDO, 401),
    'INVALID_PASSWORD': (MENSAGEM_LOGIN_INVALIDO, 401),
    'INVALID_LOGIN_CREDENTIALS': (MENSAGEM_LOGIN_INVALIDO, 401),
    'INVALID_EMAIL': (MENSAGEM_LOGIN_INVALIDO, 401),
    'USER_DISABLED': (MENSAGEM_SEM_PERMISSAO, 403),
    'USER_NOT_REGISTERED': (MENSAGEM_CONTA_NAO_ENCONTRADA, 403),
}


class ErroAutenticacao(Exception):
    """Falha reportada pelo provedor de autenticação."""

    def __init__(self, codigo: str, mensagem: str = None):
        # O Identity Toolkit às vezes anexa detalhes: 'WEAK_PASSWORD : Password should be...'
        self.codigo = (codigo or '').split(' ')[0]
        super().__init__(mensagem or self.codigo)


class ErroValidacao(Exception):
    """Regra de negócio violada antes de qualquer gravação."""

    def __init__(self, mensagem: str, campo: str = None):
        self.campo = campo
        super().__init__(mensagem)


class ErroNaoEncontrado(Exception):
    pass


class ErroPermissao(Exception):
    """Registro existe, mas pertence a outro usuário."""


def traduzir_erro(erro: Exception) -> Tuple[str, int]:
    """Retorna (mensagem para o usuário, status HTTP)."""
    if isinstance(erro, ErroAutenticacao):
        return _ERROS_AUTH.get(erro.codigo, (MENSAGEM_GENERICA, 500))
    if isinstance(erro, ErroValidacao):
        return str(erro), 400
    if isinstance(erro, (ErroNaoEncontrado, gexc.NotFound)):
        return MENSAGEM_NAO_ENCONTRADO, 404
    if isinstance(erro, (ErroPermissao, gexc.PermissionDenied)):
        return MENSAGEM_SEM_PERMISSAO, 403
    if isinstance(erro, gexc.FailedPrecondition):
        return MENSAGEM_CONFIGURACAO, 500
    if isinstance(erro, (gexc.ServiceUnavailable, gexc.DeadlineExceeded, ConnectionError)):
        return MENSAGEM_CONEXAO, 503
    return MENSAGEM_GENERICA, 500


def _sem_senha(dados):
    if isinstance(dados, dict):
        return {k: v for k, v in dados.items() if k != 'senha'}
    return dados


def resposta_de_erro(erro: Exception, contexto: str, logger, dados=None):
    """
    Resposta JSON para uma exceção capturada numa rota.
    Erros do servidor vão para o log com stack trace; erros do usuário, como aviso.
    """
    mensagem, status = traduzir_erro(erro)
    if status >= 500:
        logger.error(f"Erro ao {contexto}: {erro}", exc_info=True)
    else:
        logger.warning(f"Falha ao {contexto}: {erro}")

    corpo = {'error': mensagem}
    if isinstance(erro, ErroValidacao) and erro.campo:
        corpo['fields'] = {erro.campo: [mensagem]}
    if dados is not None:
        corpo['data'] = _sem_senha(dados)
    return jsonify(corpo), status


def resposta_de_formulario_invalido(form, dados=None):
    """400 com os erros por campo e os dados enviados, para o cliente não perdê-los."""
    return jsonify({'error': MENSAGEM_DADOS_INVALIDOS, 'fields': form.errors, 'data': _sem_senha(dados)}), 400
