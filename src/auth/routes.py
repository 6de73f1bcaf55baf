"""
Rotas do Módulo de Autenticação

Gerencia /login, /logout e /sessao (estado atual da sessão).
"""

from flask import current_app, jsonify, request
from flask_wtf.csrf import generate_csrf

from . import auth_bp
from . import services as auth_services
from .forms import LoginForm
from src.core.erros import traduzir_erro
from src.core.extensions import limiter
from src.core.logger import get_logger
from src.core.sessao import abrir_sessao, encerrar_sessao, estado_atual

logger = get_logger(__name__)


def _limite_login():
    return current_app.config.get('LOGIN_RATE_LIMIT', '10 per minute')


@auth_bp.route('/sessao')
def sessao():
    """Estado da sessão + token CSRF para o front-end."""
    dados = estado_atual().to_dict()
    dados['csrfToken'] = generate_csrf()
    return jsonify(dados)


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(_limite_login)
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({'error': 'Dados inválidos.', 'fields': form.errors}), 400

    try:
        papel, perfil = auth_services.efetuar_login(form.login.data, form.senha.data)
    except Exception as e:
        mensagem, status = traduzir_erro(e)
        if status >= 500:
            logger.error(f"Erro no login: {e}", exc_info=True)
        else:
            logger.warning(f"Login recusado para '{form.login.data}': {e}")
        return jsonify({'error': mensagem, 'login': form.login.data}), status

    estado = abrir_sessao(perfil, papel)
    return jsonify(estado.to_dict())


@auth_bp.route('/logout', methods=['POST'])
def logout():
    return jsonify(encerrar_sessao().to_dict())


def usuario_logado():
    """Dados do usuário da sessão (ou None)."""
    estado = estado_atual()
    return estado.usuario if estado.autenticado else None


def exigir_papel(papel: str):
    """Resposta de erro se o usuário não tem o papel pedido; None se pode seguir."""
    estado = estado_atual()
    if not estado.autenticado:
        return jsonify({'error': 'Sessão expirada. Faça login novamente.'}), 401
    if estado.papel != papel:
        logger.warning(f"Acesso negado: {estado.usuario.get('email')} (papel={estado.papel})")
        return jsonify({'error': 'Você não tem permissão para acessar esta área.'}), 403
    return None
