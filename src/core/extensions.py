"""
Extensões Flask compartilhadas pelos blueprints.

As instâncias nascem aqui sem aplicação e são ligadas em create_app(),
o que evita importações circulares entre rotas e factory.
"""
from flask import session
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_wtf.csrf import CSRFProtect


def chave_do_limite() -> str:
    """Usuário logado conta pelo uid (a secretaria divide o mesmo IP); anônimo, pelo IP."""
    usuario = session.get('usuario') or {}
    return usuario.get('uid') or get_remote_address()


# Armazenamento vem de RATELIMIT_STORAGE_URI (memory:// em dev, Redis em produção)
limiter = Limiter(
    key_func=chave_do_limite,
    default_limits=["2000 per day", "500 per hour"]
)

# Os formulários chegam em JSON; o token vai no header X-CSRFToken (ver /sessao)
csrf = CSRFProtect()
