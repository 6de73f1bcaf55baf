"""
Módulo Admin (Blueprint)

Gerencia as rotas do painel administrativo (cadastros, agenda, turmas,
financeiro e colaboradores).
"""

from flask import Blueprint

admin_bp = Blueprint(
    'admin_bp',
    __name__,
    url_prefix='/admin' # Todas as rotas começarão com /admin
)

from . import routes
