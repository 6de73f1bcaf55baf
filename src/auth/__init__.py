"""
Módulo de Autenticação (Blueprint)

Define o Blueprint do Flask para as rotas de sessão (Login, Logout, Estado).
"""

from flask import Blueprint

auth_bp = Blueprint('auth_bp', __name__)

# Importa as rotas no final para evitar dependência circular
from . import routes
