"""
Módulo do Professor (Blueprint)

Painel dos profissionais: agenda própria, disponibilidade, relatórios
de aula e plano de continuidade dos alunos.
"""

from flask import Blueprint

professor_bp = Blueprint(
    'professor_bp',
    __name__,
    url_prefix='/professor'
)

from . import routes
