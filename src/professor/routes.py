"""
Rotas do Módulo do Professor

Todas as rotas operam sobre o profissional da sessão: o uid vem da
sessão, nunca da requisição.
"""

from datetime import date

from flask import jsonify, request

from . import professor_bp
from . import services
from .forms import RelatorioTurmaForm
from src.auth.routes import exigir_papel, usuario_logado
from src.core import repositorio
from src.core.constants import PAPEL_PROFESSOR
from src.core.erros import ErroValidacao, resposta_de_erro, resposta_de_formulario_invalido
from src.core.logger import get_logger

logger = get_logger(__name__)


@professor_bp.before_request
def restringir_acesso():
    return exigir_papel(PAPEL_PROFESSOR)


def _uid():
    return usuario_logado()['uid']


def _json():
    return request.get_json(silent=True) or {}


@professor_bp.route('/painel')
def painel():
    try:
        return jsonify(services.painel(_uid(), date.today()))
    except Exception as e:
        return resposta_de_erro(e, "carregar o painel do professor", logger)


@professor_bp.route('/agenda')
def agenda():
    try:
        hoje = date.today()
        ano = request.args.get('ano', hoje.year, type=int)
        mes = request.args.get('mes', hoje.month, type=int)
        if not 1 <= mes <= 12:
            raise ErroValidacao("Mês inválido.", 'mes')
        return jsonify({'year': ano, 'month': mes, 'items': services.agenda_do_mes(_uid(), ano, mes)})
    except Exception as e:
        return resposta_de_erro(e, "carregar a agenda do professor", logger)


@professor_bp.route('/disponibilidade')
def obter_disponibilidade():
    try:
        return jsonify({'availability': services.disponibilidade(_uid())})
    except Exception as e:
        return resposta_de_erro(e, "carregar disponibilidade", logger)


@professor_bp.route('/disponibilidade', methods=['PUT'])
def salvar_disponibilidade():
    try:
        disponibilidade = repositorio.salvar_disponibilidade(_uid(), _json().get('disponibilidade'))
        logger.info(f"Disponibilidade atualizada: {_uid()}")
        return jsonify({'availability': disponibilidade})
    except Exception as e:
        return resposta_de_erro(e, "salvar disponibilidade", logger, _json())


@professor_bp.route('/continuidade')
def continuidade():
    try:
        incluir = request.args.get('todos', 'false').lower() in ('true', '1')
        return jsonify(services.itens_continuidade(_uid(), incluir))
    except Exception as e:
        return resposta_de_erro(e, "carregar plano de continuidade", logger)


# === RELATÓRIOS ===

@professor_bp.route('/aulas/<aula_id>/relatorio', methods=['POST'])
def relatorio_individual(aula_id):
    try:
        services.salvar_relatorio_individual(_uid(), aula_id, _json().get('relatorio'))
        return jsonify({'id': aula_id, 'reportRegistered': True}), 201
    except Exception as e:
        return resposta_de_erro(e, "salvar relatório", logger, _json())


@professor_bp.route('/aulas/<aula_id>/diagnostico', methods=['POST'])
def relatorio_diagnostico(aula_id):
    try:
        services.salvar_relatorio_diagnostico(_uid(), aula_id, _json().get('relatorio'))
        return jsonify({'id': aula_id, 'reportRegistered': True}), 201
    except Exception as e:
        return resposta_de_erro(e, "salvar relatório diagnóstico", logger, _json())


@professor_bp.route('/turmas/<turma_id>/relatorios', methods=['POST'])
def relatorio_turma(turma_id):
    form = RelatorioTurmaForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        chave = services.salvar_relatorio_turma(
            _uid(), turma_id, form.aluno_id.data, form.dia.data, _json().get('relatorio')
        )
        return jsonify({'id': chave}), 201
    except Exception as e:
        return resposta_de_erro(e, "salvar relatório da turma", logger, _json())
