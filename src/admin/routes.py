"""
Rotas do Módulo Admin

Endpoints JSON do painel administrativo. Cada seção exige a permissão
correspondente em 'adminPermissions' do colaborador logado.
"""

from datetime import date
from functools import wraps

from flask import jsonify, request

from . import admin_bp
from . import services
from .forms import (
    AgendarAulaForm, AlunoForm, ColaboradorForm, ProfissionalForm, StatusForm,
    TransacaoForm, TurmaForm,
)
from src.auth.routes import exigir_papel, usuario_logado
from src.core.agenda import janela_ao_redor, parse_data
from src.core.constants import PAPEL_ADMIN
from src.core.erros import (
    MENSAGEM_SEM_PERMISSAO, ErroValidacao, resposta_de_erro,
    resposta_de_formulario_invalido,
)
from src.core.logger import get_logger

logger = get_logger(__name__)

# === FUNÇÕES AUXILIARES ===

@admin_bp.before_request
def restringir_acesso():
    return exigir_papel(PAPEL_ADMIN)


def requer_permissao(permissao):
    """Bloqueia a rota se o colaborador não tiver a permissão da seção."""
    def decorador(view):
        @wraps(view)
        def envolvida(*args, **kwargs):
            permissoes = (usuario_logado() or {}).get('permissoes') or {}
            if not permissoes.get(permissao):
                logger.warning(f"Permissão '{permissao}' negada para {usuario_logado().get('email')}")
                return jsonify({'error': MENSAGEM_SEM_PERMISSAO}), 403
            return view(*args, **kwargs)
        return envolvida
    return decorador


def _json():
    return request.get_json(silent=True) or {}


def _ano_mes():
    hoje = date.today()
    ano = request.args.get('ano', hoje.year, type=int)
    mes = request.args.get('mes', hoje.month, type=int)
    if not 1 <= mes <= 12:
        raise ErroValidacao("Mês inválido.", 'mes')
    return ano, mes


def _dia(parametro='data', padrao=None):
    valor = request.args.get(parametro)
    if not valor:
        return padrao
    dia = parse_data(valor)
    if dia is None:
        raise ErroValidacao("Data inválida.", parametro)
    return dia


# === PAINEL ===

@admin_bp.route('/painel')
def painel():
    try:
        return jsonify(services.painel(date.today(), usuario_logado()['uid']))
    except Exception as e:
        return resposta_de_erro(e, "carregar o painel", logger)


# === ALUNOS ===

@admin_bp.route('/alunos')
@requer_permissao('canAccessStudents')
def listar_alunos():
    try:
        return jsonify(services.listar_alunos())
    except Exception as e:
        return resposta_de_erro(e, "listar alunos", logger)


@admin_bp.route('/alunos', methods=['POST'])
@requer_permissao('canAccessStudents')
def criar_aluno():
    form = AlunoForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        aluno_id = services.criar_aluno(form.data)
        return jsonify({'id': aluno_id}), 201
    except Exception as e:
        return resposta_de_erro(e, "cadastrar aluno", logger, _json())


@admin_bp.route('/alunos/<aluno_id>', methods=['PUT'])
@requer_permissao('canAccessStudents')
def atualizar_aluno(aluno_id):
    form = AlunoForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        aluno = services.atualizar_aluno(aluno_id, form.data)
        return jsonify({'id': aluno_id, **aluno.to_dict()})
    except Exception as e:
        return resposta_de_erro(e, "atualizar aluno", logger, _json())


@admin_bp.route('/alunos/<aluno_id>/status', methods=['POST'])
@requer_permissao('canAccessStudents')
def alterar_status_aluno(aluno_id):
    form = StatusForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        services.alterar_status_aluno(aluno_id, form.status.data)
        return jsonify({'id': aluno_id, 'status': form.status.data})
    except Exception as e:
        return resposta_de_erro(e, "alterar status do aluno", logger)


# === PROFISSIONAIS ===

@admin_bp.route('/profissionais')
@requer_permissao('canAccessProfessionals')
def listar_profissionais():
    try:
        return jsonify(services.listar_profissionais())
    except Exception as e:
        return resposta_de_erro(e, "listar profissionais", logger)


@admin_bp.route('/profissionais', methods=['POST'])
@requer_permissao('canAccessProfessionals')
def criar_profissional():
    form = ProfissionalForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        uid = services.criar_profissional(form.data)
        return jsonify({'id': uid}), 201
    except Exception as e:
        return resposta_de_erro(e, "cadastrar profissional", logger, _json())


@admin_bp.route('/profissionais/<profissional_id>', methods=['PUT'])
@requer_permissao('canAccessProfessionals')
def atualizar_profissional(profissional_id):
    form = ProfissionalForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        profissional = services.atualizar_profissional(profissional_id, form.data)
        return jsonify({'id': profissional_id, **profissional.to_dict()})
    except Exception as e:
        return resposta_de_erro(e, "atualizar profissional", logger, _json())


@admin_bp.route('/profissionais/<profissional_id>/status', methods=['POST'])
@requer_permissao('canAccessProfessionals')
def alternar_status_profissional(profissional_id):
    try:
        novo = services.alternar_status_profissional(profissional_id)
        return jsonify({'id': profissional_id, 'status': novo})
    except Exception as e:
        return resposta_de_erro(e, "alterar status do profissional", logger)


@admin_bp.route('/profissionais/<profissional_id>/disponibilidade', methods=['PUT'])
@requer_permissao('canAccessProfessionals')
def salvar_disponibilidade(profissional_id):
    try:
        disponibilidade = services.salvar_disponibilidade(profissional_id, _json().get('disponibilidade'))
        return jsonify({'id': profissional_id, 'availability': disponibilidade})
    except Exception as e:
        return resposta_de_erro(e, "salvar disponibilidade", logger, _json())


# === AGENDA ===

@admin_bp.route('/agenda/dia')
@requer_permissao('canAccessAgenda')
def agenda_dia():
    try:
        dia = _dia('data', date.today())
        return jsonify(services.grade_do_dia(dia))
    except Exception as e:
        return resposta_de_erro(e, "montar a agenda do dia", logger)


@admin_bp.route('/agenda/mes')
@requer_permissao('canAccessAgenda')
def agenda_mes():
    try:
        ano, mes = _ano_mes()
        return jsonify({'year': ano, 'month': mes, 'items': services.agenda_do_mes(ano, mes)})
    except Exception as e:
        return resposta_de_erro(e, "montar a agenda do mês", logger)


@admin_bp.route('/agenda/avisos', methods=['POST'])
@requer_permissao('canAccessAgenda')
def avisos_agendamento():
    """Pré-visualização dos avisos; nada é gravado."""
    form = AgendarAulaForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        return jsonify(services.avaliar_agendamento_formulario(form.data).to_dict())
    except Exception as e:
        return resposta_de_erro(e, "calcular avisos", logger)


@admin_bp.route('/agenda/aulas', methods=['POST'])
@requer_permissao('canAccessAgenda')
def agendar_aula():
    form = AgendarAulaForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        aula_id, avisos = services.agendar_aula(form.data)
    except Exception as e:
        return resposta_de_erro(e, "agendar aula", logger, _json())

    if aula_id is None:
        # Créditos insuficientes: o cliente precisa reenviar com 'ciente_sem_creditos'
        return jsonify({
            'scheduled': False,
            'confirmationRequired': True,
            'warnings': avisos.to_dict(),
            'data': _json(),
        })
    return jsonify({'id': aula_id, 'scheduled': True, 'warnings': avisos.to_dict()}), 201


@admin_bp.route('/agenda/aulas/<aula_id>', methods=['PUT'])
@requer_permissao('canAccessAgenda')
def atualizar_aula(aula_id):
    form = AgendarAulaForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        avisos = services.atualizar_aula(aula_id, form.data)
        return jsonify({'id': aula_id, 'warnings': avisos.to_dict()})
    except Exception as e:
        return resposta_de_erro(e, "atualizar aula", logger, _json())


# === TURMAS ===

@admin_bp.route('/turmas')
@requer_permissao('canAccessClassGroups')
def listar_turmas():
    try:
        return jsonify(services.listar_turmas())
    except Exception as e:
        return resposta_de_erro(e, "listar turmas", logger)


@admin_bp.route('/turmas', methods=['POST'])
@requer_permissao('canAccessClassGroups')
def criar_turma():
    form = TurmaForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        turma_id = services.criar_turma(form.data, _json().get('dias'))
        return jsonify({'id': turma_id}), 201
    except Exception as e:
        return resposta_de_erro(e, "criar turma", logger, _json())


@admin_bp.route('/turmas/<turma_id>/arquivar', methods=['POST'])
@requer_permissao('canAccessClassGroups')
def arquivar_turma(turma_id):
    try:
        services.arquivar_turma(turma_id)
        return jsonify({'id': turma_id, 'status': 'archived'})
    except Exception as e:
        return resposta_de_erro(e, "arquivar turma", logger)


@admin_bp.route('/turmas/<turma_id>/instancias')
@requer_permissao('canAccessClassGroups')
def instancias_turma(turma_id):
    try:
        inicio_padrao, fim_padrao = janela_ao_redor(date.today())
        inicio = _dia('inicio', inicio_padrao)
        fim = _dia('fim', fim_padrao)
        return jsonify(services.instancias_turma(turma_id, inicio, fim))
    except Exception as e:
        return resposta_de_erro(e, "listar ocorrências da turma", logger)


# === FINANCEIRO ===

@admin_bp.route('/financeiro/resumo')
@requer_permissao('canAccessFinancial')
def resumo_financeiro():
    try:
        ano, mes = _ano_mes()
        return jsonify(services.resumo_financeiro(ano, mes))
    except Exception as e:
        return resposta_de_erro(e, "calcular resumo financeiro", logger)


@admin_bp.route('/financeiro/historico')
@requer_permissao('canAccessFinancial')
def historico_financeiro():
    try:
        ano, mes = _ano_mes()
        meses = min(max(request.args.get('meses', 12, type=int), 1), 60)
        return jsonify(services.historico_financeiro(ano, mes, meses))
    except Exception as e:
        return resposta_de_erro(e, "calcular histórico financeiro", logger)


@admin_bp.route('/financeiro/transacoes')
@requer_permissao('canAccessFinancial')
def listar_transacoes():
    try:
        ano = request.args.get('ano', type=int)
        mes = request.args.get('mes', type=int)
        return jsonify(services.listar_transacoes(ano, mes))
    except Exception as e:
        return resposta_de_erro(e, "listar transações", logger)


@admin_bp.route('/financeiro/transacoes', methods=['POST'])
@requer_permissao('canAccessFinancial')
def registrar_transacao():
    form = TransacaoForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        transacao_id, duplicada = services.registrar_transacao(form.data, usuario_logado()['uid'])
    except Exception as e:
        return resposta_de_erro(e, "registrar transação", logger, _json())
    return jsonify({'id': transacao_id, 'duplicate': duplicada}), 200 if duplicada else 201


@admin_bp.route('/financeiro/remuneracoes')
@requer_permissao('canAccessFinancial')
def remuneracoes():
    try:
        ano, mes = _ano_mes()
        return jsonify({'year': ano, 'month': mes, **services.remuneracoes(ano, mes)})
    except Exception as e:
        return resposta_de_erro(e, "projetar remunerações", logger)


@admin_bp.route('/financeiro/categorias')
@requer_permissao('canAccessFinancial')
def obter_categorias():
    try:
        return jsonify(services.obter_categorias())
    except Exception as e:
        return resposta_de_erro(e, "carregar categorias", logger)


@admin_bp.route('/financeiro/categorias', methods=['PUT'])
@requer_permissao('canAccessFinancial')
def salvar_categorias():
    dados = _json()
    try:
        categorias = services.salvar_categorias(dados.get('incomeCategories', []),
                                                dados.get('expenseCategories', []))
        return jsonify(categorias)
    except Exception as e:
        return resposta_de_erro(e, "salvar categorias", logger, dados)


# === COLABORADORES ===

@admin_bp.route('/colaboradores')
@requer_permissao('canAccessSettings')
def listar_colaboradores():
    try:
        return jsonify(services.listar_colaboradores())
    except Exception as e:
        return resposta_de_erro(e, "listar colaboradores", logger)


@admin_bp.route('/colaboradores', methods=['POST'])
@requer_permissao('canAccessSettings')
def criar_colaborador():
    form = ColaboradorForm()
    if not form.validate_on_submit():
        return resposta_de_formulario_invalido(form, _json())
    try:
        colaborador_id = services.criar_colaborador(form.data, _json().get('permissoes'))
        return jsonify({'id': colaborador_id}), 201
    except Exception as e:
        return resposta_de_erro(e, "cadastrar colaborador", logger, _json())


@admin_bp.route('/colaboradores/<colaborador_id>/acesso', methods=['PUT'])
@requer_permissao('canAccessSettings')
def atualizar_acesso_colaborador(colaborador_id):
    dados = _json()
    try:
        colaborador = services.atualizar_acesso_colaborador(
            colaborador_id, dados.get('acesso_sistema'), dados.get('permissoes')
        )
        return jsonify({'id': colaborador_id, **colaborador.to_dict()})
    except Exception as e:
        return resposta_de_erro(e, "atualizar acesso do colaborador", logger, dados)
