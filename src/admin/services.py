"""
Camada de Serviço (Service Layer) da Administração

Regras de negócio do painel administrativo: cadastros, agenda, turmas,
financeiro e colaboradores. As rotas validam o formato da requisição
(WTForms) e delegam para cá; aqui ficam as gravações no Firestore.

Gravações dependentes (transação + créditos do aluno, aula + consumo de
créditos) são feitas num único WriteBatch, que é atômico.
"""

import re
from datetime import date
from typing import Dict, List, Optional, Tuple

from google.api_core import exceptions as gexc
from google.cloud import firestore

from src.auth.services import criar_identidade
from src.core import repositorio
from src.core.agenda import (
    agregar_aulas, aulas_do_mes, expandir_turma, limites_do_mes, montar_grade_dia, nome_ou_padrao,
    parse_data, relatorio_registrado, rotulo_relatorio,
)
from src.core.avisos import AvisosAgendamento, avaliar_agendamento
from src.core.constants import (
    COLECAO_ALUNOS, COLECAO_AULAS, COLECAO_COLABORADORES, COLECAO_CONFIGURACOES,
    COLECAO_NOTIFICACOES, COLECAO_PROFISSIONAIS, COLECAO_TRANSACOES, COLECAO_TURMAS,
    DIAS_SEMANA, DOC_CONFIG_FINANCEIRO, PAINEIS_SISTEMA, PERMISSOES_ADMIN,
    STATUS_ALUNO,
)
from src.core.database import get_db, listar, obter, sanitizar
from src.core.erros import ErroNaoEncontrado, ErroValidacao
from src.core.financeiro import (
    historico_mensal, projetar_remuneracoes, remuneracao_colaborador, resumo_mensal,
)
from src.core.logger import get_logger
from src.core.models import (
    AgendaTurma, Aluno, AulaAgendada, Colaborador, Profissional, Transacao, Turma,
)

logger = get_logger(__name__)

HORARIO_RE = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
MAX_NOTIFICACOES = 10


def _carregar(colecao: str, modelo, doc_id: str):
    dados = obter(colecao, doc_id)
    if dados is None:
        raise ErroNaoEncontrado(f"{colecao}/{doc_id}")
    return modelo.from_dict(dados, doc_id)


def _ordem_cronologica(valor) -> str:
    # createdAt pode ser Timestamp do Firestore (datetime) ou string ISO
    if hasattr(valor, 'isoformat'):
        return valor.isoformat()
    return str(valor or '')


# ===========================================================================
# Alunos
# ===========================================================================

def listar_alunos() -> List[Dict]:
    return [{'id': a.id, **a.to_dict()} for a in repositorio.carregar_alunos()]


def _aluno_do_formulario(dados: Dict, base: Optional[Aluno] = None) -> Aluno:
    aluno = base or Aluno()
    aluno.nome = dados['nome'].strip()
    aluno.responsavel = dados.get('responsavel') or ''
    aluno.escola = dados.get('escola') or ''
    aluno.serie = dados.get('serie') or ''
    aluno.status = dados.get('status') or aluno.status
    aluno.plano_mensal = bool(dados.get('plano_mensal'))
    aluno.data_nascimento = dados.get('data_nascimento') or None
    aluno.telefone = dados.get('telefone') or None
    aluno.email = dados.get('email') or None
    aluno.telefone_responsavel = dados.get('telefone_responsavel') or None
    aluno.email_responsavel = dados.get('email_responsavel') or None
    return aluno


def criar_aluno(dados: Dict) -> str:
    # Saldo inicial sempre zero: créditos só entram por transação
    aluno = _aluno_do_formulario(dados)
    aluno.creditos = 0.0
    ref = get_db().collection(COLECAO_ALUNOS).document()
    ref.set(sanitizar(aluno.to_dict()))
    logger.info(f"Aluno cadastrado: {aluno.nome} ({ref.id})")
    return ref.id


def atualizar_aluno(aluno_id: str, dados: Dict) -> Aluno:
    aluno = _carregar(COLECAO_ALUNOS, Aluno, aluno_id)
    aluno = _aluno_do_formulario(dados, aluno)
    campos = aluno.to_dict()
    # 'credits' só muda via Increment (transações e agendamentos)
    campos.pop('credits')
    get_db().collection(COLECAO_ALUNOS).document(aluno_id).update(campos)
    return aluno


def alterar_status_aluno(aluno_id: str, status: str) -> None:
    if status not in STATUS_ALUNO:
        raise ErroValidacao(f"Status inválido: {status}", 'status')
    _carregar(COLECAO_ALUNOS, Aluno, aluno_id)
    get_db().collection(COLECAO_ALUNOS).document(aluno_id).update({'status': status})
    logger.info(f"Aluno {aluno_id} -> {status}")


# ===========================================================================
# Profissionais
# ===========================================================================

def listar_profissionais() -> List[Dict]:
    return [{'id': p.id, **p.to_dict()} for p in repositorio.carregar_profissionais()]


def criar_profissional(dados: Dict) -> str:
    """Cria a identidade no provedor e o documento professionals/{uid}."""
    if not dados.get('login') or not dados.get('senha'):
        raise ErroValidacao("Login e senha são obrigatórios para novos profissionais.", 'login')

    uid = criar_identidade(dados['login'], dados['senha'])
    profissional = Profissional(
        id=uid,
        nome=dados['nome'].strip(),
        disciplinas=list(dados.get('disciplinas') or []),
        status='ativo',
        valor_hora_individual=dados.get('valor_hora_individual') or 0.0,
        valor_hora_turma=dados.get('valor_hora_turma') or 0.0,
        telefone=dados.get('telefone') or '',
        email=dados.get('email') or None,
        login=dados['login'],
        data_nascimento=dados.get('data_nascimento') or None,
    )
    get_db().collection(COLECAO_PROFISSIONAIS).document(uid).set(sanitizar(profissional.to_dict()))
    logger.info(f"Profissional cadastrado: {profissional.nome} ({uid})")
    return uid


def atualizar_profissional(profissional_id: str, dados: Dict) -> Profissional:
    profissional = _carregar(COLECAO_PROFISSIONAIS, Profissional, profissional_id)
    profissional.nome = dados['nome'].strip()
    profissional.disciplinas = list(dados.get('disciplinas') or [])
    profissional.telefone = dados.get('telefone') or ''
    profissional.email = dados.get('email') or None
    profissional.data_nascimento = dados.get('data_nascimento') or None
    if dados.get('valor_hora_individual') is not None:
        profissional.valor_hora_individual = dados['valor_hora_individual']
    if dados.get('valor_hora_turma') is not None:
        profissional.valor_hora_turma = dados['valor_hora_turma']

    campos = profissional.to_dict()
    # Disponibilidade, status e login têm fluxos próprios
    for chave in ('availability', 'status', 'login'):
        campos.pop(chave)
    get_db().collection(COLECAO_PROFISSIONAIS).document(profissional_id).update(sanitizar(campos))
    return profissional


def alternar_status_profissional(profissional_id: str) -> str:
    """Exclusão lógica: ativo <-> inativo."""
    profissional = _carregar(COLECAO_PROFISSIONAIS, Profissional, profissional_id)
    novo = 'inativo' if profissional.status == 'ativo' else 'ativo'
    get_db().collection(COLECAO_PROFISSIONAIS).document(profissional_id).update({'status': novo})
    logger.info(f"Profissional {profissional_id} -> {novo}")
    return novo


def salvar_disponibilidade(profissional_id: str, disponibilidade) -> Dict[str, List[str]]:
    _carregar(COLECAO_PROFISSIONAIS, Profissional, profissional_id)
    return repositorio.salvar_disponibilidade(profissional_id, disponibilidade)


# ===========================================================================
# Agenda
# ===========================================================================

def _itens_agenda(inicio: date, fim: date, profissional_id: Optional[str] = None):
    aulas = repositorio.carregar_aulas(profissional_id)
    turmas = repositorio.carregar_turmas(profissional_id, apenas_ativas=True)
    ocorrencias = repositorio.carregar_ocorrencias([t.id for t in turmas]) if turmas else []
    return agregar_aulas(aulas, turmas, inicio, fim, ocorrencias), turmas


def _item_com_nomes(item, alunos: Dict, profissionais: Dict) -> Dict:
    dados = item.to_dict()
    dados['professionalName'] = nome_ou_padrao(profissionais, item.profissional_id)
    if item.tipo == 'individual':
        dados['studentName'] = nome_ou_padrao(alunos, item.aula.aluno_id)
    return dados


def grade_do_dia(dia: date) -> Dict:
    itens, _ = _itens_agenda(dia, dia)
    alunos = repositorio.por_id(repositorio.carregar_alunos())
    profissionais = repositorio.por_id(repositorio.carregar_profissionais())

    grade = montar_grade_dia(itens, dia).to_dict(profissionais)
    for linha in grade['rows']:
        for celula in linha['cells'].values():
            for item in celula:
                if item['classType'] == 'individual':
                    item['studentName'] = nome_ou_padrao(alunos, item['studentId'])
    return grade


def agenda_do_mes(ano: int, mes: int) -> List[Dict]:
    inicio, fim = limites_do_mes(ano, mes)
    itens, turmas = _itens_agenda(inicio, fim)
    relatorios = repositorio.carregar_relatorios_turma([t.id for t in turmas]) if turmas else []
    alunos = repositorio.por_id(repositorio.carregar_alunos())
    profissionais = repositorio.por_id(repositorio.carregar_profissionais())

    resultado = []
    for item in aulas_do_mes(itens, ano, mes):
        dados = _item_com_nomes(item, alunos, profissionais)
        dados['reportStatus'] = rotulo_relatorio(relatorio_registrado(item, relatorios))
        resultado.append(dados)
    return resultado


def _avaliar(dados: Dict, aluno: Aluno, profissional: Profissional,
             ignorar_aula_id: Optional[str] = None) -> AvisosAgendamento:
    dia = parse_data(dados['dia'])
    itens, _ = _itens_agenda(dia, dia, profissional.id)
    return avaliar_agendamento(
        aluno, profissional, dados['dia'], dados['horario'], dados['duracao'],
        creditos_por_hora=1.0 if dados.get('creditos_por_hora') is None else dados['creditos_por_hora'],
        itens_existentes=itens,
        ignorar_aula_id=ignorar_aula_id,
    )


def avaliar_agendamento_formulario(dados: Dict) -> AvisosAgendamento:
    """Avisos para a pré-visualização enquanto o formulário é preenchido."""
    aluno = _carregar(COLECAO_ALUNOS, Aluno, dados['aluno_id'])
    profissional = _carregar(COLECAO_PROFISSIONAIS, Profissional, dados['profissional_id'])
    return _avaliar(dados, aluno, profissional)


def agendar_aula(dados: Dict) -> Tuple[Optional[str], AvisosAgendamento]:
    """
    Agenda uma aula individual.

    Com aviso de créditos e sem 'ciente_sem_creditos', nada é gravado e os
    avisos voltam para o cliente. Os demais avisos nunca bloqueiam.
    A aula e o débito de créditos do aluno vão no mesmo batch.
    """
    aluno = _carregar(COLECAO_ALUNOS, Aluno, dados['aluno_id'])
    profissional = _carregar(COLECAO_PROFISSIONAIS, Profissional, dados['profissional_id'])
    avisos = _avaliar(dados, aluno, profissional)

    if avisos.aviso_credito and not dados.get('ciente_sem_creditos'):
        logger.info(f"Agendamento aguardando confirmação (créditos): aluno {aluno.id}")
        return None, avisos

    aula = AulaAgendada(
        data=dados['dia'],
        horario=dados['horario'],
        aluno_id=aluno.id,
        profissional_id=profissional.id,
        tipo=dados.get('tipo') or 'Aula Regular',
        disciplina=dados['disciplina'],
        conteudo=dados.get('conteudo') or '',
        duracao=dados['duracao'],
        creditos_consumidos=avisos.creditos_necessarios,
        status='scheduled',
    )

    db = get_db()
    ref = db.collection(COLECAO_AULAS).document()
    batch = db.batch()
    batch.set(ref, sanitizar(aula.to_dict()))
    if aula.creditos_consumidos:
        batch.update(db.collection(COLECAO_ALUNOS).document(aluno.id),
                     {'credits': firestore.Increment(-aula.creditos_consumidos)})
    batch.commit()

    if avisos.aviso_conflito:
        logger.warning(f"Aula {ref.id} agendada com conflito de horário (profissional {profissional.id})")
    logger.info(f"Aula agendada: {ref.id} ({aula.data} {aula.horario})")
    return ref.id, avisos


def atualizar_aula(aula_id: str, dados: Dict) -> AvisosAgendamento:
    """
    Edita data, horário, professor e conteúdo. O aluno não muda e
    creditsConsumed fica como foi gravado na criação. Cancelar não estorna.
    """
    aula = _carregar(COLECAO_AULAS, AulaAgendada, aula_id)
    aluno_dados = obter(COLECAO_ALUNOS, aula.aluno_id)
    aluno = Aluno.from_dict(aluno_dados, aula.aluno_id) if aluno_dados else None
    profissional = _carregar(COLECAO_PROFISSIONAIS, Profissional, dados['profissional_id'])
    avisos = _avaliar(dados, aluno, profissional, ignorar_aula_id=aula_id)

    get_db().collection(COLECAO_AULAS).document(aula_id).update({
        'date': dados['dia'],
        'time': dados['horario'],
        'professionalId': profissional.id,
        'type': dados.get('tipo') or aula.tipo,
        'discipline': dados['disciplina'],
        'content': dados.get('conteudo') or '',
        'duration': dados['duracao'],
        'status': dados.get('status') or aula.status,
    })
    logger.info(f"Aula atualizada: {aula_id}")
    return avisos


# ===========================================================================
# Turmas
# ===========================================================================

def listar_turmas() -> List[Dict]:
    turmas = sorted(repositorio.carregar_turmas(), key=lambda t: (not t.ativa, t.nome.lower()))
    return [{'id': t.id, **t.to_dict()} for t in turmas]


def _validar_dias(dias) -> Dict[str, str]:
    if not isinstance(dias, dict) or not dias:
        raise ErroValidacao("Informe ao menos um dia da semana com horário.", 'dias')
    validados = {}
    for dia, horario in dias.items():
        if dia not in DIAS_SEMANA:
            raise ErroValidacao(f"Dia da semana inválido: {dia}", 'dias')
        if not isinstance(horario, str) or not HORARIO_RE.match(horario):
            raise ErroValidacao(f"Horário inválido para {dia}: {horario}", 'dias')
        validados[dia] = horario
    return validados


def criar_turma(dados: Dict, dias=None) -> str:
    aluno_ids = [a for a in dict.fromkeys(dados.get('aluno_ids') or []) if a]
    if len(aluno_ids) < 2:
        raise ErroValidacao("Uma turma precisa de pelo menos 2 alunos.", 'aluno_ids')
    _carregar(COLECAO_PROFISSIONAIS, Profissional, dados['profissional_id'])

    if dados.get('tipo_agenda') == 'single':
        if not dados.get('dia') or not dados.get('horario'):
            raise ErroValidacao("Turma de data única exige data e horário.", 'dia')
        agenda = AgendaTurma(tipo='single', data=dados['dia'], horario=dados['horario'])
    else:
        agenda = AgendaTurma(tipo='recurring', dias=_validar_dias(dias))

    turma = Turma(
        nome=dados['nome'].strip(),
        descricao=dados.get('descricao') or '',
        aluno_ids=aluno_ids,
        profissional_id=dados['profissional_id'],
        agenda=agenda,
        disciplina=dados.get('disciplina') or None,
        creditos_por_aula=dados['creditos_por_aula'],
        status='active',
        cor=dados.get('cor') or None,
    )
    ref = get_db().collection(COLECAO_TURMAS).document()
    ref.set(sanitizar(turma.to_dict()))
    logger.info(f"Turma criada: {turma.nome} ({ref.id})")
    return ref.id


def arquivar_turma(turma_id: str) -> None:
    _carregar(COLECAO_TURMAS, Turma, turma_id)
    get_db().collection(COLECAO_TURMAS).document(turma_id).update({'status': 'archived'})
    logger.info(f"Turma arquivada: {turma_id}")


def instancias_turma(turma_id: str, inicio: date, fim: date) -> List[Dict]:
    """Ocorrências da turma na janela, com os alunos que já têm relatório."""
    turma = _carregar(COLECAO_TURMAS, Turma, turma_id)
    relatorios = repositorio.carregar_relatorios_turma([turma_id])
    por_data: Dict[str, List[str]] = {}
    for rel in relatorios:
        por_data.setdefault(rel.data, []).append(rel.aluno_id)

    instancias = []
    for oc in expandir_turma(turma, inicio, fim):
        reportados = sorted(por_data.get(oc.data, []))
        instancias.append({
            'id': oc.chave,
            'groupId': oc.turma_id,
            'date': oc.data,
            'time': oc.horario,
            'professionalId': oc.profissional_id,
            'reportedStudentIds': reportados,
            'reportStatus': rotulo_relatorio(bool(reportados)),
        })
    return instancias


# ===========================================================================
# Financeiro
# ===========================================================================

def registrar_transacao(dados: Dict, registrado_por: str) -> Tuple[str, bool]:
    """
    Grava uma transação. Retorna (id, duplicada).

    Transação 'credit' incrementa os créditos do aluno no mesmo batch.
    Com 'chave_idempotencia', a chave vira o ID do documento e a gravação
    usa create: uma repetição falha no servidor e nada é somado de novo.
    """
    tipo = dados['tipo']
    aluno_id = dados.get('aluno_id') or None
    profissional_id = dados.get('profissional_id') or None
    creditos = dados.get('creditos')

    if tipo in ('credit', 'monthly') and not aluno_id:
        raise ErroValidacao("Selecione o aluno.", 'aluno_id')
    if tipo == 'credit' and not creditos:
        raise ErroValidacao("Informe a quantidade de créditos.", 'creditos')
    if tipo == 'payment' and not profissional_id and not dados.get('categoria'):
        raise ErroValidacao("Informe o profissional ou a categoria da despesa.", 'categoria')
    if aluno_id and obter(COLECAO_ALUNOS, aluno_id) is None:
        raise ErroValidacao("Aluno não encontrado.", 'aluno_id')

    transacao = Transacao(
        tipo=tipo,
        data=dados['dia'],
        valor=dados['valor'],
        creditos=creditos if tipo == 'credit' else None,
        mes_referencia=dados.get('mes_referencia') or None,
        metodo_pagamento=dados.get('metodo_pagamento') or 'pix',
        registrado_por=registrado_por,
        aluno_id=aluno_id,
        profissional_id=profissional_id,
        categoria=dados.get('categoria') or None,
    )

    db = get_db()
    colecao = db.collection(COLECAO_TRANSACOES)
    chave = dados.get('chave_idempotencia') or None
    ref = colecao.document(chave) if chave else colecao.document()

    batch = db.batch()
    if chave:
        batch.create(ref, sanitizar(transacao.to_dict()))
    else:
        batch.set(ref, sanitizar(transacao.to_dict()))
    if tipo == 'credit':
        batch.update(db.collection(COLECAO_ALUNOS).document(aluno_id),
                     {'credits': firestore.Increment(creditos)})

    try:
        batch.commit()
    except (gexc.AlreadyExists, gexc.Conflict):
        logger.info(f"Transação repetida ignorada (chave {chave})")
        return ref.id, True

    logger.info(f"Transação registrada: {ref.id} ({tipo}, {transacao.valor})")
    return ref.id, False


def listar_transacoes(ano: Optional[int] = None, mes: Optional[int] = None) -> List[Dict]:
    transacoes = repositorio.carregar_transacoes()
    if ano and mes:
        transacoes = list(resumo_mensal(transacoes, ano, mes).transacoes)
    return [{'id': t.id, **t.to_dict()} for t in transacoes]


def resumo_financeiro(ano: int, mes: int) -> Dict:
    return resumo_mensal(repositorio.carregar_transacoes(), ano, mes).to_dict()


def historico_financeiro(ano: int, mes: int, meses: int = 12) -> List[Dict]:
    return historico_mensal(repositorio.carregar_transacoes(), ano, mes, meses)


def remuneracoes(ano: int, mes: int) -> Dict:
    profissionais = repositorio.carregar_profissionais()
    projecoes = projetar_remuneracoes(
        profissionais, repositorio.carregar_aulas(), repositorio.carregar_turmas(), ano, mes
    )
    nomes = repositorio.por_id(profissionais)
    transacoes = repositorio.carregar_transacoes()

    return {
        'professionals': [
            {**p.to_dict(), 'professionalName': nome_ou_padrao(nomes, p.profissional_id)}
            for p in projecoes
        ],
        'collaborators': [
            {
                'collaboratorId': c.id,
                'name': c.nome,
                'remunerationType': c.tipo_remuneracao,
                'total': remuneracao_colaborador(c, transacoes, ano, mes),
            }
            for c in repositorio.carregar_colaboradores() if c.tipo_remuneracao
        ],
    }


def obter_categorias() -> Dict[str, List[str]]:
    dados = obter(COLECAO_CONFIGURACOES, DOC_CONFIG_FINANCEIRO) or {}
    return {
        'incomeCategories': list(dados.get('incomeCategories') or []),
        'expenseCategories': list(dados.get('expenseCategories') or []),
    }


def salvar_categorias(receitas, despesas) -> Dict[str, List[str]]:
    for campo, valores in (('incomeCategories', receitas), ('expenseCategories', despesas)):
        if not isinstance(valores, list) or not all(isinstance(v, str) and v.strip() for v in valores):
            raise ErroValidacao("Categorias devem ser uma lista de nomes.", campo)
    categorias = {
        'incomeCategories': list(dict.fromkeys(v.strip() for v in receitas)),
        'expenseCategories': list(dict.fromkeys(v.strip() for v in despesas)),
    }
    get_db().collection(COLECAO_CONFIGURACOES).document(DOC_CONFIG_FINANCEIRO).set(categorias, merge=True)
    return categorias


# ===========================================================================
# Colaboradores
# ===========================================================================

def listar_colaboradores() -> List[Dict]:
    return [{'id': c.id, **c.to_dict()} for c in repositorio.carregar_colaboradores()]


def _permissoes(valor) -> Dict[str, bool]:
    valor = valor if isinstance(valor, dict) else {}
    return {p: bool(valor.get(p, False)) for p in PERMISSOES_ADMIN}


def criar_colaborador(dados: Dict, permissoes=None) -> str:
    """
    Colaborador com acesso a algum painel ganha identidade no provedor
    (documento collaborators/{uid}); sem acesso, é só um cadastro.
    """
    acesso = [p for p in dados.get('acesso_sistema') or [] if p in PAINEIS_SISTEMA]
    colaborador = Colaborador(
        nome=dados['nome'].strip(),
        cargo=dados['cargo'],
        login=dados.get('login') or '',
        acesso_sistema=acesso,
        permissoes_admin=_permissoes(permissoes),
        tipo_remuneracao=dados.get('tipo_remuneracao') or None,
        salario_fixo=dados.get('salario_fixo') or 0.0,
        percentual_comissao=dados.get('percentual_comissao') or 0.0,
        email=dados.get('email') or None,
        telefone=dados.get('telefone') or None,
    )

    colecao = get_db().collection(COLECAO_COLABORADORES)
    if acesso:
        if not dados.get('login') or not dados.get('senha'):
            raise ErroValidacao("Login e senha são obrigatórios para acesso ao sistema.", 'login')
        uid = criar_identidade(dados['login'], dados['senha'])
        ref = colecao.document(uid)
    else:
        ref = colecao.document()

    ref.set(sanitizar(colaborador.to_dict()))
    logger.info(f"Colaborador cadastrado: {colaborador.nome} ({ref.id}, acesso={acesso})")
    return ref.id


def atualizar_acesso_colaborador(colaborador_id: str, acesso, permissoes) -> Colaborador:
    colaborador = _carregar(COLECAO_COLABORADORES, Colaborador, colaborador_id)
    if not isinstance(acesso, list) or any(p not in PAINEIS_SISTEMA for p in acesso):
        raise ErroValidacao("Acesso deve ser uma lista com 'admin' e/ou 'teacher'.", 'acesso_sistema')
    colaborador.acesso_sistema = list(dict.fromkeys(acesso))
    colaborador.permissoes_admin = _permissoes(permissoes)

    # Regrava sempre na forma canônica (lista), corrigindo documentos legados
    get_db().collection(COLECAO_COLABORADORES).document(colaborador_id).update({
        'systemAccess': colaborador.acesso_sistema,
        'adminPermissions': colaborador.to_dict()['adminPermissions'],
    })
    logger.info(f"Acesso do colaborador {colaborador_id}: {colaborador.acesso_sistema}")
    return colaborador


# ===========================================================================
# Painel
# ===========================================================================

def aniversariantes(hoje: date) -> List[Dict]:
    alvo = hoje.strftime('%m-%d')
    pessoas = []
    for aluno in repositorio.carregar_alunos():
        if aluno.data_nascimento and aluno.data_nascimento[5:10] == alvo:
            pessoas.append({'id': aluno.id, 'name': aluno.nome, 'type': 'student'})
    for prof in repositorio.carregar_profissionais():
        if prof.data_nascimento and prof.data_nascimento[5:10] == alvo:
            pessoas.append({'id': prof.id, 'name': prof.nome, 'type': 'professional'})
    return pessoas


def notificacoes(uid: str) -> List[Dict]:
    docs = listar(COLECAO_NOTIFICACOES, [('recipientUid', '==', uid)])
    docs.sort(key=lambda d: _ordem_cronologica(d.get('createdAt')), reverse=True)
    return docs[:MAX_NOTIFICACOES]


def painel(hoje: date, uid: str) -> Dict:
    alunos = repositorio.carregar_alunos()
    profissionais = repositorio.carregar_profissionais()
    turmas = repositorio.carregar_turmas(apenas_ativas=True)
    itens, _ = _itens_agenda(hoje, hoje)
    avisos = notificacoes(uid)

    return {
        'date': hoje.isoformat(),
        'counts': {
            'enrolledStudents': sum(1 for a in alunos if a.status == 'matricula'),
            'prospectStudents': sum(1 for a in alunos if a.status == 'prospeccao'),
            'activeProfessionals': sum(1 for p in profissionais if p.status == 'ativo'),
            'activeGroups': len(turmas),
            'classesToday': len(itens),
        },
        'birthdays': aniversariantes(hoje),
        'notifications': avisos,
        'unreadNotifications': sum(1 for n in avisos if not n.get('read')),
    }
