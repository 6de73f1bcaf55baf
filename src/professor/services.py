"""
Camada de Serviço (Service Layer) do Painel do Professor

Monta a visão do profissional logado (próximas aulas, anteriores e
relatórios pendentes) e grava relatórios de aula.

Um relatório e seus efeitos colaterais (itens de continuidade criados ou
atualizados, ocorrência de turma materializada) vão num único WriteBatch.
"""

from datetime import date, timedelta
from typing import Dict, List, Optional

from google.cloud import firestore

from src.core import repositorio
from src.core.agenda import (
    agregar_aulas, aulas_do_mes, expandir_turma, limites_do_mes, nome_ou_padrao,
    parse_data, relatorio_registrado, rotulo_relatorio, separar_proximas_e_anteriores,
)
from src.core.constants import (
    COLECAO_AULAS, COLECAO_CONTINUIDADE, COLECAO_OCORRENCIAS_TURMA, COLECAO_PROFISSIONAIS,
    COLECAO_RELATORIOS_TURMA, COLECAO_TURMAS, STATUS_CONTINUIDADE,
)
from src.core.database import get_db, obter, sanitizar
from src.core.erros import ErroNaoEncontrado, ErroPermissao, ErroValidacao
from src.core.logger import get_logger
from src.core.models import AulaAgendada, ItemContinuidade, Profissional, RelatorioTurma, Turma

logger = get_logger(__name__)

# Janela do painel: um mês para trás (pendências), duas semanas para frente
DIAS_ANTERIORES = 30
DIAS_SEGUINTES = 14


class VisaoProfessor:
    """Dados carregados de uma vez para as visões de um profissional."""

    def __init__(self, profissional_id: str, inicio: date, fim: date):
        self.profissional_id = profissional_id
        aulas = repositorio.carregar_aulas(profissional_id)
        self.turmas = repositorio.carregar_turmas(profissional_id, apenas_ativas=True)
        turma_ids = [t.id for t in self.turmas]
        ocorrencias = repositorio.carregar_ocorrencias(turma_ids) if turma_ids else []
        self.relatorios = repositorio.carregar_relatorios_turma(turma_ids) if turma_ids else []
        self.itens = agregar_aulas(aulas, self.turmas, inicio, fim, ocorrencias)

        aluno_ids = {a.aluno_id for a in aulas}
        for turma in self.turmas:
            aluno_ids.update(turma.aluno_ids)
        self.aluno_ids = sorted(i for i in aluno_ids if i)
        self.alunos = repositorio.por_id(repositorio.carregar_alunos(self.aluno_ids))

    def serializar(self, item) -> Dict:
        dados = item.to_dict()
        dados['reportStatus'] = rotulo_relatorio(relatorio_registrado(item, self.relatorios))
        if item.tipo == 'individual':
            dados['studentName'] = nome_ou_padrao(self.alunos, item.aula.aluno_id)
        else:
            dados['students'] = [
                {
                    'id': aluno_id,
                    'name': nome_ou_padrao(self.alunos, aluno_id),
                    'reportStatus': rotulo_relatorio(
                        relatorio_registrado(item, self.relatorios, aluno_id)),
                }
                for aluno_id in item.turma.aluno_ids
            ]
        return dados

    def pendente(self, item) -> bool:
        if item.tipo == 'individual' and item.aula.status == 'canceled':
            return False
        return not relatorio_registrado(item, self.relatorios)


def painel(profissional_id: str, hoje: date) -> Dict:
    visao = VisaoProfessor(profissional_id,
                           hoje - timedelta(days=DIAS_ANTERIORES),
                           hoje + timedelta(days=DIAS_SEGUINTES))
    proximas, anteriores = separar_proximas_e_anteriores(visao.itens, hoje)
    return {
        'date': hoje.isoformat(),
        'upcoming': [visao.serializar(i) for i in proximas],
        'past': [visao.serializar(i) for i in anteriores],
        'pendingReports': [visao.serializar(i) for i in anteriores if visao.pendente(i)],
        'groups': [{'id': t.id, **t.to_dict()} for t in visao.turmas],
    }


def agenda_do_mes(profissional_id: str, ano: int, mes: int) -> List[Dict]:
    inicio, fim = limites_do_mes(ano, mes)
    visao = VisaoProfessor(profissional_id, inicio, fim)
    return [visao.serializar(i) for i in aulas_do_mes(visao.itens, ano, mes)]


def disponibilidade(profissional_id: str) -> Dict[str, List[str]]:
    dados = obter(COLECAO_PROFISSIONAIS, profissional_id)
    if dados is None:
        raise ErroNaoEncontrado(profissional_id)
    return Profissional.from_dict(dados, profissional_id).disponibilidade


def itens_continuidade(profissional_id: str, incluir_concluidos: bool = False) -> List[Dict]:
    """Plano de continuidade dos alunos do profissional."""
    hoje = date.today()
    visao = VisaoProfessor(profissional_id, hoje, hoje)
    if not visao.aluno_ids:
        return []
    itens = repositorio.carregar_continuidade(visao.aluno_ids)
    if not incluir_concluidos:
        itens = [i for i in itens if i.status != 'concluido']
    itens.sort(key=lambda i: (nome_ou_padrao(visao.alunos, i.aluno_id), i.criado_em))
    return [
        {'id': i.id, **i.to_dict(), 'studentName': nome_ou_padrao(visao.alunos, i.aluno_id)}
        for i in itens
    ]


# === RELATÓRIOS ===

def _validar_relatorio(relatorio) -> Dict:
    if not isinstance(relatorio, dict) or not relatorio:
        raise ErroValidacao("O relatório é obrigatório.", 'relatorio')
    return relatorio


def _gravar_continuidade(batch, relatorio: Dict, aluno_id: str, autor: str, hoje: date) -> int:
    """Agenda no batch os itens criados e as mudanças de status. Retorna quantos."""
    db = get_db()
    total = 0

    for item in relatorio.get('continuityCreated') or []:
        descricao = str((item or {}).get('description') or '').strip()
        if not descricao:
            continue
        status = item.get('status') or 'nao_iniciado'
        if status not in STATUS_CONTINUIDADE:
            raise ErroValidacao(f"Status de continuidade inválido: {status}", 'continuityCreated')
        novo = ItemContinuidade(aluno_id=aluno_id, descricao=descricao, status=status,
                                criado_por=autor, criado_em=hoje.isoformat())
        batch.set(db.collection(COLECAO_CONTINUIDADE).document(), novo.to_dict())
        total += 1

    for item in relatorio.get('continuityUpdates') or []:
        item_id = (item or {}).get('id')
        status = item.get('newStatus') if item else None
        if not item_id or status not in STATUS_CONTINUIDADE:
            raise ErroValidacao("Atualização de continuidade inválida.", 'continuityUpdates')
        existente = obter(COLECAO_CONTINUIDADE, item_id)
        if existente is None:
            raise ErroNaoEncontrado(f"{COLECAO_CONTINUIDADE}/{item_id}")
        # Só os itens do aluno do relatório podem mudar de status
        if existente.get('studentId') != aluno_id:
            raise ErroPermissao(f"Item de continuidade {item_id} é de outro aluno")
        batch.update(db.collection(COLECAO_CONTINUIDADE).document(item_id), {'status': status})
        total += 1

    return total


def _aula_do_profissional(aula_id: str, profissional_id: str) -> AulaAgendada:
    dados = obter(COLECAO_AULAS, aula_id)
    if dados is None:
        raise ErroNaoEncontrado(aula_id)
    aula = AulaAgendada.from_dict(dados, aula_id)
    if aula.profissional_id != profissional_id:
        raise ErroPermissao(f"Aula {aula_id} pertence a outro profissional")
    return aula


def salvar_relatorio_individual(profissional_id: str, aula_id: str, relatorio,
                                hoje: Optional[date] = None) -> None:
    relatorio = _validar_relatorio(relatorio)
    aula = _aula_do_profissional(aula_id, profissional_id)

    db = get_db()
    batch = db.batch()
    batch.update(db.collection(COLECAO_AULAS).document(aula.id), {
        'report': sanitizar(relatorio),
        'reportRegistered': True,
        'status': 'completed',
    })
    itens = _gravar_continuidade(batch, relatorio, aula.aluno_id, profissional_id, hoje or date.today())
    batch.commit()
    logger.info(f"Relatório da aula {aula.id} salvo ({itens} itens de continuidade)")


def salvar_relatorio_diagnostico(profissional_id: str, aula_id: str, relatorio,
                                 hoje: Optional[date] = None) -> None:
    """
    Avaliação diagnóstica: grava 'diagnosticReport' e transforma o plano
    inicial (actionPlan.initialContinuityPlan) em itens 'nao_iniciado'.
    """
    relatorio = _validar_relatorio(relatorio)
    aula = _aula_do_profissional(aula_id, profissional_id)
    plano = (relatorio.get('actionPlan') or {}).get('initialContinuityPlan') or []

    db = get_db()
    batch = db.batch()
    batch.update(db.collection(COLECAO_AULAS).document(aula.id), {
        'diagnosticReport': sanitizar(relatorio),
        'reportRegistered': True,
        'status': 'completed',
    })
    itens = _gravar_continuidade(
        batch,
        {'continuityCreated': [{'description': p.get('description'), 'status': 'nao_iniciado'}
                               for p in plano if isinstance(p, dict)]},
        aula.aluno_id, profissional_id, hoje or date.today(),
    )
    batch.commit()
    logger.info(f"Relatório diagnóstico da aula {aula.id} salvo ({itens} itens no plano)")


def salvar_relatorio_turma(profissional_id: str, turma_id: str, aluno_id: str, data: str,
                           relatorio, hoje: Optional[date] = None) -> str:
    """
    Relatório de um aluno numa ocorrência de turma.

    O documento tem ID derivado de (turma, aluno, data): salvar de novo
    sobrescreve. Na mesma gravação a ocorrência é materializada em
    groupClassOccurrences, para sobreviver a mudanças na recorrência.
    """
    relatorio = _validar_relatorio(relatorio)
    dados = obter(COLECAO_TURMAS, turma_id)
    if dados is None:
        raise ErroNaoEncontrado(turma_id)
    turma = Turma.from_dict(dados, turma_id)
    if turma.profissional_id != profissional_id:
        raise ErroPermissao(f"Turma {turma_id} pertence a outro profissional")
    if aluno_id not in turma.aluno_ids:
        raise ErroValidacao("Aluno não pertence à turma.", 'aluno_id')

    dia = parse_data(data)
    chave_ocorrencia = f"{turma_id}_{data}"
    ocorrencia = obter(COLECAO_OCORRENCIAS_TURMA, chave_ocorrencia)
    if ocorrencia is None:
        geradas = expandir_turma(turma, dia, dia) if dia else []
        if not geradas:
            raise ErroValidacao("A turma não tem aula nesta data.", 'data')
        horario = geradas[0].horario
    else:
        horario = ocorrencia.get('time', '')

    db = get_db()
    chave = RelatorioTurma.chave(turma_id, aluno_id, data)
    registro = RelatorioTurma(id=chave, turma_id=turma_id, aluno_id=aluno_id, data=data,
                              relatorio=sanitizar(relatorio))

    batch = db.batch()
    batch.set(db.collection(COLECAO_RELATORIOS_TURMA).document(chave), registro.to_dict())
    batch.set(db.collection(COLECAO_OCORRENCIAS_TURMA).document(chave_ocorrencia), {
        'groupId': turma_id,
        'date': data,
        'time': horario,
        'professionalId': turma.profissional_id,
        'updatedAt': firestore.SERVER_TIMESTAMP,
    }, merge=True)
    itens = _gravar_continuidade(batch, relatorio, aluno_id, profissional_id, hoje or date.today())
    batch.commit()
    logger.info(f"Relatório de turma salvo: {chave} ({itens} itens de continuidade)")
    return chave
