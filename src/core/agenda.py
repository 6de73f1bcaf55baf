"""
Motor da Agenda (Core)

Responsável por:
1. Expandir a regra de recorrência de uma turma em ocorrências concretas.
2. Juntar aulas individuais e ocorrências de turma em uma única lista.
3. Montar as visões diária (grade profissional x horário) e mensal.

Tudo aqui é função pura sobre os modelos: nada lê ou grava no Firestore.
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from src.core.constants import DIAS_SEMANA, HORARIOS_GRADE, ROTULO_AUSENTE
from src.core.models import AulaAgendada, RelatorioTurma, Turma


def parse_data(valor) -> Optional[date]:
    """Lê 'YYYY-MM-DD' (ou o prefixo de um ISO datetime) como data de calendário."""
    if isinstance(valor, date):
        return valor
    if not valor or not isinstance(valor, str):
        return None
    try:
        return date.fromisoformat(valor[:10])
    except ValueError:
        return None


def dia_da_semana(dia: date) -> str:
    return DIAS_SEMANA[dia.weekday()]


def horario_em_minutos(horario: str) -> int:
    try:
        horas, minutos = str(horario).split(':')[:2]
        return int(horas) * 60 + int(minutos)
    except ValueError:
        return 0


def somar_meses(dia: date, meses: int) -> date:
    indice = dia.month - 1 + meses
    ano = dia.year + indice // 12
    mes = indice % 12 + 1
    ultimo_dia = calendar.monthrange(ano, mes)[1]
    return date(ano, mes, min(dia.day, ultimo_dia))


def janela_ao_redor(referencia: date, meses: int = 1) -> Tuple[date, date]:
    """Janela [referência - N meses, referência + N meses]."""
    return somar_meses(referencia, -meses), somar_meses(referencia, meses)


def limites_do_mes(ano: int, mes: int) -> Tuple[date, date]:
    return date(ano, mes, 1), date(ano, mes, calendar.monthrange(ano, mes)[1])


# === EXPANSÃO DE TURMAS ===

@dataclass(frozen=True)
class OcorrenciaTurma:
    turma_id: str
    data: str
    horario: str
    profissional_id: str

    @property
    def chave(self) -> str:
        return f"group-{self.turma_id}-{self.data}"


def expandir_turma(turma: Turma, inicio: Optional[date] = None,
                   fim: Optional[date] = None) -> List[OcorrenciaTurma]:
    """
    Gera as ocorrências (data, horário) de uma turma dentro de [inicio, fim].

    Turmas arquivadas não geram nada. Turmas recorrentes exigem janela.
    Uma turma de data única entra se a data estiver na janela, ou sempre
    quando nenhuma janela é informada. Agendas malformadas geram lista vazia.
    """
    if not turma.ativa:
        return []

    agenda = turma.agenda
    ocorrencias = []

    if agenda.tipo == 'recurring':
        if inicio is None or fim is None or not agenda.dias:
            return []
        dia = inicio
        while dia <= fim:
            horario = agenda.dias.get(dia_da_semana(dia))
            if horario:
                ocorrencias.append(OcorrenciaTurma(turma.id, dia.isoformat(), horario, turma.profissional_id))
            dia += timedelta(days=1)

    elif agenda.tipo == 'single':
        dia = parse_data(agenda.data)
        if dia is None or not agenda.horario:
            return []
        dentro = (inicio is None or dia >= inicio) and (fim is None or dia <= fim)
        if dentro:
            ocorrencias.append(OcorrenciaTurma(turma.id, dia.isoformat(), agenda.horario, turma.profissional_id))

    ocorrencias.sort(key=lambda o: (o.data, horario_em_minutos(o.horario)))
    return ocorrencias


# === AGREGAÇÃO ===

@dataclass(frozen=True)
class ItemAgenda:
    """Elemento exibível: aula individual OU ocorrência de turma."""
    tipo: str
    data: str
    horario: str
    profissional_id: str
    duracao: int = 60
    aula: Optional[AulaAgendada] = None
    turma: Optional[Turma] = None

    @property
    def chave(self) -> str:
        if self.tipo == 'group':
            return f"group-{self.turma.id}-{self.data}"
        return self.aula.id

    def to_dict(self) -> Dict:
        dados = {
            'id': self.chave,
            'classType': self.tipo,
            'date': self.data,
            'time': self.horario,
            'professionalId': self.profissional_id,
            'duration': self.duracao,
        }
        if self.tipo == 'group':
            dados['groupId'] = self.turma.id
            dados['groupName'] = self.turma.nome
            dados['studentIds'] = list(self.turma.aluno_ids)
        else:
            dados['classId'] = self.aula.id
            dados['studentId'] = self.aula.aluno_id
            dados['discipline'] = self.aula.disciplina
            dados['status'] = self.aula.status
            dados['reportRegistered'] = self.aula.relatorio_registrado
        return dados


def _ordenar(itens: List[ItemAgenda]) -> List[ItemAgenda]:
    return sorted(itens, key=lambda i: (i.data, horario_em_minutos(i.horario), i.chave or ''))


def agregar_aulas(aulas: Iterable[AulaAgendada], turmas: Iterable[Turma],
                  inicio: Optional[date] = None, fim: Optional[date] = None,
                  ocorrencias_materializadas: Iterable[Dict] = (),
                  duracao_turma: int = 60) -> List[ItemAgenda]:
    """
    Junta aulas individuais e ocorrências de turma em uma lista ordenada.

    `ocorrencias_materializadas` são documentos de groupClassOccurrences
    gravados no primeiro relatório de uma ocorrência; entram mesmo que a
    regra de recorrência atual não as gere mais.
    """
    itens = []
    for aula in aulas:
        dia = parse_data(aula.data)
        if dia is None:
            continue
        if (inicio and dia < inicio) or (fim and dia > fim):
            continue
        itens.append(ItemAgenda('individual', dia.isoformat(), aula.horario,
                                aula.profissional_id, aula.duracao, aula=aula))

    turmas_por_id = {}
    vistos = set()
    for turma in turmas:
        turmas_por_id[turma.id] = turma
        for oc in expandir_turma(turma, inicio, fim):
            vistos.add((oc.turma_id, oc.data))
            itens.append(ItemAgenda('group', oc.data, oc.horario, oc.profissional_id,
                                    duracao_turma, turma=turma))

    for registro in ocorrencias_materializadas:
        chave = (registro.get('groupId'), registro.get('date'))
        turma = turmas_por_id.get(chave[0])
        dia = parse_data(chave[1])
        if turma is None or dia is None or chave in vistos:
            continue
        if (inicio and dia < inicio) or (fim and dia > fim):
            continue
        vistos.add(chave)
        itens.append(ItemAgenda('group', dia.isoformat(), registro.get('time', ''),
                                registro.get('professionalId') or turma.profissional_id,
                                duracao_turma, turma=turma))

    return _ordenar(itens)


def aulas_do_dia(itens: Iterable[ItemAgenda], dia: date) -> List[ItemAgenda]:
    alvo = dia.isoformat()
    return [i for i in itens if i.data == alvo]


def aulas_do_mes(itens: Iterable[ItemAgenda], ano: int, mes: int) -> List[ItemAgenda]:
    prefixo = f"{ano:04d}-{mes:02d}-"
    return _ordenar([i for i in itens if i.data.startswith(prefixo)])


def relatorio_registrado(item: ItemAgenda, relatorios: Iterable[RelatorioTurma],
                         aluno_id: Optional[str] = None) -> bool:
    """
    Aula individual: campo reportRegistered.
    Ocorrência de turma: existe relatório para (turma, aluno, data); sem
    aluno informado, qualquer relatório da turma naquela data conta.
    """
    if item.tipo == 'individual':
        return item.aula.relatorio_registrado
    for rel in relatorios:
        if rel.turma_id != item.turma.id or rel.data != item.data:
            continue
        if aluno_id is None or rel.aluno_id == aluno_id:
            return True
    return False


def rotulo_relatorio(registrado: bool) -> str:
    return 'Registrado' if registrado else 'Pendente'


def nome_ou_padrao(registros: Dict[str, object], doc_id: Optional[str]) -> str:
    """Nome de um aluno/profissional que talvez ainda não tenha sido carregado."""
    registro = registros.get(doc_id) if doc_id else None
    nome = getattr(registro, 'nome', None)
    return nome or ROTULO_AUSENTE


# === VISÃO DIÁRIA ===

def slot_do_horario(horario: str) -> Optional[str]:
    """Coluna da grade (hora cheia) onde a aula começa."""
    minutos = horario_em_minutos(horario)
    slot = f"{minutos // 60:02d}:00"
    return slot if slot in HORARIOS_GRADE else None


@dataclass
class GradeDia:
    data: str
    horarios: Tuple[str, ...]
    linhas: List[Dict]
    conflitos: List[Dict]
    fora_da_grade: List[ItemAgenda]

    def to_dict(self, profissionais: Dict[str, object] = None) -> Dict:
        profissionais = profissionais or {}
        return {
            'date': self.data,
            'slots': list(self.horarios),
            'rows': [
                {
                    'professionalId': linha['profissional_id'],
                    'professionalName': nome_ou_padrao(profissionais, linha['profissional_id']),
                    'cells': {
                        slot: [item.to_dict() for item in itens]
                        for slot, itens in linha['celulas'].items() if itens
                    },
                }
                for linha in self.linhas
            ],
            'conflicts': self.conflitos,
            'outsideGrid': [item.to_dict() for item in self.fora_da_grade],
        }


def montar_grade_dia(itens: Iterable[ItemAgenda], dia: date) -> GradeDia:
    """
    Grade do dia: uma linha por profissional com pelo menos uma aula,
    uma coluna por hora (08:00 a 20:00).

    Duas aulas na mesma célula indicam agendamento duplo. O sistema não
    bloqueia isso na gravação; aqui apenas é reportado em `conflitos`.
    """
    do_dia = aulas_do_dia(itens, dia)
    linhas: Dict[str, Dict[str, List[ItemAgenda]]] = {}
    fora_da_grade = []

    for item in do_dia:
        celulas = linhas.setdefault(item.profissional_id, {slot: [] for slot in HORARIOS_GRADE})
        slot = slot_do_horario(item.horario)
        if slot is None:
            fora_da_grade.append(item)
            continue
        celulas[slot].append(item)

    conflitos = []
    for profissional_id, celulas in linhas.items():
        for slot, ocupantes in celulas.items():
            if len(ocupantes) > 1:
                conflitos.append({
                    'professionalId': profissional_id,
                    'slot': slot,
                    'items': [o.chave for o in ocupantes],
                })

    return GradeDia(
        data=dia.isoformat(),
        horarios=HORARIOS_GRADE,
        linhas=[{'profissional_id': pid, 'celulas': cel} for pid, cel in sorted(linhas.items())],
        conflitos=conflitos,
        fora_da_grade=fora_da_grade,
    )


# === VISÃO DO PROFISSIONAL ===

def separar_proximas_e_anteriores(itens: Iterable[ItemAgenda], hoje: date):
    """Próximas (data >= hoje) em ordem crescente; anteriores em ordem decrescente."""
    ordenados = _ordenar(list(itens))
    hoje_str = hoje.isoformat()
    proximas = [i for i in ordenados if i.data >= hoje_str]
    anteriores = [i for i in ordenados if i.data < hoje_str]
    anteriores.reverse()
    return proximas, anteriores
