"""
Motor Financeiro (Core)

Agregações sobre o livro de transações e projeções de remuneração.
Funções puras: mesma entrada (e mesmo mês de referência) produz sempre os
mesmos totais, e nenhum dado de entrada é alterado.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from src.core.agenda import somar_meses
from src.core.constants import DIAS_SEMANA, TIPOS_DESPESA, TIPOS_RECEITA
from src.core.logger import get_logger
from src.core.models import AulaAgendada, Colaborador, Profissional, Transacao, Turma

logger = get_logger(__name__)


def data_utc(valor) -> Optional[date]:
    """
    Data de calendário (UTC) de um campo `date`.

    Strings 'YYYY-MM-DD' são lidas como data pura, sem passar por fuso local
    (evita o erro de um dia na virada do mês). Datetimes com fuso são
    convertidos para UTC; sem fuso, assume-se UTC.
    """
    if isinstance(valor, datetime):
        if valor.tzinfo is not None:
            valor = valor.astimezone(timezone.utc)
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str) and len(valor) >= 10:
        try:
            return date.fromisoformat(valor[:10])
        except ValueError:
            return None
    return None


def no_mes(valor, ano: int, mes: int) -> bool:
    dia = data_utc(valor)
    return dia is not None and dia.year == ano and dia.month == mes


# === RESUMO DO PERÍODO ===

@dataclass(frozen=True)
class ResumoPeriodo:
    ano: int
    mes: int
    total_receitas: float
    total_despesas: float
    saldo: float
    transacoes: Tuple[Transacao, ...] = ()

    def to_dict(self) -> Dict:
        return {
            'year': self.ano,
            'month': self.mes,
            'totalIncome': self.total_receitas,
            'totalExpenses': self.total_despesas,
            'balance': self.saldo,
        }


def resumo_mensal(transacoes: Iterable[Transacao], ano: int, mes: int) -> ResumoPeriodo:
    """
    Receitas = credit + monthly, despesas = payment, saldo = receitas - despesas,
    considerando apenas transações cuja data (UTC) cai no mês alvo.
    """
    do_mes = tuple(t for t in transacoes if no_mes(t.data, ano, mes))
    receitas = 0.0
    despesas = 0.0
    for t in do_mes:
        valor = t.valor
        if valor < 0:
            # Lançamentos antigos gravaram despesas com sinal; o tipo já diz a direção
            logger.warning(f"Transação {t.id} com valor negativo ({valor}); usando o módulo")
            valor = abs(valor)
        if t.tipo in TIPOS_RECEITA:
            receitas += valor
        elif t.tipo in TIPOS_DESPESA:
            despesas += valor
    return ResumoPeriodo(ano, mes, receitas, despesas, receitas - despesas, do_mes)


def historico_mensal(transacoes: Iterable[Transacao], ano: int, mes: int,
                     meses: int = 12) -> List[Dict]:
    """
    Resumos dos últimos `meses` meses terminando em (ano, mes), do mais
    antigo para o mais recente, com saldo inicial, operacional e acumulado.
    O acumulado parte de zero no primeiro mês da série.
    """
    transacoes = list(transacoes)
    referencia = date(ano, mes, 1)
    serie = []
    acumulado = 0.0
    for deslocamento in range(meses - 1, -1, -1):
        alvo = somar_meses(referencia, -deslocamento)
        resumo = resumo_mensal(transacoes, alvo.year, alvo.month)
        inicial = acumulado
        acumulado += resumo.saldo
        item = resumo.to_dict()
        item.update({
            'startingBalance': inicial,
            'operationalBalance': resumo.saldo,
            'accumulatedBalance': acumulado,
        })
        serie.append(item)
    return serie


# === REMUNERAÇÃO ===

def contar_dia_semana_no_mes(ano: int, mes: int, dia_semana: str) -> int:
    """Quantas vezes um dia da semana ('segunda'...'domingo') ocorre no mês."""
    if dia_semana not in DIAS_SEMANA:
        return 0
    indice = DIAS_SEMANA.index(dia_semana)
    total_dias = calendar.monthrange(ano, mes)[1]
    return sum(1 for d in range(1, total_dias + 1) if date(ano, mes, d).weekday() == indice)


def horas_turma_no_mes(turma: Turma, ano: int, mes: int) -> float:
    if not turma.ativa or turma.agenda.tipo != 'recurring':
        return 0.0
    return sum(contar_dia_semana_no_mes(ano, mes, dia) * turma.creditos_por_aula
               for dia in turma.agenda.dias)


@dataclass(frozen=True)
class ProjecaoRemuneracao:
    profissional_id: str
    ano: int
    mes: int
    horas_individuais: float
    ganhos_individuais: float
    horas_turma: float
    ganhos_turma: float

    @property
    def horas_totais(self) -> float:
        return self.horas_individuais + self.horas_turma

    @property
    def total(self) -> float:
        return self.ganhos_individuais + self.ganhos_turma

    def to_dict(self) -> Dict:
        return {
            'professionalId': self.profissional_id,
            'year': self.ano,
            'month': self.mes,
            'individualHours': self.horas_individuais,
            'individualEarnings': self.ganhos_individuais,
            'groupHours': self.horas_turma,
            'groupEarnings': self.ganhos_turma,
            'totalHours': self.horas_totais,
            'total': self.total,
        }


def projetar_remuneracao(profissional: Profissional, aulas: Iterable[AulaAgendada],
                         turmas: Iterable[Turma], ano: int, mes: int) -> ProjecaoRemuneracao:
    """
    Projeção (não é registro de pagamento) do mês:
    - horas individuais: duração das aulas não canceladas do profissional no mês;
    - horas de turma: ocorrências de cada dia da semana no mês x creditsToDeduct,
      para turmas ativas e recorrentes do profissional.
    """
    horas_individuais = sum(
        a.duracao / 60 for a in aulas
        if a.profissional_id == profissional.id
        and a.status != 'canceled'
        and no_mes(a.data, ano, mes)
    )
    horas_turma = sum(
        horas_turma_no_mes(t, ano, mes) for t in turmas
        if t.profissional_id == profissional.id
    )
    return ProjecaoRemuneracao(
        profissional_id=profissional.id,
        ano=ano,
        mes=mes,
        horas_individuais=horas_individuais,
        ganhos_individuais=horas_individuais * profissional.valor_hora_individual,
        horas_turma=horas_turma,
        ganhos_turma=horas_turma * profissional.valor_hora_turma,
    )


def projetar_remuneracoes(profissionais: Iterable[Profissional], aulas: Iterable[AulaAgendada],
                          turmas: Iterable[Turma], ano: int, mes: int) -> List[ProjecaoRemuneracao]:
    aulas = list(aulas)
    turmas = list(turmas)
    return [
        projetar_remuneracao(p, aulas, turmas, ano, mes)
        for p in sorted(profissionais, key=lambda p: p.nome.lower())
        if p.status == 'ativo'
    ]


def remuneracao_colaborador(colaborador: Colaborador, transacoes: Iterable[Transacao],
                            ano: int, mes: int) -> float:
    """Salário fixo, ou comissão sobre as receitas do mês registradas pelo colaborador."""
    if colaborador.tipo_remuneracao == 'fixed':
        return colaborador.salario_fixo
    if colaborador.tipo_remuneracao == 'commission' and colaborador.percentual_comissao:
        base = sum(
            t.valor for t in transacoes
            if t.receita and t.registrado_por == colaborador.id and no_mes(t.data, ano, mes)
        )
        return base * colaborador.percentual_comissao / 100
    return 0.0
