"""
Avisos de Agendamento (Core)

Validações consultivas calculadas enquanto a administração preenche o
agendamento de uma aula. Nenhum aviso é gravado e nenhum impede a gravação:
o aviso de créditos apenas exige confirmação explícita de quem agenda.
"""

from dataclasses import dataclass, asdict
from typing import Iterable, Optional

from src.core.agenda import ItemAgenda, dia_da_semana, horario_em_minutos, parse_data
from src.core.models import Aluno, Profissional


def creditos_necessarios(duracao_minutos: float, creditos_por_hora: float = 1.0) -> float:
    return (duracao_minutos / 60) * creditos_por_hora


def aviso_credito(aluno: Optional[Aluno], necessarios: float) -> bool:
    """Saldo estritamente menor que o necessário. Saldo igual não avisa."""
    if aluno is None:
        return False
    return aluno.creditos < necessarios


def aviso_disponibilidade(profissional: Optional[Profissional], data, horario: str) -> bool:
    """
    Avisa quando o profissional tem disponibilidade cadastrada e o horário
    (HH:MM) não está na lista daquele dia da semana. Sem disponibilidade
    cadastrada não há aviso: falta de dado não é indisponibilidade.
    """
    if profissional is None or not profissional.disponibilidade:
        return False
    dia = parse_data(data)
    if dia is None or not horario:
        return False
    horarios_livres = profissional.disponibilidade.get(dia_da_semana(dia), [])
    return horario[:5] not in horarios_livres


def aviso_conflito(itens: Iterable[ItemAgenda], profissional_id: str, data, horario: str,
                   duracao: int, ignorar_aula_id: Optional[str] = None) -> bool:
    """True se o profissional já tem algo que se sobrepõe ao intervalo pedido."""
    dia = parse_data(data)
    if dia is None or not horario:
        return False
    inicio = horario_em_minutos(horario)
    fim = inicio + duracao
    for item in itens:
        if item.profissional_id != profissional_id or item.data != dia.isoformat():
            continue
        if item.tipo == 'individual':
            if item.aula.id == ignorar_aula_id or item.aula.status == 'canceled':
                continue
        outro_inicio = horario_em_minutos(item.horario)
        if inicio < outro_inicio + item.duracao and outro_inicio < fim:
            return True
    return False


@dataclass(frozen=True)
class AvisosAgendamento:
    creditos_necessarios: float
    aviso_credito: bool
    aviso_disponibilidade: bool
    aviso_conflito: bool = False

    @property
    def algum(self) -> bool:
        return self.aviso_credito or self.aviso_disponibilidade or self.aviso_conflito

    def to_dict(self) -> dict:
        dados = asdict(self)
        return {
            'creditsNeeded': dados['creditos_necessarios'],
            'creditWarning': dados['aviso_credito'],
            'availabilityWarning': dados['aviso_disponibilidade'],
            'conflictWarning': dados['aviso_conflito'],
        }


def avaliar_agendamento(aluno: Optional[Aluno], profissional: Optional[Profissional],
                        data, horario: str, duracao: int, creditos_por_hora: float = 1.0,
                        itens_existentes: Iterable[ItemAgenda] = (),
                        ignorar_aula_id: Optional[str] = None) -> AvisosAgendamento:
    necessarios = creditos_necessarios(duracao, creditos_por_hora)
    conflito = False
    if profissional is not None:
        conflito = aviso_conflito(itens_existentes, profissional.id, data, horario,
                                  duracao, ignorar_aula_id)
    return AvisosAgendamento(
        creditos_necessarios=necessarios,
        aviso_credito=aviso_credito(aluno, necessarios),
        aviso_disponibilidade=aviso_disponibilidade(profissional, data, horario),
        aviso_conflito=conflito,
    )
