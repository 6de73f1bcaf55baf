"""
Repositório de Leitura (Service Layer compartilhado)

Carrega as coleções como modelos de domínio. Usado pelos painéis da
administração e do professor. Cada chamada lê o estado atual do
Firestore; não há consistência entre coleções, então quem consome deve
tolerar referências a documentos ainda inexistentes.
"""

from typing import Dict, Iterable, List, Optional

from src.core.constants import (
    COLECAO_ALUNOS, COLECAO_AULAS, COLECAO_COLABORADORES, COLECAO_CONTINUIDADE,
    COLECAO_OCORRENCIAS_TURMA, COLECAO_PROFISSIONAIS, COLECAO_RELATORIOS_TURMA,
    COLECAO_TRANSACOES, COLECAO_TURMAS, DIAS_SEMANA,
)
from src.core.database import get_db, listar
from src.core.erros import ErroValidacao
from src.core.models import (
    Aluno, AulaAgendada, Colaborador, ItemContinuidade, Profissional,
    RelatorioTurma, Transacao, Turma, normalizar_disponibilidade,
)

# Limite do operador 'in' do Firestore
TAMANHO_LOTE_IN = 30


def _em_lotes(colecao: str, campo: str, valores: Iterable[str]) -> List[Dict]:
    valores = sorted(set(v for v in valores if v))
    documentos = []
    for i in range(0, len(valores), TAMANHO_LOTE_IN):
        lote = valores[i:i + TAMANHO_LOTE_IN]
        if campo == '__name__':
            # Filtro por ID exige referências de documento, não strings
            lote = [get_db().collection(colecao).document(v) for v in lote]
        documentos.extend(listar(colecao, [(campo, 'in', lote)]))
    return documentos


def por_id(registros: Iterable) -> Dict[str, object]:
    return {r.id: r for r in registros}


def carregar_alunos(ids: Optional[Iterable[str]] = None) -> List[Aluno]:
    if ids is not None:
        docs = _em_lotes(COLECAO_ALUNOS, '__name__', ids)
    else:
        docs = listar(COLECAO_ALUNOS)
    return sorted((Aluno.from_dict(d, d['id']) for d in docs), key=lambda a: a.nome.lower())


def carregar_profissionais() -> List[Profissional]:
    docs = listar(COLECAO_PROFISSIONAIS)
    return sorted((Profissional.from_dict(d, d['id']) for d in docs), key=lambda p: p.nome.lower())


def carregar_aulas(profissional_id: Optional[str] = None) -> List[AulaAgendada]:
    filtros = [('professionalId', '==', profissional_id)] if profissional_id else None
    return [AulaAgendada.from_dict(d, d['id']) for d in listar(COLECAO_AULAS, filtros)]


def carregar_turmas(profissional_id: Optional[str] = None, apenas_ativas: bool = False) -> List[Turma]:
    filtros = []
    if profissional_id:
        filtros.append(('professionalId', '==', profissional_id))
    if apenas_ativas:
        filtros.append(('status', '==', 'active'))
    return [Turma.from_dict(d, d['id']) for d in listar(COLECAO_TURMAS, filtros)]


def carregar_relatorios_turma(turma_ids: Optional[Iterable[str]] = None) -> List[RelatorioTurma]:
    if turma_ids is None:
        docs = listar(COLECAO_RELATORIOS_TURMA)
    else:
        docs = _em_lotes(COLECAO_RELATORIOS_TURMA, 'groupId', turma_ids)
    return [RelatorioTurma.from_dict(d, d['id']) for d in docs]


def carregar_ocorrencias(turma_ids: Optional[Iterable[str]] = None) -> List[Dict]:
    if turma_ids is None:
        return listar(COLECAO_OCORRENCIAS_TURMA)
    return _em_lotes(COLECAO_OCORRENCIAS_TURMA, 'groupId', turma_ids)


def carregar_continuidade(aluno_ids: Iterable[str]) -> List[ItemContinuidade]:
    docs = _em_lotes(COLECAO_CONTINUIDADE, 'studentId', aluno_ids)
    return [ItemContinuidade.from_dict(d, d['id']) for d in docs]


def carregar_transacoes(filtros: Optional[List[tuple]] = None) -> List[Transacao]:
    docs = listar(COLECAO_TRANSACOES, filtros)
    transacoes = [Transacao.from_dict(d, d['id']) for d in docs]
    return sorted(transacoes, key=lambda t: str(t.data), reverse=True)


def carregar_colaboradores() -> List[Colaborador]:
    docs = listar(COLECAO_COLABORADORES)
    return sorted((Colaborador.from_dict(d, d['id']) for d in docs), key=lambda c: c.nome.lower())


# === DISPONIBILIDADE ===

def validar_disponibilidade(valor) -> Dict[str, List[str]]:
    """Aceita {dia: ['HH:MM', ...]}; recusa dias ou horários fora do formato."""
    if not isinstance(valor, dict):
        raise ErroValidacao("Disponibilidade deve ser um objeto {dia: [horários]}.", 'disponibilidade')
    for dia, horarios in valor.items():
        if dia not in DIAS_SEMANA:
            raise ErroValidacao(f"Dia da semana inválido: {dia}", 'disponibilidade')
        if not isinstance(horarios, (list, tuple)):
            raise ErroValidacao(f"Horários de '{dia}' devem ser uma lista.", 'disponibilidade')
        for horario in horarios:
            partes = str(horario).split(':')
            # Hora com 1 ou 2 dígitos, minutos sempre com 2
            if (len(partes) < 2 or not all(p.isdigit() for p in partes[:2])
                    or len(partes[0]) > 2 or len(partes[1]) != 2):
                raise ErroValidacao(f"Horário inválido em '{dia}': {horario}", 'disponibilidade')
            if int(partes[0]) > 23 or int(partes[1]) > 59:
                raise ErroValidacao(f"Horário inválido em '{dia}': {horario}", 'disponibilidade')
    normalizada = normalizar_disponibilidade(valor)
    # HH:MM com zero à esquerda (ex.: '8:00' -> '08:00')
    return {
        dia: sorted({f"{int(h.split(':')[0]):02d}:{h.split(':')[1][:2]}" for h in horarios})
        for dia, horarios in normalizada.items()
    }


def salvar_disponibilidade(profissional_id: str, disponibilidade) -> Dict[str, List[str]]:
    normalizada = validar_disponibilidade(disponibilidade)
    get_db().collection(COLECAO_PROFISSIONAIS).document(profissional_id).update({'availability': normalizada})
    return normalizada
