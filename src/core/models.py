"""
Modelos de Documento do Firestore (dataclasses).

Cada modelo tem um campo `id` (ID do documento), `to_dict()` para gravação
e `from_dict(data, doc_id)` para leitura. Os nomes de campo no banco seguem
o esquema camelCase compartilhado com o front-end.

A leitura é tolerante: campos ausentes recebem valores padrão e formatos
legados são convertidos aqui, uma única vez.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.core.constants import DIAS_SEMANA, PAINEIS_SISTEMA, PERMISSOES_ADMIN


def _float(valor, padrao: float = 0.0) -> float:
    try:
        return float(valor)
    except (TypeError, ValueError):
        return padrao


def decodificar_acesso_sistema(valor: Any) -> List[str]:
    """
    Converte `systemAccess` para a forma canônica (lista de painéis).

    Formatos aceitos:
    - lista: ['admin', 'teacher'] (canônico)
    - objeto legado: {'0': 'admin', '1': 'teacher'} (gravado por engano)
    - objeto legado booleano: {'admin': True, 'teacher': False}
    - string única: 'admin'
    Qualquer outra coisa vira lista vazia.
    """
    if isinstance(valor, (list, tuple)):
        itens = list(valor)
    elif isinstance(valor, dict):
        if valor and all(isinstance(v, bool) for v in valor.values()):
            itens = [chave for chave, ativo in valor.items() if ativo]
        else:
            itens = list(valor.values())
    elif isinstance(valor, str):
        itens = [valor]
    else:
        itens = []

    canonico = []
    for item in itens:
        if item in PAINEIS_SISTEMA and item not in canonico:
            canonico.append(item)
    return canonico


def normalizar_disponibilidade(valor: Any) -> Dict[str, List[str]]:
    """Mantém apenas dias válidos, com horários HH:MM ordenados e únicos."""
    if not isinstance(valor, dict):
        return {}
    resultado = {}
    for dia, horarios in valor.items():
        if dia not in DIAS_SEMANA or not isinstance(horarios, (list, tuple)):
            continue
        resultado[dia] = sorted({str(h)[:5] for h in horarios if h})
    return resultado


# ===========================================================================
# Alunos e Profissionais
# ===========================================================================

@dataclass
class Aluno:
    id: Optional[str] = None
    nome: str = ""
    responsavel: str = ""
    escola: str = ""
    serie: str = ""
    status: str = "prospeccao"
    creditos: float = 0.0
    plano_mensal: bool = False
    data_nascimento: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    telefone_responsavel: Optional[str] = None
    email_responsavel: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.nome,
            'guardian': self.responsavel,
            'school': self.escola,
            'grade': self.serie,
            'status': self.status,
            'credits': self.creditos,
            'hasMonthlyPlan': self.plano_mensal,
            'birthDate': self.data_nascimento,
            'phone': self.telefone,
            'email': self.email,
            'guardianPhone': self.telefone_responsavel,
            'guardianEmail': self.email_responsavel,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Aluno:
        return cls(
            id=doc_id or data.get('id'),
            nome=data.get('name', ''),
            responsavel=data.get('guardian', ''),
            escola=data.get('school', ''),
            serie=data.get('grade', ''),
            status=data.get('status', 'prospeccao'),
            creditos=_float(data.get('credits')),
            plano_mensal=bool(data.get('hasMonthlyPlan', False)),
            data_nascimento=data.get('birthDate'),
            telefone=data.get('phone'),
            email=data.get('email'),
            telefone_responsavel=data.get('guardianPhone'),
            email_responsavel=data.get('guardianEmail'),
        )


@dataclass
class Profissional:
    id: Optional[str] = None
    nome: str = ""
    disciplinas: List[str] = field(default_factory=list)
    status: str = "ativo"
    valor_hora_individual: float = 0.0
    valor_hora_turma: float = 0.0
    disponibilidade: Dict[str, List[str]] = field(default_factory=dict)
    telefone: str = ""
    email: Optional[str] = None
    login: Optional[str] = None
    data_nascimento: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.nome,
            'disciplines': list(self.disciplinas),
            'status': self.status,
            'hourlyRateIndividual': self.valor_hora_individual,
            'hourlyRateGroup': self.valor_hora_turma,
            'availability': self.disponibilidade,
            'phone': self.telefone,
            'email': self.email,
            'login': self.login,
            'birthDate': self.data_nascimento,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Profissional:
        return cls(
            id=doc_id or data.get('id'),
            nome=data.get('name', ''),
            disciplinas=list(data.get('disciplines') or []),
            status=data.get('status', 'ativo'),
            valor_hora_individual=_float(data.get('hourlyRateIndividual')),
            valor_hora_turma=_float(data.get('hourlyRateGroup')),
            disponibilidade=normalizar_disponibilidade(data.get('availability')),
            telefone=data.get('phone', ''),
            email=data.get('email'),
            login=data.get('login'),
            data_nascimento=data.get('birthDate'),
        )


# ===========================================================================
# Agenda
# ===========================================================================

@dataclass
class AulaAgendada:
    id: Optional[str] = None
    data: str = ""
    horario: str = ""
    aluno_id: str = ""
    profissional_id: str = ""
    tipo: str = "Aula Regular"
    disciplina: str = ""
    conteudo: str = ""
    duracao: int = 60
    creditos_consumidos: float = 0.0
    relatorio_registrado: bool = False
    status: str = "scheduled"
    relatorio: Optional[Dict[str, Any]] = None
    relatorio_diagnostico: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.data,
            'time': self.horario,
            'studentId': self.aluno_id,
            'professionalId': self.profissional_id,
            'type': self.tipo,
            'discipline': self.disciplina,
            'content': self.conteudo,
            'duration': self.duracao,
            'creditsConsumed': self.creditos_consumidos,
            'reportRegistered': self.relatorio_registrado,
            'status': self.status,
            'report': self.relatorio,
            'diagnosticReport': self.relatorio_diagnostico,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> AulaAgendada:
        return cls(
            id=doc_id or data.get('id'),
            data=data.get('date', ''),
            horario=data.get('time', ''),
            aluno_id=data.get('studentId', ''),
            profissional_id=data.get('professionalId', ''),
            tipo=data.get('type', 'Aula Regular'),
            disciplina=data.get('discipline', ''),
            conteudo=data.get('content', ''),
            duracao=int(_float(data.get('duration'), 60)),
            creditos_consumidos=_float(data.get('creditsConsumed')),
            relatorio_registrado=bool(data.get('reportRegistered', False)),
            status=data.get('status', 'scheduled'),
            relatorio=data.get('report'),
            relatorio_diagnostico=data.get('diagnosticReport'),
        )


@dataclass
class AgendaTurma:
    """
    União discriminada: tipo 'recurring' usa `dias` (dia da semana -> horário),
    tipo 'single' usa `data` + `horario`.
    """
    tipo: str = "recurring"
    dias: Dict[str, str] = field(default_factory=dict)
    data: Optional[str] = None
    horario: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.tipo == 'single':
            return {'type': 'single', 'date': self.data, 'time': self.horario}
        return {'type': 'recurring', 'days': dict(self.dias)}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> AgendaTurma:
        data = data or {}
        dias = {}
        for dia, horario in (data.get('days') or {}).items():
            # Formato antigo: {'start': '14:00', 'end': '15:30'}
            if isinstance(horario, dict):
                horario = horario.get('start')
            if dia in DIAS_SEMANA and horario:
                dias[dia] = str(horario)[:5]
        return cls(
            tipo=data.get('type', 'recurring'),
            dias=dias,
            data=data.get('date'),
            horario=data.get('time'),
        )


@dataclass
class Turma:
    id: Optional[str] = None
    nome: str = ""
    descricao: str = ""
    aluno_ids: List[str] = field(default_factory=list)
    profissional_id: str = ""
    agenda: AgendaTurma = field(default_factory=AgendaTurma)
    disciplina: Optional[str] = None
    creditos_por_aula: float = 0.0
    status: str = "active"
    cor: Optional[str] = None

    @property
    def ativa(self) -> bool:
        return self.status == 'active'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.nome,
            'description': self.descricao,
            'studentIds': list(self.aluno_ids),
            'professionalId': self.profissional_id,
            'schedule': self.agenda.to_dict(),
            'discipline': self.disciplina,
            'creditsToDeduct': self.creditos_por_aula,
            'status': self.status,
            'color': self.cor,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Turma:
        return cls(
            id=doc_id or data.get('id'),
            nome=data.get('name', ''),
            descricao=data.get('description', ''),
            aluno_ids=list(data.get('studentIds') or []),
            profissional_id=data.get('professionalId', ''),
            agenda=AgendaTurma.from_dict(data.get('schedule')),
            disciplina=data.get('discipline'),
            creditos_por_aula=_float(data.get('creditsToDeduct')),
            status=data.get('status', 'active'),
            cor=data.get('color'),
        )


@dataclass
class RelatorioTurma:
    id: Optional[str] = None
    turma_id: str = ""
    aluno_id: str = ""
    data: str = ""
    relatorio: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def chave(turma_id: str, aluno_id: str, data: str) -> str:
        return f"{turma_id}_{aluno_id}_{data}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'groupId': self.turma_id,
            'studentId': self.aluno_id,
            'date': self.data,
            'report': self.relatorio,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> RelatorioTurma:
        return cls(
            id=doc_id or data.get('id'),
            turma_id=data.get('groupId', ''),
            aluno_id=data.get('studentId', ''),
            data=data.get('date', ''),
            relatorio=data.get('report') or {},
        )


@dataclass
class ItemContinuidade:
    id: Optional[str] = None
    aluno_id: str = ""
    descricao: str = ""
    status: str = "nao_iniciado"
    criado_por: str = ""
    criado_em: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.aluno_id,
            'description': self.descricao,
            'status': self.status,
            'createdBy': self.criado_por,
            'createdAt': self.criado_em,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> ItemContinuidade:
        return cls(
            id=doc_id or data.get('id'),
            aluno_id=data.get('studentId', ''),
            descricao=data.get('description', ''),
            status=data.get('status', 'nao_iniciado'),
            criado_por=data.get('createdBy', ''),
            criado_em=data.get('createdAt', ''),
        )


# ===========================================================================
# Financeiro e Colaboradores
# ===========================================================================

@dataclass
class Transacao:
    id: Optional[str] = None
    tipo: str = "credit"
    data: Any = ""
    valor: float = 0.0
    creditos: Optional[float] = None
    mes_referencia: Optional[str] = None
    metodo_pagamento: str = "pix"
    registrado_por: str = ""
    aluno_id: Optional[str] = None
    profissional_id: Optional[str] = None
    categoria: Optional[str] = None

    @property
    def receita(self) -> bool:
        return self.tipo in ('credit', 'monthly')

    @property
    def despesa(self) -> bool:
        return self.tipo == 'payment'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.tipo,
            'date': self.data,
            'amount': self.valor,
            'credits': self.creditos,
            'month': self.mes_referencia,
            'paymentMethod': self.metodo_pagamento,
            'registeredById': self.registrado_por,
            'studentId': self.aluno_id,
            'professionalId': self.profissional_id,
            'category': self.categoria,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Transacao:
        creditos = data.get('credits')
        return cls(
            id=doc_id or data.get('id'),
            tipo=data.get('type', 'credit'),
            data=data.get('date', ''),
            valor=_float(data.get('amount')),
            creditos=_float(creditos) if creditos is not None else None,
            mes_referencia=data.get('month'),
            metodo_pagamento=data.get('paymentMethod', 'pix'),
            registrado_por=data.get('registeredById', ''),
            aluno_id=data.get('studentId'),
            profissional_id=data.get('professionalId'),
            categoria=data.get('category'),
        )


@dataclass
class Colaborador:
    id: Optional[str] = None
    nome: str = ""
    cargo: str = ""
    login: str = ""
    acesso_sistema: List[str] = field(default_factory=list)
    permissoes_admin: Dict[str, bool] = field(default_factory=dict)
    tipo_remuneracao: Optional[str] = None
    salario_fixo: float = 0.0
    percentual_comissao: float = 0.0
    email: Optional[str] = None
    telefone: Optional[str] = None
    data_nascimento: Optional[str] = None

    def pode(self, permissao: str) -> bool:
        return 'admin' in self.acesso_sistema and bool(self.permissoes_admin.get(permissao))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.nome,
            'role': self.cargo,
            'login': self.login,
            'systemAccess': list(self.acesso_sistema),
            'adminPermissions': self.permissoes_admin if 'admin' in self.acesso_sistema else None,
            'remunerationType': self.tipo_remuneracao,
            'fixedSalary': self.salario_fixo or None,
            'commissionPercentage': self.percentual_comissao or None,
            'email': self.email,
            'phone': self.telefone,
            'birthDate': self.data_nascimento,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> Colaborador:
        permissoes = data.get('adminPermissions') or {}
        return cls(
            id=doc_id or data.get('id'),
            nome=data.get('name', ''),
            cargo=data.get('role', ''),
            login=data.get('login', ''),
            acesso_sistema=decodificar_acesso_sistema(data.get('systemAccess')),
            permissoes_admin={p: bool(permissoes.get(p, False)) for p in PERMISSOES_ADMIN},
            tipo_remuneracao=data.get('remunerationType'),
            salario_fixo=_float(data.get('fixedSalary')),
            percentual_comissao=_float(data.get('commissionPercentage')),
            email=data.get('email'),
            telefone=data.get('phone'),
            data_nascimento=data.get('birthDate'),
        )
