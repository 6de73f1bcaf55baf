"""
Constantes Globais do Sistema.
Fonte Única da Verdade para nomes de coleções e vocabulários do domínio.
"""

# === COLEÇÕES DO FIRESTORE ===
COLECAO_ALUNOS = 'students'
COLECAO_PROFISSIONAIS = 'professionals'
COLECAO_AULAS = 'scheduledClasses'
COLECAO_TURMAS = 'classGroups'
COLECAO_RELATORIOS_TURMA = 'groupClassReports'
COLECAO_OCORRENCIAS_TURMA = 'groupClassOccurrences'
COLECAO_CONTINUIDADE = 'continuityItems'
COLECAO_TRANSACOES = 'transactions'
COLECAO_COLABORADORES = 'collaborators'
COLECAO_CONFIGURACOES = 'settings'
COLECAO_NOTIFICACOES = 'notifications'

DOC_CONFIG_FINANCEIRO = 'financial'

# === CALENDÁRIO ===
# Indexado por date.weekday() (0 = segunda). Não depende de locale.
DIAS_SEMANA = ('segunda', 'terca', 'quarta', 'quinta', 'sexta', 'sabado', 'domingo')

NOMES_DIAS = {
    'segunda': 'Segunda-feira',
    'terca': 'Terça-feira',
    'quarta': 'Quarta-feira',
    'quinta': 'Quinta-feira',
    'sexta': 'Sexta-feira',
    'sabado': 'Sábado',
    'domingo': 'Domingo',
}

# Colunas da grade diária da agenda (uma por hora)
HORARIOS_GRADE = tuple(f"{hora:02d}:00" for hora in range(8, 21))

ROTULO_AUSENTE = 'N/A'

# === VOCABULÁRIOS ===
STATUS_ALUNO = ('prospeccao', 'matricula', 'inativo')
STATUS_PROFISSIONAL = ('ativo', 'inativo')
STATUS_AULA = ('scheduled', 'completed', 'canceled')
TIPOS_AULA = ('Aula Regular', 'Avaliação Diagnóstica', 'Curso', 'Outro')
STATUS_TURMA = ('active', 'archived')
STATUS_CONTINUIDADE = ('nao_iniciado', 'em_andamento', 'concluido')

TIPOS_TRANSACAO = ('credit', 'monthly', 'payment')
TIPOS_RECEITA = ('credit', 'monthly')
TIPOS_DESPESA = ('payment',)
METODOS_PAGAMENTO = ('pix', 'cartao', 'dinheiro', 'outro')

PAINEIS_SISTEMA = ('admin', 'teacher')
PERMISSOES_ADMIN = (
    'canAccessStudents',
    'canAccessProfessionals',
    'canAccessClassGroups',
    'canAccessAgenda',
    'canAccessFinancial',
    'canAccessSettings',
)

PAPEL_ADMIN = 'admin'
PAPEL_PROFESSOR = 'teacher'
