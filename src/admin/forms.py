from datetime import date

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField, FloatField, IntegerField, PasswordField, SelectField,
    SelectMultipleField, StringField,
)
from wtforms.validators import (
    DataRequired, InputRequired, Length, NumberRange, Optional, Regexp,
    ValidationError,
)

from src.core.constants import (
    METODOS_PAGAMENTO, PAINEIS_SISTEMA, STATUS_ALUNO, STATUS_AULA, TIPOS_AULA,
    TIPOS_TRANSACAO,
)

DATA_REGEX = r'^\d{4}-\d{2}-\d{2}$'
HORARIO_REGEX = r'^([01]\d|2[0-3]):[0-5]\d$'
EMAIL_REGEX = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def data_existente(form, field):
    """Recusa datas com formato certo mas fora do calendário (ex.: 2024-02-30)."""
    if not field.data:
        return
    try:
        date.fromisoformat(field.data)
    except (TypeError, ValueError):
        raise ValidationError("Data inválida")


def _opcoes(valores):
    return [(v, v) for v in valores]


class AlunoForm(FlaskForm):
    nome = StringField('Nome', validators=[
        DataRequired(message="Nome é obrigatório"),
        Length(min=3, max=120, message="Nome deve ter entre 3 e 120 caracteres")
    ])
    responsavel = StringField('Responsável', validators=[Optional(), Length(max=120)])
    escola = StringField('Escola', validators=[Optional(), Length(max=120)])
    serie = StringField('Série', validators=[Optional(), Length(max=60)])
    status = SelectField('Status', choices=_opcoes(STATUS_ALUNO), default='prospeccao')
    plano_mensal = BooleanField('Plano mensal')
    data_nascimento = StringField('Nascimento', validators=[Optional(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])
    telefone = StringField('Telefone', validators=[Optional(), Length(max=20)])
    email = StringField('Email', validators=[Optional(), Regexp(EMAIL_REGEX, message="Email inválido")])
    telefone_responsavel = StringField('Telefone do responsável', validators=[Optional(), Length(max=20)])
    email_responsavel = StringField('Email do responsável', validators=[Optional(), Regexp(EMAIL_REGEX, message="Email inválido")])


class StatusForm(FlaskForm):
    status = StringField('Status', validators=[DataRequired()])


class ProfissionalForm(FlaskForm):
    nome = StringField('Nome', validators=[
        DataRequired(message="Nome é obrigatório"),
        Length(min=3, max=120)
    ])
    disciplinas = SelectMultipleField('Disciplinas', validate_choice=False)
    telefone = StringField('Telefone', validators=[DataRequired(message="Telefone é obrigatório"), Length(max=20)])
    email = StringField('Email', validators=[Optional(), Regexp(EMAIL_REGEX, message="Email inválido")])
    login = StringField('Login', validators=[Optional(), Length(min=3, max=120)])
    senha = PasswordField('Senha', validators=[Optional(), Length(min=6, message="Use pelo menos 6 caracteres")])
    valor_hora_individual = FloatField('Valor hora individual', validators=[Optional(), NumberRange(min=0)])
    valor_hora_turma = FloatField('Valor hora turma', validators=[Optional(), NumberRange(min=0)])
    data_nascimento = StringField('Nascimento', validators=[Optional(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])


class AgendarAulaForm(FlaskForm):
    aluno_id = StringField('Aluno', validators=[DataRequired(message="Selecione o aluno")])
    profissional_id = StringField('Professor', validators=[DataRequired(message="Selecione o professor")])
    dia = StringField('Data', validators=[DataRequired(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])
    horario = StringField('Horário', validators=[DataRequired(), Regexp(HORARIO_REGEX, message="Horário inválido")])
    tipo = SelectField('Tipo', choices=_opcoes(TIPOS_AULA), default='Aula Regular')
    disciplina = StringField('Disciplina', validators=[DataRequired(message="Informe a disciplina")])
    conteudo = StringField('Conteúdo', validators=[Optional(), Length(max=2000)])
    duracao = IntegerField('Duração (minutos)', default=90, validators=[
        InputRequired(), NumberRange(min=15, max=480, message="Duração entre 15 e 480 minutos")
    ])
    creditos_por_hora = FloatField('Créditos por hora', default=1.0, validators=[Optional(), NumberRange(min=0)])
    ciente_sem_creditos = BooleanField('Estou ciente e desejo agendar mesmo assim')
    status = SelectField('Status', choices=_opcoes(STATUS_AULA), default='scheduled')


class TurmaForm(FlaskForm):
    nome = StringField('Nome', validators=[DataRequired(message="Nome é obrigatório"), Length(max=120)])
    descricao = StringField('Descrição', validators=[Optional(), Length(max=2000)])
    aluno_ids = SelectMultipleField('Alunos', validate_choice=False)
    profissional_id = StringField('Professor', validators=[DataRequired(message="Selecione o professor")])
    disciplina = StringField('Disciplina', validators=[Optional(), Length(max=120)])
    creditos_por_aula = FloatField('Horas por aula', validators=[InputRequired(), NumberRange(min=0)])
    cor = StringField('Cor', validators=[Optional(), Length(max=20)])
    tipo_agenda = SelectField('Tipo', choices=[('recurring', 'Recorrente'), ('single', 'Data única')], default='recurring')
    dia = StringField('Data', validators=[Optional(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])
    horario = StringField('Horário', validators=[Optional(), Regexp(HORARIO_REGEX, message="Horário inválido")])


class TransacaoForm(FlaskForm):
    tipo = SelectField('Tipo', choices=_opcoes(TIPOS_TRANSACAO))
    valor = FloatField('Valor', validators=[InputRequired(message="Informe o valor"), NumberRange(min=0, message="Valor não pode ser negativo")])
    dia = StringField('Data', validators=[DataRequired(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])
    creditos = FloatField('Créditos', validators=[Optional(), NumberRange(min=0)])
    mes_referencia = StringField('Mês de referência', validators=[Optional(), Length(max=20)])
    metodo_pagamento = SelectField('Forma de pagamento', choices=_opcoes(METODOS_PAGAMENTO), default='pix')
    aluno_id = StringField('Aluno', validators=[Optional()])
    profissional_id = StringField('Profissional', validators=[Optional()])
    categoria = StringField('Categoria', validators=[Optional(), Length(max=60)])
    chave_idempotencia = StringField('Chave', validators=[Optional(), Length(max=128), Regexp(r'^[A-Za-z0-9_\-]+$')])


class ColaboradorForm(FlaskForm):
    nome = StringField('Nome', validators=[DataRequired(message="Nome é obrigatório"), Length(min=3, max=120)])
    cargo = StringField('Cargo', validators=[DataRequired(message="Cargo é obrigatório"), Length(max=60)])
    login = StringField('Login', validators=[Optional(), Length(min=3, max=120)])
    senha = PasswordField('Senha', validators=[Optional(), Length(min=6, message="Use pelo menos 6 caracteres")])
    acesso_sistema = SelectMultipleField('Acesso', choices=_opcoes(PAINEIS_SISTEMA))
    tipo_remuneracao = SelectField('Remuneração', choices=[('', '---'), ('fixed', 'Fixa'), ('commission', 'Comissão')], default='')
    salario_fixo = FloatField('Salário fixo', validators=[Optional(), NumberRange(min=0)])
    percentual_comissao = FloatField('Comissão (%)', validators=[Optional(), NumberRange(min=0, max=100)])
    email = StringField('Email', validators=[Optional(), Regexp(EMAIL_REGEX, message="Email inválido")])
    telefone = StringField('Telefone', validators=[Optional(), Length(max=20)])
