from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Regexp

from src.admin.forms import DATA_REGEX, data_existente


class RelatorioTurmaForm(FlaskForm):
    # O conteúdo do relatório (objeto) é lido direto do JSON
    aluno_id = StringField('Aluno', validators=[DataRequired(message="Selecione o aluno")])
    dia = StringField('Data', validators=[DataRequired(), Regexp(DATA_REGEX, message="Data inválida"), data_existente])
