from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Length

class LoginForm(FlaskForm):
    # 'login' pode ser um e-mail ou um apelido (vira e-mail sintético no serviço)
    login = StringField('Login', validators=[
        DataRequired(message="Login é obrigatório"),
        Length(max=120)
    ])
    senha = PasswordField('Senha', validators=[
        DataRequired(message="Senha é obrigatória")
    ])
