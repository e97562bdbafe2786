# forms/auth_form.py

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Length

class LoginForm(FlaskForm):
    username = StringField(
        'Username',
        validators=[
            DataRequired(message="Username is required."),
            Length(1, 50, message="Username must have at most 50 characters."),
        ],
        render_kw={"placeholder": "admin", "autocomplete": "username", "autocapitalize": "none", "spellcheck": "false"}
    )
    password = PasswordField(
        'Password',
        validators=[
            DataRequired(message="Password is required."),
            Length(1, 128),
        ],
        render_kw={"autocomplete": "current-password"}
    )
    remember_me = BooleanField('Keep me signed in')
    submit = SubmitField('Sign in')
