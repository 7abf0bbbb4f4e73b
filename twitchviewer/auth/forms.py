from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length


class TextOnly:
    """JSON bodies keep their types; anything but a string is left unset and reported."""

    def process_formdata(self, valuelist):
        if valuelist and not isinstance(valuelist[0], str):
            raise ValueError(self.gettext('Must be a string.'))
        super().process_formdata(valuelist)


class TextField(TextOnly, StringField):
    pass


class SecretField(TextOnly, PasswordField):
    pass


class ApiForm(FlaskForm):
    """JSON API form: Flask-WTF reads the JSON body; CSRF is covered by the SameSite session cookie."""

    class Meta:
        csrf = False


class RegisterForm(ApiForm):
    username = TextField('Username', validators=[DataRequired(), Length(min=3, max=50)])
    email = TextField('Email', validators=[DataRequired(), Email(), Length(max=120)])
    password = SecretField('Password', validators=[DataRequired(), Length(min=6)])


class LoginForm(ApiForm):
    username = TextField('Username', validators=[DataRequired()])
    password = SecretField('Password', validators=[DataRequired()])
    remember = BooleanField('Remember me')


class PasswordResetRequestForm(ApiForm):
    email = TextField('Email', validators=[DataRequired(), Email()])


class ResetPasswordForm(ApiForm):
    token = TextField('Token', validators=[DataRequired()])
    new_password = SecretField('New password', name='newPassword', validators=[DataRequired(), Length(min=6)])


class RememberSessionForm(ApiForm):
    remember = BooleanField('Remember me')
