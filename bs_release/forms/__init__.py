from .auth_form import LoginForm

__all__ = ["LoginForm"]
