import os, logging
from datetime import timedelta
from logging import handlers
from pathlib import Path
from urllib.parse import urlparse

class ConfigError(Exception):
    pass

def getenv_typed(name, cast, default=None):
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except Exception as e:
        raise ConfigError(f"Env var {name} invalid: {e}")

def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')

def _as_list(raw: str) -> list:
    return [item.strip() for item in raw.split(',') if item.strip()]

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
    DEBUG = False

    # Caminho da pasta 'instance' na raiz do projeto (sempre disponível)
    INSTANCE_PATH = Path(__file__).parent.parent.parent / 'instance'
    INSTANCE_PATH.mkdir(parents=True, exist_ok=True)

    # Banco principal: DATABASE_URL (PostgreSQL em produção) ou SQLite local
    _db_url = os.getenv('DATABASE_URL')
    if _db_url and _db_url.startswith('postgres://'):
        _db_url = 'postgresql://' + _db_url[len('postgres://'):]
    if not _db_url:
        _db_url = f"sqlite:///{INSTANCE_PATH / 'bs_release.sqlite'}"
    SQLALCHEMY_DATABASE_URI = _db_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_FILE = Path(os.getenv('LOG_FILE', 'logs/bs_release.log'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    # JSON estruturado no arquivo de log (StructuredFormatter)
    LOG_JSON = getenv_typed('LOG_JSON', _as_bool, False)

    # -----------------------------
    # Sessão e Cookies (Segurança)
    # -----------------------------
    # Em ambientes locais (http://localhost), cookies "secure" não são enviados.
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'bs_release_session')
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_SECURE = getenv_typed('SESSION_COOKIE_SECURE', _as_bool, False)

    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE

    PERMANENT_SESSION_LIFETIME = timedelta(hours=getenv_typed('SESSION_LIFETIME_HOURS', int, 24))

    # -----------------------------
    # CSRF (Flask-WTF)
    # -----------------------------
    # A verificação automática fica desligada: as rotas de escrita chamam
    # csrf.protect() depois da checagem de autenticação (401 antes de 403).
    WTF_CSRF_ENABLED = True
    WTF_CSRF_CHECK_DEFAULT = False
    WTF_CSRF_HEADERS = ['X-CSRFToken', 'X-CSRF-Token']
    WTF_CSRF_TIME_LIMIT = None

    # -----------------------------
    # Catálogo de produtos (dados semente, somente leitura)
    # -----------------------------
    PRODUCT_CATALOG = [
        {
            'slug': 'marcom',
            'name': 'Marcom',
            'description': (
                'Unified digital platform that streamlines campaign planning, resource management, '
                'real-time collaboration, and analytics for enhanced marketing efficiency.'
            ),
        },
        {
            'slug': 'collaborate',
            'name': 'Collaborate',
            'description': (
                'Streamlines the approval and annotation process by enabling real-time collaboration, '
                'comprehensive comparison, and efficient change tracking.'
            ),
        },
        {
            'slug': 'lam',
            'name': 'Lam',
            'description': (
                'Localized marketing platform that enables efficient content creation and deployment '
                'through template-based systems, advanced targeting, and performance analytics to '
                'boost brand consistency and impact.'
            ),
        },
    ]
    SEED_SAMPLE_RELEASES = getenv_typed('SEED_SAMPLE_RELEASES', _as_bool, False)

    # -----------------------------
    # Credenciais do administrador
    # -----------------------------
    # 'static' usa as variáveis abaixo; 'database' usa a tabela admin_users
    CREDENTIAL_STORE = os.getenv('CREDENTIAL_STORE', 'static').strip().lower()
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'admin')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH')

    # -----------------------------
    # Upload de imagens
    # -----------------------------
    UPLOAD_FOLDER = Path(os.getenv('UPLOAD_FOLDER', str(INSTANCE_PATH / 'uploads')))
    MAX_CONTENT_LENGTH = getenv_typed('MAX_UPLOAD_MB', int, 5) * 1024 * 1024
    ALLOWED_IMAGE_MIME_TYPES = getenv_typed(
        'ALLOWED_IMAGE_MIME_TYPES', _as_list,
        ['image/jpeg', 'image/png', 'image/gif', 'image/webp'],
    )

    # -----------------------------
    # Rate limiting (em memória, por IP)
    # -----------------------------
    RATE_LIMIT_ENABLED = getenv_typed('RATE_LIMIT_ENABLED', _as_bool, True)
    LOGIN_RATE_LIMIT_MAX = getenv_typed('LOGIN_RATE_LIMIT_MAX', int, 5)
    LOGIN_RATE_LIMIT_WINDOW_MINUTES = getenv_typed('LOGIN_RATE_LIMIT_WINDOW_MINUTES', int, 15)
    API_RATE_LIMIT_MAX = getenv_typed('API_RATE_LIMIT_MAX', int, 100)
    API_RATE_LIMIT_WINDOW_MINUTES = getenv_typed('API_RATE_LIMIT_WINDOW_MINUTES', int, 15)
    # Número de proxies confiáveis à frente da app (0 = acesso direto)
    PROXY_FIX_X_FOR = getenv_typed('PROXY_FIX_X_FOR', int, 0)

    @classmethod
    def init_app(cls, app):
        # logs
        from bs_release.utils.logging_config import StructuredFormatter

        level = getattr(logging, cls.LOG_LEVEL, logging.INFO)
        # Os módulos usam logging.getLogger(__name__) e app.logger é filho do
        # logger do pacote: os handlers ficam só nele (sem duplicar linhas)
        package_logger = logging.getLogger('bs_release')
        package_logger.setLevel(level)
        if any(getattr(h, '_bs_release', False) for h in package_logger.handlers):
            return

        text_formatter = logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s')
        log_file = Path(app.config.get('LOG_FILE', cls.LOG_FILE))
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = handlers.RotatingFileHandler(str(log_file), maxBytes=10_000_000, backupCount=5)
        fh.setLevel(level)
        fh.setFormatter(StructuredFormatter() if app.config.get('LOG_JSON') else text_formatter)
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(text_formatter)
        for handler in (fh, ch):
            handler._bs_release = True
            package_logger.addHandler(handler)

    @classmethod
    def validate(cls):
        if not cls.SECRET_KEY:
            raise ConfigError("SECRET_KEY must be set")
        scheme = urlparse(cls.SQLALCHEMY_DATABASE_URI).scheme
        if scheme and scheme not in ('sqlite', 'postgresql', 'mysql'):
            raise ConfigError(f"Unsupported DB scheme {scheme}")
        if cls.CREDENTIAL_STORE not in ('static', 'database'):
            raise ConfigError(f"Unknown CREDENTIAL_STORE {cls.CREDENTIAL_STORE!r}")
