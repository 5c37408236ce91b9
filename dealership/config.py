import os
import logging
import secrets
from datetime import timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path, override=False)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'


def _env_flag(name: str, default: str = 'False') -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 't')


class LogConfig:
    """Centralized logging configuration for the dealership backend"""

    @staticmethod
    def setup_logging(log_level: str = None, log_dir: str = None) -> logging.Logger:
        if log_level is None:
            log_level = os.environ.get('LOG_LEVEL', 'INFO')

        if log_dir is None:
            log_dir = os.environ.get('LOG_DIR', 'logs')

        os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            level=getattr(logging, log_level.upper(), logging.INFO),
            format=LOG_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        logger = logging.getLogger('dealership')

        if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'dealership.log'),
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)

        return logger


# Initialize logger
logger = LogConfig.setup_logging()


class Config:
    """Configuration for the Ben Davis Automotive backend."""

    # Environment configuration
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development').lower()
    IS_PRODUCTION = ENVIRONMENT == 'production'

    # Basic application settings
    APP_NAME = os.environ.get('APP_NAME', 'Ben Davis Automotive')
    APP_VERSION = os.environ.get('APP_VERSION', '1.0.0')
    SECRET_KEY = os.environ.get('SECRET_KEY', None)

    if not SECRET_KEY:
        if IS_PRODUCTION:
            raise ValueError("SECRET_KEY must be set in production environment")
        else:
            SECRET_KEY = secrets.token_hex(32)
            logger.warning("Using generated SECRET_KEY - set SECRET_KEY environment variable for production")

    DEBUG = _env_flag('FLASK_DEBUG') and not IS_PRODUCTION

    # Server configuration
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', 5000))
    ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('ALLOWED_ORIGINS', '').split(',') if o.strip()]
    RATE_LIMIT_ENABLED = _env_flag('RATE_LIMIT_ENABLED', 'True')

    # Static assets (generated images, html pages)
    STATIC_DIR = os.environ.get(
        'STATIC_DIR',
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'public')
    )

    # AI/LLM configuration
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY', '').strip()
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')
    OPENAI_TIMEOUT_S = float(os.environ.get('OPENAI_TIMEOUT_S', 30))
    AI_TEMPERATURE = float(os.environ.get('AI_TEMPERATURE', 0.8))
    AI_MAX_TOKENS = int(os.environ.get('AI_MAX_TOKENS', 300))
    IMAGE_MODEL = os.environ.get('IMAGE_MODEL', 'dall-e-3')
    IMAGE_DOWNLOAD_TIMEOUT_S = float(os.environ.get('IMAGE_DOWNLOAD_TIMEOUT_S', 60))

    # Dashboard session
    AUTH_COOKIE_NAME = os.environ.get('AUTH_COOKIE_NAME', 'auth-session')
    AUTH_SESSION_MAX_AGE = int(os.environ.get('AUTH_SESSION_MAX_AGE', int(timedelta(days=7).total_seconds())))
    AUTH_COOKIE_SECURE = _env_flag('AUTH_COOKIE_SECURE', 'True' if IS_PRODUCTION else 'False')
    DASHBOARD_PASSWORD_HASH = os.environ.get('DASHBOARD_PASSWORD_HASH', '')
    DASHBOARD_PASSWORD = os.environ.get('DASHBOARD_PASSWORD', 'Ben$2025')
    DASHBOARD_USERS = (
        ('aoberlin', 'Andy Oberlin'),
        ('bdavis', 'Brent Davis'),
    )

    # Per-turn JSON log
    TURN_LOG_FILE = os.environ.get('TURN_LOG_FILE', os.path.join(os.environ.get('LOG_DIR', 'logs'), 'chat_turns.jsonl'))
    TURN_LOG_BODIES = _env_flag('TURN_LOG_BODIES')

    @classmethod
    def initialize(cls):
        logger.info(f"Initializing {cls.APP_NAME} v{cls.APP_VERSION} in {cls.ENVIRONMENT} mode.")


# Initialize configuration on module load
Config.initialize()
