"""
docbridge Configuration
Supports AWS Parameter Store for production secrets
"""
import logging
import os

import boto3

logger = logging.getLogger(__name__)


def get_parameter(name: str, default: str = "") -> str:
    """Get parameter from AWS Parameter Store or environment"""
    # Environment variable takes precedence
    env_key = name.upper().replace("-", "_").replace("/", "_")
    if env_key in os.environ:
        return os.environ[env_key]

    if os.environ.get("USE_PARAMETER_STORE"):
        try:
            ssm = boto3.client("ssm", region_name=os.environ.get("AWS_REGION", "us-west-2"))
            path = os.environ.get("PARAMETER_STORE_PATH", "/docbridge/prod/")
            response = ssm.get_parameter(Name=f"{path}{name}", WithDecryption=True)
            return response["Parameter"]["Value"]
        except Exception as e:
            logger.warning(f"Could not load {name} from Parameter Store: {e}")

    return default


class Config:
    """Base configuration"""
    # Flask
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-in-production")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///docbridge.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Fix Render's postgres:// URL
    if SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace("postgres://", "postgresql://", 1)

    # Security
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600

    # Request body cap, must stay above PDF_MAX_UPLOAD_BYTES
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    # PDF extraction
    PDF_MAX_UPLOAD_BYTES = int(os.environ.get("PDF_MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    PDF_WORKER_TIMEOUT = float(os.environ.get("PDF_WORKER_TIMEOUT", "30"))
    PDF_WORKER_MAX_OUTPUT = int(os.environ.get("PDF_WORKER_MAX_OUTPUT", 50 * 1024 * 1024))
    PDF_MIN_TEXT_CHARS = int(os.environ.get("PDF_MIN_TEXT_CHARS", "10"))

    # OpenAI
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    SIMPLIFY_MAX_CHARS = int(os.environ.get("SIMPLIFY_MAX_CHARS", "3000"))

    # Lingo.dev
    LINGODOTDEV_API_KEY = os.environ.get("LINGODOTDEV_API_KEY", "")
    LINGO_API_URL = os.environ.get("LINGO_API_URL", "https://api.lingo.dev/v1/translate")
    TRANSLATION_TIMEOUT = float(os.environ.get("TRANSLATION_TIMEOUT", "30"))

    # App Version
    APP_VERSION = os.environ.get("APP_VERSION", "2026.10")
    BUILD_TIME = os.environ.get("BUILD_TIME", "")
    GIT_COMMIT = os.environ.get("GIT_COMMIT", "")


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Override with Parameter Store in production
    SECRET_KEY = get_parameter("secret-key", Config.SECRET_KEY)
    OPENAI_API_KEY = get_parameter("openai-api-key", Config.OPENAI_API_KEY)
    LINGODOTDEV_API_KEY = get_parameter("lingodotdev-api-key", Config.LINGODOTDEV_API_KEY)


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    OPENAI_API_KEY = ""
    LINGODOTDEV_API_KEY = ""


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}

