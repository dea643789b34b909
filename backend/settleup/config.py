import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from the package directory or parent directory
env_path = Path(__file__).parent / '.env'
if not env_path.exists():
    env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


def _split_origins(value):
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Allow the web frontend to talk to Flask
    CORS_ORIGINS = _split_origins(
        os.environ.get('CORS_ORIGINS', 'http://localhost:5173,http://localhost:8080')
    )


class TestingConfig(Config):
    TESTING = True
    LOG_LEVEL = 'DEBUG'
