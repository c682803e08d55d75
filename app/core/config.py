import os
from typing import List
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
load_dotenv(os.path.join(BASE_DIR, '.env'))


class Settings(BaseSettings):
    PROJECT_NAME: str = os.getenv('PROJECT_NAME', 'MEDICATION TRACKER')
    SECRET_KEY: str = os.getenv('SECRET_KEY', '')
    API_PREFIX: str = '/api'
    BACKEND_CORS_ORIGINS: List[str] = ['*']
    DATABASE_URL: str = os.getenv('SQL_DATABASE_URL', 'sqlite:///./medication.db')
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 60 * 60 * 24 * 7  # Token expired after 7 days
    SECURITY_ALGORITHM: str = 'HS256'
    LOGGING_CONFIG_FILE: str = os.path.join(BASE_DIR, 'logging.ini')

    # Medication tracking
    MEDICATION_TABLE: str = os.getenv('MEDICATION_TABLE', 'MedicationCrud')
    QUERY_CACHE_STALE_SECONDS: float = float(os.getenv('QUERY_CACHE_STALE_SECONDS', '0'))


settings = Settings()
