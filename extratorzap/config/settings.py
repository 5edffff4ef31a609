import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration management for the entire application"""

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ

        # LLM Settings - Gemini
        self.GEMINI_API_KEY = env.get('GEMINI_API_KEY') or env.get('API_KEY')
        self.GEMINI_MODEL = env.get('GEMINI_MODEL', 'gemini-2.5-flash')

        # Lookup Settings
        self.LOOKUP_TIMEOUT_SECONDS = int(env.get('LOOKUP_TIMEOUT_SECONDS', 120))

        # Application Settings
        self.LOG_LEVEL = env.get('LOG_LEVEL', 'INFO').upper()
        self.FLASK_HOST = env.get('FLASK_HOST', '0.0.0.0')
        self.FLASK_PORT = int(env.get('FLASK_PORT', 5000))
        self.FLASK_DEBUG = env.get('FLASK_DEBUG', 'false').lower() in ('1', 'true', 'yes')


def load_settings(environ=None) -> Settings:
    """Read settings from the process environment (and .env, already loaded)"""
    return Settings(environ)
