import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production' or
    os.getenv('PRODUCTION') == '1'
)

LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    BRAND_NAME = os.getenv('BRAND_NAME', 'CloudSoft')

    # Logging - structured log in SQLite only in production
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DB = os.path.join(LOG_DIR, 'app_logs.db') if IS_PRODUCTION else None

    # API
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Port for the local development server
    PORT = int(os.getenv('PORT', '5000'))

    # Newsletter notifications (uncomment to post events to a webhook)
    # NEWSLETTER_WEBHOOK_URL = os.getenv('NEWSLETTER_WEBHOOK_URL', '')
