import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for the CloudSoft application.
    Projects can override any of these through environment variables
    or by setting the key on app.config before CloudSoft(app) runs.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Branding shown in templates
    BRAND_NAME = os.getenv('BRAND_NAME', 'CloudSoft')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    # Optional SQLite file for the structured application log (app_logs table)
    LOG_DB = os.getenv('LOG_DB')

    # Comma separated list, '*' allows any origin on /api/*
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Newsletter notifications - when unset, events only go to the log
    NEWSLETTER_WEBHOOK_URL = os.getenv('NEWSLETTER_WEBHOOK_URL')
    NEWSLETTER_WEBHOOK_TIMEOUT = float(os.getenv('NEWSLETTER_WEBHOOK_TIMEOUT', '5'))

    # Keys copied onto app.config by CloudSoft.init_app (app values win)
    APP_KEYS = (
        'SECRET_KEY',
        'BRAND_NAME',
        'LOG_LEVEL',
        'LOG_DB',
        'CORS_ORIGINS',
        'NEWSLETTER_WEBHOOK_URL',
        'NEWSLETTER_WEBHOOK_TIMEOUT',
    )
