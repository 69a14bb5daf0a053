"""
CloudSoft Starter Site
======================

A ready-to-run Flask application with all CloudSoft modules enabled.

Run with:
    python app.py

Visit:
    http://localhost:5000                         - Homepage
    http://localhost:5000/newsletter/subscribe    - Newsletter sign-up
    http://localhost:5000/newsletter/subscribers  - Subscriber list
    http://localhost:5000/health                  - Health check
"""

import logging
import os

from flask import Flask

from config import Config, IS_PRODUCTION, LOG_DIR
from cloudsoft import CloudSoft

logger = logging.getLogger(__name__)

# ===== App Setup =====

app = Flask(__name__)

app.config['SECRET_KEY'] = Config.SECRET_KEY
app.config['BRAND_NAME'] = Config.BRAND_NAME
app.config['LOG_LEVEL'] = Config.LOG_LEVEL
app.config['LOG_DB'] = Config.LOG_DB
app.config['CORS_ORIGINS'] = Config.CORS_ORIGINS

# Session security
app.config['SESSION_COOKIE_SECURE'] = IS_PRODUCTION
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

if Config.LOG_DB:
    os.makedirs(LOG_DIR, exist_ok=True)

# ===== CloudSoft =====
# Registers home, newsletter pages, newsletter API and /health.
# The subscriber registry lives on cloudsoft.registry for the life of the process.

cloudsoft = CloudSoft(app)


# ===== Run =====

if __name__ == '__main__':
    logger.info(f"Starting on port {Config.PORT}...")
    app.run(debug=not IS_PRODUCTION, port=Config.PORT, host='0.0.0.0')
