"""
Centralized logging service for the CloudSoft application.
Provides structured logging with optional SQLite storage and request context.

When LOG_DB is configured, entries are written to the app_logs table.
Otherwise they are forwarded to the standard library logger.
"""

import json
import logging
import sqlite3
import traceback
from datetime import datetime, timedelta

from flask import current_app, has_app_context, has_request_context, request

from .config import Config

logger = logging.getLogger(__name__)

_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def get_log_db():
        """Resolve the log database path: app config first, then Config"""
        if has_app_context():
            path = current_app.config.get('LOG_DB')
            if path:
                return path
        return Config.LOG_DB

    @staticmethod
    def _ensure_logs_table(conn):
        """Ensure the app_logs table exists"""
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                user_agent TEXT,
                request_path TEXT,
                user_id TEXT
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_timestamp
            ON app_logs(timestamp DESC)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_level
            ON app_logs(level)
        """)

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = request.headers.get('User-Agent', '')[:500]
        return ip_address, user_agent, request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (newsletter, ops, etc.)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
            user_id (str): Optional user identifier
        """
        level = level.upper()
        if level not in _LEVELS:
            level = 'INFO'

        if isinstance(details, dict):
            details = json.dumps(details, default=str)

        db_path = LoggingService.get_log_db()
        if not db_path:
            LoggingService._to_console(level, source, message, details)
            return

        try:
            ip_address, user_agent, request_path = LoggingService._get_request_context()
            with sqlite3.connect(db_path) as conn:
                LoggingService._ensure_logs_table(conn)
                conn.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    datetime.now().isoformat(), level, source, message, details,
                    ip_address, user_agent, request_path, user_id
                ))
                conn.commit()
        except sqlite3.Error as e:
            # Fallback to console logging if the store is unavailable
            LoggingService._to_console(level, source, message, details)
            logger.warning(f"Logging service error: {e}")

    @staticmethod
    def _to_console(level, source, message, details):
        text = f"[{source}] {message}"
        if details:
            text = f"{text} | {details}"
        logger.log(getattr(logging, level), text)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def critical(source, message, details=None, user_id=None):
        LoggingService.log('CRITICAL', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log user actions (subscribe, unsubscribe, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def count_recent(levels=('ERROR', 'CRITICAL'), hours=1):
        """Count stored entries at the given levels in the last N hours.

        Returns None when no log database is configured.
        """
        db_path = LoggingService.get_log_db()
        if not db_path:
            return None

        cutoff = (datetime.now() - timedelta(hours=hours)).isoformat()
        placeholders = ', '.join('?' for _ in levels)
        try:
            with sqlite3.connect(db_path) as conn:
                LoggingService._ensure_logs_table(conn)
                cursor = conn.cursor()
                cursor.execute(f"""
                    SELECT COUNT(*) FROM app_logs
                    WHERE level IN ({placeholders})
                    AND timestamp > ?
                """, (*levels, cutoff))
                return cursor.fetchone()[0]
        except sqlite3.Error as e:
            logger.warning(f"Could not count recent log entries: {e}")
            return 0

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        db_path = LoggingService.get_log_db()
        if not db_path:
            return 0

        cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()
        try:
            with sqlite3.connect(db_path) as conn:
                LoggingService._ensure_logs_table(conn)
                cursor = conn.cursor()
                cursor.execute("""
                    DELETE FROM app_logs
                    WHERE timestamp < ?
                """, (cutoff_iso,))
                deleted_count = cursor.rowcount
                conn.commit()
        except sqlite3.Error as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0

        LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count


def db_log(level, source, message, details=None):
    """Shortcut used by modules: db_log('info', 'newsletter', 'New subscriber')"""
    LoggingService.log(level, source, message, details)
