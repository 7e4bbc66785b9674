"""Flask configuration for session handling."""

import os

SESSION_STORE = os.environ.get('SESSION_STORE', 'cookie')
"""Where session data lives: ``cookie`` or ``redis``."""

SESSION_COOKIE_KEY = os.environ.get('SESSION_COOKIE_KEY', 'arxiv.sess')
SESSION_MAX_AGE = os.environ.get('SESSION_MAX_AGE', '86400000')
"""Session lifetime in milliseconds, or ``session`` for a browser session."""

SESSION_ROLLING = os.environ.get('SESSION_ROLLING', '0')
SESSION_RENEW = os.environ.get('SESSION_RENEW', '0')
SESSION_AUTO_COMMIT = os.environ.get('SESSION_AUTO_COMMIT', '1')
SESSION_KEY_PREFIX = os.environ.get('SESSION_KEY_PREFIX', '')

SESSION_COOKIE_PATH = os.environ.get('SESSION_COOKIE_PATH', '/')
SESSION_COOKIE_DOMAIN = os.environ.get('SESSION_COOKIE_DOMAIN')
SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', '0')
SESSION_COOKIE_HTTPONLY = os.environ.get('SESSION_COOKIE_HTTPONLY', '1')
SESSION_COOKIE_SAMESITE = os.environ.get('SESSION_COOKIE_SAMESITE', 'Lax')

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_CLUSTER = os.environ.get('REDIS_CLUSTER', '0')

SESSION_JSON_LOGGING = os.environ.get('SESSION_JSON_LOGGING', '0')
"""Emit JSON log records (see :mod:`arxiv.sessions.app_logging`)."""
