"""Configuration loading and validation."""

import os
import logging
import sys

import yaml
from voluptuous import Schema, Optional, Any, ALLOW_EXTRA, Invalid, Range, All

from root_explorer.constants import (
    DEFAULT_MAX_TREE_DEPTH,
    DEFAULT_PREVIEW_MAX_BYTES,
    DEFAULT_ROOTS_REFRESH_INTERVAL_SECONDS,
    DEFAULT_SESSION_TTL_SECONDS,
    LOGGER_NAME,
)

logger = logging.getLogger(LOGGER_NAME)


# Configuration Schema
CONFIG_SCHEMA = Schema({
    # HTTP server binding.
    Optional('server'): {
        Optional('host'): str,                      # Bind address for Gunicorn (default 0.0.0.0).
        Optional('port'): All(int, Range(min=1, max=65535)),  # Listen port (default 3000).
    },
    # Where roots and users are persisted, and the fallback root.
    Optional('storage'): {
        Optional('roots_config_path'): str,         # roots.json with systemPaths/userPaths/roots.
        Optional('default_root_dir'): str,          # Directory used when roots.json is unreadable.
        Optional('users_db_path'): str,             # JSON file holding user records.
    },
    # Browsing limits.
    Optional('browse'): {
        Optional('max_tree_depth'): All(int, Range(min=0)),       # Directory tree expansion depth.
        Optional('preview_max_bytes'): All(int, Range(min=0)),    # Text/json preview size cap.
        Optional('roots_refresh_interval_seconds'): All(int, Range(min=1)),  # Periodic root existence re-check.
    },
    # Sessions and the initial account.
    Optional('auth'): {
        Optional('session_ttl_seconds'): All(int, Range(min=1)),  # Session lifetime.
        Optional('session_cookie_secure'): bool,   # Mark the session cookie Secure (HTTPS only).
        Optional('initial_root_password'): str,     # Password for the root user created on first start.
    },
    Optional('settings'): {
        Optional('log_level'): Any('DEBUG', 'INFO', 'WARNING', 'ERROR'),  # Logging verbosity.
    },
}, extra=ALLOW_EXTRA)


def _env_bool(name: str, current: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return current
    return str(value).lower() in ('true', '1', 'yes')


def load_config() -> dict:
    """Load configuration from config.yaml merged with environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. config.yaml
    3. Default values
    """
    config = {
        'FLASK_HOST': '0.0.0.0',
        'FLASK_PORT': 3000,
        'ROOTS_CONFIG_PATH': os.path.join(os.getcwd(), 'roots.json'),
        'DEFAULT_ROOT_DIR': '.',
        'USERS_DB_PATH': os.path.join(os.getcwd(), 'data', 'users.json'),
        'MAX_TREE_DEPTH': DEFAULT_MAX_TREE_DEPTH,
        'PREVIEW_MAX_BYTES': DEFAULT_PREVIEW_MAX_BYTES,
        'ROOTS_REFRESH_INTERVAL_SECONDS': DEFAULT_ROOTS_REFRESH_INTERVAL_SECONDS,
        'SESSION_TTL_SECONDS': DEFAULT_SESSION_TTL_SECONDS,
        'SESSION_COOKIE_SECURE': False,
        'INITIAL_ROOT_PASSWORD': None,
        'LOG_LEVEL': 'INFO',
    }

    # Load from config.yaml if exists
    config_paths = ['/app/config.yaml', './config.yaml', 'config.yaml']
    config_loaded = False

    for path in config_paths:
        if os.path.exists(path):
            try:
                logger.info(f"Loading config from {path}")
                with open(path, 'r') as f:
                    yaml_config = yaml.safe_load(f) or {}

                # Validate schema
                try:
                    yaml_config = CONFIG_SCHEMA(yaml_config)
                except Invalid as e:
                    logger.error(f"Invalid configuration in {path}: {e}")
                    sys.exit(1)

                if 'server' in yaml_config:
                    server = yaml_config['server']
                    config['FLASK_HOST'] = server.get('host', config['FLASK_HOST'])
                    config['FLASK_PORT'] = server.get('port', config['FLASK_PORT'])

                if 'storage' in yaml_config:
                    storage = yaml_config['storage']
                    config['ROOTS_CONFIG_PATH'] = storage.get('roots_config_path', config['ROOTS_CONFIG_PATH'])
                    config['DEFAULT_ROOT_DIR'] = storage.get('default_root_dir', config['DEFAULT_ROOT_DIR'])
                    config['USERS_DB_PATH'] = storage.get('users_db_path', config['USERS_DB_PATH'])

                if 'browse' in yaml_config:
                    browse = yaml_config['browse']
                    config['MAX_TREE_DEPTH'] = browse.get('max_tree_depth', config['MAX_TREE_DEPTH'])
                    config['PREVIEW_MAX_BYTES'] = browse.get('preview_max_bytes', config['PREVIEW_MAX_BYTES'])
                    config['ROOTS_REFRESH_INTERVAL_SECONDS'] = browse.get(
                        'roots_refresh_interval_seconds', config['ROOTS_REFRESH_INTERVAL_SECONDS'])

                if 'auth' in yaml_config:
                    auth = yaml_config['auth']
                    config['SESSION_TTL_SECONDS'] = auth.get('session_ttl_seconds', config['SESSION_TTL_SECONDS'])
                    config['SESSION_COOKIE_SECURE'] = auth.get('session_cookie_secure', config['SESSION_COOKIE_SECURE'])
                    config['INITIAL_ROOT_PASSWORD'] = auth.get('initial_root_password') or config['INITIAL_ROOT_PASSWORD']

                if 'settings' in yaml_config:
                    settings = yaml_config['settings']
                    config['LOG_LEVEL'] = settings.get('log_level', config['LOG_LEVEL'])

                config_loaded = True
                break

            except Exception as e:
                logger.error(f"Error loading config from {path}: {e}")

    if not config_loaded:
        logger.info("No config.yaml found, using defaults")

    # Environment variables override everything (for secrets/deployment)
    config['FLASK_HOST'] = os.getenv('FLASK_HOST') or config['FLASK_HOST']
    config['FLASK_PORT'] = int(os.getenv('PORT') or os.getenv('FLASK_PORT') or config['FLASK_PORT'])
    config['ROOTS_CONFIG_PATH'] = os.getenv('ROOTS_CONFIG_PATH') or config['ROOTS_CONFIG_PATH']
    config['DEFAULT_ROOT_DIR'] = os.getenv('DEFAULT_ROOT_DIR') or os.getenv('ROOT_DIR') or config['DEFAULT_ROOT_DIR']
    config['USERS_DB_PATH'] = os.getenv('USERS_DB_PATH') or config['USERS_DB_PATH']
    config['MAX_TREE_DEPTH'] = int(os.getenv('MAX_TREE_DEPTH', str(config['MAX_TREE_DEPTH'])))
    config['PREVIEW_MAX_BYTES'] = int(os.getenv('PREVIEW_MAX_BYTES', str(config['PREVIEW_MAX_BYTES'])))
    config['ROOTS_REFRESH_INTERVAL_SECONDS'] = int(
        os.getenv('ROOTS_REFRESH_INTERVAL_SECONDS', str(config['ROOTS_REFRESH_INTERVAL_SECONDS'])))
    config['SESSION_TTL_SECONDS'] = int(os.getenv('SESSION_TTL_SECONDS', str(config['SESSION_TTL_SECONDS'])))
    config['SESSION_COOKIE_SECURE'] = _env_bool('SESSION_COOKIE_SECURE', config['SESSION_COOKIE_SECURE'])
    config['INITIAL_ROOT_PASSWORD'] = os.getenv('INITIAL_ROOT_PASSWORD') or config['INITIAL_ROOT_PASSWORD']
    config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', config['LOG_LEVEL'])

    if config['MAX_TREE_DEPTH'] < 0:
        raise ValueError("MAX_TREE_DEPTH must be >= 0")
    if config['PREVIEW_MAX_BYTES'] < 0:
        raise ValueError("PREVIEW_MAX_BYTES must be >= 0")

    return config
