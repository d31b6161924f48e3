"""Shared configuration constants for pilothouse.

Centralizes paths and credentials used by modules. Paths can be moved with
environment variables; everything else is fixed.
"""

import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"
DEFAULT_CONFIG_DIR = DATA_DIR / "config"
COMPOSE_FILE = DATA_DIR / "docker-compose.yml"
SITE_TEMPLATE_FILE = DATA_DIR / "nginx" / "site.conf.tpl"
PROXY_TEMPLATE_FILE = DATA_DIR / "nginx" / "proxy.conf.tpl"

PILOTHOUSE_HOME = Path(
    os.environ.get("PILOTHOUSE_HOME", Path.home() / ".pilothouse")
).expanduser()
SITES_DIR = Path(
    os.environ.get("PILOTHOUSE_SITES_DIR", Path.home() / "pilothouse-sites")
).expanduser()
NGINX_SITES_DIR = PILOTHOUSE_HOME / "nginx" / "sites"
SSL_DIR = PILOTHOUSE_HOME / "nginx" / "ssl"
CUSTOM_CONFIG_DIR = PILOTHOUSE_HOME / "config"
VENDOR_DIR = PILOTHOUSE_HOME / "vendor"
LOG_DIR = PILOTHOUSE_HOME / "log"

HOSTS_FILE = os.environ.get("PILOTHOUSE_HOSTS_FILE", "/etc/hosts")
LOCALHOST_IP = "127.0.0.1"
HOSTS_TAG = "#pilothouse"

COMPOSE_COMMAND = os.environ.get("PILOTHOUSE_COMPOSE", "docker compose").split()
PROJECT_NAME = os.environ.get("PILOTHOUSE_PROJECT", "pilothouse")
DEFAULT_TLD = os.environ.get("PILOTHOUSE_TLD", "test")

# Container side
CONTAINER_WEB_ROOT = "/var/www/html"
CONTAINER_SSL_DIR = "/etc/nginx/ssl"
PHP_USER = "www-data"
MYSQL_HOST = "mysql"
MYSQL_ROOT_USER = "root"
MYSQL_ROOT_PASSWORD = "root"
MYSQL_WAIT_ATTEMPTS = int(os.environ.get("PILOTHOUSE_MYSQL_WAIT", "30"))
MYSQL_WAIT_INTERVAL = 1.0

DEFAULT_WP_USER = "admin"
DEFAULT_WP_PASS = "password"
DEFAULT_WP_EMAIL = "admin@localhost.test"

SSL_DAYS = 3650
