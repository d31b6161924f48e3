"""Resolve which config file each container subsystem mounts.

A file of the same name in CUSTOM_CONFIG_DIR overrides the shipped default.
A variable already present in the environment wins over both.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pilothouse.config import (
    CUSTOM_CONFIG_DIR,
    DEFAULT_CONFIG_DIR,
    NGINX_SITES_DIR,
    PROJECT_NAME,
    SITES_DIR,
    SSL_DIR,
    VENDOR_DIR,
)

CONFIG_FILES = {
    "MYSQL_CONFIG_FILE": "mysql.cnf",
    "NGINX_CONFIG_FILE": "nginx.conf",
    "NGINX_SHARED_CONFIG_FILE": "shared.conf.inc",
    "PHP_CONFIG_FILE": "php.ini",
    "PHP_FPM_CONFIG_FILE": "php-fpm.conf",
    "PHP_XDEBUG_CONFIG_FILE": "xdebug.ini",
    "SSMTP_CONFIG_FILE": "ssmtp.conf",
    "WPCLI_CONFIG_FILE": "wp-cli.yml",
}


def resolve_config_file(filename: str) -> Path:
    custom = Path(CUSTOM_CONFIG_DIR) / filename
    if custom.is_file():
        logging.debug("Using custom config %s", custom)
        return custom
    return Path(DEFAULT_CONFIG_DIR) / filename


def config_file_env() -> dict[str, str]:
    resolved: dict[str, str] = {}
    for var, filename in CONFIG_FILES.items():
        preset = os.environ.get(var)
        if preset:
            if not Path(preset).is_file():
                logging.warning("%s points at a missing file: %s", var, preset)
            resolved[var] = preset
            continue
        path = resolve_config_file(filename)
        if not path.is_file():
            logging.warning("Default config missing: %s", path)
        resolved[var] = str(path)
    return resolved


def compose_env() -> dict[str, str]:
    """Full environment for docker compose: current env plus mount paths."""
    env = os.environ.copy()
    env.update(config_file_env())
    env["SITES_DIR"] = str(SITES_DIR)
    env["NGINX_SITES_DIR"] = str(NGINX_SITES_DIR)
    env["NGINX_SSL_DIR"] = str(SSL_DIR)
    env["VENDOR_DIR"] = str(VENDOR_DIR)
    env.setdefault("COMPOSE_PROJECT_NAME", PROJECT_NAME)
    return env
