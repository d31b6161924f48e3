"""Provision or remove local WordPress sites.

Inputs: site name (a directory under SITES_DIR), optional domain and
upstream image proxy. Side effects: creates the site directory and nginx
server block, updates the hosts file, creates the database and installs
WordPress through WP-CLI, then reloads nginx. Removal undoes each step.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import sys
from pathlib import Path

from pilothouse import certs, hosts, mysql, nginx, wpcli
from pilothouse.compose import is_running, wait_for_mysql
from pilothouse.config import DEFAULT_TLD, PILOTHOUSE_HOME, SITES_DIR
from pilothouse.utils import RID_ENV, log, run_cmd, status_fail, status_pass

SITE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
MOD_HOSTS = "pilothouse.hosts"


def is_valid_site_name(site: str | None) -> bool:
    if not site or not SITE_NAME_RE.match(site):
        return False
    return ".." not in site


def site_dir(site: str) -> Path:
    return Path(SITES_DIR) / site


def default_domain(site: str) -> str:
    return f"{site}.{DEFAULT_TLD}"


def site_domain(site: str) -> str | None:
    return nginx.read_domain(site)


# ─── Privileged helper ──────────────────────────────────────────────────
def _sudo_env() -> list[str]:
    # sudo resets HOME; pin the paths so the helper logs into the same run.
    pairs = [
        f"PILOTHOUSE_HOME={PILOTHOUSE_HOME}",
        f"PILOTHOUSE_HOSTS_FILE={hosts.HOSTS_FILE}",
    ]
    rid = os.environ.get(RID_ENV)
    if rid:
        pairs.append(f"{RID_ENV}={rid}")
    return ["env"] + pairs


def run_script(module: str, args: list[str], sudo: bool = False) -> bool:
    cmd = [sys.executable, "-m", module] + args
    if sudo:
        cmd = ["sudo"] + _sudo_env() + cmd
    try:
        run_cmd(cmd)
        return True
    except subprocess.CalledProcessError as err:
        status_fail(f"{module} exit={err.returncode}; see log")
        return False


def step_hosts_add(domain: str) -> bool:
    if hosts.hosts_writable():
        return hosts.add_host(domain)
    return run_script(MOD_HOSTS, ["add", domain], sudo=True)


def step_hosts_remove(domain: str) -> bool:
    if hosts.hosts_writable():
        return hosts.remove_host(domain)
    return run_script(MOD_HOSTS, ["remove", domain], sudo=True)


def _is_safe_site_dir(path: Path, site: str) -> bool:
    resolved = path.resolve()
    root = Path(SITES_DIR).resolve()
    return resolved.parent == root and resolved.name == site


def remove_site_dir(site: str) -> bool:
    path = site_dir(site)
    if not path.exists():
        return True
    if not _is_safe_site_dir(path, site):
        status_fail(f"unsafe remove path {path}")
        return False
    try:
        shutil.rmtree(path)
    except PermissionError:
        # Files written from inside the php container can belong to another uid.
        log(f"INFO: retrying removal of {path} with sudo")
        try:
            run_cmd(["sudo", "rm", "-rf", str(path)])
        except subprocess.CalledProcessError:
            status_fail(f"could not remove site dir {path}")
            return False
    log(f"PASS: Removed site directory {path}")
    return True


# ─── Orchestration ──────────────────────────────────────────────────────
def _fail_partial(site: str, msg: str) -> None:
    status_fail(f"{msg}; run `pilothouse delete {site}` to clean up before retrying")


def create_site(
    site: str | None,
    domain: str | None = None,
    proxy_url: str | None = None,
    install_wp: bool = True,
) -> bool:
    if not site:
        status_fail("please specify a site name")
        return False
    if not is_valid_site_name(site):
        status_fail(f"invalid site name {site!r}")
        return False
    if nginx.conf_path(site).exists():
        status_fail(f"site {site} already exists ({nginx.conf_path(site)})")
        return False
    domain = domain or default_domain(site)
    if not hosts.is_valid_domain(domain):
        status_fail(f"invalid characters in domain {domain!r}")
        return False
    if proxy_url:
        try:
            proxy_url = nginx.normalize_proxy_url(proxy_url)
        except ValueError as err:
            status_fail(str(err))
            return False
    if install_wp and not is_running("mysql"):
        status_fail("containers are not running; run `pilothouse up` first")
        return False

    site_dir(site).mkdir(parents=True, exist_ok=True)
    status_pass(f"site dir {site_dir(site)}")
    nginx.write_site_config(site, domain, proxy_url)
    status_pass("nginx config")
    if not step_hosts_add(domain):
        _fail_partial(site, f"could not add {domain} to the hosts file")
        return False
    status_pass(f"hosts entry {domain}")

    if install_wp:
        if not wait_for_mysql():
            _fail_partial(site, "mysql did not become ready")
            return False
        if not mysql.create_database(site):
            _fail_partial(site, f"could not create database {mysql.database_name(site)}")
            return False
        status_pass(f"database {mysql.database_name(site)}")
        if not wpcli.install_wordpress(site, domain):
            _fail_partial(site, "WordPress install failed; see log")
            return False
        status_pass("wordpress install")

    if not nginx.apply_changes():
        _fail_partial(site, "nginx did not accept the new config")
        return False
    status_pass(f"site {site} created at http://{domain}/")
    return True


def delete_site(site: str | None) -> bool:
    if not site:
        status_fail("please specify a site name")
        return False
    if not is_valid_site_name(site):
        status_fail(f"invalid site name {site!r}")
        return False
    if not site_dir(site).is_dir() and not nginx.conf_path(site).exists():
        status_fail(f"{site_dir(site)} is not a valid site directory")
        return False

    domain = site_domain(site)
    if not domain:
        logging.warning("No server_name for %s; falling back to the directory name", site)
        domain = site

    nginx.remove_site_config(site)
    certs.remove_certificate(site)
    status_pass("nginx config remove")
    if hosts.is_valid_domain(domain):
        if not step_hosts_remove(domain):
            return False
        status_pass(f"hosts entry {domain} remove")
    dbname = mysql.database_name(site)
    if is_running("mysql"):
        if not mysql.database_exists(dbname):
            log(f"INFO: database {dbname} not found; nothing to drop")
        elif mysql.drop_database(site):
            status_pass(f"database {dbname} drop")
        else:
            logging.warning("Could not drop database for %s", site)
    else:
        log(f"INFO: mysql not running; database for {site} left in place")
    if not remove_site_dir(site):
        return False
    status_pass("site dir remove")
    nginx.apply_changes()
    status_pass(f"site {site} deleted")
    return True


def generate_ssl(site: str | None) -> bool:
    if not site:
        status_fail("please specify a site name")
        return False
    if not is_valid_site_name(site) or not nginx.conf_path(site).exists():
        status_fail(f"{site} is not a valid site")
        return False
    domain = site_domain(site)
    if not domain:
        status_fail(f"no domain found in {nginx.conf_path(site)}")
        return False
    if not certs.generate_certificate(site, domain):
        return False
    status_pass(f"certificate for {domain}")
    if not nginx.enable_ssl(site):
        return False
    status_pass("nginx ssl config")
    if not nginx.apply_changes():
        return False
    status_pass(f"https://{domain}/ ready")
    return True


def list_sites() -> list[tuple[str, str, str, bool]]:
    """(site, domain, proxy, ssl) for every site directory or server block."""
    names = set(nginx.list_site_configs())
    root = Path(SITES_DIR)
    if root.is_dir():
        names.update(p.name for p in root.iterdir() if p.is_dir() and is_valid_site_name(p.name))
    rows = []
    for name in sorted(names):
        rows.append(
            (
                name,
                site_domain(name) or "-",
                nginx.read_proxy_url(name) or "-",
                nginx.has_ssl(name),
            )
        )
    return rows
