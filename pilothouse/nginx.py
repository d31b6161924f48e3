#!/usr/bin/env python3
"""Create/remove per-site nginx server blocks.

SRP: This module only manages nginx config files and nginx service ops.
Host file management lives in pilothouse.hosts.

The generated file is the source of truth for a site's domain, proxy URL
and SSL state; readers below pattern-match it back out.
"""
import re
import subprocess
import sys
from pathlib import Path
from urllib.parse import urlsplit

from pilothouse.compose import exec_argv, is_running
from pilothouse.config import (
    CONTAINER_SSL_DIR,
    NGINX_SITES_DIR,
    PROXY_TEMPLATE_FILE,
    SITE_TEMPLATE_FILE,
)
from pilothouse.config_files import compose_env
from pilothouse.utils import apply_placeholders, log, run_cmd, status_fail

CONF_DIR = Path(NGINX_SITES_DIR)

SERVER_NAME_RE = re.compile(r"^\s*server_name\s+([^\s;]+)", re.MULTILINE)
PROXY_PASS_RE = re.compile(r"^\s*proxy_pass\s+([^\s;]+)\s*;", re.MULTILINE)
LISTEN_HTTP_RE = re.compile(r"^([ \t]*)listen\s+80\s*;[^\n]*\n", re.MULTILINE)
LISTEN_SSL_RE = re.compile(r"^\s*listen\s+443\s+ssl\b", re.MULTILINE)


def conf_path(site: str) -> Path:
    return CONF_DIR / f"{site}.conf"


def normalize_proxy_url(url: str) -> str:
    """Reduce a proxy URL to scheme://host[:port].

    nginx refuses a URI part on proxy_pass inside a named location.
    """
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"proxy URL must be http(s)://host, got {url!r}")
    return f"{parts.scheme}://{parts.netloc}"


def render_config(site: str, domain: str, proxy_url: str | None = None) -> str:
    proxy_block = ""
    if proxy_url:
        proxy_block = apply_placeholders(
            PROXY_TEMPLATE_FILE.read_text(),
            {"proxy_url": normalize_proxy_url(proxy_url)},
        )
    template = SITE_TEMPLATE_FILE.read_text()
    return apply_placeholders(
        template, {"domain": domain, "site": site, "proxy": proxy_block.rstrip("\n")}
    )


def write_site_config(site: str, domain: str, proxy_url: str | None = None) -> Path:
    CONF_DIR.mkdir(parents=True, exist_ok=True)
    path = conf_path(site)
    path.write_text(render_config(site, domain, proxy_url))
    log(f"PASS: Created nginx config for {site} ({domain})")
    return path


def remove_site_config(site: str) -> bool:
    path = conf_path(site)
    if not path.exists():
        log(f"INFO: conf not found (skip): {path}")
        return False
    path.unlink()
    log(f"PASS: Removed nginx config for {site}")
    return True


def read_config(site: str) -> str | None:
    path = conf_path(site)
    if not path.is_file():
        return None
    return path.read_text()


def read_domain(site: str) -> str | None:
    text = read_config(site)
    if text is None:
        return None
    match = SERVER_NAME_RE.search(text)
    return match.group(1) if match else None


def read_proxy_url(site: str) -> str | None:
    text = read_config(site)
    if text is None:
        return None
    match = PROXY_PASS_RE.search(text)
    return match.group(1) if match else None


def has_ssl(site: str) -> bool:
    text = read_config(site)
    return bool(text and LISTEN_SSL_RE.search(text))


def list_site_configs() -> list[str]:
    if not CONF_DIR.is_dir():
        return []
    return sorted(p.stem for p in CONF_DIR.glob("*.conf"))


def enable_ssl(site: str) -> bool:
    """Add the 443 listener and certificate paths to a site's server block."""
    text = read_config(site)
    if text is None:
        status_fail(f"no nginx config for {site}")
        return False
    if LISTEN_SSL_RE.search(text):
        log(f"INFO: SSL already enabled for {site}")
        return True
    match = LISTEN_HTTP_RE.search(text)
    if not match:
        status_fail(f"no 'listen 80;' line in {conf_path(site)}")
        return False
    indent = match.group(1)
    ssl_lines = (
        f"{indent}listen 443 ssl;\n"
        f"{indent}ssl_certificate {CONTAINER_SSL_DIR}/{site}.crt;\n"
        f"{indent}ssl_certificate_key {CONTAINER_SSL_DIR}/{site}.key;\n"
    )
    updated = text[: match.end()] + ssl_lines + text[match.end():]
    conf_path(site).write_text(updated)
    log(f"PASS: Enabled SSL in nginx config for {site}")
    return True


def test_config() -> None:
    run_cmd(exec_argv("nginx", ["nginx", "-t"], tty=False), env=compose_env())


def reload_nginx() -> None:
    run_cmd(exec_argv("nginx", ["nginx", "-s", "reload"], tty=False), env=compose_env())


def apply_changes() -> bool:
    """Test and reload nginx when its container is up; otherwise defer to `up`."""
    if not is_running("nginx"):
        log("INFO: nginx container not running; config applies on next up")
        return True
    try:
        test_config()
    except subprocess.CalledProcessError as err:
        status_fail(f"nginx config test exit={err.returncode}; see log")
        return False
    try:
        reload_nginx()
    except subprocess.CalledProcessError as err:
        status_fail(f"nginx reload exit={err.returncode}; see log")
        return False
    return True


USAGE = "usage: nginx.py write <site> <domain> [--proxy URL] | remove <site> | domain <site> | test | reload"


def main(argv: list[str]) -> int:
    if not argv:
        print(USAGE, file=sys.stderr)
        return 2
    cmd = argv[0]
    if cmd == "write":
        if len(argv) < 3:
            print("FAIL: Missing site or domain", file=sys.stderr)
            return 2
        proxy = None
        if len(argv) >= 5 and argv[3] == "--proxy":
            proxy = argv[4]
        write_site_config(argv[1], argv[2], proxy)
        return 0
    if cmd == "remove":
        if len(argv) < 2:
            print("FAIL: Missing site name", file=sys.stderr)
            return 2
        remove_site_config(argv[1])
        return 0
    if cmd == "domain":
        if len(argv) < 2:
            print("FAIL: Missing site name", file=sys.stderr)
            return 2
        domain = read_domain(argv[1])
        if not domain:
            return 1
        print(domain)
        return 0
    if cmd in ("test", "reload"):
        try:
            if cmd == "test":
                test_config()
            else:
                reload_nginx()
        except subprocess.CalledProcessError as err:
            status_fail(f"nginx {cmd} exit={err.returncode}; see log")
            return 1
        return 0
    print(USAGE, file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
