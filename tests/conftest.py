import subprocess
from pathlib import Path

import pytest

from pilothouse import certs, compose, config_files, hosts, nginx, sites, utils, wpcli


class Recorder:
    """Stands in for subprocess.run and remembers every argv."""

    def __init__(self):
        self.calls: list[list[str]] = []
        self.running = {"mysql", "nginx", "php"}
        self.responders = []

    def respond(self, func):
        # func(argv) -> None | (rc, stdout)
        self.responders.append(func)

    def __call__(self, args, check=False, capture_output=False, **kwargs):
        argv = [str(a) for a in args]
        self.calls.append(argv)
        rc, out = 0, ""
        if "ps" in argv and "--services" in argv:
            out = "\n".join(sorted(self.running)) + "\n"
        for func in self.responders:
            result = func(argv)
            if result is not None:
                rc, out = result
                break
        if check and rc != 0:
            raise subprocess.CalledProcessError(rc, argv, output=out, stderr="boom")
        return subprocess.CompletedProcess(argv, rc, stdout=out, stderr="")

    def matching(self, *needles):
        return [c for c in self.calls if all(n in c for n in needles)]


@pytest.fixture
def env(tmp_path, monkeypatch):
    home = tmp_path / "home"
    sites_dir = tmp_path / "sites"
    conf_dir = home / "nginx" / "sites"
    ssl_dir = home / "nginx" / "ssl"
    custom_dir = home / "config"
    vendor_dir = home / "vendor"
    hosts_file = tmp_path / "etc" / "hosts"
    hosts_file.parent.mkdir()
    hosts_file.write_text("127.0.0.1 localhost\n::1 localhost\n")
    sites_dir.mkdir()

    monkeypatch.setattr(utils, "_RUN_ID", "testrid")
    monkeypatch.setattr(nginx, "CONF_DIR", conf_dir)
    monkeypatch.setattr(certs, "CERT_DIR", ssl_dir)
    monkeypatch.setattr(hosts, "HOSTS_FILE", str(hosts_file))
    monkeypatch.setattr(sites, "SITES_DIR", sites_dir)
    monkeypatch.setattr(sites, "PILOTHOUSE_HOME", home)
    monkeypatch.setattr(wpcli, "SITES_DIR", sites_dir)
    for name, value in (
        ("PILOTHOUSE_HOME", home),
        ("SITES_DIR", sites_dir),
        ("NGINX_SITES_DIR", conf_dir),
        ("SSL_DIR", ssl_dir),
        ("CUSTOM_CONFIG_DIR", custom_dir),
        ("VENDOR_DIR", vendor_dir),
    ):
        monkeypatch.setattr(compose, name, value)
        if hasattr(config_files, name):
            monkeypatch.setattr(config_files, name, value)
    for var in config_files.CONFIG_FILES:
        monkeypatch.delenv(var, raising=False)

    class Env:
        pass

    e = Env()
    e.home = home
    e.sites_dir = sites_dir
    e.conf_dir = conf_dir
    e.ssl_dir = ssl_dir
    e.custom_dir = custom_dir
    e.hosts_file = hosts_file
    return e


@pytest.fixture
def proc(monkeypatch):
    recorder = Recorder()
    monkeypatch.setattr(subprocess, "run", recorder)
    monkeypatch.setattr(compose.time, "sleep", lambda _: None)
    return recorder

