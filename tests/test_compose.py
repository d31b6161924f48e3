from pilothouse import compose
from pilothouse.config import COMPOSE_FILE


def test_compose_argv_pins_file_and_project(env):
    argv = compose.compose_argv(["ps"])
    assert argv[-1] == "ps"
    assert argv[argv.index("-f") + 1] == str(COMPOSE_FILE)
    assert argv[argv.index("--project-directory") + 1] == str(env.home)
    assert "-p" in argv


def test_exec_args():
    assert compose.exec_args("php", ["wp", "cli", "info"], user="www-data", workdir="/var/www/html/a", tty=False) == [
        "exec", "-T", "--user", "www-data", "--workdir", "/var/www/html/a", "php", "wp", "cli", "info",
    ]
    assert compose.exec_args("mysql", ["mysql"]) == ["exec", "mysql", "mysql"]


def test_up_creates_dirs_and_waits_for_mysql(env, proc):
    assert compose.up()
    assert env.sites_dir.is_dir()
    assert env.conf_dir.is_dir()
    assert env.ssl_dir.is_dir()
    up = proc.matching("up")[0]
    assert up[-3:] == ["up", "-d", "--remove-orphans"]
    assert proc.matching("mysqladmin", "ping")


def test_up_passes_config_env(env, proc, monkeypatch):
    seen = {}
    real = proc.__call__

    def spy(args, **kwargs):
        if "up" in args:
            seen.update(kwargs.get("env") or {})
        return real(args, **kwargs)

    monkeypatch.setattr(compose.subprocess, "run", spy)
    assert compose.up()
    assert seen["SITES_DIR"] == str(env.sites_dir)
    assert seen["NGINX_CONFIG_FILE"].endswith("nginx.conf")


def test_up_fails_when_compose_fails(env, proc):
    proc.respond(lambda argv: (1, "") if "up" in argv else None)
    assert not compose.up()
    assert not proc.matching("mysqladmin")


def test_wait_for_mysql_retries_until_ready(env, proc):
    attempts = []

    def ping(argv):
        if "mysqladmin" in argv:
            attempts.append(1)
            return (1, "") if len(attempts) < 3 else (0, "")
        return None

    proc.respond(ping)
    assert compose.wait_for_mysql(attempts=5, interval=0)
    assert len(attempts) == 3


def test_wait_for_mysql_is_bounded(env, proc):
    proc.respond(lambda argv: (1, "") if "mysqladmin" in argv else None)
    assert not compose.wait_for_mysql(attempts=4, interval=0)
    assert len(proc.matching("mysqladmin")) == 4


def test_down_and_restart(env, proc):
    assert compose.down()
    assert compose.restart()
    assert compose.restart("nginx")
    assert proc.calls[0][-1] == "down"
    assert proc.calls[1][-1] == "restart"
    assert proc.calls[2][-2:] == ["restart", "nginx"]


def test_logs_returns_exit_code(env, proc):
    proc.respond(lambda argv: (3, "") if "logs" in argv else None)
    assert compose.logs("php") == 3
    assert proc.calls[-1][-3:] == ["logs", "-f", "php"]


def test_running_services(env, proc):
    proc.running = {"nginx"}
    assert compose.is_running("nginx")
    assert not compose.is_running("mysql")
