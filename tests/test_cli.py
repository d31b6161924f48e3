from pilothouse.__main__ import _flag_value, _positional, main


def test_help(env, capsys):
    assert main(["help"]) == 0
    assert "generate-ssl" in capsys.readouterr().out


def test_no_arguments_is_usage_error(env):
    assert main([]) == 2


def test_unknown_command(env, capsys):
    assert main(["frobnicate"]) == 2
    assert "unknown command" in capsys.readouterr().out


def test_create_without_site_name(env, proc, capsys):
    assert main(["create"]) == 1
    assert "please specify a site name" in capsys.readouterr().out


def test_create_and_delete_roundtrip(env, proc):
    assert main(["create", "blog", "--empty", "--domain", "blog.local"]) == 0
    assert "127.0.0.1 blog.local #pilothouse" in env.hosts_file.read_text()
    assert main(["list"]) == 0
    assert main(["delete", "blog"]) == 0
    assert "blog.local" not in env.hosts_file.read_text()


def test_flag_parsing():
    args = ["site", "--domain=a.test", "--proxy", "https://x.example", "--empty"]
    assert _positional(args) == ["site"]
    assert _flag_value(args, "--domain") == "a.test"
    assert _flag_value(args, "--proxy") == "https://x.example"
    assert _flag_value(args, "--missing") is None


def test_passthrough_verbs_return_child_exit_code(env, proc):
    proc.respond(lambda argv: (5, "") if "config" in argv else None)
    assert main(["compose", "config"]) == 5
    assert main(["logs", "nginx"]) == 0
    assert proc.calls[-1][-3:] == ["logs", "-f", "nginx"]
    assert main(["mysql"]) == 0
    assert proc.calls[-1][-3:] == ["mysql", "-uroot", "-proot"]


def test_up_down_restart(env, proc):
    assert main(["up"]) == 0
    assert main(["restart", "php"]) == 0
    assert main(["down"]) == 0
    assert proc.calls[-1][-1] == "down"
    proc.respond(lambda argv: (1, "") if "down" in argv else None)
    assert main(["down"]) == 1
