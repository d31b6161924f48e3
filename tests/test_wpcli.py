from pilothouse import wpcli


def test_sanitize_parts_drops_binary_and_path():
    parts = wpcli._sanitize_parts(["wp", "--path=/x", "plugin", "--path", "/y", "list"])
    assert parts == ["plugin", "list"]


def test_normalize_parts_from_string():
    assert wpcli._normalize_wp_parts("option update blogname 'My Site'") == [
        "option", "update", "blogname", "My Site",
    ]
    assert wpcli._normalize_wp_parts("  ") == []
    assert wpcli._normalize_wp_parts("unterminated 'quote") == []


def test_container_path_for(env, tmp_path):
    site = env.sites_dir / "blog" / "wp-content"
    site.mkdir(parents=True)
    assert wpcli.container_path_for(site) == "/var/www/html/blog/wp-content"
    assert wpcli.container_path_for(env.sites_dir) == "/var/www/html"
    assert wpcli.container_path_for(tmp_path) == "/var/www/html"


def test_wp_run_execs_in_php_container(env, proc):
    assert wpcli.wp_cmd("blog", "wp plugin list")
    argv = proc.calls[-1]
    tail = argv[argv.index("exec"):]
    assert tail == [
        "exec", "-T", "--user", "www-data", "--workdir", "/var/www/html/blog",
        "php", "wp", "plugin", "list",
    ]


def test_wp_cmd_failure(env, proc):
    proc.respond(lambda argv: (1, "") if "wp" in argv else None)
    assert not wpcli.wp_cmd("blog", ["core", "version"])


def test_install_wordpress_sequence(env, proc):
    assert wpcli.install_wordpress("my-blog", "my-blog.test")
    wp_calls = [c[c.index("wp") + 1:] for c in proc.matching("wp")]
    assert wp_calls[0][:2] == ["core", "download"]
    assert wp_calls[1][:2] == ["config", "create"]
    assert "--dbname=my_blog" in wp_calls[1]
    assert "--dbhost=mysql" in wp_calls[1]
    assert wp_calls[2][:2] == ["core", "install"]
    assert "--url=http://my-blog.test" in wp_calls[2]


def test_install_wordpress_stops_on_failure(env, proc):
    proc.respond(lambda argv: (1, "") if "download" in argv else None)
    assert not wpcli.install_wordpress("blog", "blog.test")
    assert len(proc.matching("wp")) == 1


def test_wp_passthrough_maps_cwd(env, proc):
    site = env.sites_dir / "blog"
    site.mkdir()
    assert wpcli.wp_passthrough(["wp", "user", "list"], cwd=site) == 0
    argv = proc.calls[-1]
    assert argv[argv.index("--workdir") + 1] == "/var/www/html/blog"
    assert argv[-3:] == ["wp", "user", "list"]
