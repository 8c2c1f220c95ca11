import os
import socket

import pytest

from hotserve import cli
from hotserve.cli import bind_socket, main, resolve_root
from hotserve.errors import PortInUseError, ServePathError
from hotserve.state import PORT_KEY, ROOT_KEY


@pytest.fixture
def busy_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(1)
    yield sock.getsockname()[1]
    sock.close()


def test_directory_is_served_as_is(site):
    assert resolve_root(str(site)) == os.path.realpath(site)


def test_file_target_serves_its_directory(site):
    assert resolve_root(str(site / "index.html")) == os.path.realpath(site)


def test_missing_path_raises(tmp_path):
    with pytest.raises(ServePathError):
        resolve_root(str(tmp_path / "missing"))


def test_bind_reports_port_in_use(busy_port):
    with pytest.raises(PortInUseError) as excinfo:
        bind_socket("127.0.0.1", busy_port)
    assert excinfo.value.port == busy_port


def test_main_missing_path_exits_nonzero(tmp_path, capsys):
    assert main([str(tmp_path / "missing")]) == 1
    err = capsys.readouterr().err
    assert "does not exist" in err
    assert "usage:" in err


def test_main_port_in_use_exits_nonzero(site, busy_port, capsys, monkeypatch):
    monkeypatch.setattr(cli.web, "run_app", pytest.fail)

    assert main([str(site), "--port", str(busy_port)]) == 1
    err = capsys.readouterr().err
    assert "already in use" in err
    assert "usage:" in err


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0
    assert "usage:" in capsys.readouterr().out


def test_main_injects_the_port_it_listens_on(site, monkeypatch):
    started = {}

    def fake_run_app(app, sock, **kwargs):
        started["app"] = app
        started["port"] = sock.getsockname()[1]
        sock.close()

    monkeypatch.setattr(cli.web, "run_app", fake_run_app)

    assert main([str(site / "index.html"), "--port", "0", "--no-watch"]) == 0
    app = started["app"]
    assert app[PORT_KEY] == started["port"] != 0
    assert app[ROOT_KEY] == os.path.realpath(site)


def test_default_port_is_fixed():
    args = cli.build_parser().parse_args([])
    assert args.port == cli.DEFAULT_PORT == 8000
    assert args.path == "."
