"""
命令行工具测试
"""
import pytest

from sqlreports import cli
from sqlreports.services.report_service import set_report_service


def test_parse_macros():
    assert cli.parse_macros(["a=1", "b=x=y", "c="]) == {"a": "1", "b": "x=y", "c": ""}
    assert cli.parse_macros(None) == {}
    with pytest.raises(ValueError):
        cli.parse_macros(["novalue"])


def test_render_to_file(report_service, make_report, tmp_path):
    make_report("orders.sql", (
        "-- Region Orders\n"
        "-- Variables: region\n\n"
        "SELECT region, orders FROM sales WHERE region = '{region}'"
    ))
    output = tmp_path / "out.html"

    set_report_service(report_service)
    try:
        code = cli.main(["render", "orders.sql", "-m", "region=south", "-o", str(output)])
    finally:
        set_report_service(None)

    assert code == 0
    html = output.read_text(encoding="utf-8")
    assert "Region Orders" in html
    assert "300" in html


def test_render_error(report_service, capsys):
    set_report_service(report_service)
    try:
        code = cli.main(["render", "missing.sql"])
    finally:
        set_report_service(None)

    assert code == 1
    assert "missing.sql" in capsys.readouterr().err


def test_add_and_list_connections(config_database, encryption_service, capsys, monkeypatch):
    monkeypatch.setattr(cli, "init_database", lambda: config_database)
    monkeypatch.setattr(cli, "get_encryption_service", lambda: encryption_service)

    assert cli.main(["add-connection", "main", "sqlite", "./data/main.db"]) == 0
    assert cli.main(["add-connection", "main", "sqlite", "./data/other.db"]) == 1
    assert cli.main(["list-connections"]) == 0

    out = capsys.readouterr().out
    assert "main\tsqlite\t./data/main.db" in out
