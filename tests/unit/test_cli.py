from __future__ import annotations

from pathlib import Path

import pytest

from wedding_budget.cli.main import main


@pytest.fixture(autouse=True)
def _isolate_cli(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    # ``--config`` is forwarded through the environment; restore it afterwards.
    monkeypatch.setenv("WEDDING_BUDGET_CONFIG", "")


def test_cli_init_db(capsys: pytest.CaptureFixture[str]) -> None:
    main(["init-db"])
    captured = capsys.readouterr()
    assert "[wedding-budget] init-db url=sqlite://" in captured.out


def test_cli_total_on_empty_database(capsys: pytest.CaptureFixture[str]) -> None:
    main(["total"])
    captured = capsys.readouterr()
    assert "[wedding-budget] total=0.00" in captured.out


def test_cli_summary_lists_every_status(capsys: pytest.CaptureFixture[str]) -> None:
    main(["summary"])
    out = capsys.readouterr().out
    for status in ("'Paid'", "'Pending'", "'Partially Paid'"):
        assert f"status={status}" in out


def test_cli_serve_uses_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls: list[dict[str, object]] = []

    def fake_run(app: str, **kwargs: object) -> None:
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr("uvicorn.run", fake_run)
    config = tmp_path / "settings.yml"
    config.write_text("host: 0.0.0.0\nport: 8123\n", encoding="utf-8")

    main(["--config", str(config), "serve"])
    main(["--config", str(config), "serve", "--port", "9001", "--reload"])

    assert calls[0] == {"app": "wedding_budget.server:app", "host": "0.0.0.0", "port": 8123, "reload": False}
    assert calls[1]["port"] == 9001
    assert calls[1]["reload"] is True


def test_cli_rejects_invalid_config(tmp_path: Path) -> None:
    config = tmp_path / "settings.yml"
    config.write_text("colour: blue\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="invalid configuration"):
        main(["--config", str(config), "total"])


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit):
        main([])
