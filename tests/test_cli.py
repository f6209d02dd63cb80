# File: tests/test_cli.py
"""Тесты для CLI (`resource_scout/cli.py`) с использованием click.testing.CliRunner.
Проверяют команды `analyze`, `config`, `profiles`, `--version`, а также обработку ошибок.
"""
import asyncio
import json

import pytest
from click.testing import CliRunner

import resource_scout.cli as cli_module
from resource_scout import __version__
from resource_scout.cli import cli
from resource_scout.crawler.models import AnalysisResult, ResourceRecord
from resource_scout.exceptions import FetchFailed, InvalidURL


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Без configs/default.yaml в рабочем каталоге CLI берёт значения по умолчанию."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def fake_analysis(monkeypatch):
    """Патчим start_analysis: возвращаем фиктивный результат без сети и запоминаем аргументы."""
    calls = []
    resources = [
        ResourceRecord("https://example.com", "example.com.html", "html", 2048),
        ResourceRecord("https://example.com/app.js", "app.js", "js", 4096),
    ]

    async def fake(url, cfg=None, progress=None):
        calls.append((url, cfg))
        if progress is not None:
            progress("Fetching main HTML page...", 0, 1)
        return AnalysisResult(resources=list(resources), main_html_size=2048)

    monkeypatch.setattr(cli_module, "start_analysis", fake)
    return calls


def _raising(exc):
    async def fake(url, cfg=None, progress=None):
        raise exc

    return fake


def test_version_option():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert f"ResourceScout, version {__version__}" in result.output


def test_show_config_defaults():
    result = CliRunner().invoke(cli, ["config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["concurrency"] == 3
    assert data["relays"] is None


def test_show_config_from_file(isolated_cwd):
    cfg_file = isolated_cwd / "custom.yaml"
    cfg_file.write_text("concurrency: 7\nrelays: [codetabs]\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["concurrency"] == 7
    assert data["relays"] == ["codetabs"]


def test_invalid_config_file(isolated_cwd):
    cfg_file = isolated_cwd / "bad.yaml"
    cfg_file.write_text("concurrency: -1\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_profiles():
    result = CliRunner().invoke(cli, ["profiles"])
    assert result.exit_code == 0
    lines = result.output.strip().splitlines()
    assert len(lines) == 5
    assert lines[0].startswith("3G")
    assert "4G/LTE" in result.output
    assert "Cable/Fiber" in result.output


def test_analyze_prints_json_to_stdout(fake_analysis):
    result = CliRunner().invoke(cli, ["analyze", "example.com", "--quiet"])
    assert result.exit_code == 0, result.output

    data = json.loads(result.output)
    assert data["url"] == "https://example.com"
    assert data["totalFiles"] == 2
    assert data["totalSize"] == 6144
    assert data["mainHtmlSize"] == 2048
    assert 0 <= data["performance"]["totalScore"] <= 100
    assert set(data["loadTimes"]) == {"3G", "4G", "5G", "WiFi", "Cable"}
    assert data["duplicates"]["hasDuplicates"] is False
    assert fake_analysis[0][0] == "example.com"


def test_analyze_reports_progress_and_score(fake_analysis):
    result = CliRunner().invoke(cli, ["analyze", "example.com"])
    assert result.exit_code == 0
    assert "[0/1] Fetching main HTML page..." in result.output
    assert "Score: 94/100, 2 files, 6 KB" in result.output


def test_analyze_concurrency_override(fake_analysis):
    result = CliRunner().invoke(cli, ["analyze", "example.com", "-q", "--concurrency", "9"])
    assert result.exit_code == 0
    _, cfg = fake_analysis[0]
    assert cfg.concurrency == 9


def test_analyze_rejects_zero_concurrency(fake_analysis):
    result = CliRunner().invoke(cli, ["analyze", "example.com", "--concurrency", "0"])
    assert result.exit_code == 2
    assert fake_analysis == []


def test_analyze_json_file(fake_analysis, isolated_cwd):
    out = isolated_cwd / "reports" / "out.json"
    result = CliRunner().invoke(cli, ["analyze", "example.com", "-q", "--json", str(out)])
    assert result.exit_code == 0
    assert "JSON report:" in result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["resources"][1]["name"] == "app.js"
    assert data["suggestionSummary"]["totalSuggestions"] == len(data["suggestions"])


def test_analyze_timeout(monkeypatch):
    async def slow(url, cfg=None, progress=None):
        await asyncio.sleep(2)

    monkeypatch.setattr(cli_module, "start_analysis", slow)
    result = CliRunner().invoke(cli, ["analyze", "example.com", "--scan-timeout", "0.1"])
    assert result.exit_code == 1
    assert "не завершён" in result.output


@pytest.mark.parametrize(
    "exc,text",
    [
        (InvalidURL("exa mple.com"), "Некорректный URL"),
        (FetchFailed("https://example.com", ["allorigins: HTTP 500"]), "Не удалось загрузить страницу"),
    ],
)
def test_analyze_errors(monkeypatch, exc, text):
    monkeypatch.setattr(cli_module, "start_analysis", _raising(exc))
    result = CliRunner().invoke(cli, ["analyze", "example.com"])
    assert result.exit_code == 1
    assert text in result.output


@pytest.mark.parametrize("flags,indented", [([], False), (["--pretty"], True)])
def test_analyze_json_file_respects_pretty(fake_analysis, isolated_cwd, flags, indented):
    out = isolated_cwd / "out.json"
    result = CliRunner().invoke(cli, ["analyze", "example.com", "-q", "--json", str(out), *flags])
    assert result.exit_code == 0
    text = out.read_text(encoding="utf-8")
    assert ('\n  "resources"' in text) is indented
    assert json.loads(text)["totalFiles"] == 2
