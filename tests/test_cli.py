import json
import pytest

typer = pytest.importorskip("typer")
from typer.testing import CliRunner
from eventindex import cli
from eventindex import config
from eventindex.opensearch.client import ProvisioningFailure

from conftest import FakeOpenSearch


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(config, "_dotenv_loaded", True)


def _use_client(monkeypatch, client):
    monkeypatch.setattr(cli, "get_opensearch_client", lambda: client)


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output or "usage" in result.output
    assert "--env" in result.output


def test_cli_fields_lists_aliases():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["fields"])
    assert result.exit_code == 0
    assert "useragent" in result.output
    assert "data.@request.user_agent" in result.output
    assert "error.type" in result.output


def test_cli_resolve():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["resolve", "os.version"])
    assert result.exit_code == 0
    assert result.output.strip() == "data.@request.data.@os_version"


def test_cli_resolve_unknown_field():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["resolve", "nope"])
    assert result.exit_code == 1
    assert "Unknown field 'nope'" in result.output


def test_cli_mapping_prints_template():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["mapping"])
    assert result.exit_code == 0
    template = json.loads(result.output)
    assert template["template"]["mappings"]["dynamic"] is False
    assert "analysis" in template["template"]["settings"]


def test_cli_flatten_from_file(tmp_path):
    event = {"data": {"@error": {"type": "A", "message": "m1", "inner": {"type": "B", "code": "c2"}}}}
    path = tmp_path / "event.json"
    path.write_text(json.dumps(event))
    runner = CliRunner()
    result = runner.invoke(cli.app, ["flatten", str(path)])
    assert result.exit_code == 0
    assert json.loads(result.output)["error"] == {"type": "A B", "message": "m1", "code": "c2"}


def test_cli_flatten_from_stdin():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["flatten"], input='{"data": {"@simple_error": {"type": "E"}}}')
    assert result.exit_code == 0
    assert json.loads(result.output)["error"]["type"] == "E"


def test_cli_flatten_rejects_non_object():
    runner = CliRunner()
    result = runner.invoke(cli.app, ["flatten"], input="[1, 2]")
    assert result.exit_code == 1


def test_cli_init_provisions(monkeypatch):
    client = FakeOpenSearch()
    _use_client(monkeypatch, client)
    runner = CliRunner()
    result = runner.invoke(cli.app, ["init"])
    assert result.exit_code == 0
    assert "initialized" in result.output
    assert client.called("put_pipeline")
    assert client.called("put_index_template")


def test_cli_init_failure_is_fatal(monkeypatch):
    _use_client(monkeypatch, FakeOpenSearch())

    def _reject(*args, **kwargs):
        raise ProvisioningFailure("Error creating the pipeline events-pipeline: HTTP 400", {"error": "bad script"})

    monkeypatch.setattr(cli, "provision", _reject)
    runner = CliRunner()
    result = runner.invoke(cli.app, ["init"])
    assert result.exit_code == 1
    assert "bad script" in result.output


def test_cli_search_unknown_field(monkeypatch):
    client = FakeOpenSearch()
    _use_client(monkeypatch, client)
    runner = CliRunner()
    result = runner.invoke(cli.app, ["search", "--filter", "operating_system=Linux"])
    assert result.exit_code == 1
    assert "Unknown field 'operating_system'" in result.output
    assert client.calls == []


def test_cli_search_prints_events(monkeypatch):
    client = FakeOpenSearch(search_response={
        "hits": {"hits": [
            {"_id": "e1", "_source": {"date": "2024-02-01T10:00:00Z", "message": "boom", "error": {"type": "A B"}}},
        ]}
    })
    _use_client(monkeypatch, client)
    runner = CliRunner()
    result = runner.invoke(cli.app, ["search", "--q", "boom", "--filter", "os=Linux"])
    assert result.exit_code == 0
    assert "e1 A B boom" in result.output
    body = client.called("search")[0]["body"]
    assert body["query"]["bool"]["filter"] == [{"term": {"os.keyword": "Linux"}}]
