import pytest
import typer
from typer.testing import CliRunner
from unittest.mock import MagicMock

from sbclient.core.client import StoryblokClient
from sbclient.domain.errors import TransportError
from sbclient.main import app, parse_param_options

# Fixtures defined in tests/conftest.py:
# runner: CliRunner
# fake_transport: FakeTransport class
# ok_response: TransportResponse builder


@pytest.fixture
def mock_console_display(mocker) -> MagicMock:
    """Patches ConsoleDisplay in main; returns the instance the commands use."""
    display_class = mocker.patch("sbclient.main.ConsoleDisplay")
    return display_class.return_value


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    """Keeps CLI runs from attaching handlers to the root logger."""
    return mocker.patch("sbclient.main.setup_logging")


@pytest.fixture
def wire_transport(mocker, memory_store, cache_versions):
    """Makes the CLI build its client over the given transport."""
    built = []

    def _wire(transport):
        def _build(config):
            client = StoryblokClient(config, transport=transport, memory_store=memory_store, cache_versions=cache_versions)
            built.append(client)
            return client
        mocker.patch("sbclient.main.StoryblokClient", side_effect=_build)
        return built
    return _wire


def test_story_command_prints_json(runner: CliRunner, fake_transport, ok_response, wire_transport, mock_console_display):
    transport = fake_transport([ok_response({"story": {"name": "Home"}})])
    wire_transport(transport)

    result = runner.invoke(app, ["--access-token", "cli-token", "story", "home", "--version", "draft"])

    assert result.exit_code == 0, result.output
    assert transport.calls[0]["path"] == "/cdn/stories/home"
    assert transport.calls[0]["params"]["token"] == "cli-token"
    assert transport.calls[0]["params"]["version"] == "draft"
    mock_console_display.display_json.assert_called_once_with({"story": {"name": "Home"}})
    assert transport.closed


def test_stories_command_passes_params_and_relations(runner, fake_transport, ok_response, wire_transport, mock_console_display):
    transport = fake_transport([ok_response({"stories": [], "rels": []})])
    wire_transport(transport)

    result = runner.invoke(app, [
        "-t", "cli-token",
        "stories",
        "-P", "starts_with=blog/",
        "-P", "excluding_fields=body",
        "-P", "excluding_fields=seo",
        "-r", "post.author",
    ])

    assert result.exit_code == 0, result.output
    params = transport.calls[0]["params"]
    assert params["starts_with"] == "blog/"
    assert params["excluding_fields"] == ["body", "seo"]
    assert params["resolve_relations"] == "post.author"
    assert params["version"] == "published"


def test_token_is_read_from_environment(runner, fake_transport, ok_response, wire_transport, mock_console_display, monkeypatch):
    monkeypatch.setenv("STORYBLOK_ACCESS_TOKEN", "env-token")
    transport = fake_transport([ok_response({"links": {}})])
    wire_transport(transport)

    result = runner.invoke(app, ["get", "cdn/links"])

    assert result.exit_code == 0, result.output
    assert transport.calls[0]["params"]["token"] == "env-token"


def test_get_all_command_collects_every_page(runner, fake_transport, ok_response, wire_transport, mock_console_display):
    def respond(method, path, params):
        page = params["page"]
        return ok_response({"stories": [{"id": page}]}, headers={"per-page": "1", "total": "3"})

    transport = fake_transport(default=respond)
    wire_transport(transport)

    result = runner.invoke(app, ["-t", "tok", "get-all", "cdn/stories", "--per-page", "1"])

    assert result.exit_code == 0, result.output
    assert len(transport.calls) == 3
    mock_console_display.display_json.assert_called_once_with([{"id": 1}, {"id": 2}, {"id": 3}])


def test_cache_version_command_shows_space_version(runner, fake_transport, ok_response, wire_transport, mock_console_display):
    transport = fake_transport([ok_response({"space": {"id": 1, "version": 1700000000}})])
    wire_transport(transport)

    result = runner.invoke(app, ["-t", "tok", "cache-version"])

    assert result.exit_code == 0, result.output
    assert transport.calls[0]["path"] == "/cdn/spaces/me"
    mock_console_display.display_mapping.assert_called_once_with({"cache_version": 1700000000}, title="Space")


def test_cache_is_not_a_cli_concern(runner, fake_transport, wire_transport, mock_console_display):
    transport = fake_transport()
    wire_transport(transport)

    result = runner.invoke(app, ["flush-cache"])

    assert result.exit_code == 2
    assert transport.calls == []
    mock_console_display.display_info.assert_not_called()


def test_client_errors_exit_with_code_one(runner, fake_transport, wire_transport, mock_console_display):
    transport = fake_transport([TransportError("Not Found", status_code=404)])
    wire_transport(transport)

    result = runner.invoke(app, ["-t", "tok", "story", "missing"])

    assert result.exit_code == 1
    mock_console_display.display_error.assert_called_once_with("Not Found (status 404)")
    mock_console_display.display_json.assert_not_called()
    assert transport.closed


def test_malformed_relations_are_reported_without_network(runner, fake_transport, wire_transport, mock_console_display):
    transport = fake_transport()
    wire_transport(transport)

    result = runner.invoke(app, ["-t", "tok", "stories", "-r", "author"])

    assert result.exit_code == 1
    assert transport.calls == []
    mock_console_display.display_error.assert_called_once()


def test_malformed_param_is_a_usage_error(runner, fake_transport, wire_transport, mock_console_display):
    transport = fake_transport()
    wire_transport(transport)

    result = runner.invoke(app, ["stories", "-P", "no-equals-sign"])

    assert result.exit_code == 2
    assert transport.calls == []


def test_parse_param_options():
    assert parse_param_options(None) == {}
    assert parse_param_options(["a=1", "b=x=y", "a=2", "a=3"]) == {"a": ["1", "2", "3"], "b": "x=y"}
    with pytest.raises(typer.BadParameter):
        parse_param_options(["=value"])
