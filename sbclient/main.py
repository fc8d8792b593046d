"""Main entry point for the sbclient command line.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to StoryblokClient.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import typer
from typing_extensions import Annotated

from sbclient.core.client import StoryblokClient
from sbclient.domain.errors import StoryblokError
from sbclient.infrastructure.cli.display import ConsoleDisplay
from sbclient.infrastructure.config.settings import get_config, load_client_config, load_configuration
from sbclient.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging

logger = logging.getLogger(__name__)


# --- Dependency Injection Container (Manual) ---

def create_dependencies(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one CLI invocation.

    This acts as the Composition Root.

    Args:
        overrides: Global CLI options ('access_token', 'region', 'log_level').
    """
    overrides = dict(overrides or {})
    log_level_override = overrides.pop("log_level", None)

    load_configuration()
    log_level = resolve_log_level(log_level_override or get_config('logging.level'))
    setup_logging(
        log_level=log_level,
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )

    dependencies: Dict[str, Any] = {'ui': ConsoleDisplay()}
    config = load_client_config(**overrides)
    dependencies['client'] = StoryblokClient(config)
    logger.info("All dependencies initialized successfully.")
    return dependencies


def parse_param_options(values: Optional[List[str]]) -> Dict[str, Any]:
    """Turns repeated 'key=value' options into a params mapping.

    A key given more than once becomes a list, in the order given.
    """
    params: Dict[str, Any] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {item!r}", param_hint="--param")
        if key in params:
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def run_client(dependencies: Dict[str, Any], operation: Callable[[StoryblokClient], Awaitable[Any]]) -> Any:
    """Runs one async client operation, reporting client errors to the user."""
    ui: ConsoleDisplay = dependencies['ui']
    client: StoryblokClient = dependencies['client']

    async def _run() -> Any:
        try:
            return await operation(client)
        finally:
            await client.aclose()

    try:
        return asyncio.run(_run())
    except StoryblokError as e:
        logger.error(f"Command failed: {e}")
        status = getattr(e, "status_code", None)
        ui.display_error(f"{e}" + (f" (status {status})" if status else ""))
        raise typer.Exit(code=1)


# --- Typer App Definition ---
app = typer.Typer(
    name="sbclient",
    help="Fetch content from the Storyblok API with rate limiting, caching and relation resolution.",
    add_completion=False,
)

ParamOption = Annotated[
    Optional[List[str]],
    typer.Option("--param", "-P", help="Query parameter as key=value (repeat a key for a list).")
]
VersionOption = Annotated[
    Optional[str],
    typer.Option("--version", "-v", help="'published' (default) or 'draft'.")
]
RelationsOption = Annotated[
    Optional[str],
    typer.Option("--resolve-relations", "-r", help="Comma separated 'component.field' names to resolve.")
]


def _build_params(param: Optional[List[str]], version: Optional[str], resolve_relations: Optional[str]) -> Dict[str, Any]:
    params = parse_param_options(param)
    if version:
        params["version"] = version
    if resolve_relations:
        params["resolve_relations"] = resolve_relations
    return params


@app.callback()
def main_callback(
    ctx: typer.Context,
    access_token: Annotated[Optional[str], typer.Option("--access-token", "-t", help="Delivery API token.")] = None,
    region: Annotated[Optional[str], typer.Option("--region", help="API region, e.g. 'us'.")] = None,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR.")] = None,
):
    """Global options shared by every command."""
    ctx.obj = {"access_token": access_token, "region": region, "log_level": log_level}


@app.command()
def get(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Path below the API root, e.g. 'cdn/links'.")],
    param: ParamOption = None,
    version: VersionOption = None,
    resolve_relations: RelationsOption = None,
):
    """Fetch any API path and print the response body."""
    params = _build_params(param, version, resolve_relations)
    dependencies = create_dependencies(ctx.obj)
    response = run_client(dependencies, lambda client: client.get(slug, params))
    dependencies["ui"].display_json(response.data)


@app.command()
def stories(
    ctx: typer.Context,
    param: ParamOption = None,
    version: VersionOption = None,
    resolve_relations: RelationsOption = None,
):
    """List stories."""
    params = _build_params(param, version, resolve_relations)
    dependencies = create_dependencies(ctx.obj)
    response = run_client(dependencies, lambda client: client.get_stories(params))
    dependencies["ui"].display_json(response.data)


@app.command()
def story(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Full slug, id or uuid of the story.")],
    param: ParamOption = None,
    version: VersionOption = None,
    resolve_relations: RelationsOption = None,
):
    """Fetch a single story."""
    params = _build_params(param, version, resolve_relations)
    dependencies = create_dependencies(ctx.obj)
    response = run_client(dependencies, lambda client: client.get_story(slug, params))
    dependencies["ui"].display_json(response.data)


@app.command(name="get-all")
def get_all_command(
    ctx: typer.Context,
    slug: Annotated[str, typer.Argument(help="Collection path, e.g. 'cdn/stories'.")],
    per_page: Annotated[int, typer.Option("--per-page", min=1, max=100, help="Page size.")] = 25,
    entity: Annotated[Optional[str], typer.Option("--entity", "-e", help="Response field holding the items.")] = None,
    param: ParamOption = None,
    version: VersionOption = None,
):
    """Fetch every page of a collection and print all items."""
    params = _build_params(param, version, None)
    params["per_page"] = per_page
    dependencies = create_dependencies(ctx.obj)
    items = run_client(dependencies, lambda client: client.get_all(slug, params, entity))
    dependencies["ui"].display_json(items)


@app.command(name="cache-version")
def cache_version_command(ctx: typer.Context):
    """Fetches space metadata and prints the current cache version."""
    async def _fetch(client: StoryblokClient) -> Any:
        response = await client.get("cdn/spaces/me")
        space = (response.data or {}).get("space") or {}
        return space.get("version")

    dependencies = create_dependencies(ctx.obj)
    cv = run_client(dependencies, _fetch)
    dependencies["ui"].display_mapping({"cache_version": cv}, title="Space")


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
