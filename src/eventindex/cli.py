import signal
import sys

# Handle Ctrl+C gracefully before any other imports
signal.signal(signal.SIGINT, lambda *_: sys.exit(130))

import json
import logging
from typing import List, Optional

import click
import typer

from .config import load_config, set_dotenv_path
from .opensearch.client import (
	get_opensearch_client,
	check_connection,
	OpenSearchError,
	ProvisioningFailure,
)
from .opensearch.mappings import event_index_template
from .opensearch.provision import provision
from .opensearch.queries import parse_filters, search_events
from .pipeline import flatten_errors
from .schema.aliases import UnresolvedAlias
from .schema.events import build_event_schema

app = typer.Typer()


def _error(message):
	typer.echo(typer.style(f"Error: {message}", fg=typer.colors.RED), err=True)


@app.callback()
def _global_options(
	env: Optional[str] = typer.Option(None, "--env", help="Path to a .env file to load settings from"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
	"""Event index schema, alias and pipeline tooling."""
	if env:
		set_dotenv_path(env)
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)


def require_opensearch():
	"""Get client and verify OpenSearch is accessible."""
	cfg = load_config()
	client = get_opensearch_client()
	try:
		check_connection(client)
	except OpenSearchError as e:
		_error(e)
		raise typer.Exit(1)
	return client, cfg


@app.command()
def init():
	"""Register the event index template and error pipeline (idempotent)."""
	schema = build_event_schema()
	client, cfg = require_opensearch()
	try:
		current_index = provision(
			client,
			schema,
			index_prefix=cfg.index_prefix,
			pipeline=cfg.pipeline,
			shards=cfg.shards,
			replicas=cfg.replicas,
			template_name=cfg.template_name,
		)
	except ProvisioningFailure as e:
		_error(e)
		if e.payload is not None:
			typer.echo(json.dumps(e.payload, indent=2, default=str), err=True)
		raise typer.Exit(1)
	typer.echo(f"Pipeline '{cfg.pipeline}' and template '{cfg.template_name}' initialized.")
	typer.echo(f"Current index: {current_index}")


@app.command()
def fields():
	"""List every searchable field alias and the path it resolves to."""
	schema = build_event_schema()
	for alias, path in schema.aliases().items():
		descriptor = schema.get(path)
		typer.echo(f"{alias:<20} {descriptor.type:<10} {path}")


@app.command()
def resolve(alias: str = typer.Argument(..., help="Field alias, e.g. os or error.type")):
	"""Show the canonical path for a field alias."""
	path = build_event_schema().aliases().resolve(alias)
	if path is None:
		_error(f"Unknown field '{alias}'")
		raise typer.Exit(1)
	typer.echo(path)


@app.command()
def mapping():
	"""Print the index template that 'init' registers."""
	cfg = load_config()
	template = event_index_template(
		build_event_schema(),
		index_prefix=cfg.index_prefix,
		pipeline=cfg.pipeline,
		shards=cfg.shards,
		replicas=cfg.replicas,
	)
	typer.echo(json.dumps(template, indent=2))


@app.command()
def flatten(
	path: Optional[str] = typer.Argument(None, help="JSON event file (reads stdin when omitted)"),
):
	"""Apply the error flattening pipeline to an event locally and print the result."""
	try:
		if path:
			with open(path, encoding="utf-8") as f:
				document = json.load(f)
		else:
			document = json.load(sys.stdin)
	except (OSError, ValueError) as e:
		_error(f"Cannot read event: {e}")
		raise typer.Exit(1)
	if not isinstance(document, dict):
		_error("Event must be a JSON object")
		raise typer.Exit(1)
	typer.echo(json.dumps(flatten_errors(document), indent=2))


@app.command()
def search(
	q: str = typer.Option("", "--q", help="Full-text query"),
	field_filter: List[str] = typer.Option([], "--filter", "-f", help="alias=value, may be repeated"),
	limit: int = typer.Option(20, "--limit"),
):
	"""Search events by free text and field aliases."""
	schema = build_event_schema()
	try:
		filters = parse_filters(field_filter)
	except ValueError as e:
		_error(e)
		raise typer.Exit(1)
	# Reject unknown fields before touching the cluster
	try:
		for alias, _ in filters:
			schema.aliases().require(alias)
	except UnresolvedAlias as e:
		_error(e)
		raise typer.Exit(1)

	client, cfg = require_opensearch()
	try:
		docs = search_events(
			client,
			f"{cfg.index_prefix}-*",
			schema,
			query=q or None,
			filters=filters,
			limit=limit,
		)
	except OpenSearchError as e:
		_error(e)
		raise typer.Exit(1)

	if not docs:
		typer.echo(typer.style("No events found.", dim=True), err=True)
	for doc in docs:
		error = doc.get("error") or {}
		summary = error.get("type") or doc.get("type") or ""
		typer.echo(f"{doc.get('date') or ''} {doc.get('_id') or ''} {summary} {doc.get('message') or ''}".rstrip())


def main():
	if len(sys.argv) == 1:
		# No arguments: show help
		command = typer.main.get_command(app)
		ctx = click.Context(command)
		typer.echo(command.get_help(ctx), err=True)
		return 0
	try:
		app()
	except typer.Exit:
		raise
	except Exception as e:
		typer.echo(typer.style(
			f"Fatal error: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		sys.exit(1)

if __name__ == "__main__":
	main()
