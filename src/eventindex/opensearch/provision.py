# Startup registration of the event schema and flattening pipeline

import logging
from typing import Optional

from ..pipeline import PIPELINE_NAME, pipeline_body
from .client import OpenSearchError, ProvisioningFailure, RequestError
from .indexing import daily_index_name
from .mappings import event_index_template

logger = logging.getLogger(__name__)


def _push(description, call, *args, **kwargs):
	try:
		response = call(*args, **kwargs)
	except OpenSearchError as e:
		payload = e.payload if isinstance(e, RequestError) else None
		logger.error("Error creating %s: %s (payload=%r)", description, e, payload)
		raise ProvisioningFailure(f"Error creating {description}: {e}", payload) from e
	if isinstance(response, dict) and response.get("acknowledged") is False:
		logger.error("Error creating %s: not acknowledged (payload=%r)", description, response)
		raise ProvisioningFailure(f"Error creating {description}: not acknowledged", response)
	logger.info("Created %s", description)
	return response


def provision(
	client,
	schema,
	index_prefix: str = "events",
	pipeline: str = PIPELINE_NAME,
	shards: int = 1,
	replicas: int = 0,
	template_name: Optional[str] = None,
) -> str:
	"""Register the pipeline, the index template and the current index mapping.

	Safe to re-run against a live cluster: every call is a create-or-update.
	Any rejection raises ProvisioningFailure, which callers treat as fatal.
	Returns the name of the current daily index.
	"""
	template_name = template_name or f"{index_prefix}-template"
	# The template names the pipeline as its default, so register it first
	_push(f"the pipeline {pipeline}", client.ingest.put_pipeline, id=pipeline, body=pipeline_body())
	template = event_index_template(schema, index_prefix=index_prefix, pipeline=pipeline, shards=shards, replicas=replicas)
	_push(f"the index template {template_name}", client.indices.put_index_template, name=template_name, body=template)

	current_index = daily_index_name(index_prefix)
	try:
		exists = client.indices.exists(index=current_index)
	except OpenSearchError as e:
		raise ProvisioningFailure(f"Error checking index {current_index}: {e}") from e
	if exists:
		_push(f"the mapping for {current_index}", client.indices.put_mapping, index=current_index, body=schema.mapping())
	return current_index
