# Error chain flattening, run once per event before it is indexed

from typing import Any, Dict, List, Mapping, MutableMapping

from .models import (
	DATA,
	ERROR,
	NODE_CODE,
	NODE_INNER,
	NODE_MESSAGE,
	NODE_TYPE,
	KnownDataKeys,
)

PIPELINE_NAME = "events-pipeline"

# Painless twin of flatten_errors() for the engine's ingest pipeline.
FLATTEN_ERRORS_SCRIPT = """
if (ctx.data == null || !(ctx.data.containsKey('@error') || ctx.data.containsKey('@simple_error'))) {
	return;
}
def types = [];
def messages = [];
def codes = [];
def curr = ctx.data.containsKey('@error') ? ctx.data['@error'] : ctx.data['@simple_error'];
while (curr instanceof Map) {
	if (curr.type != null) { types.add(curr.type.toString()); }
	if (curr.message != null) { messages.add(curr.message.toString()); }
	if (curr.code != null) { codes.add(curr.code.toString()); }
	curr = curr.inner;
}
if (!(ctx.error instanceof Map)) {
	ctx.error = new HashMap();
}
ctx.error.type = String.join(' ', types);
ctx.error.message = String.join(' ', messages);
ctx.error.code = String.join(' ', codes);
"""


def _compact_script(source: str) -> str:
	return " ".join(line.strip() for line in source.strip().splitlines() if line.strip())


def pipeline_body() -> Dict[str, Any]:
	"""Return the ingest pipeline definition registered under PIPELINE_NAME."""
	return {
		"description": "Flatten the @error / @simple_error cause chain into error.type, error.message and error.code",
		"processors": [
			{
				"script": {
					"lang": "painless",
					"source": _compact_script(FLATTEN_ERRORS_SCRIPT),
				}
			}
		],
	}


def error_root(document: Mapping[str, Any]) -> Any:
	"""Return the chain root, or None when the event carries no error data.

	A full error wins over a simple error when both are present.
	"""
	data = document.get(DATA)
	if not isinstance(data, Mapping):
		return None
	if KnownDataKeys.ERROR in data:
		return data[KnownDataKeys.ERROR]
	return data.get(KnownDataKeys.SIMPLE_ERROR)


def _text(value: Any) -> str:
	# Match Painless toString(): Java renders booleans in lowercase
	if isinstance(value, bool):
		return "true" if value else "false"
	return str(value)


def has_error_data(document: Mapping[str, Any]) -> bool:
	data = document.get(DATA)
	if not isinstance(data, Mapping):
		return False
	return KnownDataKeys.ERROR in data or KnownDataKeys.SIMPLE_ERROR in data


def flatten_errors(document: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
	"""Flatten the event's error chain into error.type, error.message and error.code.

	The chain is walked iteratively from the root through each node's `inner`
	reference. Each attribute is collected on its own, so a node without a
	message still contributes its type and code. Values keep root-to-innermost
	order and are joined with single spaces. Existing error.type/message/code
	values are replaced; events without error data are returned untouched.
	"""
	if not has_error_data(document):
		return document

	types: List[str] = []
	messages: List[str] = []
	codes: List[str] = []
	current = error_root(document)
	while isinstance(current, Mapping):
		if current.get(NODE_TYPE) is not None:
			types.append(_text(current[NODE_TYPE]))
		if current.get(NODE_MESSAGE) is not None:
			messages.append(_text(current[NODE_MESSAGE]))
		if current.get(NODE_CODE) is not None:
			codes.append(_text(current[NODE_CODE]))
		current = current.get(NODE_INNER)

	error = document.get(ERROR)
	if not isinstance(error, MutableMapping):
		error = {}
		document[ERROR] = error
	error[NODE_TYPE] = " ".join(types)
	error[NODE_MESSAGE] = " ".join(messages)
	error[NODE_CODE] = " ".join(codes)
	return document
