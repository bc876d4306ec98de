# Search APIs for OpenSearch, addressed by field alias

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from ..schema.aliases import UnresolvedAlias
from .client import IndexNotFoundError

FilterValue = Union[str, int, float, bool, Sequence[Any]]


def parse_filters(pairs: Iterable[str]) -> List[Tuple[str, str]]:
	"""Split "alias=value" strings; raises ValueError on a missing '='."""
	filters = []
	for pair in pairs:
		alias, sep, value = pair.partition("=")
		if not sep or not alias.strip():
			raise ValueError(f"Expected alias=value, got '{pair}'")
		filters.append((alias.strip(), value))
	return filters


def _filter_clause(schema, alias: str, value: FilterValue) -> Dict[str, Any]:
	descriptor = schema.field_for_alias(alias)
	if descriptor is None:
		raise UnresolvedAlias(alias)
	path = descriptor.exact_path
	if isinstance(value, (list, tuple)):
		return {"terms": {path: list(value)}}
	return {"term": {path: value}}


def build_event_query(schema, query: Optional[str] = None,
		filters: Optional[Union[Mapping[str, FilterValue], Iterable[Tuple[str, FilterValue]]]] = None) -> Dict[str, Any]:
	"""Build a bool query from a free-text query and alias-keyed filters.

	Every alias is resolved through the schema before anything is built, so an
	unknown field raises UnresolvedAlias and no partial query escapes.
	"""
	if isinstance(filters, Mapping):
		filters = list(filters.items())
	clauses = [_filter_clause(schema, alias, value) for alias, value in (filters or [])]

	bool_query: Dict[str, Any] = {"filter": clauses}
	if query:
		bool_query["must"] = [
			{
				"simple_query_string": {
					"query": query,
					"fields": schema.search_fields(),
					"default_operator": "and",
				}
			}
		]
	return {"bool": bool_query}


def _hits_to_docs(hits: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
	docs = []
	for hit in hits:
		source = hit.get("_source", {})
		doc = dict(source)
		doc["_id"] = hit.get("_id")
		doc["_index"] = hit.get("_index")
		docs.append(doc)
	return docs


def _require_response(response: Any, context: str, client=None, index=None) -> Dict[str, Any]:
	if response is None:
		if client is not None and index is not None:
			if not client.indices.exists(index=index):
				raise IndexNotFoundError(
					f"Index '{index}' does not exist.\n"
					f"Run 'eventindex init' to create it."
				)
		raise ValueError(f"OpenSearch {context} returned None")
	if not isinstance(response, dict):
		raise ValueError(f"OpenSearch {context} returned {type(response).__name__}")
	return response


def search_events(client, index, schema, query=None, filters=None, limit=50):
	"""Search events, newest first."""
	body = {
		"query": build_event_query(schema, query=query, filters=filters),
		"sort": [{"date": "desc"}],
		"size": limit,
	}
	response = _require_response(client.search(index=index, body=body), "search", client=client, index=index)
	hits = response.get("hits", {}).get("hits", [])
	return _hits_to_docs(hits)
