import os
import sys
import uuid

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
	sys.path.insert(0, SRC_DIR)


class FakeOpenSearch:
	"""Records every call; `fail` maps a method name to the exception it raises."""

	def __init__(self, existing_indices=(), search_response=None, fail=None):
		self.calls = []
		self.existing_indices = set(existing_indices)
		self.search_response = search_response if search_response is not None else {"hits": {"hits": []}}
		self.fail = fail or {}
		self.indices = _FakeIndices(self)
		self.ingest = _FakeIngest(self)

	def _record(self, call, **kwargs):
		self.calls.append((call, kwargs))
		if call in self.fail:
			raise self.fail[call]
		return {"acknowledged": True}

	def info(self):
		return {"version": {"number": "2.11.0"}}

	def search(self, index, body):
		self.calls.append(("search", {"index": index, "body": body}))
		return self.search_response

	def index(self, index, body, id=None, pipeline=None, refresh=None):
		return self._record("index", index=index, body=body, id=id, pipeline=pipeline, refresh=refresh)

	def called(self, name):
		return [kwargs for call, kwargs in self.calls if call == name]


class _FakeIndices:
	def __init__(self, parent):
		self._parent = parent

	def exists(self, index):
		self._parent.calls.append(("exists", {"index": index}))
		return index in self._parent.existing_indices

	def put_index_template(self, name, body):
		return self._parent._record("put_index_template", name=name, body=body)

	def put_mapping(self, index, body):
		return self._parent._record("put_mapping", index=index, body=body)


class _FakeIngest:
	def __init__(self, parent):
		self._parent = parent

	def put_pipeline(self, id, body):
		return self._parent._record("put_pipeline", id=id, body=body)


@pytest.fixture
def fake_client():
	return FakeOpenSearch()


@pytest.fixture
def event_schema():
	from eventindex.schema.events import build_event_schema
	return build_event_schema()


@pytest.fixture
def opensearch_client():
	"""Live client for integration tests; skipped when OpenSearch is unreachable."""
	from eventindex.opensearch.client import OpenSearchError, get_opensearch_client
	client = get_opensearch_client()
	try:
		client.info()
	except OpenSearchError as e:
		pytest.skip(f"OpenSearch not available: {e}")
	return client


@pytest.fixture
def index_prefix(opensearch_client):
	prefix = f"eventindex-test-{uuid.uuid4().hex[:8]}"
	yield prefix
	opensearch_client.indices.delete_index_template(name=f"{prefix}-template")
	opensearch_client.indices.delete(index=f"{prefix}-*")
