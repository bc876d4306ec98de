# OpenSearch client factory - using stdlib urllib for fast imports

import json
import urllib.error
import urllib.request
from base64 import b64encode
from urllib.parse import quote

from ..config import load_config


class OpenSearchError(Exception):
	"""Base exception for OpenSearch errors with user-friendly messages."""
	pass


class ConnectionFailedError(OpenSearchError):
	"""Raised when OpenSearch is not reachable."""
	pass


class IndexNotFoundError(OpenSearchError):
	"""Raised when the specified index does not exist."""
	pass


class AuthenticationError(OpenSearchError):
	"""Raised when authentication fails."""
	pass


class RequestError(OpenSearchError):
	"""Raised when OpenSearch rejects a request; keeps the response payload."""

	def __init__(self, status, payload, message=None):
		self.status = status
		self.payload = payload
		super().__init__(message or f"HTTP {status}: {_error_reason(payload)}")


class ProvisioningFailure(OpenSearchError):
	"""Raised when the engine rejects the index template, mapping or pipeline at startup."""

	def __init__(self, message, payload=None):
		self.payload = payload
		super().__init__(message)


def _error_reason(payload):
	if isinstance(payload, dict):
		error = payload.get("error")
		if isinstance(error, dict):
			return error.get("reason") or error.get("type") or json.dumps(error)
		if error:
			return str(error)
	return str(payload)


def _decode_body(raw):
	if not raw:
		return None
	try:
		return json.loads(raw)
	except ValueError:
		return raw


class LightweightOpenSearchClient:
	"""Minimal OpenSearch client using stdlib urllib for fast imports."""

	def __init__(self, host, port, user, password, timeout=5):
		self.base_url = f"http://{host}:{port}"
		self.timeout = timeout
		# Pre-compute auth header
		credentials = b64encode(f"{user}:{password}".encode()).decode('ascii')
		self.headers = {
			"Authorization": f"Basic {credentials}",
			"Content-Type": "application/json",
		}
		self.indices = _IndicesClient(self)
		self.ingest = _IngestClient(self)

	def _request(self, method, path, body=None):
		"""Make HTTP request to OpenSearch. Returns None for 404."""
		url = f"{self.base_url}{path}"
		data = json.dumps(body).encode('utf-8') if body is not None else None
		req = urllib.request.Request(url, data=data, headers=self.headers, method=method)
		try:
			with urllib.request.urlopen(req, timeout=self.timeout) as resp:
				raw = resp.read().decode('utf-8')
				if not raw:
					return {}
				return json.loads(raw)
		except urllib.error.HTTPError as e:
			if e.code == 401:
				raise AuthenticationError("Authentication failed (HTTP 401)")
			if e.code == 404:
				return None
			payload = _decode_body(e.read().decode('utf-8', errors='replace'))
			raise RequestError(e.code, payload)
		except urllib.error.URLError as e:
			raise ConnectionFailedError(f"Cannot connect: {e.reason}")

	def info(self):
		"""Get cluster info (used for connection check)."""
		return self._request("GET", "/")

	def search(self, index, body):
		"""Search an index."""
		return self._request("POST", f"/{quote(index)}/_search", body)

	def index(self, index, body, id=None, pipeline=None, refresh=None):
		"""Index a document, optionally through an ingest pipeline."""
		path = f"/{quote(index)}/_doc"
		method = "POST"
		if id:
			path += f"/{quote(str(id))}"
			method = "PUT"
		params = []
		if pipeline:
			params.append(f"pipeline={quote(pipeline)}")
		if refresh is not None:
			params.append(f"refresh={'true' if refresh else 'false'}")
		if params:
			path += "?" + "&".join(params)
		return self._request(method, path, body)


class _IndicesClient:
	"""Minimal indices operations."""

	def __init__(self, client):
		self._client = client

	def exists(self, index):
		"""Check if index exists."""
		result = self._client._request("HEAD", f"/{quote(index)}")
		return result is not None

	def delete(self, index):
		"""Delete an index."""
		return self._client._request("DELETE", f"/{quote(index)}")

	def put_index_template(self, name, body):
		"""Create or update a composable index template."""
		return self._client._request("PUT", f"/_index_template/{quote(name)}", body)

	def delete_index_template(self, name):
		"""Delete a composable index template."""
		return self._client._request("DELETE", f"/_index_template/{quote(name)}")

	def put_mapping(self, index, body):
		"""Add fields to the mapping of an existing index."""
		return self._client._request("PUT", f"/{quote(index)}/_mapping", body)


class _IngestClient:
	"""Ingest pipeline operations."""

	def __init__(self, client):
		self._client = client

	def put_pipeline(self, id, body):
		"""Create or replace an ingest pipeline."""
		return self._client._request("PUT", f"/_ingest/pipeline/{quote(id)}", body)


def get_opensearch_client():
	cfg = load_config()
	return LightweightOpenSearchClient(
		host=cfg.opensearch_host,
		port=cfg.opensearch_port,
		user=cfg.opensearch_user,
		password=cfg.opensearch_pass,
		timeout=cfg.opensearch_timeout,
	)


def check_connection(client):
	"""Check if OpenSearch is reachable. Raises ConnectionFailedError if not."""
	cfg = load_config()
	try:
		client.info()
	except ConnectionFailedError:
		raise ConnectionFailedError(
			f"Cannot connect to OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Make sure OpenSearch is running and accessible."
		)
	except AuthenticationError:
		raise AuthenticationError(
			f"Authentication failed for OpenSearch at {cfg.opensearch_host}:{cfg.opensearch_port}\n"
			f"Check EVENTINDEX_OPENSEARCH_USER and EVENTINDEX_OPENSEARCH_PASS in your .env file."
		)
