# Configuration loading for eventindex

import os

# Lazy load dotenv - only when config is first accessed
_dotenv_loaded = False
_custom_dotenv_path = None

def _getenv(name, default):
	value = os.getenv(name)
	return value if value else default

class EventIndexConfig:
	"""Loads configuration from environment variables and provides defaults."""
	def __init__(self):
		self.opensearch_host = _getenv("EVENTINDEX_OPENSEARCH_HOST", "localhost")
		self.opensearch_port = int(_getenv("EVENTINDEX_OPENSEARCH_PORT", "9200"))
		self.opensearch_user = _getenv("EVENTINDEX_OPENSEARCH_USER", "admin")
		self.opensearch_pass = _getenv("EVENTINDEX_OPENSEARCH_PASS", "admin")
		self.opensearch_timeout = int(_getenv("EVENTINDEX_OPENSEARCH_TIMEOUT", "30"))
		# Daily indices are named <prefix>-YYYY.MM.DD
		self.index_prefix = _getenv("EVENTINDEX_INDEX_PREFIX", "events")
		self.pipeline = _getenv("EVENTINDEX_PIPELINE", "events-pipeline")
		self.shards = int(_getenv("EVENTINDEX_SHARDS", "1"))
		self.replicas = int(_getenv("EVENTINDEX_REPLICAS", "0"))

	@property
	def template_name(self):
		return f"{self.index_prefix}-template"

def set_dotenv_path(path: str):
	"""Set a custom .env file path to load. Must be called before load_config()."""
	global _custom_dotenv_path, _dotenv_loaded
	_custom_dotenv_path = path
	_dotenv_loaded = False  # Reset to force reload with new path

def load_config() -> EventIndexConfig:
	"""Return a config object with all settings loaded."""
	global _dotenv_loaded, _custom_dotenv_path
	if not _dotenv_loaded:
		from dotenv import load_dotenv, find_dotenv
		# Check for DOTENV_PATH environment variable first
		dotenv_path = os.getenv("DOTENV_PATH") or _custom_dotenv_path
		if dotenv_path:
			# Explicit path wins over values already in the environment
			load_dotenv(dotenv_path, override=True)
		else:
			# Search for .env file in current directory and parents
			dotenv_path = find_dotenv(usecwd=True)
			if dotenv_path:
				load_dotenv(dotenv_path)
		_dotenv_loaded = True
	return EventIndexConfig()
