# Indexing logic for event documents

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from ..pipeline import PIPELINE_NAME


def _parse_date(value: Any) -> Optional[datetime]:
	if value is None:
		return None
	if isinstance(value, datetime):
		return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
	if isinstance(value, (int, float)):
		return datetime.fromtimestamp(value, tz=timezone.utc)
	if isinstance(value, str):
		clean = value.replace("Z", "+00:00")
		try:
			parsed = datetime.fromisoformat(clean)
		except ValueError:
			return None
		return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
	return None


def daily_index_name(prefix: str, value: Union[datetime, str, int, float, None] = None) -> str:
	"""Return the daily index for an event date, e.g. events-2024.02.01.

	Unparseable or missing dates fall back to the current UTC day.
	"""
	dt = _parse_date(value) or datetime.now(timezone.utc)
	return f"{prefix}-{dt.astimezone(timezone.utc):%Y.%m.%d}"


def index_event(client, index_prefix: str, document: Dict[str, Any], pipeline: str = PIPELINE_NAME, refresh=None):
	"""Index one event into its daily index through the flattening pipeline."""
	index = daily_index_name(index_prefix, document.get("date"))
	return client.index(
		index=index,
		body=document,
		id=document.get("id"),
		pipeline=pipeline,
		refresh=refresh,
	)
