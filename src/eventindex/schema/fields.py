# Field descriptors for the event index schema

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

TEXT = "text"
KEYWORD = "keyword"
DATE = "date"
BOOLEAN = "boolean"
INTEGER = "integer"
LONG = "long"
DOUBLE = "double"
GEO_POINT = "geo_point"
OBJECT = "object"

FIELD_TYPES = frozenset({TEXT, KEYWORD, DATE, BOOLEAN, INTEGER, LONG, DOUBLE, GEO_POINT, OBJECT})

KEYWORD_SUBFIELD = "keyword"
KEYWORD_IGNORE_ABOVE = 256

# Options that may be filled in by a later declaration of the same path
MERGEABLE_OPTIONS = (
	"analyzer",
	"search_analyzer",
	"boost",
	"include_in_all",
	"keyword",
	"alias",
	"index",
	"dynamic",
	"ignore_above",
)


@dataclass(frozen=True)
class FieldDescriptor:
	"""One declared field of the schema, addressed by its dotted canonical path.

	Options left as None are unset and take the engine's default. copy_to holds
	the projection targets this field feeds.
	"""
	path: str
	type: str
	analyzer: Optional[str] = None
	search_analyzer: Optional[str] = None
	boost: Optional[float] = None
	include_in_all: Optional[bool] = None
	keyword: Optional[bool] = None
	alias: Optional[str] = None
	index: Optional[bool] = None
	dynamic: Optional[bool] = None
	ignore_above: Optional[int] = None
	copy_to: Tuple[str, ...] = field(default_factory=tuple)

	@property
	def name(self) -> str:
		return self.path.rsplit(".", 1)[-1]

	@property
	def parts(self) -> Tuple[str, ...]:
		return tuple(self.path.split("."))

	@property
	def is_object(self) -> bool:
		return self.type == OBJECT

	@property
	def searchable(self) -> bool:
		return self.index is not False and not self.is_object

	@property
	def exact_path(self) -> str:
		"""Path used for exact-match filtering."""
		if self.type == TEXT and self.keyword:
			return f"{self.path}.{KEYWORD_SUBFIELD}"
		return self.path

	def with_copy_to(self, target: str) -> "FieldDescriptor":
		if target in self.copy_to:
			return self
		return replace(self, copy_to=self.copy_to + (target,))

	def storage_mapping(self) -> Dict[str, Any]:
		"""Return the OpenSearch mapping for this field, without nested properties."""
		mapping: Dict[str, Any] = {"type": self.type}
		if self.is_object:
			if self.dynamic is not None:
				mapping["dynamic"] = self.dynamic
			return mapping
		if self.analyzer:
			mapping["analyzer"] = self.analyzer
		if self.search_analyzer:
			mapping["search_analyzer"] = self.search_analyzer
		if self.index is False:
			mapping["index"] = False
		if self.ignore_above is not None:
			mapping["ignore_above"] = self.ignore_above
		if self.copy_to:
			mapping["copy_to"] = list(self.copy_to)
		if self.keyword and self.type == TEXT:
			mapping["fields"] = {
				KEYWORD_SUBFIELD: {"type": KEYWORD, "ignore_above": KEYWORD_IGNORE_ABOVE},
			}
		return mapping
