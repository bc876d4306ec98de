# Bidirectional alias <-> canonical path lookup

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple


class UnresolvedAlias(LookupError):
	"""Raised when a query references a field alias the schema does not define."""

	def __init__(self, alias):
		self.alias = alias
		super().__init__(f"Unknown field '{alias}'")


class AliasResolver:
	"""Read-only alias table built from a validated schema.

	Lookups never raise; unknown input resolves to None. Both directions are
	stored as mapping proxies so the table cannot change after construction.
	"""

	def __init__(self, pairs: Iterable[Tuple[str, str]]):
		by_alias = {}
		by_path = {}
		for alias, path in pairs:
			by_alias[alias] = path
			by_path[path] = alias
		self._by_alias: Mapping[str, str] = MappingProxyType(by_alias)
		self._by_path: Mapping[str, str] = MappingProxyType(by_path)

	def resolve(self, alias: str) -> Optional[str]:
		if not isinstance(alias, str):
			return None
		return self._by_alias.get(alias.strip())

	def alias_of(self, path: str) -> Optional[str]:
		if not isinstance(path, str):
			return None
		return self._by_path.get(path)

	def require(self, alias: str) -> str:
		"""Resolve an alias or raise UnresolvedAlias for the query layer to report."""
		path = self.resolve(alias)
		if path is None:
			raise UnresolvedAlias(alias)
		return path

	def items(self) -> Iterator[Tuple[str, str]]:
		return iter(sorted(self._by_alias.items()))

	def __contains__(self, alias) -> bool:
		return self.resolve(alias) is not None

	def __len__(self) -> int:
		return len(self._by_alias)
