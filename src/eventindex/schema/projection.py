# Derived-field projection rules (copy_to) and their document-side application

import copy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

_MISSING = object()


@dataclass(frozen=True)
class ProjectionRule:
	"""Values at any of `sources` are copied into the single indexed `target`."""
	sources: Tuple[str, ...]
	target: str


def _lookup(document: Mapping[str, Any], path: str) -> Any:
	current: Any = document
	for part in path.split("."):
		if not isinstance(current, Mapping) or part not in current:
			return _MISSING
		current = current[part]
	return current


def _values(value: Any) -> List[Any]:
	if value is _MISSING or value is None:
		return []
	if isinstance(value, list):
		return [item for item in value if item is not None]
	return [value]


def _assign(document: Dict[str, Any], path: str, value: Any) -> None:
	parts = path.split(".")
	current = document
	for part in parts[:-1]:
		child = current.get(part)
		if not isinstance(child, dict):
			child = {}
			current[part] = child
		current = child
	current[parts[-1]] = value


def project_values(rule: ProjectionRule, document: Mapping[str, Any]) -> List[Any]:
	"""Collect every value the rule's sources contribute, in declaration order."""
	values: List[Any] = []
	for source in rule.sources:
		values.extend(_values(_lookup(document, source)))
	return values


def apply_projections(rules: Iterable[ProjectionRule], document: Mapping[str, Any]) -> Dict[str, Any]:
	"""Return a copy of `document` with every projection target filled in.

	This mirrors what the engine does with copy_to: no de-duplication, several
	values become a list, and a target with no source present is left absent.
	"""
	projected = copy.deepcopy(dict(document))
	for rule in rules:
		values = project_values(rule, document)
		if not values:
			continue
		_assign(projected, rule.target, values[0] if len(values) == 1 else values)
	return projected
