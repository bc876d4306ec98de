# Field registry: incremental declaration, atomic validation

import logging
from collections import Counter
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from .aliases import AliasResolver
from .fields import FIELD_TYPES, MERGEABLE_OPTIONS, OBJECT, TEXT, FieldDescriptor
from .projection import ProjectionRule

logger = logging.getLogger(__name__)


class SchemaConflict(Exception):
	"""Raised by FieldRegistry.build() when the declarations cannot form a valid schema."""

	def __init__(self, problems):
		self.problems = list(problems)
		summary = "; ".join(self.problems)
		super().__init__(f"Invalid schema ({len(self.problems)} problem(s)): {summary}")


@dataclass(frozen=True)
class DynamicTemplate:
	name: str
	match: str
	mapping: Mapping[str, Any]

	def to_dict(self) -> Dict[str, Any]:
		return {self.name: {"match": self.match, "mapping": dict(self.mapping)}}


class Schema:
	"""Frozen result of FieldRegistry.build(). Safe to share between threads."""

	def __init__(self, fields: Dict[str, FieldDescriptor], projections: Tuple[ProjectionRule, ...],
			dynamic_templates: Tuple[DynamicTemplate, ...]):
		self._fields: Mapping[str, FieldDescriptor] = MappingProxyType(dict(fields))
		self.projections = projections
		self.dynamic_templates = dynamic_templates
		self._resolver = AliasResolver(
			(descriptor.alias, descriptor.path)
			for descriptor in self._fields.values()
			if descriptor.alias
		)

	@property
	def fields(self) -> Mapping[str, FieldDescriptor]:
		return self._fields

	def get(self, path: str) -> Optional[FieldDescriptor]:
		return self._fields.get(path)

	def aliases(self) -> AliasResolver:
		return self._resolver

	def field_for_alias(self, alias: str) -> Optional[FieldDescriptor]:
		path = self._resolver.resolve(alias)
		return self._fields.get(path) if path else None

	def __iter__(self) -> Iterator[FieldDescriptor]:
		return iter(self._fields.values())

	def __len__(self) -> int:
		return len(self._fields)

	def search_fields(self) -> List[str]:
		"""Boosted field list for full-text queries, e.g. ["message", "tags^1.2"]."""
		fields = []
		for descriptor in self._fields.values():
			if not descriptor.include_in_all or not descriptor.searchable:
				continue
			if descriptor.boost:
				fields.append(f"{descriptor.path}^{descriptor.boost:g}")
			else:
				fields.append(descriptor.path)
		return fields

	def mapping(self) -> Dict[str, Any]:
		"""Return the OpenSearch `mappings` body for this schema."""
		properties: Dict[str, Any] = {}
		for descriptor in self._fields.values():
			container = properties
			for part in descriptor.parts[:-1]:
				container = container.setdefault(part, {"type": OBJECT}).setdefault("properties", {})
			container.setdefault(descriptor.name, {}).update(descriptor.storage_mapping())
		mapping: Dict[str, Any] = {"dynamic": False}
		if self.dynamic_templates:
			mapping["dynamic_templates"] = [template.to_dict() for template in self.dynamic_templates]
		mapping["properties"] = properties
		return mapping


class FieldRegistry:
	"""Collects field declarations and projection rules, then validates them in build().

	Declaring never fails; every conflict is reported together by build() so that
	declarations may come from several contributors in any order.
	"""

	def __init__(self):
		self._declarations: List[FieldDescriptor] = []
		self._projections: List[ProjectionRule] = []
		self._dynamic_templates: List[DynamicTemplate] = []

	def declare(self, path: str, type: str, **options) -> FieldDescriptor:
		descriptor = FieldDescriptor(path=path, type=type, **options)
		self._declarations.append(descriptor)
		return descriptor

	def object(self, path: str, dynamic: Optional[bool] = None, **options) -> FieldDescriptor:
		return self.declare(path, OBJECT, dynamic=dynamic, **options)

	def project(self, source_paths: Iterable[str], target_alias: str, type: str = TEXT,
			source_type: str = TEXT, **options) -> ProjectionRule:
		"""Copy the values at `source_paths` into one indexed field named `target_alias`.

		Sources stay in _source but are not indexed on their own.
		"""
		rule = ProjectionRule(tuple(source_paths), target_alias)
		self._projections.append(rule)
		self.declare(target_alias, type, alias=target_alias, **options)
		for source in rule.sources:
			self.declare(source, source_type, index=False)
		return rule

	def dynamic_template(self, name: str, match: str, mapping: Mapping[str, Any]) -> DynamicTemplate:
		template = DynamicTemplate(name, match, dict(mapping))
		self._dynamic_templates.append(template)
		return template

	def extend(self, contributor: Callable[["FieldRegistry"], Any]) -> "FieldRegistry":
		contributor(self)
		return self

	def build(self) -> Schema:
		problems: List[str] = []
		fields = self._merge_declarations(problems)
		self._add_parents(fields, problems)
		self._check_options(fields, problems)
		self._check_aliases(fields, problems)
		self._apply_projections(fields, problems)
		self._check_templates(problems)
		if problems:
			raise SchemaConflict(problems)
		schema = Schema(fields, tuple(self._projections), tuple(self._dynamic_templates))
		logger.debug(
			"Built schema with %d fields, %d aliases, %d projections",
			len(schema), len(schema.aliases()), len(schema.projections),
		)
		return schema

	def _merge_declarations(self, problems: List[str]) -> Dict[str, FieldDescriptor]:
		fields: Dict[str, FieldDescriptor] = {}
		for descriptor in self._declarations:
			if not descriptor.path or "" in descriptor.parts:
				problems.append(f"invalid field path '{descriptor.path}'")
				continue
			if descriptor.type not in FIELD_TYPES:
				problems.append(f"field '{descriptor.path}' has unknown type '{descriptor.type}'")
				continue
			existing = fields.get(descriptor.path)
			if existing is None:
				fields[descriptor.path] = descriptor
				continue
			if existing.type != descriptor.type:
				problems.append(
					f"field '{descriptor.path}' redeclared as {descriptor.type}, already {existing.type}"
				)
				continue
			updates = {}
			for option in MERGEABLE_OPTIONS:
				current = getattr(existing, option)
				incoming = getattr(descriptor, option)
				if incoming is None or current == incoming:
					continue
				if current is None:
					updates[option] = incoming
				else:
					problems.append(
						f"field '{descriptor.path}' redeclared with {option}={incoming!r}, already {current!r}"
					)
			if updates:
				fields[descriptor.path] = replace(existing, **updates)
		return fields

	def _add_parents(self, fields: Dict[str, FieldDescriptor], problems: List[str]) -> None:
		for descriptor in list(fields.values()):
			parts = descriptor.parts
			for depth in range(1, len(parts)):
				parent_path = ".".join(parts[:depth])
				parent = fields.get(parent_path)
				if parent is None:
					fields[parent_path] = FieldDescriptor(path=parent_path, type=OBJECT)
				elif not parent.is_object:
					problems.append(
						f"field '{descriptor.path}' is nested under {parent.type} field '{parent_path}'"
					)
					break

	def _check_options(self, fields: Dict[str, FieldDescriptor], problems: List[str]) -> None:
		for descriptor in fields.values():
			if descriptor.dynamic is not None and not descriptor.is_object:
				problems.append(f"field '{descriptor.path}' is {descriptor.type}; only objects can be dynamic")

	def _check_aliases(self, fields: Dict[str, FieldDescriptor], problems: List[str]) -> None:
		owners: Dict[str, List[str]] = {}
		for descriptor in fields.values():
			alias = descriptor.alias
			if alias is None:
				continue
			if not alias.strip():
				problems.append(f"field '{descriptor.path}' has an empty alias")
				continue
			if alias != alias.strip():
				problems.append(f"field '{descriptor.path}' alias '{alias}' has surrounding whitespace")
			owners.setdefault(alias.strip(), []).append(descriptor.path)
		for alias, paths in owners.items():
			if len(paths) > 1:
				problems.append(f"alias '{alias}' is used by {', '.join(sorted(paths))}")

	def _apply_projections(self, fields: Dict[str, FieldDescriptor], problems: List[str]) -> None:
		for rule in self._projections:
			target = fields.get(rule.target)
			if target is None or target.is_object:
				problems.append(f"projection target '{rule.target}' is not a declared field")
				continue
			for source in rule.sources:
				descriptor = fields.get(source)
				if descriptor is None:
					continue
				if descriptor.alias:
					problems.append(
						f"projected field '{source}' cannot have its own alias '{descriptor.alias}'"
					)
				fields[source] = descriptor.with_copy_to(rule.target)

	def _check_templates(self, problems: List[str]) -> None:
		for name, count in Counter(t.name for t in self._dynamic_templates).items():
			if count > 1:
				problems.append(f"dynamic template '{name}' declared {count} times")
