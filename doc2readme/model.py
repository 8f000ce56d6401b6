from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Note(BaseModel):
	model_config = ConfigDict(frozen=True)

	uid: str
	body: str


class Example(BaseModel):
	"""A runnable example function found in a package module.

	``play`` holds the synthesized standalone script, or None when the example
	cannot be turned into one.
	"""

	model_config = ConfigDict(frozen=True)

	name: str
	doc: str = ""
	play: Optional[str] = None
	output: str = ""
	unordered: bool = False


class PackageSource(BaseModel):
	name: str
	directory: str
	files: List[str] = []
	test_files: List[str] = []


class PackageDocs(BaseModel):
	doc: str = ""
	is_executable: bool = False
	bugs: List[str] = []
	notes: Dict[str, List[Note]] = {}
	examples: List[Example] = []


class DocumentationNode(BaseModel):
	"""Extracted documentation of one package and its admitted subpackages.

	This is the object handed to templates. ``subpackages`` is None when no
	subpackage was admitted, so templates have a single "no subpackages" state.
	"""

	model_config = ConfigDict(frozen=True)

	name: str
	module_path: str
	rel_module_path: str
	doc: str = ""
	main_doc: str = ""
	synopsis: str = ""
	is_executable: bool = False
	bugs: List[str] = []
	notes: Dict[str, List[Note]] = {}
	subpackages: Optional[Dict[str, DocumentationNode]] = None
	examples: Dict[str, str] = {}
	example_details: Dict[str, Example] = {}

	@field_validator("subpackages")
	@classmethod
	def _empty_subpackages_to_none(cls, value: Optional[Dict[str, DocumentationNode]]) -> Optional[Dict[str, DocumentationNode]]:
		if not value:
			return None
		return dict(sorted(value.items()))

	@field_validator("examples", "example_details")
	@classmethod
	def _sort_examples(cls, value: Dict[str, Any]) -> Dict[str, Any]:
		return dict(sorted(value.items()))


DocumentationNode.model_rebuild()
