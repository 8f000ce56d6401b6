from __future__ import annotations

import logging
import os
import posixpath
import re
from typing import Dict, FrozenSet, Iterable, List, Optional

from .config import Settings
from .errors import NoPackageError, PackageParseError, WalkError
from .identity import read_module_path
from .markdown import humanize_package_clause, split_synopsis, to_markdown
from .model import DocumentationNode, Example, PackageDocs
from .parse import import_dir, parse_package

logger = logging.getLogger(__name__)


DEFAULT_EXCLUDE: FrozenSet[str] = frozenset({
	# version control metadata
	".git", ".hg", ".svn", ".bzr",
	# dependencies and virtualenvs
	"node_modules", "vendor", "_vendor", "third_party", ".venv", "venv", "site-packages", ".tox", ".nox",
	# build output and assets
	"assets", "build", "dist", "__pycache__", ".eggs",
})

FORGE_HOST = re.compile(r"^(?:github\.com|gitlab\.com|bitbucket\.org)/")


def is_excluded(dirname: str, exclude: FrozenSet[str]) -> bool:
	return dirname in exclude or dirname.endswith(".egg-info")


def join_module_path(module_path: str, rel_path: str) -> str:
	return posixpath.normpath(posixpath.join(module_path, rel_path.replace(os.sep, "/")))


def _raise_walk_error(err: OSError) -> None:
	raise WalkError(err.filename or "", err.strerror or str(err)) from err


def _project_package_dirs(disk_path: str, base: str) -> List[str]:
	name = base.replace("-", "_")
	return [os.path.join(disk_path, name), os.path.join(disk_path, "src", name)]


def _origin_docs(disk_path: str, base: str) -> PackageDocs:
	"""Read the walk origin, falling back to the project's top-level package.

	A project root usually holds only packaging files and a package named after
	the project (``<root>/<name>/`` or ``<root>/src/<name>/``). That package's
	docstring then documents the project.
	"""
	docs: Optional[PackageDocs] = None
	missing: Optional[NoPackageError] = None
	try:
		docs = parse_package(import_dir(disk_path))
	except NoPackageError as e:
		missing = e
	if docs is not None and docs.doc:
		return docs

	for candidate in _project_package_dirs(disk_path, base):
		if not os.path.isdir(candidate):
			continue
		try:
			fallback = parse_package(import_dir(candidate))
		except NoPackageError:
			continue
		if not fallback.doc:
			continue
		logger.debug("documenting %s with the docstring of %s", disk_path, candidate)
		if docs is None:
			return fallback
		return docs.model_copy(update={"doc": fallback.doc, "is_executable": docs.is_executable or fallback.is_executable})

	if docs is None:
		assert missing is not None
		raise missing
	return docs


def _make_node(
	docs: PackageDocs,
	module_path: str,
	subpackages: Optional[Dict[str, DocumentationNode]],
	with_examples: bool,
) -> DocumentationNode:
	details: Dict[str, Example] = {}
	if with_examples:
		for example in docs.examples:
			if example.play is None:
				continue
			details[example.name.replace("_", ".")] = example

	nice_doc = humanize_package_clause(docs.doc)
	sentence, remainder = split_synopsis(nice_doc)
	# the remainder starts right after the sentence, usually with a space
	main_doc = to_markdown(re.sub(r"^[ \t]+", "", remainder))

	return DocumentationNode(
		name=posixpath.basename(module_path),
		module_path=module_path,
		rel_module_path=FORGE_HOST.sub("", module_path),
		doc=to_markdown(nice_doc),
		main_doc=main_doc,
		synopsis=" ".join(sentence.split()),
		is_executable=docs.is_executable,
		bugs=docs.bugs,
		notes=docs.notes,
		subpackages=subpackages,
		examples={name: example.play for name, example in details.items()},
		example_details=details,
	)


def build_package_doc(
	disk_path: str,
	module_path: str,
	recurse: bool = True,
	*,
	exclude: Optional[Iterable[str]] = None,
	strict: bool = False,
) -> DocumentationNode:
	"""Build the documentation node of the package at ``disk_path``.

	With ``recurse`` the whole directory tree below ``disk_path`` is walked and
	every documented package found in it becomes a direct entry of
	``subpackages``. Those entries are built with ``recurse=False``, so they never
	carry subpackages or examples of their own.

	Errors for ``disk_path`` itself always propagate.
	"""
	module_path = module_path.strip("/")
	if not recurse:
		return _make_node(parse_package(import_dir(disk_path)), module_path, None, with_examples=False)

	base = posixpath.basename(module_path)
	excluded = DEFAULT_EXCLUDE | frozenset(exclude or ())
	docs = _origin_docs(disk_path, base)
	subpackages = _collect_subpackages(disk_path, module_path, base, excluded, strict)
	return _make_node(docs, module_path, subpackages, with_examples=True)


def _collect_subpackages(
	root: str,
	module_path: str,
	base: str,
	exclude: FrozenSet[str],
	strict: bool,
) -> Dict[str, DocumentationNode]:
	subpackages: Dict[str, DocumentationNode] = {}
	for dirpath, dirnames, _ in os.walk(root, onerror=_raise_walk_error):
		# Pruned names are never descended into; sorting fixes the visiting order.
		dirnames[:] = sorted(d for d in dirnames if not is_excluded(d, exclude))
		if dirpath == root:
			continue

		try:
			source = import_dir(dirpath)
		except NoPackageError:
			logger.debug("skipping %s: not a package", dirpath)
			continue
		if source.name == base:
			continue

		try:
			docs = parse_package(source)
		except PackageParseError as e:
			if strict:
				raise
			logger.warning("skipping %s: %s", dirpath, e)
			continue

		child_path = join_module_path(module_path, os.path.relpath(dirpath, root))
		child = _make_node(docs, child_path, None, with_examples=False)
		if child.name == base or not child.doc:
			logger.debug("skipping %s: undocumented or self reference", dirpath)
			continue
		if child.name in subpackages:
			logger.debug("%s replaces %s", child.module_path, subpackages[child.name].module_path)
		subpackages[child.name] = child
	return subpackages


def build_project_doc(root: str, settings: Settings) -> DocumentationNode:
	"""Document a project root, taking its module identity from pyproject.toml unless overridden."""
	module_path = settings.module_path or read_module_path(root)
	logger.debug("documenting %s as %s", root, module_path)
	return build_package_doc(root, module_path, recurse=True, exclude=settings.exclude, strict=settings.strict)
