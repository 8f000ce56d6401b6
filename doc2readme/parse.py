from __future__ import annotations

import ast
import builtins
import copy
import io
import os
import re
import sys
import tokenize
from typing import Dict, List, Optional, Set, Tuple

from .errors import NoPackageError, PackageParseError
from .model import Example, Note, PackageDocs, PackageSource


# Files whose module docstrings make up the package documentation, in order.
DOC_FILES = ("__init__.py", "__main__.py")
ENTRY_POINT = "__main__.py"

NOTE_MARKER = re.compile(r"^([A-Z][A-Z]+)\(([^)]+)\):?\s*(.*)$")
OUTPUT_MARKER = re.compile(r"^(unordered )?output:\s*(.*)$", re.IGNORECASE)

BUILTIN_NAMES = frozenset(dir(builtins)) | {"__name__", "__file__", "__doc__"}

Comment = Tuple[int, str]


def is_test_file(filename: str) -> bool:
	stem = filename[:-3]
	return stem.startswith("test_") or stem.endswith("_test")


def import_dir(path: str) -> PackageSource:
	"""List the Python files of a single directory.

	Raises NoPackageError when the directory has no non-test module.
	"""
	try:
		entries = sorted(os.listdir(path))
	except OSError as e:
		raise NoPackageError(path) from e

	files: List[str] = []
	test_files: List[str] = []
	for entry in entries:
		if entry.startswith(".") or not entry.endswith(".py"):
			continue
		if not os.path.isfile(os.path.join(path, entry)):
			continue
		if is_test_file(entry):
			test_files.append(entry)
		else:
			files.append(entry)
	if not files:
		raise NoPackageError(path)
	return PackageSource(
		name=os.path.basename(os.path.abspath(path)),
		directory=path,
		files=files,
		test_files=test_files,
	)


def _read_source(path: str) -> str:
	try:
		with open(path, "r", encoding="utf-8") as fh:
			return fh.read()
	except UnicodeDecodeError as e:
		raise PackageParseError(path, f"not valid UTF-8: {e.reason}") from e
	except OSError as e:
		raise PackageParseError(path, e.strerror or str(e)) from e


def _parse_source(path: str, text: str) -> ast.Module:
	try:
		return ast.parse(text, filename=path)
	except SyntaxError as e:
		raise PackageParseError(path, e.msg, e.lineno) from e
	except ValueError as e:
		# null bytes in source
		raise PackageParseError(path, str(e)) from e


def _read_comments(path: str, text: str) -> List[Comment]:
	comments: List[Comment] = []
	try:
		for tok in tokenize.generate_tokens(io.StringIO(text).readline):
			if tok.type == tokenize.COMMENT:
				comments.append((tok.start[0], tok.string.lstrip("#").strip()))
	except (tokenize.TokenError, SyntaxError) as e:
		raise PackageParseError(path, f"cannot tokenize: {e}") from e
	return comments


def _comment_blocks(comments: List[Comment]) -> List[List[Comment]]:
	blocks: List[List[Comment]] = []
	for lineno, text in comments:
		if blocks and blocks[-1][-1][0] == lineno - 1:
			blocks[-1].append((lineno, text))
		else:
			blocks.append([(lineno, text)])
	return blocks


def _add_note(notes: Dict[str, List[Note]], marker: Optional[str], uid: str, body: List[str]) -> None:
	text = "\n".join(body).strip()
	if marker and text:
		notes.setdefault(marker, []).append(Note(uid=uid, body=text))


def read_notes(comments: List[Comment]) -> Dict[str, List[Note]]:
	"""Collect ``MARKER(uid): text`` notes such as ``# BUG(ana): leaks fds``.

	A note continues over the following lines of its comment block until the
	next marker line.
	"""
	notes: Dict[str, List[Note]] = {}
	for block in _comment_blocks(comments):
		marker: Optional[str] = None
		uid = ""
		body: List[str] = []
		for _, line in block:
			match = NOTE_MARKER.match(line)
			if match:
				_add_note(notes, marker, uid, body)
				marker, uid, body = match.group(1), match.group(2).strip(), [match.group(3)]
			elif marker:
				body.append(line)
		_add_note(notes, marker, uid, body)
	return notes


def example_suffix(name: str) -> Optional[str]:
	if name == "example":
		return ""
	if name.startswith("example_") and len(name) > len("example_"):
		return name[len("example_"):]
	return None


def _has_params(args: ast.arguments) -> bool:
	return bool(args.posonlyargs or args.args or args.vararg or args.kwonlyargs or args.kwarg)


def _bound_name(alias: ast.alias, stmt: ast.stmt) -> str:
	if alias.asname:
		return alias.asname
	if isinstance(stmt, ast.Import):
		return alias.name.split(".")[0]
	return alias.name


def _free_names(nodes: List[ast.AST]) -> Set[str]:
	# Scope-insensitive: any name stored anywhere in ``nodes`` counts as bound.
	loaded: Set[str] = set()
	bound: Set[str] = set()
	for node in nodes:
		for sub in ast.walk(node):
			if isinstance(sub, ast.Name):
				if isinstance(sub.ctx, ast.Load):
					loaded.add(sub.id)
				else:
					bound.add(sub.id)
			elif isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
				bound.add(sub.name)
			elif isinstance(sub, ast.arg):
				bound.add(sub.arg)
			elif isinstance(sub, (ast.Import, ast.ImportFrom)):
				for alias in sub.names:
					bound.add(_bound_name(alias, sub))
			elif isinstance(sub, ast.ExceptHandler) and sub.name:
				bound.add(sub.name)
	return loaded - bound


def _strip_docstring(body: List[ast.stmt]) -> List[ast.stmt]:
	if body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant) and isinstance(body[0].value.value, str):
		return body[1:]
	return body


def play_example(tree: ast.Module, func: ast.FunctionDef) -> Optional[str]:
	"""Turn an example function into a standalone script.

	Returns None when the example cannot run on its own: the module uses a star
	or relative import it needs, or a name stays unresolved.
	"""
	future: List[ast.stmt] = []
	bindings: Dict[str, ast.stmt] = {}
	for stmt in tree.body:
		if isinstance(stmt, ast.ImportFrom) and stmt.module == "__future__":
			future.append(stmt)
		elif isinstance(stmt, (ast.Import, ast.ImportFrom)):
			for alias in stmt.names:
				if alias.name == "*":
					return None
				bindings[_bound_name(alias, stmt)] = stmt
		elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
			bindings[stmt.name] = stmt
		elif isinstance(stmt, (ast.Assign, ast.AnnAssign)):
			targets = stmt.targets if isinstance(stmt, ast.Assign) else [stmt.target]
			for target in targets:
				for sub in ast.walk(target):
					if isinstance(sub, ast.Name):
						bindings[sub.id] = stmt

	body = _strip_docstring(func.body) or [ast.Pass()]
	used_imports: Dict[int, Set[str]] = {}
	used_decls: Set[int] = set()
	pending = sorted(_free_names(body))
	seen: Set[str] = set()
	while pending:
		name = pending.pop()
		if name in seen:
			continue
		seen.add(name)
		stmt = bindings.get(name)
		if stmt is None:
			if name in BUILTIN_NAMES:
				continue
			return None
		if isinstance(stmt, (ast.Import, ast.ImportFrom)):
			if isinstance(stmt, ast.ImportFrom) and stmt.level:
				return None
			used_imports.setdefault(id(stmt), set()).add(name)
		elif id(stmt) not in used_decls:
			used_decls.add(id(stmt))
			pending.extend(sorted(_free_names([stmt])))

	program: List[ast.stmt] = list(future)
	for stmt in tree.body:
		if id(stmt) in used_imports:
			names = used_imports[id(stmt)]
			aliases = [a for a in stmt.names if _bound_name(a, stmt) in names]
			if isinstance(stmt, ast.Import):
				program.append(ast.Import(names=aliases))
			else:
				program.append(ast.ImportFrom(module=stmt.module, names=aliases, level=0))
		elif id(stmt) in used_decls:
			program.append(stmt)

	main = copy.copy(func)
	main.name = "main"
	main.body = body
	main.decorator_list = []
	main.returns = None
	program.append(main)
	program.extend(ast.parse('if __name__ == "__main__":\n\tmain()\n').body)

	module = ast.Module(body=program, type_ignores=[])
	ast.fix_missing_locations(module)
	return ast.unparse(module) + "\n"


def _example_output(func: ast.FunctionDef, comments: List[Comment], end: int) -> Tuple[str, bool]:
	# Trailing comments are not part of the function's AST, so the search runs
	# up to the next top-level statement.
	inside = [c for c in comments if func.lineno <= c[0] < end]
	blocks = _comment_blocks(inside)
	if not blocks:
		return "", False
	last = blocks[-1]
	match = OUTPUT_MARKER.match(last[0][1])
	if not match:
		return "", False
	lines = [match.group(2)] + [text for _, text in last[1:]]
	return "\n".join(lines).strip(), bool(match.group(1))


def _statement_start(stmt: ast.stmt) -> int:
	decorators = getattr(stmt, "decorator_list", [])
	return min([stmt.lineno] + [d.lineno for d in decorators])


def read_examples(tree: ast.Module, comments: List[Comment], playable: bool) -> List[Example]:
	examples: List[Example] = []
	for index, node in enumerate(tree.body):
		if not isinstance(node, ast.FunctionDef):
			continue
		suffix = example_suffix(node.name)
		if suffix is None or _has_params(node.args):
			continue
		following = tree.body[index + 1:]
		end = _statement_start(following[0]) if following else sys.maxsize
		output, unordered = _example_output(node, comments, end)
		examples.append(
			Example(
				name=suffix,
				doc=ast.get_docstring(node) or "",
				play=play_example(tree, node) if playable else None,
				output=output,
				unordered=unordered,
			)
		)
	return examples


def parse_package(source: PackageSource) -> PackageDocs:
	"""Extract docstrings, notes and examples from every file of a package.

	Test modules are read too: they carry runnable examples and may carry notes.
	The first file that fails to parse aborts the whole package.
	"""
	trees: Dict[str, ast.Module] = {}
	notes: Dict[str, List[Note]] = {}
	examples: List[Example] = []

	for filename in source.files + source.test_files:
		path = os.path.join(source.directory, filename)
		text = _read_source(path)
		tree = _parse_source(path, text)
		comments = _read_comments(path, text)
		trees[filename] = tree
		for marker, found in read_notes(comments).items():
			notes.setdefault(marker, []).extend(found)
		examples.extend(read_examples(tree, comments, playable=is_test_file(filename)))

	docs: List[str] = []
	for filename in DOC_FILES:
		if filename in trees:
			docstring = ast.get_docstring(trees[filename])
			if docstring:
				docs.append(docstring)

	examples.sort(key=lambda e: e.name)
	return PackageDocs(
		doc="\n\n".join(docs),
		is_executable=ENTRY_POINT in source.files,
		bugs=[n.body for n in notes.get("BUG", [])],
		notes=notes,
		examples=examples,
	)
