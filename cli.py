from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import uvicorn

from doc2readme.config import Settings, load_settings
from doc2readme.errors import Doc2ReadmeError
from doc2readme.render import load_template, render
from doc2readme.walk import build_project_doc

logger = logging.getLogger("doc2readme")


def resolve_settings(root: str, args: argparse.Namespace) -> Settings:
	return load_settings(root).merged(
		template=getattr(args, "template", None),
		module_path=args.module_path,
		exclude=args.exclude or None,
		strict=True if args.strict else None,
	)


def cmd_render(args: argparse.Namespace) -> None:
	outputs: List[str] = []
	for path in args.paths:
		root = os.path.abspath(path)
		settings = resolve_settings(root, args)
		node = build_project_doc(root, settings)
		outputs.append(render(node, load_template(settings.template)))

	# Everything is rendered before anything is written.
	text = "".join(outputs)
	if args.output:
		with open(args.output, "w", encoding="utf-8") as fh:
			fh.write(text)
	else:
		sys.stdout.write(text)


def cmd_model(args: argparse.Namespace) -> None:
	root = os.path.abspath(args.path)
	node = build_project_doc(root, resolve_settings(root, args))
	print(node.model_dump_json(indent=2))


def cmd_serve(args: argparse.Namespace) -> None:
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)


def _add_walk_options(parser: argparse.ArgumentParser) -> None:
	parser.add_argument("--module-path", help="Module identity, instead of the one read from pyproject.toml")
	parser.add_argument("--exclude", action="append", metavar="NAME", help="Extra directory name to skip (repeatable)")
	parser.add_argument("--strict", action="store_true", help="Fail on subpackages that do not parse")


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="doc2readme")
	parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pr = sub.add_parser("render", help="Render a README from package docstrings")
	pr.add_argument("paths", nargs="+", metavar="PATH", help="Project root holding pyproject.toml")
	pr.add_argument("--template", help="Template file or built-in template name (default: Readme)")
	pr.add_argument("-o", "--output", help="Write to this file instead of stdout")
	_add_walk_options(pr)
	pr.set_defaults(func=cmd_render)

	pm = sub.add_parser("model", help="Print the documentation model as JSON")
	pm.add_argument("path", help="Project root holding pyproject.toml")
	_add_walk_options(pm)
	pm.set_defaults(func=cmd_model)

	ps = sub.add_parser("serve", help="Run FastAPI server")
	ps.add_argument("--host", default="127.0.0.1")
	ps.add_argument("--port", type=int, default=8000)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)
	return parser


def main(argv: Optional[List[str]] = None) -> int:
	args = build_parser().parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)
	try:
		args.func(args)
	except Doc2ReadmeError as e:
		logger.error("%s", e)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
