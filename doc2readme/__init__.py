"""Render README files from the docstrings of a tree of Python packages.

Modules:
- parse.py: Reads a package directory: docstrings, BUG/TODO notes and runnable examples.
- markdown.py: Docstring prose to markdown conversion and synopsis extraction.
- walk.py: Walks a project tree and assembles the documentation model.
- model.py: Data structures handed to templates.
- render.py: Jinja2 rendering with built-in templates.
- identity.py / config.py: Module identity and settings from pyproject.toml.
"""

from .model import DocumentationNode
from .walk import build_package_doc

__all__ = [
	"DocumentationNode",
	"build_package_doc",
	"parse",
	"markdown",
	"walk",
	"model",
	"render",
]
