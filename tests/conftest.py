from pathlib import Path
from textwrap import dedent
from typing import Dict

import pytest


def write_tree(root: Path, files: Dict[str, str]) -> Path:
	for rel, text in files.items():
		path = root / rel
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(dedent(text).lstrip("\n"), encoding="utf-8")
	return root


@pytest.fixture
def make_tree(tmp_path):
	def _make(files: Dict[str, str], name: str = "checkout") -> Path:
		return write_tree(tmp_path / name, files)
	return _make


@pytest.fixture
def widgets_project(make_tree):
	return make_tree(
		{
			"pyproject.toml": """
				[project]
				name = "widgets"

				[project.urls]
				Repository = "https://github.com/acme/widgets.git"
				""",
			"__init__.py": '''
				"""Package widgets does X. It also does Y.

				Usage

				Build a widget and render it.

				    w = widgets.new_widget()
				    w.render()
				"""
				''',
			"test_widgets.py": '''
				import json


				def example_new_widget():
					"""Create a widget."""
					print(json.dumps({"size": 1}))
					# Output: {"size": 1}
				''',
			"core/__init__.py": '''
				"""Core widget primitives.

				Shapes and sizes.
				"""

				# BUG(ana): sizes overflow above 2**31.
				''',
			"core/deep/__init__.py": '"""Deep internals of the core."""\n',
			"tools/__main__.py": '"""Command line tool for widgets."""\n',
			"cmd/widgets/__init__.py": '"""Shares the project name."""\n',
			"undocumented/__init__.py": "",
			"vendor/__init__.py": '"""Vendored copy."""\n',
			"vendor/lib/__init__.py": '"""Vendored library."""\n',
			"docs/index.txt": "not python\n",
		}
	)
