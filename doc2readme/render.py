from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, Template, TemplateError

from .errors import TemplateNotFoundError, TemplateRenderError
from .model import DocumentationNode

TEMPLATE_DIR = Path(__file__).parent / "templates"

BUILTIN_TEMPLATES: Dict[str, str] = {
	"Readme": "readme.md.j2",
}


def make_environment() -> Environment:
	# Markdown output: no autoescaping.
	return Environment(
		loader=FileSystemLoader(str(TEMPLATE_DIR)),
		autoescape=False,
		keep_trailing_newline=True,
	)


def load_template(template: str, env: Optional[Environment] = None) -> Template:
	"""Load a template from a file path, falling back to the built-in names."""
	env = env or make_environment()
	try:
		if os.path.isfile(template):
			with open(template, "r", encoding="utf-8") as fh:
				return env.from_string(fh.read())
		if template in BUILTIN_TEMPLATES:
			return env.get_template(BUILTIN_TEMPLATES[template])
	except OSError as e:
		raise TemplateNotFoundError(f"cannot read template {template}: {e.strerror or e}") from e
	except TemplateError as e:
		raise TemplateRenderError(f"template {template}: {e}") from e
	raise TemplateNotFoundError(f"Template {template} does not exist")


def template_context(node: DocumentationNode) -> Dict[str, Any]:
	context: Dict[str, Any] = {name: getattr(node, name) for name in DocumentationNode.model_fields}
	context["package"] = node
	return context


def render(node: DocumentationNode, template: Union[Template, str]) -> str:
	if isinstance(template, str):
		template = load_template(template)
	try:
		return template.render(template_context(node))
	except TemplateError as e:
		raise TemplateRenderError(f"rendering {node.name}: {e}") from e
