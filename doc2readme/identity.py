from __future__ import annotations

import os
import re
import tomllib
from typing import Any, Dict

from .errors import IdentityError

IDENTITY_FILE = "pyproject.toml"
URL_KEYS = ("Repository", "Source", "Source Code", "Homepage")
URL_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def read_pyproject(root: str) -> Dict[str, Any]:
	path = os.path.join(root, IDENTITY_FILE)
	try:
		with open(path, "rb") as fh:
			return tomllib.load(fh)
	except FileNotFoundError as e:
		raise IdentityError(f"{path} does not exist") from e
	except OSError as e:
		raise IdentityError(f"cannot read {path}: {e.strerror or e}") from e
	except tomllib.TOMLDecodeError as e:
		raise IdentityError(f"invalid TOML in {path}: {e}") from e


def url_to_module_path(url: str) -> str:
	"""``https://github.com/acme/widgets.git/`` -> ``github.com/acme/widgets``"""
	path = URL_SCHEME.sub("", url.strip()).rstrip("/")
	if path.endswith(".git"):
		path = path[:-len(".git")]
	return path.rstrip("/")


def module_path_from_pyproject(data: Dict[str, Any]) -> str:
	tool = data.get("tool", {}).get("doc2readme", {})
	if tool.get("module-path"):
		return str(tool["module-path"]).strip("/")

	project = data.get("project", {})
	urls = {str(k).lower(): v for k, v in (project.get("urls") or {}).items()}
	for key in URL_KEYS:
		url = urls.get(key.lower())
		if isinstance(url, str) and url_to_module_path(url):
			return url_to_module_path(url)

	name = project.get("name")
	if isinstance(name, str) and name.strip():
		return name.strip()
	raise IdentityError("pyproject.toml defines neither a project URL nor a project name")


def read_module_path(root: str) -> str:
	return module_path_from_pyproject(read_pyproject(root))
