from __future__ import annotations

from typing import Optional


class Doc2ReadmeError(Exception):
	"""Base class for every error raised while building or rendering documentation."""


class ConfigError(Doc2ReadmeError):
	pass


class IdentityError(Doc2ReadmeError):
	"""The module identity could not be read from pyproject.toml."""


class NoPackageError(Doc2ReadmeError):
	"""The directory holds no importable Python module.

	This is an expected condition while walking a tree and is never reported to users.
	"""

	def __init__(self, path: str) -> None:
		super().__init__(f"no Python package in {path}")
		self.path = path


class PackageParseError(Doc2ReadmeError):
	def __init__(self, path: str, reason: str, lineno: Optional[int] = None) -> None:
		where = f"{path}:{lineno}" if lineno else path
		super().__init__(f"{where}: {reason}")
		self.path = path
		self.reason = reason
		self.lineno = lineno


class WalkError(Doc2ReadmeError):
	def __init__(self, path: str, reason: str) -> None:
		super().__init__(f"cannot walk {path}: {reason}")
		self.path = path


class TemplateNotFoundError(Doc2ReadmeError):
	pass


class TemplateRenderError(Doc2ReadmeError):
	pass
