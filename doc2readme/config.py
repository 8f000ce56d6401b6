from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .identity import IDENTITY_FILE, read_pyproject


class Settings(BaseModel):
	"""Options read from ``[tool.doc2readme]``; command line flags override them."""

	model_config = ConfigDict(extra="forbid", populate_by_name=True)

	template: str = "Readme"
	exclude: List[str] = []
	strict: bool = False
	module_path: Optional[str] = Field(default=None, alias="module-path")

	def merged(self, **overrides: Any) -> "Settings":
		values = {k: v for k, v in overrides.items() if v is not None}
		if "exclude" in values:
			values["exclude"] = self.exclude + list(values["exclude"])
		return self.model_copy(update=values)


def settings_from_pyproject(data: Dict[str, Any]) -> Settings:
	table = data.get("tool", {}).get("doc2readme", {})
	try:
		return Settings.model_validate(table)
	except ValidationError as e:
		raise ConfigError(f"invalid [tool.doc2readme] table: {e}") from e


def load_settings(root: str) -> Settings:
	if not os.path.isfile(os.path.join(root, IDENTITY_FILE)):
		return Settings()
	return settings_from_pyproject(read_pyproject(root))
