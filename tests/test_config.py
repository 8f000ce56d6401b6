import pytest

from doc2readme.config import Settings, load_settings, settings_from_pyproject
from doc2readme.errors import ConfigError, IdentityError
from doc2readme.identity import module_path_from_pyproject, read_module_path, url_to_module_path


def test_url_to_module_path():
	assert url_to_module_path("https://github.com/acme/widgets.git") == "github.com/acme/widgets"
	assert url_to_module_path("http://gitlab.com/acme/widgets/") == "gitlab.com/acme/widgets"


def test_module_path_prefers_tool_table():
	data = {
		"project": {"name": "widgets", "urls": {"Homepage": "https://acme.example"}},
		"tool": {"doc2readme": {"module-path": "github.com/acme/widgets"}},
	}
	assert module_path_from_pyproject(data) == "github.com/acme/widgets"


def test_module_path_from_urls_then_name():
	data = {"project": {"name": "widgets", "urls": {"homepage": "https://acme.example/", "Source": "https://github.com/acme/w"}}}
	assert module_path_from_pyproject(data) == "github.com/acme/w"
	assert module_path_from_pyproject({"project": {"name": "widgets"}}) == "widgets"


def test_module_path_missing():
	with pytest.raises(IdentityError):
		module_path_from_pyproject({"project": {}})


def test_read_module_path_errors(make_tree):
	root = make_tree({"__init__.py": ""})
	with pytest.raises(IdentityError, match="does not exist"):
		read_module_path(str(root))
	(root / "pyproject.toml").write_text("[project\nname=")
	with pytest.raises(IdentityError, match="invalid TOML"):
		read_module_path(str(root))


def test_load_settings(make_tree):
	root = make_tree(
		{
			"pyproject.toml": """
				[project]
				name = "widgets"

				[tool.doc2readme]
				template = "docs/README.md.j2"
				exclude = ["examples"]
				strict = true
				""",
		}
	)
	settings = load_settings(str(root))
	assert settings.template == "docs/README.md.j2"
	assert settings.exclude == ["examples"]
	assert settings.strict
	assert settings.module_path is None


def test_load_settings_defaults(make_tree):
	root = make_tree({"__init__.py": ""})
	assert load_settings(str(root)) == Settings()


def test_unknown_setting():
	with pytest.raises(ConfigError):
		settings_from_pyproject({"tool": {"doc2readme": {"templates": "x"}}})


def test_merged_overrides():
	settings = Settings(exclude=["a"], template="Readme")
	merged = settings.merged(template="custom.j2", exclude=["b"], strict=None, module_path="m/p")
	assert merged.template == "custom.j2"
	assert merged.exclude == ["a", "b"]
	assert not merged.strict
	assert merged.module_path == "m/p"
