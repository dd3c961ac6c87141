"""Shared test fixtures for sprout.

Provides:
- tree: write a {relpath: content} dict under a directory
- make_template: build a template tree from a {relpath: content} dict
- template_root: a search root holding a few ready-made templates
- registry: TemplateRegistry over template_root
- cli_config: config file + env for CLI tests
- cli_runner: Click CliRunner
"""

import json

import pytest
from click.testing import CliRunner

from sprout.core.registry import TemplateRegistry


def write_tree(root, files):
    """Write {relpath: content} under root. None makes an empty directory."""
    for rel, content in files.items():
        path = root / rel
        if content is None:
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
    return root


@pytest.fixture
def tree():
    """The write_tree helper, for tests that build ad hoc trees."""
    return write_tree


@pytest.fixture
def make_template(tmp_path):
    """Factory: make_template(files, key="lang/python") -> template dir."""
    root = tmp_path / "templates"

    def _make(files, key="lang/python"):
        return write_tree(root / key, files)

    return _make


@pytest.fixture
def template_root(make_template, tmp_path):
    """A search root with a python template and a child that inherits it."""
    make_template({
        "README.md.snip": "# ${title:{{ project_name }}}\n\n${summary}\n",
        "LICENSE": "MIT\n",
        "src/__init__.py.autosnip": '"""{{ project_name }}."""\n__version__ = "${version:0.1.0}"\n',
        "src/main.py.snip": "def main():\n    print(\"${greeting:hello}\")\n",
        "tests/.keep": "",
        "docs": None,
        "template.json": json.dumps({"variables": {"license": "MIT"}}),
    }, key="lang/python")
    make_template({
        "app.py": "app = None\n",
        "template.json": json.dumps({
            "inherits": "lang/python",
            "variables": {"framework": "flask"},
        }),
    }, key="web/flask")
    return tmp_path / "templates"


@pytest.fixture
def registry(template_root):
    return TemplateRegistry([template_root])


@pytest.fixture
def cli_config(tmp_path, template_root):
    """Write a config pointing at template_root; returns (path, env)."""
    config = {
        "search_roots": [str(template_root)],
        "workspaces": {"lang": str(tmp_path / "code")},
        "state_dir": str(tmp_path / "state"),
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return path, {"SPROUT_CONFIG": str(path), "SPROUT_TEMPLATES": ""}


@pytest.fixture
def cli_runner():
    """Click CliRunner for testing CLI commands."""
    return CliRunner()
