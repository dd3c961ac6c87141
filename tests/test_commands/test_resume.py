"""Tests for sprout.commands.resume (sprout resume)."""

import json

import pytest

from sprout.cli import main
from sprout.core.store import ChainStore


@pytest.fixture
def run(cli_runner, cli_config):
    _, env = cli_config

    def _run(args, input=None):
        return cli_runner.invoke(main, args, input=input, env=env)

    return _run


@pytest.fixture
def paused(run, tmp_path):
    """A chain paused on its first snippet with the summary filled in."""
    target = tmp_path / "demo"
    result = run(["new", "lang/python", str(target)], input="\nfrom before\nq\n")
    assert result.exit_code == 0, result.output
    store = ChainStore(tmp_path / "state")
    return store, store.list()[0], target


class TestResume:
    """Tests for `sprout resume`."""

    def test_lists_paused_chains(self, run, paused):
        _, record, _ = paused
        result = run(["resume"])
        assert result.exit_code == 0, result.output
        assert record.id in result.output

    def test_no_paused_chains(self, run):
        result = run(["resume"])
        assert result.exit_code == 0
        assert "No paused chains" in result.output

    def test_resume_keeps_edits_and_finishes(self, run, paused):
        store, record, target = paused
        # README fields already set: commit; main.py: greeting, commit
        result = run(["resume", record.id], input="c\nyo\nc\n")
        assert result.exit_code == 0, result.output
        assert (target / "README.md").read_text() == "# demo\n\nfrom before\n"
        assert (target / "src/main.py").read_text() == 'def main():\n    print("yo")\n'
        assert store.load(record.id) is None

    def test_quit_again_keeps_same_id(self, run, paused):
        store, record, _ = paused
        result = run(["resume", record.id], input="c\nyo\nq\n")
        assert result.exit_code == 0, result.output
        records = store.list()
        assert [r.id for r in records] == [record.id]
        assert len(records[0].items) == 1

    def test_drop(self, run, paused):
        store, record, target = paused
        result = run(["resume", record.id, "--drop"])
        assert result.exit_code == 0
        assert store.list() == []
        assert (target / "LICENSE").exists()

    def test_unknown_id(self, run):
        result = run(["resume", "deadbeef"])
        assert result.exit_code == 1
        assert "No paused chain" in result.output

    def test_malformed_record_exits_cleanly(self, run, template_root, tmp_path):
        chains = tmp_path / "state" / "chains"
        chains.mkdir(parents=True)
        (chains / "abc.json").write_text(json.dumps({
            "id": "abc",
            "template": str(template_root / "lang/python"),
            "target": str(tmp_path / "demo"),
            "items": [{"kind": "entry", "target": "x"}],
        }))
        (chains / "bad.json").write_text("[]")

        result = run(["resume", "abc"])
        assert result.exit_code == 1
        assert "Malformed" in result.output

        listing = run(["resume"])
        assert listing.exit_code == 0, listing.output
        assert "abc" in listing.output
