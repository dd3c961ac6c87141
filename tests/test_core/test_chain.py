"""Tests for sprout.core.chain module."""

from pathlib import Path

import pytest

from sprout.core.chain import (
    ChainState,
    DeferredDocument,
    Document,
    SnippetChain,
    SnippetEntry,
)
from sprout.core.errors import ChainPreconditionError, SnippetRenderError


def entries(tmp_path, *names):
    return [SnippetEntry(source=Path(f"/tpl/{n}.snip"), target=tmp_path / n) for n in names]


class Recorder:
    """Opener and finalize callback that remember what happened."""

    def __init__(self):
        self.opened = []
        self.finalized = 0

    def open(self, entry):
        self.opened.append(entry.target.name)
        return Document(target=entry.target, source=entry.source, text=f"{entry.target.name}: ${{value:x}}\n")

    def finalize(self):
        self.finalized += 1


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def chain(recorder):
    return SnippetChain(opener=recorder.open, on_finalize=recorder.finalize)


class TestDocument:
    """Tests for Document."""

    def test_content_uses_values_then_defaults(self, tmp_path):
        doc = Document(target=tmp_path / "f", text="${a:1} ${b:2} ${a}")
        doc.set_field("a", "x")
        assert doc.content() == "x 2 x"

    def test_save_writes_content(self, tmp_path):
        doc = Document(target=tmp_path / "sub" / "f.txt", text="hi ${who:there}\n")
        doc.save()
        assert (tmp_path / "sub" / "f.txt").read_text() == "hi there\n"
        assert doc.saved

    def test_replace_text_drops_stale_values(self, tmp_path):
        doc = Document(target=tmp_path / "f", text="${a} ${b}")
        doc.set_field("a", "1")
        doc.set_field("b", "2")
        doc.replace_text("${b} only")
        assert doc.values == {"b": "2"}

    def test_editable_text_round_trips_literals(self, tmp_path):
        doc = Document(target=tmp_path / "f", text="\\${HOME} ${a:1}")
        doc.set_field("a", "${x}")
        edited = doc.editable_text()
        assert edited == "\\${HOME} \\${x}"
        doc.replace_text(edited)
        assert doc.fields == []
        assert doc.content() == "${HOME} ${x}"


class TestStart:
    """Tests for SnippetChain.start()."""

    def test_opens_first_entry(self, chain, recorder, tmp_path):
        doc = chain.start(entries(tmp_path, "a", "b", "c"))
        assert doc is chain.focused
        assert doc.target == tmp_path / "a"
        assert recorder.opened == ["a"]
        assert len(chain.pending) == 2
        assert len(chain) == 3

    def test_empty_finalizes_immediately(self, chain, recorder):
        assert chain.start([]) is None
        assert chain.finalized
        assert chain.state is ChainState.EMPTY
        assert recorder.finalized == 1

    def test_start_twice_is_an_error(self, chain, tmp_path):
        chain.start(entries(tmp_path, "a"))
        with pytest.raises(ChainPreconditionError):
            chain.start(entries(tmp_path, "b"))

    def test_entries_opened_lazily(self, chain, recorder, tmp_path):
        chain.start(entries(tmp_path, "a", "b"))
        assert recorder.opened == ["a"]
        assert not (tmp_path / "a").exists()


class TestCommitAndAdvance:
    """Tests for SnippetChain.commit_and_advance()."""

    def test_n_commits_exhaust_and_finalize_once(self, chain, recorder, tmp_path):
        names = ["a", "b", "c", "d"]
        chain.start(entries(tmp_path, *names))
        for _ in names:
            assert recorder.finalized == 0
            chain.commit_and_advance()
        assert chain.focused is None
        assert chain.finalized
        assert recorder.finalized == 1
        assert [p.name for p in chain.history] == names
        for name in names:
            assert (tmp_path / name).read_text() == f"{name}: x\n"

    def test_advance_after_finalize_is_noop(self, chain, recorder, tmp_path):
        chain.start(entries(tmp_path, "a"))
        chain.commit_and_advance()
        assert chain.advance() is None
        assert chain.advance() is None
        assert recorder.finalized == 1

    def test_commit_with_nothing_focused_fails(self, chain):
        with pytest.raises(ChainPreconditionError):
            chain.commit_and_advance()

    def test_commit_after_exhaustion_fails(self, chain, tmp_path):
        chain.start(entries(tmp_path, "a"))
        chain.commit_and_advance()
        with pytest.raises(ChainPreconditionError):
            chain.commit_and_advance()

    def test_commit_saves_field_values(self, chain, tmp_path):
        doc = chain.start(entries(tmp_path, "a"))
        doc.set_field("value", "filled")
        chain.commit_and_advance()
        assert (tmp_path / "a").read_text() == "a: filled\n"

    def test_failed_open_keeps_entry_at_head(self, tmp_path):
        def opener(entry):
            if entry.target.name == "b":
                raise SnippetRenderError("'nope' is undefined", entry.source)
            return Document(target=entry.target, text="ok\n")

        chain = SnippetChain(opener=opener)
        chain.start(entries(tmp_path, "a", "b", "c"))
        with pytest.raises(SnippetRenderError):
            chain.commit_and_advance()

        assert chain.focused is None
        assert not chain.finalized
        assert [item.target.name for item in chain.snapshot()] == ["b", "c"]
        assert (tmp_path / "a").read_text() == "ok\n"


class TestDefer:
    """Tests for SnippetChain.defer()."""

    def test_deferred_is_processed_last(self, chain, tmp_path):
        chain.start(entries(tmp_path, "A", "B", "C"))
        chain.commit_and_advance()   # A
        chain.defer()                # B
        chain.commit_and_advance()   # C
        chain.commit_and_advance()   # B again
        assert [p.name for p in chain.history] == ["A", "C", "B"]
        assert chain.finalized

    def test_deferred_keeps_edits_and_is_not_reopened(self, chain, recorder, tmp_path):
        doc = chain.start(entries(tmp_path, "a", "b"))
        doc.set_field("value", "edited")
        chain.defer()
        chain.commit_and_advance()   # b
        assert chain.focused is doc
        assert recorder.opened == ["a", "b"]
        chain.commit_and_advance()
        assert (tmp_path / "a").read_text() == "a: edited\n"

    def test_state_reports_head(self, chain, tmp_path):
        chain.start(entries(tmp_path, "a", "b"))
        assert chain.state is ChainState.HAS_PENDING
        chain.defer()                # a to tail, b focused
        assert chain.state is ChainState.HAS_DEFERRED
        assert isinstance(chain.pending[0], DeferredDocument)

    def test_defer_last_item_comes_straight_back(self, chain, recorder, tmp_path):
        doc = chain.start(entries(tmp_path, "only"))
        assert chain.defer() is doc
        assert recorder.finalized == 0

    def test_deferrals_keep_relative_order(self, chain, tmp_path):
        chain.start(entries(tmp_path, "a", "b", "c", "d"))
        chain.defer()                # a
        chain.defer()                # b
        chain.commit_and_advance()   # c
        chain.commit_and_advance()   # d
        chain.commit_and_advance()   # a
        chain.commit_and_advance()   # b
        assert [p.name for p in chain.history] == ["c", "d", "a", "b"]

    def test_deferred_after_later_entries_added_at_defer_time(self, chain, tmp_path):
        chain.start(entries(tmp_path, "a", "b", "c"))
        chain.commit_and_advance()   # a
        chain.defer()                # b -> tail behind c
        assert [i.target.name for i in chain.pending] == ["b"]
        assert chain.focused.target.name == "c"

    def test_defer_with_nothing_focused_fails(self, chain):
        with pytest.raises(ChainPreconditionError):
            chain.defer()


class TestIsolation:
    """Chains from separate expansions never see each other."""

    def test_interleaved_chains(self, tmp_path):
        first, second = Recorder(), Recorder()
        one = SnippetChain(opener=first.open, on_finalize=first.finalize)
        two = SnippetChain(opener=second.open, on_finalize=second.finalize)
        (tmp_path / "one").mkdir()
        (tmp_path / "two").mkdir()

        one.start(entries(tmp_path / "one", "a", "b"))
        two.start(entries(tmp_path / "two", "x"))
        one.defer()
        two.commit_and_advance()

        assert second.finalized == 1
        assert first.finalized == 0
        assert one.focused.target.name == "b"
        assert [p.name for p in two.history] == ["x"]
        assert one.history == []


class TestSnapshot:
    """Tests for SnippetChain.snapshot()."""

    def test_focused_first_as_deferred(self, chain, tmp_path):
        doc = chain.start(entries(tmp_path, "a", "b"))
        items = chain.snapshot()
        assert isinstance(items[0], DeferredDocument)
        assert items[0].document is doc
        assert items[1] == SnippetEntry(source=Path("/tpl/b.snip"), target=tmp_path / "b")

    def test_restart_from_snapshot(self, recorder, tmp_path):
        original = SnippetChain(opener=recorder.open)
        doc = original.start(entries(tmp_path, "a", "b"))
        doc.set_field("value", "kept")

        resumed = SnippetChain(opener=recorder.open, on_finalize=recorder.finalize)
        assert resumed.start(original.snapshot()) is doc
        resumed.commit_and_advance()
        resumed.commit_and_advance()
        assert (tmp_path / "a").read_text() == "a: kept\n"
        assert recorder.finalized == 1
