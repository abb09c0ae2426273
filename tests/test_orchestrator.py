from __future__ import annotations

import asyncio
import unittest
from pathlib import Path
from unittest import mock

from folderjump.fs import MemoryFilesystemReader
from folderjump.search import (
    FolderEntry,
    ResultCollection,
    ResultSnapshot,
    SearchOrchestrator,
    SearchRequest,
    display_path,
    rank_entries,
)

HOME = Path("/Users/x")
PROJECTS = HOME / "Projects"


def _paths(entries) -> list[Path]:
    return [entry.path for entry in entries]


class RankingTests(unittest.TestCase):
    def test_history_sorts_first_regardless_of_score(self) -> None:
        entries = [
            FolderEntry(path=Path("/a"), name="a", score=100),
            FolderEntry(path=Path("/b"), name="b", score=5, is_from_history=True),
            FolderEntry(path=Path("/c"), name="c", score=90),
        ]

        self.assertEqual(_paths(rank_entries(entries)), [Path("/b"), Path("/a"), Path("/c")])

    def test_ties_keep_insertion_order_and_limit_truncates(self) -> None:
        entries = [FolderEntry(path=Path(f"/{idx}"), name=str(idx), score=70) for idx in range(5)]

        ranked = rank_entries(entries, limit=3)

        self.assertEqual(_paths(ranked), [Path("/0"), Path("/1"), Path("/2")])

    def test_collection_skips_duplicates_but_keeps_history_rows(self) -> None:
        collection = ResultCollection()
        live = FolderEntry(path=Path("/a"), name="a", score=70)
        history = FolderEntry(path=Path("/a"), name="a", score=90, is_from_history=True)

        self.assertTrue(collection.add(live))
        self.assertFalse(collection.add(live))
        self.assertTrue(collection.add(history))
        self.assertEqual(len(collection), 2)

    def test_display_path_abbreviates_home(self) -> None:
        self.assertEqual(display_path(PROJECTS / "alpha", HOME), "~/Projects/alpha")
        self.assertEqual(display_path(HOME, HOME), "~")
        self.assertEqual(display_path(Path("/opt/tools"), HOME), "/opt/tools")


class RootModeTests(unittest.IsolatedAsyncioTestCase):
    def _reader(self) -> MemoryFilesystemReader:
        return MemoryFilesystemReader(
            {
                PROJECTS: ["alpha", "beta", "My-Project"],
                PROJECTS / "alpha": ["alpha-docs"],
                PROJECTS / "alpha" / "alpha-docs": ["deep-project"],
                PROJECTS / "alpha" / "alpha-docs" / "deep-project": [],
                PROJECTS / "beta": [],
                PROJECTS / "My-Project": [],
            }
        )

    async def test_empty_query_shows_history_then_parent_without_children(self) -> None:
        reader = self._reader()
        orchestrator = SearchOrchestrator(reader, home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS,), query="", history=(PROJECTS / "alpha",))
        )

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS / "alpha", PROJECTS])
        history_row, parent_row = outcome.entries
        self.assertTrue(history_row.is_from_history)
        self.assertEqual(history_row.score, 70)
        self.assertTrue(parent_row.is_parent_directory)
        self.assertEqual(parent_row.score, 50)
        self.assertEqual(parent_row.match_reason, "parent directory")
        self.assertNotIn(PROJECTS, reader.listed)

    async def test_parent_row_may_duplicate_history_row(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)

        outcome = await orchestrator.search(SearchRequest(roots=(PROJECTS,), query="", history=(PROJECTS,)))

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS, PROJECTS])
        self.assertTrue(outcome.entries[0].is_from_history)
        self.assertTrue(outcome.entries[1].is_parent_directory)

    async def test_query_merges_history_and_live_results_without_duplicates(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS,), query="proj", max_depth=3, history=(PROJECTS / "My-Project",))
        )

        assert outcome is not None
        paths = _paths(outcome.entries)
        self.assertEqual(paths[0], PROJECTS / "My-Project")
        self.assertTrue(outcome.entries[0].is_from_history)
        self.assertEqual(paths.count(PROJECTS / "My-Project"), 1)
        self.assertIn(PROJECTS / "alpha" / "alpha-docs" / "deep-project", paths)
        self.assertTrue(all(entry.score >= 1 for entry in outcome.entries))

    async def test_history_path_match_wins_and_is_tagged(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(), query="~/projects/be", history=(PROJECTS / "beta",))
        )

        assert outcome is not None
        self.assertEqual(len(outcome.entries), 1)
        self.assertTrue(outcome.entries[0].match_reason.endswith("(path)"))

    async def test_history_not_matching_query_is_dropped(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(), query="zzz", history=(PROJECTS / "beta",))
        )

        assert outcome is not None
        self.assertEqual(outcome.entries, ())

    async def test_stale_history_is_reported_not_shown(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)
        missing = PROJECTS / "gone"

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS,), query="", history=(missing, PROJECTS / "beta"))
        )

        assert outcome is not None
        self.assertEqual(outcome.stale_history, (missing,))
        self.assertNotIn(missing, _paths(outcome.entries))

    async def test_history_is_capped_to_max_history_items(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(
                roots=(),
                query="",
                history=(PROJECTS / "alpha", PROJECTS / "beta"),
                max_history_items=1,
            )
        )

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS / "alpha"])

    async def test_stage_one_results_are_published_before_stage_two(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)
        snapshots: list[ResultSnapshot] = []

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS,), query="alpha", max_depth=3),
            on_update=snapshots.append,
        )

        assert outcome is not None
        self.assertTrue(snapshots[0].loading)
        self.assertFalse(snapshots[-1].loading)
        shallow = [snap for snap in snapshots if snap.loading and snap.entries]
        self.assertEqual(_paths(shallow[0].entries), [PROJECTS / "alpha", PROJECTS / "alpha" / "alpha-docs"])
        self.assertEqual(
            _paths(outcome.entries),
            [PROJECTS / "alpha", PROJECTS / "alpha" / "alpha-docs"],
        )

    async def test_shallow_depth_skips_second_stage(self) -> None:
        reader = self._reader()
        orchestrator = SearchOrchestrator(reader, home=HOME)

        await orchestrator.search(SearchRequest(roots=(PROJECTS,), query="deep", max_depth=1))

        self.assertEqual(reader.listed.count(PROJECTS), 1)

    async def test_stage_two_finds_deeper_folders(self) -> None:
        reader = self._reader()
        orchestrator = SearchOrchestrator(reader, home=HOME)

        outcome = await orchestrator.search(SearchRequest(roots=(PROJECTS,), query="deep", max_depth=3))

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS / "alpha" / "alpha-docs" / "deep-project"])
        self.assertEqual(reader.listed.count(PROJECTS), 2)

    async def test_failing_root_does_not_abort_other_roots(self) -> None:
        broken = Path("/broken")
        reader = MemoryFilesystemReader(
            {PROJECTS: ["beta"], PROJECTS / "beta": []},
            inaccessible={broken},
        )
        orchestrator = SearchOrchestrator(reader, home=HOME)

        with self.assertLogs("folderjump.search.orchestrator", level="WARNING") as logs:
            outcome = await orchestrator.search(SearchRequest(roots=(broken, PROJECTS), query="beta"))

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS / "beta"])
        self.assertIn("/broken", "\n".join(logs.output))

    async def test_result_cap_keeps_highest_scores(self) -> None:
        names = [f"x-item{idx:02d}" for idx in range(40)] + [f"item{idx:02d}" for idx in range(10)]
        tree = {PROJECTS: names}
        for name in names:
            tree[PROJECTS / name] = []
        # Walker keeps 20 per root; put the prefix matches on their own root.
        prefix_root = HOME / "Prefix"
        tree[prefix_root] = [f"item{idx:02d}" for idx in range(10)]
        for idx in range(10):
            tree[prefix_root / f"item{idx:02d}"] = []
        orchestrator = SearchOrchestrator(MemoryFilesystemReader(tree), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS, prefix_root), query="item", max_depth=1, max_results=10)
        )

        assert outcome is not None
        self.assertEqual(len(outcome.entries), 10)
        self.assertTrue(all(entry.score == 90 for entry in outcome.entries))

    async def test_fifty_matches_are_truncated_to_max_results(self) -> None:
        names = [f"match{idx:02d}" for idx in range(50)]
        tree = {PROJECTS: names, **{PROJECTS / name: [] for name in names}}
        orchestrator = SearchOrchestrator(MemoryFilesystemReader(tree), home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(roots=(PROJECTS,), query="match", max_depth=1, max_results=10)
        )

        assert outcome is not None
        self.assertEqual(len(outcome.entries), 10)

    async def test_same_query_twice_is_idempotent(self) -> None:
        orchestrator = SearchOrchestrator(self._reader(), home=HOME)
        request = SearchRequest(roots=(PROJECTS,), query="a", max_depth=3, history=(PROJECTS / "beta",))

        first = await orchestrator.search(request)
        second = await orchestrator.search(request)

        assert first is not None and second is not None
        self.assertEqual(_paths(first.entries), _paths(second.entries))


class BrowseModeTests(unittest.IsolatedAsyncioTestCase):
    async def test_browse_mode_walks_only_current_directory_without_history(self) -> None:
        reader = MemoryFilesystemReader(
            {
                PROJECTS: ["alpha"],
                PROJECTS / "alpha": ["docs", "src"],
                PROJECTS / "alpha" / "docs": ["old"],
                PROJECTS / "alpha" / "docs" / "old": [],
                PROJECTS / "alpha" / "src": [],
            }
        )
        orchestrator = SearchOrchestrator(reader, home=HOME)

        outcome = await orchestrator.search(
            SearchRequest(
                roots=(PROJECTS,),
                query="",
                history=(PROJECTS,),
                current_directory=PROJECTS / "alpha",
            )
        )

        assert outcome is not None
        self.assertEqual(_paths(outcome.entries), [PROJECTS / "alpha" / "docs", PROJECTS / "alpha" / "src"])
        self.assertTrue(all(entry.source_directory == PROJECTS / "alpha" for entry in outcome.entries))


class CancellationTests(unittest.IsolatedAsyncioTestCase):
    async def test_superseded_search_never_publishes_after_newer_search_starts(self) -> None:
        gate = asyncio.Event()
        reader = MemoryFilesystemReader(
            {
                PROJECTS: ["a-one", "ab-two"],
                PROJECTS / "a-one": [],
                PROJECTS / "ab-two": [],
            },
            gates={PROJECTS: gate},
        )
        orchestrator = SearchOrchestrator(reader, home=HOME)
        published: list[tuple[str, tuple[Path, ...]]] = []

        def recorder(label: str):
            return lambda snapshot: published.append((label, tuple(_paths(snapshot.entries))))

        first = asyncio.create_task(
            orchestrator.search(SearchRequest(roots=(PROJECTS,), query="a", max_depth=1), recorder("a"))
        )
        await asyncio.sleep(0.01)
        second = asyncio.create_task(
            orchestrator.search(SearchRequest(roots=(PROJECTS,), query="ab", max_depth=1), recorder("ab"))
        )
        await asyncio.sleep(0.01)
        gate.set()
        first_outcome, second_outcome = await asyncio.gather(first, second)

        self.assertIsNone(first_outcome)
        assert second_outcome is not None
        self.assertEqual(_paths(second_outcome.entries), [PROJECTS / "ab-two"])
        labels_after_second = [label for label, _ in published[1:]]
        self.assertNotIn("a", labels_after_second)
        self.assertEqual(published[-1][0], "ab")

    async def test_cancel_invalidates_in_flight_search(self) -> None:
        gate = asyncio.Event()
        reader = MemoryFilesystemReader({PROJECTS: ["alpha"], PROJECTS / "alpha": []}, gates={PROJECTS: gate})
        orchestrator = SearchOrchestrator(reader, home=HOME)
        on_update = mock.Mock()

        task = asyncio.create_task(orchestrator.search(SearchRequest(roots=(PROJECTS,), query="al"), on_update))
        await asyncio.sleep(0.01)
        on_update.reset_mock()
        orchestrator.cancel()
        gate.set()

        self.assertIsNone(await task)
        on_update.assert_not_called()

    async def test_unexpected_reader_error_propagates(self) -> None:
        reader = MemoryFilesystemReader({PROJECTS: []})
        orchestrator = SearchOrchestrator(reader, home=HOME)

        with mock.patch.object(reader, "list_entries", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                await orchestrator.search(SearchRequest(roots=(PROJECTS,), query="x"))


if __name__ == "__main__":
    unittest.main()
