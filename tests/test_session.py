"""Tests for the interactive comparison session."""

import threading
import time

import pandas as pd
import pytest

from school_compare.pipelines.data_analysis_embeddings.utils import EmbeddingResult
from school_compare.session import (
    ComparisonSession,
    Debouncer,
    SourceUnavailableError,
)


@pytest.fixture
def exports(raw_roster_a, raw_roster_b, raw_publications):
    """Export tables by path, as a loader would find them on disk."""
    extra_roster_a = pd.concat(
        [
            raw_roster_a,
            pd.DataFrame(
                {"OpenAlexID": ["A3"], "Name": ["Grace Hopper"], "Appointment": ["Full-time"]}
            ),
        ],
        ignore_index=True,
    )
    extra_publications = pd.concat(
        [
            raw_publications,
            pd.DataFrame(
                {
                    "id": ["W3"],
                    "publication_year": [2022],
                    "type": ["article"],
                    "authorships__author__id": ["A3"],
                    "primary_topic__display_name": ["Compilers"],
                }
            ),
        ],
        ignore_index=True,
    )
    return {
        "a/roster.csv": extra_roster_a,
        "a/dedup.csv": extra_publications,
        "b/roster.csv": raw_roster_b,
        "b/dedup.csv": raw_publications,
    }


@pytest.fixture
def config():
    return {
        "schools": {
            "school_a": {
                "label": "School A",
                "roster": "a/roster.csv",
                "perAuthor": "a/per_author.csv",
                "dedup": "a/dedup.csv",
            },
            "school_b": {
                "label": "School B",
                "roster": "b/roster.csv",
                "dedup": "b/dedup.csv",
            },
        },
        "defaults": {"A": "school_a", "B": "school_b", "yearMin": 2021, "yearMax": 2023},
        "options": {
            "per_capita": True,
            "full_time_only": True,
            "use_topics": True,
            "normalize_types": True,
        },
        "embedding": {"method": "pca", "seed": 1},
    }


class RecordingLoader:
    """Loader serving in-memory exports and counting calls per path."""

    def __init__(self, exports):
        self.exports = exports
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, path):
        with self._lock:
            self.calls.append(path)
        if path not in self.exports:
            raise FileNotFoundError(path)
        return self.exports[path].copy()


class TestComparisonSession:
    """Test cases for ComparisonSession."""

    def test_update_computes_every_view(self, config, exports):
        """Test the example comparison end to end."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        result = session.update()

        assert result.label_a == "School A"
        assert result.denominators["headcount_a"] == 3
        assert result.denominators["headcount_b"] == 1
        pairs = result.collaboration["pairs"]
        assert list(zip(pairs["author_a"], pairs["author_b"])) == [("A1", "b1")]
        bars = result.publications_by_year.set_index("year")
        assert bars.loc[2022, "value_b"] == 1.0
        assert result.topics["frequency_b"].to_dict() == {"virology": 1}
        assert isinstance(result.embedding, EmbeddingResult)
        assert session.last_embedding is result.embedding

    def test_institutions_cached(self, config, exports):
        """Test that each export is loaded once per session."""
        loader = RecordingLoader(exports)
        session = ComparisonSession(config, loader=loader)
        session.update()
        session.update({"yearMin": 2022})

        assert sorted(loader.calls) == sorted(
            ["a/roster.csv", "a/dedup.csv", "a/per_author.csv", "b/roster.csv", "b/dedup.csv"]
        )
        assert set(session.cached) == {"school_a", "school_b"}

    def test_missing_per_author_export_degrades(self, config, exports):
        """Test that the optional per-author export may be unavailable."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        data = session.load_institution("school_a")
        assert data.per_author.empty
        assert len(data.roster) == 3

    def test_missing_required_export(self, config, exports):
        """Test that a missing roster names the institution and source."""
        del exports["b/roster.csv"]
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        with pytest.raises(SourceUnavailableError) as error:
            session.update()
        assert error.value.institution == "school_b"
        assert error.value.source == "roster"
        assert isinstance(error.value, RuntimeError)

    def test_unknown_institution(self, config, exports):
        """Test that an unconfigured key is rejected."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        with pytest.raises(KeyError):
            session.load_institution("school_z")

    def test_last_request_wins(self, config, exports, monkeypatch):
        """Test that an update overtaken by a newer one is discarded."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        compare = session._compare
        started = threading.Event()
        release = threading.Event()

        def slow_first_compare(*args):
            if not started.is_set():
                started.set()
                release.wait(5)
            return compare(*args)

        monkeypatch.setattr(session, "_compare", slow_first_compare)
        outcome = {}
        first = threading.Thread(
            target=lambda: outcome.update(first=session.update({"yearMax": 2022}))
        )
        first.start()
        assert started.wait(5)

        second = session.update({"yearMax": 2023})
        release.set()
        first.join(5)

        assert outcome["first"] is None
        assert second is not None
        assert second.year_max == 2023
        assert session.last_embedding is second.embedding

    def test_highlight_reuses_last_embedding(self, config, exports):
        """Test that highlighting styles the last embedding without moving it."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        assert session.highlight("ada").empty

        result = session.update()
        coordinates = result.embedding.points[["x", "y"]].copy()
        overlay = session.highlight("ada").set_index("author_id")

        assert overlay.loc["A1", "matched"]
        assert not overlay.loc["A2", "matched"]
        pd.testing.assert_frame_equal(result.embedding.points[["x", "y"]], coordinates)

    def test_joint_publications_of_last_update(self, config, exports):
        """Test that a pair's joint works come from the last update."""
        session = ComparisonSession(config, loader=RecordingLoader(exports))
        assert session.joint_publications("A1", "b1").empty

        session.update()
        works = session.joint_publications("b1", "A1")
        assert works["work_id"].tolist() == ["W1"]
        assert works.iloc[0]["title"] == "Joint paper"
        assert session.joint_publications("A2", "b1").empty


class TestDebouncer:
    """Test cases for Debouncer."""

    def test_burst_coalesced(self):
        """Test that only the last call of a burst runs."""
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            done.set()

        debounced = Debouncer(record, wait=0.05)
        for value in ("a", "ad", "ada"):
            debounced(value)
        assert done.wait(2)
        time.sleep(0.1)
        assert calls == ["ada"]

    def test_cancel(self):
        """Test that a cancelled call never runs."""
        calls = []
        debounced = Debouncer(calls.append, wait=0.05)
        debounced("x")
        debounced.cancel()
        time.sleep(0.1)
        assert calls == []
