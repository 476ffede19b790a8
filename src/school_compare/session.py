"""
Interactive comparison session.

The Kedro pipelines run the comparison as a batch job over the catalog. The session
runs the same nodes on demand for an interactive front end:

- both institutions' exports are loaded concurrently and cached per institution key
- ``update`` recomputes every view for a set of parameters; when updates overlap,
  only the most recent request is returned, older ones resolve to ``None``
- ``highlight`` styles the last embedding without recomputing it
- ``joint_publications`` lists the joint works of one pair from the last update
- ``Debouncer`` coalesces bursts of calls, e.g. keystrokes in a search box
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

import pandas as pd
from joblib import Parallel, delayed
from kedro.config import OmegaConfigLoader
from kedro_datasets.pandas import CSVDataset

from .pipelines.data_processing.nodes import (
    compute_denominators,
    filter_publications,
    normalize_institution_publications,
    normalize_institution_roster,
    resolve_window,
)
from .pipelines.data_analysis_collaboration.nodes import (
    compute_cross_institution_graph,
    create_collaboration_summary,
)
from .pipelines.data_analysis_collaboration.utils import joint_publications
from .pipelines.data_analysis_topics.nodes import (
    compute_publications_by_year,
    compute_term_frequencies,
    compute_topic_comparison,
    term_source,
)
from .pipelines.data_analysis_embeddings.nodes import build_author_terms
from .pipelines.data_analysis_embeddings.utils import (
    EmbeddingResult,
    InsufficientData,
    compute_embedding,
    highlight,
)

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.12


class SourceUnavailableError(RuntimeError):
    """A required export of an institution could not be loaded."""

    def __init__(self, institution: str, source: str, path: Any):
        super().__init__(
            f"Could not load the {source} export of institution '{institution}' ({path})"
        )
        self.institution = institution
        self.source = source
        self.path = path


@dataclass(frozen=True)
class InstitutionData:
    """Normalised exports of one institution, as cached by the session."""

    key: str
    label: str
    color: str
    roster: pd.DataFrame
    per_author: pd.DataFrame
    dedup: pd.DataFrame


@dataclass
class ComparisonResult:
    """Every view computed for one set of comparison parameters."""

    label_a: str
    label_b: str
    year_min: int
    year_max: int
    term_source: str
    denominators: Dict[str, int]
    publications_by_year: pd.DataFrame
    collaboration: Dict[str, pd.DataFrame]
    collaboration_summary: Dict[str, object]
    topics: Dict[str, object]
    embedding: Union[EmbeddingResult, InsufficientData]
    request_id: int = field(default=0)


def load_csv(path: str) -> pd.DataFrame:
    """Default loader for the exports listed in the configuration."""
    return CSVDataset(filepath=path).load()


class ComparisonSession:
    """
    Owns the per-institution cache and the last embedding of a front end.

    Args:
        config (Dict): The ``compare`` parameters: ``schools``, ``defaults``,
            ``options``, ``columns``, ``topics``, ``collaboration`` and ``embedding``.
        loader (Callable, optional): Loads one export path into a DataFrame. Defaults
            to ``load_csv``.
    """

    def __init__(
        self,
        config: Dict,
        loader: Optional[Callable[[str], pd.DataFrame]] = None,
    ):
        self.config = config
        self.loader = loader or load_csv
        self.last_embedding: Optional[Union[EmbeddingResult, InsufficientData]] = None
        self.last_works: Optional[pd.DataFrame] = None
        self._cache: Dict[str, InstitutionData] = {}
        self._lock = threading.Lock()
        self._latest_request = 0

    @classmethod
    def from_conf(cls, conf_source: str = "conf", env: Optional[str] = None, **kwargs):
        """Create a session from the project's Kedro configuration."""
        config_loader = OmegaConfigLoader(
            conf_source=conf_source, base_env="base", default_run_env="local", env=env
        )
        return cls(config_loader["parameters"]["compare"], **kwargs)

    @property
    def cached(self) -> Tuple[str, ...]:
        """Institution keys currently held in the cache."""
        return tuple(self._cache)

    def _load_source(self, key: str, source: str, path: Any) -> pd.DataFrame:
        try:
            return self.loader(path)
        except Exception as e:  # pylint: disable=broad-except
            raise SourceUnavailableError(key, source, path) from e

    def _load_optional_source(self, key: str, path: Any) -> pd.DataFrame:
        if not path:
            return pd.DataFrame()
        try:
            return self.loader(path)
        except Exception as e:  # pylint: disable=broad-except
            logger.warning(
                "Per-author export of %s unavailable (%s), continuing without it", key, e
            )
            return pd.DataFrame()

    def load_institution(self, key: str) -> InstitutionData:
        """
        Load and normalise the exports of one institution, once per session.

        Args:
            key (str): Institution key in ``config["schools"]``.

        Returns:
            InstitutionData: The cached, normalised exports.

        Raises:
            KeyError: If the key is not configured.
            SourceUnavailableError: If the roster or deduplicated export fails to load.
        """
        if key in self._cache:
            return self._cache[key]

        school = self.config["schools"][key]
        columns = self.config.get("columns", {})
        roster_columns = columns.get("roster")
        publication_columns = columns.get("publications")

        logger.info("Loading exports for %s", key)
        raw_roster = self._load_source(key, "roster", school.get("roster"))
        raw_dedup = self._load_source(key, "dedup", school.get("dedup"))
        raw_per_author = self._load_optional_source(key, school.get("perAuthor"))

        data = InstitutionData(
            key=key,
            label=school.get("label", key),
            color=school.get("color", ""),
            roster=normalize_institution_roster(raw_roster, key, roster_columns),
            per_author=normalize_institution_publications(
                raw_per_author, publication_columns
            ),
            dedup=normalize_institution_publications(raw_dedup, publication_columns),
        )
        with self._lock:
            return self._cache.setdefault(key, data)

    def load_pair(self, key_a: str, key_b: str) -> Tuple[InstitutionData, InstitutionData]:
        """Load two institutions concurrently; returns once both are available."""
        data_a, data_b = Parallel(n_jobs=2, backend="threading")(
            delayed(self.load_institution)(key) for key in (key_a, key_b)
        )
        return data_a, data_b

    def _resolve(self, params: Dict) -> Dict:
        defaults = self.config.get("defaults", {})
        options = {**self.config.get("options", {}), **params}
        window = resolve_window(
            {
                "yearMin": params.get("yearMin", defaults.get("yearMin")),
                "yearMax": params.get("yearMax", defaults.get("yearMax")),
            }
        )
        return {
            "A": params.get("A", defaults.get("A")),
            "B": params.get("B", defaults.get("B")),
            "window": {"yearMin": window["year_min"], "yearMax": window["year_max"]},
            "options": options,
            "embedding": {**self.config.get("embedding", {}), **params.get("embedding", {})},
        }

    def _compare(self, data_a: InstitutionData, data_b: InstitutionData, resolved: Dict):
        window = resolved["window"]
        options = resolved["options"]
        roster_a = data_a.roster.assign(institution="A")
        roster_b = data_b.roster.assign(institution="B")

        publications_a = filter_publications(data_a.dedup, roster_a, window, options)
        publications_b = filter_publications(data_b.dedup, roster_b, window, options)
        denominators = compute_denominators(roster_a, roster_b, options)

        graph = compute_cross_institution_graph(
            publications_a, publications_b, roster_a, roster_b
        )
        collaboration_summary = create_collaboration_summary(
            graph["pairs"],
            graph["works"],
            roster_a,
            roster_b,
            self.config.get("collaboration", {}).get("top_pairs", 8),
        )

        frequencies = compute_term_frequencies(publications_a, publications_b, options)
        topics = compute_topic_comparison(
            frequencies["a"],
            frequencies["b"],
            denominators,
            self.config.get("topics", {}),
        )
        topics["frequency_a"] = frequencies["a"]
        topics["frequency_b"] = frequencies["b"]

        embedding_params = resolved["embedding"]
        embedding = compute_embedding(
            build_author_terms(data_a.per_author, data_a.dedup, roster_a, window, options),
            build_author_terms(data_b.per_author, data_b.dedup, roster_b, window, options),
            roster_a,
            roster_b,
            method=embedding_params.get("method", "pca"),
            seed=embedding_params.get("seed"),
            n_iter=embedding_params.get("n_iter"),
        )

        bounds = resolve_window(window)
        return ComparisonResult(
            label_a=data_a.label,
            label_b=data_b.label,
            year_min=bounds["year_min"],
            year_max=bounds["year_max"],
            term_source=term_source(options),
            denominators=denominators,
            publications_by_year=compute_publications_by_year(
                publications_a, publications_b, window, denominators
            ),
            collaboration=graph,
            collaboration_summary=collaboration_summary,
            topics=topics,
            embedding=embedding,
        )

    def update(self, params: Optional[Dict] = None) -> Optional[ComparisonResult]:
        """
        Recompute every view for the given parameters.

        Args:
            params (Dict, optional): Overrides of the configured defaults and options:
                ``A``, ``B``, ``yearMin``, ``yearMax``, ``per_capita``,
                ``full_time_only``, ``use_topics``, ``normalize_types`` and an
                ``embedding`` mapping.

        Returns:
            Optional[ComparisonResult]: The result, or ``None`` when a newer update
                was requested while this one was computing.

        Raises:
            SourceUnavailableError: If a required export fails to load.
        """
        with self._lock:
            self._latest_request += 1
            request_id = self._latest_request

        resolved = self._resolve(params or {})
        data_a, data_b = self.load_pair(resolved["A"], resolved["B"])
        result = self._compare(data_a, data_b, resolved)
        result.request_id = request_id

        with self._lock:
            if request_id != self._latest_request:
                logger.debug(
                    "Discarding update %d, superseded by %d",
                    request_id,
                    self._latest_request,
                )
                return None
            self.last_embedding = result.embedding
            self.last_works = result.collaboration["works"]
        return result

    def highlight(self, query: str) -> pd.DataFrame:
        """Style the last embedding against a name query."""
        return highlight(self.last_embedding, query)

    def joint_publications(self, author_a: str, author_b: str) -> pd.DataFrame:
        """Joint works of one author pair in the last update, newest first."""
        if self.last_works is None:
            return pd.DataFrame()
        return joint_publications(self.last_works, author_a, author_b)


class Debouncer:
    """
    Delay calls to ``func`` until no new call arrived for ``wait`` seconds.

    Only the arguments of the last call in a burst are used.
    """

    def __init__(self, func: Callable, wait: float = DEBOUNCE_SECONDS):
        self.func = func
        self.wait = wait
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def __call__(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.wait, self.func, args, kwargs)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
