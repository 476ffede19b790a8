"""Record normalisation and roster filtering utilities."""

from .identifiers import normalize_id, normalize_work_id, split_ids
from .records import normalize_roster, normalize_publications
from .filtering import (
    DEFAULT_TYPES,
    clamp_year,
    filter_to_roster,
    headcount,
    per_capita_scale,
    roster_ids,
)
