# synqit/services/scoring.py
"""
Compatibility scoring for partnership recommendations.

Pure functions only: the matching service loads the candidates and hands
plain values in here.

Score = 50 base
      + 20 when the candidate's development focus contains the caller's
      + 15 when the candidate's type complements the caller's type
      +  5 per tag shared with the caller (case-insensitive)
      +  2 per partnership the candidate already has (at most +10)
capped at 100.
"""
from typing import Iterable, Optional

from synqit.models.enums import ProjectType

BASE_SCORE = 50
FOCUS_BONUS = 20
COMPLEMENTARY_BONUS = 15
TAG_BONUS = 5
ACTIVITY_BONUS = 2
ACTIVITY_BONUS_CAP = 10
MAX_SCORE = 100

COMPLEMENTARY_TYPES: dict[ProjectType, frozenset[ProjectType]] = {
    ProjectType.DEFI: frozenset({ProjectType.INFRASTRUCTURE, ProjectType.WEB3_TOOLS, ProjectType.AI}),
    ProjectType.INFRASTRUCTURE: frozenset({ProjectType.DEFI, ProjectType.GAMEFI, ProjectType.SOCIAL}),
    ProjectType.GAMEFI: frozenset({ProjectType.INFRASTRUCTURE, ProjectType.NFT, ProjectType.METAVERSE}),
    ProjectType.NFT: frozenset({ProjectType.GAMEFI, ProjectType.METAVERSE, ProjectType.SOCIAL}),
    ProjectType.SOCIAL: frozenset({ProjectType.INFRASTRUCTURE, ProjectType.NFT, ProjectType.GAMEFI}),
    ProjectType.OTHER: frozenset({
        ProjectType.DEFI, ProjectType.INFRASTRUCTURE, ProjectType.GAMEFI, ProjectType.NFT, ProjectType.SOCIAL,
    }),
}


def _as_type(value) -> Optional[ProjectType]:
    if value is None or isinstance(value, ProjectType):
        return value
    try:
        return ProjectType(value)
    except ValueError:
        return None


def is_complementary(own_type, candidate_type) -> bool:
    own, other = _as_type(own_type), _as_type(candidate_type)
    if own is None or other is None:
        return False
    return other in COMPLEMENTARY_TYPES.get(own, frozenset())


def focus_matches(own_focus: Optional[str], candidate_focus: Optional[str]) -> bool:
    if not own_focus or not candidate_focus:
        return False
    return own_focus.strip().lower() in candidate_focus.lower()


def common_tags(own_tags: Iterable[str], candidate_tags: Iterable[str]) -> list[str]:
    """Candidate's spelling of every tag the two projects share."""
    mine = {t.strip().lower() for t in own_tags if t and t.strip()}
    shared = []
    seen = set()
    for tag in candidate_tags:
        key = tag.strip().lower()
        if key in mine and key not in seen:
            seen.add(key)
            shared.append(tag)
    return shared


def score_candidate(
    own_type,
    own_focus: Optional[str],
    own_tags: Iterable[str],
    candidate_type,
    candidate_focus: Optional[str],
    candidate_tags: Iterable[str],
    candidate_partnership_count: int = 0,
) -> tuple[int, list[str]]:
    """Returns (score, shared tags) for one candidate project."""
    score = BASE_SCORE
    if focus_matches(own_focus, candidate_focus):
        score += FOCUS_BONUS
    if is_complementary(own_type, candidate_type):
        score += COMPLEMENTARY_BONUS
    shared = common_tags(own_tags, candidate_tags)
    score += TAG_BONUS * len(shared)
    score += min(ACTIVITY_BONUS * max(candidate_partnership_count, 0), ACTIVITY_BONUS_CAP)
    return min(score, MAX_SCORE), shared
