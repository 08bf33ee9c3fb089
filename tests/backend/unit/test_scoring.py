"""
Unit tests for services.scoring.
Covers each bonus of the compatibility score and the cap.
"""
import pytest

from synqit.models.enums import ProjectType
from synqit.services.scoring import (
    BASE_SCORE,
    MAX_SCORE,
    common_tags,
    focus_matches,
    is_complementary,
    score_candidate,
)


class TestComplementaryTypes:

    def test_known_pairs(self):
        assert is_complementary(ProjectType.DEFI, ProjectType.INFRASTRUCTURE)
        assert is_complementary("GAMEFI", "NFT")
        assert not is_complementary(ProjectType.DEFI, ProjectType.GAMEFI)

    def test_table_is_directional(self):
        """AI lists nothing, so AI -> DEFI earns no bonus even though DEFI -> AI does."""
        assert is_complementary(ProjectType.DEFI, ProjectType.AI)
        assert not is_complementary(ProjectType.AI, ProjectType.DEFI)

    def test_missing_or_unknown_type(self):
        assert not is_complementary(None, ProjectType.DEFI)
        assert not is_complementary(ProjectType.DEFI, None)
        assert not is_complementary("NOT_A_TYPE", ProjectType.DEFI)


class TestFocusAndTags:

    def test_focus_is_case_insensitive_containment(self):
        assert focus_matches("Lending", "cross-chain lending markets")
        assert not focus_matches("lending markets", "lending")
        assert not focus_matches(None, "lending")
        assert not focus_matches("lending", "")

    def test_common_tags_use_candidate_spelling(self):
        assert common_tags(["DeFi", "yield"], ["defi", "Gaming", "DEFI"]) == ["defi"]

    def test_no_common_tags(self):
        assert common_tags([], ["defi"]) == []
        assert common_tags(["nft"], []) == []


class TestScoreCandidate:

    def test_base_score_only(self):
        score, shared = score_candidate(ProjectType.AI, None, [], ProjectType.SOCIAL, None, [])
        assert score == BASE_SCORE
        assert shared == []

    def test_all_bonuses(self):
        score, shared = score_candidate(
            ProjectType.DEFI, "lending", ["oracle"],
            ProjectType.INFRASTRUCTURE, "Lending infrastructure", ["Oracle"],
        )
        assert score == 50 + 20 + 15 + 5
        assert shared == ["Oracle"]

    @pytest.mark.parametrize("count, expected", [(0, 50), (1, 52), (4, 58), (5, 60), (40, 60)])
    def test_activity_bonus_is_capped(self, count, expected):
        score, _ = score_candidate(None, None, [], None, None, [], candidate_partnership_count=count)
        assert score == expected

    def test_total_is_capped(self):
        tags = [f"tag{i}" for i in range(10)]
        score, shared = score_candidate(
            ProjectType.DEFI, "defi", tags, ProjectType.AI, "defi ai", tags, candidate_partnership_count=10
        )
        assert len(shared) == 10
        assert score == MAX_SCORE
