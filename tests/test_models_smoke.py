"""Smoke tests for the pydantic models."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from footsies.models.analysis import ImbalanceResult, Priority
from footsies.models.session import (
    AccumulatingSession,
    SaveResult,
    SaveStatus,
    SessionOptions,
    TrainingSession,
)
from footsies.models.skills import DEFAULT_SKILLS, Skill, SkillRegistry, UnknownSkillError
from footsies.models.user_profile import UserProfile


class TestSkillRegistry:
    def test_defaults_to_builtin_skills(self):
        registry = SkillRegistry()
        assert registry.names == DEFAULT_SKILLS
        assert len(registry) == 6
        assert Skill.DRIBBLING in registry

    def test_normalizes_and_dedups(self):
        registry = SkillRegistry(["Dribbling", "dribbling", " juggling "])
        assert registry.names == ("dribbling", "juggling")
        assert "Juggling" in registry

    def test_validate_returns_canonical_name(self):
        assert SkillRegistry().validate(" Shooting ") == "shooting"

    def test_validate_rejects_unknown(self):
        with pytest.raises(UnknownSkillError):
            SkillRegistry(["dribbling"]).validate("shooting")

    def test_empty_registry_rejected(self):
        with pytest.raises(ValueError):
            SkillRegistry([])

    def test_non_string_not_contained(self):
        assert 3 not in SkillRegistry()


class TestUserProfile:
    def test_new_profile_defaults(self):
        profile = UserProfile.new("alice", username="Alice")
        assert profile.level == 1
        assert profile.xp == 0
        assert profile.xp_threshold == 100
        assert profile.total_sessions == 0
        assert profile.last_training_date is None
        assert set(profile.skills) == set(DEFAULT_SKILLS)
        assert all(level == 1 for level in profile.skill_levels.values())
        assert all(t == 100 for t in profile.skill_thresholds.values())
        assert profile.username == "Alice"

    def test_new_profile_custom_threshold(self):
        profile = UserProfile.new("bob", skills=["juggling"], initial_threshold=50)
        assert profile.xp_threshold == 50
        assert profile.skill_thresholds == {"juggling": 50}

    def test_skill_state_defaults_missing_skill(self):
        profile = UserProfile.new("alice", skills=["dribbling"])
        assert profile.skill_state("juggling") == (1, 0, 100)
        assert profile.skill_state("juggling", initial_threshold=80) == (1, 0, 80)

    def test_rejects_negative_xp(self):
        with pytest.raises(ValidationError):
            UserProfile(user_id="alice", xp=-1)

    def test_rejects_zero_threshold(self):
        with pytest.raises(ValidationError):
            UserProfile(user_id="alice", xp_threshold=0)


class TestTrainingSession:
    def test_naive_timestamp_is_utc(self):
        session = TrainingSession(id="s1", timestamp="2026-03-18T10:00:00", metrics={"dribbling": 5})
        assert session.timestamp.tzinfo is not None
        assert session.timestamp.utcoffset().total_seconds() == 0

    def test_date_derived_from_timestamp(self):
        session = TrainingSession(
            id="s1",
            timestamp=datetime(2026, 3, 18, 23, 30, tzinfo=timezone.utc),
            metrics={"dribbling": 5},
        )
        assert session.date == date(2026, 3, 18)

    def test_skills_changed_derived_from_metrics(self):
        session = TrainingSession(
            id="s1", timestamp="2026-03-18T10:00:00Z", metrics={"shooting": 5, "passing": 0}
        )
        assert session.skills_changed == ["shooting", "passing"]

    def test_mismatched_skills_changed_rejected(self):
        with pytest.raises(ValidationError):
            TrainingSession(
                id="s1",
                timestamp="2026-03-18T10:00:00Z",
                metrics={"shooting": 5},
                skills_changed=["dribbling"],
            )

    def test_duplicate_skills_changed_rejected(self):
        with pytest.raises(ValidationError):
            TrainingSession(
                id="s1",
                timestamp="2026-03-18T10:00:00Z",
                metrics={"shooting": 5},
                skills_changed=["shooting", "shooting"],
            )

    def test_negative_metric_rejected(self):
        with pytest.raises(ValidationError):
            TrainingSession(id="s1", timestamp="2026-03-18T10:00:00Z", metrics={"shooting": -5})

    def test_metrics_required(self):
        with pytest.raises(ValidationError):
            TrainingSession(id="s1", timestamp="2026-03-18T10:00:00Z")


class TestAccumulatingSession:
    def test_add_tracks_first_touch_order(self):
        session = AccumulatingSession()
        session.add("shooting", 5, 60)
        session.add("dribbling", 10, 30)
        session.add("shooting", 3)
        assert session.metrics == {"shooting": 8, "dribbling": 10}
        assert session.skills_changed == ["shooting", "dribbling"]
        assert session.total_duration == 90

    def test_zero_xp_still_marks_skill(self):
        session = AccumulatingSession()
        session.add("speed", 0)
        assert not session.is_empty
        assert session.skills_changed == ["speed"]

    def test_snapshot_copies_options(self):
        options = SessionOptions(title="Morning", intensity=8, date=date(2026, 1, 2))
        session = AccumulatingSession(options=options)
        session.add("passing", 12, 600)
        stamp = datetime(2026, 3, 18, 9, 0, tzinfo=timezone.utc)

        record = session.snapshot(stamp, session_id="fixed")

        assert record.id == "fixed"
        assert record.timestamp == stamp
        assert record.end_time == stamp
        assert record.date == date(2026, 1, 2)
        assert record.title == "Morning"
        assert record.intensity == 8
        assert record.duration == 600
        assert record.metrics == {"passing": 12}

    def test_snapshot_is_detached(self):
        session = AccumulatingSession()
        session.add("passing", 12)
        record = session.snapshot(datetime(2026, 3, 18, tzinfo=timezone.utc))
        session.add("passing", 1)
        assert record.metrics == {"passing": 12}
        assert len(record.id) == 32


class TestSaveResult:
    @pytest.mark.parametrize("status,success", [
        (SaveStatus.SAVED, True),
        (SaveStatus.SKIPPED, True),
        (SaveStatus.NOTHING_TO_SAVE, False),
        (SaveStatus.FAILED, False),
    ])
    def test_success_flag(self, status, success):
        result = SaveResult(status=status)
        assert result.success is success
        assert result.model_dump()["success"] is success


class TestAnalysisModels:
    def test_default_imbalance_uses_sentinel(self):
        result = ImbalanceResult()
        assert result.strongest_skill.name == "None"
        assert result.weakest_skill.name == "None"
        assert result.imbalance_score == 0

    def test_priority_rank_order(self):
        assert Priority.HIGH.rank < Priority.MEDIUM.rank < Priority.LOW.rank
