"""REST API routes for profiles, training sessions, stats and recommendations."""

import structlog
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from footsies.analysis.imbalance import skill_imbalance
from footsies.analysis.recommendations import skill_recommendations, training_recommendations
from footsies.config import Settings, get_settings
from footsies.models.analysis import ImbalanceResult, Recommendation
from footsies.models.session import (
    AccumulatingSession,
    SaveResult,
    SaveStatus,
    SessionOptions,
    utc_now,
)
from footsies.models.skills import SkillRegistry, UnknownSkillError
from footsies.models.stats import (
    DailyAggregate,
    FrequencyStats,
    LastSessionSummary,
    SessionAverages,
    SkillProgress,
)
from footsies.models.user_profile import UserProfile
from footsies.progression.engine import (
    MAX_XP_GAIN,
    LevelUpEvent,
    ProgressionEngine,
    ProgressionError,
)
from footsies.progression.quests import (
    Quest,
    TrainingModule,
    find_quest,
    generate_quests,
    training_modules,
)
from footsies.sessions.context import SessionContextRegistry
from footsies.sessions.persister import SessionPersister
from footsies.sessions.recorder import initialize_session, record_skill_training
from footsies.stats.frequency import training_frequency
from footsies.stats.metrics import daily_aggregates, session_averages
from footsies.stats.progress import last_session, skill_progress, time_since_last_improvement
from footsies.storage.errors import StorageError
from footsies.storage.session_history import list_sessions
from footsies.storage.user_profile import create_profile, load_profile, modify_profile

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

# One training context per signed-in user, for the lifetime of the process.
contexts = SessionContextRegistry()


class CreateUserRequest(BaseModel):
    user_id: str = Field(min_length=1)
    username: str | None = None
    email: str | None = None


class QuestCompletionRequest(BaseModel):
    quest_id: int | None = None
    skill: str | None = None
    xp: int = Field(default=0, ge=0, le=MAX_XP_GAIN)
    skill_xp: int = Field(default=0, ge=0, le=MAX_XP_GAIN)
    duration_seconds: int = Field(default=0, ge=0)


class QuestCompletionResponse(BaseModel):
    profile: UserProfile
    level_ups: list[LevelUpEvent]
    notifications: list[str]
    session: AccumulatingSession


class QuestBoard(BaseModel):
    daily: list[Quest]
    weekly: list[Quest]
    modules: dict[str, list[TrainingModule]]


class MetricsResponse(BaseModel):
    daily: list[DailyAggregate]
    averages: SessionAverages


def _skills(settings: Settings) -> SkillRegistry:
    return SkillRegistry(settings.skills)


def _persister(settings: Settings) -> SessionPersister:
    return SessionPersister(
        settings.storage_dir,
        dedup_window_seconds=settings.dedup_window_seconds,
        clear_on_failure=settings.clear_session_on_failure,
    )


def _require_profile(settings: Settings, user_id: str) -> UserProfile:
    try:
        profile = load_profile(settings.storage_dir, user_id)
    except StorageError:
        logger.exception("profile_load_failed", user_id=user_id)
        raise HTTPException(status_code=503, detail="Could not load profile")
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


def _history(settings: Settings, user_id: str, limit: int | None = None) -> list[dict]:
    try:
        return list_sessions(settings.storage_dir, user_id, limit=limit)
    except StorageError:
        logger.exception("session_history_load_failed", user_id=user_id)
        raise HTTPException(status_code=503, detail="Could not load training sessions")


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.post("/users", status_code=201)
async def create_user(request: CreateUserRequest) -> UserProfile:
    """Create the signup profile: level 1 with every skill untouched."""
    settings = get_settings()
    profile = UserProfile.new(
        request.user_id,
        skills=_skills(settings),
        initial_threshold=settings.initial_threshold,
        username=request.username,
        email=request.email,
    )
    try:
        create_profile(settings.storage_dir, profile)
    except StorageError:
        raise HTTPException(status_code=409, detail="User already exists")
    logger.info("profile_created", user_id=profile.user_id)
    return profile


@router.get("/users/{user_id}")
async def get_user(user_id: str) -> UserProfile:
    return _require_profile(get_settings(), user_id)


@router.post("/users/{user_id}/sign-in")
async def sign_in(user_id: str, options: SessionOptions | None = None) -> AccumulatingSession:
    """Start a training context and an empty session for the user."""
    settings = get_settings()
    _require_profile(settings, user_id)
    context = contexts.sign_in(user_id)
    return initialize_session(context, options)


@router.post("/users/{user_id}/sign-out")
async def sign_out(user_id: str) -> SaveResult:
    """Save whatever was trained, then drop the user's context."""
    context = contexts.sign_out(user_id)
    if context is None:
        return SaveResult(
            status=SaveStatus.NOTHING_TO_SAVE, message="Not signed in", session_ended=True
        )
    return _persister(get_settings()).save_and_end_session(context)


@router.post("/users/{user_id}/quests/complete")
async def complete_quest(user_id: str, request: QuestCompletionRequest) -> QuestCompletionResponse:
    """Apply a quest's XP to the profile and record it in the current session."""
    settings = get_settings()
    _require_profile(settings, user_id)

    skill, xp, skill_xp = request.skill, request.xp, request.skill_xp
    if request.quest_id is not None:
        quest = find_quest(request.quest_id)
        if quest is None:
            raise HTTPException(status_code=404, detail="Quest not found")
        skill, xp, skill_xp = quest.skill, quest.xp, quest.skill_xp
    if skill is None:
        raise HTTPException(status_code=422, detail="A skill or quest_id is required")

    engine = ProgressionEngine.from_settings(settings)
    events: list[LevelUpEvent] = []

    def award(stored: UserProfile) -> None:
        events.extend(engine.complete_quest(stored, skill, xp, skill_xp))

    try:
        skill = _skills(settings).validate(skill)
        profile = modify_profile(settings.storage_dir, user_id, award)
    except (UnknownSkillError, ProgressionError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except (OSError, StorageError):
        logger.exception("profile_save_failed", user_id=user_id)
        raise HTTPException(status_code=503, detail="Could not save progress")
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")

    session = record_skill_training(
        contexts.get_or_create(user_id), skill, skill_xp, request.duration_seconds
    )
    return QuestCompletionResponse(
        profile=profile,
        level_ups=events,
        notifications=[event.message for event in events],
        session=session,
    )


@router.post("/users/{user_id}/sessions/save")
async def save_session(user_id: str) -> SaveResult:
    """Persist the current session; safe to call more than once."""
    context = contexts.get(user_id)
    if context is None:
        return SaveResult(status=SaveStatus.NOTHING_TO_SAVE, message="No active session")
    return _persister(get_settings()).save_current_session(context)


@router.get("/users/{user_id}/sessions")
async def get_sessions(user_id: str, limit: int | None = Query(default=10, ge=1)) -> list[dict]:
    """Stored sessions, newest first."""
    return _history(get_settings(), user_id, limit=limit)


@router.get("/users/{user_id}/sessions/last")
async def get_last_session(user_id: str) -> LastSessionSummary | None:
    return last_session(_history(get_settings(), user_id))


@router.get("/users/{user_id}/stats/frequency")
async def get_frequency(user_id: str) -> FrequencyStats:
    return training_frequency(_history(get_settings(), user_id), utc_now())


@router.get("/users/{user_id}/stats/progress")
async def get_progress(user_id: str) -> SkillProgress:
    settings = get_settings()
    return skill_progress(_history(settings, user_id), utc_now(), _skills(settings))


@router.get("/users/{user_id}/stats/metrics")
async def get_metrics(user_id: str) -> MetricsResponse:
    settings = get_settings()
    history = _history(settings, user_id)
    return MetricsResponse(
        daily=daily_aggregates(history),
        averages=session_averages(history, _skills(settings)),
    )


@router.get("/users/{user_id}/stats/stagnation")
async def get_stagnation(user_id: str) -> dict[str, int | None]:
    settings = get_settings()
    return time_since_last_improvement(_history(settings, user_id), _skills(settings), utc_now())


@router.get("/users/{user_id}/stats/imbalance")
async def get_imbalance(user_id: str) -> ImbalanceResult:
    profile = _require_profile(get_settings(), user_id)
    return skill_imbalance(profile.skill_levels, profile.skills)


@router.get("/users/{user_id}/recommendations")
async def get_recommendations(user_id: str, skill: str | None = None) -> list[Recommendation]:
    """General recommendations, or drills for one skill when ``skill`` is given."""
    settings = get_settings()
    registry = _skills(settings)
    profile = _require_profile(settings, user_id)
    history = _history(settings, user_id)
    now = utc_now()

    if skill is not None:
        try:
            skill = registry.validate(skill)
        except UnknownSkillError as e:
            raise HTTPException(status_code=422, detail=str(e))
        stagnation = time_since_last_improvement(history, [skill], now)
        return skill_recommendations(skill, stagnation[skill])

    return training_recommendations(
        training_frequency(history, now),
        skill_imbalance(profile.skill_levels, profile.skills),
        time_since_last_improvement(history, registry, now),
        min_sessions_per_week=settings.recommended_sessions_per_week,
    )


@router.get("/users/{user_id}/quests")
async def get_quests(user_id: str) -> QuestBoard:
    """Today's quest draw and the training modules unlocked per skill."""
    settings = get_settings()
    profile = _require_profile(settings, user_id)
    daily, weekly = generate_quests(profile.level)
    modules = {}
    for skill in _skills(settings):
        level, _, _ = profile.skill_state(skill, settings.initial_threshold)
        modules[skill] = training_modules(skill, level)
    return QuestBoard(daily=daily, weekly=weekly, modules=modules)
