"""Integration tests for the DB-backed progress store and prerequisite source."""

import uuid

import pytest
from sqlalchemy import select

from src.engines.prerequisites.prerequisite_source import SqlPrerequisiteSource
from src.engines.progression.progress_store import ProgressStore
from src.engines.progression.records import AdvancePath
from src.engines.progression.tiers import DifficultyTier
from src.kernel.errors import InvalidTransitionError, PrerequisiteLookupError
from src.kernel.events.event_store import EventStore
from src.kernel.models.event_log import EventLog, EventType
from src.kernel.models.topic import LearnerTopicProgress, Topic, TopicPrerequisite


@pytest.fixture
def ids():
    return uuid.uuid4(), uuid.uuid4()


async def record_many(store, learner_id, skill_id, outcomes):
    outcome = None
    for is_correct in outcomes:
        outcome = await store.record_attempt(learner_id, skill_id, is_correct)
    return outcome


class TestProgressStore:
    async def test_new_learner_starts_easy_with_empty_record(self, db_session, ids):
        outcome = await ProgressStore(db_session).check(*ids)
        assert outcome.tier is DifficultyTier.EASY
        assert outcome.record.total_attempts == 0
        assert outcome.decision.can_advance is False

    async def test_attempts_are_persisted(self, db_session, ids):
        store = ProgressStore(db_session)
        await record_many(store, *ids, [True, False, True])
        record = await store.get_record(*ids, DifficultyTier.EASY)
        assert record.total_attempts == 3
        assert record.correct_attempts == 2
        assert record.consecutive_correct == 1
        assert record.recent_outcomes == (True, False, True)

    async def test_attempts_are_logged(self, db_session, ids):
        learner_id, skill_id = ids
        store = ProgressStore(db_session)
        await record_many(store, learner_id, skill_id, [True, True])
        await db_session.flush()
        count = await EventStore(db_session).count_events(EventType.ATTEMPT_RECORDED, learner_id)
        assert count == 2

    async def test_advance_resets_records(self, db_session, ids):
        store = ProgressStore(db_session)
        outcome = await record_many(store, *ids, [True, True, True])
        assert outcome.decision.path_used is AdvancePath.STREAK

        assert await store.advance_tier(*ids) is DifficultyTier.MEDIUM
        assert (await store.get_record(*ids, DifficultyTier.EASY)).total_attempts == 0
        status = await store.check(*ids)
        assert status.tier is DifficultyTier.MEDIUM
        assert status.record.total_attempts == 0

    async def test_advance_below_bar_rejected(self, db_session, ids):
        store = ProgressStore(db_session)
        await record_many(store, *ids, [True, True])
        with pytest.raises(InvalidTransitionError):
            await store.advance_tier(*ids)
        assert await store.get_current_tier(*ids) is DifficultyTier.EASY

    async def test_exam_tier_has_no_decision(self, db_session, ids):
        store = ProgressStore(db_session)
        await store.set_tier(*ids, DifficultyTier.EXAM)
        outcome = await store.record_attempt(*ids, True)
        assert outcome.decision is None
        with pytest.raises(InvalidTransitionError):
            await store.advance_tier(*ids)

    async def test_tier_advanced_event(self, db_session, ids):
        learner_id, skill_id = ids
        store = ProgressStore(db_session)
        await record_many(store, learner_id, skill_id, [True, True, True])
        await store.advance_tier(learner_id, skill_id)
        await db_session.flush()

        rows = (await db_session.execute(
            select(EventLog).where(EventLog.event_type == EventType.TIER_ADVANCED.value)
        )).scalars().all()
        assert len(rows) == 1
        assert rows[0].payload == {"from_tier": "easy", "to_tier": "medium", "path_used": "streak"}


class TestSqlPrerequisiteSource:
    async def _seed(self, session_maker, learner_id):
        async with session_maker() as session:
            target = Topic(name="Quadratic Equations")
            factoring = Topic(name="Factoring")
            linear = Topic(name="Linear Equations")
            session.add_all([target, factoring, linear])
            await session.flush()
            session.add_all([
                TopicPrerequisite(topic_id=target.id, prerequisite_topic_id=factoring.id),
                TopicPrerequisite(topic_id=target.id, prerequisite_topic_id=linear.id),
                LearnerTopicProgress(learner_id=learner_id, topic_id=factoring.id, mastery_percentage=85.0),
            ])
            await session.commit()
            return target, factoring, linear

    async def test_missing_progress_counts_as_zero(self, session_maker):
        learner_id = uuid.uuid4()
        target, factoring, linear = await self._seed(session_maker, learner_id)

        infos = await SqlPrerequisiteSource(session_maker).fetch_prerequisites(str(learner_id), str(target.id))
        by_name = {i.name: i for i in infos}
        assert by_name["Factoring"].mastery_percentage == 85.0
        assert by_name["Linear Equations"].mastery_percentage == 0.0
        assert by_name["Linear Equations"].id == str(linear.id)

    async def test_topic_without_prerequisites(self, session_maker):
        infos = await SqlPrerequisiteSource(session_maker).fetch_prerequisites(
            str(uuid.uuid4()), str(uuid.uuid4())
        )
        assert infos == []

    async def test_invalid_id_raises_lookup_error(self, session_maker):
        with pytest.raises(PrerequisiteLookupError):
            await SqlPrerequisiteSource(session_maker).fetch_prerequisites("nope", str(uuid.uuid4()))
