"""SQL store tests: catalog seeding, enrollment persistence, profiles and change feeds."""
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from ruckplan.models.fitness_profile import FitnessProfileRecord
from ruckplan.models.program import Difficulty
from ruckplan.schemas.profile import FitnessGoal, UserFitnessProfile
from ruckplan.schemas.program import EnrollmentSchema, PaceData, ProgressRecordSchema
from ruckplan.services.errors import StoreError
from ruckplan.services.sql_store import DEFAULT_PROGRAMS, SqlProgramCatalog, session_scope
from ruckplan.services.stores import PROGRAMS, ChangeFeed
from tests.conftest import START, TEST_PROGRAMS, USER_ID


class TestChangeFeed:
    def test_publish_reaches_subscribers_until_unsubscribed(self):
        feed = ChangeFeed()
        received = []
        unsubscribe = feed.subscribe(received.append)

        feed.publish(PROGRAMS)
        unsubscribe()
        feed.publish(PROGRAMS)

        assert received == [PROGRAMS]
        assert feed.subscriber_count == 0


class TestProgramCatalog:
    def test_seeded_in_catalog_order(self, catalog):
        assert [p.title for p in catalog.list_programs()] == [p["title"] for p in TEST_PROGRAMS]

    def test_seed_only_when_empty(self, catalog):
        assert catalog.seed_defaults() == 0
        assert len(catalog.list_programs()) == len(TEST_PROGRAMS)

    def test_seed_publishes_change(self, session_factory):
        catalog = SqlProgramCatalog(session_factory)
        received = []
        catalog.changes.subscribe(received.append)

        assert catalog.seed_defaults() == len(DEFAULT_PROGRAMS)
        assert received == [PROGRAMS]

    def test_get_program(self, catalog, programs):
        ranger = programs["Ranger Ready"]

        assert catalog.get_program(ranger.id) == ranger
        assert catalog.get_program("missing") is None


class TestProgressStore:
    def test_create_enrollment_sets_targets(self, progress_store, programs):
        program = programs["Ranger Ready"]

        enrollment = progress_store.create_enrollment(USER_ID, program, 40, START, datetime(2024, 3, 4))

        assert enrollment.current_week == 1
        assert enrollment.current_weight == 40
        assert enrollment.target_weight == 40 + Difficulty.ADVANCED.weight_increment * 8
        assert enrollment.is_live

    def test_update_and_complete(self, progress_store, programs):
        enrollment = progress_store.create_enrollment(
            USER_ID, programs["Base Builder"], 30, START, datetime(2024, 3, 4)
        )

        progress_store.update_enrollment(enrollment.model_copy(update={"current_week": 3}))
        completed = progress_store.mark_enrollment_complete(enrollment.id, START)

        assert completed.current_week == 3
        assert completed.completed_at == START
        assert completed.next_workout_date is None
        assert not completed.is_live

    def test_progress_record_round_trip(self, progress_store, programs):
        record = ProgressRecordSchema(
            user_id=USER_ID,
            program_id=programs["Base Builder"].id,
            workout_date=START,
            week_number=2,
            workout_number=3,
            weight=35.5,
            distance=2.2,
            duration_seconds=1980.25,
            pace_data=PaceData(average_minutes_per_mile=15.0),
        )

        stored = progress_store.append_progress_record(record)
        [listed] = progress_store.list_progress_records(USER_ID)

        assert stored.id is not None
        assert listed == stored
        assert listed.pace_data.average_minutes_per_mile == 15.0
        assert listed.model_dump(exclude={"id"}) == record.model_dump(exclude={"id"})

    def test_record_progress_updates_enrollment_with_record(self, progress_store, programs):
        program = programs["Base Builder"]
        enrollment = progress_store.create_enrollment(USER_ID, program, 30, START, datetime(2024, 3, 4))
        record = ProgressRecordSchema(
            user_id=USER_ID, program_id=program.id, workout_date=START,
            week_number=1, workout_number=1, weight=31, distance=2.0, duration_seconds=1800,
        )

        updated = progress_store.record_progress(
            record, enrollment.model_copy(update={"current_weight": 31, "completion_percentage": 4.2})
        )

        assert updated.current_weight == 31
        assert updated.completion_percentage == 4.2
        [stored] = progress_store.list_progress_records(USER_ID)
        assert (stored.week_number, stored.workout_number) == (1, 1)

    def test_record_progress_for_unknown_enrollment_writes_nothing(self, progress_store):
        ghost = EnrollmentSchema(
            id="ghost", user_id=USER_ID, program_id="p", start_date=START,
            starting_weight=20, current_weight=20, target_weight=30,
        )
        record = ProgressRecordSchema(
            user_id=USER_ID, program_id="p", workout_date=START,
            week_number=1, workout_number=1, weight=20, distance=2.0, duration_seconds=1800,
        )

        with pytest.raises(StoreError):
            progress_store.record_progress(record, ghost)

        assert progress_store.list_progress_records(USER_ID) == []

    def test_missing_enrollment_is_a_store_error(self, progress_store):
        with pytest.raises(StoreError):
            progress_store.delete_enrollment("missing")

    def test_update_of_unknown_enrollment_fails(self, progress_store):
        ghost = EnrollmentSchema(
            id="ghost", user_id=USER_ID, program_id="p", start_date=START,
            starting_weight=20, current_weight=20, target_weight=30,
        )

        with pytest.raises(StoreError):
            progress_store.update_enrollment(ghost)


class TestProfileStore:
    def test_missing_profile_is_none(self, profile_backend):
        assert profile_backend.load_profile(USER_ID) is None

    def test_last_write_wins(self, profile_backend):
        profile_backend.save_profile(USER_ID, UserFitnessProfile())
        profile_backend.save_profile(USER_ID, UserFitnessProfile(goals=[FitnessGoal.WEIGHT_LOSS]))

        assert profile_backend.load_profile(USER_ID).goals == [FitnessGoal.WEIGHT_LOSS]

    def test_unreadable_payload_is_a_store_error(self, profile_backend, session_factory):
        with session_scope(session_factory) as db:
            db.add(FitnessProfileRecord(user_id=USER_ID, payload={"current_level": "legendary"}))

        with pytest.raises(StoreError):
            profile_backend.load_profile(USER_ID)


class TestSessionScope:
    def test_database_errors_become_store_errors(self, session_factory):
        with pytest.raises(StoreError):
            with session_scope(session_factory) as db:
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))
