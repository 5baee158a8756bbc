"""
Tests for the scheduled challenge sweep job.
"""
from datetime import date, datetime
from unittest.mock import patch

from taskduel.models import Challenge
from taskduel.services import scheduler_service
from taskduel.constants import CHALLENGE_STATUS_ACTIVE, CHALLENGE_STATUS_COMPLETED


class TestRunChallengeSweep:
    """Tests for run_challenge_sweep function"""

    def test_closes_expired_challenges(self, session_factory, db_session, alice, bob, make_challenge):
        challenge = make_challenge(alice, bob, date(2025, 1, 1), date(2025, 1, 3), CHALLENGE_STATUS_ACTIVE)

        with patch.object(scheduler_service, "SessionLocal", session_factory):
            closed = scheduler_service.run_challenge_sweep(datetime(2025, 1, 4))

        assert closed == 1
        db_session.expire_all()
        stored = db_session.query(Challenge).filter(Challenge.id == challenge.id).one()
        assert stored.status == CHALLENGE_STATUS_COMPLETED

    def test_repeated_runs_are_harmless(self, session_factory, alice, bob, make_challenge):
        make_challenge(alice, bob, date(2025, 1, 1), date(2025, 1, 3), CHALLENGE_STATUS_ACTIVE)

        with patch.object(scheduler_service, "SessionLocal", session_factory):
            assert scheduler_service.run_challenge_sweep(datetime(2025, 1, 4)) == 1
            assert scheduler_service.run_challenge_sweep(datetime(2025, 1, 4)) == 0

    def test_errors_are_logged_not_raised(self, session_factory):
        with patch.object(scheduler_service, "SessionLocal", session_factory), \
                patch.object(scheduler_service.ChallengeService, "sweep_completions",
                             side_effect=RuntimeError("boom")):
            assert scheduler_service.run_challenge_sweep(datetime(2025, 1, 4)) == 0
