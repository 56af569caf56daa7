"""Tests for the claim eligibility policy."""

import random

import pytest

from spigot.core.ledger import AccountRecord
from spigot.core.policy import ClaimDecision, DenialReason, FaucetPolicy, format_wait

DAY = 86400


@pytest.fixture
def policy():
    """Policy with 10 per claim, 50 lifetime and a one day cooldown."""
    return FaucetPolicy(faucet_amount=10, cooldown_seconds=DAY, max_claim_amount=50)


class TestFaucetPolicyInit:
    """Tests for policy construction."""

    def test_rejects_non_positive_amount(self):
        """Faucet amount must be positive."""
        with pytest.raises(ValueError):
            FaucetPolicy(faucet_amount=0, cooldown_seconds=DAY, max_claim_amount=50)

    def test_rejects_negative_cooldown(self):
        """Cooldown cannot be negative."""
        with pytest.raises(ValueError):
            FaucetPolicy(faucet_amount=10, cooldown_seconds=-1, max_claim_amount=50)

    def test_rejects_cap_below_amount(self):
        """Lifetime cap must allow at least one claim."""
        with pytest.raises(ValueError):
            FaucetPolicy(faucet_amount=10, cooldown_seconds=DAY, max_claim_amount=5)

    def test_max_claims(self, policy):
        """max_claims is the number of full grants under the cap."""
        assert policy.max_claims == 5


class TestEvaluate:
    """Tests for FaucetPolicy.evaluate."""

    def test_fresh_account_eligible(self, policy):
        """A fresh account may claim the faucet amount."""
        decision = policy.evaluate(AccountRecord(), paused=False, now=0)

        assert decision == ClaimDecision(eligible=True, reason=None, grant_amount=10)

    def test_paused_checked_first(self, policy):
        """Pause wins over every other reason."""
        record = AccountRecord(last_claim_at=0, total_claimed=50)

        decision = policy.evaluate(record, paused=True, now=1)

        assert decision.reason is DenialReason.PAUSED
        assert decision.grant_amount == 0

    def test_cap_checked_before_cooldown(self, policy):
        """A capped account in cooldown reports the cap."""
        record = AccountRecord(last_claim_at=0, total_claimed=50)

        decision = policy.evaluate(record, paused=False, now=1)

        assert decision.reason is DenialReason.CAP_REACHED

    def test_cooldown_active(self, policy):
        """A claim inside the cooldown window is refused."""
        record = AccountRecord(last_claim_at=0, total_claimed=10)

        decision = policy.evaluate(record, paused=False, now=DAY - 1)

        assert decision.eligible is False
        assert decision.reason is DenialReason.COOLDOWN_ACTIVE

    def test_cooldown_boundary_inclusive(self, policy):
        """Exactly one cooldown after the last claim is allowed."""
        record = AccountRecord(last_claim_at=0, total_claimed=10)

        assert policy.evaluate(record, paused=False, now=DAY).eligible is True

    def test_zero_cooldown(self):
        """With no cooldown only the cap limits claims."""
        policy = FaucetPolicy(faucet_amount=10, cooldown_seconds=0, max_claim_amount=20)
        record = AccountRecord(last_claim_at=5, total_claimed=10)

        assert policy.evaluate(record, paused=False, now=5).eligible is True

    def test_partial_grant_not_allowed(self):
        """A remaining allowance smaller than the amount counts as capped."""
        policy = FaucetPolicy(faucet_amount=10, cooldown_seconds=DAY, max_claim_amount=25)
        record = AccountRecord(last_claim_at=0, total_claimed=20)

        decision = policy.evaluate(record, paused=False, now=10 * DAY)

        assert decision.reason is DenialReason.CAP_REACHED
        assert policy.remaining_allowance(record) == 5

    def test_can_claim_matches_evaluate(self, policy):
        """can_claim agrees with evaluate over random histories."""
        rng = random.Random(1234)
        for _ in range(500):
            total = rng.choice(range(0, 51, 10))
            last = None if total == 0 else rng.randint(0, 5 * DAY)
            record = AccountRecord(last_claim_at=last, total_claimed=total)
            paused = rng.random() < 0.2
            now = rng.randint(0, 7 * DAY)

            decision = policy.evaluate(record, paused, now)

            assert policy.can_claim(record, paused, now) == decision.eligible
            assert (decision.grant_amount > 0) == decision.eligible


class TestQueries:
    """Tests for read-only policy queries."""

    def test_remaining_allowance(self, policy):
        """Remaining allowance counts down to zero."""
        assert policy.remaining_allowance(AccountRecord()) == 50
        assert policy.remaining_allowance(AccountRecord(last_claim_at=0, total_claimed=30)) == 20
        assert policy.remaining_allowance(AccountRecord(last_claim_at=0, total_claimed=50)) == 0

    def test_time_until_next_claim(self, policy):
        """Cooldown counts down from the full period to zero."""
        record = AccountRecord(last_claim_at=0, total_claimed=10)

        assert policy.time_until_next_claim(AccountRecord(), now=0) == 0
        assert policy.time_until_next_claim(record, now=0) == DAY
        assert policy.time_until_next_claim(record, now=100) == DAY - 100
        assert policy.time_until_next_claim(record, now=DAY) == 0
        assert policy.time_until_next_claim(record, now=2 * DAY) == 0

    def test_describe(self, policy):
        """describe explains each decision."""
        fresh = AccountRecord()
        waiting = AccountRecord(last_claim_at=0, total_claimed=10)
        capped = AccountRecord(last_claim_at=0, total_claimed=50)

        assert policy.describe(policy.evaluate(fresh, False, 0), fresh, 0) == "Claim available"
        assert policy.describe(policy.evaluate(fresh, True, 0), fresh, 0) == "Faucet is paused"
        assert (
            policy.describe(policy.evaluate(capped, False, 0), capped, 0)
            == "Lifetime claim limit reached"
        )
        assert (
            policy.describe(policy.evaluate(waiting, False, 100), waiting, 100)
            == "Please wait 23h 58m before next claim"
        )


class TestFormatWait:
    """Tests for format_wait."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (30, "Please wait 30 seconds before next claim"),
            (300, "Please wait 5 minutes before next claim"),
            (7200, "Please wait 2 hours before next claim"),
            (5400, "Please wait 1h 30m before next claim"),
        ],
    )
    def test_formats(self, seconds, expected):
        """Durations render in the largest sensible units."""
        assert format_wait(seconds) == expected
