"""Tests for the admin controller."""

import pytest

from spigot.core.admin import AdminController
from spigot.core.errors import InvalidAdmin, OnlyAdmin
from spigot.core.events import AdminTransferred, EventBus, FaucetPausedChanged
from spigot.core.identity import ZERO_ADDRESS

ADMIN = "0x1000000000000000000000000000000000000001"
ALICE = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def admin(events):
    return AdminController(ADMIN, events)


class TestAdminController:
    """Tests for AdminController."""

    def test_initial_state(self, admin):
        """Deployer is admin and the faucet starts unpaused."""
        assert admin.admin == ADMIN
        assert admin.paused is False
        assert admin.is_admin(ADMIN)
        assert not admin.is_admin(ALICE)

    def test_null_admin_rejected(self, events):
        """The zero address cannot be the initial admin."""
        with pytest.raises(InvalidAdmin):
            AdminController(ZERO_ADDRESS, events)

    def test_set_paused_by_admin(self, admin, events):
        """Admin can pause and unpause, each emitting an event."""
        admin.set_paused(ADMIN, True)
        assert admin.paused is True

        admin.set_paused(ADMIN, False)
        assert admin.paused is False

        assert events.recent() == [
            FaucetPausedChanged(paused=True),
            FaucetPausedChanged(paused=False),
        ]

    def test_set_paused_idempotent(self, admin, events):
        """Setting the current value succeeds and still emits."""
        admin.set_paused(ADMIN, False)

        assert admin.paused is False
        assert events.recent() == [FaucetPausedChanged(paused=False)]

    def test_set_paused_non_admin(self, admin, events):
        """Non-admin callers are rejected without side effects."""
        with pytest.raises(OnlyAdmin) as exc_info:
            admin.set_paused(ALICE, True)

        assert exc_info.value.caller == ALICE
        assert admin.paused is False
        assert events.recent() == []

    def test_transfer_admin(self, admin, events):
        """Transfer hands over rights and revokes the old admin."""
        admin.transfer_admin(ADMIN, ALICE)

        assert admin.admin == ALICE
        with pytest.raises(OnlyAdmin):
            admin.set_paused(ADMIN, True)

        admin.set_paused(ALICE, True)
        assert admin.paused is True
        assert events.recent()[0] == AdminTransferred(previous_admin=ADMIN, new_admin=ALICE)

    def test_admin_case_insensitive(self, events):
        """Admin matching ignores address case."""
        admin = AdminController("0xfcad0b19bb29d4674531d6f115237e16afce377c", events)

        assert admin.admin == "0xFCAd0B19bB29D4674531d6f115237E16AfCE377c"
        admin.transfer_admin("0xFCAD0B19BB29D4674531D6F115237E16AFCE377C", ALICE)
        assert admin.admin == ALICE

    def test_transfer_to_zero_rejected(self, admin, events):
        """Admin rights cannot go to the zero address."""
        with pytest.raises(InvalidAdmin):
            admin.transfer_admin(ADMIN, ZERO_ADDRESS)

        assert admin.admin == ADMIN
        assert events.recent() == []

    def test_padded_zero_rejected(self, admin, events):
        """Whitespace around the zero address does not hide it."""
        with pytest.raises(InvalidAdmin):
            AdminController(f" {ZERO_ADDRESS}", events)
        with pytest.raises(InvalidAdmin):
            admin.transfer_admin(ADMIN, f" {ZERO_ADDRESS} ")

        assert admin.admin == ADMIN
        assert events.recent() == []

    def test_transfer_by_non_admin(self, admin):
        """Only the admin can transfer rights."""
        with pytest.raises(OnlyAdmin):
            admin.transfer_admin(ALICE, ALICE)

        assert admin.admin == ADMIN
