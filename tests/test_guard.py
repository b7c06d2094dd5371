from weekly_tracker.access.guard import ButtonCooldown, check_user_access


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_owner_and_editors_have_access():
    assert check_user_access("owner@example.org", "owner@example.org")
    assert check_user_access("Editor@Example.org", "owner@example.org", ["editor@example.org"])


def test_other_users_are_refused():
    assert not check_user_access("someone@example.org", "owner@example.org", ["editor@example.org"])
    assert not check_user_access("", "owner@example.org")
    assert not check_user_access(None, None)


def test_unknown_owner_never_matches():
    assert not check_user_access("unknown", None)


def test_cooldown_blocks_rapid_clicks():
    clock = FakeClock()
    cooldown = ButtonCooldown(5, clock=clock)

    assert cooldown.try_acquire("a@example.org")
    clock.now += 2.5
    assert not cooldown.try_acquire("a@example.org")
    assert cooldown.remaining("a@example.org") == 3

    clock.now += 2.5
    assert cooldown.try_acquire("a@example.org")


def test_cooldown_is_per_user():
    cooldown = ButtonCooldown(5, clock=FakeClock())
    assert cooldown.try_acquire("a@example.org")
    assert cooldown.try_acquire("b@example.org")


def test_cooldown_state_file_is_shared(tmp_path):
    clock = FakeClock()
    state_path = tmp_path / "state" / "cooldown.json"

    assert ButtonCooldown(5, state_path=state_path, clock=clock).try_acquire("a@example.org")
    assert state_path.exists()
    assert not ButtonCooldown(5, state_path=state_path, clock=clock).try_acquire("a@example.org")
