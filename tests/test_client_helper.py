import pytest

import client_helper
from client_helper import CounterSession, Status


@pytest.mark.parametrize("raw, expected", [(1, 1), ("1000", 1000), (" 42 ", 42)])
def test_validate_value_accepts_range(raw, expected):
    assert client_helper.validate_value(raw) == expected


@pytest.mark.parametrize("raw", [0, 1001, "-3", "abc", "", 2.5, True, None, "--5", "+-3", "²"])
def test_validate_value_rejects(raw):
    with pytest.raises(client_helper.ValidationError, match="Value must be between 1 and 1000"):
        client_helper.validate_value(raw)


def test_session_reports_malformed_input_as_validation(contract):
    session = CounterSession(contract, "alice")

    status = session.add("--5")

    assert status == Status(client_helper.ERROR, "Value must be between 1 and 1000")
    assert contract.get_public_total() == 0


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        client_helper.build_add(0)


def test_build_add_and_threshold():
    assert client_helper.build_add("7") == {"value": 7}
    assert client_helper.build_threshold(0) == {"threshold": 0}

    with pytest.raises(client_helper.ValidationError):
        client_helper.build_threshold(-1)
    with pytest.raises(client_helper.ValidationError):
        client_helper.build_threshold(2**32)


def test_session_add_refreshes_views(contract):
    session = CounterSession(contract, "alice")

    status = session.add("10")

    assert status == Status(client_helper.SUCCESS, "Added 10 to the counter")
    assert session.public_total == 10
    assert session.contribution == 10
    assert [s.level for s in session.history] == [client_helper.INFO, client_helper.SUCCESS]
    assert session.busy is False


def test_session_rejects_invalid_input_before_submitting(contract):
    session = CounterSession(contract, "alice")

    status = session.add(5000)

    assert status.level == client_helper.ERROR
    assert status.message == "Value must be between 1 and 1000"
    assert contract.get_public_total() == 0


def test_session_reports_revert_reason(contract):
    session = CounterSession(contract, "alice")

    status = session.reset()

    assert status.level == client_helper.ERROR
    assert "Only the owner can call this function" in status.message


def test_owner_session_resets(contract):
    CounterSession(contract, "alice").add(10)
    owner = CounterSession(contract, "owner")

    status = owner.reset()

    assert status.level == client_helper.SUCCESS
    assert owner.public_total == 0


def test_sessions_share_chain_state(contract):
    alice = CounterSession(contract, "alice")
    bob = CounterSession(contract, "bob")

    alice.add(10)
    bob.add(5)

    assert bob.public_total == 15
    assert alice.reveal_total().message == "Counter revealed: 15 (Global Total)"
    assert alice.reveal_contribution().message == "Your contribution: 10"
    assert bob.reveal_contribution().message == "Your contribution: 5"


def test_session_add_random(contract):
    session = CounterSession(contract, "alice")

    status = session.add_random()

    assert status.level == client_helper.SUCCESS
    assert 1 <= session.public_total <= 1000
    assert session.contribution == session.public_total


def test_session_threshold(contract):
    session = CounterSession(contract, "alice")
    session.add(20)

    assert session.check_threshold(10).message == "Counter is above 10"
    assert session.check_threshold("20").message == "Counter is not above 20"


class BrokenContract:
    def get_public_total(self):
        raise ConnectionError("provider unavailable")

    def get_user_contribution(self, address):
        return 0


def test_session_maps_provider_errors():
    session = CounterSession(BrokenContract(), "alice")

    status = session.reveal_total()

    assert status == Status(client_helper.ERROR, "Error: provider unavailable")
    assert session.busy is False


def test_session_without_contract():
    status = CounterSession(None, "alice").add(1)
    assert status == Status(client_helper.ERROR, "Contract is not connected")


def test_session_rejects_overlapping_actions(contract):
    session = CounterSession(contract, "alice")
    nested = []

    def action():
        nested.append(session.add(1))
        return "done"

    status = session.run("Outer action...", action)

    assert status.level == client_helper.SUCCESS
    assert nested == [Status(client_helper.ERROR, "Another action is still in progress")]
    assert contract.get_public_total() == 0
