from unittest import mock

import pytest

from rctravel.launchers.escalation import (
    COMMAND_NOT_FOUND,
    escalate,
    EscalationExhausted,
    plan,
)


def names(strategies):
    return [strategy.name for strategy in strategies]


def test_plan_other_account():
    strategies = plan("postgres", True, mock.Mock())

    assert names(strategies) == ["sudo", "sudo via root", "su", "su via root"]


def test_plan_root():
    assert names(plan("root", True, mock.Mock())) == ["sudo", "su"]


def test_plan_without_sudo():
    assert names(plan("postgres", False, mock.Mock())) == ["su", "su via root"]
    assert names(plan("root", False, mock.Mock())) == ["su"]


def test_commands():
    strategies = plan("postgres", True, mock.Mock())
    commands = [s.command("postgres", "/tmp/x.sh") for s in strategies]

    assert commands == [
        ["sudo", "-u", "postgres", "sh", "/tmp/x.sh"],
        ["sudo", "sudo", "-u", "postgres", "sh", "/tmp/x.sh"],
        ["su", "postgres", "-c", "sh /tmp/x.sh"],
        ["su", "root", "-c", "su postgres -c 'sh /tmp/x.sh'"],
    ]


def test_first_success_wins():
    runner = mock.Mock(side_effect=[1, 0, 0])

    result = escalate(plan("postgres", True, runner), "postgres", "/tmp/x.sh")

    assert result.strategy == "sudo via root"
    assert result.succeeded
    assert runner.call_count == 2


def test_missing_binary():
    runner = mock.Mock(side_effect=[FileNotFoundError(), 0])

    result = escalate(plan("root", True, runner), "root", "/tmp/x.sh")

    assert result.strategy == "su"


def test_exhausted():
    runner = mock.Mock(side_effect=[1, FileNotFoundError()])

    with pytest.raises(EscalationExhausted) as e:
        escalate(plan("postgres", False, runner), "postgres", "/tmp/x.sh")

    assert "postgres" in str(e.value)
    assert [a.returncode for a in e.value.attempts] == [1, COMMAND_NOT_FOUND]
    assert e.value.returncode == COMMAND_NOT_FOUND


def test_exhausted_without_attempts():
    with pytest.raises(EscalationExhausted) as e:
        escalate([], "postgres", "/tmp/x.sh")

    assert e.value.returncode == 1
