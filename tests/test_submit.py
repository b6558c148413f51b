"""Tests for the submit pipeline: pre-validation and per-push verification."""

from __future__ import annotations

import logging
import threading

import pytest

from jj_forge.exceptions import OperationCancelled, QueryError, RemoteStateError, StackValidationError
from jj_forge.models.revision import Revision
from jj_forge.operations.submit import remote_bookmark, submit, validate_stack
from jj_forge.operations.upload import parent_revset
from tests.fakes import (
    BRANCH,
    REMOTE,
    Call,
    Commit,
    Scenario,
    bookmark_set_call,
    fetch_call,
    log_call,
    push_bookmark_call,
)

BASE, A, B, C = "base00000000", "aaaaaaaaaaaa", "bbbbbbbbbbbb", "cccccccccccc"
HEAD = remote_bookmark(BRANCH, REMOTE)
STACK = f"{BASE}..{C}"


@pytest.fixture
def stack_repo(repo):
    repo.add(
        Commit(id=BASE, parents=["root"], description="base\n", is_mutable=False),
        Commit(id=A, parents=[BASE], description="A\n"),
        Commit(id=B, parents=[A], description="B\n"),
        Commit(id=C, parents=[B], description="C\n"),
    )
    return repo


def _prelude(head: str, *stack: str, parents: tuple[str, ...] = (BASE,)) -> list[Call]:
    return [
        fetch_call(),
        log_call(HEAD, head),
        log_call(STACK, *stack),
        log_call(parent_revset(STACK), *parents),
    ]


def _land(change_id: str, new_head: str | None = None) -> list[Call]:
    return [
        bookmark_set_call(change_id),
        push_bookmark_call(),
        fetch_call(),
        log_call(HEAD, new_head or change_id),
    ]


def test_remote_bookmark() -> None:
    assert remote_bookmark("main", "og") == "main@og"


# ---------------------------------------------------------------------------
# Landing stacks
# ---------------------------------------------------------------------------


class TestSubmit:
    def test_three_change_stack(self, stack_repo) -> None:
        scenario = Scenario(stack_repo, *_prelude(BASE, C, B, A), *_land(A), *_land(B), *_land(C))
        result = submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert result.submitted == 3
        assert result.already_landed == 0
        scenario.verify()

    def test_progress_log_names_change_and_title(self, stack_repo, caplog) -> None:
        caplog.set_level(logging.INFO, logger="jj_forge.operations.submit")
        scenario = Scenario(stack_repo, *_prelude(B, C, B, A), *_land(C))
        submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert f"Processing commit 1/1: {C} C" in caplog.text

    def test_resubmit_after_landing_pushes_nothing(self, stack_repo) -> None:
        scenario = Scenario(stack_repo, *_prelude(C, C, B, A))
        result = submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert result.submitted == 0
        assert result.already_landed == 3
        scenario.verify()

    def test_partially_landed_stack(self, stack_repo) -> None:
        scenario = Scenario(stack_repo, *_prelude(A, C, B, A), *_land(B), *_land(C))
        result = submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert result.submitted == 2
        assert result.already_landed == 1
        scenario.verify()

    def test_empty_stack(self, stack_repo) -> None:
        scenario = Scenario(stack_repo, fetch_call(), log_call(HEAD, BASE), log_call(STACK))
        result = submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert result.submitted == 0
        scenario.verify()


# ---------------------------------------------------------------------------
# Validation happens before any push
# ---------------------------------------------------------------------------


class TestSubmitValidation:
    def test_merge_change_rejected(self, stack_repo) -> None:
        stack_repo.add(
            Commit(id="xxxxxxxxxxxx", parents=[BASE], description="X\n"),
            Commit(id=B, parents=[A, "xxxxxxxxxxxx"], description="merge\n"),
        )
        scenario = Scenario(stack_repo, *_prelude(BASE, C, B, A, parents=(BASE, "xxxxxxxxxxxx")))
        with pytest.raises(StackValidationError) as exc_info:
            submit(scenario.client(), STACK, REMOTE, BRANCH)
        err = exc_info.value
        assert err.change_id == B
        assert err.position == 2
        assert err.is_merge
        scenario.verify()  # no bookmark or push calls

    def test_stack_not_on_remote_head(self, stack_repo) -> None:
        stack_repo.add(Commit(id="newhead00000", parents=[BASE], description="other\n", is_mutable=False))
        scenario = Scenario(stack_repo, *_prelude("newhead00000", C, B, A))
        with pytest.raises(StackValidationError) as exc_info:
            submit(scenario.client(), STACK, REMOTE, BRANCH)
        err = exc_info.value
        assert err.position == 1
        assert err.expected_parent == "newhead00000"
        assert err.actual_parents == [BASE]
        assert not err.is_merge
        scenario.verify()

    def test_gap_in_stack(self, stack_repo) -> None:
        """A stack member whose parent is not the previous member is rejected."""
        stack_repo.add(Commit(id=C, parents=[A], description="C\n"))
        scenario = Scenario(stack_repo, *_prelude(BASE, C, B, A))
        with pytest.raises(StackValidationError) as exc_info:
            submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert exc_info.value.change_id == C
        assert exc_info.value.position == 3

    def test_validate_stack_accepts_linear_chain(self) -> None:
        base = Revision(id=BASE)
        stack = [Revision(id=A, parents=(BASE,)), Revision(id=B, parents=(A,))]
        revmap = {r.id: r for r in [base, *stack]}
        validate_stack(stack, BASE, revmap, HEAD)


# ---------------------------------------------------------------------------
# Remote verification
# ---------------------------------------------------------------------------


class TestSubmitVerification:
    def test_concurrent_push_detected(self, stack_repo) -> None:
        stack_repo.add(Commit(id="intruder0000", parents=[A], description="theirs\n"))
        scenario = Scenario(
            stack_repo,
            *_prelude(BASE, C, B, A),
            *_land(A),
            *_land(B, new_head="intruder0000"),
        )
        with pytest.raises(RemoteStateError) as exc_info:
            submit(scenario.client(), STACK, REMOTE, BRANCH)
        err = exc_info.value
        assert err.submitted == 2
        assert err.expected == B
        assert err.actual == "intruder0000"
        assert err.bookmark == HEAD
        scenario.verify()  # C was never pushed

    def test_missing_remote_branch(self, stack_repo) -> None:
        scenario = Scenario(stack_repo, fetch_call(), log_call(HEAD))
        with pytest.raises(QueryError):
            submit(scenario.client(), STACK, REMOTE, BRANCH)

    def test_fetch_failure_is_chained(self, stack_repo) -> None:
        from jj_forge.exceptions import CommandError

        failure = CommandError(["git", "fetch"], 1, "network down")
        scenario = Scenario(stack_repo, Call(["git", "fetch", "--remote", REMOTE], error=failure))
        with pytest.raises(QueryError) as exc_info:
            submit(scenario.client(), STACK, REMOTE, BRANCH)
        assert exc_info.value.__cause__ is failure


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


def test_cancel_after_first_push_skips_rest_of_stack(stack_repo) -> None:
    cancel = threading.Event()
    bookmark_a, push_a, *_ = _land(A)
    scenario = Scenario(
        stack_repo,
        *_prelude(BASE, C, B, A),
        bookmark_a,
        Call(push_a.args, side_effect=lambda repo: cancel.set()),
        *_land(B),
        *_land(C),
    )
    with pytest.raises(OperationCancelled) as exc_info:
        submit(scenario.client(cancel=cancel), STACK, REMOTE, BRANCH)
    assert exc_info.value.command == ["git", "fetch", "--remote", REMOTE]
    assert scenario.index == 6  # prelude, bookmark set, push
