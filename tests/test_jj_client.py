"""Tests for the jj client: command construction, log parsing, cancellation."""

from __future__ import annotations

import threading

import pytest

from jj_forge.exceptions import CommandError, OperationCancelled, QueryError
from jj_forge.jj.client import REVISION_TEMPLATE, JJClient, SubprocessExecutor, parse_revisions
from tests.fakes import Call, Commit, Scenario, log_call, log_line, text_output


class TestRevisionTemplate:
    def test_fields_joined_with_spaces(self) -> None:
        assert REVISION_TEMPLATE.startswith('change_id.short()++" "++conflict++" "++')
        assert REVISION_TEMPLATE.endswith('description.escape_json()++" "++"\\n"')


class TestParseRevisions:
    def test_empty_output(self) -> None:
        assert parse_revisions("") == []
        assert parse_revisions("\n") == []

    def test_all_fields(self) -> None:
        commit = Commit(
            id="abc",
            parents=["p1", "p2"],
            description="title\n\nbody with spaces\n",
            is_mutable=True,
            is_conflicted=True,
            is_empty=False,
            remote_bookmarks=["og/push-abc", "origin/main"],
        )
        (rev,) = parse_revisions(log_line(commit) + " \n")
        assert rev.id == "abc"
        assert rev.parents == ("p1", "p2")
        assert rev.description == "title\n\nbody with spaces\n"
        assert rev.is_mutable
        assert rev.is_conflicted
        assert not rev.is_empty
        assert not rev.is_divergent
        assert rev.remote_bookmarks == frozenset({"og/push-abc", "origin/main"})

    def test_empty_lists(self) -> None:
        (rev,) = parse_revisions('root false false false true   ""\n')
        assert rev.parents == ()
        assert rev.remote_bookmarks == frozenset()
        assert not rev.is_mutable
        assert rev.is_empty
        assert rev.is_anonymous

    def test_keeps_jj_order(self) -> None:
        output = "\n".join(log_line(Commit(id=i)) for i in ["c", "b", "a"])
        assert [r.id for r in parse_revisions(output)] == ["c", "b", "a"]

    def test_too_few_fields(self) -> None:
        with pytest.raises(QueryError):
            parse_revisions("abc true false\n")

    def test_bad_json(self) -> None:
        with pytest.raises(QueryError):
            parse_revisions('abc false false true false p  "unterminated\n')


class TestJJClient:
    def test_run_prefixes_repository(self) -> None:
        seen: list[list[str]] = []

        def executor(args):
            seen.append(list(args))
            return "out"

        assert JJClient("/repo", executor).run("status") == "out"
        assert JJClient(None, executor).run("status") == "out"
        assert seen == [["-R", "/repo", "status"], ["status"]]

    def test_root(self, repo) -> None:
        scenario = Scenario(repo, Call(["root"], text_output("/fake/repo\n")))
        assert scenario.client().root() == "/fake/repo"
        scenario.verify()

    def test_revs(self, repo) -> None:
        repo.add(Commit(id="aaa", parents=["root"], description="A\n"))
        scenario = Scenario(repo, log_call("mutable()", "aaa"))
        revs = scenario.client().revs("mutable()")
        assert [r.id for r in revs] == ["aaa"]
        scenario.verify()

    def test_revs_wraps_command_error(self, repo) -> None:
        failure = CommandError(["log"], 1, "bad revset")
        scenario = Scenario(
            repo,
            Call(["log", "--no-graph", "--template", REVISION_TEMPLATE, "-r", "nope"], error=failure),
        )
        with pytest.raises(QueryError) as exc_info:
            scenario.client().revs("nope")
        assert exc_info.value.__cause__ is failure

    def test_rev_requires_exactly_one(self, repo) -> None:
        repo.add(Commit(id="aaa"), Commit(id="bbb"))
        scenario = Scenario(repo, log_call("x", "aaa", "bbb"), log_call("y"))
        client = scenario.client()
        with pytest.raises(QueryError):
            client.rev("x")
        with pytest.raises(QueryError):
            client.rev("y")

    def test_remote_url(self, repo) -> None:
        listing = "og git@github.com:me/repo.git\nup https://github.com/org/repo\n"
        scenario = Scenario(
            repo,
            Call(["git", "remote", "list"], text_output(listing)),
            Call(["git", "remote", "list"], text_output(listing)),
        )
        client = scenario.client()
        assert client.remote_url("up") == "https://github.com/org/repo"
        with pytest.raises(QueryError):
            client.remote_url("missing")

    def test_git_dir(self, repo) -> None:
        scenario = Scenario(
            repo,
            Call(["git", "root"], text_output("/fake/repo/.jj/repo/store/git\n")),
            Call(["git", "root"], text_output("  \n")),
        )
        client = scenario.client()
        assert client.git_dir() == "/fake/repo/.jj/repo/store/git"
        with pytest.raises(QueryError):
            client.git_dir()

    def test_cancelled_before_command(self, repo) -> None:
        cancel = threading.Event()
        scenario = Scenario(repo, Call(["root"], text_output("/fake/repo\n")))
        client = scenario.client(cancel=cancel)
        client.root()
        cancel.set()
        with pytest.raises(OperationCancelled):
            client.root()
        scenario.verify()


class TestSubprocessExecutor:
    def test_missing_binary(self) -> None:
        executor = SubprocessExecutor("jj-forge-test-no-such-binary")
        with pytest.raises(CommandError) as exc_info:
            executor(["root"])
        assert exc_info.value.returncode is None
        assert exc_info.value.command == ["jj-forge-test-no-such-binary", "root"]

    def test_nonzero_exit(self) -> None:
        executor = SubprocessExecutor("false")
        with pytest.raises(CommandError) as exc_info:
            executor([])
        assert exc_info.value.returncode == 1

    def test_stdout_returned(self) -> None:
        assert SubprocessExecutor("echo")(["hello"]) == "hello\n"
