import argparse

import pytest
from git import Repo

import drill
from driller import messages
from driller.messages import format_numbered_lines


@pytest.fixture
def repo_path(tmp_path):
    repo = Repo.init(tmp_path)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
        cw.set_value("commit", "gpgsign", "false")

    (tmp_path / "notes.txt").write_text("first\nsecond\n", encoding='utf-8')
    repo.git.add(A=True)
    repo.git.commit(m="Init")
    (tmp_path / "notes.txt").write_text("first\n2nd\nthird\n", encoding='utf-8')
    repo.git.add(A=True)
    repo.git.commit(m="Edit")
    repo.close()
    return str(tmp_path)


def namespace(command, repo, **kwargs):
    return argparse.Namespace(command=command, repo=repo, rev='HEAD', **kwargs)


def test_format_numbered_lines():
    assert format_numbered_lines("+", []) == []
    assert format_numbered_lines("+", [(9, "a"), (10, "b")]) == ["+  9 | a", "+ 10 | b"]


def test_message_continuation_lines_are_indented(capsys):
    messages.warning("first", "second")
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].endswith(" first")
    assert lines[1] == "    second"
    # the front end only reports errors, warnings and info
    assert not hasattr(messages, "success")


def test_files(repo_path, capsys):
    assert drill.run(namespace('files', repo_path)) == 0
    out = capsys.readouterr().out
    assert "1 modified files in HEAD" in out
    assert "MODIFY" in out
    assert "notes.txt" in out


def test_parsed(repo_path, capsys):
    assert drill.run(namespace('parsed', repo_path, path='notes.txt')) == 0
    out = capsys.readouterr().out
    assert "1 deleted, 2 added" in out
    assert "2 | second" in out
    assert "3 | third" in out


def test_source_before(repo_path, capsys):
    assert drill.run(namespace('source', repo_path, path='notes.txt', before=True)) == 0
    assert capsys.readouterr().out == "first\nsecond\n"


def test_unknown_path(repo_path, capsys):
    assert drill.run(namespace('diff', repo_path, path='other.txt')) == 1
    assert "other.txt is not modified in HEAD" in capsys.readouterr().out
