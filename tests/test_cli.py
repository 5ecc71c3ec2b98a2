import json

import pytest
import requests
from click.testing import CliRunner

from codelab_py.cli import cli
from codelab_py.config import GlobalConfig, LocalConfig
from tests.conftest import BASE_URL, make_response, ok

LESSON = {
    "id": "l1",
    "title": "Functions",
    "type": "CHALLENGE",
    "orderIndex": 3,
    "challenges": [
        {
            "id": "ch_1",
            "title": "Solution",
            "starterCodes": {"python": "def solution():\n    pass"},
            "testCases": [
                {"input": "visible-in", "expectedOutput": "visible-out", "isHidden": False},
                {"input": "hidden-in", "expectedOutput": "hidden-out", "isHidden": True},
            ],
        }
    ],
}


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CODELAB_BASE_URL", raising=False)
    monkeypatch.delenv("CODELAB_TOKEN", raising=False)
    return tmp_path


@pytest.fixture
def config_path(workdir):
    path = workdir / "global.json"
    GlobalConfig(base_url=BASE_URL, token="tok-123").save(path)
    return path


@pytest.fixture
def invoke(config_path):
    runner = CliRunner()

    def _invoke(*args, **kwargs):
        return runner.invoke(cli, ["--config", str(config_path), *args], **kwargs)

    return _invoke


@pytest.fixture
def solution(workdir):
    path = workdir / "solution.py"
    path.write_text("def solution():\n    return 3\n", encoding="utf-8")
    return path


def test_login_saves_token(workdir, backend):
    path = workdir / "global.json"
    GlobalConfig(base_url=BASE_URL).save(path)
    backend.add("POST", "/auth/login", ok({"token": "fresh", "user": {"id": "u", "email": "a@b.c"}}))

    result = CliRunner().invoke(
        cli, ["--config", str(path), "login", "--email", "a@b.c", "--password", "pw"]
    )

    assert result.exit_code == 0, result.output
    assert "Successfully logged in" in result.output
    assert GlobalConfig.load(path).token == "fresh"
    assert backend.calls[0]["json"] == {"email": "a@b.c", "password": "pw"}


def test_login_failure_exits_non_zero(workdir, backend):
    path = workdir / "global.json"
    GlobalConfig(base_url=BASE_URL).save(path)
    backend.add("POST", "/auth/login", make_response(400, {"success": False, "message": "Bad credentials"}))

    result = CliRunner().invoke(
        cli, ["--config", str(path), "login", "--email", "a@b.c", "--password", "pw"]
    )

    assert result.exit_code == 1
    assert "Bad credentials" in result.output


def test_commands_require_login(workdir, backend, solution):
    path = workdir / "global.json"
    GlobalConfig(base_url=BASE_URL).save(path)

    result = CliRunner().invoke(cli, ["--config", str(path), "run", str(solution)])

    assert result.exit_code == 1
    assert "Not logged in" in result.output
    assert backend.calls == []


def test_logout_clears_token(invoke, config_path):
    result = invoke("logout")

    assert result.exit_code == 0
    assert GlobalConfig.load(config_path).token == ""


def test_lesson_show_hides_hidden_cases(invoke, backend):
    backend.add("GET", "/lessons/l1", ok(LESSON))

    result = invoke("lesson", "show", "l1")

    assert result.exit_code == 0, result.output
    assert "Functions" in result.output
    assert "visible-in" in result.output
    assert "Hidden test case" in result.output
    assert "hidden-in" not in result.output
    assert "visible-out" not in result.output
    assert "hidden-out" not in result.output


def test_lesson_show_unknown_lesson(invoke, backend):
    result = invoke("lesson", "show", "missing")

    assert result.exit_code == 1
    assert "Failed to load lesson" in result.output


def test_lesson_use_and_set_language_write_local_config(invoke, workdir):
    assert invoke("lesson", "use", "l1").exit_code == 0
    assert invoke("set-language", "javascript").exit_code == 0

    config = LocalConfig.load(workdir / ".codelab_py.local")
    assert config.lesson_id == "l1"
    assert config.default_language == "javascript"


def test_starter_writes_starter_code(invoke, backend, workdir):
    backend.add("GET", "/lessons/l1", ok(LESSON))
    target = workdir / "main.py"

    result = invoke("starter", "-l", "l1", "-o", str(target))

    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8") == "def solution():\n    pass"


def test_run_shows_failure(invoke, backend, solution):
    backend.add("GET", "/lessons/l1", ok(LESSON))
    backend.add(
        "POST",
        "/execution/run",
        ok({"status": "FAIL", "stdout": "", "stderr": "AssertionError", "metrics": {"runtime": "0.01s"}}),
    )

    result = invoke("run", str(solution), "-l", "l1")

    assert result.exit_code == 0, result.output
    assert "AssertionError" in result.output
    assert "Some tests failed." in result.output
    assert "All tests passed!" not in result.output
    run_call = backend.calls[-1]
    assert run_call["json"] == {
        "code": "def solution():\n    return 3\n",
        "language": "python",
        "challengeId": "ch_1",
    }


def test_run_without_lesson_is_free_form(invoke, backend, solution):
    backend.add(
        "POST",
        "/execution/run",
        ok({"status": "PASS", "stdout": "hello", "metrics": {"runtime": "0.01s"}}),
    )

    result = invoke("run", str(solution))

    assert result.exit_code == 0, result.output
    assert "hello" in result.output
    assert "challengeId" not in backend.calls[0]["json"]


def test_run_network_failure_shows_error(invoke, backend, solution):
    backend.add("POST", "/execution/run", requests.ConnectionError("refused"))

    result = invoke("run", str(solution))

    assert result.exit_code == 0, result.output
    assert "Network error" in result.output
    assert "ERRORED" in result.output


def test_submit_pass_marks_lesson_completed(invoke, backend, solution):
    backend.add("GET", "/lessons/l1", ok(LESSON))
    backend.add(
        "POST",
        "/execution/submit",
        ok({"status": "PASS", "submissionId": "sub_1", "stdout": "ok", "metrics": {"runtime": "0.02s"}}),
    )
    backend.add("PUT", "/users/progress/l1", make_response(200, {"success": True}))

    result = invoke("submit", str(solution), "-l", "l1")

    assert result.exit_code == 0, result.output
    assert "All tests passed!" in result.output
    assert "sub_1" in result.output
    assert "marked as completed" in result.output
    assert [c["method"] for c in backend.calls] == ["GET", "POST", "PUT"]


def test_submit_unknown_challenge(invoke, backend, solution):
    backend.add("GET", "/lessons/l1", ok(LESSON))

    result = invoke("submit", str(solution), "-l", "l1", "-c", "nope")

    assert result.exit_code == 1
    assert "Challenge not found" in result.output


def test_unauthorized_clears_saved_token(invoke, backend, config_path, solution):
    backend.add("POST", "/execution/run", make_response(401, {"success": False, "message": "Token expired"}))

    result = invoke("run", str(solution))

    assert "Session expired" in result.output
    assert json.loads(config_path.read_text(encoding="utf-8"))["token"] == ""


def test_env_base_url_is_not_persisted(workdir, monkeypatch):
    path = workdir / "global.json"
    GlobalConfig(base_url="http://file/api/v1", token="tok-123").save(path)
    monkeypatch.setenv("CODELAB_BASE_URL", "http://env-only/api/v1")

    result = CliRunner().invoke(cli, ["--config", str(path), "logout"])

    assert result.exit_code == 0, result.output
    monkeypatch.delenv("CODELAB_BASE_URL")
    assert GlobalConfig.load(path).base_url == "http://file/api/v1"


def test_env_token_is_used_but_not_saved(workdir, backend, monkeypatch):
    path = workdir / "global.json"
    GlobalConfig(base_url=BASE_URL).save(path)
    monkeypatch.setenv("CODELAB_TOKEN", "env-tok")
    backend.add("GET", "/users/enrollments", ok([]))

    result = CliRunner().invoke(cli, ["--config", str(path), "courses"])

    assert result.exit_code == 0, result.output
    assert backend.calls[0]["headers"]["Authorization"] == "Bearer env-tok"
    assert GlobalConfig.load(path).token == ""


def test_base_url_option_applies_to_requests_only(workdir, backend):
    path = workdir / "global.json"
    GlobalConfig(base_url="http://file/api/v1", token="tok-123").save(path)
    backend.add("GET", "/users/enrollments", ok([]))

    result = CliRunner().invoke(cli, ["--config", str(path), "--base-url", BASE_URL, "courses"])

    assert result.exit_code == 0, result.output
    assert backend.calls[0]["path"] == "/users/enrollments"
    assert GlobalConfig.load(path).base_url == "http://file/api/v1"


def test_courses_lists_progress(invoke, backend):
    backend.add(
        "GET",
        "/users/enrollments",
        ok([{"courseId": "c1", "title": "Python", "totalLessons": 5, "completedLessons": 2}]),
    )

    result = invoke("courses")

    assert result.exit_code == 0, result.output
    assert "c1" in result.output
    assert "Python" in result.output
    assert "2/5" in result.output


def test_courses_without_enrollments(invoke, backend):
    backend.add("GET", "/users/enrollments", ok([]))

    result = invoke("courses")

    assert result.exit_code == 0, result.output
    assert "not enrolled" in result.output


def test_lesson_list_shows_course_lessons(invoke, backend):
    backend.add(
        "GET",
        "/lessons/course/c1",
        ok(
            [
                {"id": "l1", "title": "Intro", "type": "LESSON", "orderIndex": 1, "status": "COMPLETED"},
                {"id": "l2", "title": "Loops", "type": "CHALLENGE", "orderIndex": 2},
            ]
        ),
    )

    result = invoke("lesson", "list", "c1")

    assert result.exit_code == 0, result.output
    for text in ("l1", "Intro", "COMPLETED", "l2", "Loops", "CHALLENGE"):
        assert text in result.output


def test_lesson_list_empty_course(invoke, backend):
    backend.add("GET", "/lessons/course/c9", ok([]))

    result = invoke("lesson", "list", "c9")

    assert result.exit_code == 0, result.output
    assert "No lessons found" in result.output


def test_starter_rejects_language_without_starter_code(invoke, backend, workdir):
    backend.add("GET", "/lessons/l1", ok(LESSON))
    target = workdir / "main.rs"

    result = invoke("starter", "-l", "l1", "--lang", "rust", "-o", str(target))

    assert result.exit_code == 1
    assert "No starter code for rust" in result.output
    assert "python" in result.output
    assert not target.exists()
