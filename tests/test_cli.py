import pytest
from click.testing import CliRunner

from taskrun.cli import cli
from taskrun.targets import CARGO_BUILD, DETECTOR_BIN

WORKFLOW = """\
from taskrun import target, sh

def workflow():
    return [
        target("build", sh("compile", "make all")),
        target("run", sh("exec", "./app", env={"VERBOSE": "1"}), needs="build", description="run the app"),
    ]
"""


@pytest.fixture
def workflow_file(tmp_path):
    path = tmp_path / "demo_workflow.py"
    path.write_text(WORKFLOW)
    return str(path)


def test_run_success(spawns, workflow_file, tmp_path):
    result = CliRunner().invoke(cli, ["run", "run", "--workflow", workflow_file, "--root", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert spawns.commands == ["make all", "./app"]
    assert "RESULTS" in result.output
    assert "run: SUCCEEDED" in result.output


def test_run_failure_exits_non_zero(spawns, workflow_file, tmp_path):
    spawns.fail("make all", 2)
    result = CliRunner().invoke(cli, ["run", "run", "--workflow", workflow_file, "--root", str(tmp_path)])
    assert result.exit_code == 1
    assert spawns.commands == ["make all"]
    assert "STEP FAILED: compile" in result.output
    assert "build: FAILED" in result.output


def test_run_unknown_target(spawns, workflow_file):
    result = CliRunner().invoke(cli, ["run", "ghost", "--workflow", workflow_file])
    assert result.exit_code == 1
    assert spawns.calls == []


def test_dry_run_spawns_nothing(spawns, workflow_file):
    result = CliRunner().invoke(cli, ["run", "run", "--workflow", workflow_file, "--dry-run"])
    assert result.exit_code == 0, result.output
    assert spawns.calls == []
    assert "[run] VERBOSE=1 ./app" in result.output


def test_missing_workflow_file():
    result = CliRunner().invoke(cli, ["list", "--workflow", "does_not_exist.py"])
    assert result.exit_code == 1


def test_list(workflow_file):
    result = CliRunner().invoke(cli, ["list", "--workflow", workflow_file])
    assert result.exit_code == 0
    assert "build" in result.output
    assert "run (needs build) - run the app" in result.output


def test_show(workflow_file):
    result = CliRunner().invoke(cli, ["show", "run", "--workflow", workflow_file])
    assert result.exit_code == 0
    assert "Chain: build -> run" in result.output


def test_builtin_targets_when_no_workflow_file(spawns):
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["run", "release"])
    assert result.exit_code == 0, result.output
    assert spawns.commands == [CARGO_BUILD, DETECTOR_BIN]


def test_missing_target_argument_is_usage_error():
    result = CliRunner().invoke(cli, ["run"])
    assert result.exit_code == 2


def test_ctrl_c_exits_130(spawns, workflow_file, tmp_path, monkeypatch):
    def interrupted(argv, cwd=None, env=None, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr("taskrun.runner.subprocess.run", interrupted)
    result = CliRunner().invoke(cli, ["run", "run", "--workflow", workflow_file, "--root", str(tmp_path)])
    assert result.exit_code == 130
    assert "Interrupted by user" in result.output


def test_debug_prints_env_overrides(spawns):
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["--debug", "run", "btrace"])
    assert result.exit_code == 0, result.output
    assert "[DEBUG] [btrace] env overrides: ['RUST_BACKTRACE']" in result.output


def test_debug_prints_traceback_on_failure(spawns):
    spawns.fail(CARGO_BUILD)
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["--debug", "run", "release"])
    assert result.exit_code == 1
    assert "Traceback" in result.output


def test_no_debug_lines_without_flag(spawns):
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["run", "btrace"])
    assert result.exit_code == 0
    assert "[DEBUG]" not in result.output


def test_multiple_workflow_files_is_an_error(spawns):
    runner = CliRunner()
    with runner.isolated_filesystem():
        for name in ("a_workflow.py", "b_workflow.py"):
            with open(name, "w") as fh:
                fh.write(WORKFLOW)
        result = runner.invoke(cli, ["run", "run"])
    assert result.exit_code == 1
    assert "Multiple workflow files found" in result.output
    assert spawns.calls == []


def test_show_unknown_target(workflow_file):
    result = CliRunner().invoke(cli, ["show", "ghost", "--workflow", workflow_file])
    assert result.exit_code == 1
    assert "UnknownTarget" in result.output


def test_unstartable_binary_is_reported(tmp_path):
    binary = tmp_path / "detector"
    binary.write_bytes(b"\x00\x01\x02 not a program\n")
    binary.chmod(0o755)
    wf = tmp_path / "bad_workflow.py"
    wf.write_text(
        "from taskrun import target, sh\n"
        f"TARGETS = [target('x', sh('run', {str(binary)!r}))]\n"
    )
    result = CliRunner().invoke(cli, ["run", "x", "--workflow", str(wf), "--root", str(tmp_path)])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "STEP FAILED: run" in result.output
    assert "x: FAILED" in result.output
