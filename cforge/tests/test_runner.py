"""
test_runner: end-to-end builds through run_build() and main().

  - default build produces obj/*.o and an executable bin/program, not run
  - --run --out app builds bin/app, runs it, exits 0 even if it fails
  - missing src/ is fatal before obj/ and bin/ exist
  - zero sources is fatal
  - one broken unit still links the rest
"""
import json
import os
import stat

import pytest
from conftest import BROKEN_C, HELPER_C, HELPER_FAILING_C, MAIN_C, write_sources

from cforge.io.schema import PhaseStatus
from cforge.policy.toolchain import BuildLayout
from cforge.runner import BuildFatalError, BuildOutcome, main, run_build


class TestFatalConditions:

    def test_missing_src_is_fatal(self, tmp_path, monkeypatch, spawn_guard):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(BuildFatalError, match="does not exist"):
            run_build()
        assert not (tmp_path / "obj").exists()
        assert not (tmp_path / "bin").exists()
        assert spawn_guard == []

    def test_main_missing_src_exits_1(self, tmp_path, monkeypatch, caplog):
        monkeypatch.chdir(tmp_path)
        assert main([]) == 1
        assert "Source code directory src does not exist" in caplog.text
        assert not (tmp_path / "obj").exists()
        assert not (tmp_path / "bin").exists()

    def test_no_sources_is_fatal(self, project, spawn_guard):
        (project / "src" / "notes.txt").write_text("nothing to build")
        with pytest.raises(BuildFatalError, match="No source .c files found"):
            run_build()
        # layout directories are created before discovery
        assert (project / "obj").is_dir()
        assert (project / "bin").is_dir()
        assert spawn_guard == []

    def test_uncreatable_obj_dir_is_fatal(self, project, spawn_guard):
        (project / "obj").write_text("a file where a directory should be")
        with pytest.raises(BuildFatalError, match="Failed to create directory obj"):
            run_build()


class TestEndToEnd:

    def test_default_build(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})

        assert main([]) == 0

        assert (project / "obj" / "a.o").is_file()
        assert (project / "obj" / "b.o").is_file()
        program = project / "bin" / "program"
        assert program.is_file()
        assert os.stat(program).st_mode & stat.S_IXUSR
        assert not (project / "ran.marker").exists()

    def test_obj_and_bin_created_with_mode(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})
        run_build(dir_mode=0o700)
        assert stat.S_IMODE(os.stat(project / "obj").st_mode) & 0o700 == 0o700

    def test_run_with_custom_output(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})

        assert main(["--run", "--out", "app"]) == 0

        assert (project / "bin" / "app").is_file()
        assert not (project / "bin" / "program").exists()
        assert (project / "ran.marker").exists()

    def test_run_positional(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})
        assert main(["run"]) == 0
        assert (project / "ran.marker").exists()

    def test_failing_program_still_exits_0(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_FAILING_C})

        assert main(["--run", "--out", "app"]) == 0
        assert (project / "ran.marker").exists()

    def test_strict_propagates_run_failure(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_FAILING_C})
        assert main(["--run", "--strict"]) == 1

    def test_outcome_records_stages(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})

        outcome = run_build(output_name="app", should_run=True)

        assert outcome.output_path == os.path.join("bin", "app")
        assert sorted(outcome.sources) == [os.path.join("src", n) for n in ("a.c", "b.c")]
        assert len(outcome.objects) == 2
        assert outcome.compile.status == PhaseStatus.SUCCESS
        assert outcome.link.status == PhaseStatus.SUCCESS
        assert outcome.run.status == PhaseStatus.SUCCESS
        assert outcome.succeeded

    def test_under_other_root(self, gcc_ok, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        root = tmp_path / "proj"
        (root / "src").mkdir(parents=True)
        write_sources(root, {"a.c": MAIN_C, "b.c": HELPER_C})

        assert main(["-C", "proj"]) == 0
        assert (root / "bin" / "program").is_file()
        assert (root / "obj" / "a.o").is_file()


class TestPartialCompile:

    def test_broken_unit_skipped_and_linked(self, gcc_ok, project, caplog):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C, "c.c": BROKEN_C})

        with caplog.at_level("INFO"):
            outcome = run_build()

        assert "Only 2 out of 3 files compiled" in caplog.text
        assert "Error compiling" in caplog.text
        assert outcome.compile.summary.failed_units == 1
        assert len(outcome.objects) == 2
        assert outcome.link.status == PhaseStatus.SUCCESS
        assert not outcome.succeeded
        assert not (project / "obj" / "c.o").exists()

    def test_strict_propagates_compile_failure(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C, "c.c": BROKEN_C})
        assert main([]) == 0
        assert main(["--strict"]) == 1

    def test_nothing_compiles_link_fails(self, gcc_ok, project, caplog):
        write_sources(project, {"c.c": BROKEN_C})

        outcome = run_build(should_run=True)

        assert outcome.objects == []
        assert outcome.link.status == PhaseStatus.FAILED
        assert outcome.run.status == PhaseStatus.SKIPPED
        assert "Error linking program" in caplog.text


class TestReceipt:

    def test_receipt_written(self, gcc_ok, project):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C, "c.c": BROKEN_C})

        assert main(["--receipt", "bin/receipt.json"]) == 0

        data = json.loads((project / "bin" / "receipt.json").read_text())
        assert data["tool"]["name"] == "cforge"
        assert data["status"] == "PARTIAL"
        assert data["toolchain"]["compiler"] == "gcc"
        assert data["toolchain"]["compiler_version"] != "unknown"
        assert data["compile"]["summary"] == {"compiled_units": 2, "failed_units": 1}
        assert data["link"]["status"] == "SUCCESS"
        assert data["run"]["status"] == "SKIPPED"
        assert data["artifact"]["is_executable"] is True
        assert len(data["artifact"]["sha256"]) == 64

    def test_receipt_written_when_link_fails(self, gcc_ok, project):
        write_sources(project, {"c.c": BROKEN_C})
        outcome = run_build(layout=BuildLayout(), receipt_path=project / "r.json")

        data = json.loads(outcome.receipt_path.read_text())
        assert data["status"] == "FAILED"
        assert data["artifact"] is None

    def test_receipt_written_when_artifact_unreadable(self, gcc_ok, project, monkeypatch):
        write_sources(project, {"a.c": MAIN_C, "b.c": HELPER_C})

        def unreadable(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr("cforge.core.provenance.hash_file", unreadable)
        outcome = run_build(receipt_path=project / "r.json")

        assert outcome.succeeded
        data = json.loads(outcome.receipt_path.read_text())
        assert data["status"] == "SUCCESS"
        assert data["artifact"] is None


class TestCommandLine:
    """main() decides what run_build is asked to do."""

    @pytest.fixture
    def build_calls(self, project, monkeypatch):
        calls = []

        def fake_run_build(**kwargs):
            calls.append(kwargs)
            return BuildOutcome(output_path="bin/program")

        monkeypatch.setattr("cforge.runner.run_build", fake_run_build)
        return calls

    def test_run_after_option_following_other_word(self, build_calls):
        assert main(["extra", "-v", "run"]) == 0
        assert build_calls[0]["should_run"] is True

    def test_run_after_out_value(self, build_calls):
        assert main(["x", "--out", "app", "run"]) == 0
        assert build_calls[0]["should_run"] is True
        assert build_calls[0]["output_name"] == "app"

    def test_run_word_anywhere(self, build_calls):
        assert main(["--frobnicate", "run"]) == 0
        assert build_calls[0]["should_run"] is True

    def test_no_run_word(self, build_calls):
        assert main(["extra", "-v", "other"]) == 0
        assert build_calls[0]["should_run"] is False

    def test_abbreviated_option_is_ignored(self, build_calls):
        assert main(["--r"]) == 0
        assert build_calls[0]["should_run"] is False
        assert build_calls[0]["output_name"] == "program"
