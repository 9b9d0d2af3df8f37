import json
import os
import stat
import subprocess
import sys
from pathlib import Path

import pytest

FAKE_COMPILER = """#!/bin/sh
out=""
for arg in "$@"; do
  case "$arg" in
    --out:*) out="${arg#--out:}" ;;
  esac
done
case "$out" in
  *broken*) echo "broken example" >&2; exit 1 ;;
esac
mkdir -p "$(dirname "$out")"
echo "$@" > "$out"
"""

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(os.name == "nt", reason="fake compiler is a shell script"),
]


def _make_project(tmp_path: Path) -> tuple[Path, Path]:
    root = Path(__file__).resolve().parents[1]
    project_dir = tmp_path / "fxgtk"
    (project_dir / "src").mkdir(parents=True)
    (project_dir / "examples").mkdir()
    for name in ("src/fxgtk.fsx", "src/wforms.fsx"):
        (project_dir / name).write_text("module Fx\n", encoding="utf-8")
    for name in ("hello.fsx", "broken.fsx", "viewer.fsx"):
        (project_dir / "examples" / name).write_text("open Fx\n", encoding="utf-8")

    compiler = tmp_path / "fake-fsharpc"
    compiler.write_text(FAKE_COMPILER, encoding="utf-8")
    compiler.chmod(compiler.stat().st_mode | stat.S_IXUSR)

    config = {"compiler": str(compiler), "reference_dir": "refs", "color": False}
    (project_dir / "fxbuild.json").write_text(json.dumps(config), encoding="utf-8")
    return root, project_dir


def _run(root: Path, project_dir: Path, *args: str, env=None):
    return subprocess.run(
        [sys.executable, str(root / "main.py"), *args],
        cwd=project_dir,
        check=False,
        capture_output=True,
        text=True,
        env=env,
    )


def test_cli_all_command(tmp_path):
    root, project_dir = _make_project(tmp_path)

    result = _run(root, project_dir, "--all")

    assert result.returncode == 0
    assert (project_dir / "bin" / "fxgtk.dll").exists()
    assert (project_dir / "bin" / "hello.exe").exists()
    assert (project_dir / "bin" / "viewer.exe").exists()
    assert not (project_dir / "bin" / "broken.exe").exists()
    assert "Build bin/broken.exe failed." in result.stdout
    assert "Build bin/viewer.exe successful. Ok" in result.stdout
    assert "bin/hello.exe md5 " in result.stdout


def test_cli_strict_exit_reports_failure(tmp_path):
    root, project_dir = _make_project(tmp_path)
    env = {**os.environ, "FXBUILD_STRICT_EXIT": "1"}

    result = _run(root, project_dir, "--example", "--all", env=env)

    assert result.returncode == 1


def test_cli_build_single_file(tmp_path):
    root, project_dir = _make_project(tmp_path)

    result = _run(root, project_dir, "--build", "examples/hello.fsx")

    built = project_dir / "examples" / "hello.exe"
    assert result.returncode == 0
    assert built.read_text(encoding="utf-8").split() == [
        "examples/hello.fsx",
        "--target:exe",
        "--out:examples/hello.exe",
        "--debug+",
        "--nologo",
    ]


def test_cli_list_examples(tmp_path):
    root, project_dir = _make_project(tmp_path)

    result = _run(root, project_dir, "--", "--example")

    assert result.returncode == 0
    assert sorted(result.stdout.split()) == ["broken.fsx", "hello.fsx", "viewer.fsx"]
