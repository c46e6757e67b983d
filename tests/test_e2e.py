"""End-to-end test of the installed console script. Skipped by default; run with: pytest -m e2e"""

import shutil
import subprocess
from pathlib import Path

import pytest


@pytest.mark.e2e
def test_installed_script(tmp_path: Path):
    binary = shutil.which("marginalia")
    assert binary is not None, "marginalia is not installed"

    txt = tmp_path / "fox.txt"
    txt.write_text("The quick brown fox", encoding="utf-8")

    run = subprocess.run(
        [binary, "-d", str(tmp_path / "data"), "ingest", str(txt)],
        capture_output=True,
        text=True,
    )
    assert run.returncode == 0, f"Script exited {run.returncode}:\n{run.stderr}"
    assert "1 document(s) stored" in run.stdout
