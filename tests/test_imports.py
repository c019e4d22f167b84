"""包导入顺序测试：每个入口模块都要能在全新解释器里单独导入"""
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize("module", [
    "models",
    "schemas",
    "services",
    "jobs.scheduler",
    "config.settings",
    "config.app_config",
    "main",
])
def test_module_imports_in_fresh_interpreter(module):
    env = dict(os.environ, DATABASE_URL="sqlite://", SCHEDULER_ENABLED="false")
    proc = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 0, proc.stderr
