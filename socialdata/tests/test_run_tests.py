import sys

from socialdata import run_tests
from socialdata.run_tests import PACKAGE_DIR, build_command

def test_build_command_with_coverage():
    cmd = build_command(coverage=True, html=True, extra=["-k", "posts"])

    assert cmd[:4] == [sys.executable, "-m", "pytest", str(PACKAGE_DIR / "tests")]
    assert "--cov=socialdata" in cmd
    assert "--cov-report=html" in cmd
    assert cmd[-2:] == ["-k", "posts"]

def test_build_command_without_coverage():
    """HTML reports need coverage"""
    cmd = build_command(coverage=False, html=True, extra=[])

    assert not any(arg.startswith("--cov") for arg in cmd)

def test_testing_environment(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")

    env = run_tests.testing_environment()

    assert env["ENVIRONMENT"] == "testing"
    assert env["TESTING"] == "true"
    assert env["PYTHONPATH"] == str(PACKAGE_DIR.parent)
