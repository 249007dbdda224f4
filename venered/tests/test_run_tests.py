from venered.run_tests import PACKAGE_DIR, build_command

def test_coverage_is_on_by_default():
    cmd = build_command(["-k", "live"])

    assert "--cov=venered" in cmd
    assert str(PACKAGE_DIR / "tests") in cmd
    assert cmd[-2:] == ["-k", "live"]

def test_no_cov_is_not_passed_to_pytest():
    cmd = build_command(["--no-cov", "-x"])

    assert not any(arg.startswith("--cov") for arg in cmd)
    assert "--no-cov" not in cmd
    assert cmd[-1] == "-x"
