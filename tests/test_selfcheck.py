from __future__ import annotations

from latticemc.selfcheck import run_selfcheck


def test_selfcheck_imports_pass() -> None:
    report = run_selfcheck(smoke=False)
    assert report.ok
    assert report.rows


def test_selfcheck_smoke_round_trip() -> None:
    report = run_selfcheck(smoke=True)
    names = [row.name for row in report.rows]
    assert "smoke.potts" in names
    assert "smoke.heisenberg" in names
    assert report.ok, report.to_text()
