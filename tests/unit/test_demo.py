"""
test_demo.py - The walkthrough runs end to end in quick mode
"""

import demo


def test_walkthrough_accepts_each_step_and_rejects_each_variant(capsys):
    demo.main(quick=True)
    out = capsys.readouterr().out
    assert out.count("✓ ACCEPTED") == 6
    assert out.count("✗ REJECTED") == 5
    assert "[Overpayment]" in out
    assert "[OutputExpectedOnFullSettlement]" in out
    assert "outstanding now 600.00 USD" in out
