"""Tests for the Diagnostic model."""

from bplens_core.models import Diagnostic, without_informational


def make_diagnostic(severity="Warning", justification="", path="dynamics://Table/A", moniker="X"):
    return Diagnostic(
        diagnostic_type="BestPractices",
        severity=severity,
        path=path,
        moniker=moniker,
        message="Something is off.",
        justification=justification,
    )


def test_key_is_path_and_moniker():
    assert make_diagnostic().key == ("dynamics://Table/A", "X")


def test_append_adds_at_end():
    d = make_diagnostic(justification="ok")
    d.append_justification("!")
    assert d.justification == "ok!"


def test_backspace_removes_last_character():
    d = make_diagnostic(justification="ok")
    d.backspace_justification()
    assert d.justification == "o"


def test_backspace_on_empty_is_noop():
    d = make_diagnostic()
    d.backspace_justification()
    assert d.justification == ""


def test_summary_contains_message_and_path():
    assert make_diagnostic().summary() == "Message: Something is off.  --  Path: dynamics://Table/A"


def test_without_informational_keeps_order():
    items = [
        make_diagnostic(moniker="1"),
        make_diagnostic(severity="Informational", moniker="2"),
        make_diagnostic(severity="Error", moniker="3"),
    ]
    assert [d.moniker for d in without_informational(items)] == ["1", "3"]
