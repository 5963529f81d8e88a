"""Tests for virtual filing synthesis."""

from __future__ import annotations

from datetime import date

from shaho.reminders.virtual import synthesize_virtual_application
from tests.fakes import APPLICATION_TYPES, jst, make_employee

ACQUISITION, LOSS, ADDRESS = APPLICATION_TYPES[1], APPLICATION_TYPES[2], APPLICATION_TYPES[3]


def test_acquisition_anchored_on_join_date():
    virtual = synthesize_virtual_application(make_employee(join_date=date(2024, 4, 1)), ACQUISITION, jst(2024, 4, 2))
    assert virtual.id is None
    assert virtual.employee_id == "emp-1"
    assert virtual.data == {"insuredPersons": [{"acquisitionDate": "2024-04-01"}]}
    assert virtual.is_awaiting


def test_loss_date_is_day_after_retirement():
    employee = make_employee(retirement_date=date(2024, 3, 31))
    virtual = synthesize_virtual_application(employee, LOSS, jst(2024, 4, 2))
    assert virtual.data == {"insuredPersons": [{"lossDate": "2024-04-01"}]}


def test_missing_date_or_unanchored_type():
    assert synthesize_virtual_application(make_employee(), ACQUISITION, jst(2024, 4, 2)) is None
    assert synthesize_virtual_application(make_employee(join_date=date(2024, 4, 1)), ADDRESS, jst(2024, 4, 2)) is None
