"""Tests for recurring schedule expansion."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from errors import InvalidRecurrence
from recurrence import DEFAULT_MAX_OCCURRENCES, expand
from schemas import DetailedScheduleEntry, Recurrence


def template(start=date(2024, 1, 1), kind='recurring', **recurrence):
    return DetailedScheduleEntry(
        id='tpl',
        agent_id='2',
        date=start,
        start_time='07:00',
        end_time='15:00',
        kind=kind,
        recurrence=Recurrence(**recurrence) if recurrence else None,
        notes='Ronde',
    )


class TestOneOff:
    def test_returns_template_unchanged(self):
        entry = template(kind='one-off')
        assert expand(entry) == [entry]
        assert expand(entry)[0] is entry


class TestDaily:
    @pytest.mark.parametrize("count", [1, 5, 30])
    def test_consecutive_dates(self, count):
        entries = expand(template(frequency='daily', max_occurrences=count))
        assert len(entries) == count
        assert [e.date for e in entries] == [date(2024, 1, 1) + timedelta(days=i) for i in range(count)]

    def test_default_cap(self):
        assert len(expand(template(frequency='daily'))) == DEFAULT_MAX_OCCURRENCES == 52

    def test_end_date_bounds_before_count(self):
        entries = expand(template(frequency='daily', end_date=date(2024, 1, 3), max_occurrences=10))
        assert [e.date.day for e in entries] == [1, 2, 3]

    def test_end_date_before_start_yields_nothing(self):
        assert expand(template(frequency='daily', end_date=date(2023, 12, 31))) == []


class TestWeekly:
    def test_monday_wednesday_over_two_weeks(self):
        entries = expand(template(frequency='weekly', weekdays=[1, 3], end_date=date(2024, 1, 14)))
        assert [e.date for e in entries] == [
            date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8), date(2024, 1, 10),
        ]
        assert [e.date.strftime('%A') for e in entries] == ['Monday', 'Wednesday', 'Monday', 'Wednesday']

    def test_sunday_is_zero(self):
        entries = expand(template(frequency='weekly', weekdays=[0], max_occurrences=2))
        assert [e.date for e in entries] == [date(2024, 1, 7), date(2024, 1, 14)]

    def test_missing_weekdays_rejected(self):
        with pytest.raises(InvalidRecurrence):
            expand(template(frequency='weekly'))

    def test_empty_weekdays_rejected(self):
        with pytest.raises(InvalidRecurrence):
            expand(template(frequency='weekly', weekdays=[]))

    def test_weekday_out_of_range(self):
        with pytest.raises(ValidationError):
            Recurrence(frequency='weekly', weekdays=[7])


class TestMonthly:
    def test_same_day_of_month(self):
        entries = expand(template(start=date(2024, 1, 15), frequency='monthly', max_occurrences=3))
        assert [e.date for e in entries] == [date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15)]

    def test_31st_skips_short_months(self):
        entries = expand(template(start=date(2024, 1, 31), frequency='monthly'))
        assert len(entries) == 52
        assert all(e.date.day == 31 for e in entries)
        assert [e.date for e in entries[:4]] == [
            date(2024, 1, 31), date(2024, 3, 31), date(2024, 5, 31), date(2024, 7, 31),
        ]

    def test_29th_only_in_leap_february(self):
        entries = expand(template(start=date(2024, 1, 29), frequency='monthly', end_date=date(2025, 3, 31)))
        februaries = [e.date for e in entries if e.date.month == 2]
        assert februaries == [date(2024, 2, 29)]


class TestOccurrences:
    def test_ids_unique_and_derived_from_template(self):
        entries = expand(template(frequency='daily', max_occurrences=4))
        assert [e.id for e in entries] == ['tpl_0', 'tpl_1', 'tpl_2', 'tpl_3']

    def test_copies_keep_template_fields(self):
        entries = expand(template(frequency='daily', max_occurrences=2))
        for e in entries:
            assert (e.agent_id, e.start_time, e.end_time, e.notes) == ('2', '07:00', '15:00', 'Ronde')

    def test_template_not_mutated(self):
        tpl = template(frequency='daily', max_occurrences=3)
        before = tpl.model_dump()
        expand(tpl)
        assert tpl.model_dump() == before

    def test_template_without_id_gets_one(self):
        tpl = template(frequency='daily', max_occurrences=2).model_copy(update={'id': None})
        ids = [e.id for e in expand(tpl)]
        assert len(set(ids)) == 2
        assert all(i.endswith(f"_{n}") for n, i in enumerate(ids))

    def test_recurring_without_rule_rejected(self):
        with pytest.raises(InvalidRecurrence):
            expand(template())
