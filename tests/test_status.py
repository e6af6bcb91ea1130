"""
Tests for agent status derivation.

2024-01-01 is a Monday; 2024-01-07 is a Sunday.
"""

from datetime import date

import pytest

from errors import InvalidInput
from schemas import Agent, DetailedScheduleEntry, WeeklySchedule
from status import derive_status, effective_status, week_bounds

WORKWEEK = {
    'monday': '08:00-17:00',
    'tuesday': '08:00-17:00',
    'wednesday': '08:00-17:00',
    'thursday': '08:00-17:00',
    'friday': '08:00-17:00',
    'saturday': '08:00-17:00',
    'sunday': 'Repos',
}


def make_agent(**overrides):
    fields = {'id': 'a1', 'first_name': 'Pierre', 'last_name': 'Martin', 'weekly_schedule': WORKWEEK}
    fields.update(overrides)
    return Agent(**fields)


def shift(day):
    return DetailedScheduleEntry(id='s1', agent_id='a1', date=day, start_time='08:00', end_time='12:00')


class TestLeave:
    def test_leave_date_is_on_leave(self):
        agent = make_agent(leave_dates=['2024-01-15'])
        assert derive_status(agent, date(2024, 1, 15)) == 'on-leave'

    def test_leave_wins_over_detailed_schedule(self):
        agent = make_agent(leave_dates=['2024-01-15'], detailed_schedules=[shift(date(2024, 1, 15))])
        assert derive_status(agent, date(2024, 1, 15)) == 'on-leave'

    def test_inactive_override_hides_leave(self):
        agent = make_agent(leave_dates=['2024-01-15'], status='inactive')
        assert derive_status(agent, date(2024, 1, 15)) == 'on-leave'
        assert effective_status(agent, date(2024, 1, 15)) == 'inactive'

    def test_day_after_leave_is_active(self):
        agent = make_agent(leave_dates=['2024-01-15'])
        assert derive_status(agent, date(2024, 1, 16)) == 'active'


class TestWeeklyPattern:
    def test_sunday_rest_is_upcoming(self):
        assert derive_status(make_agent(), date(2024, 1, 7)) == 'upcoming'

    def test_monday_shift_is_active(self):
        assert derive_status(make_agent(), date(2024, 1, 8)) == 'active'

    def test_all_rest_schedule_is_upcoming(self):
        agent = make_agent(weekly_schedule=WeeklySchedule())
        for day in range(1, 8):
            assert derive_status(agent, date(2024, 1, day)) == 'upcoming'

    def test_blank_and_whitespace_entries_are_rest(self):
        agent = make_agent(weekly_schedule={**WORKWEEK, 'monday': '', 'tuesday': '   '})
        assert derive_status(agent, date(2024, 1, 1)) == 'upcoming'
        assert derive_status(agent, date(2024, 1, 2)) == 'upcoming'

    def test_missing_schedule_is_all_rest(self):
        agent = make_agent(weekly_schedule=None)
        assert agent.weekly_schedule == WeeklySchedule()
        assert derive_status(agent, date(2024, 1, 3)) == 'upcoming'


class TestDetailedSchedule:
    def test_shift_later_in_same_week_makes_rest_day_active(self):
        # week of Sunday 2024-01-07 runs to Saturday 2024-01-13
        agent = make_agent(detailed_schedules=[shift(date(2024, 1, 13))])
        assert derive_status(agent, date(2024, 1, 7)) == 'active'

    def test_shift_in_previous_week_does_not_count(self):
        agent = make_agent(detailed_schedules=[shift(date(2024, 1, 6))])
        assert derive_status(agent, date(2024, 1, 7)) == 'upcoming'

    def test_week_bounds_start_on_sunday(self):
        assert week_bounds(date(2024, 1, 10)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert week_bounds(date(2024, 1, 7)) == (date(2024, 1, 7), date(2024, 1, 13))
        assert week_bounds(date(2024, 1, 13)) == (date(2024, 1, 7), date(2024, 1, 13))


class TestInputs:
    def test_iso_string_accepted(self):
        assert derive_status(make_agent(), '2024-01-08') == 'active'

    @pytest.mark.parametrize("bad", ['not-a-date', '2024-02-30', '', None])
    def test_malformed_date_rejected(self, bad):
        with pytest.raises(InvalidInput):
            derive_status(make_agent(), bad)

    def test_inactive_override(self):
        agent = make_agent(status='inactive')
        assert derive_status(agent, date(2024, 1, 8)) == 'active'
        assert effective_status(agent, date(2024, 1, 8)) == 'inactive'

    def test_effective_status_follows_derivation_otherwise(self):
        agent = make_agent(status='on-leave')
        assert effective_status(agent, date(2024, 1, 7)) == 'upcoming'
