import pytest

from retirement_planner.rules.contributions import (
    calendar_month_for_period,
    discretionary_contributions,
    months_remaining_in_fy,
    super_contribution,
)
from retirement_planner.state.models import BufferMode

CAP = 27500


def _contribution(monthly_salary=10000, requested=500, to_date=0.0, months_remaining=12):
    return super_contribution(
        monthly_salary=monthly_salary,
        sg_rate=0.115,
        requested_sacrifice=requested,
        concessional_cap=CAP,
        fy_concessional_to_date=to_date,
        months_remaining=months_remaining,
        contributions_tax_rate=0.15,
    )


def test_sacrifice_within_cap_is_not_clamped():
    c = _contribution(requested=500)
    assert c.employer == pytest.approx(1150)
    assert c.salary_sacrifice == pytest.approx(500)
    assert c.cap_warning is False
    assert c.gross == pytest.approx(1650)
    assert c.net == pytest.approx(1650 * 0.85)
    assert c.cap_utilization == pytest.approx(1650 / CAP)


def test_sacrifice_clamped_to_remaining_headroom():
    # headroom = 27500 - 12 * 1150 = 13700, spread over 12 months
    c = _contribution(requested=2000)
    assert c.salary_sacrifice == pytest.approx(13700 / 12)
    assert c.requested_sacrifice == 2000
    assert c.cap_warning is True


def test_full_year_of_clamped_sacrifice_lands_exactly_on_cap():
    to_date = 0.0
    for remaining in range(12, 0, -1):
        c = _contribution(requested=5000, to_date=to_date, months_remaining=remaining)
        to_date = c.fy_total
        assert to_date <= CAP + 1e-6
    assert to_date == pytest.approx(CAP)


def test_employer_contributions_alone_over_cap_flag_warning():
    c = _contribution(monthly_salary=25000, requested=0, to_date=26000, months_remaining=3)
    assert c.salary_sacrifice == 0
    assert c.fy_total > CAP
    assert c.cap_warning is True


def test_no_sacrifice_when_employer_due_exhausts_cap():
    c = _contribution(monthly_salary=25000, requested=300, months_remaining=12)
    assert c.salary_sacrifice == 0
    assert c.cap_warning is True


@pytest.mark.parametrize(
    "calendar_month, expected",
    [(7, 12), (6, 1), (1, 6), (12, 7)],
)
def test_months_remaining_in_fy(calendar_month, expected):
    assert months_remaining_in_fy(calendar_month, 7) == expected


def test_months_remaining_calendar_year():
    assert months_remaining_in_fy(1, 1) == 12
    assert months_remaining_in_fy(12, 1) == 1


@pytest.mark.parametrize(
    "start_month, period, expected",
    [(7, 1, 7), (7, 6, 12), (7, 7, 1), (1, 13, 1), (12, 2, 1)],
)
def test_calendar_month_for_period(start_month, period, expected):
    assert calendar_month_for_period(start_month, period) == expected


def test_discretionary_contributions_invested_when_investing():
    d = discretionary_contributions(1000, 300, BufferMode.INVESTING)
    assert (d.portfolio, d.property_extra, d.redirected_to_buffer, d.paused) == (1000, 300, 0, False)


def test_paused_redirects_dca_and_extra_repayment():
    d = discretionary_contributions(1000, 300, BufferMode.PAUSED)
    assert d.portfolio == 0
    assert d.property_extra == 0
    assert d.redirected_to_buffer == 1300
    assert d.paused is True


def test_paused_portfolio_only_keeps_extra_repayment():
    d = discretionary_contributions(1000, 300, BufferMode.PAUSED, pause_scope="portfolio_only")
    assert d.portfolio == 0
    assert d.property_extra == 300
    assert d.redirected_to_buffer == 1000
