"""
Service ROI Calculator — Channel Metrics Engine
Per-channel monthly and annual economics for a human-staffed vs automated (AI) service path.

Flow (identical for both channels, only the policy constants differ):
  1. Monthly volume from daily contacts
  2. Conversion rate — flat for AI, response-time step table for humans
  3. Lost leads — contacts that never get a reply
  4. Cost — fixed base plus handling hours at the hourly rate
  5. Revenue, cost per attendance, forfeited revenue, annual projection
"""
import math
import logging

from engines.conversion import estimate_conversion_rate
from engines.errors import InvalidInputError
from engines.formatting import format_brl

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12
WORKING_DAYS_PER_MONTH = 22  # human staff
HOURS_PER_DAY = 8
AI_HOURS_PER_MONTH = 30 * 24  # AI available 24/7

CHANNELS = {
    'human': {
        'label': 'Atendimento Humano',
        'lostLeadsRate': 0.30,
    },
    'automated': {
        'label': 'Atendimento IA',
        'lostLeadsRate': 0.05,
        'responseTime': 1,
        'conversionRate': 40,
    },
}

REQUIRED_PARAMS = ('contactsPerDay', 'responseTime', 'ticketValue', 'humanMonthlyCost', 'aiCostPerMonth')
RATE_OVERRIDES = ('humanCostPerHour', 'aiCostPerHour')

CURRENCY_FIELDS = ('revenue', 'monthlyCost', 'costPerAttendance', 'lostRevenue',
                   'annualRevenue', 'annualCost', 'annualProfit')


def _as_number(field, value):
    if isinstance(value, bool):
        raise InvalidInputError(field, f"{field} must be numeric, got {value!r}")
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(field, f"{field} must be numeric, got {value!r}")
    if not math.isfinite(v):
        raise InvalidInputError(field, f"{field} must be finite, got {value!r}")
    return v


def validate_params(params):
    """Return a clean numeric snapshot of the inputs or raise InvalidInputError.

    Every required input must be > 0, so responded contacts (and hence cost per
    attendance) are always well defined. Hourly overrides are optional; None means
    "derive from the monthly budget", otherwise they must be >= 0.
    """
    clean = {}
    for key in REQUIRED_PARAMS:
        if params.get(key) is None:
            raise InvalidInputError(key, f"{key} is required")
        v = _as_number(key, params[key])
        if v <= 0:
            raise InvalidInputError(key, f"{key} must be greater than zero, got {params[key]!r}")
        clean[key] = v
    for key in RATE_OVERRIDES:
        raw = params.get(key)
        if raw is None or raw == '':
            clean[key] = None
            continue
        v = _as_number(key, raw)
        if v < 0:
            raise InvalidInputError(key, f"{key} cannot be negative, got {raw!r}")
        clean[key] = v
    return clean


def compute_hourly_rates(params):
    """Hourly cost of each channel — explicit override, else derived from the monthly budget."""
    p = validate_params(params)
    human = p['humanCostPerHour']
    if human is None:
        human = p['humanMonthlyCost'] / (WORKING_DAYS_PER_MONTH * HOURS_PER_DAY)
    ai = p['aiCostPerHour']
    if ai is None:
        ai = p['aiCostPerMonth'] / AI_HOURS_PER_MONTH
    return {
        'humanCostPerHour': human,
        'aiCostPerHour': ai,
        'humanCostPerHourDerived': p['humanCostPerHour'] is None,
        'aiCostPerHourDerived': p['aiCostPerHour'] is None,
    }


def round_half_up(x):
    return int(math.floor(x + 0.5))


def compute_channel_metrics(params, is_automated):
    p = validate_params(params)
    rates = compute_hourly_rates(p)
    key = 'automated' if is_automated else 'human'
    policy = CHANNELS[key]

    monthly_contacts = p['contactsPerDay'] * DAYS_PER_MONTH
    response_time = policy['responseTime'] if is_automated else p['responseTime']
    conversion_rate = policy['conversionRate'] if is_automated else estimate_conversion_rate(response_time)
    lost_leads_rate = policy['lostLeadsRate']
    responded = monthly_contacts * (1 - lost_leads_rate)

    handling_hours = responded * response_time / 60
    if is_automated:
        monthly_cost = handling_hours * rates['aiCostPerHour'] + p['aiCostPerMonth']
    else:
        # fixed staffing budget plus handling hours on top
        monthly_cost = p['humanMonthlyCost'] + handling_hours * rates['humanCostPerHour']

    conversions = responded * conversion_rate / 100
    # revenue uses the unrounded conversions; only the displayed count is rounded
    revenue = conversions * p['ticketValue']
    cost_per_attendance = monthly_cost / responded
    lost_revenue = monthly_contacts * lost_leads_rate * (conversion_rate / 100) * p['ticketValue']
    annual_revenue = revenue * MONTHS_PER_YEAR
    annual_cost = monthly_cost * MONTHS_PER_YEAR

    result = {
        'channel': key,
        'label': policy['label'],
        'monthlyContacts': monthly_contacts,
        'responseTime': response_time,
        'lostLeadsRate': lost_leads_rate,
        'respondedContacts': responded,
        'conversionRate': conversion_rate,
        'conversions': round_half_up(conversions),
        'conversionsExact': conversions,
        'revenue': revenue,
        'monthlyCost': monthly_cost,
        'costPerAttendance': cost_per_attendance,
        'lostRevenue': lost_revenue,
        'annualRevenue': annual_revenue,
        'annualCost': annual_cost,
        'annualProfit': annual_revenue - annual_cost,
    }
    for field in CURRENCY_FIELDS:
        result[f"{field}Formatted"] = format_brl(result[field])
    logger.debug("%s: responded=%.1f conv=%s%% revenue=%.2f cost=%.2f",
                 key, responded, conversion_rate, revenue, monthly_cost)
    return result
