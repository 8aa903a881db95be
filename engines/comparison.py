"""
Service ROI Calculator — Comparison Engine
Runs both channels on one input snapshot and shapes the result for the screen:
metric cards, annual impact, investment panel and the bar-chart series.
"""
from engines.channel_metrics import validate_params, compute_channel_metrics, compute_hourly_rates
from engines.conversion import conversion_table
from engines.formatting import format_brl, format_count, format_pct

CHART_LABELS = ['Atendimentos/mês', 'Conversões', 'Faturamento (R$ mil)', 'Custo Mensal (R$ mil)']

CHART_COLORS = {
    'human': {'backgroundColor': 'rgba(239, 68, 68, 0.5)', 'borderColor': 'rgb(239, 68, 68)'},
    'automated': {'backgroundColor': 'rgba(34, 197, 94, 0.5)', 'borderColor': 'rgb(34, 197, 94)'},
}

# (label, metric key, kind) — order of the per-channel cards
CARD_FIELDS = [
    ('Atendimentos/mês', 'respondedContacts', 'number'),
    ('Taxa de Conversão', 'conversionRate', 'pct'),
    ('Conversões', 'conversions', 'number'),
    ('Faturamento', 'revenue', 'currency'),
    ('Custo Mensal', 'monthlyCost', 'currency'),
    ('Custo por Atendimento', 'costPerAttendance', 'currency'),
    ('Perda Mensal', 'lostRevenue', 'currency'),
]


def _display(value, kind):
    if kind == 'currency':
        return format_brl(value)
    if kind == 'pct':
        return format_pct(value)
    return format_count(value)


def build_cards(metrics):
    return [{'label': label, 'key': key, 'value': metrics[key], 'display': _display(metrics[key], kind)}
            for label, key, kind in CARD_FIELDS]


def build_chart_data(human, automated):
    datasets = []
    for m in (human, automated):
        datasets.append({
            'label': m['label'],
            'data': [m['respondedContacts'], m['conversions'], m['revenue'] / 1000, m['monthlyCost'] / 1000],
            **CHART_COLORS[m['channel']],
            'borderWidth': 1,
        })
    return {'labels': list(CHART_LABELS), 'datasets': datasets}


def build_annual_impact(human, automated):
    profit_diff = automated['annualProfit'] - human['annualProfit']
    revenue_gain = ((automated['annualRevenue'] - human['annualRevenue']) / human['annualRevenue'] * 100
                    if human['annualRevenue'] else None)
    channels = {}
    for m in (human, automated):
        channels[m['channel']] = {
            'title': m['label'],
            'annualRevenue': m['annualRevenue'], 'annualRevenueFormatted': m['annualRevenueFormatted'],
            'annualCost': m['annualCost'], 'annualCostFormatted': m['annualCostFormatted'],
            'annualProfit': m['annualProfit'], 'annualProfitFormatted': m['annualProfitFormatted'],
        }
    return {
        'channels': channels,
        'profitDifference': profit_diff,
        'profitDifferenceFormatted': format_brl(profit_diff),
        'revenueGainPct': round(revenue_gain, 1) if revenue_gain is not None else None,
    }


def build_investment(params, rates):
    return {
        'human': {
            'monthlyCost': params['humanMonthlyCost'],
            'monthlyCostFormatted': format_brl(params['humanMonthlyCost']),
            'costPerHour': rates['humanCostPerHour'],
            'costPerHourFormatted': format_brl(rates['humanCostPerHour']),
            'derived': rates['humanCostPerHourDerived'],
        },
        'automated': {
            'monthlyCost': params['aiCostPerMonth'],
            'monthlyCostFormatted': format_brl(params['aiCostPerMonth']),
            'costPerHour': rates['aiCostPerHour'],
            'costPerHourFormatted': format_brl(rates['aiCostPerHour']),
            'derived': rates['aiCostPerHourDerived'],
        },
    }


def run_comparison(params):
    """Full screen payload for one input snapshot. Raises InvalidInputError on bad input."""
    p = validate_params(params)
    rates = compute_hourly_rates(p)
    human = compute_channel_metrics(p, is_automated=False)
    automated = compute_channel_metrics(p, is_automated=True)
    return {
        'params': p,
        'human': human,
        'automated': automated,
        'cards': {'human': build_cards(human), 'automated': build_cards(automated)},
        'hourlyRates': {
            'humanCostPerHour': rates['humanCostPerHour'],
            'humanCostPerHourFormatted': format_brl(rates['humanCostPerHour']),
            'aiCostPerHour': rates['aiCostPerHour'],
            'aiCostPerHourFormatted': format_brl(rates['aiCostPerHour']),
        },
        'investment': build_investment(p, rates),
        'annualImpact': build_annual_impact(human, automated),
        'chart': build_chart_data(human, automated),
        'conversionTable': conversion_table(),
        'currency': 'BRL',
        'locale': 'pt-BR',
    }
