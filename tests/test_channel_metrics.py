import unittest

from engines.channel_metrics import (
    compute_channel_metrics, compute_hourly_rates, validate_params, round_half_up,
)
from engines.data_loader import default_params
from engines.errors import InvalidInputError


def params(**overrides):
    p = default_params()
    p.update(overrides)
    return p


class TestDefaultScenario(unittest.TestCase):
    """100 contacts/day, 180 min human response, R$1.200 ticket, R$4.000 human budget."""

    def setUp(self):
        self.human = compute_channel_metrics(params(), is_automated=False)
        self.ai = compute_channel_metrics(params(), is_automated=True)

    def test_volumes(self):
        self.assertAlmostEqual(self.human['monthlyContacts'], 3000)
        self.assertAlmostEqual(self.human['respondedContacts'], 2100)
        self.assertAlmostEqual(self.ai['respondedContacts'], 2850)

    def test_human_channel(self):
        self.assertEqual(self.human['conversionRate'], 1)
        self.assertEqual(self.human['conversions'], 21)
        self.assertAlmostEqual(self.human['revenue'], 25200)
        self.assertAlmostEqual(self.human['monthlyCost'], 4000 + 6300 * 4000 / 176)
        self.assertAlmostEqual(self.human['costPerAttendance'], self.human['monthlyCost'] / 2100)
        self.assertAlmostEqual(self.human['lostRevenue'], 10800)
        self.assertEqual(self.human['revenueFormatted'], 'R$\xa025.200,00')

    def test_automated_channel(self):
        self.assertEqual(self.ai['conversionRate'], 40)
        self.assertEqual(self.ai['conversions'], 1140)
        self.assertAlmostEqual(self.ai['revenue'], 1368000)
        self.assertAlmostEqual(self.ai['monthlyCost'], 47.5 * 1500 / 720 + 1500)
        self.assertAlmostEqual(self.ai['lostRevenue'], 72000)
        self.assertEqual(self.ai['responseTime'], 1)
        self.assertEqual(self.ai['revenueFormatted'], 'R$\xa01.368.000,00')

    def test_annual_projection(self):
        for m in (self.human, self.ai):
            self.assertEqual(m['annualRevenue'], m['revenue'] * 12)
            self.assertEqual(m['annualCost'], m['monthlyCost'] * 12)
            self.assertEqual(m['annualProfit'], m['revenue'] * 12 - m['monthlyCost'] * 12)

    def test_every_currency_field_has_formatted_twin(self):
        for field in ('revenue', 'monthlyCost', 'costPerAttendance', 'lostRevenue',
                      'annualRevenue', 'annualCost', 'annualProfit'):
            self.assertTrue(self.ai[f'{field}Formatted'].startswith('R$'))


class TestChannelPolicies(unittest.TestCase):

    def test_ai_conversion_flat_regardless_of_response_time(self):
        for rt in (0.5, 5, 45, 600):
            m = compute_channel_metrics(params(responseTime=rt), is_automated=True)
            self.assertEqual(m['conversionRate'], 40)

    def test_lost_leads_rates(self):
        for cpd in (1, 37, 100, 5000):
            h = compute_channel_metrics(params(contactsPerDay=cpd), is_automated=False)
            a = compute_channel_metrics(params(contactsPerDay=cpd), is_automated=True)
            self.assertAlmostEqual(h['respondedContacts'] / h['monthlyContacts'], 0.70)
            self.assertAlmostEqual(a['respondedContacts'] / a['monthlyContacts'], 0.95)

    def test_human_rate_follows_response_time(self):
        self.assertEqual(compute_channel_metrics(params(responseTime=60), False)['conversionRate'], 1)
        self.assertEqual(compute_channel_metrics(params(responseTime=61), False)['conversionRate'], 1)
        self.assertEqual(compute_channel_metrics(params(responseTime=2), False)['conversionRate'], 30)

    def test_revenue_uses_unrounded_conversions(self):
        # 7 contacts/day -> 147 responded, 30% -> 44.1 conversions
        m = compute_channel_metrics(params(contactsPerDay=7, responseTime=2, ticketValue=100), False)
        self.assertEqual(m['conversions'], 44)
        self.assertAlmostEqual(m['conversionsExact'], 44.1)
        self.assertAlmostEqual(m['revenue'], 4410)

    def test_lost_revenue_uses_total_contacts(self):
        m = compute_channel_metrics(params(contactsPerDay=10, responseTime=5, ticketValue=50), False)
        self.assertAlmostEqual(m['lostRevenue'], 300 * 0.30 * 0.20 * 50)

    def test_explicit_hourly_rates_override_derived(self):
        p = params(humanCostPerHour=25, aiCostPerHour=15)
        self.assertAlmostEqual(compute_channel_metrics(p, False)['monthlyCost'], 4000 + 6300 * 25)
        self.assertAlmostEqual(compute_channel_metrics(p, True)['monthlyCost'], 47.5 * 15 + 1500)

    def test_pure(self):
        p = params()
        snapshot = dict(p)
        first = compute_channel_metrics(p, False)
        self.assertEqual(compute_channel_metrics(p, False), first)
        self.assertEqual(p, snapshot)


class TestHourlyRates(unittest.TestCase):

    def test_derived_from_budgets(self):
        rates = compute_hourly_rates(params())
        self.assertAlmostEqual(rates['humanCostPerHour'], 4000 / 176)
        self.assertAlmostEqual(rates['aiCostPerHour'], 1500 / 720)
        self.assertTrue(rates['humanCostPerHourDerived'])
        self.assertTrue(rates['aiCostPerHourDerived'])

    def test_override(self):
        rates = compute_hourly_rates(params(humanCostPerHour='25'))
        self.assertEqual(rates['humanCostPerHour'], 25.0)
        self.assertFalse(rates['humanCostPerHourDerived'])
        self.assertTrue(rates['aiCostPerHourDerived'])


class TestValidation(unittest.TestCase):

    def test_zero_contacts_rejected(self):
        with self.assertRaises(InvalidInputError) as ctx:
            compute_channel_metrics(params(contactsPerDay=0), False)
        self.assertEqual(ctx.exception.field, 'contactsPerDay')

    def test_negative_and_non_finite_rejected(self):
        for key in ('contactsPerDay', 'responseTime', 'ticketValue', 'humanMonthlyCost', 'aiCostPerMonth'):
            for bad in (-1, float('nan'), float('inf'), 'x', None, True):
                with self.assertRaises(InvalidInputError) as ctx:
                    validate_params(params(**{key: bad}))
                self.assertEqual(ctx.exception.field, key)

    def test_hourly_override_may_be_zero_not_negative(self):
        self.assertEqual(validate_params(params(aiCostPerHour=0))['aiCostPerHour'], 0.0)
        with self.assertRaises(InvalidInputError):
            validate_params(params(aiCostPerHour=-1))

    def test_numeric_strings_coerced(self):
        clean = validate_params(params(contactsPerDay='250'))
        self.assertEqual(clean['contactsPerDay'], 250.0)


class TestRoundHalfUp(unittest.TestCase):

    def test_halves_round_up(self):
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)
