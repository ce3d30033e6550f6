import os
import unittest
from unittest import mock

from pulse.api.server import app
from pulse.config.env import AggregatorConfig, get_aggregator_config, get_api_config

NOW = "2025-07-01T15:00:00-04:00"

QUOTES = [
    {"quote_number": 1, "sent_date": "2025-07-01", "converted_date": "2025-07-01", "total_dollars": 100},
    {"quote_number": 2, "sent_date": "2025-07-01", "converted_date": "2025-07-01", "total_dollars": 200},
    {"quote_number": 3, "sent_date": "2025-07-01", "total_dollars": 300},
]
JOBS = [{"Job_Number": 9, "Date": "2025-08-04", "Calculated_Value": "1250.75", "Job_type": "ONE_OFF"}]


class TestKPIEndpoint(unittest.TestCase):
    def setUp(self):
        app.testing = True
        app.config['API_KEY'] = None
        app.config['AGGREGATOR_CONFIG'] = AggregatorConfig()
        self.client = app.test_client()

    def tearDown(self):
        app.config.pop('API_KEY', None)
        app.config.pop('AGGREGATOR_CONFIG', None)

    def test_health(self):
        rv = self.client.get('/api/health')
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(rv.get_json()['status'], 'ok')

    def test_post_kpis(self):
        rv = self.client.post('/api/kpis', json={'quotes': QUOTES, 'jobs': JOBS, 'now': NOW})
        self.assertEqual(rv.status_code, 200)
        body = rv.get_json()
        self.assertEqual(body['quotesSentToday'], 3)
        self.assertEqual(body['convertedToday'], 2)
        self.assertEqual(body['convertedAmountToday'], 300.0)
        self.assertEqual(body['nextMonthOTB'], 1250.75)
        self.assertEqual(body['display']['nextMonthOTB'], '$1,251')
        self.assertEqual(len(body['weeklyHistorical']), 12)
        self.assertIn('lastUpdated', body)

    def test_contract_errors_are_400(self):
        rv = self.client.post('/api/kpis', json={'quotes': 'nope', 'jobs': [], 'now': NOW})
        self.assertEqual(rv.status_code, 400)
        rv = self.client.post('/api/kpis', json={'quotes': [], 'jobs': [], 'now': 'later'})
        self.assertEqual(rv.status_code, 400)
        rv = self.client.post('/api/kpis', data='not json', content_type='application/json')
        self.assertEqual(rv.status_code, 400)

    def test_supplied_but_empty_now_is_400(self):
        for now in ("", 0, None):
            rv = self.client.post('/api/kpis', json={'quotes': [], 'jobs': [], 'now': now})
            self.assertEqual(rv.status_code, 400, now)
            self.assertIn('error', rv.get_json())

    def test_now_defaults_to_request_time(self):
        rv = self.client.post('/api/kpis', json={'quotes': [], 'jobs': []})
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(rv.get_json()['quotesSentToday'], 0)

    def test_api_key(self):
        app.config['API_KEY'] = 'secret'
        rv = self.client.post('/api/kpis', json={'quotes': [], 'jobs': [], 'now': NOW})
        self.assertEqual(rv.status_code, 401)
        rv = self.client.post('/api/kpis', json={'quotes': [], 'jobs': [], 'now': NOW},
                              headers={'X-API-Key': 'secret'})
        self.assertEqual(rv.status_code, 200)
        self.assertEqual(self.client.get('/api/health').status_code, 200)


class TestEnvConfig(unittest.TestCase):
    def test_env_overrides(self):
        env = {
            'PULSE_TIMEZONE': 'America/Chicago',
            'PULSE_RECURRING_YEAR': '2027',
            'PULSE_OTB_WEEKS': '5',
            'PULSE_CONVERTED_STATUSES': 'Converted, won,',
            'PULSE_API_KEY': 'k',
        }
        with mock.patch.dict(os.environ, env):
            cfg = get_aggregator_config()
            self.assertEqual(cfg.timezone, 'America/Chicago')
            self.assertEqual(cfg.recurring_year, 2027)
            self.assertEqual(cfg.otb_weeks, 5)
            self.assertEqual(cfg.converted_statuses, frozenset({'converted', 'won'}))
            self.assertEqual(get_api_config().api_key, 'k')

    def test_invalid_env_rejected(self):
        with mock.patch.dict(os.environ, {'PULSE_OTB_WEEKS': '40'}):
            with self.assertRaises(ValueError):
                get_aggregator_config()


if __name__ == "__main__":
    unittest.main()
