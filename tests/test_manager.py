"""
Unit tests for the portfolio snapshot store.
"""

import unittest
import tempfile
import shutil
import json
from datetime import date
from pathlib import Path

from business_logic.error_handler import SnapshotError
from business_logic.project_controller import AddPoc, SetActualField, apply_command
from data.manager import PortfolioStore, project_from_dict, project_to_dict
from data.sample_data import seed_portfolio


class TestPortfolioStore(unittest.TestCase):
    """Test cases for PortfolioStore class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.store = PortfolioStore(self.temp_dir, campaign_start=date(2025, 10, 1))

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_without_snapshot_seeds(self):
        """Test that a missing snapshot yields the sample portfolio."""
        state = self.store.load()

        self.assertFalse(self.store.snapshot_exists())
        self.assertEqual([p.name for p in state.projects], ["Godrej Horizon", "Godrej Reserve"])
        self.assertEqual(len(state.pocs), 3)

    def test_save_and_load(self):
        """Test that a saved state loads back unchanged."""
        state = seed_portfolio(date(2025, 10, 1))
        state = apply_command(state, SetActualField('2', 4, 'leads', 55))
        state = apply_command(state, AddPoc("Neha", poc_id='4'))

        path = self.store.save(state)
        loaded = self.store.load()

        self.assertEqual(path, Path(self.temp_dir) / "portfolio.json")
        self.assertEqual(loaded, state)
        self.assertEqual(loaded.get_project('2').actuals[4].leads, 55)
        self.assertIsNone(loaded.get_project('2').actuals[4].ap)

    def test_snapshot_format(self):
        """Test the on-disk layout of the snapshot."""
        self.store.save(seed_portfolio(date(2025, 10, 1)))

        with open(self.store.snapshot_file) as f:
            data = json.load(f)

        self.assertEqual(data['version'], 1)
        self.assertIn('saved_at', data)
        self.assertEqual(data['projects'][0]['status'], "Active")
        self.assertEqual(sorted(data['projects'][0]['actuals']), ['0', '1', '2'])

    def test_corrupt_snapshot(self):
        """Test that an unreadable snapshot raises SnapshotError."""
        Path(self.temp_dir, "portfolio.json").write_text("{not json")

        with self.assertRaises(SnapshotError):
            self.store.load()

    def test_snapshot_missing_fields(self):
        """Test that a snapshot without projects is rejected."""
        Path(self.temp_dir, "portfolio.json").write_text(json.dumps({'version': 1}))

        with self.assertRaises(ValueError):
            self.store.load()

    def test_clear(self):
        """Test that clearing falls back to the sample portfolio."""
        state = apply_command(seed_portfolio(date(2025, 10, 1)), AddPoc("Neha", poc_id='4'))
        self.store.save(state)
        self.assertTrue(self.store.snapshot_exists())

        self.store.clear()

        self.assertFalse(self.store.snapshot_exists())
        self.assertEqual(len(self.store.load().pocs), 3)


class TestProjectSerialization(unittest.TestCase):
    """Test cases for project dict conversion."""

    def test_round_trip(self):
        project = seed_portfolio(date(2025, 10, 1)).get_project('1')
        self.assertEqual(project_from_dict(project_to_dict(project)), project)

    def test_optional_fields_default(self):
        data = project_to_dict(seed_portfolio(date(2025, 10, 1)).get_project('2'))
        for key in ('location', 'poc', 'other_spends', 'media_plan', 'actuals', 'channel_performance'):
            data.pop(key)

        project = project_from_dict(data)

        self.assertEqual(project.location, '')
        self.assertEqual(project.media_plan, [])
        self.assertEqual(project.actuals, {})


if __name__ == '__main__':
    unittest.main()
