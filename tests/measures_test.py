import datetime
from unittest import TestCase

from esmonitor.measures import Measure, RateMeasure, RateMeasureRegistry


class MeasureTests(TestCase):
    def test_fresh_measure_is_not_written(self):
        m = Measure()
        self.assertEqual(0, m.value)
        self.assertFalse(m.written)
        self.assertFalse(m.has_breakdown)
        self.assertIsNone(m.breakdown_dimension)

    def test_set_value_overwrites(self):
        m = Measure()
        m.set_value(5)
        m.set_value(3)
        self.assertEqual(3, m.value)
        self.assertTrue(m.written)

    def test_add_value_sums_up_all_values(self):
        values = [3, 1.5, 0, 7, -2]
        m = Measure()
        for v in values:
            m.add_value(v)
        self.assertEqual(sum(values), m.value)

    def test_add_value_is_independent_of_order(self):
        m1 = Measure()
        m2 = Measure()
        for v in [1, 2, 3]:
            m1.add_value(v)
        for v in [3, 1, 2]:
            m2.add_value(v)
        self.assertEqual(m1.value, m2.value)

    def test_add_breakdown_accumulates_per_key(self):
        m = Measure("Node")
        m.add_breakdown("A", 10)
        m.add_breakdown("B", 1)
        m.add_breakdown("A", 5)
        self.assertEqual({"A": 15, "B": 1}, m.breakdown)
        self.assertTrue(m.has_breakdown)
        self.assertEqual("Node", m.breakdown_dimension)
        # the base value is not touched by breakdown entries
        self.assertEqual(0, m.value)

    def test_breakdown_cannot_be_modified_from_outside(self):
        m = Measure("Node")
        m.add_breakdown("A", 1)
        m.breakdown["A"] = 100
        self.assertEqual({"A": 1}, m.breakdown)

    def test_initial_value_counts_as_written(self):
        m = Measure(value=7)
        self.assertEqual(7, m.value)
        self.assertTrue(m.written)


class RateMeasureTests(TestCase):
    def test_first_sample_yields_no_rate(self):
        r = RateMeasure()
        r.sample(100, 1000)
        self.assertFalse(r.derived_measure.written)
        self.assertEqual(0, r.derived_measure.value)
        self.assertEqual(100, r.base_measure.value)
        self.assertEqual(100, r.previous_value)
        self.assertEqual(1000, r.previous_timestamp)

    def test_computes_rate_per_second(self):
        r = RateMeasure(unit=datetime.timedelta(seconds=1))
        r.sample(100, 1000)
        r.sample(160, 1002)
        self.assertEqual(30, r.derived_measure.value)
        self.assertEqual(160, r.base_measure.value)

    def test_computes_rate_per_minute(self):
        r = RateMeasure(unit=datetime.timedelta(minutes=1))
        r.sample(0, 0)
        r.sample(30, 30)
        self.assertEqual(60, r.derived_measure.value)

    def test_decreasing_counter_is_clamped_to_zero(self):
        r = RateMeasure()
        r.sample(100, 1000)
        r.sample(90, 1001)
        self.assertEqual(0, r.derived_measure.value)
        self.assertTrue(r.derived_measure.written)
        self.assertEqual(90, r.previous_value)

    def test_rate_after_decrease_is_based_on_latest_value(self):
        r = RateMeasure()
        r.sample(100, 1000)
        r.sample(10, 1001)
        r.sample(20, 1002)
        self.assertEqual(10, r.derived_measure.value)

    def test_identical_timestamps_do_not_update_rate(self):
        r = RateMeasure()
        r.sample(100, 1000)
        r.sample(110, 1001)
        self.assertEqual(10, r.derived_measure.value)

        r.sample(500, 1001)
        self.assertEqual(10, r.derived_measure.value)
        self.assertEqual(500, r.previous_value)
        self.assertEqual(1001, r.previous_timestamp)
        self.assertEqual(500, r.base_measure.value)

    def test_timestamps_going_backwards_do_not_update_rate(self):
        r = RateMeasure()
        r.sample(100, 1000)
        r.sample(200, 999)
        self.assertFalse(r.derived_measure.written)
        self.assertEqual(999, r.previous_timestamp)

    def test_rejects_non_positive_unit(self):
        with self.assertRaises(ValueError):
            RateMeasure(unit=datetime.timedelta(0))


class RateMeasureRegistryTests(TestCase):
    def test_returns_same_instance_for_same_key(self):
        registry = RateMeasureRegistry()
        r1 = registry.rate_measure("http://localhost:9200", "DocCount")
        r2 = registry.rate_measure("http://localhost:9200", "DocCount")
        self.assertIs(r1, r2)
        self.assertEqual(1, len(registry))

    def test_separates_targets_and_counters(self):
        registry = RateMeasureRegistry()
        r1 = registry.rate_measure("http://a:9200", "DocCount")
        r2 = registry.rate_measure("http://b:9200", "DocCount")
        r3 = registry.rate_measure("http://a:9200", "DeletedCount")
        self.assertIsNot(r1, r2)
        self.assertIsNot(r1, r3)
        self.assertEqual(3, len(registry))

    def test_uses_configured_unit(self):
        registry = RateMeasureRegistry(unit=datetime.timedelta(minutes=1))
        self.assertEqual(datetime.timedelta(minutes=1), registry.rate_measure("t", "n").unit)

    def test_clear_forgets_previous_samples(self):
        registry = RateMeasureRegistry()
        registry.rate_measure("t", "n").sample(1, 1)
        registry.clear()
        self.assertEqual(0, len(registry))
        self.assertIsNone(registry.rate_measure("t", "n").previous_value)
