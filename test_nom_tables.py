import unittest
from core.models import AmpacityEntry, ConductorMaterial, InsulationRating
from standards.nom import AmpacityCalculator
from standards.nom_tables import (
    TABLE_8_CONDUCTORS, AMPACITY_TABLES, FLA_TABLE, STANDARD_RATINGS, MOTOR_BREAKER_RATINGS,
    TRANSFORMER_BREAKER_RATINGS, PANEL_BREAKER_RATINGS, CONDUIT_SIZES,
    get_grouping_factor, get_temp_correction, next_standard_rating, find_conductor_for_ampacity,
    select_conduit_size, lookup_fla
)

class TestReferenceTables(unittest.TestCase):

    def test_table_8_is_ordered(self):
        gauges = [c.gauge for c in TABLE_8_CONDUCTORS]
        self.assertEqual(len(gauges), len(set(gauges)))
        for small, big in zip(TABLE_8_CONDUCTORS, TABLE_8_CONDUCTORS[1:]):
            self.assertLessEqual(small.area_mm2, big.area_mm2)
            self.assertLessEqual(small.ampacity_75c, big.ampacity_75c)

    def test_table_8_matches_copper_75c_column(self):
        for c in TABLE_8_CONDUCTORS:
            self.assertEqual(c.ampacity_75c, AMPACITY_TABLES[ConductorMaterial.COPPER][c.gauge][75])

    def test_ampacity_tables_are_ordered(self):
        for table in AMPACITY_TABLES.values():
            rows = list(table.values())
            for rating in (60, 75, 90):
                column = [r[rating] for r in rows]
                self.assertEqual(column, sorted(column))

    def test_fla_tables_sorted_by_hp(self):
        for key, table in FLA_TABLE.items():
            hps = list(table.keys())
            self.assertEqual(hps, sorted(hps), key)
            self.assertEqual(list(table.values()), sorted(table.values()), key)

    def test_rating_sequences_ascending(self):
        for ratings in (STANDARD_RATINGS, MOTOR_BREAKER_RATINGS, TRANSFORMER_BREAKER_RATINGS, PANEL_BREAKER_RATINGS):
            self.assertEqual(ratings, sorted(set(ratings)))
        self.assertEqual(STANDARD_RATINGS[-1], 6000)


class TestCorrectionFactors(unittest.TestCase):

    def test_grouping_boundaries(self):
        self.assertEqual(get_grouping_factor(3), 1.0)
        self.assertEqual(get_grouping_factor(4), 0.8)
        self.assertEqual(get_grouping_factor(6), 0.8)
        self.assertEqual(get_grouping_factor(7), 0.7)
        self.assertEqual(get_grouping_factor(20), 0.5)
        self.assertEqual(get_grouping_factor(30), 0.45)
        self.assertEqual(get_grouping_factor(40), 0.40)
        self.assertEqual(get_grouping_factor(41), 0.35)
        self.assertEqual(get_grouping_factor(500), 0.35)

    def test_grouping_non_increasing(self):
        factors = [get_grouping_factor(n) for n in range(1, 61)]
        for a, b in zip(factors, factors[1:]):
            self.assertGreaterEqual(a, b)

    def test_reference_ambient_is_unity(self):
        for rating in (60, 75, 90):
            self.assertEqual(get_temp_correction(30, rating), 1.0)

    def test_accepts_enum_rating(self):
        self.assertEqual(get_temp_correction(40, InsulationRating.TEMP_90), 0.91)

    def test_temp_correction_decreasing(self):
        for rating in (60, 75, 90):
            factors = [get_temp_correction(t, rating) for t in range(0, 95)]
            for a, b in zip(factors, factors[1:]):
                self.assertGreaterEqual(a, b)

    def test_floor_above_last_band(self):
        self.assertEqual(get_temp_correction(55, 60), 0.41)
        self.assertEqual(get_temp_correction(56, 60), 0.0)
        self.assertEqual(get_temp_correction(70, 75), 0.33)
        self.assertEqual(get_temp_correction(71, 75), 0.0)
        self.assertEqual(get_temp_correction(80, 90), 0.41)
        self.assertEqual(get_temp_correction(81, 90), 0.0)

    def test_cold_band_above_unity(self):
        self.assertEqual(get_temp_correction(10, 60), 1.08)
        self.assertEqual(get_temp_correction(25, 75), 1.05)

    def test_corrected_never_exceeds_base(self):
        calc = AmpacityCalculator()
        for material, table in AMPACITY_TABLES.items():
            for gauge in table:
                for rating in InsulationRating:
                    for ambient in range(30, 90, 5):
                        for count in (1, 3, 4, 9, 21, 41):
                            res = calc.compute(AmpacityEntry("p", gauge, material, rating, ambient, count))
                            self.assertLessEqual(res.corrected_ampacity, res.base_ampacity)


class TestStandardSizeSearch(unittest.TestCase):

    def test_exact_match(self):
        self.assertEqual(next_standard_rating(100), (100, False))

    def test_monotone_and_smallest(self):
        previous = 0
        minimum = 0.0
        while minimum <= 6100:
            rating, exceeds = next_standard_rating(minimum)
            self.assertGreaterEqual(rating, previous)
            if exceeds:
                self.assertEqual(rating, STANDARD_RATINGS[-1])
                self.assertGreater(minimum, STANDARD_RATINGS[-1])
            else:
                self.assertGreaterEqual(rating, minimum)
                smaller = [r for r in STANDARD_RATINGS if r < rating]
                self.assertTrue(all(r < minimum for r in smaller))
            previous = rating
            minimum += 7.5

    def test_custom_sequence_clamps(self):
        self.assertEqual(next_standard_rating(250, PANEL_BREAKER_RATINGS), (200, True))
        self.assertEqual(next_standard_rating(21, PANEL_BREAKER_RATINGS), (30, False))

    def test_find_conductor(self):
        self.assertEqual(find_conductor_for_ampacity(0)[0].gauge, "14")
        self.assertEqual(find_conductor_for_ampacity(25)[0].gauge, "12")
        self.assertEqual(find_conductor_for_ampacity(25.1)[0].gauge, "10")
        conductor, exceeds = find_conductor_for_ampacity(230)
        self.assertEqual((conductor.gauge, exceeds), ("4/0", False))

    def test_find_conductor_clamps(self):
        conductor, exceeds = find_conductor_for_ampacity(1000)
        self.assertEqual(conductor.gauge, "4/0")
        self.assertTrue(exceeds)

    def test_conduit_breakpoints(self):
        self.assertEqual(select_conduit_size(0), ("13", '1/2"'))
        for max_area, designator, _ in CONDUIT_SIZES:
            self.assertEqual(select_conduit_size(max_area - 0.01)[0], designator)
        self.assertEqual(select_conduit_size(1500), ("103", '4"'))

    def test_lookup_fla(self):
        self.assertEqual(lookup_fla(3, 440, 7.5), 11)
        self.assertIsNone(lookup_fla(3, 480, 10))

if __name__ == '__main__':
    unittest.main()
