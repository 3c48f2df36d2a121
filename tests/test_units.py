import unittest

from weathermon.units import KELVIN_OFFSET, to_display_unit


class TestToDisplayUnit(unittest.TestCase):
    def test_freezing_point_is_zero(self):
        self.assertAlmostEqual(to_display_unit(273.15), 0.0, delta=1e-9)

    def test_linear_offset(self):
        for kelvin in (0.0, 250.5, 300.0, 309.15, 1000.0):
            self.assertAlmostEqual(to_display_unit(kelvin), kelvin - KELVIN_OFFSET, delta=1e-9)

    def test_absolute_zero(self):
        self.assertAlmostEqual(to_display_unit(0.0), -273.15, delta=1e-9)


if __name__ == "__main__":
    unittest.main()
