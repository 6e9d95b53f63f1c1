import unittest
from constants import FillMode
from models import (
    CalculationMode,
    CalculationRequest,
    CyclesResult,
    DataTypeError,
    ErrorKind,
    TidalCyclesResult,
    TidalTotalVolumeResult,
    TotalVolumeResult,
)
from protocols import CalculationProtocol

class TestClinicalScenarios(unittest.TestCase):
    """
    End-to-end prescriptions through the calculation protocol.
    Run with: python -m unittest test_clinical_scenarios.py
    """

    def run_request(self, **kwargs):
        return CalculationProtocol.run(CalculationRequest(**kwargs))

    def test_01_tidal_programmable_volume(self):
        """[SCENARIO A] Standard fill, 1400 mL x 10 cycles, 85% tidal, full drain every 3rd."""
        print("\nSCENARIO A: Tidal Total Volume")
        out = self.run_request(
            mode=CalculationMode.TIDAL_TOTAL_VOLUME, fill_mode=FillMode.STANDARD,
            cycles=10, fill_volume=1400, last_fill=700, tidal_percent=85, full_drain_interval=3
        )
        self.assertTrue(out.success, out.errors)
        res = out.result
        print(f"  > {res.summary}")

        self.assertIsInstance(res, TidalTotalVolumeResult)
        self.assertEqual(res.full_drain_count, 4)
        self.assertEqual(res.tidal_drain_cycles, 6)
        self.assertEqual(res.tidal_volume, 7140)
        self.assertEqual(res.full_drain_volume, 5600)
        self.assertEqual(res.calculated_exact, 13440)
        self.assertEqual(res.programmable, 13500)
        self.assertEqual(res.difference, 60)
        self.assertEqual(res.increment, 500)
        self.assertTrue(res.needs_rounding)

    def test_02_low_fill_cycles(self):
        """[SCENARIO B] Low fill: (3000 - 120) / 240 = 12 cycles."""
        out = self.run_request(
            mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
            total_volume=3000, fill_volume=240, last_fill=120
        )
        self.assertTrue(out.success, out.errors)
        self.assertIsInstance(out.result, CyclesResult)
        self.assertEqual(out.result.cycles, 12)
        self.assertEqual(out.result.working_volume_ml, 2880)
        self.assertEqual(out.result.summary, "(3000 - 120) / 240 = 12 cycles")
        self.assertIsNone(out.time_breakdown)

    def test_03_time_breakdown_attached(self):
        """[SCENARIO C] 8 hour treatment over 12 cycles -> 25 min dwell each."""
        out = self.run_request(
            mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
            total_volume=3000, fill_volume=240, last_fill=120, treatment_hours=8
        )
        tb = out.time_breakdown
        self.assertEqual(tb.total_minutes, 480)
        self.assertEqual(tb.total_overhead_min, 180)
        self.assertEqual(tb.total_dwell_min, 300)
        self.assertEqual(tb.dwell_per_cycle_min, 25)
        self.assertEqual(tb.time_per_cycle_min, 40)

    def test_04_treatment_too_short(self):
        """[SCENARIO D] 1 hour cannot hold 12 x 15 min of fill/drain. Volumes still calculate."""
        out = self.run_request(
            mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
            total_volume=3000, fill_volume=240, last_fill=120, treatment_hours=1
        )
        self.assertTrue(out.success)
        tb = out.time_breakdown
        self.assertFalse(tb.is_valid)
        self.assertEqual(tb.error_kind, ErrorKind.TREATMENT_TOO_SHORT)
        self.assertEqual(tb.total_dwell_min, 0)
        self.assertEqual(tb.dwell_per_cycle_min, 0)

    def test_05_total_above_device_maximum(self):
        """[SCENARIO E] 100 x 1000 mL + 1000 mL is past the 80 L ceiling."""
        out = self.run_request(
            mode=CalculationMode.TOTAL_VOLUME, fill_mode=FillMode.LOW,
            cycles=100, fill_volume=1000, last_fill=1000
        )
        self.assertTrue(out.success)
        res = out.result
        self.assertIsInstance(res, TotalVolumeResult)
        self.assertEqual(res.calculated_exact, 101000)
        self.assertEqual(res.programmable, 80000)
        self.assertTrue(res.out_of_range)
        self.assertIn("exceeds maximum allowed", res.rounding_message)

    def test_06_standard_total_volume(self):
        """5 x 1400 + 700 = 7700 -> next 500 mL step is 8000."""
        out = self.run_request(
            mode=CalculationMode.TOTAL_VOLUME, fill_mode=FillMode.STANDARD,
            cycles=5, fill_volume=1400, last_fill=700, treatment_hours=9
        )
        res = out.result
        self.assertEqual(res.calculated_exact, 7700)
        self.assertEqual(res.programmable, 8000)
        self.assertEqual(res.difference, 300)
        self.assertFalse(res.out_of_range)
        self.assertEqual(out.time_breakdown.cycles, 5)

    def test_07_tidal_max_cycles(self):
        """13500 mL budget fits 10 tidal cycles (13440 mL), an 11th would need 14630."""
        out = self.run_request(
            mode=CalculationMode.TIDAL_CYCLES, fill_mode=FillMode.STANDARD,
            total_volume=13500, fill_volume=1400, last_fill=700,
            tidal_percent=85, full_drain_interval=3
        )
        self.assertTrue(out.success, out.errors)
        res = out.result
        self.assertIsInstance(res, TidalCyclesResult)
        self.assertEqual(res.cycles, 10)
        self.assertEqual(res.calculated_total, 13440)
        self.assertEqual(res.requested_total, 13500)
        self.assertEqual(res.difference, 60)

    def test_08_tidal_nothing_fits(self):
        out = self.run_request(
            mode=CalculationMode.TIDAL_CYCLES, fill_mode=FillMode.STANDARD,
            total_volume=5000, fill_volume=3000, last_fill=3000,
            tidal_percent=80, full_drain_interval=1, treatment_hours=8
        )
        self.assertTrue(out.success)
        self.assertEqual(out.result.cycles, 0)
        self.assertIsNone(out.time_breakdown)

    # --- REJECTIONS ---

    def test_09_missing_field(self):
        out = self.run_request(mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
                               total_volume=3000, fill_volume=240)
        self.assertFalse(out.success)
        self.assertEqual(out.error_kind, ErrorKind.INPUT_MISSING)
        self.assertEqual(out.errors, ["Please fill in all fields"])

    def test_10_single_error_surfaced(self):
        """Bad total AND bad fill: only the total is reported."""
        out = self.run_request(mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
                               total_volume=3010, fill_volume=245, last_fill=120)
        self.assertEqual(len(out.errors), 1)
        self.assertTrue(out.errors[0].startswith("Total Volume:"))
        self.assertEqual(out.error_kind, ErrorKind.INCREMENT_MISMATCH)

    def test_11_last_fill_not_below_total(self):
        out = self.run_request(mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
                               total_volume=200, fill_volume=500, last_fill=250)
        self.assertFalse(out.success)
        self.assertEqual(out.errors, ["Last fill must be less than total volume"])

    def test_12_cycle_limit(self):
        out = self.run_request(mode=CalculationMode.TOTAL_VOLUME, fill_mode=FillMode.LOW,
                               cycles=101, fill_volume=240, last_fill=120)
        self.assertEqual(out.error_kind, ErrorKind.CLINICAL_CONSTRAINT_VIOLATION)

    def test_13_fill_checked_before_cycles(self):
        out = self.run_request(mode=CalculationMode.TOTAL_VOLUME, fill_mode=FillMode.LOW,
                               cycles=0, fill_volume=0, last_fill=120)
        self.assertEqual(out.errors, ["Fill volume must be greater than 0"])

    def test_14_bad_tidal_percentage(self):
        out = self.run_request(
            mode=CalculationMode.TIDAL_TOTAL_VOLUME, fill_mode=FillMode.STANDARD,
            cycles=10, fill_volume=1400, last_fill=700, tidal_percent=87, full_drain_interval=3
        )
        self.assertFalse(out.success)
        self.assertIn("Tidal percentage", out.errors[0])

    def test_15_wrong_python_types(self):
        with self.assertRaises(DataTypeError):
            CalculationRequest(mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
                               total_volume="3000", fill_volume=240, last_fill=120)

    def test_16_string_enums_accepted(self):
        req = CalculationRequest(mode="cycles", fill_mode="standard",
                                 total_volume=10000, fill_volume=1400, last_fill=700)
        self.assertEqual(req.mode, CalculationMode.CYCLES)
        self.assertEqual(req.fill_mode, FillMode.STANDARD)
        self.assertEqual(CalculationProtocol.run(req).result.cycles, 6)

    def test_17_fractional_tidal_total_rounds_up(self):
        """61 mL fill at 40% tidal gives 450.4 mL; the cycler must get 500, not 450."""
        out = self.run_request(
            mode=CalculationMode.TIDAL_TOTAL_VOLUME, fill_mode=FillMode.LOW,
            cycles=10, fill_volume=61, last_fill=60, tidal_percent=40, full_drain_interval=3
        )
        self.assertTrue(out.success, out.errors)
        res = out.result
        self.assertAlmostEqual(res.calculated_exact, 450.4)
        self.assertEqual(res.programmable, 500)
        self.assertGreaterEqual(res.programmable, res.calculated_exact)
        self.assertFalse(res.out_of_range)

    def test_18_low_fill_tidal_never_under_programmed(self):
        """Sweep small low-fill tidal prescriptions; fractional totals always round up."""
        for fill in (61, 63, 67, 73, 89, 97):
            for pct in (40, 45, 55, 85):
                for interval in (3, 7, 8):
                    for cycles in (10, 13):
                        out = self.run_request(
                            mode=CalculationMode.TIDAL_TOTAL_VOLUME, fill_mode=FillMode.LOW,
                            cycles=cycles, fill_volume=fill, last_fill=60,
                            tidal_percent=pct, full_drain_interval=interval
                        )
                        res = out.result
                        if res.out_of_range:
                            continue
                        self.assertGreaterEqual(
                            res.programmable, res.calculated_exact,
                            f"fill={fill} pct={pct} interval={interval} cycles={cycles}")

    def test_19_non_positive_treatment_time_rejected(self):
        """0 or negative hours is an entry error, not a too-short treatment."""
        for hours in (0, -5, -0.5):
            out = self.run_request(
                mode=CalculationMode.CYCLES, fill_mode=FillMode.LOW,
                total_volume=3000, fill_volume=240, last_fill=120, treatment_hours=hours
            )
            self.assertFalse(out.success)
            self.assertEqual(out.error_kind, ErrorKind.CLINICAL_CONSTRAINT_VIOLATION)
            self.assertEqual(out.errors, ["Treatment time must be greater than 0 hours"])

if __name__ == '__main__':
    unittest.main()
