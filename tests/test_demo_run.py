import json
import shutil
import subprocess
import sys
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _load_runner():
    scripts_dir = ROOT / "scripts"
    sys.path.insert(0, str(scripts_dir))
    import run_simulation

    return run_simulation


class DemoRunTest(unittest.TestCase):
    def test_demo_outputs_exist(self):
        out_dir = ROOT / "outputs" / "test_demo_baseline"
        if out_dir.exists():
            shutil.rmtree(out_dir)

        cmd = [
            sys.executable,
            str(ROOT / "scripts" / "run_simulation.py"),
            "--scenario",
            "baseline",
            "--seed",
            "123",
            "--out",
            str(out_dir),
        ]
        result = subprocess.run(cmd, capture_output=True, text=True)
        if result.returncode != 0:
            print("STDOUT:\n", result.stdout)
            print("STDERR:\n", result.stderr)
        self.assertEqual(result.returncode, 0)

        self.assertTrue((out_dir / "metadata.json").exists())
        self.assertTrue((out_dir / "vehicles.csv").exists())
        self.assertTrue((out_dir / "vessels.csv").exists())
        self.assertTrue((out_dir / "hourly.csv").exists())
        self.assertTrue((out_dir / "run.log").exists())
        plots = list((out_dir / "plots").glob("*.png"))
        self.assertGreaterEqual(len(plots), 2)

        metadata = json.loads((out_dir / "metadata.json").read_text(encoding="utf-8"))
        self.assertEqual(metadata["seed"], 123)
        self.assertEqual(metadata["config_used"]["reservation_rate"], 0.0)
        summary = metadata["summary"]
        self.assertEqual(
            summary["processed_count"] + summary["backlog_count"], summary["total_arrivals"]
        )

    def test_compare_mode_writes_both_bundles(self):
        runner = _load_runner()
        out_dir = ROOT / "outputs" / "test_compare"
        if out_dir.exists():
            shutil.rmtree(out_dir)

        code = runner.main(
            [
                "--scenario",
                "reservations",
                "--seed",
                "7",
                "--out",
                str(out_dir),
                "--compare",
                "--reservation-rate",
                "0.4",
            ]
        )
        self.assertEqual(code, 0)
        for bundle in ("baseline", "with_reservations"):
            self.assertTrue((out_dir / bundle / "metadata.json").exists())
            self.assertTrue((out_dir / bundle / "vehicles.csv").exists())
        self.assertTrue((out_dir / "comparison.csv").exists())

        comparison = json.loads((out_dir / "comparison.json").read_text(encoding="utf-8"))
        self.assertIn("wait_reduction_percent", comparison["improvement"])
        after = json.loads((out_dir / "with_reservations" / "metadata.json").read_text(encoding="utf-8"))
        self.assertEqual(after["config_used"]["reservation_rate"], 0.4)

    def test_overrides_are_applied(self):
        runner = _load_runner()
        out_dir = ROOT / "outputs" / "test_override"
        out_dir.mkdir(parents=True, exist_ok=True)
        override_path = out_dir / "overrides.json"
        override_path.write_text(json.dumps({"num_vessels": 2, "daily_volume": 0}), encoding="utf-8")

        metadata = runner.run_demo(
            runner._build_config_dict(
                runner.parse_args(
                    ["--seed", "1", "--out", str(out_dir), "--override", str(override_path)]
                )
            ),
            seed=1,
            out_dir=out_dir,
        )
        self.assertEqual(len(metadata["summary"]["vessels"]), 2)
        self.assertEqual(metadata["summary"]["processed_count"], 0)


if __name__ == "__main__":
    unittest.main()
