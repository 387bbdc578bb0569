import unittest
from pathlib import Path
import tempfile


from tools.io import read_json, write_json


class TestSafeIO(unittest.TestCase):
    def test_write_json_is_atomic_and_cleans_temp(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            out_dir = root / "out"
            out_path = out_dir / "bridge_input.json"

            payload = {"data": {"polaris": {"serverUrl": "https://p", "assessment": {"types": ["SAST"]}}}}
            write_json(out_path, payload)

            # File written and readable
            self.assertTrue(out_path.exists())
            self.assertEqual(payload, read_json(out_path))

            # No temp files left behind on success
            tmp_files = list(out_dir.glob("*.tmp"))
            self.assertEqual([], tmp_files)

    def test_failed_write_keeps_previous_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            out_path = Path(td) / "bridge_run.json"
            write_json(out_path, {"exit_code": 0})

            with self.assertRaises(TypeError):
                write_json(out_path, {"bad": object()})

            self.assertEqual({"exit_code": 0}, read_json(out_path))
            self.assertEqual([], list(Path(td).glob("*.tmp")))


if __name__ == "__main__":
    unittest.main()
