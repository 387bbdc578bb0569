import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]
CLI = REPO_ROOT / "bridge_cli.py"

_PRODUCT_PREFIXES = ("BLACKDUCKSCA_", "POLARIS_", "COVERITY_", "SRM_", "BRIDGECLI_")


def _clean_env(extra):
    """Current env minus anything that would leak action inputs into the run."""
    env = {
        k: v
        for k, v in os.environ.items()
        if not k.startswith(("INPUT_", "GITHUB_", "TF_BUILD") + _PRODUCT_PREFIXES)
        and k not in {"SCAN_TYPE", "NETWORK_AIRGAP", "MARK_BUILD_STATUS"}
    }
    env.update(extra)
    return env


class TestCLIDryRun(unittest.TestCase):
    def _run(self, args, env, cwd):
        cmd = [sys.executable, str(CLI), "--host", "console", *args]
        return subprocess.run(cmd, cwd=str(cwd), env=_clean_env(env), text=True, capture_output=True)

    def test_dry_run_prints_command_from_inputs_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            inputs_file = root / "bridge-inputs.yml"
            inputs_file.write_text(
                json.dumps(
                    {
                        "polaris_server_url": "https://polaris.example.com",
                        "polaris_access_token": "tok",
                        "polaris_assessment_types": ["SAST"],
                        "bridgecli_install_directory": str(root / "install"),
                        "bridgecli_thin_client": True,
                        "polaris_workflow_version": "2.0.0",
                    }
                ),
                encoding="utf-8",
            )

            result = self._run(["--inputs-file", str(inputs_file), "--dry-run"], {}, root)

            if result.returncode != 0:
                raise AssertionError(
                    "CLI returned non-zero exit code\n"
                    f"stdout:\n{result.stdout}\n"
                    f"stderr:\n{result.stderr}\n"
                )
            self.assertIn("--stage polaris@2.0.0", result.stdout)
            self.assertIn("--update", result.stdout)
            self.assertIn("dry-run", result.stdout)
            self.assertFalse((root / "install").exists())

    def test_missing_product_fails_with_message(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            result = self._run(["--dry-run"], {}, Path(td))
            self.assertEqual(1, result.returncode)
            self.assertIn("Requires at least one scan type", result.stdout)

    def test_scan_type_flag_overrides_inputs(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            env = {
                "SRM_URL": "https://srm.example.com",
                "COVERITY_URL": "https://cov.example.com",
                "COVERITY_USER": "u",
                "COVERITY_PASSPHRASE": "p",
                "BRIDGECLI_INSTALL_DIRECTORY": str(Path(td) / "install"),
            }
            result = self._run(["--scan-type", "coverity", "--dry-run"], env, Path(td))
            self.assertEqual(0, result.returncode, result.stdout + result.stderr)
            self.assertIn("--stage connect", result.stdout)

    def test_airgap_without_binary_is_reported_once(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            env = {
                "SRM_URL": "https://srm.example.com",
                "SRM_APIKEY": "k",
                "SRM_ASSESSMENT_TYPES": "SCA",
                "NETWORK_AIRGAP": "true",
                "BRIDGECLI_INSTALL_DIRECTORY": str(Path(td) / "install"),
            }
            result = self._run(["--dry-run"], env, Path(td))
            self.assertEqual(1, result.returncode)
            self.assertEqual(1, result.stdout.count("Network air gap is enabled but no Bridge CLI is installed"))


if __name__ == "__main__":
    unittest.main()
