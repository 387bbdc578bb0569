import dataclasses
import unittest
from pathlib import Path

import yaml

from pipeline.inputs import ActionInputs
from pipeline.products import PRODUCT_INPUT_NAMES


REPO_ROOT = Path(__file__).resolve().parents[1]
ACTION = REPO_ROOT / "action.yml"


def _load_action():
    return yaml.safe_load(ACTION.read_text(encoding="utf-8"))


def _run_inputs():
    """Every input the runtime reads: run-level fields plus each product's inputs."""
    fields = {f.name for f in dataclasses.fields(ActionInputs)} - {"product_values"}
    return sorted(fields | set(PRODUCT_INPUT_NAMES))


class TestActionMetadata(unittest.TestCase):
    def test_every_runtime_input_is_declared_and_forwarded(self) -> None:
        action = _load_action()
        declared = set(action["inputs"])
        steps = {s.get("id") or s.get("name"): s for s in action["runs"]["steps"]}
        env = steps["bridge"]["env"]

        missing_decl = [n for n in _run_inputs() if n not in declared]
        self.assertEqual([], missing_decl, "inputs not declared in action.yml")

        for name in _run_inputs():
            with self.subTest(name=name):
                self.assertEqual(f"${{{{ inputs.{name} }}}}", env.get(f"INPUT_{name.upper()}"))

    def test_artifact_directory_is_published_even_on_failure(self) -> None:
        action = _load_action()
        steps = action["runs"]["steps"]
        bridge_step = next(s for s in steps if s.get("id") == "bridge")
        upload = [s for s in steps if str(s.get("uses", "")).startswith("actions/upload-artifact@")]

        self.assertEqual(1, len(upload))
        publish = upload[0]
        self.assertEqual("always()", publish["if"])
        self.assertEqual(bridge_step["env"]["BRIDGE_ARTIFACTS_DIR"], publish["with"]["path"])
        self.assertEqual("ignore", publish["with"]["if-no-files-found"])
        self.assertGreater(steps.index(publish), steps.index(bridge_step))

    def test_exit_code_output_comes_from_the_bridge_step(self) -> None:
        outputs = _load_action()["outputs"]
        self.assertEqual("${{ steps.bridge.outputs.exit_code }}", outputs["exit_code"]["value"])


if __name__ == "__main__":
    unittest.main()
