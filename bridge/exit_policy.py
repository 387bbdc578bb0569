"""bridge.exit_policy

Exit Policy Classifier: interpret the Bridge CLI's exit code against the
configured build-status mode (``mark_build_status``).

The classifier is a total function: every integer (including the negative
sentinel used when the process could not be started) produces a complete
:class:`~bridge.models.ExitOutcome`. It never changes the numeric exit code;
only the pass/fail interpretation and the message.
"""

from __future__ import annotations

from typing import Dict, Optional

from bridge.models import BuildStatus, ExitOutcome, ExitPolicyConfig

# Process could not be started at all.
SPAWN_FAILURE_EXIT_CODE = -1
# Same convention as `timeout(1)`.
TIMEOUT_EXIT_CODE = 124

EXIT_CODE_DESCRIPTIONS: Dict[int, str] = {
    0: "Bridge CLI execution successfully completed",
    1: "Undefined error, check error logs",
    2: "Error from adapter end",
    3: "Failed to shutdown the Bridge CLI",
    8: "The config option bridge.break has been set to true",
    9: "Bridge CLI initialization failed",
    SPAWN_FAILURE_EXIT_CODE: "Bridge CLI could not be started",
    TIMEOUT_EXIT_CODE: "Bridge CLI timed out",
}


def parse_build_status(raw: Optional[str]) -> BuildStatus:
    """Parse a ``mark_build_status`` input.

    Empty or unrecognized values fall back to FAILURE so a typo never turns a
    failing build green.
    """
    value = (raw or "").strip().upper()
    try:
        return BuildStatus(value)
    except ValueError:
        return BuildStatus.FAILURE


def is_valid_build_status(raw: Optional[str]) -> bool:
    value = (raw or "").strip().upper()
    return value in {s.value for s in BuildStatus}


def describe_exit_code(exit_code: int) -> str:
    return EXIT_CODE_DESCRIPTIONS.get(exit_code, f"Unknown exit code {exit_code}")


def classify(exit_code: int, config: ExitPolicyConfig) -> ExitOutcome:
    """Classify ``exit_code`` under ``config`` (first matching rule wins)."""
    code = int(exit_code)
    mode = config.build_status_mode
    is_violation = code == config.policy_violation_exit_code

    if code == 0 or mode is BuildStatus.SUCCESS:
        if code == 0:
            message = "Bridge CLI execution completed successfully"
        else:
            message = (
                f"Bridge CLI completed successfully with exit code {code}; "
                "marking the build success as configured"
            )
        treated_as_failure = False
    elif is_violation and mode is BuildStatus.UNSTABLE:
        message = f"Policy violations detected (exit code {code}), treated as unstable (non-failing)"
        treated_as_failure = False
    elif is_violation:
        message = f"Policy violations detected (exit code {code}), treated as failure"
        treated_as_failure = True
    else:
        message = f"Bridge CLI failed with unknown exit code: {code}"
        treated_as_failure = True

    return ExitOutcome(
        reported_exit_code=code,
        is_policy_violation=is_violation,
        treated_as_failure=treated_as_failure,
        message=message,
        build_status_mode=mode,
    )


def workflow_failure_message(outcome: ExitOutcome) -> str:
    """Message used when failing the CI step."""
    if outcome.is_policy_violation:
        return f"Workflow failed! Exit code: {outcome.reported_exit_code} Policy violation detected"
    return f"Workflow failed! Unknown exit code: {outcome.reported_exit_code}"
