"""Zero-config GitHub Pages deployment for moss sites."""

from .deploy import DeployError, DeployOrchestrator, DeployResult
from .fingerprint import ChangeCheck, FingerprintDiff, check_for_changes, diff_fingerprints
from .hook import DeployHook, on_deploy
from .models import DeployContext, HookResult

__all__ = [
    "ChangeCheck",
    "DeployContext",
    "DeployError",
    "DeployHook",
    "DeployOrchestrator",
    "DeployResult",
    "FingerprintDiff",
    "HookResult",
    "check_for_changes",
    "diff_fingerprints",
    "on_deploy",
]
