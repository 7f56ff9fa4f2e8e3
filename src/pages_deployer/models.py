"""Data structures exchanged with the host application."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class DeployContext:
    """What the host passes to the deploy hook."""

    project_path: str
    output_dir: str
    site_files: List[str] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeploymentInfo:
    method: str
    url: str
    deployed_at: str
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class HookResult:
    """Outcome reported back to the host."""

    success: bool
    message: str
    deployment: Optional[DeploymentInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.deployment is not None:
            payload["deployment"] = {
                "method": self.deployment.method,
                "url": self.deployment.url,
                "deployed_at": self.deployment.deployed_at,
                "metadata": dict(self.deployment.metadata),
            }
        return payload
