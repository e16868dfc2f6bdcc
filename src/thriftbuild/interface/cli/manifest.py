from __future__ import annotations

"""
Build Manifest Collaborator.

Stands in for a host build when the pipeline is driven from the command
line: it records the roots the pipeline asks to register and can persist
them as JSON for the next build step to consume.
"""

import json
import logging
import os
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class ManifestCollaborator:
    """Records registration callbacks, keyed by build scope."""

    def __init__(self, scope: str) -> None:
        self.scope = scope
        self.source_roots: List[str] = []
        self.resource_roots: List[Dict[str, Any]] = []

    def register_generated_source_root(self, path: str) -> None:
        logger.info(f"Registered generated {self.scope} source root: {path}")
        self.source_roots.append(path)

    def register_resource_root(self, path: str, includes: List[str], excludes: List[str]) -> None:
        logger.info(f"Registered {self.scope} resource root: {path}")
        self.resource_roots.append({
            "path": path,
            "includes": list(includes),
            "excludes": list(excludes),
        })

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scope": self.scope,
            "source_roots": list(self.source_roots),
            "resource_roots": [dict(r) for r in self.resource_roots],
        }

    def write(self, path: str) -> None:
        """
        Persist the manifest as JSON.

        Raises:
            OSError: If the file cannot be written.
        """
        target = os.path.abspath(path)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        logger.debug(f"Manifest written to {target}")
