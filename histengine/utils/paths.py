from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def find_repo_root(start: Optional[Path] = None) -> Path:
    cur = (start or Path.cwd()).resolve()
    for _ in range(30):
        if (cur / "pyproject.toml").exists():
            return cur
        if (cur / ".git").exists():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent
    raise RuntimeError(
        "Could not find repo root. Run inside the repo (pyproject.toml or .git must exist)."
    )


def _is_absolute_path_like(s: str) -> bool:
    """
    True for:
    - absolute POSIX paths (/home/..)
    - absolute Windows paths (C:\\..)
    - UNC paths (\\\\server\\share\\..)
    """
    if not s:
        return False
    if s.startswith("\\\\") or s.startswith("//"):
        return True
    p = Path(s)
    if p.is_absolute():
        return True
    # Windows drive letter pattern like "C:..."
    return len(s) >= 2 and s[1] == ":"


def resolve_path(repo_root: Path, value: str | Path) -> Path:
    value = str(value)
    if _is_absolute_path_like(value):
        return Path(value).expanduser().resolve()
    return (repo_root / value).expanduser().resolve()


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML structure in {path}: expected a mapping at top level.")
    return data


@dataclass(frozen=True)
class ProjectPaths:
    repo_root: Path
    configs_dir: Path

    artifacts_root: Path
    artifacts_histograms: Path
    logs_dir: Path

    @property
    def scenarios_yaml(self) -> Path:
        return self.configs_dir / "histograms.yaml"

    def ensure_dirs(self) -> None:
        for d in [self.artifacts_root, self.artifacts_histograms, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)


def load_paths(config_path: Optional[Path] = None, *, start: Optional[Path] = None) -> ProjectPaths:
    """
    Resolve project locations from configs/paths.yaml.

    Relative entries are resolved against the repo root; `project.root` in the
    YAML may relocate the root itself.
    """
    repo_root = find_repo_root(start)
    cfg_path = Path(config_path) if config_path is not None else (repo_root / "configs" / "paths.yaml")
    cfg = load_yaml(cfg_path)

    project_root_value = (cfg.get("project") or {}).get("root", None)
    if isinstance(project_root_value, str) and project_root_value.strip():
        repo_root = resolve_path(repo_root, project_root_value)

    art_cfg = cfg.get("artifacts") or {}
    logs_cfg = cfg.get("logs") or {}

    artifacts_root = resolve_path(repo_root, str(art_cfg.get("root", "artifacts")))
    artifacts_histograms = resolve_path(
        repo_root, str(art_cfg.get("histograms", "artifacts/histograms"))
    )
    logs_dir = resolve_path(repo_root, str(logs_cfg.get("dir", "artifacts/logs")))

    return ProjectPaths(
        repo_root=repo_root,
        configs_dir=repo_root / "configs",
        artifacts_root=artifacts_root,
        artifacts_histograms=artifacts_histograms,
        logs_dir=logs_dir,
    )
