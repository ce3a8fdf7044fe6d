from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from histengine.binning.histograms import HistogramResult
from histengine.demo.scenarios import ScenarioOutput, SeriesResult


def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()


def sha256_file(path: Path) -> str:
    return sha256_bytes(path.read_bytes())


def save_json(path: Path, obj: Any, *, indent: int = 2) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=indent), encoding="utf-8")


def slugify(label: str) -> str:
    s = re.sub(r"[^0-9A-Za-z]+", "_", label).strip("_").lower()
    return s or "series"


@dataclass(frozen=True)
class HistogramArtifacts:
    out_dir: Path
    manifest_json: Path

    def series_csv(self, scenario: str, label: str) -> Path:
        return self.out_dir / slugify(scenario) / f"{slugify(label)}.csv"


def default_histogram_artifacts(out_dir: Path) -> HistogramArtifacts:
    return HistogramArtifacts(out_dir=out_dir, manifest_json=out_dir / "manifest.json")


def result_to_frame(result: HistogramResult) -> pd.DataFrame:
    """One row per bin: geometry plus raw counts."""
    return pd.DataFrame(
        {
            "bin": range(result.num_bins),
            "left": result.edges[:-1],
            "right": result.edges[1:],
            "center": result.centers,
            "width": result.widths,
            "count": result.counts,
        }
    )


def series_to_frame(series: SeriesResult, height_col: str) -> pd.DataFrame:
    df = result_to_frame(series.result)
    if height_col != "count":
        df[height_col] = series.heights
    if series.reference is not None:
        df["reference_pdf"] = series.reference
    return df


def save_outputs(
    outputs: List[ScenarioOutput],
    art: HistogramArtifacts,
    *,
    config_hash: str,
    seed: int,
) -> Dict[str, Any]:
    """
    Write one CSV per series and a manifest describing all of them.
    Returns the manifest.
    """
    scenarios: List[Dict[str, Any]] = []
    for out in outputs:
        entries = []
        for s in out.series:
            path = art.series_csv(out.name, s.label)
            path.parent.mkdir(parents=True, exist_ok=True)
            series_to_frame(s, out.normalization.value).to_csv(path, index=False)
            entries.append(
                {
                    "label": s.label,
                    "csv": str(path.relative_to(art.out_dir)),
                    "num_bins": s.result.num_bins,
                    "total_count": int(s.result.total_count),
                }
            )
        scenarios.append(
            {"name": out.name, "normalization": out.normalization.value, "series": entries}
        )

    manifest = {"config_sha256": config_hash, "seed": seed, "scenarios": scenarios}
    save_json(art.manifest_json, manifest)
    return manifest
