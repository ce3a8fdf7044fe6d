from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from histengine.binning.histograms import HistogramResult, HistSpec, compute_histogram
from histengine.demo.sampler import GaussianSampler
from histengine.normalize.density import Normalization, normal_pdf_at_centers, normalize
from histengine.stats.descriptive import finite_values
from histengine.utils.paths import load_yaml

logger = logging.getLogger(__name__)


# -----------------------------
# Config
# -----------------------------

@dataclass(frozen=True)
class SampleConfig:
    label: str
    n: int
    mean: float = 0.0
    stddev: float = 1.0


@dataclass(frozen=True)
class ScenarioConfig:
    name: str
    samples: List[SampleConfig]
    histogram: HistSpec = field(default_factory=HistSpec)
    normalization: Normalization = Normalization.COUNT
    compare_bins: List[int | str] = field(default_factory=list)
    shared_range: bool = False
    reference_pdf: bool = False


@dataclass(frozen=True)
class DemoConfig:
    seed: int
    scenarios: List[ScenarioConfig]


def _parse_hist_spec(raw: Dict[str, Any]) -> HistSpec:
    unknown = set(raw) - {"bins", "range", "bin_width", "edges"}
    if unknown:
        raise ValueError(f"Unknown histogram keys: {sorted(unknown)}")

    rng = raw.get("range")
    edges = raw.get("edges")
    bin_width = raw.get("bin_width")
    return HistSpec(
        bins=raw.get("bins"),
        range=(float(rng[0]), float(rng[1])) if rng is not None else None,
        bin_width=float(bin_width) if bin_width is not None else None,
        edges=list(map(float, edges)) if edges is not None else None,
    )


def _parse_scenario(raw: Dict[str, Any]) -> ScenarioConfig:
    name = str(raw.get("name") or "").strip()
    if not name:
        raise ValueError("histograms.yaml: every scenario needs a name")

    samples = [
        SampleConfig(
            label=str(s.get("label", f"sample_{i}")),
            n=int(s.get("n", 1000)),
            mean=float(s.get("mean", 0.0)),
            stddev=float(s.get("stddev", 1.0)),
        )
        for i, s in enumerate(raw.get("samples") or [])
    ]
    if not samples:
        raise ValueError(f"histograms.yaml: scenario {name!r} has no samples")

    compare_bins = list(raw.get("compare_bins") or [])
    if compare_bins and len(samples) != 1:
        raise ValueError(f"histograms.yaml: scenario {name!r} uses compare_bins with more than one sample")

    try:
        normalization = Normalization(raw.get("normalization", "count"))
    except ValueError:
        raise ValueError(
            f"histograms.yaml: scenario {name!r} has unknown normalization {raw.get('normalization')!r}"
        ) from None

    return ScenarioConfig(
        name=name,
        samples=samples,
        histogram=_parse_hist_spec(raw.get("histogram") or {}),
        normalization=normalization,
        compare_bins=compare_bins,
        shared_range=bool(raw.get("shared_range", False)),
        reference_pdf=bool(raw.get("reference_pdf", False)),
    )


def load_demo_config(histograms_yaml: Path) -> DemoConfig:
    cfg = load_yaml(Path(histograms_yaml))
    scenarios = [_parse_scenario(s) for s in (cfg.get("scenarios") or [])]

    names = [s.name for s in scenarios]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ValueError(f"histograms.yaml: duplicate scenario names: {dupes}")

    return DemoConfig(seed=int(cfg.get("seed", 0)), scenarios=scenarios)


# -----------------------------
# Running
# -----------------------------

@dataclass(frozen=True)
class SeriesResult:
    label: str
    result: HistogramResult
    heights: np.ndarray
    reference: Optional[np.ndarray] = None


@dataclass(frozen=True)
class ScenarioOutput:
    name: str
    normalization: Normalization
    series: List[SeriesResult]


def _with_shared_range(spec: HistSpec, samples: List[np.ndarray]) -> HistSpec:
    if spec.range is not None or spec.edges is not None:
        return spec
    pooled = finite_values(np.concatenate(samples)) if samples else np.asarray([])
    if pooled.size == 0:
        return spec
    return HistSpec(
        bins=spec.bins,
        range=(float(pooled.min()), float(pooled.max())),
        bin_width=spec.bin_width,
    )


def run_scenario(sc: ScenarioConfig, sampler: GaussianSampler) -> ScenarioOutput:
    data = [sampler.randn(s.n, s.mean, s.stddev) for s in sc.samples]

    spec = _with_shared_range(sc.histogram, data) if sc.shared_range else sc.histogram

    if sc.compare_bins:
        sample_cfg, x = sc.samples[0], data[0]
        requests = [
            (f"{sample_cfg.label} [{b}]", HistSpec(bins=b, range=spec.range), sample_cfg, x)
            for b in sc.compare_bins
        ]
    else:
        requests = [(s.label, spec, s, x) for s, x in zip(sc.samples, data)]

    series: List[SeriesResult] = []
    for label, req, sample_cfg, x in requests:
        res = compute_histogram(x, req)
        reference = None
        if sc.reference_pdf:
            reference = normal_pdf_at_centers(res, sample_cfg.mean, sample_cfg.stddev)
        series.append(
            SeriesResult(
                label=label,
                result=res,
                heights=normalize(res, sc.normalization),
                reference=reference,
            )
        )
        logger.debug(
            "%s / %s: %d bins, total_count=%d", sc.name, label, res.num_bins, int(res.total_count)
        )

    return ScenarioOutput(name=sc.name, normalization=sc.normalization, series=series)


def run_scenarios(cfg: DemoConfig, sampler: Optional[GaussianSampler] = None) -> List[ScenarioOutput]:
    sampler = sampler or GaussianSampler(cfg.seed)
    return [run_scenario(sc, sampler) for sc in cfg.scenarios]
