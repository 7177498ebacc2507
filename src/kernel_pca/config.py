"""YAML configuration for ``KernelPca``.

Example::

    kernel:
      name: rbf
      gamma: 0.5
    embed_dim: 2
    solver:
      method: eigh
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from .errors import InvalidConfig
from .kernels import Kernel, Linear, RationalQuadratic, SquaredExponential

KERNEL_ALIASES = {
    "rbf": SquaredExponential,
    "squared_exponential": SquaredExponential,
    "rational_quadratic": RationalQuadratic,
    "rq": RationalQuadratic,
    "linear": Linear,
}


def load_config(config_path: str | Path) -> Dict[str, Any]:
    with open(config_path, "r") as file:
        return yaml.safe_load(file) or {}


def save_config(config: Dict[str, Any], config_path: str | Path) -> None:
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as file:
        yaml.safe_dump(config, file, sort_keys=False)


def _require(cfg: Dict[str, Any], key: str, kernel_name: str) -> float:
    if key not in cfg:
        raise InvalidConfig(f"Kernel '{kernel_name}' requires parameter '{key}'")
    try:
        return float(cfg[key])
    except (TypeError, ValueError) as exc:
        raise InvalidConfig(f"Kernel '{kernel_name}' parameter '{key}' must be a number") from exc


def kernel_from_config(cfg: Dict[str, Any] | str) -> Kernel:
    """Build a kernel from ``{"name": ..., **params}`` or a bare name ('linear')."""
    if isinstance(cfg, str):
        cfg = {"name": cfg}
    if not isinstance(cfg, dict):
        raise InvalidConfig(f"Kernel config must be a name or a mapping, got {cfg!r}")
    name = str(cfg.get("name", "")).lower()
    cls = KERNEL_ALIASES.get(name)
    if cls is None:
        raise InvalidConfig(f"Unknown kernel '{name}'; expected one of {sorted(KERNEL_ALIASES)}")
    if cls is SquaredExponential:
        return SquaredExponential(gamma=_require(cfg, "gamma", name))
    if cls is RationalQuadratic:
        return RationalQuadratic(gamma=_require(cfg, "gamma", name), alpha=_require(cfg, "alpha", name))
    return Linear()


def kernel_to_config(kernel: Kernel) -> Dict[str, Any]:
    if isinstance(kernel, SquaredExponential):
        return {"name": kernel.name, "gamma": kernel.gamma}
    if isinstance(kernel, RationalQuadratic):
        return {"name": kernel.name, "gamma": kernel.gamma, "alpha": kernel.alpha}
    if isinstance(kernel, Linear):
        return {"name": kernel.name}
    raise TypeError(f"Unsupported kernel: {kernel!r}")


__all__ = ["load_config", "save_config", "kernel_from_config", "kernel_to_config"]
