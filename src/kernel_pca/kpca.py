"""Kernel PCA façade.

``KernelPca(kernel, embed_dim).apply(data)`` runs the full pipeline and returns
an ``[N, embed_dim]`` embedding in input row order, columns ordered by
descending eigenvalue.

Two branches:

- Non-linear kernels build the N x N Gram matrix, double-center it,
  eigendecompose it and project onto the leading eigenvectors. O(N^2 D + N^3).
- ``Linear`` is standard PCA: column-center the data, eigendecompose the
  D x D covariance and project the centered data. O(N D^2 + D^3). The Gram
  matrix is never built on this branch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np
import torch

from .centering import center_data, center_kernel_matrix, covariance
from .config import kernel_from_config, kernel_to_config
from .eigen import SOLVERS, Eigenpairs, SolverName, decompose
from .errors import EmptyDataset, InvalidConfig, InvalidDataset
from .kernels import Kernel, Linear, build_kernel_matrix
from .projection import project_kernel, project_linear, select_top

Tensor = torch.Tensor
DataLike = Union[Sequence[Sequence[float]], np.ndarray, Tensor]


def as_dataset(data: DataLike) -> Tensor:
    """Validate and convert input data into a float64 ``[N, D]`` tensor."""
    if isinstance(data, Tensor):
        x = data.detach().to(torch.float64)
    elif isinstance(data, np.ndarray):
        try:
            x = torch.from_numpy(np.asarray(data, dtype=np.float64))
        except (TypeError, ValueError) as exc:
            raise InvalidDataset(f"Input data is not a numeric [N, D] array: {exc}") from exc
    else:
        try:
            rows = [list(row) for row in data]
        except TypeError as exc:
            raise InvalidDataset("Input data must be a sequence of feature vectors") from exc
        if not rows:
            raise EmptyDataset("Input data has no records")
        widths = {len(row) for row in rows}
        if len(widths) > 1:
            raise InvalidDataset("Input data has inconsistent dimensionality across records")
        try:
            x = torch.tensor(rows, dtype=torch.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidDataset(f"Input data is not numeric: {exc}") from exc

    if x.numel() == 0 and (x.ndim < 2 or x.shape[0] == 0):
        raise EmptyDataset("Input data has no records")
    if x.ndim != 2:
        raise InvalidDataset(f"Expected [N, D] data, got shape {tuple(x.shape)}")
    if x.shape[1] == 0:
        raise InvalidDataset("Input data has a dimensionality of zero")
    if not torch.isfinite(x).all():
        raise InvalidDataset("Input data contains NaN or infinite values")
    return x


@dataclass(frozen=True)
class KernelPca:
    kernel: Kernel
    embed_dim: int
    method: SolverName = "eigh"
    max_sweeps: int = 100
    tol: float = 1e-12

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "KernelPca":
        if not isinstance(cfg, dict) or "kernel" not in cfg or "embed_dim" not in cfg:
            raise InvalidConfig("Config requires 'kernel' and 'embed_dim'")
        solver = cfg.get("solver") or {}
        if not isinstance(solver, dict):
            raise InvalidConfig(f"'solver' must be a mapping, got {solver!r}")
        method = solver.get("method", "eigh")
        if method not in SOLVERS:
            raise InvalidConfig(f"Unknown solver method '{method}'; expected one of {list(SOLVERS)}")
        try:
            embed_dim = int(cfg["embed_dim"])
            max_sweeps = int(solver.get("max_sweeps", 100))
            tol = float(solver.get("tol", 1e-12))
        except (TypeError, ValueError) as exc:
            raise InvalidConfig(f"Invalid numeric setting in config: {exc}") from exc
        return cls(
            kernel=kernel_from_config(cfg["kernel"]),
            embed_dim=embed_dim,
            method=method,
            max_sweeps=max_sweeps,
            tol=tol,
        )

    def to_config(self) -> Dict[str, Any]:
        return {
            "kernel": kernel_to_config(self.kernel),
            "embed_dim": self.embed_dim,
            "solver": {"method": self.method, "max_sweeps": self.max_sweeps, "tol": self.tol},
        }

    @property
    def is_linear(self) -> bool:
        return isinstance(self.kernel, Linear)

    def _validate(self, data: DataLike) -> Tensor:
        if self.embed_dim < 1:
            raise InvalidConfig("Embedding dimension must be positive")
        return as_dataset(data)

    def _spectrum(self, X: Tensor, verbose: bool = False) -> Tuple[Eigenpairs, Tensor]:
        """Unordered eigenpairs plus the matrix the embedding is projected from."""
        if self.is_linear:
            # Standard PCA on the D x D covariance; no Gram matrix.
            Xc, _ = center_data(X)
            target = covariance(Xc)
            centered = Xc
        else:
            K = build_kernel_matrix(self.kernel, X)
            centered = center_kernel_matrix(K)
            target = centered
        if verbose:
            print(f"[KPCA] kernel={self.kernel!r} N={X.shape[0]} D={X.shape[1]} "
                  f"decomposing {tuple(target.shape)} with {self.method}")
        pairs = decompose(target, method=self.method, max_sweeps=self.max_sweeps, tol=self.tol)
        return pairs, centered

    @torch.no_grad()
    def apply(self, data: DataLike, verbose: bool = False) -> Tensor:
        """Embed ``data`` ([N, D]) into ``[N, embed_dim]`` principal coordinates."""
        X = self._validate(data)
        pairs, centered = self._spectrum(X, verbose=verbose)
        top = select_top(pairs, self.embed_dim)
        Z = project_linear(top, centered) if self.is_linear else project_kernel(top)
        if verbose:
            print(f"[KPCA] embedding {tuple(Z.shape)}, leading eigenvalues {top.values.tolist()}")
        return Z

    @torch.no_grad()
    def decompose(self, data: DataLike) -> Eigenpairs:
        """Full spectrum for the configured kernel, sorted by descending eigenvalue."""
        X = as_dataset(data)
        pairs, _ = self._spectrum(X)
        return select_top(pairs, len(pairs))

    @torch.no_grad()
    def explained_variance_ratio(self, data: DataLike) -> Tensor:
        """Share of the (non-negative) spectrum carried by each kept component."""
        X = self._validate(data)
        pairs, _ = self._spectrum(X)
        top = select_top(pairs, self.embed_dim)
        total = pairs.values.clamp(min=0.0).sum()
        ratio = top.values.clamp(min=0.0)
        return ratio / total if float(total) > 0 else ratio


__all__ = ["KernelPca", "as_dataset"]
