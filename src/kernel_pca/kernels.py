"""Kernel functions and Gram matrix construction.

The supported kernels form a closed set:

- ``SquaredExponential``: ``exp(-gamma * ||x - y||^2)``
- ``RationalQuadratic``:  ``(1 + (gamma / alpha) * ||x - y||^2) ** (-alpha)``
- ``Linear``:             ``x . y``

``Linear`` is accepted by both ``evaluate`` and ``build_kernel_matrix`` but the
``KernelPca`` facade never builds its Gram matrix; it runs standard PCA on the
covariance matrix instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Sequence, Union

import torch

from .errors import DimensionMismatch, EmptyDataset

Tensor = torch.Tensor


@dataclass(frozen=True)
class SquaredExponential:
    gamma: float
    name: ClassVar[str] = "rbf"


@dataclass(frozen=True)
class RationalQuadratic:
    gamma: float
    alpha: float
    name: ClassVar[str] = "rational_quadratic"


@dataclass(frozen=True)
class Linear:
    name: ClassVar[str] = "linear"


Kernel = Union[SquaredExponential, RationalQuadratic, Linear]


def _as_vector(x: Sequence[float] | Tensor) -> Tensor:
    if isinstance(x, Tensor):
        return x.reshape(-1).to(torch.float64)
    return torch.as_tensor(list(x), dtype=torch.float64)


def _sq_dist(x: Tensor, y: Tensor) -> float:
    diff = x - y
    return float(torch.dot(diff, diff))


def evaluate(kernel: Kernel, x: Sequence[float] | Tensor, y: Sequence[float] | Tensor) -> float:
    """Kernel similarity k(x, y) between two feature vectors."""
    xv, yv = _as_vector(x), _as_vector(y)
    if xv.numel() != yv.numel():
        raise DimensionMismatch(f"Feature vectors differ in length: {xv.numel()} != {yv.numel()}")
    if isinstance(kernel, SquaredExponential):
        return math.exp(-kernel.gamma * _sq_dist(xv, yv))
    if isinstance(kernel, RationalQuadratic):
        return (1.0 + (kernel.gamma / kernel.alpha) * _sq_dist(xv, yv)) ** (-kernel.alpha)
    if isinstance(kernel, Linear):
        return float(torch.dot(xv, yv))
    raise TypeError(f"Unsupported kernel: {kernel!r}")


def _pairwise_sq_dists(x: Tensor) -> Tensor:
    """Squared Euclidean distances between all rows of x. x: [N, D] -> [N, N]

    Rows are shifted to their mean and differenced directly; the
    ||x||^2 + ||y||^2 - 2 x.y expansion cancels badly on offset data.
    """
    xc = x - x.mean(dim=0, keepdim=True)
    d2 = torch.cdist(xc, xc, compute_mode="donot_use_mm_for_euclid_dist") ** 2
    d2.fill_diagonal_(0.0)
    return d2


def _mirror_upper(K: Tensor) -> Tensor:
    return torch.triu(K) + torch.triu(K, diagonal=1).T


@torch.no_grad()
def build_kernel_matrix(kernel: Kernel, data: Tensor) -> Tensor:
    """Symmetric Gram matrix K_ij = k(x_i, x_j) for data of shape [N, D].

    Pairs are evaluated in one vectorised pass and the upper triangle is
    mirrored so that ``K == K.T`` holds exactly.
    """
    x = torch.as_tensor(data, dtype=torch.float64)
    if x.ndim != 2:
        raise ValueError(f"Expected [N, D] data, got {tuple(x.shape)}")
    if x.shape[0] == 0:
        raise EmptyDataset("Cannot build a kernel matrix from zero samples")

    if isinstance(kernel, SquaredExponential):
        K = torch.exp(-kernel.gamma * _pairwise_sq_dists(x))
    elif isinstance(kernel, RationalQuadratic):
        K = (1.0 + (kernel.gamma / kernel.alpha) * _pairwise_sq_dists(x)) ** (-kernel.alpha)
    elif isinstance(kernel, Linear):
        K = x @ x.T
    else:
        raise TypeError(f"Unsupported kernel: {kernel!r}")
    return _mirror_upper(K)


__all__ = [
    "Kernel",
    "SquaredExponential",
    "RationalQuadratic",
    "Linear",
    "evaluate",
    "build_kernel_matrix",
]
