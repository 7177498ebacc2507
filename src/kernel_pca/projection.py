"""Select leading eigenpairs and project data onto them."""

from __future__ import annotations

import warnings

import torch

from .eigen import Eigenpairs
from .errors import InsufficientComponents

Tensor = torch.Tensor

# A selected eigenvalue below -NEGATIVE_EIGENVALUE_TOL * max|lambda| is reported.
NEGATIVE_EIGENVALUE_TOL = 1e-8


def select_top(pairs: Eigenpairs, embed_dim: int) -> Eigenpairs:
    """Keep the ``embed_dim`` largest eigenpairs, in descending eigenvalue order.

    The sort is stable, so equal eigenvalues keep the order the solver
    returned them in.
    """
    available = len(pairs)
    if embed_dim > available:
        raise InsufficientComponents(
            f"Requested {embed_dim} components but only {available} eigenpairs are available"
        )
    idx = torch.sort(pairs.values, descending=True, stable=True).indices[:embed_dim]
    values = pairs.values[idx]
    vectors = pairs.vectors[:, idx]

    scale = float(pairs.values.abs().max()) if available else 0.0
    if embed_dim and float(values.min()) < -NEGATIVE_EIGENVALUE_TOL * scale:
        warnings.warn(
            f"Selected eigenvalue {float(values.min()):.3e} is negative; the kernel matrix is not "
            "positive semi-definite (check gamma/alpha). Affected components are set to zero.",
            RuntimeWarning,
        )
    return Eigenpairs(values=values, vectors=vectors)


def orient_columns(Z: Tensor) -> Tensor:
    """Flip each column so that its largest-magnitude entry is positive."""
    if Z.numel() == 0:
        return Z
    rows = Z.abs().argmax(dim=0)
    signs = torch.sign(Z[rows, torch.arange(Z.shape[1], device=Z.device)])
    signs[signs == 0] = 1.0
    return Z * signs.unsqueeze(0)


def project_kernel(top: Eigenpairs) -> Tensor:
    """Kernel PCA coordinates of the training points.

    With alphas = v / sqrt(lambda), Z = Kc @ alphas = v * sqrt(lambda), which is
    computed directly. Components with lambda <= 0 come out as zero columns.
    top.vectors: [N, k] -> Z: [N, k]
    """
    scale = torch.sqrt(top.values.clamp(min=0.0))
    return orient_columns(top.vectors * scale.unsqueeze(0))


def project_linear(top: Eigenpairs, centered_data: Tensor) -> Tensor:
    """Standard PCA scores. centered_data: [N, D], top.vectors: [D, k] -> Z: [N, k]"""
    V = top.vectors / torch.linalg.vector_norm(top.vectors, dim=0, keepdim=True)
    return orient_columns(centered_data @ V)


__all__ = [
    "NEGATIVE_EIGENVALUE_TOL",
    "select_top",
    "orient_columns",
    "project_kernel",
    "project_linear",
]
