from __future__ import annotations

from typing import Tuple

import torch

Tensor = torch.Tensor


def center_kernel_matrix(K: Tensor) -> Tensor:
    """Double-center a Gram matrix.

    Kc[i, j] = K[i, j] - row_mean[i] - col_mean[j] + grand_mean, which equals
    the Gram matrix of the feature-space vectors after subtracting their mean.
    """
    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise ValueError(f"Expected a square matrix, got {tuple(K.shape)}")
    row_means = K.mean(dim=1, keepdim=True)       # [N, 1]
    col_means = K.mean(dim=0, keepdim=True)       # [1, N]
    grand_mean = K.mean()
    Kc = K - row_means - col_means + grand_mean
    return 0.5 * (Kc + Kc.T)                      # numerical symmetrization


def center_data(X: Tensor) -> Tuple[Tensor, Tensor]:
    """Subtract per-feature means. X: [N, D] -> (Xc [N, D], mean [D])"""
    mean = X.mean(dim=0)
    return X - mean, mean


def covariance(Xc: Tensor) -> Tensor:
    """Biased covariance Xc^T Xc / N of column-centered data."""
    cov = Xc.T @ Xc / Xc.shape[0]
    return 0.5 * (cov + cov.T)


__all__ = ["center_kernel_matrix", "center_data", "covariance"]
