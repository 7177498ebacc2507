"""Symmetric eigendecomposition.

Two solvers are available:

- ``"eigh"``   LAPACK via ``torch.linalg.eigh`` (default).
- ``"jacobi"`` cyclic Jacobi rotations with a bounded number of sweeps. Slower,
  but the convergence criterion and iteration bound are explicit, which makes
  it useful as an independent check on small matrices.

Both return an unordered ``Eigenpairs``; ordering is the projector's job.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import torch

from .errors import DecompositionFailure

Tensor = torch.Tensor
SolverName = Literal["eigh", "jacobi"]
SOLVERS = ("eigh", "jacobi")

# Max asymmetry |S - S^T| accepted, relative to the largest entry of S.
SYMMETRY_TOL = 1e-8


@dataclass
class Eigenpairs:
    values: Tensor    # [M]
    vectors: Tensor   # [M, M], column i pairs with values[i]

    def __len__(self) -> int:
        return int(self.values.numel())


def _check_symmetric(S: Tensor) -> Tensor:
    if S.ndim != 2 or S.shape[0] != S.shape[1]:
        raise ValueError(f"Expected a square matrix, got {tuple(S.shape)}")
    if not torch.isfinite(S).all():
        raise DecompositionFailure("Matrix contains NaN or infinite entries (kernel overflow?)")
    scale = max(1.0, float(S.abs().max())) if S.numel() else 1.0
    if not torch.allclose(S, S.T, rtol=0.0, atol=SYMMETRY_TOL * scale):
        raise ValueError("Eigendecomposition requires a symmetric matrix")
    return 0.5 * (S + S.T)


def _off_diagonal_norm(A: Tensor) -> float:
    total = float((A * A).sum())
    diag = float((torch.diagonal(A) ** 2).sum())
    return math.sqrt(max(total - diag, 0.0))


def _rotate(A: Tensor, V: Tensor, p: int, q: int) -> None:
    """Zero A[p, q] in place with one Jacobi rotation and accumulate it into V."""
    apq = float(A[p, q])
    if apq == 0.0:
        return
    tau = (float(A[q, q]) - float(A[p, p])) / (2.0 * apq)
    t = math.copysign(1.0, tau) / (abs(tau) + math.sqrt(1.0 + tau * tau))
    c = 1.0 / math.sqrt(1.0 + t * t)
    s = t * c

    # A <- J^T A J, columns then rows
    col_p, col_q = A[:, p].clone(), A[:, q].clone()
    A[:, p] = c * col_p - s * col_q
    A[:, q] = s * col_p + c * col_q
    row_p, row_q = A[p, :].clone(), A[q, :].clone()
    A[p, :] = c * row_p - s * row_q
    A[q, :] = s * row_p + c * row_q
    A[p, q] = 0.0
    A[q, p] = 0.0

    vec_p, vec_q = V[:, p].clone(), V[:, q].clone()
    V[:, p] = c * vec_p - s * vec_q
    V[:, q] = s * vec_p + c * vec_q


def _jacobi(S: Tensor, max_sweeps: int, tol: float) -> Eigenpairs:
    A = S.clone()
    n = A.shape[0]
    V = torch.eye(n, dtype=A.dtype, device=A.device)
    threshold = tol * float(torch.linalg.matrix_norm(A, ord="fro"))

    for _ in range(max_sweeps):
        if _off_diagonal_norm(A) <= threshold:
            return Eigenpairs(values=torch.diagonal(A).clone(), vectors=V)
        for p in range(n - 1):
            for q in range(p + 1, n):
                _rotate(A, V, p, q)

    off = _off_diagonal_norm(A)
    if off <= threshold:
        return Eigenpairs(values=torch.diagonal(A).clone(), vectors=V)
    raise DecompositionFailure(
        f"Jacobi eigensolver did not converge in {max_sweeps} sweeps "
        f"(off-diagonal norm {off:.3e} > {threshold:.3e})"
    )


def _eigh(S: Tensor) -> Eigenpairs:
    try:
        values, vectors = torch.linalg.eigh(S)    # ascending
    except torch.linalg.LinAlgError as exc:
        raise DecompositionFailure(f"Symmetric eigensolver failed: {exc}") from exc
    if not (torch.isfinite(values).all() and torch.isfinite(vectors).all()):
        raise DecompositionFailure("Symmetric eigensolver produced non-finite values")
    return Eigenpairs(values=values, vectors=vectors)


@torch.no_grad()
def decompose(
    S: Tensor,
    *,
    method: SolverName = "eigh",
    max_sweeps: int = 100,
    tol: float = 1e-12,
) -> Eigenpairs:
    """Eigenpairs of a real symmetric matrix S, satisfying S v = lambda v."""
    S = _check_symmetric(S)
    if method == "eigh":
        return _eigh(S)
    if method == "jacobi":
        return _jacobi(S, max_sweeps=max_sweeps, tol=tol)
    raise ValueError(f"Unknown eigensolver: {method}")


__all__ = ["Eigenpairs", "SolverName", "SOLVERS", "SYMMETRY_TOL", "decompose"]
