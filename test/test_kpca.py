import warnings

import numpy as np
import pytest
import torch

from kernel_pca import KernelPca, Linear, RationalQuadratic, SquaredExponential
from kernel_pca.errors import DecompositionFailure, InsufficientComponents, InvalidConfig, InvalidDataset

# Agreement with an independent numpy reference, up to per-column sign.
REFERENCE_ATOL = 1e-8
VARIANCE_ATOL = 1e-10

KERNELS = [SquaredExponential(gamma=0.5), RationalQuadratic(gamma=0.4, alpha=2.0), Linear()]


def _dataset(n=10, d=5, seed=0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    # feature scales keep exp(-gamma * d2) well away from 0 so the spectrum is not flat
    return rng.normal(size=(n, d)) * np.linspace(0.2, 0.6, d)


def _reference_kernel_pca(X: np.ndarray, gamma: float, k: int) -> np.ndarray:
    """Gram matrix -> H K H -> SVD, embedding = U * sqrt(S)."""
    d2 = ((X[:, None, :] - X[None, :, :]) ** 2).sum(axis=-1)
    K = np.exp(-gamma * d2)
    n = X.shape[0]
    H = np.eye(n) - np.full((n, n), 1.0 / n)
    U, S, _ = np.linalg.svd(H @ K @ H)
    return U[:, :k] * np.sqrt(S[:k])


def _reference_pca(X: np.ndarray, k: int) -> np.ndarray:
    Xc = X - X.mean(axis=0)
    U, S, _ = np.linalg.svd(Xc, full_matrices=False)
    return U[:, :k] * S[:k]


def _assert_close_up_to_sign(Z: torch.Tensor, ref: np.ndarray, atol: float = REFERENCE_ATOL):
    Z = Z.numpy()
    assert Z.shape == ref.shape, f"shape {Z.shape} != {ref.shape}"
    for j in range(ref.shape[1]):
        sign = 1.0 if np.dot(Z[:, j], ref[:, j]) >= 0 else -1.0
        assert np.allclose(Z[:, j], sign * ref[:, j], atol=atol), f"component {j} differs"


def test_squared_exponential_matches_reference_10x5():
    X = _dataset(10, 5)
    Z = KernelPca(SquaredExponential(gamma=0.5), embed_dim=2).apply(X)
    _assert_close_up_to_sign(Z, _reference_kernel_pca(X, gamma=0.5, k=2))


def test_linear_kernel_is_standard_pca():
    X = _dataset(12, 4, seed=1)
    Z = KernelPca(Linear(), embed_dim=3).apply(X)
    _assert_close_up_to_sign(Z, _reference_pca(X, k=3))


def test_linear_shortcut_matches_linear_gram_path():
    # Kernel PCA on the explicit linear Gram matrix gives the same scores.
    X = _dataset(8, 3, seed=2)
    Z = KernelPca(Linear(), embed_dim=2).apply(X)
    Xc = X - X.mean(axis=0)
    U, S, _ = np.linalg.svd(Xc @ Xc.T)
    _assert_close_up_to_sign(Z, U[:, :2] * np.sqrt(S[:2]))


@pytest.mark.parametrize("kernel", KERNELS)
@pytest.mark.parametrize("k", [1, 2, 3])
def test_output_shape(kernel, k):
    X = _dataset(9, 4, seed=3)
    Z = KernelPca(kernel, embed_dim=k).apply(X.tolist())
    assert Z.shape == (9, k)
    assert Z.dtype == torch.float64


@pytest.mark.parametrize("kernel", KERNELS)
def test_column_variance_non_increasing(kernel):
    X = _dataset(15, 4, seed=4)
    Z = KernelPca(kernel, embed_dim=4).apply(X)
    var = Z.var(dim=0)
    for j in range(3):
        assert var[j] + VARIANCE_ATOL >= var[j + 1], f"variance of column {j} < column {j + 1}"


@pytest.mark.parametrize("kernel", KERNELS)
def test_row_order_follows_input(kernel):
    X = _dataset(11, 3, seed=5)
    perm = np.random.default_rng(0).permutation(11)
    pca = KernelPca(kernel, embed_dim=2)
    Z = pca.apply(X)
    Z_perm = pca.apply(X[perm])
    _assert_close_up_to_sign(Z_perm, Z.numpy()[perm])


@pytest.mark.parametrize("kernel", KERNELS)
def test_apply_is_deterministic(kernel):
    X = _dataset(10, 5, seed=6)
    pca = KernelPca(kernel, embed_dim=2)
    assert torch.equal(pca.apply(X), pca.apply(X))


def test_jacobi_solver_matches_eigh():
    X = _dataset(10, 5, seed=7)
    Z_eigh = KernelPca(SquaredExponential(gamma=0.5), embed_dim=3).apply(X)
    Z_jacobi = KernelPca(SquaredExponential(gamma=0.5), embed_dim=3, method="jacobi").apply(X)
    _assert_close_up_to_sign(Z_jacobi, Z_eigh.numpy())


def test_kernel_path_allows_embed_dim_above_feature_count():
    X = _dataset(10, 2, seed=8)
    Z = KernelPca(RationalQuadratic(gamma=1.0, alpha=1.0), embed_dim=5).apply(X)
    assert Z.shape == (10, 5)


def test_kernel_path_insufficient_components():
    X = _dataset(4, 3)
    with pytest.raises(InsufficientComponents):
        KernelPca(SquaredExponential(gamma=0.5), embed_dim=5).apply(X)


def test_linear_path_insufficient_components():
    X = _dataset(10, 3)
    with pytest.raises(InsufficientComponents):
        KernelPca(Linear(), embed_dim=4).apply(X)


@pytest.mark.parametrize(
    "data",
    [
        [],
        np.empty((0, 3)),
        torch.zeros(0, 2),
        [[1.0, 2.0], [3.0]],
        [[], []],
        [[1.0, float("nan")], [2.0, 3.0]],
        np.ones(4),
    ],
)
def test_invalid_dataset(data):
    with pytest.raises(InvalidDataset):
        KernelPca(SquaredExponential(gamma=0.5), embed_dim=1).apply(data)


def test_non_positive_embed_dim():
    with pytest.raises(InvalidConfig):
        KernelPca(Linear(), embed_dim=0).apply([[1.0, 2.0], [3.0, 4.0]])


def test_apply_leaves_configuration_unchanged():
    pca = KernelPca(SquaredExponential(gamma=0.5), embed_dim=2)
    before = pca.to_config()
    pca.apply(_dataset(6, 3))
    assert pca.to_config() == before


def test_single_sample():
    Z = KernelPca(SquaredExponential(gamma=0.5), embed_dim=1).apply([[1.0, 2.0, 3.0]])
    assert Z.shape == (1, 1)
    assert torch.allclose(Z, torch.zeros(1, 1, dtype=torch.float64))


def test_decompose_and_explained_variance_ratio():
    X = _dataset(10, 5, seed=9)
    pca = KernelPca(SquaredExponential(gamma=0.5), embed_dim=3)
    pairs = pca.decompose(X)
    assert len(pairs) == 10
    assert torch.all(pairs.values[:-1] >= pairs.values[1:])
    ratio = pca.explained_variance_ratio(X)
    assert ratio.shape == (3,)
    assert float(ratio.sum()) <= 1.0 + 1e-12
    assert torch.all(ratio[:-1] >= ratio[1:])


def test_verbose_prints_progress(capsys):
    KernelPca(Linear(), embed_dim=1).apply(_dataset(5, 2), verbose=True)
    out = capsys.readouterr().out
    assert "[KPCA]" in out


@pytest.mark.parametrize("kernel", [SquaredExponential(gamma=0.5), RationalQuadratic(gamma=0.4, alpha=2.0)])
def test_translation_invariant_kernels_ignore_offset(kernel):
    X = _dataset(10, 5, seed=10)
    pca = KernelPca(kernel, embed_dim=2)
    _assert_close_up_to_sign(pca.apply(X + 1e5), pca.apply(X).numpy())


def test_indefinite_kernel_output_stays_bounded():
    # negative gamma makes the rational-quadratic Gram matrix indefinite
    X = _dataset(6, 2, seed=11)
    pca = KernelPca(RationalQuadratic(gamma=-0.05, alpha=1.0), embed_dim=6)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        Z = pca.apply(X)
        lam = pca.decompose(X).values
    bound = float(lam.clamp(min=0.0).max().sqrt())
    assert float(Z.abs().max()) <= bound + 1e-9, f"max |Z| {float(Z.abs().max())} exceeds sqrt(lambda_max) {bound}"
    for j in range(6):
        if float(lam[j]) <= 0.0:
            assert torch.equal(Z[:, j], torch.zeros(6, dtype=torch.float64))


def test_kernel_overflow_raises_decomposition_failure():
    pca = KernelPca(SquaredExponential(gamma=-1.0), embed_dim=1)
    with pytest.raises(DecompositionFailure):
        pca.apply([[0.0], [30.0], [60.0]])
