import torch

from kernel_pca.centering import center_data, center_kernel_matrix, covariance
from kernel_pca.kernels import SquaredExponential, build_kernel_matrix

ATOL = 1e-10


def test_double_centering_zeroes_row_and_column_sums():
    torch.manual_seed(0)
    X = torch.randn(9, 3, dtype=torch.float64)
    Kc = center_kernel_matrix(build_kernel_matrix(SquaredExponential(gamma=0.5), X))
    zeros = torch.zeros(9, dtype=torch.float64)
    assert torch.allclose(Kc.sum(dim=0), zeros, atol=ATOL)
    assert torch.allclose(Kc.sum(dim=1), zeros, atol=ATOL)
    assert torch.equal(Kc, Kc.T)


def test_double_centering_matches_projection_form():
    torch.manual_seed(1)
    A = torch.randn(5, 5, dtype=torch.float64)
    K = A @ A.T
    H = torch.eye(5, dtype=torch.float64) - torch.ones(5, 5, dtype=torch.float64) / 5
    assert torch.allclose(center_kernel_matrix(K), H @ K @ H, atol=ATOL)


def test_center_data_and_covariance():
    X = torch.tensor([[1.0, 2.0], [3.0, 6.0], [5.0, 10.0]], dtype=torch.float64)
    Xc, mean = center_data(X)
    assert torch.allclose(mean, torch.tensor([3.0, 6.0], dtype=torch.float64))
    assert torch.allclose(Xc.sum(dim=0), torch.zeros(2, dtype=torch.float64), atol=ATOL)
    cov = covariance(Xc)
    expected = torch.tensor([[8.0 / 3.0, 16.0 / 3.0], [16.0 / 3.0, 32.0 / 3.0]], dtype=torch.float64)
    assert torch.allclose(cov, expected, atol=ATOL)
