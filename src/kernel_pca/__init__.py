from .centering import center_data, center_kernel_matrix, covariance
from .config import kernel_from_config, kernel_to_config, load_config, save_config
from .eigen import Eigenpairs, decompose
from .errors import (
    DecompositionFailure,
    DimensionMismatch,
    EmptyDataset,
    InsufficientComponents,
    InvalidConfig,
    InvalidDataset,
    KernelPcaError,
)
from .kernels import Kernel, Linear, RationalQuadratic, SquaredExponential, build_kernel_matrix, evaluate
from .kpca import KernelPca, as_dataset
from .projection import project_kernel, project_linear, select_top

__version__ = "0.1.0"

__all__ = [
    "KernelPca",
    "Kernel",
    "SquaredExponential",
    "RationalQuadratic",
    "Linear",
    "evaluate",
    "build_kernel_matrix",
    "center_kernel_matrix",
    "center_data",
    "covariance",
    "Eigenpairs",
    "decompose",
    "select_top",
    "project_kernel",
    "project_linear",
    "as_dataset",
    "load_config",
    "save_config",
    "kernel_from_config",
    "kernel_to_config",
    "KernelPcaError",
    "InvalidDataset",
    "EmptyDataset",
    "InvalidConfig",
    "DimensionMismatch",
    "InsufficientComponents",
    "DecompositionFailure",
]
