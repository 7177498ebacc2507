"""Exceptions raised by the Kernel PCA pipeline.

Every failure is terminal for the current ``apply`` call: the conditions are
deterministic properties of the input or configuration, so retrying with the
same arguments gives the same error.
"""


class KernelPcaError(Exception):
    """Base class for all Kernel PCA errors."""


class InvalidDataset(KernelPcaError, ValueError):
    """Input data is empty, ragged, zero-width or non-finite."""


class EmptyDataset(InvalidDataset):
    """Input data has no samples."""


class InvalidConfig(KernelPcaError, ValueError):
    """Embedding dimension or kernel configuration is unusable."""


class DimensionMismatch(KernelPcaError, ValueError):
    """Two feature vectors passed to a kernel have different lengths."""


class InsufficientComponents(KernelPcaError, ValueError):
    """More components were requested than there are eigenpairs."""


class DecompositionFailure(KernelPcaError, RuntimeError):
    """The symmetric eigensolver failed or did not converge."""


__all__ = [
    "KernelPcaError",
    "InvalidDataset",
    "EmptyDataset",
    "InvalidConfig",
    "DimensionMismatch",
    "InsufficientComponents",
    "DecompositionFailure",
]
