"""Utility classes and helper functions for the projinterp package.

This module provides device management, the bridge between PyTorch tensors
and index-ranged sample volumes, and sinogram layout validation.
"""

import numpy as np
import torch

from .constants import _DTYPE
from .volume import SampleVolume


# ============================================================================
# Device Management Utilities
# ============================================================================

class DeviceManager:
    """Utilities for managing PyTorch tensor devices."""

    @staticmethod
    def get_device(tensor):
        """Get the device of a PyTorch tensor.

        Parameters
        ----------
        tensor : torch.Tensor
            Tensor whose device to determine.

        Returns
        -------
        torch.device
            Device of the tensor or CPU if unavailable.

        Examples
        --------
        >>> DeviceManager.get_device(torch.tensor([1, 2, 3]))
        device(type='cpu')
        """
        return tensor.device if hasattr(tensor, "device") else torch.device("cpu")


# ============================================================================
# Sinogram Layout Validation
# ============================================================================

def _validate_sinogram_layout(tensor, geometry):
    """Check that a tensor holds segment 0 of `geometry`.

    Parameters
    ----------
    tensor : torch.Tensor
        Sinogram of shape (num_axial_poss, num_views, num_tangential_poss).
    geometry : ProjDataGeometry
        Geometry the sinogram is sampled on.

    Raises
    ------
    ValueError
        If the tensor is not 3D or its shape differs from the geometry.
    """
    shape = tuple(tensor.shape)
    if len(shape) != 3:
        raise ValueError(f"Expected 3D sinogram (axial, view, tangential), got {len(shape)}D")
    expected = tuple(geometry.segment_shape)
    if shape != expected:
        raise ValueError(
            f"Sinogram shape {shape} does not match the geometry: expected "
            f"(num_axial_poss, num_views, num_tangential_poss) = {expected}"
        )


# ============================================================================
# PyTorch-NumPy Bridge
# ============================================================================

class TorchNumpyBridge:
    """Bridge between PyTorch tensors and :class:`SampleVolume` objects.

    The resampling kernels run on the CPU, so tensors on other devices are
    copied to host memory and results are moved back afterwards.
    """

    @staticmethod
    def tensor_to_volume(tensor, geometry):
        """Copy a sinogram tensor into a sample volume with the ranges of `geometry`.

        Examples
        --------
        >>> vol = TorchNumpyBridge.tensor_to_volume(torch.zeros(3, 8, 9), geometry)
        >>> vol.min_indices
        (0, 0, -4)
        """
        _validate_sinogram_layout(tensor, geometry)
        array = tensor.detach().to(device="cpu", dtype=torch.float32).contiguous().numpy()
        return SampleVolume(np.array(array, dtype=_DTYPE), geometry.min_indices)

    @staticmethod
    def volume_to_tensor(volume, device, dtype=torch.float32):
        """Wrap the data of a sample volume as a tensor on `device`."""
        array = np.ascontiguousarray(volume.array)
        return torch.from_numpy(array).to(device=device, dtype=dtype)
