"""PyTorch autograd functions for projection data resampling.

This module wraps the pull and push resampling operators in PyTorch autograd
Function classes, so they can be used as linear operators inside
gradient-based reconstruction. The backward pass of each function applies
the transpose of its forward operator.
"""

import torch

from .coordinates import compute_push_map
from .interpolate import InterpolationConfig, pull_segment, push_segment
from .resampler import BSplineType
from .utils import DeviceManager, TorchNumpyBridge


# ============================================================================
# PyTorch Autograd Functions
# ============================================================================

class SinogramPullFunction(torch.autograd.Function):
    """
    Summary
    -------
    PyTorch autograd function resampling a sinogram onto another geometry.

    Notes
    -----
    The forward pass samples the input sinogram with spline weights at the
    bins of `geometry_out`. The backward pass scatters the incoming gradient
    back with the same weights (the unscaled push), which is the exact
    transpose of the forward operator. Kernels run on the CPU; tensors on
    other devices are copied and results returned on the input device.

    Examples
    --------
    >>> sino = torch.rand(geometry_in.segment_shape, requires_grad=True)
    >>> resampled = SinogramPullFunction.apply(sino, geometry_in, geometry_out)
    >>> resampled.sum().backward()
    >>> sino.grad.shape == sino.shape
    True
    """
    @staticmethod
    def forward(ctx, sinogram, geometry_in, geometry_out, remove_interleaving=False,
                use_view_offset=False, spline_type=BSplineType.LINEAR):
        """Resample `sinogram` from `geometry_in` onto `geometry_out`.

        Parameters
        ----------
        sinogram : torch.Tensor
            Segment 0 of shape ``geometry_in.segment_shape``.
        geometry_in : ProjDataGeometry
            Geometry of `sinogram`.
        geometry_out : ProjDataGeometry
            Geometry of the result.
        remove_interleaving : bool, optional
            Resample through the doubled-view grid of `geometry_in`
            (default: False).
        use_view_offset : bool, optional
            Account for the intrinsic tilt. Experimental (default: False).
        spline_type : BSplineType or sequence of BSplineType, optional
            Spline weights (default: ``BSplineType.LINEAR``).

        Returns
        -------
        torch.Tensor
            Tensor of shape ``geometry_out.segment_shape`` on the device of
            `sinogram`.
        """
        device = DeviceManager.get_device(sinogram)
        config = InterpolationConfig(spline_types=spline_type,
                                     remove_interleaving=remove_interleaving,
                                     use_view_offset=use_view_offset)
        segment = TorchNumpyBridge.tensor_to_volume(sinogram, geometry_in)
        resampled = pull_segment(segment, geometry_in, geometry_out, config)

        ctx.intermediate = (geometry_in, geometry_out, config)
        return TorchNumpyBridge.volume_to_tensor(resampled, device, sinogram.dtype)

    @staticmethod
    def backward(ctx, grad_output):
        geometry_in, geometry_out, config = ctx.intermediate
        device = DeviceManager.get_device(grad_output)

        grad_segment = TorchNumpyBridge.tensor_to_volume(grad_output, geometry_out)
        grad_sino = push_segment(grad_segment, geometry_out, geometry_in, config, scale=False)

        return (TorchNumpyBridge.volume_to_tensor(grad_sino, device, grad_output.dtype),
                None, None, None, None, None)


class SinogramPushFunction(torch.autograd.Function):
    """
    Summary
    -------
    PyTorch autograd function for the adjoint (push) of sinogram resampling.

    Notes
    -----
    The forward pass scatters `sinogram` onto the grid of `geometry_out` and
    scales by the product of the affine steps, as
    :func:`projinterp.interpolate_projdata_push` does. The backward pass is
    the scaled pull, the exact transpose of the forward operator.

    Examples
    --------
    >>> sino = torch.rand(geometry_in.segment_shape, requires_grad=True)
    >>> pushed = SinogramPushFunction.apply(sino, geometry_in, geometry_out)
    >>> pushed.shape == geometry_out.segment_shape
    True
    """
    @staticmethod
    def forward(ctx, sinogram, geometry_in, geometry_out, remove_interleaving=False,
                use_view_offset=False, spline_type=BSplineType.LINEAR):
        """Push `sinogram` from `geometry_in` onto `geometry_out`.

        Parameters are those of :meth:`SinogramPullFunction.forward`;
        `remove_interleaving` applies to `geometry_out`.

        Returns
        -------
        torch.Tensor
            Tensor of shape ``geometry_out.segment_shape`` on the device of
            `sinogram`.
        """
        device = DeviceManager.get_device(sinogram)
        config = InterpolationConfig(spline_types=spline_type,
                                     remove_interleaving=remove_interleaving,
                                     use_view_offset=use_view_offset)
        segment = TorchNumpyBridge.tensor_to_volume(sinogram, geometry_in)
        pushed = push_segment(segment, geometry_in, geometry_out, config, scale=True)

        ctx.intermediate = (geometry_in, geometry_out, config)
        return TorchNumpyBridge.volume_to_tensor(pushed, device, sinogram.dtype)

    @staticmethod
    def backward(ctx, grad_output):
        geometry_in, geometry_out, config = ctx.intermediate
        device = DeviceManager.get_device(grad_output)
        step_product = compute_push_map(geometry_in, geometry_out,
                                        remove_interleaving=config.remove_interleaving,
                                        use_view_offset=config.use_view_offset).step_product

        grad_segment = TorchNumpyBridge.tensor_to_volume(grad_output, geometry_out)
        grad_sino = pull_segment(grad_segment, geometry_out, geometry_in, config)
        grad_sino = TorchNumpyBridge.volume_to_tensor(grad_sino, device, grad_output.dtype)

        return grad_sino * step_product, None, None, None, None, None
