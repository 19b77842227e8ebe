import math
import torch
import numpy as np
import matplotlib.pyplot as plt
import torch.nn as nn
import torch.optim as optim
from projinterp import (Bin, BSplineType, GeometryFamily, ProjDataGeometry, ProjDataInMemory,
                        SinogramPullFunction, interpolate_projdata)


def disk_sinogram(geometry, disks):
    """Line integrals through uniform disks, identical for every axial position."""
    sino = np.zeros(geometry.segment_shape, dtype=np.float32)
    for iv in range(geometry.num_views):
        for it, t in enumerate(range(geometry.min_tangential_pos_num,
                                     geometry.max_tangential_pos_num + 1)):
            bin = Bin(0, iv, 0, t)
            phi = geometry.get_phi(bin)
            s = geometry.get_s(bin)
            val = 0.0
            for (x0, y0, r, ampl) in disks:
                d = s - (x0*math.cos(phi) + y0*math.sin(phi))
                if abs(d) < r:
                    val += 2.0*ampl*math.sqrt(r*r - d*d)
            sino[:, iv, it] = val
    return sino

class SinogramFitModel(nn.Module):
    def __init__(self, fine_geometry, coarse_geometry):
        super().__init__()
        self.sino = nn.Parameter(torch.zeros(fine_geometry.segment_shape))
        self.fine_geometry = fine_geometry
        self.coarse_geometry = coarse_geometry

    def forward(self):
        return SinogramPullFunction.apply(self.sino, self.fine_geometry, self.coarse_geometry)

class Pipeline:
    def __init__(self, lr, fine_geometry, coarse_geometry, epoches=200):

        self.epoches = epoches
        self.model = SinogramFitModel(fine_geometry, coarse_geometry)

        self.optimizer = optim.AdamW(list(self.model.parameters()), lr=lr)
        self.loss = nn.MSELoss()

    def train(self, label):
        loss_values = []
        for epoch in range(self.epoches):
            self.optimizer.zero_grad()
            predictions = self.model()
            loss_value = self.loss(predictions, label)
            loss_value.backward()
            self.optimizer.step()
            loss_values.append(loss_value.item())

            if epoch % 10 == 0:
                print(f"Epoch {epoch}, Loss: {loss_value.item()}")

        return loss_values, self.model

def main():
    disks = [
        (0.0, 0.0, 60.0, 0.01),
        (25.0, 10.0, 15.0, 0.02),
        (-30.0, -20.0, 10.0, 0.03),
    ]

    coarse = ProjDataGeometry(GeometryFamily.NON_ARC_CORRECTED, num_views=48,
                              num_tangential_poss=81, num_axial_poss=3,
                              tangential_spacing=2.0, axial_spacing=4.0,
                              inner_ring_radius=400.0)
    fine = coarse.with_num_views(96)

    coarse_data = ProjDataInMemory(coarse, disk_sinogram(coarse, disks))
    reference = disk_sinogram(fine, disks)

    # Direct resampling, through the doubled-view grid of the interleaved input
    resampled = ProjDataInMemory(fine)
    interpolate_projdata(resampled, coarse_data, BSplineType.CUBIC, remove_interleaving=True)

    # Fit a fine sinogram whose pull onto the coarse grid matches the measurement
    pipeline_instance = Pipeline(lr=1e-1, fine_geometry=fine, coarse_geometry=coarse, epoches=200)
    label = torch.tensor(coarse_data.array)
    loss_values, trained_model = pipeline_instance.train(label)
    fitted = trained_model.sino.detach().cpu().numpy()

    plt.figure()
    plt.plot(loss_values)
    plt.title("Loss Curve")
    plt.xlabel("Epoch")
    plt.ylabel("Loss")
    plt.show()

    plt.figure(figsize=(15, 5))
    plt.subplot(1, 3, 1)
    plt.imshow(reference[1], cmap="gray", aspect="auto")
    plt.title("Analytic (96 views)")
    plt.axis("off")

    plt.subplot(1, 3, 2)
    plt.imshow(resampled.array[1], cmap="gray", aspect="auto")
    plt.title("Cubic resampling of 48 views")
    plt.axis("off")

    plt.subplot(1, 3, 3)
    plt.imshow(fitted[1], cmap="gray", aspect="auto")
    plt.title("Fitted through pull")
    plt.axis("off")
    plt.show()

if __name__ == "__main__":
    main()
