from __future__ import annotations
import torch
import torch.nn.functional as F

# Entrées : [B,1,H,W] dans [-1,1] (dynamique 2 → pic² = 4)
PEAK_SQ = 4.0


def psnr(y: torch.Tensor, yhat: torch.Tensor) -> torch.Tensor:
    mse = torch.mean((y - yhat) ** 2, dim=(1, 2, 3))
    return 10.0 * torch.log10(PEAK_SQ / torch.clamp(mse, min=1e-12))


def _gauss1d(n: int = 11, sigma: float = 1.5, device=None, dtype=None):
    t = torch.arange(n, device=device, dtype=dtype) - (n - 1) / 2
    g = torch.exp(-(t**2) / (2 * sigma * sigma))
    return (g / g.sum()).view(1, 1, 1, n)


def ssim(y: torch.Tensor, yhat: torch.Tensor) -> torch.Tensor:
    g = _gauss1d(device=y.device, dtype=y.dtype)
    pad = g.shape[-1] // 2

    def blur(x: torch.Tensor) -> torch.Tensor:
        x = F.conv2d(F.pad(x, (pad, pad, 0, 0), mode="replicate"), g)
        return F.conv2d(F.pad(x, (0, 0, pad, pad), mode="replicate"), g.transpose(2, 3))

    # ramène [-1,1] vers [0,1] pour les constantes C1/C2 usuelles
    a, b = (y + 1.0) * 0.5, (yhat + 1.0) * 0.5
    mu_a, mu_b = blur(a), blur(b)
    var_a = blur(a * a) - mu_a * mu_a
    var_b = blur(b * b) - mu_b * mu_b
    cov = blur(a * b) - mu_a * mu_b
    C1, C2 = 0.01**2, 0.03**2
    ssim_map = ((2 * mu_a * mu_b + C1) * (2 * cov + C2)) / ((mu_a**2 + mu_b**2 + C1) * (var_a + var_b + C2))
    return ssim_map.mean(dim=(1, 2, 3)).clamp(0, 1)
