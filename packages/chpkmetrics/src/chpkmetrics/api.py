from __future__ import annotations
from typing import Dict, Protocol

import numpy as np
import torch

from chpkcodec.pixels import PixelBuffer

from .psnr_ssim import psnr, ssim


class Metric(Protocol):
    def __call__(self, y: torch.Tensor, yhat: torch.Tensor) -> torch.Tensor: ...


def to_luma_tensor(buf: PixelBuffer, *, dtype=torch.float32) -> torch.Tensor:
    """PixelBuffer → luma BT.601 [1,1,H,W] dans [-1,1] (alpha ignoré)."""
    rgb = buf.as_array()[..., :3].astype(np.float32)
    y = rgb @ np.array([0.299, 0.587, 0.114], dtype=np.float32)
    return torch.from_numpy(y / 127.5 - 1.0).to(dtype=dtype)[None, None, ...]


def compare(ref: PixelBuffer, hat: PixelBuffer) -> Dict[str, float]:
    """PSNR/SSIM sur la luma + nombre de pixels différents (tous canaux)."""
    if not ref.same_geometry(hat):
        raise ValueError(
            f"cannot compare {ref.width}x{ref.height}x{ref.channels} with {hat.width}x{hat.height}x{hat.channels}"
        )
    y, yhat = to_luma_tensor(ref), to_luma_tensor(hat)
    differing = int(np.any(ref.as_array() != hat.as_array(), axis=-1).sum())
    return {
        "psnr": float(psnr(y, yhat)[0]),
        "ssim": float(ssim(y, yhat)[0]),
        "differing_pixels": differing,
        "exact": differing == 0,
    }
