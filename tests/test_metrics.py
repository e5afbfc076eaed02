import numpy as np
import torch

from chpkcodec.pixels import PixelBuffer
from chpkmetrics import compare, to_luma_tensor
from chpkmetrics.psnr_ssim import psnr, ssim


def test_metrics_basic():
    dev = torch.device("cuda" if torch.cuda.is_available() else "cpu")
    y = torch.zeros((2, 1, 32, 32), device=dev)
    yhat = torch.zeros_like(y)
    assert torch.all(psnr(y, yhat) > 100.0)
    assert torch.all(ssim(y, yhat) >= 0.99)
    assert torch.all(psnr(y, yhat + 0.5) < psnr(y, yhat + 0.1))


def test_compare_pixel_buffers():
    arr = np.random.default_rng(3).integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
    a = PixelBuffer.from_array(arr)
    assert to_luma_tensor(a).shape == (1, 1, 16, 16)
    same = compare(a, a)
    assert same["exact"] and same["differing_pixels"] == 0
    arr2 = arr.copy()
    arr2[0, 0, 3] ^= 0xFF          # alpha seul : invisible en luma mais compté
    diff = compare(a, PixelBuffer.from_array(arr2))
    assert not diff["exact"] and diff["differing_pixels"] == 1
