from .psnr_ssim import psnr, ssim
from .api import Metric, to_luma_tensor, compare

__all__ = ["psnr", "ssim", "Metric", "to_luma_tensor", "compare"]
