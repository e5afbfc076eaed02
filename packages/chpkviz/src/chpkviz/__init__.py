from .api import coverage_mask, visualize_compression, visualize_variant_patches, montage, plot_variant_sizes

__all__ = ["coverage_mask", "visualize_compression", "visualize_variant_patches", "montage", "plot_variant_sizes"]
