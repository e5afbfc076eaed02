from .api import (
    ImageLoadError,
    load_pixels,
    decode_pixels,
    encode_pixels,
    to_pil,
    to_base64,
    format_for_path,
    scan_images,
    resolve_inputs,
)

__all__ = [
    "ImageLoadError", "load_pixels", "decode_pixels", "encode_pixels", "to_pil",
    "to_base64", "format_for_path", "scan_images", "resolve_inputs",
]
