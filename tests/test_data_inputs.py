from __future__ import annotations
import numpy as np
import pytest
from PIL import Image, features

from chpkcodec.errors import DuplicateVariantName, EmptyInput
from chpkcodec.pixels import PixelBuffer
from chpkdata import (
    ImageLoadError, decode_pixels, encode_pixels, format_for_path, load_pixels,
    resolve_inputs, scan_images, to_base64,
)


def _save(path, rgb=(10, 20, 30), size=(6, 4), mode="RGB"):
    color = rgb if mode == "RGB" else rgb + (128,)
    Image.new(mode, size, color=color).save(path)
    return path


def test_load_forces_rgba(tmp_path):
    buf = load_pixels(_save(tmp_path / "a.png"))
    assert (buf.width, buf.height, buf.channels) == (6, 4, 4)
    assert tuple(buf.as_array()[0, 0]) == (10, 20, 30, 255)


def test_png_roundtrip_is_exact():
    arr = np.random.default_rng(1).integers(0, 256, size=(5, 7, 4), dtype=np.uint8)
    buf = PixelBuffer.from_array(arr)
    assert decode_pixels(encode_pixels(buf, "png")) == buf


def test_jpeg_drops_alpha_and_base64_prefix():
    buf = PixelBuffer.from_array(np.full((8, 8, 4), 100, dtype=np.uint8))
    assert encode_pixels(buf, "jpeg")[:2] == b"\xff\xd8"
    assert to_base64(buf).startswith("data:image/png;base64,")
    with pytest.raises(ValueError):
        encode_pixels(buf, "gif")


@pytest.mark.skipif(not features.check("webp"), reason="Pillow sans WebP")
def test_webp_encode():
    buf = PixelBuffer.from_array(np.full((8, 8, 4), 7, dtype=np.uint8))
    assert encode_pixels(buf, "webp")[8:12] == b"WEBP"


def test_format_for_path():
    assert format_for_path("x/out.JPG") == "jpg"
    assert format_for_path("x/out.webp") == "webp"
    assert format_for_path("x/out.bin") == "png"


def test_bad_image_carries_path(tmp_path):
    bad = tmp_path / "broken.png"
    bad.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError) as ei:
        load_pixels(bad)
    assert ei.value.path == str(bad)
    with pytest.raises(ImageLoadError):
        load_pixels(tmp_path / "missing.png")


def test_resolve_glob_list_and_mapping(tmp_path):
    for n in ("b_smile", "a_idle", "c_sad"):
        _save(tmp_path / f"{n}.png")
    out = resolve_inputs(str(tmp_path / "*.png"))
    assert list(out) == ["a_idle", "b_smile", "c_sad"]

    out = resolve_inputs([tmp_path / "c_sad.png", tmp_path / "a_idle.png"], with_extension=True)
    assert list(out) == ["c_sad.png", "a_idle.png"]

    out = resolve_inputs([tmp_path / "a_idle.png"], name_fn=lambda p: p.stem.split("_")[1])
    assert list(out) == ["idle"]

    mapping = {"hero": tmp_path / "a_idle.png"}
    assert resolve_inputs(mapping) == mapping


def test_resolve_errors(tmp_path):
    _save(tmp_path / "x.png")
    _save(tmp_path / "x.jpg")
    with pytest.raises(DuplicateVariantName):
        resolve_inputs([tmp_path / "x.png", tmp_path / "x.jpg"])
    with pytest.raises(EmptyInput):
        resolve_inputs(str(tmp_path / "*.webp"))


def test_scan_images(tmp_path):
    (tmp_path / "sub").mkdir()
    _save(tmp_path / "sub" / "a.png")
    (tmp_path / "notes.txt").write_text("x")
    assert scan_images(tmp_path) == [tmp_path / "sub" / "a.png"]
