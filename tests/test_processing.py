"""
Tests for sprite_pairs.processing

Test Coverage:
- generate_sprite(): decode + compose, frames released on every path
- process_pair(): full decode/compose/write/delete cycle
- batch_sprites(): ordering, fail-fast, keep-going, non-idempotence
- Round trips: PNG is pixel-exact, JPEG keeps dimensions
"""

import numpy as np
import pytest
from PIL import Image

from sprite_pairs import processing
from sprite_pairs.errors import UnreadableFileError, UnrecognizedFormatError
from sprite_pairs.file_scanner import ImagePair, discover_pairs
from sprite_pairs.image_codec import ImageFormat, decode_image
from sprite_pairs.processing import (
    BatchResult,
    SpriteOptions,
    batch_sprites,
    generate_sprite,
    process_pair,
)


def _pair(tmp_path, make_image, name, top=(255, 0, 0), bottom=(0, 0, 255), ext="png"):
    primary = make_image(tmp_path / f"{name}.{ext}", size=(6, 4), color=top)
    secondary = make_image(tmp_path / f"{name}_over.{ext}", size=(6, 3), color=bottom)
    return ImagePair(primary, secondary)


def test_generate_sprite(tmp_path, make_image):
    pair = _pair(tmp_path, make_image, "logo")

    sprite = generate_sprite(pair.primary, pair.secondary)

    assert sprite.size == (6, 7)
    assert sprite.getpixel((0, 0)) == (255, 0, 0)
    assert sprite.getpixel((0, 6)) == (0, 0, 255)
    assert pair.secondary.exists()


def test_generate_sprite_releases_first_frame_when_second_fails(tmp_path, make_image, monkeypatch):
    """A decode failure on the hover frame still closes the default frame."""
    primary = make_image(tmp_path / "logo.png")
    closed = []

    def _fake_decode(path):
        if path == primary:
            image = decode_image(path)
            monkeypatch.setattr(image, "close", lambda: closed.append(path))
            return image
        raise UnreadableFileError(f"Unable to read {path}", path)

    monkeypatch.setattr(processing, "decode_image", _fake_decode)

    with pytest.raises(UnreadableFileError):
        generate_sprite(primary, tmp_path / "logo_over.png")

    assert closed == [primary]


def test_generate_sprite_releases_both_frames(tmp_path, make_image, monkeypatch):
    pair = _pair(tmp_path, make_image, "logo")
    closed = []

    def _tracking_decode(path):
        image = decode_image(path)
        monkeypatch.setattr(image, "close", lambda: closed.append(path.name))
        return image

    monkeypatch.setattr(processing, "decode_image", _tracking_decode)

    generate_sprite(pair.primary, pair.secondary)

    assert sorted(closed) == ["logo.png", "logo_over.png"]


def test_process_pair(tmp_path, make_image):
    pair = _pair(tmp_path, make_image, "logo")

    result = process_pair(pair)

    assert result.ok
    assert result.output_path == pair.primary
    assert result.size == (6, 7)
    assert not pair.secondary.exists()
    with Image.open(pair.primary) as written:
        assert written.format == "PNG"
        assert written.size == (6, 7)


def test_png_round_trip_is_lossless(tmp_path, make_image, rng):
    top = rng.integers(0, 256, size=(50, 100, 3), dtype=np.uint8)
    bottom = rng.integers(0, 256, size=(30, 80, 3), dtype=np.uint8)
    primary = make_image(tmp_path / "hero.png", pixels=top)
    secondary = make_image(tmp_path / "hero_over.png", pixels=bottom)

    batch_sprites([(primary, secondary)], ImageFormat.PNG)

    with Image.open(primary) as written:
        pixels = np.asarray(written.convert("RGB"))
    assert pixels.shape == (80, 100, 3)
    np.testing.assert_array_equal(pixels[:50], top)
    np.testing.assert_array_equal(pixels[50:, :80], bottom)
    assert not pixels[50:, 80:].any()


def test_jpeg_round_trip_keeps_dimensions(tmp_path, make_image):
    pair = _pair(tmp_path, make_image, "photo", ext="jpg")

    batch_sprites([pair], "jpeg")

    with Image.open(pair.primary) as written:
        assert written.format == "JPEG"
        assert written.size == (6, 7)


def test_gif_output(tmp_path, make_image):
    pair = _pair(tmp_path, make_image, "anim", ext="gif")

    batch_sprites([pair], ImageFormat.GIF)

    with Image.open(pair.primary) as written:
        assert written.format == "GIF"
        assert written.convert("RGB").getpixel((0, 6)) == (0, 0, 255)


def test_batch_processes_discovered_pairs(sprite_dir):
    batch = batch_sprites(discover_pairs(sprite_dir))

    assert isinstance(batch, BatchResult)
    assert batch.ok
    assert sorted(r.pair.primary.name for r in batch.succeeded) == ["button.gif", "logo.png"]
    assert sorted(p.name for p in sprite_dir.iterdir()) == [
        "button.gif",
        "logo.png",
        "notes.txt",
        "orphan.png",
    ]
    with Image.open(sprite_dir / "logo.png") as logo:
        assert logo.size == (40, 30)


def test_second_run_fails_on_deleted_secondary(sprite_dir):
    """Sprite generation is not idempotent: the _over files are gone."""
    pairs = discover_pairs(sprite_dir)
    batch_sprites(pairs)

    with pytest.raises(UnreadableFileError) as excinfo:
        batch_sprites(pairs)

    assert excinfo.value.path == pairs[0].secondary


def test_batch_fails_fast_and_keeps_earlier_results(tmp_path, make_image):
    first = _pair(tmp_path, make_image, "one")
    broken = ImagePair(make_image(tmp_path / "two.png"), tmp_path / "two_over.png")
    third = _pair(tmp_path, make_image, "three")
    seen = []

    with pytest.raises(UnreadableFileError):
        batch_sprites([first, broken, third], on_result=seen.append)

    assert not first.secondary.exists()
    assert third.secondary.exists()
    with Image.open(third.primary) as untouched:
        assert untouched.size == (6, 4)
    assert [r.ok for r in seen] == [True, False]


def test_batch_keep_going_collects_failures(tmp_path, make_image):
    first = _pair(tmp_path, make_image, "one")
    bad = tmp_path / "two.bmp"
    Image.new("RGB", (2, 2)).save(bad)
    broken = ImagePair(bad, make_image(tmp_path / "two_over.png"))
    third = _pair(tmp_path, make_image, "three")

    batch = batch_sprites([first, broken, third], keep_going=True)

    assert not batch.ok
    assert [r.pair for r in batch.succeeded] == [first, third]
    assert len(batch.failed) == 1
    assert isinstance(batch.failed[0].error, UnrecognizedFormatError)
    assert broken.secondary.exists()
    assert not third.secondary.exists()


def test_batch_accepts_plain_tuples(tmp_path, make_image):
    pair = _pair(tmp_path, make_image, "tuple")

    batch = batch_sprites([(str(pair.primary), str(pair.secondary))])

    assert batch.results[0].pair == pair


def test_sprite_options_normalise_format():
    assert SpriteOptions(output_format="jpg").output_format is ImageFormat.JPEG
    with pytest.raises(ValueError):
        SpriteOptions(output_format="tiff")


def test_keep_going_survives_oversized_image(tmp_path, make_image, monkeypatch):
    """An image over Pillow's pixel limit fails its own pair only."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    big = ImagePair(
        make_image(tmp_path / "big.png", size=(60, 40)),
        make_image(tmp_path / "big_over.png", size=(2, 2)),
    )
    small = ImagePair(
        make_image(tmp_path / "small.png", size=(4, 4)),
        make_image(tmp_path / "small_over.png", size=(4, 4)),
    )

    batch = batch_sprites([big, small], keep_going=True)

    assert [r.pair for r in batch.succeeded] == [small]
    assert len(batch.failed) == 1
    assert isinstance(batch.failed[0].error, UnreadableFileError)
    assert big.secondary.exists()
