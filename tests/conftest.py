import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Make the flat-layout package importable without installing it
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())


@pytest.fixture
def make_image():
    """Return a factory that writes a solid or array-backed image to disk."""

    def _make(path: Path, size=(10, 10), color=(255, 0, 0), mode="RGB", pixels=None) -> Path:
        if pixels is not None:
            img = Image.fromarray(np.asarray(pixels, dtype=np.uint8))
        else:
            img = Image.new(mode, size, color)
        path.parent.mkdir(parents=True, exist_ok=True)
        img.save(path)
        img.close()
        return path

    return _make


@pytest.fixture
def sprite_dir(tmp_path: Path, make_image):
    """Folder with two complete pairs, one orphan and an unrelated file."""

    folder = tmp_path / "images"
    make_image(folder / "logo.png", size=(40, 20), color=(255, 0, 0))
    make_image(folder / "logo_over.png", size=(30, 10), color=(0, 0, 255))
    make_image(folder / "button.gif", size=(16, 8), color=(0, 255, 0))
    make_image(folder / "button_over.gif", size=(16, 8), color=(255, 255, 0))
    make_image(folder / "orphan.png", size=(5, 5))
    (folder / "notes.txt").write_text("not an image", encoding="utf-8")
    return folder


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
