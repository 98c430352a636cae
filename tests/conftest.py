import cv2
import numpy as np
import pytest

from alienshot.config import PipelineConfig
from alienshot.image_buffer import ImageBuffer


def noise_image(seed=0, height=48, width=64):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def gradient_image(height=48, width=64):
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = np.linspace(40, 200, width, dtype=np.uint8)[None, :]
    image[:, :, 1] = np.linspace(60, 180, height, dtype=np.uint8)[:, None]
    image[:, :, 2] = 128
    return image


@pytest.fixture
def buffer():
    return ImageBuffer(noise_image())


@pytest.fixture
def dirs(tmp_path):
    watch = tmp_path / "watch"
    watch.mkdir()
    return {
        "watch": watch,
        "edited": tmp_path / "edited",
        "archive": tmp_path / "archive",
    }


@pytest.fixture
def config(dirs):
    return PipelineConfig(
        watch_dir=dirs["watch"],
        edited_dir=dirs["edited"],
        archive_dir=dirs["archive"],
        settle_delay=0.0,
        poll_interval=0.01,
    )


@pytest.fixture
def capture(dirs):
    """A noisy JPEG in the watch folder, well above the transfer threshold."""
    path = dirs["watch"] / "DSC0001.JPG"
    assert cv2.imwrite(str(path), noise_image(seed=42))
    assert path.stat().st_size > 1024
    return path
