import numpy as np
import pytest
from PIL import Image

from spritemaster.config import Settings
from spritemaster.models.errors import InvalidTargetSizeError, MissingBackgroundColorError
from spritemaster.models.layout import DEFAULT_LAYOUT, ActionEntry, GridLayout
from spritemaster.models.options import FrameOffset, ProcessOptions, RemovalMode
from spritemaster.services.compositor_service import FrameCompositor

from conftest import RED, WHITE

SINGLE = GridLayout(row_count=1, col_count=1, actions={"A": ActionEntry(row=0, frame_count=1)})


def _noise(size=64, seed=5):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 200, size=(size, size, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255
    return pixels


def test_offset_places_content_and_leaves_rest_transparent():
    src = _noise()
    options = ProcessOptions(64, 64, tolerance=0, bg_color=WHITE)
    frame = FrameCompositor(Settings(resample="nearest")).composite_frame(
        Image.fromarray(src), SINGLE, 0, 0, FrameOffset(3, -2), options
    )

    assert (frame.width, frame.height) == (64, 64)
    # top two source rows are clipped, content starts at column 3
    np.testing.assert_array_equal(frame.pixels[0:62, 3:64], src[2:64, 0:61])
    assert not frame.alpha[:, 0:3].any()
    assert not frame.alpha[62:64, :].any()


def test_offset_entirely_outside_frame_gives_empty_frame():
    options = ProcessOptions(16, 16, tolerance=0, bg_color=WHITE)
    frame = FrameCompositor().composite_frame(Image.fromarray(_noise()), SINGLE, 0, 0, FrameOffset(20, 0), options)
    assert not frame.alpha.any()


def test_cell_is_resampled_to_target_size_and_background_removed(sheet_image):
    options = ProcessOptions(128, 96, tolerance=10, bg_color=WHITE)
    frame = FrameCompositor().composite_frame(sheet_image, DEFAULT_LAYOUT, 2, 1, FrameOffset(), options)
    assert (frame.width, frame.height) == (128, 96)
    assert frame.alpha[0, 0] == 0
    assert frame.alpha[48, 64] == 255
    assert tuple(frame.pixels[48, 64, :3]) == RED


def test_removal_mode_is_honoured():
    pixels = np.zeros((8, 8, 4), dtype=np.uint8)
    pixels[:, :, :3] = WHITE
    pixels[2:6, 2:6, :3] = RED
    pixels[3:5, 3:5, :3] = WHITE
    pixels[:, :, 3] = 255
    source = Image.fromarray(pixels)
    compositor = FrameCompositor(Settings(resample="nearest"))

    edge = compositor.composite_frame(source, SINGLE, 0, 0, FrameOffset(), ProcessOptions(8, 8, 0, WHITE))
    color = compositor.composite_frame(
        source, SINGLE, 0, 0, FrameOffset(), ProcessOptions(8, 8, 0, WHITE, removal_mode=RemovalMode.COLOR_KEY)
    )
    assert (edge.alpha[3:5, 3:5] == 255).all()
    assert (color.alpha[3:5, 3:5] == 0).all()


@pytest.mark.parametrize("width, height", [(0, 64), (64, 0), (-1, 10)])
def test_invalid_target_size_is_rejected(sheet_image, width, height):
    with pytest.raises(InvalidTargetSizeError):
        FrameCompositor().composite_frame(
            sheet_image, DEFAULT_LAYOUT, 0, 0, FrameOffset(), ProcessOptions(width, height, bg_color=WHITE)
        )


def test_missing_background_color_is_rejected(sheet_image):
    with pytest.raises(MissingBackgroundColorError):
        FrameCompositor().composite_frame(sheet_image, DEFAULT_LAYOUT, 0, 0, FrameOffset(), ProcessOptions(32, 32))


def test_extract_action_frames_applies_offsets(sheet_image):
    options = ProcessOptions(64, 64, tolerance=10, bg_color=WHITE, offsets={"Walk": [FrameOffset(), FrameOffset(10, 0)]})
    frames = FrameCompositor(Settings(resample="nearest")).extract_action_frames(
        sheet_image, DEFAULT_LAYOUT, "Walk", options
    )
    assert len(frames) == 4
    # square spans columns 16..47; shifted by 10 it starts at 26
    assert frames[0].alpha[32, 16] == 255
    assert frames[1].alpha[32, 16] == 0
    assert frames[1].alpha[32, 26] == 255
