from pathlib import Path

import pytest
from PIL import Image

from spritemaster.controllers.app_controller import AppController
from spritemaster.models.errors import MissingBackgroundColorError
from spritemaster.models.options import FrameOffset, RemovalMode

from conftest import WHITE, make_sheet


def test_load_image_resets_editor_state(sheet_path):
    controller = AppController()
    controller.offsets = {"Idle": [FrameOffset(9, 9)]}
    image = controller.load_image(sheet_path)

    assert (image.width, image.height) == (320, 256)
    assert image.mode == "RGBA"
    assert image.size_bytes == Path(sheet_path).stat().st_size
    assert controller.original_frame_size == (64.0, 64.0)
    assert controller.target_size == (128, 128)
    assert controller.bg_color == WHITE
    assert len(controller.offsets["Attack"]) == 5
    assert controller.offsets["Idle"][0] == FrameOffset(0, 0)


def test_target_size_keeps_aspect_ratio(tmp_path):
    path = tmp_path / "wide.png"
    make_sheet(cell=64).resize((500, 256)).save(path)
    controller = AppController()
    controller.load_image(path)
    assert controller.target_size == (200, 128)

    controller.set_target_height(64)
    assert controller.target_size == (100, 64)
    controller.set_target_width(50)
    assert controller.target_size == (50, 32)
    controller.set_target_width(0)
    assert controller.target_size == (0, 0)


def test_target_size_ignored_before_load():
    controller = AppController()
    controller.set_target_height(10)
    assert controller.target_size == (64, 64)


def test_set_offset_updates_single_axis(sheet_path):
    controller = AppController()
    controller.load_image(sheet_path)
    controller.set_offset("Walk", 1, "x", 5)
    controller.set_offset("Walk", 1, "y", -3)
    controller.set_offset("Walk", 9, "x", 5)
    controller.set_offset("Jump", 0, "x", 5)
    assert controller.offsets["Walk"][1] == FrameOffset(5, -3)
    assert controller.build_options().offsets["Walk"][1] == FrameOffset(5, -3)
    with pytest.raises(ValueError):
        controller.set_offset("Walk", 0, "z", 1)


def test_inputs_are_normalised():
    controller = AppController()
    controller.set_tolerance(250)
    assert controller.tolerance == 100
    controller.set_tolerance(-4)
    assert controller.tolerance == 0
    controller.set_removal_mode("color")
    assert controller.removal_mode is RemovalMode.COLOR_KEY


def test_process_and_save(sheet_path, tmp_path):
    controller = AppController()
    controller.load_image(sheet_path)
    controller.set_target_height(32)
    result = controller.process()
    assert controller.last_result is result

    out = controller.save(tmp_path / "out" / "fixed.png")
    assert out.read_bytes() == result.data
    assert Image.open(out).size == (160, 128)


def test_process_requires_image_and_background(sheet_path):
    controller = AppController()
    with pytest.raises(RuntimeError):
        controller.process()
    with pytest.raises(RuntimeError):
        controller.save("never.png")

    controller.load_image(sheet_path)
    controller.bg_color = None
    with pytest.raises(MissingBackgroundColorError):
        controller.process()


def test_load_image_errors(tmp_path):
    controller = AppController()
    with pytest.raises(FileNotFoundError):
        controller.load_image(tmp_path / "missing.png")
    bogus = tmp_path / "bogus.png"
    bogus.write_text("not an image")
    with pytest.raises(ValueError):
        controller.load_image(bogus)


def test_target_size_rounds_halves_up(tmp_path):
    wide = tmp_path / "wide.png"
    make_sheet(cell=8).resize((25, 8)).save(wide)
    controller = AppController()
    controller.load_image(wide)
    assert controller.original_frame_size == (5.0, 2.0)
    controller.set_target_height(1)
    assert controller.target_size == (3, 1)

    tall = tmp_path / "tall.png"
    make_sheet(cell=8).resize((10, 20)).save(tall)
    controller.load_image(tall)
    controller.set_target_width(1)
    assert controller.target_size == (1, 3)
