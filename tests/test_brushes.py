from __future__ import annotations

import io
import unittest

import numpy as np
from PIL import Image

from brushstack.brushes import ImageBrush, LinearGradient, Printer, RadialGradient, Rectangle
from brushstack.brushes.gradient import _GradientBrush
from brushstack.errors import ConfigurationError, LayerStateError, PrerequisiteError
from brushstack.geometry import Rect
from brushstack.raster.surface import Surface
from brushstack.raster.text import text_mask


def _png_bytes(width: int, height: int, color: tuple[int, int, int, int]) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class RectangleTests(unittest.IsolatedAsyncioTestCase):
    async def test_render_fills_and_reports_bounds(self) -> None:
        surface = Surface(20, 20)
        brush = Rectangle({"surface": surface, "x": 2, "y": 4, "width": 6, "height": 3, "fill": "#00ff00"})
        await brush.render()
        self.assertEqual(brush.bounds, Rect(top=4, right=8, bottom=7, left=2))
        pixels = surface.to_numpy()
        self.assertEqual(tuple(pixels[5, 3]), (0, 255, 0, 255))
        self.assertEqual(int(pixels[8, 3, 3]), 0)

    async def test_stroke_stays_inside_box(self) -> None:
        surface = Surface(20, 20)
        brush = Rectangle(
            {"surface": surface, "x": 0, "y": 0, "width": 10, "height": 10, "fill": None, "stroke": "#ff0000", "stroke_width": 2}
        )
        await brush.render()
        pixels = surface.to_numpy()
        self.assertEqual(tuple(pixels[0, 0]), (255, 0, 0, 255))
        self.assertEqual(tuple(pixels[9, 9]), (255, 0, 0, 255))
        self.assertEqual(int(pixels[5, 5, 3]), 0)
        self.assertEqual(int(pixels[10, 10, 3]), 0)
        self.assertEqual(brush.bounds, Rect.from_xywh(0, 0, 10, 10))

    def test_bounds_before_render_is_state_error(self) -> None:
        brush = Rectangle({"surface": Surface(4, 4), "x": 0, "y": 0, "width": 1, "height": 1})
        self.assertFalse(brush.rendered)
        with self.assertRaises(LayerStateError):
            _ = brush.bounds

    def test_option_validation(self) -> None:
        surface = Surface(4, 4)
        cases = [
            {"x": 0, "y": 0, "width": 1, "height": 1},
            {"surface": surface, "x": 0, "y": 0, "width": 1},
            {"surface": surface, "x": 0, "y": 0, "width": 1, "height": 1, "radius": 3},
            {"surface": surface, "x": "0", "y": 0, "width": 1, "height": 1},
            {"surface": surface, "x": 0, "y": 0, "width": -1, "height": 1},
            {"surface": surface, "x": 0, "y": 0, "width": 1, "height": 1, "opacity": 2},
        ]
        for options in cases:
            with self.subTest(options=options):
                with self.assertRaises(ConfigurationError):
                    Rectangle(options)


class GradientTests(unittest.IsolatedAsyncioTestCase):
    async def test_linear_gradient_runs_left_to_right_by_default(self) -> None:
        surface = Surface(10, 2)
        brush = LinearGradient(
            {"surface": surface, "x": 0, "y": 0, "width": 10, "height": 2, "stops": [(0.0, "#000000"), (1.0, "#ffffff")]}
        )
        await brush.render()
        row = surface.to_numpy()[0, :, 0].astype(int)
        self.assertTrue(all(a < b for a, b in zip(row[:-1], row[1:])))
        self.assertLess(row[0], 30)
        self.assertGreater(row[-1], 225)
        self.assertEqual(brush.bounds, Rect.from_xywh(0, 0, 10, 2))

    async def test_linear_gradient_vertical_direction(self) -> None:
        surface = Surface(2, 10)
        brush = LinearGradient(
            {
                "surface": surface,
                "x": 0,
                "y": 0,
                "width": 2,
                "height": 10,
                "stops": [(0.0, "#ff0000"), (1.0, "#0000ff")],
                "start": (0, 0),
                "end": (0, 10),
            }
        )
        await brush.render()
        pixels = surface.to_numpy()
        self.assertGreater(int(pixels[0, 0, 0]), int(pixels[9, 0, 0]))
        self.assertLess(int(pixels[0, 0, 2]), int(pixels[9, 0, 2]))

    async def test_stops_are_sorted_and_clamped(self) -> None:
        surface = Surface(10, 1)
        brush = LinearGradient(
            {"surface": surface, "x": 0, "y": 0, "width": 10, "height": 1, "stops": [(0.8, "#ffffff"), (0.2, "#000000")]}
        )
        await brush.render()
        row = surface.to_numpy()[0, :, 0]
        self.assertEqual(int(row[0]), 0)
        self.assertEqual(int(row[9]), 255)

    async def test_single_stop_is_solid(self) -> None:
        surface = Surface(3, 3)
        brush = LinearGradient({"surface": surface, "x": 0, "y": 0, "width": 3, "height": 3, "stops": [(0.5, "#123456")]})
        await brush.render()
        self.assertTrue(np.all(surface.to_numpy()[:, :, :3] == (0x12, 0x34, 0x56)))

    async def test_radial_gradient_grows_from_center(self) -> None:
        surface = Surface(21, 21)
        brush = RadialGradient(
            {"surface": surface, "x": 0, "y": 0, "width": 21, "height": 21, "stops": [(0.0, "#ffffff"), (1.0, "#000000")]}
        )
        await brush.render()
        pixels = surface.to_numpy()
        self.assertGreater(int(pixels[10, 10, 0]), 240)
        self.assertGreater(int(pixels[10, 10, 0]), int(pixels[10, 15, 0]))
        self.assertGreater(int(pixels[10, 15, 0]), int(pixels[0, 0, 0]))

    async def test_gradient_outside_surface_still_reports_bounds(self) -> None:
        surface = Surface(4, 4)
        brush = LinearGradient({"surface": surface, "x": 50, "y": 50, "width": 5, "height": 5, "stops": [(0.0, "#ffffff")]})
        await brush.render()
        self.assertEqual(brush.bounds, Rect.from_xywh(50, 50, 5, 5))
        self.assertEqual(surface.revision, 0)

    def test_invalid_stops(self) -> None:
        surface = Surface(4, 4)
        for stops in ([], "abc", [(1.5, "#000000")], [("a", "#000000")], [(0.0,)], [(0.0, "nope")]):
            with self.subTest(stops=stops):
                with self.assertRaises(ConfigurationError):
                    LinearGradient({"surface": surface, "x": 0, "y": 0, "width": 1, "height": 1, "stops": stops})

    def test_radial_requires_radius_above_inner_radius(self) -> None:
        with self.assertRaises(ConfigurationError):
            RadialGradient(
                {
                    "surface": Surface(4, 4),
                    "x": 0,
                    "y": 0,
                    "width": 4,
                    "height": 4,
                    "stops": [(0.0, "#000000")],
                    "radius": 2,
                    "inner_radius": 2,
                }
            )

    def test_gradient_without_parameter_cannot_be_built(self) -> None:
        class Shapeless(_GradientBrush):
            optional_options = ("opacity",)

        with self.assertRaises(TypeError):
            Shapeless({"surface": Surface(4, 4), "x": 0, "y": 0, "width": 4, "height": 4, "stops": [(0.0, "#000000")]})


class ImageBrushTests(unittest.IsolatedAsyncioTestCase):
    async def test_render_before_load_is_prerequisite_error(self) -> None:
        brush = ImageBrush({"surface": Surface(4, 4), "source": _png_bytes(2, 2, (255, 0, 0, 255))})
        with self.assertRaises(PrerequisiteError):
            await brush.render()
        self.assertFalse(brush.rendered)

    async def test_natural_size_placement(self) -> None:
        surface = Surface(40, 40)
        brush = ImageBrush({"surface": surface, "source": _png_bytes(5, 3, (255, 0, 0, 255)), "x": 10, "y": 20})
        await brush.load_image()
        await brush.render()
        self.assertEqual(brush.bounds, Rect(top=20, right=15, bottom=23, left=10))
        self.assertEqual(tuple(surface.to_numpy()[21, 12]), (255, 0, 0, 255))

    async def test_width_only_draws_square(self) -> None:
        surface = Surface(40, 40)
        brush = ImageBrush({"surface": surface, "source": _png_bytes(5, 3, (0, 0, 255, 255)), "width": 8})
        await brush.load_image()
        await brush.render()
        self.assertEqual(brush.bounds, Rect.from_xywh(0, 0, 8, 8))
        self.assertEqual(tuple(surface.to_numpy()[7, 7]), (0, 0, 255, 255))

    async def test_load_failure_is_prerequisite_error(self) -> None:
        brush = ImageBrush({"surface": Surface(4, 4), "source": b"not an image"})
        with self.assertRaises(PrerequisiteError):
            await brush.load_image()

    async def test_opacity_rounds_alpha(self) -> None:
        surface = Surface(4, 4)
        brush = ImageBrush({"surface": surface, "source": _png_bytes(4, 4, (0, 255, 0, 255)), "opacity": 0.5})
        await brush.load_image()
        await brush.render()
        self.assertEqual(tuple(surface.to_numpy()[1, 1]), (0, 255, 0, 128))

    def test_negative_size_is_rejected(self) -> None:
        source = _png_bytes(2, 2, (255, 0, 0, 255))
        for key in ("width", "height"):
            with self.subTest(key=key):
                with self.assertRaises(ConfigurationError):
                    ImageBrush({"surface": Surface(4, 4), "source": source, key: -5})

    def test_source_must_be_path_or_bytes(self) -> None:
        with self.assertRaises(ConfigurationError):
            ImageBrush({"surface": Surface(4, 4), "source": 42})


class PrinterTests(unittest.IsolatedAsyncioTestCase):
    async def test_printer_draws_text_block(self) -> None:
        surface = Surface(200, 80)
        brush = Printer({"surface": surface, "text": "Hello\nworld", "x": 5, "y": 6, "font_size": 18, "color": "#ffffff"})
        await brush.render()
        height, width = text_mask("Hello\nworld", font_size_px=18).shape
        self.assertEqual(brush.bounds, Rect.from_xywh(5, 6, width, height))
        alpha = surface.to_numpy()[:, :, 3]
        self.assertTrue(np.any(alpha > 0))
        self.assertEqual(int(alpha[0, 0]), 0)

    async def test_empty_text_has_no_bounds(self) -> None:
        surface = Surface(10, 10)
        brush = Printer({"surface": surface, "text": "", "x": 0, "y": 0})
        await brush.render()
        self.assertIsNone(brush.bounds)
        self.assertEqual(surface.revision, 0)

    def test_text_must_be_string(self) -> None:
        with self.assertRaises(ConfigurationError):
            Printer({"surface": Surface(4, 4), "text": 12, "x": 0, "y": 0})


if __name__ == "__main__":
    unittest.main()
