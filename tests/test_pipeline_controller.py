import unittest
import io
import json
import os
import struct
import sys

import numpy as np
from PIL import Image

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from icongen.controllers.pipeline_controller import PipelineController
from icongen.errors import ConfigurationError, EncodingInvariantError
from icongen.models.icon_model import BadgeConfig, BugVariant, IconRequest, PlatformTarget
from icongen.models.size_tables import sizes_for
from icongen.services.raster_service import RasterService


def red_square(size=1024):
    return Image.new("RGBA", (size, size), (255, 0, 0, 255))


def soft_circle(size=256):
    """Непрозрачный центр и прозрачные углы: проверяет работу с альфой."""
    ys, xs = np.mgrid[0:size, 0:size]
    inside = np.hypot(xs - size / 2, ys - size / 2) < size * 0.4
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    arr[..., 0] = 30
    arr[..., 1] = 160
    arr[..., 2] = 90
    arr[..., 3] = np.where(inside, 255, 0)
    return Image.fromarray(arr)


def request(*targets, **kwargs):
    return IconRequest(platforms=frozenset(targets), **kwargs)


class WrongSizeRaster(RasterService):
    """Возвращает растр не того размера для 48 px."""

    def resize(self, source, size):
        if size == 48:
            return super().resize(source, 47)
        return super().resize(source, size)


class TestPipelineController(unittest.TestCase):

    def setUp(self):
        self.controller = PipelineController(workers=4)

    def test_windows_only_produces_one_ico(self):
        artifacts = self.controller.run(red_square(), request(PlatformTarget.WINDOWS))
        self.assertEqual([a.path for a in artifacts], ["windows/icon.ico"])
        data = artifacts[0].data
        (count,) = struct.unpack_from("<H", data, 4)
        self.assertEqual(count, 6)
        widths = [data[6 + 16 * i] or 256 for i in range(count)]
        self.assertEqual(widths, [16, 24, 32, 48, 64, 256])

    def test_ios_icons_are_opaque_and_keep_color(self):
        artifacts = self.controller.run(
            red_square(), request(PlatformTarget.IOS, ios_background=(0, 0, 255))
        )
        pngs = [a for a in artifacts if a.path.endswith(".png")]
        self.assertEqual(len(pngs), len(sizes_for(PlatformTarget.IOS)))
        for artifact in pngs:
            arr = np.asarray(Image.open(io.BytesIO(artifact.data)).convert("RGBA"))
            with self.subTest(path=artifact.path):
                self.assertTrue((arr[..., 3] == 255).all())
                self.assertTrue((arr[..., 0] >= 250).all())
                self.assertTrue((arr[..., 1:3] <= 5).all())

    def test_ios_transparent_corners_take_background(self):
        artifacts = self.controller.run(
            soft_circle(), request(PlatformTarget.IOS, ios_background=(0, 0, 255))
        )
        icon = next(a for a in artifacts if a.path == "ios/AppIcon-60x60@2x.png")
        arr = np.asarray(Image.open(io.BytesIO(icon.data)).convert("RGBA"))
        self.assertEqual(tuple(arr[0, 0]), (0, 0, 255, 255))
        self.assertEqual(tuple(arr[60, 60]), (30, 160, 90, 255))

    def test_ios_badge_survives_flattening(self):
        clear = Image.new("RGBA", (1024, 1024), (0, 0, 0, 0))
        badge = BadgeConfig(enabled=True, variant=BugVariant.SPIDER)
        artifacts = self.controller.run(
            clear, request(PlatformTarget.IOS, badge=badge, ios_background=(0, 0, 255))
        )
        pngs = [a for a in artifacts if a.path.endswith(".png")]
        self.assertEqual(len(pngs), len(sizes_for(PlatformTarget.IOS)))
        for artifact in pngs:
            arr = np.asarray(Image.open(io.BytesIO(artifact.data)).convert("RGBA"))
            edge = arr.shape[1]
            with self.subTest(path=artifact.path):
                self.assertTrue((arr[..., 3] == 255).all())
                if edge >= 32:
                    self.assertNotEqual(tuple(arr[edge // 2, edge // 2]), (0, 0, 255, 255))
                    self.assertTrue((arr[edge - edge // 4:, :, 0] >= 100).all())

    def test_ios_catalog_matches_emitted_files(self):
        artifacts = self.controller.run(soft_circle(), request(PlatformTarget.IOS))
        catalog = json.loads(next(a for a in artifacts if a.path == "ios/Contents.json").data)
        emitted = {a.path[len("ios/"):]: a for a in artifacts if a.path.endswith(".png")}
        for name, artifact in emitted.items():
            matches = [e for e in catalog["images"] if e["filename"] == name]
            self.assertEqual(len(matches), 1, name)
            points = float(matches[0]["size"].split("x")[0])
            scale = int(matches[0]["scale"].rstrip("x"))
            width = Image.open(io.BytesIO(artifact.data)).width
            self.assertEqual(width, int(round(points * scale)), name)
        self.assertEqual(len(catalog["images"]), len(emitted))

    def test_android_square_and_round(self):
        artifacts = self.controller.run(soft_circle(), request(PlatformTarget.ANDROID))
        paths = [a.path for a in artifacts]
        self.assertEqual(paths[:2], ["android/mipmap-mdpi/ic_launcher.png", "android/mipmap-mdpi/ic_launcher_round.png"])
        self.assertEqual(len(paths), 10)
        rounded = Image.open(io.BytesIO(artifacts[-1].data))
        self.assertEqual(rounded.size, (192, 192))
        self.assertEqual(rounded.getpixel((0, 0))[3], 0)

    def test_macos_outputs(self):
        artifacts = self.controller.run(soft_circle(), request(PlatformTarget.MACOS))
        paths = [a.path for a in artifacts]
        self.assertIn("macos/icon.icns", paths)
        self.assertIn("macos/icon_512x512@2x.png", paths)
        self.assertEqual(paths[-1], "macos/Contents.json")
        self.assertEqual(artifacts[paths.index("macos/icon.icns")].data[:4], b"icns")

    def test_all_platforms_order(self):
        artifacts = self.controller.run(soft_circle(), request(*PlatformTarget))
        prefixes = []
        for artifact in artifacts:
            prefix = artifact.path.split("/")[0]
            if not prefixes or prefixes[-1] != prefix:
                prefixes.append(prefix)
        self.assertEqual(prefixes, [t.value for t in PlatformTarget])
        paths = [a.path for a in artifacts]
        self.assertEqual(len(paths), len(set(paths)))
        self.assertIn("tauri-desktop/icon.ico", paths)
        self.assertIn("tauri-desktop/128x128@2x.png", paths)
        self.assertIn("linux/icon.png", paths)

    def test_custom_png_sizes_replace_linux(self):
        artifacts = self.controller.run(
            soft_circle(), request(PlatformTarget.LINUX, PlatformTarget.WINDOWS, png_sizes=(128, 20))
        )
        self.assertEqual([a.path for a in artifacts], ["128x128.png", "20x20.png", "windows/icon.ico"])

    def test_same_seed_same_bytes(self):
        badge = BadgeConfig(enabled=True, variant=BugVariant.MOTH)
        first = self.controller.run(soft_circle(), request(*PlatformTarget, badge=badge, seed=11))
        second = PipelineController(workers=2).run(soft_circle(), request(*PlatformTarget, badge=badge, seed=11))
        self.assertEqual([(a.path, a.data) for a in first], [(a.path, a.data) for a in second])

    def test_dev_badge_applied_to_custom_png(self):
        source = soft_circle(128)
        badge = BadgeConfig(enabled=True, variant=BugVariant.SPIDER)
        artifacts = self.controller.run(source, request(png_sizes=(128,), badge=badge))
        arr = np.asarray(Image.open(io.BytesIO(artifacts[0].data)).convert("RGBA"))
        y = 128 - 16
        for x in (8, 40, 64, 90, 120):
            self.assertGreaterEqual(arr[y, x, 0], 100)
            self.assertGreater(arr[y, x, 3], 0)

    def test_encoding_error_carries_context(self):
        controller = PipelineController(raster=WrongSizeRaster(), workers=2)
        with self.assertRaises(EncodingInvariantError) as ctx:
            controller.run(soft_circle(), request(PlatformTarget.WINDOWS))
        self.assertEqual(ctx.exception.platform, "windows")
        self.assertEqual(ctx.exception.size, 48)
        self.assertEqual(ctx.exception.stage, "encode")
        self.assertIn("platform=windows", str(ctx.exception))

    def test_bad_badge_asset_fails_whole_run(self):
        badge = BadgeConfig(enabled=True, asset_path="/nonexistent/bug.png")
        with self.assertRaises(ConfigurationError) as ctx:
            self.controller.run(soft_circle(), request(PlatformTarget.LINUX, badge=badge))
        self.assertEqual(ctx.exception.stage, "badge")


if __name__ == '__main__':
    unittest.main()
