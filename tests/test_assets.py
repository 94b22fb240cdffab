"""Tests for image assets and the startup gate."""

import asyncio
import logging

from hackscene.surface.assets import AssetStatus, ImageAsset, StartupGate


def write_image(tmp_path, name: str = "skull.png") -> ImageAsset:
    path = tmp_path / name
    path.write_bytes(b"\x89PNG\r\n")
    return ImageAsset(name.split(".")[0], path)


class TestImageAsset:
    """Tests for ImageAsset loading and notifications."""

    def test_initially_pending(self, tmp_path):
        asset = write_image(tmp_path)

        assert asset.status is AssetStatus.PENDING
        assert not asset.complete
        assert not asset.settled

    def test_load_success(self, tmp_path):
        asset = write_image(tmp_path)

        asset.load()

        assert asset.complete
        assert asset.data == b"\x89PNG\r\n"
        assert asset.media_type == "image/png"

    def test_load_failure_is_not_raised(self, tmp_path, caplog):
        asset = ImageAsset("background", tmp_path / "missing.png")

        with caplog.at_level(logging.WARNING, logger="hackscene.surface.assets"):
            asset.load()

        assert asset.status is AssetStatus.FAILED
        assert asset.settled
        assert not asset.complete
        assert "background" in caplog.text

    def test_listeners_notified_exactly_once(self, tmp_path):
        asset = write_image(tmp_path)
        calls = []
        asset.add_listener(calls.append)

        asset.load()
        asset.load()

        assert calls == [asset]

    def test_late_listener_called_immediately(self, tmp_path):
        asset = ImageAsset("skull", tmp_path / "missing.png")
        asset.load()
        calls = []

        asset.add_listener(calls.append)

        assert calls == [asset]

    def test_load_async(self, tmp_path):
        asset = write_image(tmp_path, "background.png")
        calls = []
        asset.add_listener(calls.append)

        asyncio.run(asset.load_async())

        assert asset.complete
        assert calls == [asset]

    def test_load_async_failure(self, tmp_path):
        asset = ImageAsset("background", tmp_path / "missing.png")

        asyncio.run(asset.load_async())

        assert asset.status is AssetStatus.FAILED

    def test_unknown_media_type(self, tmp_path):
        assert ImageAsset("blob", tmp_path / "blob").media_type == "application/octet-stream"


class TestStartupGate:
    """Tests for StartupGate."""

    def test_no_assets_fires_on_arm(self):
        fired = []
        gate = StartupGate([None, None], lambda: fired.append(True))

        gate.arm()

        assert fired == [True]

    def test_waits_for_every_asset(self, tmp_path):
        a = write_image(tmp_path, "a.png")
        b = write_image(tmp_path, "b.png")
        fired = []
        gate = StartupGate([a, b], lambda: fired.append(True))

        gate.arm()
        a.load()
        assert fired == []
        assert gate.remaining == 1

        b.load()
        assert fired == [True]

    def test_failure_counts_as_ready(self, tmp_path):
        ok = write_image(tmp_path)
        broken = ImageAsset("background", tmp_path / "missing.png")
        fired = []
        gate = StartupGate([ok, broken], lambda: fired.append(True))

        gate.arm()
        broken.load()
        ok.load()

        assert fired == [True]

    def test_fires_once(self, tmp_path):
        asset = write_image(tmp_path)
        asset.load()
        fired = []
        gate = StartupGate([asset], lambda: fired.append(True))

        gate.arm()
        gate.arm()

        assert fired == [True]
        assert gate.fired
