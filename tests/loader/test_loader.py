# tests/loader/test_loader.py
"""
lc3_vm.loader.loaderモジュールの単体テスト。
ビッグエンディアンのLC-3イメージのロード機能を検証します。
"""
import logging
import pytest

from lc3_vm.transport.bus import Bus, RAM
from lc3_vm.loader.loader import ImageLoader, ImageLoadError

# @intent:test_suite イメージローダー機能の検証。

def image_bytes(origin, words):
    data = bytearray([origin >> 8, origin & 0xFF])
    for w in words:
        data += bytes([w >> 8, w & 0xFF])
    return bytes(data)

class TestImageLoader:
    """
    ImageLoaderの単体テスト。
    """
    @pytest.fixture
    def setup_loader(self, tmp_path):
        bus = Bus()
        ram = RAM(0x10000)
        bus.register_device(0x0000, 0xFFFF, ram)
        return ImageLoader(), bus, ram, tmp_path

    # @intent:test_case_big_endian 先頭ワードをオリジンとし、以降をビッグエンディアンで連続配置します。
    def test_load_big_endian_words_at_origin(self, setup_loader):
        loader, bus, ram, tmp_path = setup_loader
        path = tmp_path / "prog.obj"
        path.write_bytes(bytes([0x30, 0x00, 0x12, 0x34, 0xAB, 0xCD]))

        origin = loader.load_image(str(path), bus)

        assert origin == 0x3000
        assert ram.read(0x3000) == 0x1234
        assert ram.read(0x3001) == 0xABCD
        assert ram.read(0x3002) == 0x0000
        # ロード時のアクセスはアクティビティログに残らない
        assert bus.get_and_clear_activity_log() == []

    def test_origin_only_image_loads_nothing(self, setup_loader):
        loader, bus, ram, tmp_path = setup_loader
        path = tmp_path / "empty.obj"
        path.write_bytes(bytes([0x40, 0x00]))
        assert loader.load_image(str(path), bus) == 0x4000
        assert ram.read(0x4000) == 0

    # @intent:test_case_overwrite 後からロードしたイメージが重なる部分を上書きします。
    def test_multiple_images_later_wins(self, setup_loader):
        loader, bus, ram, tmp_path = setup_loader
        first = tmp_path / "a.obj"
        second = tmp_path / "b.obj"
        first.write_bytes(image_bytes(0x3000, [0x1111, 0x2222, 0x3333]))
        second.write_bytes(image_bytes(0x3001, [0x9999]))

        origins = loader.load_images([str(first), str(second)], bus)

        assert origins == [0x3000, 0x3001]
        assert [ram.read(a) for a in range(0x3000, 0x3003)] == [0x1111, 0x9999, 0x3333]

    def test_missing_file_raises_image_load_error(self, setup_loader):
        loader, bus, _, tmp_path = setup_loader
        missing = tmp_path / "nope.obj"
        with pytest.raises(ImageLoadError) as excinfo:
            loader.load_image(str(missing), bus)
        assert excinfo.value.path == str(missing)
        assert str(excinfo.value).startswith(f"failed to load image: {missing}")

    def test_too_short_file_raises_image_load_error(self, setup_loader):
        loader, bus, _, tmp_path = setup_loader
        path = tmp_path / "short.obj"
        path.write_bytes(b"\x30")
        with pytest.raises(ImageLoadError, match="shorter than its origin word"):
            loader.load_image(str(path), bus)

    def test_trailing_odd_byte_is_ignored(self, setup_loader):
        loader, bus, ram, tmp_path = setup_loader
        path = tmp_path / "odd.obj"
        path.write_bytes(bytes([0x30, 0x00, 0x12, 0x34, 0x56]))
        loader.load_image(str(path), bus)
        assert ram.read(0x3000) == 0x1234
        assert ram.read(0x3001) == 0x0000

    # @intent:test_case_truncate アドレス空間の末尾を超える部分は切り捨てられます。
    def test_words_past_end_of_memory_are_dropped(self, setup_loader, caplog):
        loader, bus, ram, tmp_path = setup_loader
        path = tmp_path / "tail.obj"
        path.write_bytes(image_bytes(0xFFFE, [0xAAAA, 0xBBBB, 0xCCCC]))

        with caplog.at_level(logging.WARNING, logger="lc3_vm.loader.loader"):
            loader.load_image(str(path), bus)

        assert ram.read(0xFFFE) == 0xAAAA
        assert ram.read(0xFFFF) == 0xBBBB
        # 0番地へは折り返さない
        assert ram.read(0x0000) == 0x0000
        assert "1 words dropped" in caplog.text

    def test_parse_image(self):
        origin, words = ImageLoader().parse_image(image_bytes(0x3000, [0xF025]))
        assert origin == 0x3000
        assert words == [0xF025]
