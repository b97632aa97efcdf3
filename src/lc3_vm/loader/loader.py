# lc3_vm/loader/loader.py
"""
プログラムイメージローダーモジュール。

LC-3のオブジェクトファイル（ビッグエンディアンの16bitワード列。先頭ワードがロード先の
オリジン、以降のワードがオリジンから連続して配置される）をバスにロードします。
"""
import logging
from typing import Iterable, List

from lc3_vm.transport.bus import Bus, MEMORY_SIZE

logger = logging.getLogger(__name__)

# @intent:responsibility イメージファイルの読み込み失敗（存在しない、読めない、短すぎる）を通知します。
class ImageLoadError(Exception):
    def __init__(self, path: str, reason: str):
        super().__init__(f"failed to load image: {path} ({reason})")
        self.path = path
        self.reason = reason

class ImageLoader:
    """
    ビッグエンディアンのLC-3イメージを解析し、データをバスにロードするローダー。
    複数のイメージを順にロードでき、後からロードした内容が先の内容を上書きします。
    """
    # @intent:responsibility ファイルからイメージを読み込み、バスに書き込みます。
    # @intent:post-condition ロード先のオリジンアドレスを返します。
    def load_image(self, file_path: str, bus: Bus) -> int:
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ImageLoadError(file_path, e.strerror or str(e)) from e

        try:
            origin, words = self.parse_image(data)
        except ValueError as e:
            raise ImageLoadError(file_path, str(e)) from e

        self.write_words(bus, origin, words)
        logger.info("Loaded %s: %d words at x%04X", file_path, len(words), origin)
        return origin

    # @intent:responsibility 複数のイメージを順にロードします。
    def load_images(self, file_paths: Iterable[str], bus: Bus) -> List[int]:
        return [self.load_image(path, bus) for path in file_paths]

    # @intent:responsibility バイト列をオリジンとワード列に分解します。
    # @intent:rationale 末尾の半端な1バイトは無視し、アドレス空間（0xFFFF）を超える部分は切り捨てます。
    def parse_image(self, data: bytes):
        if len(data) < 2:
            raise ValueError("image is shorter than its origin word")

        origin = (data[0] << 8) | data[1]
        payload = data[2:]
        count = min(len(payload) // 2, MEMORY_SIZE - origin)
        if len(payload) // 2 > count:
            logger.warning("Image overruns the address space at x%04X; %d words dropped",
                           origin, len(payload) // 2 - count)
        words = [(payload[i * 2] << 8) | payload[i * 2 + 1] for i in range(count)]
        return origin, words

    def write_words(self, bus: Bus, origin: int, words: List[int]) -> None:
        for i, word in enumerate(words):
            bus.write(origin + i, word)
        # ロード時のアクセスは命令実行のバスアクティビティに含めない
        bus.get_and_clear_activity_log()
