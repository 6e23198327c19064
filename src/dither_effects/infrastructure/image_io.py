"""画像I/O（Pillow ベース）。

画像ファイルの読み込みと保存のみを担当する。
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image


def load_image(path: str | Path) -> npt.NDArray[np.uint8]:
    """画像ファイルを読み込み、RGB配列として返す。

    Args:
        path: 画像ファイルパス (JPEG, PNG等)

    Returns:
        (H, W, 3) の uint8 配列 (RGB)
    """
    with Image.open(path) as img:
        img = img.convert("RGB")
        return np.array(img, dtype=np.uint8)


def save_image(array: npt.NDArray[np.uint8], path: str | Path) -> None:
    """RGB配列を画像ファイルとして保存。

    Args:
        array: (H, W, 3) の uint8 配列 (RGB)
        path: 保存先パス (PNG, BMP等)
    """
    img = Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))
    img.save(path)
