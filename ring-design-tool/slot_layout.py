"""
スロット配置 - スロット番号から角度・方向ベクトルを求める

座標系: リング軸 = +Y、スロット 0 (正面/上) = +Z 方向、単位 mm。
"""

import numpy as np

SLOT_COUNT = 12
REFERENCE_ANGLE = np.pi / 2  # +Z が正面


def angle_for_index(i: int, total: int = SLOT_COUNT) -> float:
    """スロット番号を角度 (ラジアン) に変換する。番号が増えるごとに時計回り"""
    step = 2 * np.pi / total
    return float(REFERENCE_ANGLE - i * step)


def slot_direction(i: int, total: int = SLOT_COUNT) -> np.ndarray:
    """バンドの水平面 (XZ) 上の単位方向ベクトル"""
    a = angle_for_index(i, total)
    return np.array([np.cos(a), 0.0, np.sin(a)])


def surface_normal(i: int, inside: bool = False, total: int = SLOT_COUNT) -> np.ndarray:
    """スロット位置での面法線。内側配置では中心向き"""
    direction = slot_direction(i, total)
    return -direction if inside else direction
