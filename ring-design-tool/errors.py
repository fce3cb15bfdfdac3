"""
リングデザインツールの例外定義
"""


class RingDesignError(Exception):
    """リング生成処理の基底例外"""


class InvalidGeometryError(RingDesignError, ValueError):
    """半径・幅・高さが非正で、メッシュを生成できない"""

    def __init__(self, message: str, **params):
        super().__init__(message)
        self.params = params


class MalformedSlotConfigurationError(RingDesignError, ValueError):
    """スロット構成が不正 (種別不明・文字数超過など)"""
