"""
刻印テクスチャ - 星座記号・テキストを透明背景の正方形画像に描画する
"""

import logging
from dataclasses import dataclass
from functools import lru_cache

from PIL import Image, ImageColor, ImageDraw, ImageFont

from catalog import glyph_for
from errors import MalformedSlotConfigurationError
from slots import MAX_TEXT_LENGTH

logger = logging.getLogger(__name__)

TEXTURE_SIZE = 1024
GLYPH_SCALE = 0.58
TEXT_SCALE = 0.45
# テキストがこの幅 (キャンバス比) に収まるまでフォントを縮める
TEXT_MAX_EXTENT = 0.9
MIN_FONT_SIZE = 8
DEFAULT_MARK_COLOR = "#3b3b3b"

GLYPH_FONTS = (
    "DejaVuSans.ttf",
    "NotoSansSymbols-Regular.ttf",
    "Symbola.ttf",
    "seguisym.ttf",
    "Apple Symbols.ttf",
)
TEXT_FONTS = (
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
    "Arial.ttf",
    "Helvetica.ttc",
)


@dataclass(frozen=True)
class MarkTexture:
    """1 スロット分のテクスチャ"""

    content: str
    color: tuple
    image: Image.Image

    @property
    def size(self) -> int:
        return self.image.width


def rasterize_glyph(sign_key: str, color: str = DEFAULT_MARK_COLOR, size: int = TEXTURE_SIZE) -> MarkTexture:
    """星座記号を描画する。不明なキーは '?' で描く"""
    glyph = glyph_for(sign_key)
    font = _load_font(GLYPH_FONTS, max(MIN_FONT_SIZE, int(size * GLYPH_SCALE)))
    fill = _parse_color(color)
    return MarkTexture(content=glyph, color=fill, image=_render(glyph, font, fill, size))


def rasterize_text(text: str, color: str = DEFAULT_MARK_COLOR, size: int = TEXTURE_SIZE) -> MarkTexture:
    """
    テキストを描画する

    文字数超過は切り詰めずに例外にする (上流の検証で弾かれている前提)。
    キャンバスに収まらない場合はフォントを縮小する。
    """
    if len(text) > MAX_TEXT_LENGTH:
        raise MalformedSlotConfigurationError(
            f"text must be at most {MAX_TEXT_LENGTH} characters, got {len(text)}: {text!r}"
        )

    fill = _parse_color(color)
    font_size = max(MIN_FONT_SIZE, int(size * TEXT_SCALE))
    font = _load_font(TEXT_FONTS, font_size)

    limit = size * TEXT_MAX_EXTENT
    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    while text and font_size > MIN_FONT_SIZE:
        left, top, right, bottom = measure.textbbox((0, 0), text, font=font, anchor="mm")
        if right - left <= limit and bottom - top <= limit:
            break
        font_size = max(MIN_FONT_SIZE, int(font_size * 0.9))
        font = _load_font(TEXT_FONTS, font_size)

    return MarkTexture(content=text, color=fill, image=_render(text, font, fill, size))


def _render(content: str, font, fill: tuple, size: int) -> Image.Image:
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    if content:
        draw = ImageDraw.Draw(image)
        draw.text((size / 2, size / 2), content, font=font, fill=fill, anchor="mm")
    return image


def _parse_color(color: str) -> tuple:
    try:
        rgb = ImageColor.getrgb(color)
    except (ValueError, AttributeError):
        logger.warning("unreadable mark color %r, using %s", color, DEFAULT_MARK_COLOR)
        rgb = ImageColor.getrgb(DEFAULT_MARK_COLOR)
    return tuple(rgb[:3]) + (255,)


@lru_cache(maxsize=64)
def _load_font(candidates: tuple, size: int):
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.warning("no font from %s found, using Pillow default font", candidates)
    return ImageFont.load_default(size=size)
