"""
宝石配置 - 宝石スロットの位置・姿勢・マテリアルを求める
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import trimesh
from PIL import ImageColor
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from catalog import is_stone_key, resolve_stone
from slot_layout import SLOT_COUNT, slot_direction, surface_normal
from slots import BandParameters, GemSlot, TextSlot, ZodiacSlot

logger = logging.getLogger(__name__)

CANONICAL_UP = np.array([0.0, 1.0, 0.0])

MIN_GEM_SIZE = 0.8
GEM_SIZE_RATIO = 0.55
GEM_LIFT_RATIO = 0.6
SEAT_OFFSET_RATIO = 0.52
SEAT_TOP_RATIO = 0.58
SEAT_BOTTOM_RATIO = 0.62
SEAT_MAX_HEIGHT = 0.5
SEAT_HEIGHT_RATIO = 0.3
SEAT_SECTIONS = 24
SEAT_COLOR = "#d6c27a"


@dataclass(frozen=True)
class GemMaterial:
    stone: str
    color: str
    rgba: tuple
    ior: float
    thickness: float
    attenuation_color: str
    metalness: float = 0.0
    roughness: float = 0.03
    transmission: float = 1.0
    attenuation_distance: float = 2.5


@dataclass(frozen=True)
class GemPlacement:
    """
    1 スロット分の宝石

    transform: 宝石ローカル -> ワールド (ローカル +Y が法線方向)
    seat_transform: 台座 (宝石の真下、法線の逆方向)
    """

    slot: int
    normal: np.ndarray
    position: np.ndarray
    rotation: np.ndarray
    quaternion: np.ndarray
    gem_size: float
    transform: np.ndarray
    seat_transform: np.ndarray
    seat_top_radius: float
    seat_bottom_radius: float
    seat_height: float
    material: GemMaterial

    def to_meshes(self, seat_color: str = SEAT_COLOR) -> Tuple[trimesh.Trimesh, trimesh.Trimesh]:
        """宝石 (正二十面体) と台座のメッシュ (ワールド座標)"""
        gem = trimesh.creation.icosahedron()
        gem.apply_scale(self.gem_size)
        gem.apply_transform(self.transform)
        gem.visual = TextureVisuals(material=PBRMaterial(
            baseColorFactor=self.material.rgba,
            metallicFactor=self.material.metalness,
            roughnessFactor=self.material.roughness,
            alphaMode="BLEND",
        ))
        # glTF の PBRMaterial に無い透過系の値はメタデータに載せる
        gem.metadata["stone"] = self.material.stone
        gem.metadata["ior"] = self.material.ior
        gem.metadata["transmission"] = self.material.transmission
        gem.metadata["thickness"] = self.material.thickness
        gem.metadata["attenuation_color"] = self.material.attenuation_color
        gem.metadata["attenuation_distance"] = self.material.attenuation_distance

        seat = _create_frustum(self.seat_bottom_radius, self.seat_top_radius, self.seat_height, SEAT_SECTIONS)
        seat.apply_transform(self.seat_transform)
        seat.visual = TextureVisuals(material=PBRMaterial(
            baseColorFactor=color_to_rgba(seat_color),
            metallicFactor=1.0,
            roughnessFactor=0.25,
        ))
        return gem, seat


def gem_size_for(mark_size: float) -> float:
    return max(MIN_GEM_SIZE, mark_size * GEM_SIZE_RATIO)


def place_gem(
    index: int,
    stone_key: str,
    inner_radius: float,
    outer_radius: float,
    inside: bool = False,
    mark_size: float = 2.6,
    band_height: float = 2.2,
) -> GemPlacement:
    """
    スロット番号と宝石の種類から配置を計算する

    外側配置なら外径、内側配置なら内径の面上に置き、
    宝石サイズの 0.6 倍だけ法線方向に浮かせる。
    不明な宝石キーはカタログ先頭 (diamond) として扱う。
    """
    normal = surface_normal(index, inside)
    base_radius = inner_radius if inside else outer_radius
    gem_size = gem_size_for(mark_size)

    position = slot_direction(index) * base_radius + normal * (gem_size * GEM_LIFT_RATIO)
    transform = trimesh.geometry.align_vectors(CANONICAL_UP, normal)
    transform[:3, 3] = position

    seat_offset = np.eye(4)
    seat_offset[1, 3] = -gem_size * SEAT_OFFSET_RATIO
    seat_transform = transform @ seat_offset

    stone = resolve_stone(stone_key)
    material = GemMaterial(
        stone=stone["key"],
        color=stone["hex"],
        rgba=color_to_rgba(stone["hex"]),
        ior=stone["ior"],
        thickness=gem_size * 0.9,
        attenuation_color=stone["hex"],
    )

    return GemPlacement(
        slot=index,
        normal=normal,
        position=position,
        rotation=transform[:3, :3].copy(),
        quaternion=trimesh.transformations.quaternion_from_matrix(transform),
        gem_size=gem_size,
        transform=transform,
        seat_transform=seat_transform,
        seat_top_radius=gem_size * SEAT_TOP_RATIO,
        seat_bottom_radius=gem_size * SEAT_BOTTOM_RATIO,
        seat_height=min(SEAT_MAX_HEIGHT, band_height * SEAT_HEIGHT_RATIO),
        material=material,
    )


def place_gems(params: BandParameters, slots) -> Tuple[List[GemPlacement], List[str]]:
    """宝石スロットだけ配置する。星座・テキストはデカール側で扱う"""
    placements = []
    notes = []
    for i, slot in enumerate(tuple(slots)[:SLOT_COUNT]):
        if isinstance(slot, (ZodiacSlot, TextSlot)):
            continue
        elif isinstance(slot, GemSlot):
            if not is_stone_key(slot.stone):
                notes.append(f"slot {i}: unknown stone {slot.stone!r} -> diamond")
            placements.append(place_gem(
                i,
                slot.stone,
                params.inner_radius,
                params.outer_radius,
                inside=params.inside,
                mark_size=params.mark_size,
                band_height=params.band_height,
            ))
        else:
            raise TypeError(f"unsupported slot type: {slot!r}")
    return placements, notes


def color_to_rgba(color: str, alpha: float = 1.0) -> tuple:
    """CSS 形式の色 ("#fff", "#d4af37", "gold" など) を 0-1 の RGBA にする"""
    r, g, b = ImageColor.getrgb(color)[:3]
    return (r / 255.0, g / 255.0, b / 255.0, alpha)


def _create_frustum(bottom_radius: float, top_radius: float, height: float, sections: int = 24) -> trimesh.Trimesh:
    """台座用の円錐台 (Y 軸方向、原点中心)"""
    theta = np.linspace(0, 2 * np.pi, sections, endpoint=False)
    half = height / 2

    bottom_verts = np.column_stack([
        bottom_radius * np.cos(theta),
        np.full(sections, -half),
        bottom_radius * np.sin(theta),
    ])
    top_verts = np.column_stack([
        top_radius * np.cos(theta),
        np.full(sections, half),
        top_radius * np.sin(theta),
    ])

    bottom_center = np.array([[0.0, -half, 0.0]])
    top_center = np.array([[0.0, half, 0.0]])
    vertices = np.vstack([bottom_center, bottom_verts, top_verts, top_center])

    faces = []
    bc = 0
    tc = 2 * sections + 1
    for i in range(sections):
        ni = (i + 1) % sections
        b0, b1 = i + 1, ni + 1
        t0, t1 = sections + i + 1, sections + ni + 1
        faces.append([bc, b0, b1])    # bottom cap
        faces.append([b0, t0, b1])    # side
        faces.append([b1, t0, t1])    # side
        faces.append([tc, t1, t0])    # top cap

    return trimesh.Trimesh(vertices=vertices, faces=np.array(faces, dtype=np.int64), process=False)
