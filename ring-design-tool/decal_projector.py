"""
デカール投影 - 刻印テクスチャをバンドの曲面に沿わせる

投影ボックス (幅 × 高さ × 奥行き) をスロット位置に置き、
ボックス内にあるバンドの面を 6 平面で切り出して UV を付ける。
平面のシールではなく、曲面に貼り付いた断片になる。
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
import trimesh
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from band_mesh import BandMesh
from catalog import is_zodiac_key
from mark_texture import TEXTURE_SIZE, MarkTexture, rasterize_glyph, rasterize_text
from slot_layout import SLOT_COUNT, slot_direction, surface_normal
from slots import MAX_TEXT_LENGTH, BandParameters, GemSlot, TextSlot, ZodiacSlot

logger = logging.getLogger(__name__)

SURFACE_OFFSET = 0.05
SURFACE_LIFT = 0.01
MIN_DEPTH = 0.6
DEPTH_RATIO = 0.5
DECAL_ROUGHNESS = 0.45


@dataclass(frozen=True)
class DecalPatch:
    """1 スロット分のデカール (ワールド座標, mm)"""

    slot: int
    vertices: np.ndarray
    faces: np.ndarray
    uv: np.ndarray
    texture: MarkTexture
    anchor: np.ndarray
    normal: np.ndarray
    transform: np.ndarray

    @property
    def is_empty(self) -> bool:
        return len(self.faces) == 0

    def to_trimesh(self) -> trimesh.Trimesh:
        mesh = trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)
        material = PBRMaterial(
            baseColorTexture=self.texture.image,
            metallicFactor=0.0,
            roughnessFactor=DECAL_ROUGHNESS,
            alphaMode="BLEND",
        )
        mesh.visual = TextureVisuals(uv=self.uv, material=material)
        return mesh


def decal_depth(size: float) -> float:
    """ベベルより深くしてクリップ抜けを防ぐ"""
    return max(MIN_DEPTH, size * DEPTH_RATIO)


def decal_anchor(index: int, band: BandMesh, inside: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """スロットの投影中心と面法線"""
    if inside:
        radius = band.inner_radius + SURFACE_OFFSET
    else:
        radius = band.outer_radius - SURFACE_OFFSET
    return slot_direction(index) * radius, surface_normal(index, inside)


def projector_transform(anchor, normal) -> np.ndarray:
    """
    投影座標系 -> ワールドの 4x4 行列

    投影座標系の +Z が法線、+Y はできるだけリング軸 (+Y) に合わせる。
    """
    forward = np.asarray(normal, dtype=np.float64)
    forward = forward / np.linalg.norm(forward)
    reference = np.array([0.0, 1.0, 0.0])
    if abs(np.dot(reference, forward)) > 0.999:
        reference = np.array([1.0, 0.0, 0.0])
    right = np.cross(reference, forward)
    right /= np.linalg.norm(right)
    up = np.cross(forward, right)

    matrix = np.eye(4)
    matrix[:3, 0] = right
    matrix[:3, 1] = up
    matrix[:3, 2] = forward
    matrix[:3, 3] = anchor
    return matrix


def project_decal(
    band: BandMesh,
    anchor,
    normal,
    width: float,
    height: float,
    depth: float,
    texture: MarkTexture,
    slot: int = -1,
) -> DecalPatch:
    """
    バンドメッシュからデカール断片を切り出す

    Args:
        band: 投影先のバンド
        anchor: 投影中心 (ワールド)
        normal: 投影方向の面法線
        width, height, depth: 投影ボックスの寸法
        texture: 貼り付けるテクスチャ
        slot: スロット番号 (記録用)

    Returns:
        DecalPatch (ボックス内に面がなければ空)
    """
    anchor = np.asarray(anchor, dtype=np.float64)
    matrix = projector_transform(anchor, normal)
    half = np.array([width, height, depth]) / 2

    local = trimesh.transform_points(band.mesh.vertices, np.linalg.inv(matrix))
    faces = band.mesh.faces
    triangles = local[faces]

    # 投影方向を向き、かつボックスと重なる面だけ残す
    source = trimesh.Trimesh(vertices=local, faces=faces, process=False)
    facing = source.face_normals[:, 2] > 1e-6
    near = np.all(triangles.max(axis=1) >= -half, axis=1) & np.all(triangles.min(axis=1) <= half, axis=1)
    keep = facing & near

    empty = DecalPatch(
        slot=slot,
        vertices=np.zeros((0, 3)),
        faces=np.zeros((0, 3), dtype=np.int64),
        uv=np.zeros((0, 2)),
        texture=texture,
        anchor=anchor,
        normal=matrix[:3, 2].copy(),
        transform=matrix,
    )
    if not keep.any():
        logger.debug("decal for slot %d misses the band", slot)
        return empty

    clipped = trimesh.Trimesh(vertices=local, faces=faces[keep], process=False)
    clipped.remove_unreferenced_vertices()

    for axis in range(3):
        for sign in (1.0, -1.0):
            plane_normal = np.zeros(3)
            plane_normal[axis] = sign
            plane_origin = np.zeros(3)
            plane_origin[axis] = -sign * half[axis]
            clipped = trimesh.intersections.slice_mesh_plane(
                clipped, plane_normal=plane_normal, plane_origin=plane_origin
            )
            if clipped is None or len(clipped.faces) == 0:
                return empty

    local_vertices = np.array(clipped.vertices, dtype=np.float64)
    uv = np.column_stack([
        local_vertices[:, 0] / width + 0.5,
        local_vertices[:, 1] / height + 0.5,
    ]).clip(0.0, 1.0)
    local_vertices[:, 2] += SURFACE_LIFT

    return DecalPatch(
        slot=slot,
        vertices=trimesh.transform_points(local_vertices, matrix),
        faces=np.array(clipped.faces, dtype=np.int64),
        uv=uv,
        texture=texture,
        anchor=anchor,
        normal=matrix[:3, 2].copy(),
        transform=matrix,
    )


def project_marks(
    band: BandMesh,
    params: BandParameters,
    slots,
    texture_size: int = TEXTURE_SIZE,
) -> Tuple[List[DecalPatch], List[str]]:
    """
    星座・テキストのスロットごとにデカールを作る (宝石スロットは対象外)

    Returns:
        (デカール一覧, フォールバック・スキップの記録)
    """
    patches = []
    notes = []
    size = params.mark_size
    depth = decal_depth(size)

    # 13 個目以降はスロット 0 と同じ角度になるので扱わない
    for i, slot in enumerate(tuple(slots)[:SLOT_COUNT]):
        if isinstance(slot, GemSlot):
            continue
        elif isinstance(slot, ZodiacSlot):
            if not is_zodiac_key(slot.sign):
                notes.append(f"slot {i}: unknown zodiac sign {slot.sign!r} -> placeholder")
            texture = rasterize_glyph(slot.sign, params.mark_color, texture_size)
        elif isinstance(slot, TextSlot):
            if len(slot.text) > MAX_TEXT_LENGTH:
                notes.append(f"slot {i}: text longer than {MAX_TEXT_LENGTH} characters skipped")
                continue
            texture = rasterize_text(slot.text, params.mark_color, texture_size)
        else:
            raise TypeError(f"unsupported slot type: {slot!r}")

        anchor, normal = decal_anchor(i, band, params.inside)
        patches.append(project_decal(band, anchor, normal, size, size, depth, texture, slot=i))

    return patches, notes
