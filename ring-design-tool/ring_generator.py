"""
Ring Generator - パラメータと 12 スロットからリング一式を生成する

再構築は毎回ゼロから行い、前回の出力は再利用しない。
出力はすべて同じ座標系 (mm, リング軸 = +Y, スロット 0 = +Z) に置かれる。
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import trimesh
from trimesh.visual.material import PBRMaterial
from trimesh.visual.texture import TextureVisuals

from band_mesh import BandMesh, build_band
from decal_projector import DecalPatch, project_marks
from errors import InvalidGeometryError
from gem_placement import GemPlacement, color_to_rgba, place_gems
from mark_texture import TEXTURE_SIZE
from slots import BandParameters
from validator import Diagnostics, validate

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("glb", "stl")
DEFAULT_METAL_COLOR = "#d4af37"


@dataclass(frozen=True)
class GeometryFailure:
    """バンドを生成できなかったことを表す値 (例外ではなく結果として返す)"""

    code: str
    message: str
    params: dict

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "params": dict(self.params)}


@dataclass(frozen=True)
class RingBuild:
    params: BandParameters
    slots: Tuple
    diagnostics: Diagnostics
    band: Optional[BandMesh] = None
    decals: List[DecalPatch] = field(default_factory=list)
    gems: List[GemPlacement] = field(default_factory=list)
    fallbacks: List[str] = field(default_factory=list)
    error: Optional[GeometryFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def rebuild(params: BandParameters, slots, texture_size: int = TEXTURE_SIZE) -> RingBuild:
    """
    リング一式を再構築する

    Args:
        params: リングパラメータ
        slots: スロット構成 (通常 12 個)
        texture_size: 刻印テクスチャの一辺 (px)

    Returns:
        RingBuild。バンドを作れない場合は error に GeometryFailure が入り、
        メッシュ・デカール・宝石は空になる。
    """
    slots = tuple(slots)
    diagnostics = validate(params, slots)
    if not diagnostics.ok:
        logger.warning("configuration diagnostics failed: %s", "; ".join(diagnostics.issues))

    try:
        band = build_band(params)
    except InvalidGeometryError as e:
        return RingBuild(
            params=params,
            slots=slots,
            diagnostics=diagnostics,
            error=GeometryFailure(code="invalid_geometry", message=str(e), params=e.params),
        )

    decals, decal_notes = project_marks(band, params, slots, texture_size)
    gems, gem_notes = place_gems(params, slots)
    fallbacks = decal_notes + gem_notes
    for note in fallbacks:
        logger.warning(note)

    logger.info(
        "ring rebuilt: %d decals, %d gems, diagnostics ok=%s", len(decals), len(gems), diagnostics.ok
    )
    return RingBuild(
        params=params,
        slots=slots,
        diagnostics=diagnostics,
        band=band,
        decals=decals,
        gems=gems,
        fallbacks=fallbacks,
    )


def build_scene(build: RingBuild) -> trimesh.Scene:
    """バンド・デカール・宝石をひとつのシーンにまとめる"""
    if build.band is None:
        raise InvalidGeometryError(
            build.error.message if build.error else "band mesh is missing",
            **(build.error.params if build.error else {}),
        )

    scene = trimesh.Scene()

    band = build.band.mesh.copy()
    band.visual = TextureVisuals(material=PBRMaterial(
        baseColorFactor=_safe_rgba(build.params.metal_color, DEFAULT_METAL_COLOR),
        metallicFactor=1.0,
        roughnessFactor=0.18,
    ))
    scene.add_geometry(band, node_name="band", geom_name="band")

    for patch in build.decals:
        if patch.is_empty:
            continue
        name = f"decal_{patch.slot:02d}"
        scene.add_geometry(patch.to_trimesh(), node_name=name, geom_name=name)

    for gem in build.gems:
        gem_mesh, seat_mesh = gem.to_meshes()
        scene.add_geometry(gem_mesh, node_name=f"gem_{gem.slot:02d}", geom_name=f"gem_{gem.slot:02d}")
        scene.add_geometry(seat_mesh, node_name=f"seat_{gem.slot:02d}", geom_name=f"seat_{gem.slot:02d}")

    return scene


def export_ring(build: RingBuild, file_type: str = "glb") -> bytes:
    """
    シーンをバイナリにシリアライズする

    glb: テクスチャ・マテリアル付き
    stl: 形状のみ (全メッシュを結合)
    """
    file_type = file_type.lower()
    if file_type not in EXPORT_FORMATS:
        raise ValueError(f"unsupported export format: {file_type!r}")

    scene = build_scene(build)
    if file_type == "glb":
        return scene.export(file_type="glb")

    plain = [
        trimesh.Trimesh(vertices=g.vertices, faces=g.faces, process=False)
        for g in scene.geometry.values()
    ]
    return trimesh.util.concatenate(plain).export(file_type="stl")


def summarize(build: RingBuild) -> dict:
    """API レスポンス用の要約"""
    out = {
        "ok": build.ok,
        "diagnostics": build.diagnostics.to_dict(),
        "fallbacks": list(build.fallbacks),
        "error": build.error.to_dict() if build.error else None,
        "band": None,
        "decals": [],
        "gems": [],
    }
    if build.band is not None:
        out["band"] = {
            "inner_radius": build.band.inner_radius,
            "outer_radius": build.band.outer_radius,
            "height": build.band.height,
            "faces": int(len(build.band.mesh.faces)),
            "volume": round(build.band.volume, 4),
        }
    for patch in build.decals:
        out["decals"].append({
            "slot": patch.slot,
            "content": patch.texture.content,
            "anchor": _rounded(patch.anchor),
            "normal": _rounded(patch.normal),
            "faces": int(len(patch.faces)),
        })
    for gem in build.gems:
        out["gems"].append({
            "slot": gem.slot,
            "stone": gem.material.stone,
            "color": gem.material.color,
            "ior": gem.material.ior,
            "attenuation_color": gem.material.attenuation_color,
            "position": _rounded(gem.position),
            "normal": _rounded(gem.normal),
            "quaternion": _rounded(gem.quaternion),
            "gem_size": gem.gem_size,
        })
    return out


def _rounded(values, digits: int = 4) -> list:
    return [round(float(v), digits) for v in np.asarray(values).ravel()]


def _safe_rgba(color: str, default: str) -> tuple:
    try:
        return color_to_rgba(color)
    except (ValueError, TypeError, AttributeError):
        logger.warning("unreadable metal color %r, using %s", color, default)
        return color_to_rgba(default)
