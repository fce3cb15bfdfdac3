"""
バンドメッシュ生成

断面プロファイル (角をベベルで丸めた長方形) を shapely で作り、
リング軸 (+Y) まわりに回転させて閉じた環状ソリッドにする。
赤道面 (Y=0) に対して上下対称。
"""

import logging
from dataclasses import dataclass

import numpy as np
import trimesh
from shapely import geometry as shapely_geometry
from shapely.geometry.polygon import orient

from errors import InvalidGeometryError
from slots import BandParameters

logger = logging.getLogger(__name__)

BEVEL_SEGMENTS = 3


@dataclass(frozen=True)
class BandMesh:
    """1 回の再構築で生成されるバンド本体。生成後は読み取り専用として扱う"""

    mesh: trimesh.Trimesh
    inner_radius: float
    outer_radius: float
    height: float
    profile: shapely_geometry.Polygon

    @property
    def outer_boundary_radius(self) -> float:
        """頂点の最大半径 (XZ 平面)"""
        v = self.mesh.vertices
        return float(np.hypot(v[:, 0], v[:, 2]).max())

    @property
    def volume(self) -> float:
        return float(self.mesh.volume)


def build_band(params: BandParameters) -> BandMesh:
    """
    パラメータからバンドメッシュを生成する

    Args:
        params: リングパラメータ

    Returns:
        BandMesh

    Raises:
        InvalidGeometryError: 内径・幅・高さのいずれかが非正
    """
    r_in = params.inner_radius
    width = params.band_width
    height = params.band_height

    values = np.array([r_in, width, height], dtype=np.float64)
    if not np.all(np.isfinite(values)) or r_in <= 0 or width <= 0 or height <= 0:
        logger.warning(
            "refusing degenerate band: inner_radius=%s width=%s height=%s", r_in, width, height
        )
        raise InvalidGeometryError(
            "内径・幅・高さは正の値である必要があります",
            inner_radius=r_in,
            band_width=width,
            band_height=height,
        )

    r_out = r_in + width
    profile = _create_profile(r_in, r_out, height, params.bevel_size, params.bevel_thickness)
    mesh = _revolve_profile(np.asarray(profile.exterior.coords)[:-1], params.segments)

    logger.debug(
        "band built: r_in=%.3f r_out=%.3f h=%.3f faces=%d", r_in, r_out, height, len(mesh.faces)
    )
    return BandMesh(
        mesh=mesh,
        inner_radius=r_in,
        outer_radius=r_out,
        height=height,
        profile=profile,
    )


def _create_profile(
    r_in: float, r_out: float, height: float, bevel_size: float, bevel_thickness: float
) -> shapely_geometry.Polygon:
    """(半径, 高さ) 平面の断面。ベベルは公称の長方形の内側に収める"""
    half = height / 2

    if bevel_size <= 0 or bevel_thickness <= 0:
        coords = [(r_in, -half), (r_out, -half), (r_out, half), (r_in, half)]
    else:
        # 各コーナーの楕円弧 (中心 x, 中心 y, 開始角)
        corners = [
            (r_out - bevel_size, -half + bevel_thickness, -np.pi / 2),
            (r_out - bevel_size, half - bevel_thickness, 0.0),
            (r_in + bevel_size, half - bevel_thickness, np.pi / 2),
            (r_in + bevel_size, -half + bevel_thickness, np.pi),
        ]
        coords = []
        for cx, cy, start in corners:
            phi = start + np.linspace(0, np.pi / 2, BEVEL_SEGMENTS + 1)
            coords.extend(zip(cx + bevel_size * np.cos(phi), cy + bevel_thickness * np.sin(phi)))

    polygon = shapely_geometry.Polygon(coords)
    if not polygon.is_valid or polygon.area <= 0:
        raise InvalidGeometryError(
            "断面プロファイルが自己交差しています",
            inner_radius=r_in,
            outer_radius=r_out,
            band_height=height,
        )
    # 反時計回りにそろえると回転体の面が外向きになる
    return orient(polygon, sign=1.0)


def _revolve_profile(profile: np.ndarray, sections: int) -> trimesh.Trimesh:
    """閉じたプロファイルを Y 軸まわりに一周させる (頂点 index = j * m + k)"""
    m = len(profile)
    theta = np.linspace(0, 2 * np.pi, sections, endpoint=False)
    r = profile[:, 0]
    y = profile[:, 1]

    vertices = np.column_stack([
        np.outer(np.cos(theta), r).ravel(),
        np.tile(y, sections),
        np.outer(np.sin(theta), r).ravel(),
    ])

    kk, jj = np.meshgrid(np.arange(m), np.arange(sections))
    k1 = (kk + 1) % m
    j1 = (jj + 1) % sections
    a = (jj * m + kk).ravel()
    b = (jj * m + k1).ravel()
    c = (j1 * m + k1).ravel()
    d = (j1 * m + kk).ravel()

    faces = np.vstack([
        np.column_stack([a, b, c]),
        np.column_stack([a, c, d]),
    ]).astype(np.int64)

    return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
