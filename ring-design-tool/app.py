"""
リングデザインツール - Flask バックエンド
パラメータと 12 スロットの構成からリングを再構築し、GLB/STL で出力する
"""

import io
import logging
import os
import re

from dotenv import load_dotenv
from flask import Flask, jsonify, request, send_file

from catalog import get_catalog
from errors import RingDesignError
from logging_config import configure_logging
from ring_generator import EXPORT_FORMATS, export_ring, rebuild, summarize
from slots import MAX_CURVE_SEGMENTS, default_slots, params_from_dict, slot_to_dict, slots_from_list

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = Flask(__name__)
TEXTURE_SIZE = int(os.environ.get("RING_TEXTURE_SIZE", 1024))

# パラメータの上限 (寸法は mm、curve_segments は分割数)
_PARAM_LIMITS = {
    "inner_diameter": 40.0,
    "band_width": 12.0,
    "band_height": 10.0,
    "mark_size": 10.0,
    "curve_segments": MAX_CURVE_SEGMENTS,
}


def sanitize_parameters(params: dict) -> dict:
    """
    入力パラメータの自動補正:
    ・上限を超える寸法 → 上限にクランプ
    ・小数点以下 2 桁に丸め
    非正の値はそのまま残す (バンド生成側で InvalidGeometry として報告する)
    """
    out = {}
    for k, v in params.items():
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            out[k] = v
            continue
        v = float(v)
        if k in _PARAM_LIMITS:
            v = min(v, _PARAM_LIMITS[k])
        out[k] = round(v, 2)
    return out


def _parse_design(data: dict):
    params = params_from_dict(sanitize_parameters(data.get("params") or {}))
    raw_slots = data.get("slots")
    slots = default_slots() if raw_slots is None else slots_from_list(raw_slots)
    return params, slots


@app.route("/api/rebuild", methods=["POST"])
def rebuild_ring():
    """パラメータとスロットからリングを再構築し、要約を返す"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON ボディが必要です"}), 400

    try:
        params, slots = _parse_design(data)
    except RingDesignError as e:
        return jsonify({"error": str(e)}), 422

    build = rebuild(params, slots, texture_size=TEXTURE_SIZE)
    body = summarize(build)
    body["slots"] = [slot_to_dict(s) for s in slots]
    if not build.ok:
        return jsonify(body), 422
    return jsonify(body)


@app.route("/api/export", methods=["POST"])
def export_file():
    """リングを GLB (既定) または STL でダウンロードさせる"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "JSON ボディが必要です"}), 400

    file_type = str(data.get("format", "glb")).lower()
    if file_type not in EXPORT_FORMATS:
        return jsonify({"error": f"未対応の形式です: {file_type}"}), 400

    try:
        params, slots = _parse_design(data)
    except RingDesignError as e:
        return jsonify({"error": str(e)}), 422

    build = rebuild(params, slots, texture_size=TEXTURE_SIZE)
    if not build.ok:
        return jsonify({"error": build.error.message, "details": build.error.to_dict()}), 422

    # ファイル名のサニタイズ
    filename = data.get("filename", f"custom-ring.{file_type}")
    filename = re.sub(r"[^\w\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FFF._-]", "_", str(filename))
    if not filename.endswith(f".{file_type}"):
        filename += f".{file_type}"

    try:
        payload = export_ring(build, file_type)
    except Exception as e:
        logger.exception("export failed")
        return jsonify({"error": f"{file_type.upper()} の生成に失敗しました: {str(e)}"}), 500

    mimetype = "model/gltf-binary" if file_type == "glb" else "application/octet-stream"
    return send_file(
        io.BytesIO(payload),
        mimetype=mimetype,
        as_attachment=True,
        download_name=filename,
    )


@app.route("/api/catalog", methods=["GET"])
def catalog():
    """星座・宝石のカタログと初期スロット構成を返す"""
    body = get_catalog()
    body["default_slots"] = [slot_to_dict(s) for s in default_slots()]
    return jsonify(body)


@app.route("/api/health", methods=["GET"])
def health():
    """ヘルスチェック"""
    return jsonify({"status": "ok", "texture_size": TEXTURE_SIZE})


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    logger.info("ring design tool starting on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=debug)
