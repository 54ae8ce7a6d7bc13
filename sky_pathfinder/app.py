# app.py — Flask API in front of the pathfinding service
# deps: pip install flask numpy pydantic-settings

from __future__ import annotations
import math
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from .config import PathfinderSettings, get_settings
from .costs import cost_breakdown
from .errors import SearchError
from .logging_utils import configure_root_logger, get_logger
from .models import PathResult, as_coord, as_position
from .service import PathfindingService

LOGGER = get_logger(__name__)

_STATUS = {
    SearchError.INVALID_ENDPOINT: 400,
    SearchError.NO_PATH_FOUND: 200,
    SearchError.ITERATION_CAP_EXCEEDED: 200,
    SearchError.RECONSTRUCTION_OVERFLOW: 500,
}


def _opt_float(data: Dict[str, Any], key: str) -> Optional[float]:
    v = data.get(key)
    if v in (None, "", "null"):
        return None
    f = float(v)
    if not math.isfinite(f):
        raise ValueError(f"{key} must be a finite number")
    return f


def create_app(settings: Optional[PathfinderSettings] = None,
               service: Optional[PathfindingService] = None) -> Flask:
    settings = settings or get_settings()
    configure_root_logger(settings.log_level)
    service = service or PathfindingService.from_settings(settings)

    app = Flask(__name__)
    app.config["PATHFINDING_SERVICE"] = service

    # ======= CORS =======
    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"] = "*"
        resp.headers["Access-Control-Allow-Headers"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return resp

    # ======= info endpoints =======
    @app.route("/", methods=["GET"])
    def root():
        return {"ok": True, "grid": "/grid (GET)", "solve": "/path/solve (POST JSON)"}

    @app.route("/grid", methods=["GET"])
    def grid_info():
        return jsonify(service.describe())

    # ======= path API =======
    @app.route("/path/solve", methods=["POST"])
    def path_solve():
        """
        JSON body, either grid cells:
        {
          "start": [x, y], "end": [x, y],
          "fly_cost_multiplier": 1.25,      // optional
          "height_offset": 10.0             // optional
        }
        or world waypoints (>= 2), chained leg by leg:
        {
          "positions": [{"x":..,"y":..,"z":..}, ...],
          ...
        }
        """
        data = request.get_json(force=True, silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({"error": "JSON object required"}), 400
        try:
            fly = _opt_float(data, "fly_cost_multiplier")
            offset = _opt_float(data, "height_offset")
            if fly is not None and fly < 0:
                raise ValueError("fly_cost_multiplier must be >= 0")

            if "positions" in data:
                pts = data.get("positions") or []
                if len(pts) < 2:
                    return jsonify({"error": "positions must have at least 2 points"}), 400
                cells: List = [
                    service.resolver.world_to_grid(as_position((p["x"], p.get("y", 0.0), p["z"])))
                    for p in pts
                ]
            elif "start" in data and "end" in data:
                cells = [as_coord(data["start"]), as_coord(data["end"])]
            else:
                return jsonify({"error": "start and end (grid cells) or positions (world) required"}), 400
        except (KeyError, TypeError, ValueError) as e:
            return jsonify({"error": f"bad request: {e}"}), 400

        if len(cells) == 2:
            result: PathResult = service.find_path(cells[0], cells[1], fly_cost_multiplier=fly,
                                                   height_offset=offset)
        else:
            result = service.plan_route(cells, fly_cost_multiplier=fly, height_offset=offset)

        body = result.to_dict()
        if not result.success:
            return jsonify(body), _STATUS.get(result.error, 500)

        multiplier = service.fly_cost_multiplier if fly is None else fly
        body["breakdown"] = cost_breakdown(service.grid, list(result.path), multiplier).to_dict()
        return jsonify(body)

    return app


if __name__ == "__main__":
    s = get_settings()
    create_app(s).run(host=s.host, port=s.port, threaded=True)
