"""Web服务器接口：共享设备上的浏览器界面通过它驱动对局。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from flask import Flask, jsonify, request

from .config import GameConfig, InvalidConfigError, parse_seed, parse_tie_policy
from .engine import GameModel
from .logger import setup_logger
from .models import ActionResult
from .roles import InvalidDistributionError, RoleDistribution, evaluate_balance


@dataclass
class GameSession:
    """游戏会话。"""

    game_id: str
    model: GameModel


app = Flask(__name__)

# 会话只存在内存里，进程退出即丢弃
_games: Dict[str, GameSession] = {}
_game_counter = 0


def _create_game_id() -> str:
    global _game_counter
    _game_counter += 1
    return f"game_{_game_counter}"


def _get_session(game_id: str) -> Optional[GameSession]:
    return _games.get(game_id)


def _not_found():
    return jsonify({"error": "game_not_found", "message": "Game does not exist"}), 404


def _respond(session: GameSession, result: ActionResult):
    """把 ActionResult 映射为 HTTP 响应，附带最新的公开状态。"""
    payload = {**result.to_dict(), "state": session.model.public_state()}
    return jsonify(payload), (200 if result.ok else 400)


def _build_config(data: dict) -> GameConfig:
    """请求体覆盖环境配置；非法取值抛 InvalidConfigError。"""
    config = GameConfig.load()
    if "seed" in data:
        config.seed = parse_seed(data["seed"])
    if "tie_policy" in data:
        config.tie_policy = parse_tie_policy(data["tie_policy"])
    return config


@app.route("/", methods=["GET"])
def index():
    """API首页。"""
    return jsonify({
        "name": "Werwolf pass-and-play server",
        "version": "1.0.0",
        "endpoints": {
            "POST /games": "Create a new game",
            "GET /games": "List games",
            "DELETE /games/<game_id>": "Discard a game",
            "GET /games/<game_id>/status": "Public game state",
            "POST /games/<game_id>/players": "Add players during setup",
            "POST /games/<game_id>/roles": "Set or clear a custom role distribution",
            "POST /games/<game_id>/start": "Assign roles and start",
            "POST /games/<game_id>/advance": "Advance to the next phase",
            "POST /games/<game_id>/next-player": "Pass the device to the next player",
            "GET /games/<game_id>/view/<viewer>": "Privacy-filtered roster for a viewer",
            "POST /games/<game_id>/votes": "Cast a vote",
            "POST /games/<game_id>/night/<action>": "Submit a werewolf, seer or doctor choice",
            "GET /games/<game_id>/night/seer/<viewer>": "Seer investigation result",
            "POST /games/<game_id>/eliminate": "Eliminate a player",
            "GET /games/<game_id>/results": "Final results after game over",
            "POST /games/<game_id>/reset": "Back to setup",
        },
    })


@app.route("/games", methods=["POST"])
def create_game():
    """创建新游戏。"""
    data = request.get_json(silent=True) or {}
    try:
        config = _build_config(data)
    except InvalidConfigError as exc:
        return jsonify({"error": "invalid_config", "message": str(exc)}), 400

    game_id = _create_game_id()
    model = GameModel(config=config)
    session = GameSession(game_id=game_id, model=model)

    names = data.get("players") or []
    if not isinstance(names, list):
        return jsonify({"error": "invalid_players", "message": "players must be a list"}), 400
    if names:
        result = model.add_players(names)
        if not result:
            return jsonify(result.to_dict()), 400

    _games[game_id] = session
    return jsonify({
        "game_id": game_id,
        "state": model.public_state(),
    }), 201


@app.route("/games", methods=["GET"])
def list_games():
    """列出所有游戏。"""
    return jsonify({
        "games": [
            {
                "game_id": session.game_id,
                "phase": session.model.phase.value,
                "round": session.model.round_no,
            }
            for session in _games.values()
        ]
    })


@app.route("/games/<game_id>", methods=["DELETE"])
def delete_game(game_id: str):
    if _games.pop(game_id, None) is None:
        return _not_found()
    return jsonify({"game_id": game_id, "deleted": True})


@app.route("/games/<game_id>/status", methods=["GET"])
def get_status(game_id: str):
    """获取公开状态。"""
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    return jsonify({"game_id": game_id, "state": session.model.public_state()})


@app.route("/games/<game_id>/players", methods=["POST"])
def add_players(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    data = request.get_json(silent=True) or {}
    names = data.get("names")
    if not isinstance(names, list):
        return jsonify({"error": "invalid_players", "message": "names must be a list"}), 400
    return _respond(session, session.model.add_players(names))


@app.route("/games/<game_id>/roles", methods=["POST"])
def set_roles(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    data = request.get_json(silent=True) or {}
    if not data:
        return _respond(session, session.model.set_role_distribution(None))
    try:
        distribution = RoleDistribution.from_dict(data)
    except InvalidDistributionError as exc:
        return jsonify({"error": "invalid_distribution", "message": str(exc)}), 400
    result = session.model.set_role_distribution(distribution)
    payload = {**result.to_dict(), "state": session.model.public_state()}
    if result.ok:
        report = evaluate_balance(distribution)
        payload["balance"] = {"is_balanced": report.is_balanced, "description": report.description}
    return jsonify(payload), (200 if result.ok else 400)


@app.route("/games/<game_id>/start", methods=["POST"])
def start_game(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    return _respond(session, session.model.start_game())


@app.route("/games/<game_id>/advance", methods=["POST"])
def advance(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    return _respond(session, session.model.advance_to_next_phase())


@app.route("/games/<game_id>/next-player", methods=["POST"])
def next_player(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    return _respond(session, session.model.advance_current_player())


@app.route("/games/<game_id>/view/<viewer>", methods=["GET"])
def view_for(game_id: str, viewer: str):
    """当前持有设备的玩家看到的名单。"""
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    model = session.model
    if model.find_player(viewer) is None:
        return jsonify({"error": "unknown_player", "message": f"No player named {viewer!r}"}), 404
    own = model.visible_player_info(viewer, viewer)
    return jsonify({
        "viewer": own.name,
        "phase": model.phase.value,
        "role": own.role.value if own.role else None,
        "role_description": own.role.info.description if own.role else None,
        "teammates": model.werewolf_teammates(viewer),
        "players": [info.to_dict() for info in model.visible_roster(viewer)],
    })


@app.route("/games/<game_id>/votes", methods=["POST"])
def cast_vote(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    data = request.get_json(silent=True) or {}
    return _respond(session, session.model.record_vote(data.get("voter"), data.get("target")))


@app.route("/games/<game_id>/night/<action>", methods=["POST"])
def night_action(game_id: str, action: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    model = session.model
    handlers = {
        "werewolf": model.record_werewolf_choice,
        "seer": model.record_seer_choice,
        "doctor": model.record_doctor_choice,
    }
    handler = handlers.get(action)
    if handler is None:
        return jsonify({"error": "unknown_action", "message": f"Unknown night action {action!r}"}), 404
    data = request.get_json(silent=True) or {}
    return _respond(session, handler(data.get("actor"), data.get("target")))


@app.route("/games/<game_id>/night/seer/<viewer>", methods=["GET"])
def seer_result(game_id: str, viewer: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    result = session.model.seer_result(viewer)
    if result is None:
        return jsonify({"result": None})
    return jsonify({
        "result": {"target": result.target, "is_werewolf": result.is_werewolf, "message": result.message}
    })


@app.route("/games/<game_id>/eliminate", methods=["POST"])
def eliminate(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    data = request.get_json(silent=True) or {}
    eliminated = session.model.eliminate_player(data.get("name"))
    return jsonify({"eliminated": eliminated, "state": session.model.public_state()}), (200 if eliminated else 400)


@app.route("/games/<game_id>/results", methods=["GET"])
def results(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    final = session.model.final_results()
    if final is None:
        return jsonify({"error": "wrong_phase", "message": "Results are revealed when the game is over"}), 400
    return jsonify(final)


@app.route("/games/<game_id>/reset", methods=["POST"])
def reset(game_id: str):
    session = _get_session(game_id)
    if session is None:
        return _not_found()
    data = request.get_json(silent=True) or {}
    return _respond(session, session.model.reset(keep_players=data.get("keep_players", True)))


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """启动Web服务器。"""
    config = GameConfig.load()
    setup_logger(config)
    app.run(host=host or config.host, port=port or config.port, debug=debug)


if __name__ == "__main__":
    run_server()
