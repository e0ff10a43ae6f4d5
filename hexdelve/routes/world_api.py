"""
project: Hexdelve
module: world_api.py
License: MIT

World seed and read-only world query routes.

A session owns at most one WorldInstance. Only its seed is stored; the world
itself is regenerated on demand and kept in a small in-process cache.
"""

import hashlib
import os
import random
import threading

from flask import Blueprint, current_app, jsonify, request, session

from hexdelve import db
from hexdelve.config import WorldConfig
from hexdelve.logging_utils import get_logger
from hexdelve.models.world_instance import WorldInstance
from hexdelve.world import forms
from hexdelve.world.location import Location
from hexdelve.world.worldgen import Worldgen

bp_world = Blueprint("world_api", __name__)
log = get_logger("world_api")

SQLITE_MAX_INT = 9223372036854775807


def _coerce_seed(payload_seed):
    """Convert provided seed (int or str) into bounded 64-bit signed int."""
    if payload_seed is None or isinstance(payload_seed, bool):
        return random.randint(1, 1_000_000)
    if isinstance(payload_seed, int):
        return payload_seed % SQLITE_MAX_INT
    if isinstance(payload_seed, str):
        s = payload_seed.strip()
        if not s:
            return random.randint(1, 1_000_000)
        if s.isdigit():
            return int(s) % SQLITE_MAX_INT
        h = hashlib.sha256(s.encode("utf-8")).digest()
        return int.from_bytes(h[:8], "big") % SQLITE_MAX_INT
    return random.randint(1, 1_000_000)


# (seed, config)->Worldgen. Generation is slow enough that requests racing on
# the same seed should not each build a world, hence the lock.
_world_cache = {}
_world_cache_lock = threading.Lock()
_WORLD_CACHE_MAX = 4


def world_config() -> WorldConfig:
    return WorldConfig.from_env().from_mapping(current_app.config)


def get_cached_world(seed: int, config: WorldConfig) -> Worldgen:
    if os.environ.get("HEXDELVE_DISABLE_WORLD_CACHE") == "1":
        return Worldgen(seed, config)
    key = (seed, config.cache_key())
    with _world_cache_lock:
        world = _world_cache.get(key)
        if world is not None:
            return world
    log.info(event="world_cache_miss", seed=seed, depths=config.depth_count)
    world = Worldgen(seed, config)
    with _world_cache_lock:
        _world_cache[key] = world
        if len(_world_cache) > _WORLD_CACHE_MAX:
            first_key = next(iter(_world_cache.keys()))
            if first_key != key:
                _world_cache.pop(first_key, None)
    return world


def clear_world_cache():
    with _world_cache_lock:
        _world_cache.clear()


def _session_instance():
    instance_id = session.get("world_instance_id")
    if not instance_id:
        return None
    return db.session.get(WorldInstance, instance_id)


def _session_world():
    instance = _session_instance()
    if instance is None:
        return None
    return get_cached_world(instance.seed, world_config())


def _no_world():
    return jsonify({"error": "no world for this session, POST /api/world/seed first"}), 404


def _bad_request(msg):
    return jsonify({"error": msg}), 400


def _int_arg(name, default=None):
    raw = request.args.get(name)
    if raw is None or raw == "":
        if default is None:
            raise ValueError(f"missing '{name}'")
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"'{name}' must be an integer, got {raw!r}") from None


def _location_arg():
    return Location(_int_arg("x"), _int_arg("y"), _int_arg("z", 0))


@bp_world.route("/api/world/seed", methods=["POST"])
def set_seed():
    """Set (or generate) the world seed.

    Body JSON (all optional):
      { "seed": <int|str|null>, "regenerate": <bool> }
    - If seed omitted or null => random seed.
    - If seed provided (int or string) => deterministic hashing.
    - Updates the session's WorldInstance or creates one if missing.

    Response: { "seed": <int>, "world_instance_id": <id> }
    """
    data = request.get_json(silent=True) or {}
    regenerate = data.get("regenerate")
    provided = data.get("seed", None)
    if regenerate and provided is None:
        seed = _coerce_seed(None)
    else:
        seed = _coerce_seed(provided)

    instance = _session_instance()
    if instance is None:
        instance = WorldInstance(seed=seed)
        db.session.add(instance)
        db.session.commit()
        session["world_instance_id"] = instance.id
    else:
        instance.seed = seed
        db.session.commit()

    session["world_seed"] = seed
    return jsonify({"seed": seed, "world_instance_id": instance.id})


@bp_world.route("/api/world/entry")
def world_entry():
    world = _session_world()
    if world is None:
        return _no_world()
    return jsonify({"seed": world.seed(), "player_entry": world.player_entry().to_list()})


@bp_world.route("/api/world/terrain")
def world_terrain():
    try:
        loc = _location_arg()
    except ValueError as e:
        return _bad_request(str(e))
    world = _session_world()
    if world is None:
        return _no_world()
    return jsonify({"location": loc.to_list(), "terrain": world.terrain_at(loc).value})


@bp_world.route("/api/world/portal")
def world_portal():
    try:
        loc = _location_arg()
    except ValueError as e:
        return _bad_request(str(e))
    world = _session_world()
    if world is None:
        return _no_world()
    dest = world.portal_at(loc)
    return jsonify({"location": loc.to_list(), "destination": dest.to_list() if dest else None})


@bp_world.route("/api/world/spawns")
def world_spawns():
    """List spawns, optionally only those at depth ``z``."""
    z = request.args.get("z")
    if z is not None:
        try:
            z = int(z)
        except ValueError:
            return _bad_request(f"'z' must be an integer, got {z!r}")
    world = _session_world()
    if world is None:
        return _no_world()
    out = []
    for loc, loadout in world.spawns():
        if z is not None and loc.z != z:
            continue
        form = forms.named(loadout.name)
        out.append({"location": loc.to_list(), "name": loadout.name, "kind": form.kind if form else None})
    return jsonify({"spawns": out})
